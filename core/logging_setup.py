"""Logging configuration for the Novastro testnet bot.

Sets up a dual-handler logging pipeline:

1. **Console** -- :class:`SafeStreamHandler` that gracefully handles
   Unicode on Windows by falling back to ``cp1252`` replacement
   encoding.
2. **File** -- :class:`CompressedRotatingFileHandler` writing to
   ``logs/novastro_bot.log`` with automatic gzip rotation (10 MiB per
   file, 5 backups).

Usage::

    from core.logging_setup import setup_logging
    setup_logging("DEBUG")
"""

import gzip
import logging
import os
import shutil
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from core.config import LOGS_DIR

LOG_FILE_NAME = "novastro_bot.log"


class CompressedRotatingFileHandler(RotatingFileHandler):
    """Rotates ``novastro_bot.log`` into ``novastro_bot.log.<n>.gz`` archives.

    Each daily cycle logs every claim and purchase step for every wallet,
    and the scheduler keeps the process alive across cycles.
    """

    def rotation_filename(self, default_name: str) -> str:
        return default_name + ".gz"

    def rotate(self, source: str, dest: str) -> None:
        """Gzip the full log at *source* into the archive *dest*."""
        with open(source, 'rb') as plain, gzip.open(dest, 'wb') as archive:
            shutil.copyfileobj(plain, archive)
        os.remove(source)


class SafeStreamHandler(logging.StreamHandler):
    """StreamHandler that never crashes on unencodable characters.

    Log lines carry emoji markers.  Narrow Windows code pages cannot
    represent them, so :exc:`UnicodeEncodeError` falls back to ``cp1252``
    with replacement characters.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            stream = self.stream
            try:
                stream.write(msg + self.terminator)
            except UnicodeEncodeError:
                safe_msg = msg.encode(
                    'cp1252', errors='replace',
                ).decode('cp1252')
                stream.write(safe_msg + self.terminator)
            self.flush()
        except Exception:
            self.handleError(record)


def setup_logging(log_level: str = "INFO", log_dir: Optional[str] = None) -> None:
    """Configure the root logger with console and file handlers.

    Args:
        log_level: Logging level name (e.g. ``"DEBUG"``, ``"INFO"``).
            Unknown names fall back to ``INFO``.
        log_dir: Directory for the rotating log file.  Defaults to
            :data:`core.config.LOGS_DIR`.
    """
    if sys.platform == "win32" and hasattr(sys.stdout, 'reconfigure'):
        # Must happen before the StreamHandler captures sys.stdout
        sys.stdout.reconfigure(encoding='utf-8', errors='replace')
        sys.stderr.reconfigure(encoding='utf-8', errors='replace')

    level = getattr(logging, log_level.upper(), logging.INFO)

    log_path = os.path.join(log_dir or str(LOGS_DIR), LOG_FILE_NAME)
    os.makedirs(os.path.dirname(log_path), exist_ok=True)
    file_handler = CompressedRotatingFileHandler(
        log_path,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding='utf-8',
    )

    stream_handler = SafeStreamHandler(sys.stdout)

    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(name)s - %(message)s',
        handlers=[file_handler, stream_handler],
        force=True,
    )
    # web3 and aiohttp are chatty at DEBUG
    logging.getLogger("web3").setLevel(max(level, logging.INFO))
    logging.getLogger("urllib3").setLevel(logging.WARNING)
