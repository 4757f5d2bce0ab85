"""Application configuration for the Novastro testnet bot.

Settings are loaded from environment variables (with ``.env`` file support)
through Pydantic v2.  Per-run task counts live in a separate immutable
:class:`RunConfig` that is built once at startup and handed to the task
runner.

Key exports:
    BotSettings: Root settings model (instantiate once).
    RunConfig: Frozen per-process task counts.
    parse_count: Strict parser for the startup count prompts.
    BASE_DIR / LOGS_DIR: Canonical project paths.
"""

# pylint: disable=no-member

import logging
import re
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Base Paths
# ---------------------------------------------------------------------------
BASE_DIR: Path = Path(__file__).parent.parent
"""Project root directory (parent of ``core/``)."""

LOGS_DIR: Path = BASE_DIR / "logs"
"""Directory for log output files."""

logger: logging.Logger = logging.getLogger(__name__)

_COUNT_PATTERN = re.compile(r"^\+?\d+$")


class RunConfig(BaseModel):
    """Task counts applied to every wallet on every run.

    Attributes:
        num_claims: On-chain faucet claims to perform per wallet.
        num_to_buy: Property purchases to complete per wallet.
    """

    model_config = ConfigDict(frozen=True)

    num_claims: int = Field(default=0, ge=0)
    num_to_buy: int = Field(default=0, ge=0)


def parse_count(raw: Optional[str], label: str) -> int:
    """Parse a non-negative integer typed at a startup prompt.

    Args:
        raw: Text entered by the operator (surrounding whitespace allowed).
        label: Human-readable name of the value, used in the error message.

    Returns:
        The parsed count.

    Raises:
        ValueError: If *raw* is empty, non-numeric or negative.
    """
    text = (raw or "").strip()
    if not _COUNT_PATTERN.match(text):
        raise ValueError(
            f"Invalid input for {label}: {raw!r}. "
            "Please enter a non-negative number."
        )
    return int(text)


class BotSettings(BaseSettings):
    """Root configuration model.

    All fields can be set via environment variables or a ``.env`` file.
    Wallet private keys are *not* part of this model; they are read by
    :func:`core.wallet_manager.load_wallets` from ``PRIVATE_KEY_<n>``
    entries.

    Section overview:
        * **Core** -- log level.
        * **Endpoints** -- JSON-RPC URL, REST API base, referer.
        * **Faucet** -- contract address, call data, inter-claim delay.
        * **Purchases** -- page size and fallback purchase amount.
        * **Timing** -- HTTP timeout, receipt timeout, run interval.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Core
    log_level: str = "INFO"

    # Endpoints
    rpc_url: str = "https://sepolia.drpc.org/"
    api_base_url: str = "https://api.deperp.xyz/api/v1"
    referer: str = "https://testnet.novastro.xyz/"
    # Browser families used for the randomized User-Agent header
    user_agent_browsers: List[str] = Field(
        default_factory=lambda: ["chrome", "edge", "firefox", "safari"]
    )

    # Faucet
    faucet_contract: str = "0x57c5dc670eb6f571bdd8fc1cf178c46c9a917a74"
    # claim() selector
    faucet_claim_data: str = "0x4e71d92d"
    claim_delay_seconds: float = 20.0

    # Purchases
    properties_page_size: int = 50
    default_purchase_amount: str = "100.00"

    # Wallets
    private_key_prefix: str = "PRIVATE_KEY_"

    # Timing
    http_timeout_seconds: float = 30.0
    # None waits for a receipt indefinitely
    tx_receipt_timeout: Optional[float] = None
    run_interval_hours: float = 24.0

    @property
    def run_interval_seconds(self) -> float:
        """Delay between the end of one run and the start of the next."""
        return self.run_interval_hours * 3600
