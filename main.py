"""
Novastro Testnet Bot - Main Entry Point

Loads wallets from ``PRIVATE_KEY_<n>`` entries, asks for the number of
faucet claims and property purchases per wallet, then runs the daily task
loop until stopped.

Usage:
    python main.py                      # Prompt for counts, run every 24h
    python main.py --claims 3 --buy 2   # Skip the prompts
    python main.py --once               # Single run, then exit
"""
from dotenv import load_dotenv

# Load environment variables from .env file into os.environ
load_dotenv()

import argparse
import asyncio
import logging
import signal
import sys
from typing import Callable, List, Optional

from rich.prompt import Prompt

from core.chain import ChainClient
from core.config import BotSettings, RunConfig, parse_count
from core.logging_setup import setup_logging
from core.monitoring import RunMonitor
from core.orchestrator import DailyScheduler, TaskRunner
from core.wallet_manager import WalletLoadError, load_wallets
from novastro.auth import AuthClient
from novastro.base import NovastroApi
from novastro.properties import PropertyClient

logger = logging.getLogger(__name__)

CLAIMS_PROMPT = "Enter the number of faucet claims to perform per wallet"
BUY_PROMPT = "Enter the number of properties to buy per wallet (0 for none)"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Novastro testnet faucet + property bot")
    parser.add_argument("--claims", type=str, help="Faucet claims per wallet (skips the prompt)")
    parser.add_argument("--buy", type=str, help="Properties to buy per wallet (skips the prompt)")
    parser.add_argument("--once", action="store_true", help="Run the tasks once and exit")
    parser.add_argument("--log-level", type=str, help="Override LOG_LEVEL")
    return parser.parse_args(argv)


def read_run_config(args: argparse.Namespace, ask: Optional[Callable[[str], str]] = None) -> RunConfig:
    """
    Build the :class:`RunConfig` from flags, prompting for missing values.

    Each value is validated as soon as it is read, so a bad first answer
    stops before the second prompt.

    Raises:
        ValueError: On non-numeric or negative input.
    """
    ask = ask or Prompt.ask
    raw_claims = args.claims if args.claims is not None else ask(CLAIMS_PROMPT)
    num_claims = parse_count(raw_claims, "faucet claims")

    raw_buy = args.buy if args.buy is not None else ask(BUY_PROMPT)
    num_to_buy = parse_count(raw_buy, "properties to buy")

    return RunConfig(num_claims=num_claims, num_to_buy=num_to_buy)


async def main(argv: Optional[List[str]] = None) -> int:
    """
    Main execution flow.

    1. Parses command line arguments and sets up logging.
    2. Loads wallets (fatal if none).
    3. Reads the per-wallet task counts (fatal if invalid).
    4. Builds the chain and API clients.
    5. Runs the DailyScheduler until SIGTERM or interruption.

    Returns:
        Process exit code.
    """
    args = parse_args(argv)
    settings = BotSettings()
    setup_logging(args.log_level or settings.log_level)
    monitor = RunMonitor()

    try:
        wallets = load_wallets(prefix=settings.private_key_prefix)
    except WalletLoadError as e:
        logger.critical(f"[FATAL] {e}")
        return 1

    monitor.console.print(monitor.render_banner(len(wallets)))
    logger.info(f"Found {len(wallets)} wallet(s).")

    try:
        run_config = read_run_config(args)
    except ValueError as e:
        logger.critical(f"[FATAL] {e}")
        return 1

    logger.info(
        f"Bot configured for: {run_config.num_claims} faucet claim(s) & "
        f"{run_config.num_to_buy} property purchase(s) per wallet."
    )

    chain = ChainClient(settings)
    api = NovastroApi(settings)
    runner = TaskRunner(
        settings,
        run_config,
        chain=chain,
        auth=AuthClient(api),
        properties=PropertyClient(api, chain),
    )
    scheduler = DailyScheduler(runner, wallets, monitor, interval_seconds=settings.run_interval_seconds)

    def handle_sigterm():
        logger.info("🛑 Received SIGTERM. Stopping after the current run...")
        scheduler.stop()

    loop = asyncio.get_running_loop()
    if sys.platform != "win32":
        loop.add_signal_handler(signal.SIGTERM, handle_sigterm)

    try:
        if args.once:
            await scheduler.run_once()
        else:
            await scheduler.scheduler_loop()
    finally:
        logger.info("🧹 Cleaning up resources...")
        await api.close()
        await chain.close()
    return 0


def run() -> None:
    try:
        code = asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("👋 Stopping bot (KeyboardInterrupt)...")
        code = 0
    sys.exit(code)


if __name__ == "__main__":
    run()
