"""Task runner and daily scheduler.

:class:`TaskRunner` processes wallets strictly one after another:
faucet claims first, then login and the property purchase cycle.
:class:`DailyScheduler` runs the task runner, waits for the configured
interval behind a live countdown, and repeats until stopped.

No unit of work is retried.  A failed claim moves on to the next claim
index, a failed purchase to the next shuffled property, a failed login to
the next wallet.  The next chance for anything that failed is the next
scheduled run.
"""

import asyncio
import logging
import random
import time
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from core.chain import ChainClient
from core.config import BotSettings, RunConfig
from core.monitoring import RunMonitor, WalletRunStats
from core.wallet_manager import Wallet
from novastro.auth import AuthClient
from novastro.properties import Property, PropertyClient

logger = logging.getLogger(__name__)


class TaskRunner:
    """Runs the daily claim and purchase tasks for every wallet.

    Attributes:
        settings: Global :class:`BotSettings`.
        run_config: Per-wallet task counts chosen at startup.
        chain: On-chain client (faucet claims, purchase steps).
        auth: Login client.
        properties: Listing and purchase client.
        rng: Source of randomness for property ordering.
    """

    def __init__(
        self,
        settings: BotSettings,
        run_config: RunConfig,
        chain: ChainClient,
        auth: AuthClient,
        properties: PropertyClient,
        rng: Optional[random.Random] = None,
    ):
        self.settings = settings
        self.run_config = run_config
        self.chain = chain
        self.auth = auth
        self.properties = properties
        self.rng = rng or random.Random()

    async def run_all(self, wallets: Sequence[Wallet]) -> List[WalletRunStats]:
        """Process every wallet in order and return their run statistics."""
        logger.info(f"🚀 Starting Daily Tasks at {datetime.now():%Y-%m-%d %H:%M:%S}")
        results = []
        for index, wallet in enumerate(wallets, start=1):
            logger.info(f"--- Processing Wallet {index}/{len(wallets)}: {wallet.address} ---")
            stats = WalletRunStats(address=wallet.address, purchases_target=self.run_config.num_to_buy)
            try:
                await self.run_wallet(wallet, stats)
            except Exception as e:
                logger.error(f"Unexpected error while processing wallet {wallet.address}: {e}", exc_info=True)
            results.append(stats)
        return results

    async def run_wallet(self, wallet: Wallet, stats: WalletRunStats) -> None:
        if self.run_config.num_claims > 0:
            await self.claim_faucets(wallet, stats)

        if self.run_config.num_to_buy > 0:
            login = await self.auth.login(wallet)
            stats.record_login(login)
            if login.success:
                await self.buy_properties(wallet, login.value, stats)
            else:
                logger.error(f"Skipping property purchase for wallet {wallet.address} due to login failure.")

    async def claim_faucets(self, wallet: Wallet, stats: WalletRunStats) -> None:
        """Perform ``num_claims`` claims with a fixed pause between them."""
        total = self.run_config.num_claims
        delay = self.settings.claim_delay_seconds
        logger.info(f"Starting faucet claims for wallet {wallet.address}")

        for index in range(1, total + 1):
            result = await self.chain.claim_faucet(wallet, index, total)
            stats.record_claim(result)
            if index < total:
                logger.info(f"⏳ Waiting {delay:g} seconds before next claim...")
                await asyncio.sleep(delay)

        logger.info(
            f"Finished {total} faucet claims for wallet {wallet.address} "
            f"({stats.claims_succeeded} confirmed)."
        )

    def shuffled(self, properties: Sequence[Property]) -> List[Property]:
        """Return a shuffled copy; membership is unchanged."""
        candidates = list(properties)
        self.rng.shuffle(candidates)
        return candidates

    async def buy_properties(self, wallet: Wallet, token: str, stats: WalletRunStats) -> int:
        """
        Buy up to ``num_to_buy`` properties, one attempt per candidate.

        Stops as soon as the target is reached or the candidates run out.

        Returns:
            Number of successful purchases.
        """
        target = self.run_config.num_to_buy
        logger.info(f"🏠 Starting automatic purchase of {target} properties for wallet {wallet.address}")

        properties = await self.properties.list_properties(token)
        if not properties:
            logger.warning("No properties available for purchase.")
            return 0

        bought = 0
        for prop in self.shuffled(properties):
            if bought >= target:
                break

            logger.info(f"[{bought + 1}/{target}] Attempting to buy property: {prop}")
            amount = prop.purchase_amount(self.settings.default_purchase_amount)
            result = await self.properties.purchase(wallet, token, prop, amount)
            stats.record_purchase(result)

            if result.success:
                bought += 1
                logger.info(f"✅ Successfully purchased: {prop}")
            else:
                logger.warning(f"Failed to purchase {prop}: {result.status}")
                logger.info("Trying next property...")

        if bought < target:
            logger.error(
                f"Could only purchase {bought} out of {target} requested properties "
                f"for wallet {wallet.address}."
            )
        else:
            logger.info(f"🎯 Daily purchase goal of {target} properties met for wallet {wallet.address}.")
        return bought


class DailyScheduler:
    """Re-runs the :class:`TaskRunner` every ``interval_seconds``.

    The next run is computed from the end of the previous one.  Nothing is
    persisted, so a restart starts a fresh run immediately.
    """

    def __init__(
        self,
        runner: TaskRunner,
        wallets: Sequence[Wallet],
        monitor: Optional[RunMonitor] = None,
        interval_seconds: float = 24 * 60 * 60,
    ):
        self.runner = runner
        self.wallets = list(wallets)
        self.monitor = monitor or RunMonitor()
        self.interval_seconds = interval_seconds
        self._stop_event = asyncio.Event()

    def stop(self) -> None:
        self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    async def run_once(self) -> List[WalletRunStats]:
        stats = await self.runner.run_all(self.wallets)
        self.monitor.print_summary(stats)
        return stats

    async def wait_until(self, deadline: float) -> bool:
        """
        Show the countdown until *deadline* (a ``time.time()`` value).

        Returns:
            ``True`` once the deadline passes, ``False`` if :meth:`stop` was
            called first.
        """
        with self.monitor.countdown() as display:
            while not self._stop_event.is_set():
                remaining = deadline - time.time()
                if remaining <= 0:
                    return True
                display.update(remaining)
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=min(1.0, remaining))
                except asyncio.TimeoutError:
                    pass
        return False

    async def scheduler_loop(self) -> None:
        """Run, count down, repeat until :meth:`stop` is called."""
        logger.info("Daily scheduler loop started.")
        while not self._stop_event.is_set():
            await self.run_once()
            if self._stop_event.is_set():
                break

            next_run = datetime.now() + timedelta(seconds=self.interval_seconds)
            logger.info(f"⏰ Next run scheduled for: {next_run:%Y-%m-%d %H:%M:%S}")
            if not await self.wait_until(time.time() + self.interval_seconds):
                break
        logger.info("Daily scheduler loop stopped.")
