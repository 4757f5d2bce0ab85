"""Run statistics and console rendering.

Tracks per-wallet outcomes for one task run and renders them with Rich:
the startup banner, the end-of-run summary table and the live countdown
shown between runs.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from rich import box
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.results import ActionResult

logger = logging.getLogger(__name__)


@dataclass
class WalletRunStats:
    """Outcome of one task run for a single wallet.

    ``logged_in`` is ``None`` when no login was attempted (purchases
    disabled).
    """

    address: str
    claims_attempted: int = 0
    claims_succeeded: int = 0
    logged_in: Optional[bool] = None
    purchases_target: int = 0
    purchases_attempted: int = 0
    purchases_succeeded: int = 0
    failure_reasons: Counter = field(default_factory=Counter)

    def record_claim(self, result: ActionResult) -> None:
        self.claims_attempted += 1
        if result.success:
            self.claims_succeeded += 1
        else:
            self._record_failure(result)

    def record_purchase(self, result: ActionResult) -> None:
        self.purchases_attempted += 1
        if result.success:
            self.purchases_succeeded += 1
        else:
            self._record_failure(result)

    def record_login(self, result: ActionResult) -> None:
        self.logged_in = result.success
        if not result.success:
            self._record_failure(result)

    def _record_failure(self, result: ActionResult) -> None:
        key = result.error_type.value if result.error_type else "unknown"
        self.failure_reasons[key] += 1

    @property
    def purchase_goal_met(self) -> bool:
        return self.purchases_succeeded >= self.purchases_target


def format_remaining(seconds: float) -> str:
    """Render a duration as ``"{h}h {m}m {s}s"`` (floored, never negative)."""
    total = max(0, int(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours}h {minutes}m {secs}s"


def short_address(address: str) -> str:
    if len(address) <= 14:
        return address
    return f"{address[:8]}...{address[-6:]}"


class RunMonitor:
    """Console presentation for the scheduler."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def render_banner(self, wallet_count: int) -> Panel:
        text = Text()
        text.append("Novastro Testnet Bot\n", style="bold blue")
        text.append("Faucet claims + property purchases, every 24h\n")
        text.append(f"Wallets loaded: {wallet_count}", style="cyan")
        return Panel(text, box=box.DOUBLE, expand=False)

    def render_summary_table(self, stats: Iterable[WalletRunStats]) -> Table:
        """Render one row per wallet for the finished run.

        Args:
            stats: Per-wallet results in processing order.

        Returns:
            Rich Table with claim, login and purchase columns.
        """
        table = Table(title="Daily Task Summary", box=box.ROUNDED)
        table.add_column("#", justify="right")
        table.add_column("Wallet", style="cyan", no_wrap=True)
        table.add_column("Claims", justify="right")
        table.add_column("Login", justify="center")
        table.add_column("Purchases", justify="right")
        table.add_column("Failures")

        for index, s in enumerate(stats, start=1):
            if s.logged_in is None:
                login = Text("-", style="dim")
            elif s.logged_in:
                login = Text("ok", style="green")
            else:
                login = Text("failed", style="red")

            purchases = f"{s.purchases_succeeded}/{s.purchases_target}"
            purchase_style = "green" if s.purchase_goal_met else "yellow"

            failures = ", ".join(f"{k}={v}" for k, v in sorted(s.failure_reasons.items()))
            table.add_row(
                str(index),
                short_address(s.address),
                f"{s.claims_succeeded}/{s.claims_attempted}",
                login,
                Text(purchases, style=purchase_style),
                failures or "-",
            )
        return table

    def print_summary(self, stats: List[WalletRunStats]) -> None:
        self.console.print()
        self.console.print(self.render_summary_table(stats))
        total_claims = sum(s.claims_succeeded for s in stats)
        total_bought = sum(s.purchases_succeeded for s in stats)
        logger.info(
            f"📊 [SUMMARY] All Daily Tasks Completed for {len(stats)} wallet(s): "
            f"{total_claims} claim(s) confirmed, {total_bought} propert(y/ies) bought."
        )

    def countdown(self) -> 'CountdownDisplay':
        return CountdownDisplay(self.console)


class CountdownDisplay:
    """Single-line ``Next run in: ...`` display, cleared on exit."""

    def __init__(self, console: Console):
        self.console = console
        self._live: Optional[Live] = None

    @staticmethod
    def render(remaining_seconds: float) -> Text:
        return Text(f"Next run in: {format_remaining(remaining_seconds)}...", style="cyan")

    def __enter__(self) -> 'CountdownDisplay':
        self._live = Live(console=self.console, auto_refresh=False, transient=True)
        self._live.__enter__()
        return self

    def update(self, remaining_seconds: float) -> None:
        if self._live is not None:
            self._live.update(self.render(remaining_seconds), refresh=True)

    def __exit__(self, *exc_info) -> None:
        if self._live is not None:
            self._live.__exit__(*exc_info)
            self._live = None
