"""Console display module for rendering reports to the terminal."""

import logging
from typing import Dict, List, Optional

from ..aggregator.transaction_aggregator import BalanceSummary, Flow
from ..data.models import Account

logger = logging.getLogger(__name__)


class ConsoleDisplay:
    """Prints balance and spend/revenue reports to stdout."""

    def __init__(self, use_colors: bool = False):
        self.use_colors = use_colors
        self._setup_colors()
        logger.info("Console Display initialized")

    def _setup_colors(self) -> None:
        if self.use_colors:
            self.colors = {
                'reset': '\033[0m',
                'bold': '\033[1m',
                'green': '\033[92m',
                'red': '\033[91m',
                'yellow': '\033[93m',
                'gray': '\033[90m',
            }
        else:
            self.colors = {k: '' for k in ['reset', 'bold', 'green', 'red', 'yellow', 'gray']}

    def _amount_color(self, amount: float) -> str:
        return self.colors['green'] if amount >= 0 else self.colors['red']

    def show_balances(self, accounts: List[Account], summary: Optional[BalanceSummary] = None) -> None:
        if not accounts:
            print(f"{self.colors['yellow']}No accounts found{self.colors['reset']}")
            return
        for account in accounts:
            current_color = self._amount_color(account.current_balance)
            available_color = self._amount_color(account.available_balance)
            print(f"{self.colors['bold']}{account.name} ({account.id}){self.colors['reset']}")
            print(
                f"Current Balance: {current_color}{account.current_balance:.2f}{self.colors['reset']}, "
                f"Available Balance: {available_color}{account.available_balance:.2f}{self.colors['reset']}"
            )
        if summary is not None and summary.account_count > 1:
            print(
                f"{self.colors['gray']}Total across {summary.account_count} accounts: "
                f"Current Balance: {summary.total_current:.2f}, "
                f"Available Balance: {summary.total_available:.2f}{self.colors['reset']}"
            )

    def show_totals(self, totals: Dict[str, float], flow: Flow) -> None:
        """Print one line per counterparty, sorted by name."""
        if not totals:
            print(f"{self.colors['yellow']}No {flow.value} transactions found{self.colors['reset']}")
            return
        for counterparty in sorted(totals):
            amount = totals[counterparty]
            print(f"{counterparty}: {self._amount_color(amount)}${amount:.2f}{self.colors['reset']}")
