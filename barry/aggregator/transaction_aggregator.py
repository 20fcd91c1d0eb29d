"""Filtering and aggregation of Mercury transactions."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional

from ..data.models import Account, Transaction

logger = logging.getLogger(__name__)


class Flow(str, Enum):
    """Direction of money a report looks at."""

    SPEND = 'spend'
    REVENUE = 'revenue'

    def matches(self, transaction: Transaction) -> bool:
        if self is Flow.SPEND:
            return transaction.is_spend
        return transaction.is_revenue


class AggregateBy(str, Enum):
    """Grouping key for totals. Only COUNTERPARTY is implemented."""

    COUNTERPARTY = 'counterparty'
    DAY = 'day'
    MONTH = 'month'
    YEAR = 'year'
    MULTIPLE = 'multiple'


@dataclass
class BalanceSummary:
    """Balance totals across a set of accounts."""
    account_count: int
    total_current: float
    total_available: float


def select_accounts(accounts: Iterable[Account], account_ids: Optional[Iterable[str]] = None) -> List[Account]:
    """Keep accounts whose ID is in account_ids; no filter keeps all of them."""
    wanted = set(account_ids or [])
    if not wanted:
        return list(accounts)
    return [account for account in accounts if account.id in wanted]


class TransactionAggregator:
    """Sums transaction amounts for spend and revenue reports."""

    def __init__(self):
        logger.info("Transaction Aggregator initialized")

    def aggregate(
        self,
        transactions: Iterable[Transaction],
        flow: Flow,
        account_ids: Optional[Iterable[str]] = None,
        counterparties: Optional[Iterable[str]] = None,
        group_by: AggregateBy = AggregateBy.COUNTERPARTY,
    ) -> Dict[str, float]:
        """
        Sum matching transaction amounts per counterparty.

        Args:
            transactions: Transactions to scan.
            flow: SPEND keeps negative amounts, REVENUE positive ones.
            account_ids: When given, only transactions of these accounts count.
            counterparties: When given, only these counterparty names count.
            group_by: Grouping key. Anything but COUNTERPARTY falls back to it.

        Returns:
            Mapping of counterparty name to summed (signed) amount.
        """
        if group_by is not AggregateBy.COUNTERPARTY:
            logger.warning(
                f"Aggregation by '{group_by.value}' is not supported yet, grouping by counterparty"
            )

        account_filter = set(account_ids or [])
        counterparty_filter = set(counterparties or [])

        totals: Dict[str, float] = {}
        matched = 0
        for transaction in transactions:
            if account_filter and transaction.account_id not in account_filter:
                continue
            if counterparty_filter and transaction.counterparty_name not in counterparty_filter:
                continue
            if not flow.matches(transaction):
                continue

            key = transaction.counterparty_name
            if key in totals:
                totals[key] += transaction.amount
            else:
                totals[key] = transaction.amount
            matched += 1

        logger.info(f"Aggregated {matched} {flow.value} transactions into {len(totals)} counterparties")
        return totals

    def summarize_balances(self, accounts: Iterable[Account]) -> BalanceSummary:
        accounts = list(accounts)
        return BalanceSummary(
            account_count=len(accounts),
            total_current=sum(account.current_balance for account in accounts),
            total_available=sum(account.available_balance for account in accounts),
        )
