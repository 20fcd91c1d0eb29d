"""Aggregator package for transaction reports."""

from .transaction_aggregator import AggregateBy, BalanceSummary, Flow, TransactionAggregator, select_accounts

__all__ = ['AggregateBy', 'BalanceSummary', 'Flow', 'TransactionAggregator', 'select_accounts']
