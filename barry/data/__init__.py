"""Data package for Mercury connectivity and data models."""

from .mercury_client import DEFAULT_API_BASE_URL, MercuryClient
from .models import Account, ListTransactionsParams, Transaction

__all__ = ['DEFAULT_API_BASE_URL', 'MercuryClient', 'Account', 'ListTransactionsParams', 'Transaction']
