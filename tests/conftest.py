"""Pytest configuration and fixtures."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from barry.data.mercury_client import MercuryClient

ENV_VARS = ('MERCURY_API_KEY', 'MERCURY_API_URL', 'MERCURY_TIMEOUT', 'LOG_LEVEL', 'CONSOLE_COLORS')


def make_transaction(
    counterparty: str,
    amount: float,
    txn_id: str = 'txn-1',
    status: str = 'sent',
    **extra: Any,
) -> Dict[str, Any]:
    """Build a transaction payload in the API's camelCase shape."""
    payload = {
        'id': txn_id,
        'amount': amount,
        'counterpartyId': f'cp-{counterparty.lower()}',
        'counterpartyName': counterparty,
        'createdAt': '2024-03-01T12:30:00Z',
        'dashboardLink': f'https://app.mercury.com/transactions/{txn_id}',
        'kind': 'externalTransfer',
        'status': status,
        'details': None,
        'attachments': [],
    }
    payload.update(extra)
    return payload


class FakeMercury:
    """In-process stand-in for the Mercury API, recording every request."""

    def __init__(
        self,
        accounts: List[Dict[str, Any]],
        transactions: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        accounts_status: int = 200,
        failing_accounts: Optional[Dict[str, int]] = None,
        delay: float = 0.0,
    ):
        self.accounts = accounts
        self.transactions = transactions or {}
        self.accounts_status = accounts_status
        self.failing_accounts = failing_accounts or {}
        self.delay = delay
        self.requests: List[Dict[str, Any]] = []

    def _record(self, request: web.Request) -> None:
        self.requests.append({
            'path': request.path,
            'query': dict(request.query),
            'authorization': request.headers.get('Authorization'),
        })

    async def _accounts(self, request: web.Request) -> web.Response:
        self._record(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.accounts_status != 200:
            return web.Response(status=self.accounts_status, text='{not json')
        return web.json_response({'accounts': self.accounts})

    async def _transactions(self, request: web.Request) -> web.Response:
        self._record(request)
        account_id = request.match_info['account_id']
        if account_id in self.failing_accounts:
            return web.Response(status=self.failing_accounts[account_id], text='{not json')
        txns = self.transactions.get(account_id, [])
        return web.json_response({'total': len(txns), 'transactions': txns})

    def make_app(self) -> web.Application:
        app = web.Application()
        app.add_routes([
            web.get('/api/v1/accounts', self._accounts),
            web.get('/api/v1/account/{account_id}/transactions', self._transactions),
        ])
        return app

    @property
    def transaction_paths(self) -> List[str]:
        return [r['path'] for r in self.requests if r['path'].endswith('/transactions')]


@asynccontextmanager
async def _serve(fake: FakeMercury, api_key: str = 'test-key', timeout: int = 5):
    async with TestServer(fake.make_app()) as server:
        yield MercuryClient(api_key, str(server.make_url('/api/v1')), timeout=timeout)


@pytest.fixture
def serve():
    """Async context manager yielding a MercuryClient bound to a FakeMercury."""
    return _serve


@pytest.fixture
def account_payloads() -> List[Dict[str, Any]]:
    return [
        {
            'id': 'acct1',
            'accountNumber': '1111',
            'routingNumber': '021000021',
            'name': 'Checking',
            'status': 'active',
            'type': 'mercury',
            'createdAt': '2023-01-01T00:00:00Z',
            'availableBalance': 1200.5,
            'currentBalance': 1250.75,
            'kind': 'checking',
            'legalBusinessName': 'Acme Inc',
            'dashboardLink': 'https://app.mercury.com/accounts/acct1',
        },
        {
            'id': 'acct2',
            'accountNumber': '2222',
            'routingNumber': '021000021',
            'name': 'Savings',
            'status': 'active',
            'type': 'mercury',
            'createdAt': '2023-01-01T00:00:00Z',
            'availableBalance': 5000,
            'currentBalance': 5000,
            'kind': 'savings',
            'legalBusinessName': 'Acme Inc',
            'dashboardLink': 'https://app.mercury.com/accounts/acct2',
        },
    ]


@pytest.fixture
def transaction_payloads() -> Dict[str, List[Dict[str, Any]]]:
    return {
        'acct1': [
            make_transaction('AWS', -120.0, 'txn-a1'),
            make_transaction('AWS', -30.0, 'txn-a2'),
            make_transaction('Stripe', 900.0, 'txn-a3'),
        ],
        'acct2': [
            make_transaction('Gusto', -400.0, 'txn-b1'),
            make_transaction('Stripe', 100.0, 'txn-b2'),
        ],
    }


@pytest.fixture
def clean_env(monkeypatch):
    """Remove barry environment variables for the duration of a test."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def txn():
    """Factory for transaction payloads."""
    return make_transaction


@pytest.fixture
def fake_mercury():
    """The FakeMercury class, for building per-test API stand-ins."""
    return FakeMercury


@pytest.fixture(autouse=True)
def restore_root_log_level():
    """Undo root logger level changes made by the CLI entry point."""
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)
