"""Mercury API client for retrieving account and transaction data."""

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

from ..exceptions import MercuryDecodeError, MercuryRequestError, MercuryStatusError
from .models import AccountsResponse, ListTransactionsParams, TransactionsResponse

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = 'https://api.mercury.com/api/v1'


class MercuryClient:
    """Issues authenticated, read-only requests against the Mercury API."""

    def __init__(self, api_key: str, base_url: str = DEFAULT_API_BASE_URL, timeout: int = 30):
        """
        Initialize the client.

        Args:
            api_key: Mercury API token, sent as a bearer token.
            base_url: API root, without the endpoint path.
            timeout: Total timeout per request in seconds.
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.timeout = aiohttp.ClientTimeout(total=timeout)

        logger.info(f"Mercury client initialized for {self.base_url}")

    async def list_accounts(self) -> AccountsResponse:
        """
        Fetch all accounts.

        Returns:
            AccountsResponse with the decoded accounts.

        Raises:
            MercuryAPIError: On transport failure, a non-200 status, or an
                undecodable body.
        """
        payload = await self._get(f"{self.base_url}/accounts", what='accounts')
        try:
            response = AccountsResponse.from_api(payload)
        except (KeyError, TypeError, ValueError) as e:
            raise MercuryDecodeError(f"failed to decode accounts: {e}") from e

        logger.info(f"Fetched {len(response.accounts)} accounts")
        return response

    async def list_transactions(
        self,
        account_id: str,
        params: Optional[ListTransactionsParams] = None,
    ) -> TransactionsResponse:
        """
        Fetch transactions for a single account.

        Args:
            account_id: Account to list transactions for.
            params: Optional filters; unset fields are left out of the query.

        Returns:
            TransactionsResponse whose transactions are stamped with account_id.

        Raises:
            MercuryAPIError: On transport failure, a non-200 status, or an
                undecodable body.
        """
        query = (params or ListTransactionsParams()).to_query()
        url = f"{self.base_url}/account/{account_id}/transactions"
        payload = await self._get(url, what='transactions', params=query)
        try:
            response = TransactionsResponse.from_api(payload, account_id=account_id)
        except (KeyError, TypeError, ValueError) as e:
            raise MercuryDecodeError(f"failed to decode transactions: {e}") from e

        logger.info(
            f"Fetched {len(response.transactions)} of {response.total} transactions "
            f"for account {account_id}"
        )
        return response

    def _headers(self) -> Dict[str, str]:
        return {
            'Authorization': f'Bearer {self.api_key}',
            'Accept': 'application/json',
        }

    async def _get(self, url: str, what: str, params: Optional[Dict[str, str]] = None) -> Any:
        """GET url and return the decoded JSON body of a 200 response."""
        logger.debug(f"GET {url} params={params or {}}")
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.get(url, headers=self._headers(), params=params) as response:
                    if response.status != 200:
                        reason = response.reason or ''
                        raise MercuryStatusError(
                            f"failed to fetch {what}: {response.status} {reason}".rstrip(),
                            status=response.status,
                            reason=reason,
                        )
                    try:
                        return await response.json(content_type=None)
                    except ValueError as e:
                        raise MercuryDecodeError(f"failed to decode {what}: {e}") from e
        except aiohttp.InvalidURL as e:
            raise MercuryRequestError(f"invalid request URL for {what}: {e}") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise MercuryRequestError(f"request for {what} failed: {str(e) or type(e).__name__}") from e
