"""
barry - command-line reports over Mercury bank accounts.

Subcommands:
    balances   current and available balance per account
    spend      outgoing amounts summed per counterparty
    revenue    incoming amounts summed per counterparty
"""

import argparse
import asyncio
import logging
import os
import re
import sys
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .aggregator.transaction_aggregator import AggregateBy, Flow, TransactionAggregator, select_accounts
from .config.settings import API_KEY_ENV, Settings, load_config
from .dashboard.console_display import ConsoleDisplay
from .data.mercury_client import MercuryClient
from .data.models import ListTransactionsParams, Transaction
from .exceptions import BarryError, ConfigurationError, InvalidDateError, MercuryAPIError

logger = logging.getLogger(__name__)

_DATE_PATTERN = re.compile(r'\d{4}-\d{2}-\d{2}')


@dataclass
class CommandConfig:
    """Everything a single subcommand run needs, resolved from flags and settings."""
    command: str
    api_key: str
    account_ids: List[str] = field(default_factory=list)
    counterparties: List[str] = field(default_factory=list)
    aggregate: AggregateBy = AggregateBy.COUNTERPARTY
    params: ListTransactionsParams = field(default_factory=ListTransactionsParams)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='barry',
        description='Barry is a CLI for performing common accounting and banking tasks',
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--api-key', default=None,
                        help=f'API key for authentication (default: ${API_KEY_ENV})')
    common.add_argument('--accounts', default='', help='Comma-separated account IDs to include')

    subparsers.add_parser('balances', parents=[common], help='View account balances')

    for name, noun in (('spend', 'expenses'), ('revenue', 'revenue')):
        sub = subparsers.add_parser(
            name, parents=[common],
            help=f'Track {noun} across counterparties and periods',
        )
        sub.add_argument('--start-date', default=None,
                         help=f'Start date for tracking {noun} (YYYY-MM-DD)')
        sub.add_argument('--end-date', default=None,
                         help=f'End date for tracking {noun} (YYYY-MM-DD)')
        sub.add_argument('--aggregate', default=AggregateBy.COUNTERPARTY.value,
                         choices=[mode.value for mode in AggregateBy],
                         help=f'How {noun} should be broken down')
        sub.add_argument('--counterparty', default='',
                         help=f'Comma-separated counterparties to filter {noun} for')
        sub.add_argument('--status', default=None, help='Only transactions with this status')
        sub.add_argument('--search', default=None, help='Free-text search passed to the API')

    return parser


def split_list(value: Optional[str]) -> List[str]:
    """Split a comma-separated flag value, dropping empty items."""
    if not value:
        return []
    return [item.strip() for item in value.split(',') if item.strip()]


def validate_date(value: Optional[str], label: str) -> Optional[str]:
    """Return value unchanged if it is a real YYYY-MM-DD date."""
    if value is None or value == '':
        return None
    try:
        if not _DATE_PATTERN.fullmatch(value):
            raise ValueError(value)
        datetime.strptime(value, '%Y-%m-%d')
    except ValueError as e:
        raise InvalidDateError(f"Invalid {label} date format. Please use YYYY-MM-DD.") from e
    return value


def build_command_config(args: argparse.Namespace, settings: Settings) -> CommandConfig:
    """
    Resolve parsed flags and settings into a CommandConfig.

    Raises:
        ConfigurationError: If no API key is available.
        InvalidDateError: If a date flag is malformed.
    """
    api_key = args.api_key or settings.api_key
    if not api_key:
        raise ConfigurationError(
            f"You must provide an API key, either by setting {API_KEY_ENV} or passing --api-key"
        )

    config = CommandConfig(
        command=args.command,
        api_key=api_key,
        account_ids=split_list(args.accounts),
    )
    if args.command == 'balances':
        return config

    config.params = ListTransactionsParams(
        status=args.status,
        start=validate_date(args.start_date, 'start'),
        end=validate_date(args.end_date, 'end'),
        search=args.search,
    )
    config.counterparties = split_list(args.counterparty)
    config.aggregate = AggregateBy(args.aggregate)
    return config


async def collect_transactions(config: CommandConfig, client: MercuryClient) -> List[Transaction]:
    """Fetch transactions for every selected account, one account at a time."""
    accounts = select_accounts((await client.list_accounts()).accounts, config.account_ids)
    logger.info(f"Fetching transactions for {len(accounts)} accounts")

    transactions: List[Transaction] = []
    for account in accounts:
        try:
            response = await client.list_transactions(account.id, config.params)
        except MercuryAPIError:
            logger.error(f"Listing transactions failed for account {account.id}; aborting report")
            raise
        transactions.extend(response.transactions)
    return transactions


async def run_balances(
    config: CommandConfig,
    client: MercuryClient,
    display: ConsoleDisplay,
    aggregator: TransactionAggregator,
) -> None:
    accounts = select_accounts((await client.list_accounts()).accounts, config.account_ids)
    display.show_balances(accounts, aggregator.summarize_balances(accounts))


async def run_flow_report(
    config: CommandConfig,
    client: MercuryClient,
    display: ConsoleDisplay,
    aggregator: TransactionAggregator,
    flow: Flow,
) -> None:
    transactions = await collect_transactions(config, client)
    totals = aggregator.aggregate(
        transactions,
        flow,
        account_ids=config.account_ids,
        counterparties=config.counterparties,
        group_by=config.aggregate,
    )
    display.show_totals(totals, flow)


async def run_command(
    config: CommandConfig,
    client: MercuryClient,
    display: ConsoleDisplay,
    aggregator: Optional[TransactionAggregator] = None,
) -> None:
    """Dispatch a resolved command to its handler."""
    aggregator = aggregator or TransactionAggregator()
    if config.command == 'balances':
        await run_balances(config, client, display, aggregator)
    elif config.command in (Flow.SPEND.value, Flow.REVENUE.value):
        await run_flow_report(config, client, display, aggregator, Flow(config.command))
    else:
        raise ConfigurationError(f"Unknown command: {config.command}")


def configure_logging(level: str) -> None:
    logging.basicConfig(format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    logging.getLogger().setLevel(getattr(logging, level.upper(), logging.WARNING))


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point. Returns the process exit status."""
    args = build_parser().parse_args(argv)

    # LOG_LEVEL may also come from .env, so the level is applied again once settings load
    configure_logging(os.getenv('LOG_LEVEL', 'WARNING'))
    try:
        settings = load_config()
        configure_logging(settings.log_level)
        config = build_command_config(args, settings)

        client = MercuryClient(config.api_key, settings.api_base_url, settings.timeout)
        display = ConsoleDisplay(use_colors=settings.console_colors)
        asyncio.run(run_command(config, client, display))
    except BarryError as e:
        logger.error(f"barry {args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


def run() -> None:
    sys.exit(main())
