"""Data models for Mercury accounts and transactions.

Models are immutable snapshots built from the API's camelCase JSON. Each
``from_api`` constructor raises ``TypeError`` or ``ValueError`` when the payload
does not have the expected shape; the client reports those as decode errors.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)


def _require_mapping(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise TypeError(f"expected a JSON object for {what}, got {type(data).__name__}")
    return data


def _optional_mapping(data: Dict[str, Any], key: str) -> Optional[Dict[str, Any]]:
    value = data.get(key)
    if value is None:
        return None
    return _require_mapping(value, key)


def _as_float(value: Any) -> float:
    """Accept JSON numbers only; strings, booleans and non-finite values are rejected."""
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"expected a number, got {type(value).__name__}")
    if not math.isfinite(value):
        raise ValueError(f"expected a finite number, got {value!r}")
    return float(value)


def _as_str(value: Any) -> str:
    return "" if value is None else str(value)


def _parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp, treating naive values as UTC."""
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise TypeError(f"expected an ISO 8601 string, got {type(value).__name__}")
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class Account:
    """A bank account as returned by ``GET /accounts``."""

    id: str
    name: str
    status: str
    type: str
    current_balance: float
    available_balance: float
    account_number: str = ""
    routing_number: str = ""
    created_at: str = ""
    kind: str = ""
    legal_business_name: str = ""
    dashboard_link: str = ""

    @classmethod
    def from_api(cls, data: Any) -> "Account":
        data = _require_mapping(data, "account")
        return cls(
            id=_as_str(data.get("id")),
            name=_as_str(data.get("name")),
            status=_as_str(data.get("status")),
            type=_as_str(data.get("type")),
            current_balance=_as_float(data.get("currentBalance")),
            available_balance=_as_float(data.get("availableBalance")),
            account_number=_as_str(data.get("accountNumber")),
            routing_number=_as_str(data.get("routingNumber")),
            created_at=_as_str(data.get("createdAt")),
            kind=_as_str(data.get("kind")),
            legal_business_name=_as_str(data.get("legalBusinessName")),
            dashboard_link=_as_str(data.get("dashboardLink")),
        )

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"


@dataclass(frozen=True)
class Address:
    address1: str
    city: str
    postal_code: str
    address2: Optional[str] = None
    state: Optional[str] = None

    @classmethod
    def from_api(cls, data: Any) -> "Address":
        data = _require_mapping(data, "address")
        return cls(
            address1=_as_str(data.get("address1")),
            city=_as_str(data.get("city")),
            postal_code=_as_str(data.get("postalCode")),
            address2=data.get("address2"),
            state=data.get("state"),
        )


@dataclass(frozen=True)
class CorrespondentInfo:
    routing_number: Optional[str] = None
    swift_code: Optional[str] = None
    bank_name: Optional[str] = None


@dataclass(frozen=True)
class BankDetails:
    bank_name: str
    city_state: str
    country: str


# Variants of the per-transaction routing/card details. The API sends an
# object with one key per variant and at most one of them populated.

@dataclass(frozen=True)
class DomesticWireDetails:
    kind: ClassVar[str] = "domesticWire"

    account_number: str
    routing_number: str
    bank_name: Optional[str] = None
    address: Optional[Address] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "DomesticWireDetails":
        address = _optional_mapping(data, "address")
        return cls(
            account_number=_as_str(data.get("accountNumber")),
            routing_number=_as_str(data.get("routingNumber")),
            bank_name=data.get("bankName"),
            address=Address.from_api(address) if address is not None else None,
        )


@dataclass(frozen=True)
class ElectronicRoutingDetails:
    kind: ClassVar[str] = "electronic"

    account_number: str
    routing_number: str
    bank_name: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ElectronicRoutingDetails":
        # Mercury spells this key in lower case for ACH routing info
        routing_number = data.get("routingnumber", data.get("routingNumber"))
        return cls(
            account_number=_as_str(data.get("accountNumber")),
            routing_number=_as_str(routing_number),
            bank_name=data.get("bankName"),
        )


@dataclass(frozen=True)
class InternationalWireDetails:
    kind: ClassVar[str] = "internationalWire"

    iban: str
    swift_code: str
    correspondent_info: Optional[CorrespondentInfo] = None
    bank_details: Optional[BankDetails] = None
    address: Optional[Address] = None
    phone_number: Optional[str] = None
    # Keyed by country, e.g. {"countrySpecificDataCanada": {"bankCode": ...}}
    country_specific: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "InternationalWireDetails":
        correspondent = _optional_mapping(data, "correspondentInfo")
        bank = _optional_mapping(data, "bankDetails")
        address = _optional_mapping(data, "address")
        country_specific = _optional_mapping(data, "countrySpecific") or {}
        return cls(
            iban=_as_str(data.get("iban")),
            swift_code=_as_str(data.get("swiftCode")),
            correspondent_info=CorrespondentInfo(
                routing_number=correspondent.get("routingNumber"),
                swift_code=correspondent.get("swiftCode"),
                bank_name=correspondent.get("bankName"),
            ) if correspondent is not None else None,
            bank_details=BankDetails(
                bank_name=_as_str(bank.get("bankName")),
                city_state=_as_str(bank.get("cityState")),
                country=_as_str(bank.get("country")),
            ) if bank is not None else None,
            address=Address.from_api(address) if address is not None else None,
            phone_number=data.get("phoneNumber"),
            country_specific={
                key: value for key, value in country_specific.items() if value is not None
            },
        )


@dataclass(frozen=True)
class DebitCardDetails:
    kind: ClassVar[str] = "debitCard"

    card_id: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "DebitCardDetails":
        return cls(card_id=_as_str(data.get("id")))


@dataclass(frozen=True)
class CreditCardDetails:
    kind: ClassVar[str] = "creditCard"

    card_id: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "CreditCardDetails":
        return cls(card_id=_as_str(data.get("id")))


TransactionDetails = Union[
    DomesticWireDetails,
    ElectronicRoutingDetails,
    InternationalWireDetails,
    DebitCardDetails,
    CreditCardDetails,
]

_DETAIL_VARIANTS = (
    ("domesticWireRoutingInfo", DomesticWireDetails),
    ("electronicRoutingInfo", ElectronicRoutingDetails),
    ("internationalWireRoutingInfo", InternationalWireDetails),
    ("debitCardInfo", DebitCardDetails),
    ("creditCardInfo", CreditCardDetails),
)


def parse_details(data: Optional[Dict[str, Any]]) -> Optional[TransactionDetails]:
    """Pick the populated variant out of a ``details`` payload.

    Returns None when no variant is present. If the API ever sends more than
    one, the first in declaration order wins.
    """
    if data is None:
        return None
    populated = [
        (key, variant) for key, variant in _DETAIL_VARIANTS
        if data.get(key) is not None
    ]
    if not populated:
        return None
    if len(populated) > 1:
        logger.warning(
            f"Transaction details carry {len(populated)} variants, using {populated[0][0]}"
        )
    key, variant = populated[0]
    return variant.from_api(_require_mapping(data[key], key))


@dataclass(frozen=True)
class CurrencyExchangeInfo:
    converted_from_currency: str
    converted_to_currency: str
    converted_from_amount: float
    converted_to_amount: float
    fee_amount: float
    fee_percentage: float
    exchange_rate: float
    fee_transaction_id: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "CurrencyExchangeInfo":
        return cls(
            converted_from_currency=_as_str(data.get("convertedFromCurrency")),
            converted_to_currency=_as_str(data.get("convertedToCurrency")),
            converted_from_amount=_as_float(data.get("convertedFromAmount")),
            converted_to_amount=_as_float(data.get("convertedToAmount")),
            fee_amount=_as_float(data.get("feeAmount")),
            fee_percentage=_as_float(data.get("feePercentage")),
            exchange_rate=_as_float(data.get("exchangeRate")),
            fee_transaction_id=_as_str(data.get("feeTransactionId")),
        )


@dataclass(frozen=True)
class Attachment:
    file_name: str
    url: str
    attachment_type: str


@dataclass(frozen=True)
class Transaction:
    """A single transaction from ``GET /account/{id}/transactions``."""

    id: str
    amount: float
    counterparty_name: str
    created_at: Optional[datetime]
    status: str
    account_id: Optional[str] = None
    counterparty_id: str = ""
    counterparty_nickname: Optional[str] = None
    kind: str = ""
    bank_description: Optional[str] = None
    note: Optional[str] = None
    external_memo: Optional[str] = None
    dashboard_link: str = ""
    posted_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None
    estimated_delivery_date: Optional[datetime] = None
    reason_for_failure: Optional[str] = None
    fee_id: Optional[str] = None
    details: Optional[TransactionDetails] = None
    counterparty_address: Optional[Address] = None
    currency_exchange_info: Optional[CurrencyExchangeInfo] = None
    compliant_with_receipt_policy: Optional[bool] = None
    has_generated_receipt: Optional[bool] = None
    credit_account_period_id: Optional[str] = None
    mercury_category: Optional[str] = None
    general_ledger_code_name: Optional[str] = None
    attachments: Tuple[Attachment, ...] = ()

    @property
    def is_spend(self) -> bool:
        return self.amount < 0

    @property
    def is_revenue(self) -> bool:
        return self.amount > 0

    @classmethod
    def from_api(cls, data: Any, account_id: Optional[str] = None) -> "Transaction":
        data = _require_mapping(data, "transaction")
        details = _optional_mapping(data, "details")
        address = details.get("address") if details is not None else None
        exchange = _optional_mapping(data, "currencyExchangeInfo")
        attachments = data.get("attachments") or []
        if not isinstance(attachments, list):
            raise TypeError("expected a list of attachments")

        return cls(
            id=_as_str(data.get("id")),
            amount=_as_float(data.get("amount")),
            counterparty_name=_as_str(data.get("counterpartyName")),
            created_at=_parse_timestamp(data.get("createdAt")),
            status=_as_str(data.get("status")),
            account_id=account_id,
            counterparty_id=_as_str(data.get("counterpartyId")),
            counterparty_nickname=data.get("counterpartyNickname"),
            kind=_as_str(data.get("kind")),
            bank_description=data.get("bankDescription"),
            note=data.get("note"),
            external_memo=data.get("externalMemo"),
            dashboard_link=_as_str(data.get("dashboardLink")),
            posted_at=_parse_timestamp(data.get("postedAt")),
            failed_at=_parse_timestamp(data.get("failedAt")),
            estimated_delivery_date=_parse_timestamp(data.get("estimatedDeliveryDate")),
            reason_for_failure=data.get("reasonForFailure"),
            fee_id=data.get("feeId"),
            details=parse_details(details),
            counterparty_address=Address.from_api(address) if address is not None else None,
            currency_exchange_info=(
                CurrencyExchangeInfo.from_api(exchange) if exchange is not None else None
            ),
            compliant_with_receipt_policy=data.get("compliantWithReceiptPolicy"),
            has_generated_receipt=data.get("hasGeneratedReceipt"),
            credit_account_period_id=data.get("creditAccountPeriodId"),
            mercury_category=data.get("mercuryCategory"),
            general_ledger_code_name=data.get("generalLedgerCodeName"),
            attachments=tuple(
                Attachment(
                    file_name=_as_str(item.get("fileName")),
                    url=_as_str(item.get("url")),
                    attachment_type=_as_str(item.get("attachmentType")),
                )
                for item in (_require_mapping(a, "attachment") for a in attachments)
            ),
        )


@dataclass(frozen=True)
class AccountsResponse:
    accounts: List[Account]

    @classmethod
    def from_api(cls, payload: Any) -> "AccountsResponse":
        payload = _require_mapping(payload, "accounts response")
        accounts = payload.get("accounts") or []
        if not isinstance(accounts, list):
            raise TypeError("expected 'accounts' to be a list")
        return cls(accounts=[Account.from_api(item) for item in accounts])


@dataclass(frozen=True)
class TransactionsResponse:
    total: int
    transactions: List[Transaction]

    @classmethod
    def from_api(cls, payload: Any, account_id: Optional[str] = None) -> "TransactionsResponse":
        payload = _require_mapping(payload, "transactions response")
        transactions = payload.get("transactions") or []
        if not isinstance(transactions, list):
            raise TypeError("expected 'transactions' to be a list")
        return cls(
            total=int(payload.get("total") or 0),
            transactions=[Transaction.from_api(item, account_id) for item in transactions],
        )


@dataclass(frozen=True)
class ListTransactionsParams:
    """Optional query parameters for the transactions endpoint."""

    limit: Optional[int] = None
    offset: Optional[int] = None
    status: Optional[str] = None
    start: Optional[str] = None
    end: Optional[str] = None
    search: Optional[str] = None

    def to_query(self) -> Dict[str, str]:
        """Return only the parameters that are set, as query-string values."""
        values = {
            'limit': self.limit,
            'offset': self.offset,
            'status': self.status,
            'start': self.start,
            'end': self.end,
            'search': self.search,
        }
        return {key: str(value) for key, value in values.items() if value is not None}
