"""Core data models for the statement parser."""

import re
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP, localcontext
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


_CENTS = Decimal('0.01')

_OFX_DATE_RE = re.compile(
    r'^(?P<year>\d{4})(?P<month>\d{2})(?P<day>\d{2})'
    r'(?:(?P<hour>\d{2})(?P<minute>\d{2})(?:(?P<second>\d{2})(?:\.(?P<millis>\d{1,3}))?)?)?'
    r'(?:\[(?P<offset>[+-]?\d{1,2}(?:\.\d+)?)(?::[A-Za-z]+)?\])?$'
)


class Amount(Decimal):
    """Monetary amount.

    Keeps the exact parsed value for comparisons and arithmetic, but
    always renders with two fractional digits.
    """

    def __str__(self) -> str:
        with localcontext() as ctx:
            # room for every integer digit, the cents and a rounding carry
            ctx.prec = max(ctx.prec, self.adjusted() + 4)
            return format(self.quantize(_CENTS, rounding=ROUND_HALF_UP), 'f')

    def __format__(self, spec: str) -> str:
        if not spec:
            return str(self)
        return Decimal.__format__(self, spec)

    def __repr__(self) -> str:
        return f"Amount('{Decimal.__str__(self)}')"

    # Decimal pickles and copies through str(), which would round
    def __reduce__(self):
        return (self.__class__, (Decimal.__str__(self),))

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


class TransactionType(Enum):
    """OFX transaction types (TRNTYPE)"""
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"
    INTEREST = "INT"
    DIVIDEND = "DIV"
    FEE = "FEE"
    SERVICE_CHARGE = "SRVCHG"
    DEPOSIT = "DEP"
    ATM = "ATM"
    POS = "POS"
    TRANSFER = "XFER"
    CHECK = "CHECK"
    PAYMENT = "PAYMENT"
    CASH = "CASH"
    DIRECT_DEPOSIT = "DIRECTDEP"
    DIRECT_DEBIT = "DIRECTDEBIT"
    REPEAT_PAYMENT = "REPEATPMT"
    OTHER = "OTHER"

    @classmethod
    def from_code(cls, code: Optional[str]) -> 'TransactionType':
        """Map a TRNTYPE wire code to a member, falling back to OTHER"""
        if not code:
            return cls.OTHER
        return _WIRE_CODES.get(code.strip().upper(), cls.OTHER)

    @property
    def code(self) -> str:
        return self.value


_WIRE_CODES: Dict[str, TransactionType] = {
    'DEBIT': TransactionType.DEBIT,
    'CREDIT': TransactionType.CREDIT,
    'INT': TransactionType.INTEREST,
    'DIV': TransactionType.DIVIDEND,
    'FEE': TransactionType.FEE,
    'SRVCHG': TransactionType.SERVICE_CHARGE,
    'DEP': TransactionType.DEPOSIT,
    'ATM': TransactionType.ATM,
    'POS': TransactionType.POS,
    'XFER': TransactionType.TRANSFER,
    'CHECK': TransactionType.CHECK,
    'PAYMENT': TransactionType.PAYMENT,
    'CASH': TransactionType.CASH,
    'DIRECTDEP': TransactionType.DIRECT_DEPOSIT,
    'DIRECTDEBIT': TransactionType.DIRECT_DEBIT,
    'REPEATPMT': TransactionType.REPEAT_PAYMENT,
    'OTHER': TransactionType.OTHER,
}


def parse_ofx_date(value: str) -> datetime:
    """Convert an OFX date (YYYYMMDD[HHMMSS[.XXX]][[offset:TZ]]) to a datetime.

    Values carrying a bracketed offset come back timezone-aware.

    Raises:
        ValueError: If the value is not an OFX date
    """
    if not value or not str(value).strip():
        raise ValueError("Date string cannot be empty")

    match = _OFX_DATE_RE.match(str(value).strip())
    if not match:
        raise ValueError(f"Unable to parse OFX date: {value}")

    parts = match.groupdict()
    tzinfo = None
    if parts['offset'] is not None:
        tzinfo = timezone(timedelta(hours=float(parts['offset'])))

    return datetime(
        int(parts['year']),
        int(parts['month']),
        int(parts['day']),
        int(parts['hour'] or 0),
        int(parts['minute'] or 0),
        int(parts['second'] or 0),
        int((parts['millis'] or '0').ljust(3, '0')) * 1000,
        tzinfo=tzinfo,
    )


@dataclass(frozen=True)
class Transaction:
    """A single STMTTRN entry"""
    type: TransactionType
    posted: str
    amount: Amount
    id: str
    user_date: Optional[str] = None
    name: Optional[str] = None
    payee: Optional[str] = None
    memo: Optional[str] = None

    @property
    def posted_at(self) -> datetime:
        return parse_ofx_date(self.posted)


@dataclass(frozen=True)
class Balance:
    """Ledger or available balance"""
    amount: Amount
    as_of: str


@dataclass(frozen=True)
class SignOnResponse:
    """Sign-on status block (SONRS).

    Attributes:
        code: Status code, 0 on success
        severity: Status severity (INFO, WARN, ERROR)
        server_date: DTSERVER as sent by the institution
        language: LANGUAGE code
        organization: FI/ORG
        organization_id: FI/FID
        intuit_bid: INTU.BID institution id used by Quicken files
    """
    code: int
    severity: str
    server_date: Optional[str] = None
    language: Optional[str] = None
    organization: Optional[str] = None
    organization_id: Optional[str] = None
    intuit_bid: Optional[str] = None


@dataclass(frozen=True)
class StatementResponseSet:
    """Bank statement body (STMTRS)"""
    currency: Optional[str]
    bank_id: Optional[str]
    account_id: Optional[str]
    account_type: Optional[str]
    start_date: Optional[str]
    end_date: Optional[str]
    transactions: Tuple[Transaction, ...]
    ledger_balance: Balance
    available_balance: Optional[Balance] = None

    @property
    def period(self) -> Tuple[Optional[datetime], Optional[datetime]]:
        """Statement date range as datetimes"""
        start = parse_ofx_date(self.start_date) if self.start_date else None
        end = parse_ofx_date(self.end_date) if self.end_date else None
        return start, end


@dataclass(frozen=True)
class StatementTransactionResponseSet:
    """Statement transaction response wrapper (STMTTRNRS)"""
    transaction_uid: str
    code: int
    severity: str
    response: Optional[StatementResponseSet] = None


@dataclass(frozen=True)
class Document:
    """A parsed OFX/QFX statement"""
    signon: SignOnResponse
    statement: Optional[StatementTransactionResponseSet] = None

    @property
    def transactions(self) -> Tuple[Transaction, ...]:
        if self.statement is None or self.statement.response is None:
            return ()
        return self.statement.response.transactions

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return _plain(self)


def _plain(value: Any) -> Any:
    if is_dataclass(value):
        return {f.name: _plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, Amount):
        return str(value)
    if isinstance(value, tuple):
        return [_plain(item) for item in value]
    return value


@dataclass
class ProcessingResult:
    """Result of processing one file"""
    file_path: str
    processing_time: float
    document: Optional[Document] = None
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.document is not None and not self.errors


@dataclass
class ParserConfig:
    """Configuration for parser behavior"""
    root_marker: str = "<OFX>"
    encoding: str = "utf-8"
    auto_close: bool = True
    max_depth: Optional[int] = None  # None: up to parsers.schema.XML_DEPTH_LIMIT
    strict_mixed_content: bool = False
    num_workers: int = 3
    supported_extensions: Optional[List[str]] = None
    log_directory: Optional[str] = None

    def __post_init__(self):
        if self.supported_extensions is None:
            self.supported_extensions = ['.qfx', '.ofx']
