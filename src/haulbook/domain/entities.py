"""Domain model entities for haulbook.

These are pure data classes representing business concepts, independent of
database schema. Source documents are identified by application-generated
string IDs so that postings can be keyed before anything is persisted.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

ZERO = Decimal("0")


class OwnershipType(str, Enum):
    """Who bears the cost of running a vehicle."""

    OWN = "own"
    MARKET = "market"


class LedgerType(str, Enum):
    """Subsidiary ledger a posting belongs to."""

    VEHICLE_INCOME = "vehicle_income"
    VEHICLE_EXPENSE = "vehicle_expense"
    PARTY = "party"
    SUPPLIER = "supplier"
    COMMISSION = "commission"
    GENERAL = "general"


class SourceType(str, Enum):
    """Source document variant that produced a posting."""

    BILL = "bill"
    MEMO = "memo"
    BANKING = "banking"
    CASHBOOK = "cashbook"
    FUEL = "fuel"


class CashBook(str, Enum):
    """Book a cash movement is recorded in."""

    BANK = "bank"
    CASH = "cash"

    @property
    def source_type(self) -> SourceType:
        return SourceType.BANKING if self is CashBook.BANK else SourceType.CASHBOOK


class EntryType(str, Enum):
    """Direction of a cash movement or commission entry."""

    CREDIT = "credit"
    DEBIT = "debit"


class CashCategory(str, Enum):
    """Categories with a dedicated posting rule.

    Cash entries may carry any other category string; those post to the
    general ledger.
    """

    BILL_ADVANCE = "bill_advance"
    BILL_PAYMENT = "bill_payment"
    MEMO_ADVANCE = "memo_advance"
    MEMO_PAYMENT = "memo_payment"
    VEHICLE_EXPENSE = "vehicle_expense"
    PARTY_COMMISSION = "party_commission"
    FUEL_WALLET = "fuel_wallet"
    PARTY_ON_ACCOUNT = "party_on_account"
    SUPPLIER_PAYMENT = "supplier_payment"
    EXPENSE = "expense"
    OTHER = "other"


class BillStatus(str, Enum):
    PENDING = "pending"
    RECEIVED = "received"


class MemoStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class PaymentMode(str, Enum):
    CASH = "cash"
    BANK = "bank"
    OTHER = "other"


class FuelTransactionType(str, Enum):
    WALLET_CREDIT = "wallet_credit"
    FUEL_ALLOCATION = "fuel_allocation"


# Reference masters


@dataclass(frozen=True)
class Party:
    """Party (customer) master record."""

    id: int
    name: str
    address: Optional[str]
    phone: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Supplier:
    """Supplier (market vehicle operator) master record."""

    id: int
    name: str
    address: Optional[str]
    phone: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Vehicle:
    """Vehicle master record."""

    id: int
    vehicle_no: str
    ownership_type: OwnershipType
    vehicle_type: Optional[str]
    owner_name: Optional[str]
    driver_name: Optional[str]
    created_at: datetime

    @property
    def is_own(self) -> bool:
        return self.ownership_type is OwnershipType.OWN


@dataclass(frozen=True)
class FuelWallet:
    """Prepaid fuel account with a running balance."""

    id: int
    name: str
    balance: Decimal
    created_at: datetime


# Source documents


@dataclass(frozen=True)
class LoadingSlipDraft:
    """User input for a loading slip."""

    slip_number: str
    date: date
    party: str
    vehicle_no: str
    from_location: str
    to_location: str
    supplier: str
    freight: Decimal
    weight: Decimal = ZERO
    advance: Decimal = ZERO
    rto: Decimal = ZERO
    total_freight: Optional[Decimal] = None
    material: Optional[str] = None
    narration: Optional[str] = None


@dataclass(frozen=True)
class LoadingSlip:
    """Trip order; the anchor for one memo and one bill."""

    id: str
    slip_number: str
    date: date
    party: str
    vehicle_no: str
    from_location: str
    to_location: str
    supplier: str
    freight: Decimal
    weight: Decimal
    advance: Decimal
    rto: Decimal
    total_freight: Decimal
    balance: Decimal
    material: Optional[str]
    narration: Optional[str]


@dataclass(frozen=True)
class AdvancePayment:
    """Partial payment embedded in a bill or memo.

    Advances injected by a cash entry carry its source type and ID.
    """

    id: str
    date: date
    amount: Decimal
    mode: PaymentMode
    reference: Optional[str] = None
    description: Optional[str] = None
    source_type: Optional[SourceType] = None
    source_id: Optional[str] = None


@dataclass(frozen=True)
class BillDraft:
    """User input for a bill."""

    bill_number: str
    loading_slip_id: str
    date: date
    party: str
    bill_amount: Decimal
    detention: Decimal = ZERO
    extra: Decimal = ZERO
    rto: Decimal = ZERO
    mamool: Decimal = ZERO
    tds: Decimal = ZERO
    penalties: Decimal = ZERO
    party_commission_cut: Decimal = ZERO
    narration: Optional[str] = None


@dataclass(frozen=True)
class Bill:
    """Amount receivable from a party for one trip."""

    id: str
    bill_number: str
    loading_slip_id: str
    date: date
    party: str
    party_id: Optional[int]
    bill_amount: Decimal
    detention: Decimal
    extra: Decimal
    rto: Decimal
    mamool: Decimal
    tds: Decimal
    penalties: Decimal
    party_commission_cut: Decimal
    net_amount: Decimal
    total_freight: Decimal
    status: BillStatus = BillStatus.PENDING
    received_date: Optional[date] = None
    received_amount: Optional[Decimal] = None
    advance_payments: tuple[AdvancePayment, ...] = ()
    narration: Optional[str] = None


@dataclass(frozen=True)
class MemoDraft:
    """User input for a memo."""

    memo_number: str
    loading_slip_id: str
    date: date
    supplier: str
    freight: Decimal
    commission: Decimal = ZERO
    mamool: Decimal = ZERO
    detention: Decimal = ZERO
    extra: Decimal = ZERO
    rto: Decimal = ZERO
    narration: Optional[str] = None


@dataclass(frozen=True)
class Memo:
    """Amount payable to a supplier, or earned by an own vehicle, for one trip."""

    id: str
    memo_number: str
    loading_slip_id: str
    date: date
    supplier: str
    freight: Decimal
    commission: Decimal
    mamool: Decimal
    detention: Decimal
    extra: Decimal
    rto: Decimal
    net_amount: Decimal
    status: MemoStatus = MemoStatus.PENDING
    paid_date: Optional[date] = None
    paid_amount: Optional[Decimal] = None
    advance_payments: tuple[AdvancePayment, ...] = ()
    narration: Optional[str] = None


@dataclass(frozen=True)
class CashEntryDraft:
    """User input for a banking or cashbook entry."""

    type: EntryType
    category: str
    amount: Decimal
    date: date
    narration: str
    reference_id: Optional[str] = None
    reference_name: Optional[str] = None
    vehicle_no: Optional[str] = None
    payment_mode: Optional[str] = None


@dataclass(frozen=True)
class CashEntry:
    """Banking or cashbook movement; ``book`` says which."""

    id: str
    book: CashBook
    type: EntryType
    category: str
    amount: Decimal
    date: date
    narration: str
    reference_id: Optional[str]
    reference_name: Optional[str]
    vehicle_no: Optional[str]
    payment_mode: str
    created_at: Optional[datetime] = None

    @property
    def source_type(self) -> SourceType:
        return self.book.source_type


@dataclass(frozen=True)
class FuelTransactionDraft:
    """User input for a wallet credit or a fuel allocation."""

    type: FuelTransactionType
    wallet_name: str
    amount: Decimal
    date: date
    narration: str
    vehicle_no: Optional[str] = None
    reference_id: Optional[str] = None
    fuel_quantity: Optional[Decimal] = None
    rate_per_liter: Optional[Decimal] = None
    odometer_reading: Optional[Decimal] = None


@dataclass(frozen=True)
class FuelTransaction:
    """Movement on a fuel wallet."""

    id: str
    type: FuelTransactionType
    wallet_name: str
    amount: Decimal
    date: date
    narration: str
    vehicle_no: Optional[str] = None
    reference_id: Optional[str] = None
    fuel_quantity: Optional[Decimal] = None
    rate_per_liter: Optional[Decimal] = None
    odometer_reading: Optional[Decimal] = None
    source_type: Optional[SourceType] = None
    source_id: Optional[str] = None


# Ledger store


@dataclass(frozen=True)
class LedgerEntryDraft:
    """A posting computed by a rule, not yet stored."""

    entry_key: str
    ledger_type: LedgerType
    source_type: SourceType
    source_id: str
    reference_id: Optional[str]
    reference_name: str
    date: date
    description: str
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    vehicle_no: Optional[str] = None


@dataclass(frozen=True)
class LedgerEntry:
    """Stored posting. ``balance`` is a write-time cache only."""

    id: int
    entry_key: str
    ledger_type: LedgerType
    source_type: SourceType
    source_id: str
    reference_id: Optional[str]
    reference_name: str
    date: date
    description: str
    debit: Decimal
    credit: Decimal
    vehicle_no: Optional[str]
    balance: Decimal
    created_at: datetime


@dataclass(frozen=True)
class CommissionEntryDraft:
    """A party commission posting computed by a rule, not yet stored."""

    entry_key: str
    party_id: Optional[int]
    party_name: str
    entry_type: EntryType
    amount: Decimal
    date: date
    narration: str
    source_type: SourceType
    source_id: str
    bill_number: Optional[str] = None
    reference_id: Optional[str] = None


@dataclass(frozen=True)
class PartyCommissionEntry:
    """Stored party commission posting."""

    id: int
    entry_key: str
    party_id: Optional[int]
    party_name: str
    entry_type: EntryType
    amount: Decimal
    date: date
    narration: str
    source_type: SourceType
    source_id: str
    bill_number: Optional[str]
    reference_id: Optional[str]
    created_at: datetime

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.entry_type is EntryType.CREDIT else -self.amount


@dataclass(frozen=True)
class ReconciliationIssue:
    """Record of a failed re-derivation touching one ledger key."""

    id: int
    source_type: SourceType
    source_id: str
    ledger_key: str
    message: str
    created_at: datetime
    resolved_at: Optional[datetime] = None


# Results and read models


@dataclass(frozen=True)
class PostingResult:
    """Outcome of a create or update: the saved document and its postings."""

    document: Any
    postings: tuple[LedgerEntry, ...] = ()
    commission_entries: tuple[PartyCommissionEntry, ...] = ()


@dataclass(frozen=True)
class LedgerFilter:
    """Criteria for listing ledger entries."""

    ledger_type: Optional[LedgerType] = None
    reference_name: Optional[str] = None
    reference_id: Optional[str] = None
    source_type: Optional[SourceType] = None
    source_id: Optional[str] = None
    vehicle_no: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass(frozen=True)
class LedgerBalance:
    """Folded balance for a ledger key.

    ``stale`` is set when a failed re-derivation touched the key, in which
    case ``amount`` should not be shown as authoritative.
    """

    ledger_type: Optional[LedgerType]
    key: Optional[str]
    amount: Decimal
    entry_count: int
    stale: bool = False


@dataclass(frozen=True)
class LedgerSummary:
    """Totals and running balance rows for one reference name."""

    reference_name: str
    total_debit: Decimal
    total_credit: Decimal
    balance: Decimal
    rows: tuple[tuple[LedgerEntry, Decimal], ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CommissionSummary:
    """Party commission totals."""

    total_credits: Decimal
    total_debits: Decimal
    balance: Decimal
    entry_count: int
    party_name: Optional[str] = None
    last_entry_date: Optional[date] = None


@dataclass(frozen=True)
class VehicleSummary:
    """Income and expense for one vehicle."""

    vehicle_no: str
    income: Decimal
    expense: Decimal
    net: Decimal
    entry_count: int


@dataclass(frozen=True)
class PendingBill:
    """Bill with an unpaid remainder."""

    bill_number: str
    bill_date: date
    total_amount: Decimal
    paid_amount: Decimal
    pending_amount: Decimal
    status: str
