"""Posting rules: how each source document maps to ledger postings.

A rule works in two steps. ``resolve`` looks up the documents and masters the
source refers to and rejects it when a reference is missing or invalid; it
only reads. ``plan`` is a pure function of the document and the resolved
context and returns a ``PostingPlan``: the ledger and commission postings to
insert plus the changes to shared state (advance payments on bills and memos,
bill/memo receipts, fuel wallet balances, owned fuel transactions).

``reversal`` returns the shared-state changes that undo a stored document's
effect. Ledger and commission postings never need a reversal plan because
they are found and deleted by source.

Rules do not write to the database; the posting engine applies plans.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from haulbook.database.base import Database
from haulbook.domain.entities import (
    ZERO,
    AdvancePayment,
    Bill,
    CashCategory,
    CashEntry,
    CommissionEntryDraft,
    EntryType,
    FuelTransaction,
    FuelTransactionType,
    LedgerEntryDraft,
    LedgerType,
    LoadingSlip,
    Memo,
    Party,
    PaymentMode,
    SourceType,
    Supplier,
    Vehicle,
    CashBook,
)
from haulbook.domain.errors import (
    DuplicateSource,
    InvalidCategory,
    ReferenceNotFound,
    ValidationError,
    business_key_not_found,
    category_requires,
    document_not_found,
    duplicate_business_key,
    duplicate_for_slip,
)
from haulbook.utils.amount_parser import to_money
from haulbook.utils.ids import posting_key


@dataclass(frozen=True)
class PostingContext:
    """References resolved for one source document."""

    slip: Optional[LoadingSlip] = None
    vehicle: Optional[Vehicle] = None
    party: Optional[Party] = None
    supplier: Optional[Supplier] = None
    bill: Optional[Bill] = None
    memo: Optional[Memo] = None

    @property
    def is_own_vehicle(self) -> bool:
        """Unknown vehicles are treated as market vehicles."""
        return self.vehicle is not None and self.vehicle.is_own


@dataclass(frozen=True)
class AdvanceLink:
    """Advance payment to append to a bill or memo."""

    document_type: SourceType
    document_id: str
    advance: AdvancePayment


@dataclass(frozen=True)
class ReceiptLink:
    """Amount to add to (or, when negative, take off) a bill or memo receipt."""

    document_type: SourceType
    number: str
    amount: Decimal
    date: Optional[date] = None
    # Payment entry being undone; its date no longer counts
    reversed_source_id: Optional[str] = None


@dataclass(frozen=True)
class WalletMovement:
    """Signed change to a fuel wallet balance."""

    wallet_name: str
    amount: Decimal
    create_if_missing: bool = False


@dataclass(frozen=True)
class PostingPlan:
    """Everything a source document produces."""

    ledger_entries: tuple[LedgerEntryDraft, ...] = ()
    commission_entries: tuple[CommissionEntryDraft, ...] = ()
    advances: tuple[AdvanceLink, ...] = ()
    receipts: tuple[ReceiptLink, ...] = ()
    wallet_movements: tuple[WalletMovement, ...] = ()
    fuel_transactions: tuple[FuelTransaction, ...] = ()

    @property
    def total_credit(self) -> Decimal:
        return sum((e.credit for e in self.ledger_entries), ZERO)

    @property
    def total_debit(self) -> Decimal:
        return sum((e.debit for e in self.ledger_entries), ZERO)


def _opposite(side: EntryType) -> EntryType:
    return EntryType.DEBIT if side is EntryType.CREDIT else EntryType.CREDIT


class _Poster:
    """Builds the ledger entry drafts of one source document."""

    def __init__(
        self,
        source_type: SourceType,
        source_id: str,
        on: date,
        reference_id: Optional[str] = None,
        vehicle_no: Optional[str] = None,
    ):
        self.source_type = source_type
        self.source_id = source_id
        self.on = on
        self.reference_id = reference_id
        self.vehicle_no = vehicle_no
        self.entries: list[LedgerEntryDraft] = []

    def post(
        self,
        suffix: str,
        ledger_type: LedgerType,
        reference_name: str,
        description: str,
        amount: Decimal,
        side: EntryType,
    ) -> None:
        """Add one posting. Zero lines are skipped; negative lines flip side."""
        amount = to_money(amount)
        if amount == 0:
            return
        if amount < 0:
            amount = -amount
            side = _opposite(side)
        self.entries.append(
            LedgerEntryDraft(
                entry_key=posting_key(self.source_id, suffix),
                ledger_type=ledger_type,
                source_type=self.source_type,
                source_id=self.source_id,
                reference_id=self.reference_id,
                reference_name=reference_name,
                date=self.on,
                description=description,
                debit=amount if side is EntryType.DEBIT else ZERO,
                credit=amount if side is EntryType.CREDIT else ZERO,
                vehicle_no=self.vehicle_no,
            )
        )

    def credit(self, suffix: str, ledger_type: LedgerType, reference_name: str, description: str, amount) -> None:
        self.post(suffix, ledger_type, reference_name, description, amount, EntryType.CREDIT)

    def debit(self, suffix: str, ledger_type: LedgerType, reference_name: str, description: str, amount) -> None:
        self.post(suffix, ledger_type, reference_name, description, amount, EntryType.DEBIT)


class PostingRule(ABC):
    """Strategy that derives postings for one kind of source document."""

    def resolve(self, document: Any, db: Database) -> PostingContext:
        """Resolve and validate the document's references. Read-only."""
        return PostingContext()

    @abstractmethod
    def plan(self, document: Any, context: PostingContext) -> PostingPlan:
        """Compute the document's postings and shared-state changes."""

    def reversal(self, document: Any) -> PostingPlan:
        """Shared-state changes that undo a stored document's effect."""
        return PostingPlan()


def _resolve_slip(db: Database, loading_slip_id: str) -> LoadingSlip:
    slip = db.get_loading_slip(loading_slip_id)
    if slip is None:
        raise ReferenceNotFound(document_not_found("Loading slip", loading_slip_id))
    return slip


class BillRule(PostingRule):
    """Party postings per charge line, plus the party commission cut."""

    def resolve(self, bill: Bill, db: Database) -> PostingContext:
        slip = _resolve_slip(db, bill.loading_slip_id)

        existing = db.get_bill_by_number(bill.bill_number)
        if existing is not None and existing.id != bill.id:
            raise DuplicateSource(duplicate_business_key("Bill", bill.bill_number))
        existing = db.get_bill_for_slip(slip.id)
        if existing is not None and existing.id != bill.id:
            raise DuplicateSource(duplicate_for_slip("Bill", existing.bill_number, slip.slip_number))

        return PostingContext(slip=slip, party=db.get_party_by_name(bill.party))

    def plan(self, bill: Bill, context: PostingContext) -> PostingPlan:
        poster = _Poster(
            SourceType.BILL,
            bill.id,
            bill.date,
            reference_id=bill.bill_number,
            vehicle_no=context.slip.vehicle_no if context.slip else None,
        )
        label = f"Bill {bill.bill_number}"
        party = bill.party

        poster.credit("amount", LedgerType.PARTY, party, f"{label} - freight", bill.bill_amount)
        poster.credit("detention", LedgerType.PARTY, party, f"{label} - detention", bill.detention)
        poster.credit("extra", LedgerType.PARTY, party, f"{label} - extra charges", bill.extra)
        poster.credit("rto", LedgerType.PARTY, party, f"{label} - RTO", bill.rto)
        poster.debit("tds", LedgerType.PARTY, party, f"{label} - TDS deducted", bill.tds)
        poster.debit("penalties", LedgerType.PARTY, party, f"{label} - penalties", bill.penalties)
        poster.debit("mamool", LedgerType.PARTY, party, f"{label} - mamool", bill.mamool)

        commission_entries: tuple[CommissionEntryDraft, ...] = ()
        if bill.party_commission_cut > 0:
            commission_entries = (
                CommissionEntryDraft(
                    entry_key=posting_key(bill.id, "commission"),
                    party_id=context.party.id if context.party else None,
                    party_name=bill.party,
                    entry_type=EntryType.CREDIT,
                    amount=to_money(bill.party_commission_cut),
                    date=bill.date,
                    narration=f"Commission cut - Bill No. {bill.bill_number}",
                    source_type=SourceType.BILL,
                    source_id=bill.id,
                    bill_number=bill.bill_number,
                ),
            )

        return PostingPlan(ledger_entries=tuple(poster.entries), commission_entries=commission_entries)


class MemoRule(PostingRule):
    """Vehicle income for own vehicles, supplier payable for market vehicles."""

    def resolve(self, memo: Memo, db: Database) -> PostingContext:
        slip = _resolve_slip(db, memo.loading_slip_id)

        existing = db.get_memo_by_number(memo.memo_number)
        if existing is not None and existing.id != memo.id:
            raise DuplicateSource(duplicate_business_key("Memo", memo.memo_number))
        existing = db.get_memo_for_slip(slip.id)
        if existing is not None and existing.id != memo.id:
            raise DuplicateSource(duplicate_for_slip("Memo", existing.memo_number, slip.slip_number))

        return PostingContext(slip=slip, vehicle=db.get_vehicle_by_number(slip.vehicle_no))

    def plan(self, memo: Memo, context: PostingContext) -> PostingPlan:
        vehicle_no = context.slip.vehicle_no
        poster = _Poster(SourceType.MEMO, memo.id, memo.date, reference_id=memo.memo_number, vehicle_no=vehicle_no)
        freight_after_deductions = memo.freight - memo.commission - memo.mamool

        if context.is_own_vehicle:
            poster.credit(
                "freight", LedgerType.VEHICLE_INCOME, vehicle_no,
                f"Memo {memo.memo_number} - freight after deductions", freight_after_deductions,
            )
            if memo.detention > 0:
                poster.credit(
                    "detention", LedgerType.VEHICLE_INCOME, vehicle_no,
                    f"Memo {memo.memo_number} - detention charges", memo.detention,
                )
            if memo.extra > 0:
                poster.credit(
                    "extra", LedgerType.VEHICLE_INCOME, vehicle_no,
                    f"Memo {memo.memo_number} - extra charges", memo.extra,
                )
        else:
            poster.credit(
                "payable", LedgerType.SUPPLIER, memo.supplier,
                f"Market vehicle memo {memo.memo_number} - amount payable",
                freight_after_deductions + memo.detention + memo.extra,
            )

        return PostingPlan(ledger_entries=tuple(poster.entries))


class FuelRule(PostingRule):
    """Wallet credits and fuel allocations entered directly."""

    def resolve(self, txn: FuelTransaction, db: Database) -> PostingContext:
        if txn.type is not FuelTransactionType.FUEL_ALLOCATION:
            return PostingContext()
        if not txn.vehicle_no:
            raise ValidationError("Fuel allocation requires a vehicle number")
        if db.get_fuel_wallet_by_name(txn.wallet_name) is None:
            raise ReferenceNotFound(business_key_not_found("Fuel wallet", txn.wallet_name))
        return PostingContext(vehicle=db.get_vehicle_by_number(txn.vehicle_no))

    def plan(self, txn: FuelTransaction, context: PostingContext) -> PostingPlan:
        if txn.type is FuelTransactionType.WALLET_CREDIT:
            return PostingPlan(wallet_movements=(WalletMovement(txn.wallet_name, txn.amount, create_if_missing=True),))

        poster = _Poster(SourceType.FUEL, txn.id, txn.date, reference_id=txn.reference_id, vehicle_no=txn.vehicle_no)
        if context.is_own_vehicle:
            poster.debit(
                "fuel", LedgerType.VEHICLE_EXPENSE, txn.vehicle_no,
                txn.narration or f"Fuel expense for vehicle {txn.vehicle_no} from {txn.wallet_name}",
                txn.amount,
            )
        return PostingPlan(
            ledger_entries=tuple(poster.entries),
            wallet_movements=(WalletMovement(txn.wallet_name, -txn.amount),),
        )

    def reversal(self, txn: FuelTransaction) -> PostingPlan:
        if txn.type is FuelTransactionType.WALLET_CREDIT:
            return PostingPlan(wallet_movements=(WalletMovement(txn.wallet_name, -txn.amount),))
        return PostingPlan(wallet_movements=(WalletMovement(txn.wallet_name, txn.amount, create_if_missing=True),))


# Banking and cashbook rules


class CashEntryRule(PostingRule):
    """Base for the category rules of banking and cashbook entries."""

    def _poster(self, entry: CashEntry) -> _Poster:
        return _Poster(
            entry.source_type, entry.id, entry.date, reference_id=entry.reference_id, vehicle_no=entry.vehicle_no
        )

    @staticmethod
    def _require(entry: CashEntry, value: Optional[str], what: str) -> str:
        if not value:
            raise InvalidCategory(category_requires(entry.category, what))
        return value

    @staticmethod
    def _advance_mode(entry: CashEntry) -> PaymentMode:
        return PaymentMode.BANK if entry.book is CashBook.BANK else PaymentMode.CASH

    def _injected_advance(self, entry: CashEntry) -> AdvancePayment:
        return AdvancePayment(
            id=posting_key(entry.id, "advance"),
            date=entry.date,
            amount=entry.amount,
            mode=self._advance_mode(entry),
            reference=entry.payment_mode,
            description=entry.narration,
            source_type=entry.source_type,
            source_id=entry.id,
        )

    def _resolve_bill(self, entry: CashEntry, db: Database) -> PostingContext:
        number = self._require(entry, entry.reference_id, "a bill number in reference_id")
        bill = db.get_bill_by_number(number)
        if bill is None:
            raise ReferenceNotFound(business_key_not_found("Bill", number))
        return PostingContext(bill=bill)

    def _resolve_memo(self, entry: CashEntry, db: Database) -> PostingContext:
        number = self._require(entry, entry.reference_id, "a memo number in reference_id")
        memo = db.get_memo_by_number(number)
        if memo is None:
            raise ReferenceNotFound(business_key_not_found("Memo", number))
        return PostingContext(memo=memo)

    def _resolve_party(self, entry: CashEntry, db: Database) -> PostingContext:
        name = self._require(entry, entry.reference_name, "a party name in reference_name")
        party = db.get_party_by_name(name)
        if party is None:
            raise ReferenceNotFound(business_key_not_found("Party", name))
        return PostingContext(party=party)


class BillAdvanceRule(CashEntryRule):
    def resolve(self, entry: CashEntry, db: Database) -> PostingContext:
        return self._resolve_bill(entry, db)

    def plan(self, entry: CashEntry, context: PostingContext) -> PostingPlan:
        return PostingPlan(advances=(AdvanceLink(SourceType.BILL, context.bill.id, self._injected_advance(entry)),))


class BillPaymentRule(CashEntryRule):
    def resolve(self, entry: CashEntry, db: Database) -> PostingContext:
        return self._resolve_bill(entry, db)

    def plan(self, entry: CashEntry, context: PostingContext) -> PostingPlan:
        poster = self._poster(entry)
        poster.post(
            "general", LedgerType.GENERAL, entry.reference_name or entry.category,
            entry.narration or f"Payment received for bill {context.bill.bill_number}",
            entry.amount, entry.type,
        )
        return PostingPlan(
            ledger_entries=tuple(poster.entries),
            receipts=(ReceiptLink(SourceType.BILL, context.bill.bill_number, entry.amount, entry.date),),
        )

    def reversal(self, entry: CashEntry) -> PostingPlan:
        undo = ReceiptLink(SourceType.BILL, entry.reference_id, -entry.amount, reversed_source_id=entry.id)
        return PostingPlan(receipts=(undo,))


class MemoAdvanceRule(CashEntryRule):
    def resolve(self, entry: CashEntry, db: Database) -> PostingContext:
        return self._resolve_memo(entry, db)

    def plan(self, entry: CashEntry, context: PostingContext) -> PostingPlan:
        return PostingPlan(advances=(AdvanceLink(SourceType.MEMO, context.memo.id, self._injected_advance(entry)),))


class MemoPaymentRule(CashEntryRule):
    """Payment is reflected by the memo status only."""

    def resolve(self, entry: CashEntry, db: Database) -> PostingContext:
        return self._resolve_memo(entry, db)

    def plan(self, entry: CashEntry, context: PostingContext) -> PostingPlan:
        return PostingPlan(
            receipts=(ReceiptLink(SourceType.MEMO, context.memo.memo_number, entry.amount, entry.date),)
        )

    def reversal(self, entry: CashEntry) -> PostingPlan:
        undo = ReceiptLink(SourceType.MEMO, entry.reference_id, -entry.amount, reversed_source_id=entry.id)
        return PostingPlan(receipts=(undo,))


class VehicleExpenseRule(CashEntryRule):
    """Only own vehicles carry expenses; market vehicle costs are the supplier's."""

    def resolve(self, entry: CashEntry, db: Database) -> PostingContext:
        vehicle_no = self._require(entry, entry.vehicle_no, "vehicle_no")
        return PostingContext(vehicle=db.get_vehicle_by_number(vehicle_no))

    def plan(self, entry: CashEntry, context: PostingContext) -> PostingPlan:
        if not context.is_own_vehicle:
            return PostingPlan()
        poster = self._poster(entry)
        # A refund (credit entry) reduces the expense
        poster.post(
            "vehicle-expense", LedgerType.VEHICLE_EXPENSE, entry.vehicle_no,
            entry.narration or "Vehicle expense", entry.amount, entry.type,
        )
        return PostingPlan(ledger_entries=tuple(poster.entries))


class PartyCommissionRule(CashEntryRule):
    def resolve(self, entry: CashEntry, db: Database) -> PostingContext:
        return self._resolve_party(entry, db)

    def plan(self, entry: CashEntry, context: PostingContext) -> PostingPlan:
        party = context.party
        poster = self._poster(entry)
        poster.debit(
            "commission", LedgerType.COMMISSION, party.name,
            entry.narration or f"Commission paid to {party.name}", entry.amount,
        )
        commission = CommissionEntryDraft(
            entry_key=posting_key(entry.id, "commission"),
            party_id=party.id,
            party_name=party.name,
            entry_type=EntryType.DEBIT,
            amount=to_money(entry.amount),
            date=entry.date,
            narration=f"Commission payment - {entry.narration}" if entry.narration else "Commission payment",
            source_type=entry.source_type,
            source_id=entry.id,
            reference_id=entry.reference_id,
        )
        return PostingPlan(ledger_entries=tuple(poster.entries), commission_entries=(commission,))


class FuelWalletRule(CashEntryRule):
    """Top up a fuel wallet from the bank or cash book."""

    def resolve(self, entry: CashEntry, db: Database) -> PostingContext:
        if entry.type is not EntryType.DEBIT:
            raise InvalidCategory(category_requires(entry.category, "a debit entry"))
        self._require(entry, entry.reference_name, "a wallet name in reference_name")
        return PostingContext()

    def plan(self, entry: CashEntry, context: PostingContext) -> PostingPlan:
        credit = FuelTransaction(
            id=posting_key(entry.id, "wallet-credit"),
            type=FuelTransactionType.WALLET_CREDIT,
            wallet_name=entry.reference_name,
            amount=to_money(entry.amount),
            date=entry.date,
            narration=entry.narration or f"{entry.book.value.title()} debit for fuel - {entry.reference_name}",
            vehicle_no=entry.vehicle_no,
            reference_id=entry.reference_id,
            source_type=entry.source_type,
            source_id=entry.id,
        )
        return PostingPlan(
            wallet_movements=(WalletMovement(entry.reference_name, entry.amount, create_if_missing=True),),
            fuel_transactions=(credit,),
        )

    def reversal(self, entry: CashEntry) -> PostingPlan:
        return PostingPlan(wallet_movements=(WalletMovement(entry.reference_name, -entry.amount),))


class PartyOnAccountRule(CashEntryRule):
    """Money received from a party reduces what it owes, and vice versa."""

    def resolve(self, entry: CashEntry, db: Database) -> PostingContext:
        return self._resolve_party(entry, db)

    def plan(self, entry: CashEntry, context: PostingContext) -> PostingPlan:
        poster = self._poster(entry)
        poster.post(
            "party", LedgerType.PARTY, context.party.name,
            entry.narration or "On account payment", entry.amount, _opposite(entry.type),
        )
        return PostingPlan(ledger_entries=tuple(poster.entries))


class SupplierPaymentRule(CashEntryRule):
    """Money paid to a supplier reduces what is owed to it, and vice versa."""

    def resolve(self, entry: CashEntry, db: Database) -> PostingContext:
        name = self._require(entry, entry.reference_name, "a supplier name in reference_name")
        supplier = db.get_supplier_by_name(name)
        if supplier is None:
            raise ReferenceNotFound(business_key_not_found("Supplier", name))
        return PostingContext(supplier=supplier)

    def plan(self, entry: CashEntry, context: PostingContext) -> PostingPlan:
        poster = self._poster(entry)
        poster.post(
            "supplier", LedgerType.SUPPLIER, context.supplier.name,
            entry.narration or f"Payment to {context.supplier.name}", entry.amount, entry.type,
        )
        return PostingPlan(ledger_entries=tuple(poster.entries))


class GeneralRule(CashEntryRule):
    """Free-form categories post to a general ledger account."""

    def plan(self, entry: CashEntry, context: PostingContext) -> PostingPlan:
        poster = self._poster(entry)
        poster.post(
            "general", LedgerType.GENERAL, entry.reference_name or entry.category,
            entry.narration or f"{entry.book.value.title()} {entry.type.value} - {entry.category}",
            entry.amount, entry.type,
        )
        return PostingPlan(ledger_entries=tuple(poster.entries))


CASH_SOURCES = (SourceType.BANKING, SourceType.CASHBOOK)


class PostingRuleDispatcher:
    """Selects the posting rule for a source document.

    Rules are keyed by ``(source_type, category)``; bills, memos and fuel
    transactions use the ``None`` category. Banking and cashbook entries with
    a category that has no dedicated rule fall back to ``GeneralRule``.
    """

    def __init__(self):
        self._rules: dict[tuple[SourceType, Optional[str]], PostingRule] = {}
        self._fallback: PostingRule = GeneralRule()

        self.register(SourceType.BILL, None, BillRule())
        self.register(SourceType.MEMO, None, MemoRule())
        self.register(SourceType.FUEL, None, FuelRule())

        category_rules = {
            CashCategory.BILL_ADVANCE: BillAdvanceRule(),
            CashCategory.BILL_PAYMENT: BillPaymentRule(),
            CashCategory.MEMO_ADVANCE: MemoAdvanceRule(),
            CashCategory.MEMO_PAYMENT: MemoPaymentRule(),
            CashCategory.VEHICLE_EXPENSE: VehicleExpenseRule(),
            CashCategory.PARTY_COMMISSION: PartyCommissionRule(),
            CashCategory.FUEL_WALLET: FuelWalletRule(),
            CashCategory.PARTY_ON_ACCOUNT: PartyOnAccountRule(),
            CashCategory.SUPPLIER_PAYMENT: SupplierPaymentRule(),
        }
        for source_type in CASH_SOURCES:
            for category, rule in category_rules.items():
                self.register(source_type, category.value, rule)

    def register(self, source_type: SourceType, category: Optional[str], rule: PostingRule) -> None:
        """Register (or replace) the rule for a dispatch key."""
        self._rules[(source_type, category)] = rule

    def rule_for(self, source_type: SourceType, document: Any) -> PostingRule:
        """Return the rule that derives postings for ``document``."""
        if source_type in CASH_SOURCES:
            return self._rules.get((source_type, document.category), self._fallback)
        return self._rules[(source_type, None)]
