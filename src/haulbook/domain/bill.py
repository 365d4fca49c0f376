"""Bill domain service."""

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Optional

from haulbook.database.base import Database
from haulbook.domain.engine import PostingEngine
from haulbook.domain.entities import (
    AdvancePayment,
    Bill,
    BillDraft,
    CashCategory,
    PaymentMode,
    PostingResult,
    SourceType,
)
from haulbook.domain.errors import (
    DependencyError,
    NotFoundError,
    ValidationError,
    business_key_not_found,
    delete_blocked,
    document_not_found,
    renumber_blocked,
)
from haulbook.utils.amount_parser import to_money
from haulbook.utils.ids import new_document_id

_CHARGE_FIELDS = (
    "bill_amount",
    "detention",
    "extra",
    "rto",
    "mamool",
    "tds",
    "penalties",
    "party_commission_cut",
)


def bill_totals(draft: BillDraft) -> tuple[Decimal, Decimal]:
    """Return ``(net_amount, total_freight)`` for a bill.

    The party commission cut is settled through the party commission ledger
    and is not deducted from the net amount.
    """
    total_freight = (
        to_money(draft.bill_amount) + to_money(draft.detention) + to_money(draft.extra) + to_money(draft.rto)
    )
    net_amount = total_freight - to_money(draft.mamool) - to_money(draft.tds) - to_money(draft.penalties)
    return net_amount, total_freight


class BillService:
    """Service for managing bills and their party postings."""

    def __init__(self, db: Database, engine: Optional[PostingEngine] = None):
        """Initialize bill service.

        Args:
            db: Database instance
            engine: Posting engine; a default one when omitted
        """
        self.db = db
        self.engine = engine or PostingEngine(db)

    def _build_bill(self, bill_id: str, draft: BillDraft, previous: Optional[Bill] = None) -> Bill:
        bill_number = (draft.bill_number or "").strip()
        if not bill_number:
            raise ValidationError("Bill number cannot be empty")
        party_name = (draft.party or "").strip()
        if not party_name:
            raise ValidationError("Party cannot be empty")
        amounts = {name: to_money(getattr(draft, name)) for name in _CHARGE_FIELDS}
        for name, value in amounts.items():
            if value < 0:
                raise ValidationError(f"{name} cannot be negative")

        party = self.db.get_party_by_name(party_name)
        net_amount, total_freight = bill_totals(draft)
        bill = Bill(
            id=bill_id,
            bill_number=bill_number,
            loading_slip_id=draft.loading_slip_id,
            date=draft.date,
            party=party_name,
            party_id=party.id if party else None,
            net_amount=net_amount,
            total_freight=total_freight,
            narration=draft.narration,
            **amounts,
        )
        if previous is not None:
            # Receipts and advances are not part of the entered payload
            bill = replace(
                bill,
                status=previous.status,
                received_date=previous.received_date,
                received_amount=previous.received_amount,
                advance_payments=previous.advance_payments,
            )
        return bill

    def _require(self, bill_id: str) -> Bill:
        bill = self.db.get_bill(bill_id)
        if bill is None:
            raise NotFoundError(document_not_found("Bill", bill_id))
        return bill

    def _cash_dependents(self, bill: Bill) -> dict[str, int]:
        return {
            "injected advance payment": self.db.count_injected_advances(SourceType.BILL, bill.id),
            "payment entry": self.db.count_cash_entries_referencing(CashCategory.BILL_PAYMENT.value, bill.bill_number),
        }

    def create_bill(self, draft: BillDraft) -> PostingResult:
        """Create a bill and post it to the party ledger.

        Args:
            draft: Bill fields as entered

        Returns:
            PostingResult with the stored bill, its party postings and its
            commission entry

        Raises:
            ReferenceNotFound: If the loading slip does not exist
            DuplicateSource: If the bill number is taken or the slip is
                already billed
        """
        bill = self._build_bill(new_document_id(), draft)
        return self.engine.create(SourceType.BILL, bill, lambda: self.db.add_bill(bill))

    def update_bill(self, bill_id: str, draft: BillDraft) -> PostingResult:
        """Edit a bill and re-derive its postings.

        Raises:
            NotFoundError: If the bill does not exist
            DependencyError: If the bill number changes while cash entries
                refer to it
        """
        previous = self._require(bill_id)
        bill = self._build_bill(bill_id, draft, previous)
        if bill.bill_number != previous.bill_number and sum(self._cash_dependents(previous).values()) > 0:
            raise DependencyError(renumber_blocked("bill", previous.bill_number))
        return self.engine.update(SourceType.BILL, previous, bill, lambda: self.db.update_bill(bill))

    def delete_bill(self, bill_id: str) -> int:
        """Delete a bill together with its postings.

        Returns:
            Number of postings removed

        Raises:
            NotFoundError: If the bill does not exist
            DependencyError: If cash entries injected advances or receipts
        """
        bill = self._require(bill_id)
        dependents = self._cash_dependents(bill)
        if sum(dependents.values()) > 0:
            raise DependencyError(delete_blocked("bill", bill.bill_number, dependents))
        return self.engine.delete(SourceType.BILL, bill, lambda: self.db.delete_bill(bill_id))

    def resync_bill(self, bill_id: str) -> PostingResult:
        """Re-derive a bill's postings from its stored payload."""
        return self.rederive(self._require(bill_id))

    def rederive(self, bill: Bill) -> PostingResult:
        """Re-derive a stored bill, relinking it to its party master.

        A bill entered before its party was registered has no party ID; it
        picks one up here so party ID lookups find its commission cut.
        """
        party = self.db.get_party_by_name(bill.party)
        party_id = party.id if party else None
        if party_id == bill.party_id:
            return self.engine.resync(SourceType.BILL, bill)
        linked = replace(bill, party_id=party_id)
        return self.engine.update(SourceType.BILL, bill, linked, lambda: self.db.update_bill(linked))

    def add_advance_payment(
        self,
        bill_number: str,
        on: date,
        amount: Decimal,
        mode: PaymentMode = PaymentMode.CASH,
        reference: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Bill:
        """Record an advance received directly against a bill.

        Direct advances have no source document and post nothing.
        """
        bill = self.get_bill_by_number(bill_number)
        if bill is None:
            raise NotFoundError(business_key_not_found("Bill", bill_number))
        amount = to_money(amount)
        if amount <= 0:
            raise ValidationError("Advance amount must be greater than zero")
        advance = AdvancePayment(
            id=new_document_id(), date=on, amount=amount, mode=mode, reference=reference, description=description
        )
        self.db.add_advance_payment(SourceType.BILL, bill.id, advance)
        return self.db.get_bill(bill.id)

    def mark_received(self, bill_number: str, received_date: date, amount: Optional[Decimal] = None) -> Bill:
        """Mark a bill as received, by default for the amount still outstanding."""
        bill = self.get_bill_by_number(bill_number)
        if bill is None:
            raise NotFoundError(business_key_not_found("Bill", bill_number))
        if amount is None:
            amount = bill.net_amount - to_money(bill.received_amount)
            if amount <= 0:
                raise ValidationError(f"Bill {bill_number} is already fully received")
        amount = to_money(amount)
        if amount <= 0:
            raise ValidationError("Received amount must be greater than zero")
        self.db.adjust_bill_receipt(bill_number, amount, received_date)
        return self.db.get_bill(bill.id)

    def get_bill(self, bill_id: str) -> Optional[Bill]:
        return self.db.get_bill(bill_id)

    def get_bill_by_number(self, bill_number: str) -> Optional[Bill]:
        return self.db.get_bill_by_number(bill_number.strip())

    def list_bills(self, party: Optional[str] = None) -> list[Bill]:
        return self.db.list_bills(party=party)
