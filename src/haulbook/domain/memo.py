"""Memo domain service."""

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Optional

from haulbook.database.base import Database
from haulbook.domain.engine import PostingEngine
from haulbook.domain.entities import (
    AdvancePayment,
    CashCategory,
    Memo,
    MemoDraft,
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

_AMOUNT_FIELDS = ("freight", "commission", "mamool", "detention", "extra", "rto")


def memo_net_amount(draft: MemoDraft) -> Decimal:
    """Freight less commission and mamool, plus detention and extra."""
    return (
        to_money(draft.freight)
        - to_money(draft.commission)
        - to_money(draft.mamool)
        + to_money(draft.detention)
        + to_money(draft.extra)
    )


class MemoService:
    """Service for managing memos and their vehicle or supplier postings."""

    def __init__(self, db: Database, engine: Optional[PostingEngine] = None):
        self.db = db
        self.engine = engine or PostingEngine(db)

    def _build_memo(self, memo_id: str, draft: MemoDraft, previous: Optional[Memo] = None) -> Memo:
        memo_number = (draft.memo_number or "").strip()
        if not memo_number:
            raise ValidationError("Memo number cannot be empty")
        supplier = (draft.supplier or "").strip()
        if not supplier:
            raise ValidationError("Supplier cannot be empty")
        amounts = {name: to_money(getattr(draft, name)) for name in _AMOUNT_FIELDS}
        for name, value in amounts.items():
            if value < 0:
                raise ValidationError(f"{name} cannot be negative")

        memo = Memo(
            id=memo_id,
            memo_number=memo_number,
            loading_slip_id=draft.loading_slip_id,
            date=draft.date,
            supplier=supplier,
            net_amount=memo_net_amount(draft),
            narration=draft.narration,
            **amounts,
        )
        if previous is not None:
            memo = replace(
                memo,
                status=previous.status,
                paid_date=previous.paid_date,
                paid_amount=previous.paid_amount,
                advance_payments=previous.advance_payments,
            )
        return memo

    def _require(self, memo_id: str) -> Memo:
        memo = self.db.get_memo(memo_id)
        if memo is None:
            raise NotFoundError(document_not_found("Memo", memo_id))
        return memo

    def _cash_dependents(self, memo: Memo) -> dict[str, int]:
        return {
            "injected advance payment": self.db.count_injected_advances(SourceType.MEMO, memo.id),
            "payment entry": self.db.count_cash_entries_referencing(CashCategory.MEMO_PAYMENT.value, memo.memo_number),
        }

    def create_memo(self, draft: MemoDraft) -> PostingResult:
        """Create a memo and post it by the slip vehicle's ownership.

        Raises:
            ReferenceNotFound: If the loading slip does not exist
            DuplicateSource: If the memo number is taken or the slip already
                has a memo
        """
        memo = self._build_memo(new_document_id(), draft)
        return self.engine.create(SourceType.MEMO, memo, lambda: self.db.add_memo(memo))

    def update_memo(self, memo_id: str, draft: MemoDraft) -> PostingResult:
        """Edit a memo and re-derive its postings."""
        previous = self._require(memo_id)
        memo = self._build_memo(memo_id, draft, previous)
        if memo.memo_number != previous.memo_number and sum(self._cash_dependents(previous).values()) > 0:
            raise DependencyError(renumber_blocked("memo", previous.memo_number))
        return self.engine.update(SourceType.MEMO, previous, memo, lambda: self.db.update_memo(memo))

    def delete_memo(self, memo_id: str) -> int:
        """Delete a memo together with its postings.

        Returns:
            Number of postings removed
        """
        memo = self._require(memo_id)
        dependents = self._cash_dependents(memo)
        if sum(dependents.values()) > 0:
            raise DependencyError(delete_blocked("memo", memo.memo_number, dependents))
        return self.engine.delete(SourceType.MEMO, memo, lambda: self.db.delete_memo(memo_id))

    def resync_memo(self, memo_id: str) -> PostingResult:
        return self.engine.resync(SourceType.MEMO, self._require(memo_id))

    def add_advance_payment(
        self,
        memo_number: str,
        on: date,
        amount: Decimal,
        mode: PaymentMode = PaymentMode.CASH,
        reference: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Memo:
        """Record an advance paid directly against a memo."""
        memo = self.get_memo_by_number(memo_number)
        if memo is None:
            raise NotFoundError(business_key_not_found("Memo", memo_number))
        amount = to_money(amount)
        if amount <= 0:
            raise ValidationError("Advance amount must be greater than zero")
        advance = AdvancePayment(
            id=new_document_id(), date=on, amount=amount, mode=mode, reference=reference, description=description
        )
        self.db.add_advance_payment(SourceType.MEMO, memo.id, advance)
        return self.db.get_memo(memo.id)

    def mark_paid(self, memo_number: str, paid_date: date, amount: Optional[Decimal] = None) -> Memo:
        """Mark a memo as paid, by default for the amount still outstanding."""
        memo = self.get_memo_by_number(memo_number)
        if memo is None:
            raise NotFoundError(business_key_not_found("Memo", memo_number))
        if amount is None:
            amount = memo.net_amount - to_money(memo.paid_amount)
            if amount <= 0:
                raise ValidationError(f"Memo {memo_number} is already fully paid")
        amount = to_money(amount)
        if amount <= 0:
            raise ValidationError("Paid amount must be greater than zero")
        self.db.adjust_memo_payment(memo_number, amount, paid_date)
        return self.db.get_memo(memo.id)

    def get_memo(self, memo_id: str) -> Optional[Memo]:
        return self.db.get_memo(memo_id)

    def get_memo_by_number(self, memo_number: str) -> Optional[Memo]:
        return self.db.get_memo_by_number(memo_number.strip())

    def list_memos(self, supplier: Optional[str] = None) -> list[Memo]:
        return self.db.list_memos(supplier=supplier)
