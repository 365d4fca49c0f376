"""Banking and cashbook entry domain service."""

from datetime import date
from typing import Optional

from haulbook.database.base import Database
from haulbook.domain.engine import PostingEngine
from haulbook.domain.entities import (
    CashBook,
    CashEntry,
    CashEntryDraft,
    EntryType,
    PostingResult,
)
from haulbook.domain.errors import NotFoundError, ValidationError, document_not_found
from haulbook.domain.masters import normalize_vehicle_no
from haulbook.utils.amount_parser import to_money
from haulbook.utils.ids import new_document_id


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class CashEntryService:
    """Service for one cash book: the bank book or the cash book.

    The entry's category selects its posting rule. Categories without a
    dedicated rule post to the general ledger under ``reference_name`` or,
    when that is blank, under the category itself.
    """

    def __init__(self, db: Database, book: CashBook, engine: Optional[PostingEngine] = None):
        """Initialize cash entry service.

        Args:
            db: Database instance
            book: Book this service records entries in
            engine: Posting engine; a default one when omitted
        """
        self.db = db
        self.book = book
        self.engine = engine or PostingEngine(db)

    @property
    def source_type(self):
        return self.book.source_type

    def _build_entry(self, entry_id: str, draft: CashEntryDraft) -> CashEntry:
        amount = to_money(draft.amount)
        if amount <= 0:
            raise ValidationError("Amount must be greater than zero")
        category = (draft.category or "").strip().lower()
        if not category:
            raise ValidationError("Category cannot be empty")
        entry_type = EntryType(draft.type)

        return CashEntry(
            id=entry_id,
            book=self.book,
            type=entry_type,
            category=category,
            amount=amount,
            date=draft.date,
            narration=(draft.narration or "").strip(),
            reference_id=_clean(draft.reference_id),
            reference_name=_clean(draft.reference_name),
            vehicle_no=normalize_vehicle_no(draft.vehicle_no),
            payment_mode=_clean(draft.payment_mode) or self.book.value,
        )

    def _require(self, entry_id: str) -> CashEntry:
        entry = self.db.get_cash_entry(self.book, entry_id)
        if entry is None:
            raise NotFoundError(document_not_found(f"{self.book.value.title()} entry", entry_id))
        return entry

    def create_entry(self, draft: CashEntryDraft) -> PostingResult:
        """Record a movement and apply its category's posting rule.

        Args:
            draft: Entry fields as entered

        Returns:
            PostingResult with the stored entry and its postings

        Raises:
            ValidationError: If the amount is not positive or the category blank
            InvalidCategory: If the category needs a reference that is missing
            ReferenceNotFound: If the referenced bill, memo, party or supplier
                does not exist
        """
        entry = self._build_entry(new_document_id(), draft)
        return self.engine.create(self.source_type, entry, lambda: self.db.add_cash_entry(entry))

    def update_entry(self, entry_id: str, draft: CashEntryDraft) -> PostingResult:
        """Edit an entry and re-derive everything it produced.

        Raises:
            NotFoundError: If the entry does not exist
        """
        previous = self._require(entry_id)
        entry = self._build_entry(entry_id, draft)
        return self.engine.update(self.source_type, previous, entry, lambda: self.db.update_cash_entry(entry))

    def delete_entry(self, entry_id: str) -> int:
        """Delete an entry, removing its postings, advances and wallet credit.

        Returns:
            Number of postings removed

        Raises:
            NotFoundError: If the entry does not exist
            InsufficientWalletBalance: If the fuel it paid for has already
                been allocated
        """
        entry = self._require(entry_id)
        return self.engine.delete(self.source_type, entry, lambda: self.db.delete_cash_entry(self.book, entry_id))

    def resync_entry(self, entry_id: str) -> PostingResult:
        return self.engine.resync(self.source_type, self._require(entry_id))

    def get_entry(self, entry_id: str) -> Optional[CashEntry]:
        return self.db.get_cash_entry(self.book, entry_id)

    def list_entries(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category: Optional[str] = None,
    ) -> list[CashEntry]:
        return self.db.list_cash_entries(
            self.book, start_date=start_date, end_date=end_date, category=category.lower() if category else None
        )
