"""Re-derivation of stored documents."""

from typing import Optional

from haulbook.database.base import Database
from haulbook.domain.bill import BillService
from haulbook.domain.cash_entry import CashEntryService
from haulbook.domain.engine import PostingEngine
from haulbook.domain.entities import CashBook, PostingResult, SourceType
from haulbook.domain.fuel import FuelService
from haulbook.domain.memo import MemoService
from haulbook.logger_config import logger


class ReconciliationService:
    """Re-derives documents from their stored payload.

    Used to clear reconciliation issues left by a failed update or delete.
    """

    def __init__(self, db: Database, engine: Optional[PostingEngine] = None):
        self.db = db
        self.engine = engine or PostingEngine(db)

    def resync_source(self, source_type: SourceType, source_id: str) -> PostingResult:
        """Re-derive one document.

        Raises:
            NotFoundError: If the document does not exist
        """
        if source_type is SourceType.BILL:
            return BillService(self.db, self.engine).resync_bill(source_id)
        if source_type is SourceType.MEMO:
            return MemoService(self.db, self.engine).resync_memo(source_id)
        if source_type is SourceType.FUEL:
            return FuelService(self.db, self.engine).resync_transaction(source_id)
        book = CashBook.BANK if source_type is SourceType.BANKING else CashBook.CASH
        return CashEntryService(self.db, book, self.engine).resync_entry(source_id)

    def resync_open_issues(self) -> int:
        """Re-derive every document with an open reconciliation issue.

        Issues whose document no longer exists are resolved without a
        re-derivation.

        Returns:
            Number of documents re-derived
        """
        sources = {(i.source_type, i.source_id) for i in self.db.list_reconciliation_issues(open_only=True)}
        count = 0
        for source_type, source_id in sorted(sources, key=lambda s: (s[0].value, s[1])):
            if self._exists(source_type, source_id):
                self.resync_source(source_type, source_id)
                count += 1
            else:
                self.db.resolve_reconciliation_issues(source_type, source_id)
                logger.info(f"Resolved issues for missing {source_type.value} {source_id}")
        return count

    def _exists(self, source_type: SourceType, source_id: str) -> bool:
        if source_type is SourceType.BILL:
            return self.db.get_bill(source_id) is not None
        if source_type is SourceType.MEMO:
            return self.db.get_memo(source_id) is not None
        if source_type is SourceType.FUEL:
            return self.db.get_fuel_transaction(source_id) is not None
        book = CashBook.BANK if source_type is SourceType.BANKING else CashBook.CASH
        return self.db.get_cash_entry(book, source_id) is not None
