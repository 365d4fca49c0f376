"""Loading slip domain service."""

from typing import Optional

from haulbook.database.base import Database
from haulbook.domain.bill import BillService
from haulbook.domain.engine import PostingEngine
from haulbook.domain.entities import LoadingSlip, LoadingSlipDraft, SourceType
from haulbook.domain.errors import (
    DependencyError,
    DuplicateSource,
    NotFoundError,
    ValidationError,
    delete_blocked,
    document_not_found,
    duplicate_business_key,
)
from haulbook.domain.masters import normalize_vehicle_no
from haulbook.logger_config import logger
from haulbook.utils.amount_parser import to_money
from haulbook.utils.ids import new_document_id


class LoadingSlipService:
    """Service for managing loading slips."""

    def __init__(self, db: Database, engine: Optional[PostingEngine] = None):
        """Initialize loading slip service.

        Args:
            db: Database instance
            engine: Posting engine used to re-derive the memo and bill of an
                edited slip
        """
        self.db = db
        self.engine = engine or PostingEngine(db)

    def _build_slip(self, slip_id: str, draft: LoadingSlipDraft) -> LoadingSlip:
        slip_number = (draft.slip_number or "").strip()
        if not slip_number:
            raise ValidationError("Slip number cannot be empty")
        vehicle_no = normalize_vehicle_no(draft.vehicle_no)
        if vehicle_no is None:
            raise ValidationError("Vehicle number cannot be empty")

        freight = to_money(draft.freight)
        advance = to_money(draft.advance)
        rto = to_money(draft.rto)
        for label, value in (("Freight", freight), ("Advance", advance), ("RTO", rto)):
            if value < 0:
                raise ValidationError(f"{label} cannot be negative")

        total_freight = to_money(draft.total_freight) if draft.total_freight is not None else freight + rto
        return LoadingSlip(
            id=slip_id,
            slip_number=slip_number,
            date=draft.date,
            party=draft.party.strip(),
            vehicle_no=vehicle_no,
            from_location=draft.from_location,
            to_location=draft.to_location,
            supplier=draft.supplier.strip(),
            freight=freight,
            weight=to_money(draft.weight),
            advance=advance,
            rto=rto,
            total_freight=total_freight,
            balance=freight - advance,
            material=draft.material,
            narration=draft.narration,
        )

    def _check_number(self, slip: LoadingSlip) -> None:
        existing = self.db.get_loading_slip_by_number(slip.slip_number)
        if existing is not None and existing.id != slip.id:
            raise DuplicateSource(duplicate_business_key("Loading slip", slip.slip_number))

    def create_slip(self, draft: LoadingSlipDraft) -> LoadingSlip:
        """Create a loading slip.

        Args:
            draft: Slip fields as entered

        Returns:
            Stored loading slip

        Raises:
            ValidationError: If a required field is blank or an amount negative
            DuplicateSource: If the slip number is taken
        """
        slip = self._build_slip(new_document_id(), draft)
        self._check_number(slip)
        saved = self.db.add_loading_slip(slip)
        logger.info(f"Created loading slip {saved.slip_number}")
        return saved

    def update_slip(self, slip_id: str, draft: LoadingSlipDraft) -> LoadingSlip:
        """Edit a loading slip and re-derive the memo and bill built on it.

        The slip's vehicle decides memo routing and is carried on bill
        postings, so both are re-derived in the same transaction.

        Raises:
            NotFoundError: If the slip does not exist
            DuplicateSource: If the new slip number is taken
        """
        if self.db.get_loading_slip(slip_id) is None:
            raise NotFoundError(document_not_found("Loading slip", slip_id))
        slip = self._build_slip(slip_id, draft)
        self._check_number(slip)

        with self.db.transaction():
            saved = self.db.update_loading_slip(slip)
            memo = self.db.get_memo_for_slip(slip_id)
            if memo is not None:
                self.engine.resync(SourceType.MEMO, memo)
            bill = self.db.get_bill_for_slip(slip_id)
            if bill is not None:
                BillService(self.db, self.engine).rederive(bill)
        logger.info(f"Updated loading slip {saved.slip_number}")
        return saved

    def delete_slip(self, slip_id: str) -> int:
        """Delete a loading slip that has no memo or bill.

        Returns:
            Number of postings removed, always 0 as slips post nothing

        Raises:
            NotFoundError: If the slip does not exist
            DependencyError: If a memo or bill is raised on the slip
        """
        slip = self.db.get_loading_slip(slip_id)
        if slip is None:
            raise NotFoundError(document_not_found("Loading slip", slip_id))

        dependents = {
            "memo": 1 if self.db.get_memo_for_slip(slip_id) is not None else 0,
            "bill": 1 if self.db.get_bill_for_slip(slip_id) is not None else 0,
        }
        if sum(dependents.values()) > 0:
            raise DependencyError(delete_blocked("loading slip", slip.slip_number, dependents))

        self.db.delete_loading_slip(slip_id)
        logger.info(f"Deleted loading slip {slip.slip_number}")
        return 0

    def get_slip(self, slip_id: str) -> Optional[LoadingSlip]:
        return self.db.get_loading_slip(slip_id)

    def get_slip_by_number(self, slip_number: str) -> Optional[LoadingSlip]:
        return self.db.get_loading_slip_by_number(slip_number)

    def list_slips(self, vehicle_no: Optional[str] = None) -> list[LoadingSlip]:
        return self.db.list_loading_slips(vehicle_no=normalize_vehicle_no(vehicle_no))
