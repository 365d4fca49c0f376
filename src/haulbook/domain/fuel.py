"""Fuel wallet transaction domain service."""

from datetime import date
from decimal import Decimal
from typing import Optional

from haulbook.database.base import Database
from haulbook.domain.engine import PostingEngine
from haulbook.domain.entities import (
    FuelTransaction,
    FuelTransactionDraft,
    FuelTransactionType,
    PostingResult,
    SourceType,
)
from haulbook.domain.errors import (
    DependencyError,
    NotFoundError,
    ValidationError,
    document_not_found,
)
from haulbook.domain.masters import normalize_vehicle_no
from haulbook.utils.amount_parser import to_money
from haulbook.utils.ids import new_document_id


def _optional_money(value) -> Optional[Decimal]:
    return to_money(value) if value is not None else None


class FuelService:
    """Service for wallet credits and fuel allocations entered directly.

    Wallet credits created by a ``fuel_wallet`` bank or cash entry belong to
    that entry and change only through it.
    """

    def __init__(self, db: Database, engine: Optional[PostingEngine] = None):
        self.db = db
        self.engine = engine or PostingEngine(db)

    def _build_transaction(self, txn_id: str, draft: FuelTransactionDraft) -> FuelTransaction:
        amount = to_money(draft.amount)
        if amount <= 0:
            raise ValidationError("Amount must be greater than zero")
        wallet_name = (draft.wallet_name or "").strip()
        if not wallet_name:
            raise ValidationError("Wallet name cannot be empty")
        txn_type = FuelTransactionType(draft.type)

        return FuelTransaction(
            id=txn_id,
            type=txn_type,
            wallet_name=wallet_name,
            amount=amount,
            date=draft.date,
            narration=(draft.narration or "").strip(),
            vehicle_no=normalize_vehicle_no(draft.vehicle_no),
            reference_id=draft.reference_id,
            fuel_quantity=_optional_money(draft.fuel_quantity),
            rate_per_liter=_optional_money(draft.rate_per_liter),
            odometer_reading=draft.odometer_reading,
        )

    def _require_direct(self, txn_id: str) -> FuelTransaction:
        txn = self.db.get_fuel_transaction(txn_id)
        if txn is None:
            raise NotFoundError(document_not_found("Fuel transaction", txn_id))
        if txn.source_id is not None:
            raise DependencyError(
                f"Fuel transaction {txn_id} belongs to {txn.source_type.value} entry {txn.source_id}; "
                "edit or delete that entry instead"
            )
        return txn

    def create_transaction(self, draft: FuelTransactionDraft) -> PostingResult:
        """Record a wallet credit or a fuel allocation.

        Raises:
            ValidationError: If the amount is not positive, or an allocation
                has no vehicle
            ReferenceNotFound: If an allocation names an unknown wallet
            InsufficientWalletBalance: If the wallet cannot cover an allocation
        """
        txn = self._build_transaction(new_document_id(), draft)
        return self.engine.create(SourceType.FUEL, txn, lambda: self.db.add_fuel_transaction(txn))

    def credit_wallet(
        self, wallet_name: str, amount: Decimal, on: date, narration: str = "", reference_id: Optional[str] = None
    ) -> PostingResult:
        """Top up a wallet, creating it on first use."""
        return self.create_transaction(
            FuelTransactionDraft(
                type=FuelTransactionType.WALLET_CREDIT,
                wallet_name=wallet_name,
                amount=amount,
                date=on,
                narration=narration,
                reference_id=reference_id,
            )
        )

    def allocate_fuel(
        self,
        wallet_name: str,
        vehicle_no: str,
        amount: Decimal,
        on: date,
        narration: str = "",
        fuel_quantity: Optional[Decimal] = None,
        rate_per_liter: Optional[Decimal] = None,
        odometer_reading: Optional[Decimal] = None,
    ) -> PostingResult:
        """Spend wallet balance on fuel for a vehicle."""
        return self.create_transaction(
            FuelTransactionDraft(
                type=FuelTransactionType.FUEL_ALLOCATION,
                wallet_name=wallet_name,
                amount=amount,
                date=on,
                narration=narration,
                vehicle_no=vehicle_no,
                fuel_quantity=fuel_quantity,
                rate_per_liter=rate_per_liter,
                odometer_reading=odometer_reading,
            )
        )

    def update_transaction(self, txn_id: str, draft: FuelTransactionDraft) -> PostingResult:
        """Edit a directly entered fuel transaction.

        Raises:
            NotFoundError: If the transaction does not exist
            DependencyError: If a cash entry owns the transaction
        """
        previous = self._require_direct(txn_id)
        txn = self._build_transaction(txn_id, draft)
        return self.engine.update(SourceType.FUEL, previous, txn, lambda: self.db.update_fuel_transaction(txn))

    def delete_transaction(self, txn_id: str) -> int:
        """Delete a directly entered fuel transaction and undo its wallet movement.

        Returns:
            Number of postings removed
        """
        txn = self._require_direct(txn_id)
        return self.engine.delete(SourceType.FUEL, txn, lambda: self.db.delete_fuel_transaction(txn_id))

    def resync_transaction(self, txn_id: str) -> PostingResult:
        return self.engine.resync(SourceType.FUEL, self._require_direct(txn_id))

    def get_transaction(self, txn_id: str) -> Optional[FuelTransaction]:
        return self.db.get_fuel_transaction(txn_id)

    def list_transactions(
        self, wallet_name: Optional[str] = None, vehicle_no: Optional[str] = None
    ) -> list[FuelTransaction]:
        return self.db.list_fuel_transactions(wallet_name=wallet_name, vehicle_no=normalize_vehicle_no(vehicle_no))
