"""Reference master service: parties, suppliers, vehicles and fuel wallets."""

from decimal import Decimal
from typing import Optional

from haulbook.database.base import Database
from haulbook.domain.bill import BillService
from haulbook.domain.engine import PostingEngine
from haulbook.domain.entities import (
    CashBook,
    CashCategory,
    FuelTransactionType,
    FuelWallet,
    OwnershipType,
    Party,
    SourceType,
    Supplier,
    Vehicle,
)
from haulbook.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    business_key_not_found,
    duplicate_business_key,
)
from haulbook.logger_config import logger
from haulbook.utils.amount_parser import to_money


def normalize_vehicle_no(vehicle_no: Optional[str]) -> Optional[str]:
    """Vehicle numbers are stored trimmed and upper-cased."""
    if vehicle_no is None:
        return None
    cleaned = vehicle_no.strip().upper()
    return cleaned or None


def _require_name(kind: str, name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError(f"{kind} name cannot be empty")
    return cleaned


class MasterService:
    """Service for managing reference masters."""

    def __init__(self, db: Database, engine: Optional[PostingEngine] = None):
        """Initialize master service.

        Args:
            db: Database instance
            engine: Posting engine used to re-derive documents after
                ownership changes
        """
        self.db = db
        self.engine = engine or PostingEngine(db)

    # Parties
    def create_party(self, name: str, address: Optional[str] = None, phone: Optional[str] = None) -> int:
        """Create a party.

        Bills already entered under this name are relinked to the new party.

        Returns:
            Party ID

        Raises:
            ConflictError: If the party name is taken
        """
        name = _require_name("Party", name)
        if self.db.get_party_by_name(name) is not None:
            raise ConflictError(duplicate_business_key("Party", name))

        with self.db.transaction():
            party_id = self.db.create_party(name=name, address=address, phone=phone)
            bills = BillService(self.db, self.engine)
            for bill in self.db.list_bills(party=name):
                bills.rederive(bill)
        return party_id

    def get_party(self, name: str) -> Optional[Party]:
        return self.db.get_party_by_name(name)

    def list_parties(self) -> list[Party]:
        return self.db.list_parties()

    # Suppliers
    def create_supplier(self, name: str, address: Optional[str] = None, phone: Optional[str] = None) -> int:
        """Create a supplier.

        Returns:
            Supplier ID

        Raises:
            ConflictError: If the supplier name is taken
        """
        name = _require_name("Supplier", name)
        if self.db.get_supplier_by_name(name) is not None:
            raise ConflictError(duplicate_business_key("Supplier", name))
        return self.db.create_supplier(name=name, address=address, phone=phone)

    def get_supplier(self, name: str) -> Optional[Supplier]:
        return self.db.get_supplier_by_name(name)

    def list_suppliers(self) -> list[Supplier]:
        return self.db.list_suppliers()

    # Vehicles
    def create_vehicle(
        self,
        vehicle_no: str,
        ownership_type: OwnershipType = OwnershipType.MARKET,
        vehicle_type: Optional[str] = "Truck",
        owner_name: Optional[str] = None,
        driver_name: Optional[str] = None,
    ) -> int:
        """Register a vehicle.

        Documents already entered for an unregistered vehicle were posted as
        market vehicle documents; registering it as an own vehicle re-derives
        them.

        Returns:
            Vehicle ID

        Raises:
            ValidationError: If the vehicle number is blank
            ConflictError: If the vehicle number is taken
        """
        number = normalize_vehicle_no(vehicle_no)
        if number is None:
            raise ValidationError("Vehicle number cannot be empty")
        if self.db.get_vehicle_by_number(number) is not None:
            raise ConflictError(duplicate_business_key("Vehicle", number))

        with self.db.transaction():
            vehicle_id = self.db.create_vehicle(
                vehicle_no=number,
                ownership_type=ownership_type,
                vehicle_type=vehicle_type,
                owner_name=owner_name,
                driver_name=driver_name,
            )
            if ownership_type is OwnershipType.OWN:
                self.resync_vehicle_documents(number)
        return vehicle_id

    def get_vehicle(self, vehicle_no: str) -> Optional[Vehicle]:
        return self.db.get_vehicle_by_number(normalize_vehicle_no(vehicle_no) or "")

    def list_vehicles(self) -> list[Vehicle]:
        return self.db.list_vehicles()

    def set_vehicle_ownership(self, vehicle_no: str, ownership_type: OwnershipType) -> int:
        """Reclassify a vehicle and re-derive every document routed by it.

        Returns:
            Number of documents re-derived

        Raises:
            NotFoundError: If the vehicle is not registered
        """
        number = normalize_vehicle_no(vehicle_no) or ""
        vehicle = self.db.get_vehicle_by_number(number)
        if vehicle is None:
            raise NotFoundError(business_key_not_found("Vehicle", number))
        if vehicle.ownership_type is ownership_type:
            return 0

        with self.db.transaction():
            self.db.update_vehicle_ownership(number, ownership_type)
            count = self.resync_vehicle_documents(number)
        logger.info(f"Vehicle {number} is now {ownership_type.value}; re-derived {count} document(s)")
        return count

    def resync_vehicle_documents(self, vehicle_no: str) -> int:
        """Re-derive memos, fuel allocations and vehicle expenses for a vehicle.

        Returns:
            Number of documents re-derived
        """
        count = 0
        with self.db.transaction():
            for slip in self.db.list_loading_slips(vehicle_no=vehicle_no):
                memo = self.db.get_memo_for_slip(slip.id)
                if memo is not None:
                    self.engine.resync(SourceType.MEMO, memo)
                    count += 1
            for txn in self.db.list_fuel_transactions(vehicle_no=vehicle_no):
                if txn.type is FuelTransactionType.FUEL_ALLOCATION:
                    self.engine.resync(SourceType.FUEL, txn)
                    count += 1
            for book in CashBook:
                entries = self.db.list_cash_entries(
                    book, category=CashCategory.VEHICLE_EXPENSE.value, vehicle_no=vehicle_no
                )
                for entry in entries:
                    self.engine.resync(book.source_type, entry)
                    count += 1
        return count

    # Fuel wallets
    def create_fuel_wallet(self, name: str, opening_balance: Decimal = Decimal("0")) -> int:
        """Create a fuel wallet.

        Returns:
            Wallet ID

        Raises:
            ValidationError: If the opening balance is negative
            ConflictError: If the wallet name is taken
        """
        name = _require_name("Fuel wallet", name)
        opening_balance = to_money(opening_balance)
        if opening_balance < 0:
            raise ValidationError("Opening balance cannot be negative")
        if self.db.get_fuel_wallet_by_name(name) is not None:
            raise ConflictError(duplicate_business_key("Fuel wallet", name))
        return self.db.create_fuel_wallet(name, opening_balance)

    def get_fuel_wallet(self, name: str) -> Optional[FuelWallet]:
        return self.db.get_fuel_wallet_by_name(name)

    def list_fuel_wallets(self) -> list[FuelWallet]:
        return self.db.list_fuel_wallets()
