"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Optional
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from haulbook.domain.entities import (
    AdvancePayment,
    Bill,
    CashBook,
    CashEntry,
    CommissionEntryDraft,
    FuelTransaction,
    FuelWallet,
    LedgerEntry,
    LedgerEntryDraft,
    LedgerFilter,
    LedgerType,
    LoadingSlip,
    Memo,
    OwnershipType,
    Party,
    PartyCommissionEntry,
    ReconciliationIssue,
    SourceType,
    Supplier,
    Vehicle,
)


class Database(ABC):
    """Abstract database interface for haulbook.

    Every mutating method runs inside ``transaction()``. Called on its own it
    commits immediately; called inside an open transaction it only flushes,
    and the outermost block decides between commit and rollback.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def transaction(self) -> AbstractContextManager:
        """Open a (possibly nested) unit of work.

        Commits when the outermost block exits normally and rolls back the
        whole unit of work when any block raises.
        """
        pass

    # Party operations
    @abstractmethod
    def create_party(self, name: str, address: Optional[str] = None, phone: Optional[str] = None) -> int:
        """Create a party. Returns party ID."""
        pass

    @abstractmethod
    def get_party_by_name(self, name: str) -> Optional[Party]:
        """Get party by name."""
        pass

    @abstractmethod
    def list_parties(self) -> list[Party]:
        """List all parties."""
        pass

    # Supplier operations
    @abstractmethod
    def create_supplier(self, name: str, address: Optional[str] = None, phone: Optional[str] = None) -> int:
        """Create a supplier. Returns supplier ID."""
        pass

    @abstractmethod
    def get_supplier_by_name(self, name: str) -> Optional[Supplier]:
        """Get supplier by name."""
        pass

    @abstractmethod
    def list_suppliers(self) -> list[Supplier]:
        """List all suppliers."""
        pass

    # Vehicle operations
    @abstractmethod
    def create_vehicle(
        self,
        vehicle_no: str,
        ownership_type: OwnershipType,
        vehicle_type: Optional[str] = None,
        owner_name: Optional[str] = None,
        driver_name: Optional[str] = None,
    ) -> int:
        """Create a vehicle. Returns vehicle ID."""
        pass

    @abstractmethod
    def get_vehicle_by_number(self, vehicle_no: str) -> Optional[Vehicle]:
        """Get vehicle by registration number."""
        pass

    @abstractmethod
    def list_vehicles(self) -> list[Vehicle]:
        """List all vehicles."""
        pass

    @abstractmethod
    def update_vehicle_ownership(self, vehicle_no: str, ownership_type: OwnershipType) -> None:
        """Change the ownership classification of a vehicle."""
        pass

    # Fuel wallet operations
    @abstractmethod
    def create_fuel_wallet(self, name: str, balance: Decimal = Decimal("0")) -> int:
        """Create a fuel wallet. Returns wallet ID."""
        pass

    @abstractmethod
    def get_fuel_wallet_by_name(self, name: str) -> Optional[FuelWallet]:
        """Get fuel wallet by name."""
        pass

    @abstractmethod
    def list_fuel_wallets(self) -> list[FuelWallet]:
        """List all fuel wallets."""
        pass

    @abstractmethod
    def adjust_wallet_balance(self, name: str, delta: Decimal) -> bool:
        """Atomically add ``delta`` to a wallet balance.

        A negative delta is applied only when the balance covers it.

        Returns:
            True if a wallet row was updated, False if the wallet does not
            exist or cannot cover the decrement
        """
        pass

    # Loading slip operations
    @abstractmethod
    def add_loading_slip(self, slip: LoadingSlip) -> LoadingSlip:
        """Insert a loading slip."""
        pass

    @abstractmethod
    def update_loading_slip(self, slip: LoadingSlip) -> LoadingSlip:
        """Overwrite a stored loading slip."""
        pass

    @abstractmethod
    def get_loading_slip(self, slip_id: str) -> Optional[LoadingSlip]:
        """Get loading slip by ID."""
        pass

    @abstractmethod
    def get_loading_slip_by_number(self, slip_number: str) -> Optional[LoadingSlip]:
        """Get loading slip by slip number."""
        pass

    @abstractmethod
    def list_loading_slips(self, vehicle_no: Optional[str] = None) -> list[LoadingSlip]:
        """List loading slips, optionally for one vehicle."""
        pass

    @abstractmethod
    def delete_loading_slip(self, slip_id: str) -> None:
        """Delete a loading slip."""
        pass

    # Bill operations
    @abstractmethod
    def add_bill(self, bill: Bill) -> Bill:
        """Insert a bill together with its directly entered advance payments."""
        pass

    @abstractmethod
    def update_bill(self, bill: Bill) -> Bill:
        """Overwrite a stored bill's fields. Advance payments are left alone."""
        pass

    @abstractmethod
    def get_bill(self, bill_id: str) -> Optional[Bill]:
        """Get bill by ID."""
        pass

    @abstractmethod
    def get_bill_by_number(self, bill_number: str) -> Optional[Bill]:
        """Get bill by bill number."""
        pass

    @abstractmethod
    def get_bill_for_slip(self, loading_slip_id: str) -> Optional[Bill]:
        """Get the bill raised on a loading slip."""
        pass

    @abstractmethod
    def list_bills(self, party: Optional[str] = None) -> list[Bill]:
        """List bills ordered by date, optionally for one party."""
        pass

    @abstractmethod
    def delete_bill(self, bill_id: str) -> None:
        """Delete a bill and its advance payments."""
        pass

    @abstractmethod
    def adjust_bill_receipt(self, bill_number: str, amount: Decimal, received_date: Optional[date] = None) -> None:
        """Add ``amount`` (possibly negative) to a bill's received amount.

        A bill whose received amount drops to zero returns to pending.
        A positive amount keeps the later of the stored and given dates; a
        negative one takes the given date as the latest remaining receipt.
        """
        pass

    # Memo operations
    @abstractmethod
    def add_memo(self, memo: Memo) -> Memo:
        """Insert a memo together with its directly entered advance payments."""
        pass

    @abstractmethod
    def update_memo(self, memo: Memo) -> Memo:
        """Overwrite a stored memo's fields. Advance payments are left alone."""
        pass

    @abstractmethod
    def get_memo(self, memo_id: str) -> Optional[Memo]:
        """Get memo by ID."""
        pass

    @abstractmethod
    def get_memo_by_number(self, memo_number: str) -> Optional[Memo]:
        """Get memo by memo number."""
        pass

    @abstractmethod
    def get_memo_for_slip(self, loading_slip_id: str) -> Optional[Memo]:
        """Get the memo raised on a loading slip."""
        pass

    @abstractmethod
    def list_memos(self, supplier: Optional[str] = None) -> list[Memo]:
        """List memos ordered by date, optionally for one supplier."""
        pass

    @abstractmethod
    def delete_memo(self, memo_id: str) -> None:
        """Delete a memo and its advance payments."""
        pass

    @abstractmethod
    def adjust_memo_payment(self, memo_number: str, amount: Decimal, paid_date: Optional[date] = None) -> None:
        """Add ``amount`` (possibly negative) to a memo's paid amount.

        A memo whose paid amount drops to zero returns to pending.
        Dates follow the same rule as ``adjust_bill_receipt``.
        """
        pass

    # Advance payment operations
    @abstractmethod
    def add_advance_payment(self, document_type: SourceType, document_id: str, advance: AdvancePayment) -> None:
        """Append an advance payment to a bill or memo."""
        pass

    @abstractmethod
    def delete_advance_payments_by_source(self, source_type: SourceType, source_id: str) -> int:
        """Remove advances injected by a source document. Returns count removed."""
        pass

    @abstractmethod
    def count_injected_advances(self, document_type: SourceType, document_id: str) -> int:
        """Count advances on a bill or memo that were injected by cash entries."""
        pass

    # Cash entry operations
    @abstractmethod
    def add_cash_entry(self, entry: CashEntry) -> CashEntry:
        """Insert a banking or cashbook entry."""
        pass

    @abstractmethod
    def update_cash_entry(self, entry: CashEntry) -> CashEntry:
        """Overwrite a stored banking or cashbook entry."""
        pass

    @abstractmethod
    def get_cash_entry(self, book: CashBook, entry_id: str) -> Optional[CashEntry]:
        """Get a banking or cashbook entry by ID."""
        pass

    @abstractmethod
    def list_cash_entries(
        self,
        book: CashBook,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category: Optional[str] = None,
        vehicle_no: Optional[str] = None,
    ) -> list[CashEntry]:
        """List entries of one book ordered by date, with optional filters."""
        pass

    @abstractmethod
    def delete_cash_entry(self, book: CashBook, entry_id: str) -> None:
        """Delete a banking or cashbook entry."""
        pass

    @abstractmethod
    def count_cash_entries_referencing(self, category: str, reference_id: str) -> int:
        """Count entries in both books with this category and reference ID."""
        pass

    # Fuel transaction operations
    @abstractmethod
    def add_fuel_transaction(self, txn: FuelTransaction) -> FuelTransaction:
        """Insert a fuel transaction."""
        pass

    @abstractmethod
    def update_fuel_transaction(self, txn: FuelTransaction) -> FuelTransaction:
        """Overwrite a stored fuel transaction."""
        pass

    @abstractmethod
    def get_fuel_transaction(self, txn_id: str) -> Optional[FuelTransaction]:
        """Get fuel transaction by ID."""
        pass

    @abstractmethod
    def list_fuel_transactions(
        self, wallet_name: Optional[str] = None, vehicle_no: Optional[str] = None
    ) -> list[FuelTransaction]:
        """List fuel transactions ordered by date, with optional filters."""
        pass

    @abstractmethod
    def delete_fuel_transaction(self, txn_id: str) -> None:
        """Delete a fuel transaction."""
        pass

    @abstractmethod
    def delete_fuel_transactions_by_source(self, source_type: SourceType, source_id: str) -> int:
        """Remove fuel transactions owned by a source document. Returns count removed."""
        pass

    # Ledger operations
    @abstractmethod
    def add_ledger_entry(self, draft: LedgerEntryDraft, balance: Decimal) -> LedgerEntry:
        """Store a posting with its write-time running balance."""
        pass

    @abstractmethod
    def ledger_balance_through(self, ledger_type: LedgerType, reference_name: str, until: date) -> Decimal:
        """Sum credit minus debit for a ledger key up to and including a date."""
        pass

    @abstractmethod
    def list_ledger_entries(self, ledger_filter: Optional[LedgerFilter] = None) -> list[LedgerEntry]:
        """List postings ordered by date, creation time and ID."""
        pass

    @abstractmethod
    def delete_ledger_entries_by_source(self, source_type: SourceType, source_id: str) -> int:
        """Remove every posting produced by a source document. Returns count removed."""
        pass

    # Party commission ledger operations
    @abstractmethod
    def add_commission_entry(self, draft: CommissionEntryDraft) -> PartyCommissionEntry:
        """Store a party commission posting."""
        pass

    @abstractmethod
    def list_commission_entries(
        self,
        party_name: Optional[str] = None,
        party_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[PartyCommissionEntry]:
        """List party commission postings ordered by date."""
        pass

    @abstractmethod
    def delete_commission_entries_by_source(self, source_type: SourceType, source_id: str) -> int:
        """Remove commission postings produced by a source document. Returns count removed."""
        pass

    # Reconciliation issue operations
    @abstractmethod
    def record_reconciliation_issues(
        self, source_type: SourceType, source_id: str, ledger_keys: list[str], message: str
    ) -> None:
        """Record a failed re-derivation, one row per affected ledger key.

        Written outside any open unit of work so the record survives its
        rollback.
        """
        pass

    @abstractmethod
    def resolve_reconciliation_issues(self, source_type: SourceType, source_id: str) -> int:
        """Mark open issues for a source as resolved. Returns count resolved."""
        pass

    @abstractmethod
    def list_reconciliation_issues(self, open_only: bool = True) -> list[ReconciliationIssue]:
        """List reconciliation issues."""
        pass
