"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, including the translation of
stored strings into domain enums.
"""

from decimal import Decimal
from typing import Optional

from haulbook.domain import entities as domain
from haulbook.database.models import (
    Party as ORMParty,
    Supplier as ORMSupplier,
    Vehicle as ORMVehicle,
    FuelWallet as ORMFuelWallet,
    LoadingSlip as ORMLoadingSlip,
    Bill as ORMBill,
    Memo as ORMMemo,
    AdvancePayment as ORMAdvancePayment,
    CashEntryMixin,
    FuelTransaction as ORMFuelTransaction,
    LedgerEntry as ORMLedgerEntry,
    PartyCommissionEntry as ORMPartyCommissionEntry,
    ReconciliationIssue as ORMReconciliationIssue,
)


def _money(value) -> Decimal:
    return Decimal(value) if value is not None else Decimal("0")


def _optional_money(value) -> Optional[Decimal]:
    return Decimal(value) if value is not None else None


def party_to_domain(orm_party: ORMParty) -> domain.Party:
    """Convert SQLAlchemy Party model to domain Party entity."""
    return domain.Party(
        id=orm_party.id,
        name=orm_party.name,
        address=orm_party.address,
        phone=orm_party.phone,
        created_at=orm_party.created_at,
    )


def supplier_to_domain(orm_supplier: ORMSupplier) -> domain.Supplier:
    """Convert SQLAlchemy Supplier model to domain Supplier entity."""
    return domain.Supplier(
        id=orm_supplier.id,
        name=orm_supplier.name,
        address=orm_supplier.address,
        phone=orm_supplier.phone,
        created_at=orm_supplier.created_at,
    )


def vehicle_to_domain(orm_vehicle: ORMVehicle) -> domain.Vehicle:
    """Convert SQLAlchemy Vehicle model to domain Vehicle entity."""
    return domain.Vehicle(
        id=orm_vehicle.id,
        vehicle_no=orm_vehicle.vehicle_no,
        ownership_type=domain.OwnershipType(orm_vehicle.ownership_type),
        vehicle_type=orm_vehicle.vehicle_type,
        owner_name=orm_vehicle.owner_name,
        driver_name=orm_vehicle.driver_name,
        created_at=orm_vehicle.created_at,
    )


def fuel_wallet_to_domain(orm_wallet: ORMFuelWallet) -> domain.FuelWallet:
    """Convert SQLAlchemy FuelWallet model to domain FuelWallet entity."""
    return domain.FuelWallet(
        id=orm_wallet.id,
        name=orm_wallet.name,
        balance=_money(orm_wallet.balance),
        created_at=orm_wallet.created_at,
    )


def loading_slip_to_domain(orm_slip: ORMLoadingSlip) -> domain.LoadingSlip:
    """Convert SQLAlchemy LoadingSlip model to domain LoadingSlip entity."""
    return domain.LoadingSlip(
        id=orm_slip.id,
        slip_number=orm_slip.slip_number,
        date=orm_slip.date,
        party=orm_slip.party,
        vehicle_no=orm_slip.vehicle_no,
        from_location=orm_slip.from_location,
        to_location=orm_slip.to_location,
        supplier=orm_slip.supplier,
        freight=_money(orm_slip.freight),
        weight=_money(orm_slip.weight),
        advance=_money(orm_slip.advance),
        rto=_money(orm_slip.rto),
        total_freight=_money(orm_slip.total_freight),
        balance=_money(orm_slip.balance),
        material=orm_slip.material,
        narration=orm_slip.narration,
    )


def advance_payment_to_domain(orm_advance: ORMAdvancePayment) -> domain.AdvancePayment:
    """Convert SQLAlchemy AdvancePayment model to domain AdvancePayment entity."""
    return domain.AdvancePayment(
        id=orm_advance.id,
        date=orm_advance.date,
        amount=_money(orm_advance.amount),
        mode=domain.PaymentMode(orm_advance.mode),
        reference=orm_advance.reference,
        description=orm_advance.description,
        source_type=domain.SourceType(orm_advance.source_type) if orm_advance.source_type else None,
        source_id=orm_advance.source_id,
    )


def bill_to_domain(orm_bill: ORMBill) -> domain.Bill:
    """Convert SQLAlchemy Bill model to domain Bill entity."""
    return domain.Bill(
        id=orm_bill.id,
        bill_number=orm_bill.bill_number,
        loading_slip_id=orm_bill.loading_slip_id,
        date=orm_bill.date,
        party=orm_bill.party,
        party_id=orm_bill.party_id,
        bill_amount=_money(orm_bill.bill_amount),
        detention=_money(orm_bill.detention),
        extra=_money(orm_bill.extra),
        rto=_money(orm_bill.rto),
        mamool=_money(orm_bill.mamool),
        tds=_money(orm_bill.tds),
        penalties=_money(orm_bill.penalties),
        party_commission_cut=_money(orm_bill.party_commission_cut),
        net_amount=_money(orm_bill.net_amount),
        total_freight=_money(orm_bill.total_freight),
        status=domain.BillStatus(orm_bill.status),
        received_date=orm_bill.received_date,
        received_amount=_optional_money(orm_bill.received_amount),
        advance_payments=tuple(advance_payment_to_domain(a) for a in orm_bill.advance_payments),
        narration=orm_bill.narration,
    )


def memo_to_domain(orm_memo: ORMMemo) -> domain.Memo:
    """Convert SQLAlchemy Memo model to domain Memo entity."""
    return domain.Memo(
        id=orm_memo.id,
        memo_number=orm_memo.memo_number,
        loading_slip_id=orm_memo.loading_slip_id,
        date=orm_memo.date,
        supplier=orm_memo.supplier,
        freight=_money(orm_memo.freight),
        commission=_money(orm_memo.commission),
        mamool=_money(orm_memo.mamool),
        detention=_money(orm_memo.detention),
        extra=_money(orm_memo.extra),
        rto=_money(orm_memo.rto),
        net_amount=_money(orm_memo.net_amount),
        status=domain.MemoStatus(orm_memo.status),
        paid_date=orm_memo.paid_date,
        paid_amount=_optional_money(orm_memo.paid_amount),
        advance_payments=tuple(advance_payment_to_domain(a) for a in orm_memo.advance_payments),
        narration=orm_memo.narration,
    )


def cash_entry_to_domain(orm_entry: CashEntryMixin, book: domain.CashBook) -> domain.CashEntry:
    """Convert a banking or cashbook row to a domain CashEntry entity."""
    return domain.CashEntry(
        id=orm_entry.id,
        book=book,
        type=domain.EntryType(orm_entry.type),
        category=orm_entry.category,
        amount=_money(orm_entry.amount),
        date=orm_entry.date,
        narration=orm_entry.narration,
        reference_id=orm_entry.reference_id,
        reference_name=orm_entry.reference_name,
        vehicle_no=orm_entry.vehicle_no,
        payment_mode=orm_entry.payment_mode,
        created_at=orm_entry.created_at,
    )


def fuel_transaction_to_domain(orm_txn: ORMFuelTransaction) -> domain.FuelTransaction:
    """Convert SQLAlchemy FuelTransaction model to domain FuelTransaction entity."""
    return domain.FuelTransaction(
        id=orm_txn.id,
        type=domain.FuelTransactionType(orm_txn.type),
        wallet_name=orm_txn.wallet_name,
        amount=_money(orm_txn.amount),
        date=orm_txn.date,
        narration=orm_txn.narration,
        vehicle_no=orm_txn.vehicle_no,
        reference_id=orm_txn.reference_id,
        fuel_quantity=_optional_money(orm_txn.fuel_quantity),
        rate_per_liter=_optional_money(orm_txn.rate_per_liter),
        odometer_reading=_optional_money(orm_txn.odometer_reading),
        source_type=domain.SourceType(orm_txn.source_type) if orm_txn.source_type else None,
        source_id=orm_txn.source_id,
    )


def ledger_entry_to_domain(orm_entry: ORMLedgerEntry) -> domain.LedgerEntry:
    """Convert SQLAlchemy LedgerEntry model to domain LedgerEntry entity."""
    return domain.LedgerEntry(
        id=orm_entry.id,
        entry_key=orm_entry.entry_key,
        ledger_type=domain.LedgerType(orm_entry.ledger_type),
        source_type=domain.SourceType(orm_entry.source_type),
        source_id=orm_entry.source_id,
        reference_id=orm_entry.reference_id,
        reference_name=orm_entry.reference_name,
        date=orm_entry.date,
        description=orm_entry.description,
        debit=_money(orm_entry.debit),
        credit=_money(orm_entry.credit),
        vehicle_no=orm_entry.vehicle_no,
        balance=_money(orm_entry.balance),
        created_at=orm_entry.created_at,
    )


def commission_entry_to_domain(orm_entry: ORMPartyCommissionEntry) -> domain.PartyCommissionEntry:
    """Convert SQLAlchemy PartyCommissionEntry model to domain entity."""
    return domain.PartyCommissionEntry(
        id=orm_entry.id,
        entry_key=orm_entry.entry_key,
        party_id=orm_entry.party_id,
        party_name=orm_entry.party_name,
        entry_type=domain.EntryType(orm_entry.entry_type),
        amount=_money(orm_entry.amount),
        date=orm_entry.date,
        narration=orm_entry.narration,
        source_type=domain.SourceType(orm_entry.source_type),
        source_id=orm_entry.source_id,
        bill_number=orm_entry.bill_number,
        reference_id=orm_entry.reference_id,
        created_at=orm_entry.created_at,
    )


def reconciliation_issue_to_domain(orm_issue: ORMReconciliationIssue) -> domain.ReconciliationIssue:
    """Convert SQLAlchemy ReconciliationIssue model to domain entity."""
    return domain.ReconciliationIssue(
        id=orm_issue.id,
        source_type=domain.SourceType(orm_issue.source_type),
        source_id=orm_issue.source_id,
        ledger_key=orm_issue.ledger_key,
        message=orm_issue.message,
        created_at=orm_issue.created_at,
        resolved_at=orm_issue.resolved_at,
    )
