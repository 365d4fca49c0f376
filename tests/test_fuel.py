"""Tests for fuel wallet transactions."""

import pytest
from decimal import Decimal

from conftest import TRIP_DATE
from haulbook.domain.entities import (
    CashEntryDraft,
    EntryType,
    FuelTransactionDraft,
    FuelTransactionType,
    LedgerType,
)
from haulbook.domain.errors import (
    DependencyError,
    InsufficientWalletBalance,
    NotFoundError,
    ReferenceNotFound,
    ValidationError,
)


def test_credit_creates_wallet(masters, fuel_service, master_service):
    fuel_service.credit_wallet("Shell Card", Decimal("2500"), TRIP_DATE)

    assert master_service.get_fuel_wallet("Shell Card").balance == Decimal("2500.00")


def test_credit_tops_up_existing_wallet(masters, fuel_service, master_service):
    result = fuel_service.credit_wallet("HP Card", Decimal("500"), TRIP_DATE)

    assert result.postings == ()
    assert master_service.get_fuel_wallet("HP Card").balance == Decimal("5500.00")


def test_allocation_to_own_vehicle(masters, fuel_service, master_service, balance_service):
    result = fuel_service.allocate_fuel(
        "HP Card", "ka01ab1234", Decimal("3000"), TRIP_DATE,
        fuel_quantity=Decimal("30"), rate_per_liter=Decimal("100"),
    )

    assert master_service.get_fuel_wallet("HP Card").balance == Decimal("2000.00")
    assert len(result.postings) == 1
    posting = result.postings[0]
    assert posting.ledger_type is LedgerType.VEHICLE_EXPENSE
    assert posting.reference_name == "KA01AB1234"
    assert posting.debit == Decimal("3000.00")
    assert balance_service.vehicle_summary("KA01AB1234").expense == Decimal("3000.00")
    assert result.document.fuel_quantity == Decimal("30.00")
    assert fuel_service.get_transaction(result.document.id).vehicle_no == "KA01AB1234"


def test_allocations_that_exactly_drain_wallet(masters, fuel_service, master_service):
    master_service.create_fuel_wallet("Pump Card", Decimal("0.30"))

    fuel_service.allocate_fuel("Pump Card", "KA01AB1234", Decimal("0.10"), TRIP_DATE)
    fuel_service.allocate_fuel("Pump Card", "KA01AB1234", Decimal("0.20"), TRIP_DATE)

    assert master_service.get_fuel_wallet("Pump Card").balance == Decimal("0.00")
    with pytest.raises(InsufficientWalletBalance):
        fuel_service.allocate_fuel("Pump Card", "KA01AB1234", Decimal("0.01"), TRIP_DATE)


def test_allocation_to_market_vehicle_posts_nothing(masters, fuel_service, master_service):
    result = fuel_service.allocate_fuel("HP Card", "MH12XY9876", Decimal("1000"), TRIP_DATE)

    assert result.postings == ()
    assert master_service.get_fuel_wallet("HP Card").balance == Decimal("4000.00")


def test_allocation_beyond_balance_rejected(masters, fuel_service, master_service):
    with pytest.raises(InsufficientWalletBalance):
        fuel_service.allocate_fuel("HP Card", "KA01AB1234", Decimal("5000.01"), TRIP_DATE)

    assert master_service.get_fuel_wallet("HP Card").balance == Decimal("5000.00")
    assert fuel_service.list_transactions() == []


def test_allocation_from_unknown_wallet(masters, fuel_service):
    with pytest.raises(ReferenceNotFound):
        fuel_service.allocate_fuel("No Card", "KA01AB1234", Decimal("10"), TRIP_DATE)


def test_allocation_requires_vehicle(masters, fuel_service):
    with pytest.raises(ValidationError):
        fuel_service.create_transaction(
            FuelTransactionDraft(
                type=FuelTransactionType.FUEL_ALLOCATION,
                wallet_name="HP Card",
                amount=Decimal("10"),
                date=TRIP_DATE,
                narration="",
            )
        )


def test_update_allocation_nets_wallet(masters, fuel_service, master_service, balance_service):
    txn = fuel_service.allocate_fuel("HP Card", "KA01AB1234", Decimal("3000"), TRIP_DATE).document

    fuel_service.update_transaction(
        txn.id,
        FuelTransactionDraft(
            type=FuelTransactionType.FUEL_ALLOCATION,
            wallet_name="HP Card",
            amount=Decimal("4500"),
            date=TRIP_DATE,
            narration="Long haul",
            vehicle_no="KA01AB1234",
        ),
    )

    assert master_service.get_fuel_wallet("HP Card").balance == Decimal("500.00")
    assert balance_service.vehicle_summary("KA01AB1234").expense == Decimal("4500.00")


def test_delete_allocation_restores_wallet(masters, fuel_service, master_service, temp_db):
    txn = fuel_service.allocate_fuel("HP Card", "KA01AB1234", Decimal("3000"), TRIP_DATE).document

    assert fuel_service.delete_transaction(txn.id) == 1
    assert master_service.get_fuel_wallet("HP Card").balance == Decimal("5000.00")
    assert temp_db.list_ledger_entries() == []


def test_delete_spent_credit_rejected(masters, fuel_service):
    credit = fuel_service.credit_wallet("Shell Card", Decimal("1000"), TRIP_DATE).document
    fuel_service.allocate_fuel("Shell Card", "KA01AB1234", Decimal("600"), TRIP_DATE)

    with pytest.raises(InsufficientWalletBalance):
        fuel_service.delete_transaction(credit.id)


def test_owned_credit_cannot_be_changed_directly(masters, bank_service, fuel_service):
    bank_service.create_entry(
        CashEntryDraft(
            type=EntryType.DEBIT,
            category="fuel_wallet",
            amount=Decimal("1000"),
            date=TRIP_DATE,
            narration="",
            reference_name="HP Card",
        )
    )
    owned = fuel_service.list_transactions(wallet_name="HP Card")[0]

    with pytest.raises(DependencyError):
        fuel_service.delete_transaction(owned.id)
    with pytest.raises(DependencyError):
        fuel_service.resync_transaction(owned.id)


def test_delete_missing_transaction(masters, fuel_service):
    with pytest.raises(NotFoundError):
        fuel_service.delete_transaction("missing")


def test_list_by_vehicle(masters, fuel_service):
    fuel_service.allocate_fuel("HP Card", "KA01AB1234", Decimal("100"), TRIP_DATE)
    fuel_service.allocate_fuel("HP Card", "MH12XY9876", Decimal("200"), TRIP_DATE)

    txns = fuel_service.list_transactions(vehicle_no="mh12xy9876")
    assert [t.amount for t in txns] == [Decimal("200.00")]
