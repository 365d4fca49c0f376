"""Shared pytest fixtures for haulbook tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from haulbook.database.factories import create_sqlite_database
from haulbook.domain.balances import BalanceService
from haulbook.domain.bill import BillService
from haulbook.domain.cash_entry import CashEntryService
from haulbook.domain.engine import PostingEngine
from haulbook.domain.entities import (
    BillDraft,
    CashBook,
    LoadingSlipDraft,
    MemoDraft,
    OwnershipType,
)
from haulbook.domain.fuel import FuelService
from haulbook.domain.loading_slip import LoadingSlipService
from haulbook.domain.masters import MasterService
from haulbook.domain.memo import MemoService

TRIP_DATE = date(2024, 4, 10)


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def engine(temp_db):
    """Create a PostingEngine shared by the service fixtures."""
    return PostingEngine(temp_db)


@pytest.fixture
def master_service(temp_db, engine):
    return MasterService(temp_db, engine)


@pytest.fixture
def slip_service(temp_db, engine):
    return LoadingSlipService(temp_db, engine)


@pytest.fixture
def bill_service(temp_db, engine):
    return BillService(temp_db, engine)


@pytest.fixture
def memo_service(temp_db, engine):
    return MemoService(temp_db, engine)


@pytest.fixture
def bank_service(temp_db, engine):
    """Create a CashEntryService for the bank book."""
    return CashEntryService(temp_db, CashBook.BANK, engine)


@pytest.fixture
def cash_service(temp_db, engine):
    """Create a CashEntryService for the cash book."""
    return CashEntryService(temp_db, CashBook.CASH, engine)


@pytest.fixture
def fuel_service(temp_db, engine):
    return FuelService(temp_db, engine)


@pytest.fixture
def balance_service(temp_db):
    return BalanceService(temp_db)


@pytest.fixture
def masters(master_service):
    """Seed one party, one supplier, an own and a market vehicle, and a wallet."""
    master_service.create_party("Acme Cements")
    master_service.create_supplier("Ramesh Transport")
    master_service.create_vehicle("KA01AB1234", OwnershipType.OWN)
    master_service.create_vehicle("MH12XY9876", OwnershipType.MARKET)
    master_service.create_fuel_wallet("HP Card", Decimal("5000"))
    return master_service


def make_slip_draft(slip_number: str = "LS-101", vehicle_no: str = "KA01AB1234", **overrides) -> LoadingSlipDraft:
    fields = dict(
        slip_number=slip_number,
        date=TRIP_DATE,
        party="Acme Cements",
        vehicle_no=vehicle_no,
        from_location="Bangalore",
        to_location="Chennai",
        supplier="Ramesh Transport",
        freight=Decimal("25000"),
    )
    fields.update(overrides)
    return LoadingSlipDraft(**fields)


def make_memo_draft(loading_slip_id: str, memo_number: str = "M-1", **overrides) -> MemoDraft:
    fields = dict(
        memo_number=memo_number,
        loading_slip_id=loading_slip_id,
        date=TRIP_DATE,
        supplier="Ramesh Transport",
        freight=Decimal("10000"),
        commission=Decimal("500"),
        mamool=Decimal("200"),
        detention=Decimal("300"),
    )
    fields.update(overrides)
    return MemoDraft(**fields)


def make_bill_draft(loading_slip_id: str, bill_number: str = "BL-7", **overrides) -> BillDraft:
    fields = dict(
        bill_number=bill_number,
        loading_slip_id=loading_slip_id,
        date=TRIP_DATE,
        party="Acme Cements",
        bill_amount=Decimal("20000"),
        rto=Decimal("500"),
        mamool=Decimal("300"),
        tds=Decimal("200"),
        party_commission_cut=Decimal("1000"),
    )
    fields.update(overrides)
    return BillDraft(**fields)


@pytest.fixture
def own_slip(masters, slip_service):
    """Loading slip on the own vehicle."""
    return slip_service.create_slip(make_slip_draft())


@pytest.fixture
def market_slip(masters, slip_service):
    """Loading slip on the market vehicle."""
    return slip_service.create_slip(make_slip_draft("LS-102", vehicle_no="MH12XY9876"))


@pytest.fixture
def sample_bill(own_slip, bill_service):
    """Bill BL-7 for 20000 with RTO, mamool, TDS and a 1000 commission cut."""
    return bill_service.create_bill(make_bill_draft(own_slip.id)).document


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
