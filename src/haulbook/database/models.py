"""SQLAlchemy models for haulbook database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()

MONEY = Numeric(12, 2)
DOCUMENT_ID = String(32)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Party(Base):
    """Party (customer) master model."""

    __tablename__ = "parties"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    address = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class Supplier(Base):
    """Supplier master model."""

    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    address = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class Vehicle(Base):
    """Vehicle master model."""

    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True)
    vehicle_no = Column(String, unique=True, nullable=False)
    ownership_type = Column(String, default="market", nullable=False)
    vehicle_type = Column(String, default="Truck", nullable=True)
    owner_name = Column(String, nullable=True)
    driver_name = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class FuelWallet(Base):
    """Fuel wallet model. Balance only changes through atomic UPDATEs."""

    __tablename__ = "fuel_wallets"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    balance = Column(MONEY, default=0, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class LoadingSlip(Base):
    """Loading slip (trip order) model."""

    __tablename__ = "loading_slips"

    id = Column(DOCUMENT_ID, primary_key=True)
    slip_number = Column(String, unique=True, nullable=False)
    date = Column(Date, nullable=False)
    party = Column(String, nullable=False)
    vehicle_no = Column(String, nullable=False, index=True)
    from_location = Column(String, nullable=False)
    to_location = Column(String, nullable=False)
    material = Column(String, nullable=True)
    weight = Column(MONEY, default=0, nullable=False)
    supplier = Column(String, nullable=False)
    freight = Column(MONEY, nullable=False)
    advance = Column(MONEY, default=0, nullable=False)
    rto = Column(MONEY, default=0, nullable=False)
    total_freight = Column(MONEY, nullable=False)
    balance = Column(MONEY, default=0, nullable=False)
    narration = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class Bill(Base):
    """Bill model: amount receivable from a party."""

    __tablename__ = "bills"

    id = Column(DOCUMENT_ID, primary_key=True)
    bill_number = Column(String, unique=True, nullable=False)
    loading_slip_id = Column(DOCUMENT_ID, ForeignKey("loading_slips.id"), unique=True, nullable=False)
    date = Column(Date, nullable=False)
    party = Column(String, nullable=False, index=True)
    party_id = Column(Integer, ForeignKey("parties.id"), nullable=True)
    bill_amount = Column(MONEY, nullable=False)
    detention = Column(MONEY, default=0, nullable=False)
    extra = Column(MONEY, default=0, nullable=False)
    rto = Column(MONEY, default=0, nullable=False)
    mamool = Column(MONEY, default=0, nullable=False)
    tds = Column(MONEY, default=0, nullable=False)
    penalties = Column(MONEY, default=0, nullable=False)
    party_commission_cut = Column(MONEY, default=0, nullable=False)
    net_amount = Column(MONEY, default=0, nullable=False)
    total_freight = Column(MONEY, default=0, nullable=False)
    status = Column(String, default="pending", nullable=False)
    received_date = Column(Date, nullable=True)
    received_amount = Column(MONEY, nullable=True)
    narration = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    advance_payments = relationship(
        "AdvancePayment",
        back_populates="bill",
        cascade="all, delete-orphan",
        order_by=lambda: [AdvancePayment.date, AdvancePayment.created_at],
    )


class Memo(Base):
    """Memo model: amount payable to a supplier or earned by an own vehicle."""

    __tablename__ = "memos"

    id = Column(DOCUMENT_ID, primary_key=True)
    memo_number = Column(String, unique=True, nullable=False)
    loading_slip_id = Column(DOCUMENT_ID, ForeignKey("loading_slips.id"), unique=True, nullable=False)
    date = Column(Date, nullable=False)
    supplier = Column(String, nullable=False, index=True)
    freight = Column(MONEY, nullable=False)
    commission = Column(MONEY, default=0, nullable=False)
    mamool = Column(MONEY, default=0, nullable=False)
    detention = Column(MONEY, default=0, nullable=False)
    extra = Column(MONEY, default=0, nullable=False)
    rto = Column(MONEY, default=0, nullable=False)
    net_amount = Column(MONEY, default=0, nullable=False)
    status = Column(String, default="pending", nullable=False)
    paid_date = Column(Date, nullable=True)
    paid_amount = Column(MONEY, nullable=True)
    narration = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    advance_payments = relationship(
        "AdvancePayment",
        back_populates="memo",
        cascade="all, delete-orphan",
        order_by=lambda: [AdvancePayment.date, AdvancePayment.created_at],
    )


class AdvancePayment(Base):
    """Advance payment embedded in exactly one bill or memo."""

    __tablename__ = "advance_payments"

    id = Column(String, primary_key=True)
    bill_id = Column(DOCUMENT_ID, ForeignKey("bills.id"), nullable=True)
    memo_id = Column(DOCUMENT_ID, ForeignKey("memos.id"), nullable=True)
    date = Column(Date, nullable=False)
    amount = Column(MONEY, nullable=False)
    mode = Column(String, default="cash", nullable=False)
    reference = Column(String, nullable=True)
    description = Column(String, nullable=True)
    source_type = Column(String, nullable=True)
    source_id = Column(DOCUMENT_ID, nullable=True, index=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    bill = relationship("Bill", back_populates="advance_payments")
    memo = relationship("Memo", back_populates="advance_payments")


class CashEntryMixin:
    """Columns shared by the banking and cashbook tables."""

    id = Column(DOCUMENT_ID, primary_key=True)
    type = Column(String, nullable=False)
    category = Column(String, nullable=False, index=True)
    amount = Column(MONEY, nullable=False)
    date = Column(Date, nullable=False, index=True)
    narration = Column(String, nullable=False)
    reference_id = Column(String, nullable=True, index=True)
    reference_name = Column(String, nullable=True)
    vehicle_no = Column(String, nullable=True)
    payment_mode = Column(String, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class BankingEntry(CashEntryMixin, Base):
    """Bank book movement model."""

    __tablename__ = "banking_entries"


class CashbookEntry(CashEntryMixin, Base):
    """Cash book movement model."""

    __tablename__ = "cashbook_entries"


class FuelTransaction(Base):
    """Fuel wallet movement model."""

    __tablename__ = "fuel_transactions"

    id = Column(String, primary_key=True)
    type = Column(String, nullable=False)
    wallet_name = Column(String, nullable=False, index=True)
    amount = Column(MONEY, nullable=False)
    date = Column(Date, nullable=False)
    narration = Column(String, nullable=False)
    vehicle_no = Column(String, nullable=True, index=True)
    reference_id = Column(String, nullable=True)
    fuel_quantity = Column(Numeric(10, 2), nullable=True)
    rate_per_liter = Column(Numeric(10, 2), nullable=True)
    odometer_reading = Column(Numeric(12, 1), nullable=True)
    source_type = Column(String, nullable=True)
    source_id = Column(DOCUMENT_ID, nullable=True, index=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class LedgerEntry(Base):
    """Ledger posting model. ``entry_key`` is unique across all sources."""

    __tablename__ = "ledger_entries"

    id = Column(Integer, primary_key=True)
    entry_key = Column(String, unique=True, nullable=False)
    ledger_type = Column(String, nullable=False)
    source_type = Column(String, nullable=False)
    source_id = Column(DOCUMENT_ID, nullable=False)
    reference_id = Column(String, nullable=True)
    reference_name = Column(String, nullable=False)
    date = Column(Date, nullable=False)
    description = Column(String, nullable=False)
    debit = Column(MONEY, default=0, nullable=False)
    credit = Column(MONEY, default=0, nullable=False)
    vehicle_no = Column(String, nullable=True)
    balance = Column(MONEY, default=0, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_ledger_key_date", "ledger_type", "reference_name", "date"),
        Index("ix_ledger_source", "source_type", "source_id"),
        Index("ix_ledger_vehicle_date", "vehicle_no", "date"),
    )


class PartyCommissionEntry(Base):
    """Party commission ledger model."""

    __tablename__ = "party_commission_ledger"

    id = Column(Integer, primary_key=True)
    entry_key = Column(String, unique=True, nullable=False)
    party_id = Column(Integer, ForeignKey("parties.id"), nullable=True)
    party_name = Column(String, nullable=False)
    entry_type = Column(String, nullable=False)
    amount = Column(MONEY, nullable=False)
    date = Column(Date, nullable=False)
    narration = Column(String, nullable=False)
    bill_number = Column(String, nullable=True, index=True)
    reference_id = Column(String, nullable=True)
    source_type = Column(String, nullable=False)
    source_id = Column(DOCUMENT_ID, nullable=False, index=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (Index("ix_commission_party_date", "party_name", "date"),)


class ReconciliationIssue(Base):
    """Failed re-derivation record, one row per affected ledger key."""

    __tablename__ = "reconciliation_issues"

    id = Column(Integer, primary_key=True)
    source_type = Column(String, nullable=False)
    source_id = Column(DOCUMENT_ID, nullable=False, index=True)
    ledger_key = Column(String, nullable=False, index=True)
    message = Column(String, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    resolved_at = Column(DateTime, nullable=True)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
