"""Tests for memo service."""

import pytest
from datetime import date
from decimal import Decimal

from conftest import TRIP_DATE, make_memo_draft
from haulbook.domain.entities import (
    CashEntryDraft,
    EntryType,
    LedgerType,
    MemoStatus,
    OwnershipType,
)
from haulbook.domain.errors import DependencyError, DuplicateSource, NotFoundError, ValidationError


def test_own_vehicle_memo_posts_vehicle_income(own_slip, memo_service, balance_service):
    """Test own vehicle memo: 10000 freight, 500 commission, 200 mamool, 300 detention."""
    result = memo_service.create_memo(make_memo_draft(own_slip.id))

    assert result.document.net_amount == Decimal("9600.00")
    credits = sorted(p.credit for p in result.postings)
    assert credits == [Decimal("300.00"), Decimal("9300.00")]
    assert all(p.ledger_type is LedgerType.VEHICLE_INCOME for p in result.postings)

    balance = balance_service.get_balance(LedgerType.VEHICLE_INCOME, "KA01AB1234")
    assert balance.amount == Decimal("9600.00")
    assert balance_service.get_balance(LedgerType.SUPPLIER, "Ramesh Transport").amount == Decimal("0")


def test_market_vehicle_memo_posts_supplier_payable(market_slip, memo_service, balance_service):
    result = memo_service.create_memo(make_memo_draft(market_slip.id, memo_number="M-2"))

    assert len(result.postings) == 1
    assert result.postings[0].ledger_type is LedgerType.SUPPLIER
    assert balance_service.get_balance(LedgerType.SUPPLIER, "Ramesh Transport").amount == Decimal("9600.00")
    assert balance_service.get_balance(LedgerType.VEHICLE_INCOME).amount == Decimal("0")


def test_second_memo_for_slip_rejected(own_slip, memo_service):
    memo_service.create_memo(make_memo_draft(own_slip.id))
    with pytest.raises(DuplicateSource):
        memo_service.create_memo(make_memo_draft(own_slip.id, memo_number="M-9"))


def test_ownership_change_reroutes_memo(own_slip, memo_service, master_service, balance_service):
    memo_service.create_memo(make_memo_draft(own_slip.id))

    count = master_service.set_vehicle_ownership("ka01ab1234", OwnershipType.MARKET)

    assert count == 1
    assert balance_service.get_balance(LedgerType.VEHICLE_INCOME, "KA01AB1234").amount == Decimal("0")
    assert balance_service.get_balance(LedgerType.SUPPLIER, "Ramesh Transport").amount == Decimal("9600.00")


def test_update_memo_changes_amounts(own_slip, memo_service, balance_service):
    memo = memo_service.create_memo(make_memo_draft(own_slip.id)).document

    memo_service.update_memo(memo.id, make_memo_draft(own_slip.id, detention=Decimal("0"), extra=Decimal("100")))

    assert balance_service.get_balance(LedgerType.VEHICLE_INCOME, "KA01AB1234").amount == Decimal("9400.00")


def test_memo_payment_marks_paid_and_reverses_on_delete(own_slip, memo_service, cash_service, temp_db):
    memo = memo_service.create_memo(make_memo_draft(own_slip.id)).document
    entry = cash_service.create_entry(
        CashEntryDraft(
            type=EntryType.DEBIT,
            category="memo_payment",
            amount=Decimal("9600"),
            date=TRIP_DATE,
            narration="Settled",
            reference_id="M-1",
        )
    ).document

    paid = memo_service.get_memo(memo.id)
    assert paid.status is MemoStatus.PAID
    assert paid.paid_amount == Decimal("9600.00")
    assert paid.paid_date == TRIP_DATE

    with pytest.raises(DependencyError):
        memo_service.delete_memo(memo.id)

    cash_service.delete_entry(entry.id)
    reverted = memo_service.get_memo(memo.id)
    assert reverted.status is MemoStatus.PENDING
    assert reverted.paid_amount is None
    assert reverted.paid_date is None


def test_mark_paid_unknown_memo(masters, memo_service):
    with pytest.raises(NotFoundError):
        memo_service.mark_paid("M-404", TRIP_DATE)


def test_delete_memo(own_slip, memo_service, temp_db):
    memo = memo_service.create_memo(make_memo_draft(own_slip.id)).document

    assert memo_service.delete_memo(memo.id) == 2
    assert temp_db.list_ledger_entries() == []


def _memo_payment(amount: str, on: date) -> CashEntryDraft:
    return CashEntryDraft(
        type=EntryType.DEBIT,
        category="memo_payment",
        amount=Decimal(amount),
        date=on,
        narration="",
        reference_id="M-1",
    )


def test_deleting_latest_memo_payment_restores_earlier_date(own_slip, memo_service, cash_service):
    memo = memo_service.create_memo(make_memo_draft(own_slip.id)).document
    cash_service.create_entry(_memo_payment("4000", date(2024, 4, 15)))
    later = cash_service.create_entry(_memo_payment("2000", date(2024, 4, 25))).document

    cash_service.delete_entry(later.id)

    memo = memo_service.get_memo(memo.id)
    assert memo.paid_amount == Decimal("4000.00")
    assert memo.paid_date == date(2024, 4, 15)


def test_mark_paid_defaults_to_outstanding(own_slip, memo_service):
    memo_service.create_memo(make_memo_draft(own_slip.id))
    memo_service.mark_paid("M-1", TRIP_DATE, Decimal("1600"))

    memo = memo_service.mark_paid("M-1", date(2024, 4, 20))

    assert memo.paid_amount == Decimal("9600.00")
    assert memo.paid_date == date(2024, 4, 20)
    with pytest.raises(ValidationError, match="already fully paid"):
        memo_service.mark_paid("M-1", date(2024, 4, 21))
