"""Tests for banking and cashbook entries."""

import pytest
from datetime import date
from decimal import Decimal

from conftest import TRIP_DATE, make_memo_draft
from haulbook.domain.entities import (
    BillStatus,
    CashBook,
    CashEntryDraft,
    EntryType,
    FuelTransactionType,
    LedgerFilter,
    LedgerType,
    OwnershipType,
    SourceType,
)
from haulbook.domain.errors import (
    InsufficientWalletBalance,
    InvalidCategory,
    NotFoundError,
    ReferenceNotFound,
    ValidationError,
)


def draft(category: str, amount: str, entry_type: EntryType = EntryType.DEBIT, **fields) -> CashEntryDraft:
    return CashEntryDraft(
        type=entry_type,
        category=category,
        amount=Decimal(amount),
        date=fields.pop("on", TRIP_DATE),
        narration=fields.pop("narration", ""),
        **fields,
    )


class TestValidation:
    def test_amount_must_be_positive(self, masters, bank_service):
        with pytest.raises(ValidationError):
            bank_service.create_entry(draft("general", "0"))

    def test_category_required(self, masters, bank_service):
        with pytest.raises(ValidationError):
            bank_service.create_entry(draft("  ", "100"))

    def test_category_is_normalized(self, masters, bank_service):
        entry = bank_service.create_entry(draft("  Office Rent ", "1500")).document
        assert entry.category == "office rent"
        assert entry.payment_mode == "bank"
        assert entry.book is CashBook.BANK

    def test_delete_missing_entry(self, masters, cash_service):
        with pytest.raises(NotFoundError):
            cash_service.delete_entry("missing")


class TestBillCategories:
    def test_bill_advance_injects_advance_only(self, sample_bill, bank_service, bill_service, temp_db):
        entry = bank_service.create_entry(
            draft("bill_advance", "5000", EntryType.CREDIT, reference_id="BL-7", payment_mode="NEFT")
        ).document

        assert temp_db.list_ledger_entries(LedgerFilter(source_type=SourceType.BANKING)) == []
        bill = bill_service.get_bill(sample_bill.id)
        assert len(bill.advance_payments) == 1
        advance = bill.advance_payments[0]
        assert advance.amount == Decimal("5000.00")
        assert advance.source_id == entry.id
        assert advance.reference == "NEFT"

    def test_deleting_bill_advance_removes_only_its_advance(self, sample_bill, bank_service, bill_service):
        bill_service.add_advance_payment("BL-7", TRIP_DATE, Decimal("1000"))
        entry = bank_service.create_entry(draft("bill_advance", "5000", EntryType.CREDIT, reference_id="BL-7")).document

        assert bank_service.delete_entry(entry.id) == 0

        advances = bill_service.get_bill(sample_bill.id).advance_payments
        assert len(advances) == 1
        assert advances[0].source_id is None
        assert advances[0].amount == Decimal("1000.00")

    def test_bill_payment_marks_received_and_reverses(self, sample_bill, cash_service, bill_service, balance_service):
        entry = cash_service.create_entry(
            draft("bill_payment", "20000", EntryType.CREDIT, reference_id="BL-7", on=date(2024, 5, 2))
        ).document

        bill = bill_service.get_bill(sample_bill.id)
        assert bill.status is BillStatus.RECEIVED
        assert bill.received_amount == Decimal("20000.00")
        assert bill.received_date == date(2024, 5, 2)
        assert balance_service.get_balance(LedgerType.GENERAL, "bill_payment").amount == Decimal("20000.00")

        cash_service.delete_entry(entry.id)

        bill = bill_service.get_bill(sample_bill.id)
        assert bill.status is BillStatus.PENDING
        assert bill.received_amount is None
        assert bill.received_date is None

    def test_bill_payment_update_nets_receipt(self, sample_bill, cash_service, bill_service):
        entry = cash_service.create_entry(
            draft("bill_payment", "5000", EntryType.CREDIT, reference_id="BL-7")
        ).document

        cash_service.update_entry(entry.id, draft("bill_payment", "8000", EntryType.CREDIT, reference_id="BL-7"))

        assert bill_service.get_bill(sample_bill.id).received_amount == Decimal("8000.00")

    def test_deleting_latest_payment_restores_earlier_date(self, sample_bill, cash_service, bank_service, bill_service):
        cash_service.create_entry(draft("bill_payment", "5000", EntryType.CREDIT, reference_id="BL-7", on=date(2024, 5, 2)))
        later = bank_service.create_entry(
            draft("bill_payment", "3000", EntryType.CREDIT, reference_id="BL-7", on=date(2024, 5, 20))
        ).document
        assert bill_service.get_bill(sample_bill.id).received_date == date(2024, 5, 20)

        bank_service.delete_entry(later.id)

        bill = bill_service.get_bill(sample_bill.id)
        assert bill.status is BillStatus.RECEIVED
        assert bill.received_amount == Decimal("5000.00")
        assert bill.received_date == date(2024, 5, 2)

    def test_backdated_payment_keeps_latest_date(self, sample_bill, cash_service, bill_service):
        first = cash_service.create_entry(
            draft("bill_payment", "5000", EntryType.CREDIT, reference_id="BL-7", on=date(2024, 5, 2))
        ).document
        cash_service.create_entry(draft("bill_payment", "3000", EntryType.CREDIT, reference_id="BL-7", on=date(2024, 5, 20)))

        cash_service.update_entry(
            first.id, draft("bill_payment", "5000", EntryType.CREDIT, reference_id="BL-7", on=date(2024, 4, 28))
        )

        bill = bill_service.get_bill(sample_bill.id)
        assert bill.received_amount == Decimal("8000.00")
        assert bill.received_date == date(2024, 5, 20)

    def test_bill_payment_requires_reference(self, sample_bill, cash_service):
        with pytest.raises(InvalidCategory):
            cash_service.create_entry(draft("bill_payment", "100", EntryType.CREDIT))

    def test_bill_payment_unknown_bill(self, sample_bill, cash_service, temp_db):
        with pytest.raises(ReferenceNotFound):
            cash_service.create_entry(draft("bill_payment", "100", EntryType.CREDIT, reference_id="BL-404"))
        assert temp_db.list_cash_entries(CashBook.CASH) == []


class TestMemoCategories:
    def test_memo_advance_injects_advance(self, own_slip, memo_service, bank_service):
        memo = memo_service.create_memo(make_memo_draft(own_slip.id)).document

        result = bank_service.create_entry(draft("memo_advance", "2000", reference_id="M-1"))

        assert result.postings == ()
        advances = memo_service.get_memo(memo.id).advance_payments
        assert [a.amount for a in advances] == [Decimal("2000.00")]

    def test_memo_advance_unknown_memo(self, masters, bank_service):
        with pytest.raises(ReferenceNotFound):
            bank_service.create_entry(draft("memo_advance", "2000", reference_id="M-404"))


class TestVehicleExpense:
    def test_own_vehicle_expense_posts(self, masters, cash_service, balance_service):
        cash_service.create_entry(draft("vehicle_expense", "1200", vehicle_no=" ka01ab1234 ", narration="Tyre"))

        summary = balance_service.vehicle_summary("KA01AB1234")
        assert summary.expense == Decimal("1200.00")
        assert summary.net == Decimal("-1200.00")

    def test_refund_reduces_expense(self, masters, cash_service, balance_service):
        cash_service.create_entry(draft("vehicle_expense", "1200", vehicle_no="KA01AB1234"))
        cash_service.create_entry(draft("vehicle_expense", "200", EntryType.CREDIT, vehicle_no="KA01AB1234"))

        assert balance_service.vehicle_summary("KA01AB1234").expense == Decimal("1000.00")

    @pytest.mark.parametrize("vehicle_no", ["MH12XY9876", "TN01ZZ0001"])
    def test_market_or_unknown_vehicle_posts_nothing(self, masters, cash_service, vehicle_no):
        result = cash_service.create_entry(draft("vehicle_expense", "900", vehicle_no=vehicle_no))

        assert result.postings == ()
        assert result.document.vehicle_no == vehicle_no

    def test_vehicle_required(self, masters, cash_service):
        with pytest.raises(InvalidCategory):
            cash_service.create_entry(draft("vehicle_expense", "900"))

    def test_registering_own_vehicle_reroutes_expense(self, masters, cash_service, master_service, balance_service):
        cash_service.create_entry(draft("vehicle_expense", "900", vehicle_no="TN01ZZ0001"))

        master_service.create_vehicle("TN01ZZ0001", OwnershipType.OWN)

        assert balance_service.vehicle_summary("TN01ZZ0001").expense == Decimal("900.00")


class TestPartyCategories:
    def test_party_commission_debits_commission_ledgers(self, sample_bill, bank_service, balance_service):
        result = bank_service.create_entry(
            draft("party_commission", "400", reference_name="Acme Cements", narration="April")
        )

        assert len(result.postings) == 1
        assert result.postings[0].ledger_type is LedgerType.COMMISSION
        assert result.postings[0].debit == Decimal("400.00")
        assert result.commission_entries[0].entry_type is EntryType.DEBIT
        assert result.commission_entries[0].narration == "Commission payment - April"

        summary = balance_service.get_party_commission_summary(party_name="Acme Cements")
        assert summary.total_credits == Decimal("1000.00")
        assert summary.total_debits == Decimal("400.00")
        assert summary.balance == Decimal("600.00")

    def test_party_commission_unknown_party(self, masters, bank_service):
        with pytest.raises(ReferenceNotFound):
            bank_service.create_entry(draft("party_commission", "400", reference_name="Nobody Ltd"))

    def test_party_on_account_reduces_receivable(self, sample_bill, bank_service, balance_service):
        bank_service.create_entry(draft("party_on_account", "3000", EntryType.CREDIT, reference_name="Acme Cements"))

        assert balance_service.get_balance(LedgerType.PARTY, "Acme Cements").amount == Decimal("17000.00")

    def test_supplier_payment_reduces_payable(self, market_slip, memo_service, bank_service, balance_service):
        memo_service.create_memo(make_memo_draft(market_slip.id))

        bank_service.create_entry(draft("supplier_payment", "2000", reference_name="Ramesh Transport"))

        assert balance_service.get_balance(LedgerType.SUPPLIER, "Ramesh Transport").amount == Decimal("7600.00")

    def test_supplier_payment_requires_name(self, masters, bank_service):
        with pytest.raises(InvalidCategory):
            bank_service.create_entry(draft("supplier_payment", "2000"))


class TestFuelWallet:
    def test_wallet_top_up_creates_wallet_and_owned_credit(self, masters, bank_service, fuel_service, master_service):
        entry = bank_service.create_entry(draft("fuel_wallet", "1000", reference_name="Diesel Card")).document

        assert master_service.get_fuel_wallet("Diesel Card").balance == Decimal("1000.00")
        txns = fuel_service.list_transactions(wallet_name="Diesel Card")
        assert len(txns) == 1
        assert txns[0].type is FuelTransactionType.WALLET_CREDIT
        assert txns[0].source_type is SourceType.BANKING
        assert txns[0].source_id == entry.id

    def test_wallet_top_up_must_be_debit(self, masters, bank_service):
        with pytest.raises(InvalidCategory):
            bank_service.create_entry(draft("fuel_wallet", "1000", EntryType.CREDIT, reference_name="HP Card"))

    def test_delete_after_wallet_spent_is_rejected(self, masters, bank_service, fuel_service, master_service):
        entry = bank_service.create_entry(draft("fuel_wallet", "1000", reference_name="Diesel Card")).document
        fuel_service.allocate_fuel("Diesel Card", "KA01AB1234", Decimal("800"), TRIP_DATE)

        with pytest.raises(InsufficientWalletBalance):
            bank_service.delete_entry(entry.id)

        assert bank_service.get_entry(entry.id) is not None
        assert master_service.get_fuel_wallet("Diesel Card").balance == Decimal("200.00")

    def test_update_moves_only_the_difference(self, masters, bank_service, fuel_service, master_service):
        entry = bank_service.create_entry(draft("fuel_wallet", "1000", reference_name="Diesel Card")).document
        fuel_service.allocate_fuel("Diesel Card", "KA01AB1234", Decimal("800"), TRIP_DATE)

        bank_service.update_entry(entry.id, draft("fuel_wallet", "1500", reference_name="Diesel Card"))

        assert master_service.get_fuel_wallet("Diesel Card").balance == Decimal("700.00")
        credits = [
            t for t in fuel_service.list_transactions(wallet_name="Diesel Card")
            if t.type is FuelTransactionType.WALLET_CREDIT
        ]
        assert [t.amount for t in credits] == [Decimal("1500.00")]

    def test_delete_reverses_top_up(self, masters, cash_service, fuel_service, master_service):
        entry = cash_service.create_entry(draft("fuel_wallet", "300", reference_name="HP Card")).document

        cash_service.delete_entry(entry.id)

        assert master_service.get_fuel_wallet("HP Card").balance == Decimal("5000.00")
        assert fuel_service.list_transactions(wallet_name="HP Card") == []


class TestGeneralCategory:
    def test_general_posts_under_category(self, masters, bank_service, balance_service):
        bank_service.create_entry(draft("office rent", "1500"))

        assert balance_service.get_balance(LedgerType.GENERAL, "office rent").amount == Decimal("-1500.00")

    def test_general_posts_under_reference_name(self, masters, cash_service, balance_service):
        cash_service.create_entry(draft("salary", "8000", reference_name="Driver Raju"))

        assert balance_service.get_balance(LedgerType.GENERAL, "Driver Raju").amount == Decimal("-8000.00")

    def test_update_replaces_posting(self, masters, bank_service, temp_db):
        entry = bank_service.create_entry(draft("office rent", "1500")).document

        bank_service.update_entry(entry.id, draft("office rent", "1700"))

        entries = temp_db.list_ledger_entries(LedgerFilter(source_id=entry.id))
        assert [(e.debit, e.credit) for e in entries] == [(Decimal("1700.00"), Decimal("0.00"))]

    def test_list_entries_by_category(self, masters, bank_service):
        bank_service.create_entry(draft("office rent", "1500"))
        bank_service.create_entry(draft("salary", "8000"))

        assert [e.category for e in bank_service.list_entries(category="SALARY")] == ["salary"]
