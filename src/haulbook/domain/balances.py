"""Balance and summary readers.

Balances are always folded from ledger entries at read time. The ``balance``
column stored on each entry is a write-time cache and is never read here.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from haulbook.database.base import Database
from haulbook.domain.engine import ledger_key
from haulbook.domain.entities import (
    ZERO,
    BillStatus,
    CashBook,
    CashEntry,
    CommissionSummary,
    EntryType,
    LedgerBalance,
    LedgerEntry,
    LedgerFilter,
    LedgerSummary,
    LedgerType,
    PartyCommissionEntry,
    PendingBill,
    ReconciliationIssue,
    VehicleSummary,
)


def _ordered(entries: Iterable[LedgerEntry]) -> list[LedgerEntry]:
    return sorted(entries, key=lambda e: (e.date, e.created_at, e.id))


def compute_balance(entries: Iterable[LedgerEntry], key: Optional[str] = None) -> Decimal:
    """Fold ``credit - debit`` over entries in chronological order.

    Args:
        entries: Ledger entries in any order
        key: Reference name to restrict the fold to, or None for all

    Returns:
        Folded balance
    """
    balance = ZERO
    for entry in _ordered(e for e in entries if key is None or e.reference_name == key):
        balance += entry.credit - entry.debit
    return balance


def running_balances(entries: Iterable[LedgerEntry]) -> list[tuple[LedgerEntry, Decimal]]:
    """Pair each entry, in chronological order, with the balance after it."""
    rows = []
    balance = ZERO
    for entry in _ordered(entries):
        balance += entry.credit - entry.debit
        rows.append((entry, balance))
    return rows


def _commission_rows(entries: Iterable[PartyCommissionEntry]) -> list[tuple[PartyCommissionEntry, Decimal]]:
    rows = []
    balance = ZERO
    for entry in sorted(entries, key=lambda e: (e.date, e.created_at, e.id)):
        balance += entry.signed_amount
        rows.append((entry, balance))
    return rows


class BalanceService:
    """Read-only views over the ledger store."""

    def __init__(self, db: Database):
        """Initialize balance service.

        Args:
            db: Database instance
        """
        self.db = db

    def _stale_keys(self) -> set[str]:
        return {issue.ledger_key for issue in self.db.list_reconciliation_issues(open_only=True)}

    def _is_stale(self, ledger_type: Optional[LedgerType], key: Optional[str], stale_keys: set[str]) -> bool:
        if not stale_keys:
            return False
        if ledger_type is None:
            return True
        if key is None:
            prefix = f"{ledger_type.value}:"
            return any(k.startswith(prefix) for k in stale_keys)
        return ledger_key(ledger_type, key) in stale_keys

    def get_balance(
        self,
        ledger_type: Optional[LedgerType] = None,
        key: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> LedgerBalance:
        """Fold the balance of a ledger key.

        Args:
            ledger_type: Ledger to read, or None for every ledger
            key: Reference name, or None for every key of the ledger
            start_date: Optional first date to include
            end_date: Optional last date to include

        Returns:
            LedgerBalance; ``stale`` is set when an open reconciliation issue
            touches the key
        """
        entries = self.db.list_ledger_entries(
            LedgerFilter(ledger_type=ledger_type, reference_name=key, start_date=start_date, end_date=end_date)
        )
        return LedgerBalance(
            ledger_type=ledger_type,
            key=key,
            amount=compute_balance(entries, key),
            entry_count=len(entries),
            stale=self._is_stale(ledger_type, key, self._stale_keys()),
        )

    def list_entries(self, ledger_filter: Optional[LedgerFilter] = None) -> list[LedgerEntry]:
        return self.db.list_ledger_entries(ledger_filter)

    def ledger_summary(self, reference_name: str, ledger_type: Optional[LedgerType] = None) -> LedgerSummary:
        """Totals and running balance rows for one account name."""
        entries = self.db.list_ledger_entries(LedgerFilter(ledger_type=ledger_type, reference_name=reference_name))
        rows = running_balances(entries)
        total_debit = sum((e.debit for e in entries), ZERO)
        total_credit = sum((e.credit for e in entries), ZERO)
        return LedgerSummary(
            reference_name=reference_name,
            total_debit=total_debit,
            total_credit=total_credit,
            balance=total_credit - total_debit,
            rows=tuple(rows),
        )

    def outstanding(self, ledger_type: LedgerType) -> list[LedgerBalance]:
        """Balance per reference name of a ledger, sorted by name."""
        entries = self.db.list_ledger_entries(LedgerFilter(ledger_type=ledger_type))
        grouped: dict[str, list[LedgerEntry]] = {}
        for entry in entries:
            grouped.setdefault(entry.reference_name, []).append(entry)

        stale_keys = self._stale_keys()
        return [
            LedgerBalance(
                ledger_type=ledger_type,
                key=name,
                amount=compute_balance(group),
                entry_count=len(group),
                stale=self._is_stale(ledger_type, name, stale_keys),
            )
            for name, group in sorted(grouped.items())
        ]

    def vehicle_summary(
        self, vehicle_no: str, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> VehicleSummary:
        """Income and expense posted for one vehicle."""
        vehicle_no = vehicle_no.strip().upper()
        income_entries = self.db.list_ledger_entries(
            LedgerFilter(
                ledger_type=LedgerType.VEHICLE_INCOME,
                reference_name=vehicle_no,
                start_date=start_date,
                end_date=end_date,
            )
        )
        expense_entries = self.db.list_ledger_entries(
            LedgerFilter(
                ledger_type=LedgerType.VEHICLE_EXPENSE,
                reference_name=vehicle_no,
                start_date=start_date,
                end_date=end_date,
            )
        )
        income = compute_balance(income_entries)
        # Expense entries are debits, so their fold is negative
        expense = -compute_balance(expense_entries)
        return VehicleSummary(
            vehicle_no=vehicle_no,
            income=income,
            expense=expense,
            net=income - expense,
            entry_count=len(income_entries) + len(expense_entries),
        )

    def pending_bills(self, party: Optional[str] = None) -> list[PendingBill]:
        """Bills with an unpaid remainder.

        Paid is the sum of advances plus the received amount. A bill with
        anything paid is ``partial``, otherwise ``pending``.
        """
        pending = []
        for bill in self.db.list_bills(party=party):
            paid = sum((a.amount for a in bill.advance_payments), ZERO) + (bill.received_amount or ZERO)
            remaining = bill.net_amount - paid
            if remaining <= 0:
                continue
            if bill.status is BillStatus.RECEIVED or paid > 0:
                status = "partial"
            else:
                status = "pending"
            pending.append(
                PendingBill(
                    bill_number=bill.bill_number,
                    bill_date=bill.date,
                    total_amount=bill.net_amount,
                    paid_amount=paid,
                    pending_amount=remaining,
                    status=status,
                )
            )
        return pending

    def cash_balance(self, book: CashBook, until: Optional[date] = None) -> Decimal:
        """Book balance: credits add, debits subtract."""
        balance = ZERO
        for entry in self.db.list_cash_entries(book, end_date=until):
            balance += entry.amount if entry.type is EntryType.CREDIT else -entry.amount
        return balance

    def cash_statement(self, book: CashBook, until: Optional[date] = None) -> list[tuple[CashEntry, Decimal]]:
        rows = []
        balance = ZERO
        for entry in self.db.list_cash_entries(book, end_date=until):
            balance += entry.amount if entry.type is EntryType.CREDIT else -entry.amount
            rows.append((entry, balance))
        return rows

    def get_party_commission_summary(
        self,
        party_name: Optional[str] = None,
        party_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> CommissionSummary:
        """Fold the party commission ledger.

        Args:
            party_name: Optional party name filter
            party_id: Optional party ID filter
            start_date: Optional first date to include
            end_date: Optional last date to include

        Returns:
            CommissionSummary with credits (cuts withheld), debits
            (commission paid) and their difference
        """
        entries = self.db.list_commission_entries(
            party_name=party_name, party_id=party_id, start_date=start_date, end_date=end_date
        )
        total_credits = sum((e.amount for e in entries if e.entry_type is EntryType.CREDIT), ZERO)
        total_debits = sum((e.amount for e in entries if e.entry_type is EntryType.DEBIT), ZERO)
        return CommissionSummary(
            total_credits=total_credits,
            total_debits=total_debits,
            balance=total_credits - total_debits,
            entry_count=len(entries),
            party_name=party_name,
            last_entry_date=max((e.date for e in entries), default=None),
        )

    def commission_parties(self) -> list[CommissionSummary]:
        """Per-party commission summaries sorted by party name."""
        names = sorted({e.party_name for e in self.db.list_commission_entries()})
        return [self.get_party_commission_summary(party_name=name) for name in names]

    def commission_statement(self, party_name: str) -> list[tuple[PartyCommissionEntry, Decimal]]:
        return _commission_rows(self.db.list_commission_entries(party_name=party_name))

    def reconciliation_issues(self, open_only: bool = True) -> list[ReconciliationIssue]:
        return self.db.list_reconciliation_issues(open_only=open_only)
