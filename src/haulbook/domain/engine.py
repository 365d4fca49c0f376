"""Posting engine: applies posting plans and keeps them consistent.

Every source document owns a complete, current set of postings or none at
all. Creating a document inserts its plan; updating it reverts the previous
payload's effects, deletes everything the document produced and applies the
new plan; deleting it does the same without the apply step. Each of these
runs inside one database transaction together with the document write.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Callable, Optional

from sqlalchemy.exc import SQLAlchemyError

from haulbook.database.base import Database
from haulbook.domain.entities import (
    CashBook,
    CashCategory,
    LedgerEntry,
    LedgerFilter,
    LedgerType,
    PartyCommissionEntry,
    PostingResult,
    SourceType,
)
from haulbook.domain.errors import (
    InsufficientWalletBalance,
    PostingReconciliationFailure,
    ReferenceNotFound,
    business_key_not_found,
    insufficient_wallet_balance,
)
from haulbook.domain.postings import (
    PostingContext,
    PostingPlan,
    PostingRule,
    PostingRuleDispatcher,
    ReceiptLink,
    WalletMovement,
)
from haulbook.logger_config import logger


def ledger_key(ledger_type: LedgerType, reference_name: Optional[str]) -> str:
    """Return the key under which a ledger's balance is tracked."""
    return f"{ledger_type.value}:{reference_name}"


def net_wallet_movements(*plans: PostingPlan) -> list[WalletMovement]:
    """Combine the wallet movements of several plans into one per wallet.

    Updating a wallet top-up from 1000 to 1500 must only add 500, even when
    the wallet no longer holds the original 1000.
    """
    totals: dict[str, Decimal] = {}
    creatable: dict[str, bool] = {}
    for plan in plans:
        for movement in plan.wallet_movements:
            totals[movement.wallet_name] = totals.get(movement.wallet_name, Decimal("0")) + movement.amount
            creatable[movement.wallet_name] = creatable.get(movement.wallet_name, False) or movement.create_if_missing
    return [
        WalletMovement(name, amount, create_if_missing=creatable[name]) for name, amount in totals.items() if amount != 0
    ]


class PostingEngine:
    """Derives, applies and reverses postings for source documents."""

    def __init__(self, db: Database, dispatcher: Optional[PostingRuleDispatcher] = None):
        """Initialize posting engine.

        Args:
            db: Database instance
            dispatcher: Rule dispatcher; the default rule set when omitted
        """
        self.db = db
        self.dispatcher = dispatcher or PostingRuleDispatcher()

    def prepare(self, source_type: SourceType, document: Any) -> tuple[PostingRule, PostingContext, PostingPlan]:
        """Resolve references and compute the plan without writing anything.

        Raises:
            ReferenceNotFound, DuplicateSource, InvalidCategory: If the
                document cannot be posted
        """
        rule = self.dispatcher.rule_for(source_type, document)
        context = rule.resolve(document, self.db)
        return rule, context, rule.plan(document, context)

    def create(self, source_type: SourceType, document: Any, persist: Callable[[], Any]) -> PostingResult:
        """Validate, persist and post a new source document.

        Args:
            source_type: Variant of the document
            document: Document to post; its ID is already assigned
            persist: Writes the document and returns the stored version

        Returns:
            PostingResult with the stored document and its postings
        """
        _, _, plan = self.prepare(source_type, document)
        with self.db.transaction():
            saved = persist()
            for movement in net_wallet_movements(plan):
                self._move_wallet(movement)
            self._apply_receipts(plan)
            postings, commissions = self._apply_postings(plan)
        logger.info(f"Created {source_type.value} {document.id} with {len(postings)} posting(s)")
        return PostingResult(saved, postings, commissions)

    def update(
        self, source_type: SourceType, previous: Any, document: Any, persist: Optional[Callable[[], Any]] = None
    ) -> PostingResult:
        """Replace a document's postings with those of its new payload.

        The new payload is resolved and planned before anything is touched.
        When ``persist`` is omitted the stored document is re-derived as is.

        Raises:
            InsufficientWalletBalance: If undoing the previous payload would
                overdraw a fuel wallet
            PostingReconciliationFailure: If a database error interrupts the
                re-derivation; the transaction is rolled back and the
                failure recorded
        """
        _, _, plan = self.prepare(source_type, document)
        reversal = self.dispatcher.rule_for(source_type, previous).reversal(previous)
        touched = self._touched_keys(source_type, previous.id, plan)
        try:
            with self.db.transaction():
                for movement in net_wallet_movements(reversal, plan):
                    self._move_wallet(movement)
                self._apply_receipts(reversal)
                removed = self._remove_owned(source_type, previous.id)
                saved = persist() if persist is not None else document
                self._apply_receipts(plan)
                postings, commissions = self._apply_postings(plan)
                self.db.resolve_reconciliation_issues(source_type, document.id)
        except SQLAlchemyError as e:
            raise self._reconciliation_failure(source_type, document.id, touched, e)
        logger.info(f"Re-derived {source_type.value} {document.id}: removed {removed}, posted {len(postings)}")
        return PostingResult(saved, postings, commissions)

    def delete(self, source_type: SourceType, document: Any, remove: Callable[[], None]) -> int:
        """Remove a document together with everything it produced.

        Returns:
            Number of ledger and commission postings removed
        """
        reversal = self.dispatcher.rule_for(source_type, document).reversal(document)
        touched = self._touched_keys(source_type, document.id, PostingPlan())
        try:
            with self.db.transaction():
                for movement in net_wallet_movements(reversal):
                    self._move_wallet(movement)
                self._apply_receipts(reversal)
                removed = self._remove_owned(source_type, document.id)
                remove()
                self.db.resolve_reconciliation_issues(source_type, document.id)
        except SQLAlchemyError as e:
            raise self._reconciliation_failure(source_type, document.id, touched, e)
        logger.info(f"Deleted {source_type.value} {document.id} and {removed} posting(s)")
        return removed

    def resync(self, source_type: SourceType, document: Any) -> PostingResult:
        """Re-derive a stored document's postings from its own payload."""
        return self.update(source_type, document, document)

    def _remove_owned(self, source_type: SourceType, source_id: str) -> int:
        removed = self.db.delete_ledger_entries_by_source(source_type, source_id)
        removed += self.db.delete_commission_entries_by_source(source_type, source_id)
        advances = self.db.delete_advance_payments_by_source(source_type, source_id)
        owned = self.db.delete_fuel_transactions_by_source(source_type, source_id)
        logger.debug(
            f"Removed from {source_type.value} {source_id}: {removed} posting(s), "
            f"{advances} advance(s), {owned} fuel transaction(s)"
        )
        return removed

    def _apply_postings(self, plan: PostingPlan) -> tuple[tuple[LedgerEntry, ...], tuple[PartyCommissionEntry, ...]]:
        for txn in plan.fuel_transactions:
            self.db.add_fuel_transaction(txn)
        for link in plan.advances:
            self.db.add_advance_payment(link.document_type, link.document_id, link.advance)

        postings = []
        for draft in plan.ledger_entries:
            # Write-time cache only; readers fold over entries themselves
            balance = (
                self.db.ledger_balance_through(draft.ledger_type, draft.reference_name, draft.date)
                + draft.credit
                - draft.debit
            )
            entry = self.db.add_ledger_entry(draft, balance)
            logger.debug(
                f"Posted {entry.entry_key} to {entry.ledger_type.value} '{entry.reference_name}': "
                f"debit {entry.debit}, credit {entry.credit}"
            )
            postings.append(entry)

        commissions = []
        for draft in plan.commission_entries:
            commissions.append(self.db.add_commission_entry(draft))
            logger.debug(f"Posted commission {draft.entry_key} for '{draft.party_name}': {draft.amount}")

        return tuple(postings), tuple(commissions)

    def _apply_receipts(self, plan: PostingPlan) -> None:
        for receipt in plan.receipts:
            received_on = receipt.date
            if receipt.reversed_source_id is not None:
                received_on = self._latest_payment_date(receipt)
            if receipt.document_type is SourceType.BILL:
                self.db.adjust_bill_receipt(receipt.number, receipt.amount, received_on)
            else:
                self.db.adjust_memo_payment(receipt.number, receipt.amount, received_on)

    def _latest_payment_date(self, receipt: ReceiptLink) -> Optional[date]:
        """Date of the latest payment entry still standing against a bill or memo."""
        category = CashCategory.BILL_PAYMENT if receipt.document_type is SourceType.BILL else CashCategory.MEMO_PAYMENT
        dates = [
            entry.date
            for book in CashBook
            for entry in self.db.list_cash_entries(book, category=category.value)
            if entry.reference_id == receipt.number and entry.id != receipt.reversed_source_id
        ]
        return max(dates, default=None)

    def _move_wallet(self, movement: WalletMovement) -> None:
        if self.db.adjust_wallet_balance(movement.wallet_name, movement.amount):
            return

        wallet = self.db.get_fuel_wallet_by_name(movement.wallet_name)
        if wallet is None:
            if movement.amount > 0 and movement.create_if_missing:
                self.db.create_fuel_wallet(movement.wallet_name, movement.amount)
                logger.info(f"Created fuel wallet '{movement.wallet_name}'")
                return
            raise ReferenceNotFound(business_key_not_found("Fuel wallet", movement.wallet_name))
        raise InsufficientWalletBalance(
            insufficient_wallet_balance(movement.wallet_name, -movement.amount, wallet.balance)
        )

    def _touched_keys(self, source_type: SourceType, source_id: str, plan: PostingPlan) -> list[str]:
        keys = {
            ledger_key(e.ledger_type, e.reference_name)
            for e in self.db.list_ledger_entries(LedgerFilter(source_type=source_type, source_id=source_id))
        }
        keys.update(ledger_key(d.ledger_type, d.reference_name) for d in plan.ledger_entries)
        return sorted(keys) or [f"{source_type.value}:{source_id}"]

    def _reconciliation_failure(
        self, source_type: SourceType, source_id: str, touched: list[str], cause: Exception
    ) -> PostingReconciliationFailure:
        failure = PostingReconciliationFailure(source_type.value, source_id, cause)
        logger.error(str(failure))
        self.db.record_reconciliation_issues(source_type, source_id, touched, str(cause))
        return failure
