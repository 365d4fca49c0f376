"""Bank book and cash book commands."""

import click
from haulbook.cli.date_filters import period_options, pop_period_flags, resolve_cli_date_range
from haulbook.cli.error_handling import handle_domain_error, parse_amount_or_exit, parse_date_or_exit
from haulbook.cli.formatting import echo_postings
from haulbook.domain.balances import BalanceService
from haulbook.domain.cash_entry import CashEntryService
from haulbook.domain.entities import CashBook, CashCategory, CashEntryDraft, EntryType

ENTRY_TYPES = click.Choice([t.value for t in EntryType], case_sensitive=False)
KNOWN_CATEGORIES = ", ".join(c.value for c in CashCategory)


def make_book_group(book: CashBook) -> click.Group:
    """Build the command group for one cash book."""
    label = "bank book" if book is CashBook.BANK else "cash book"

    @click.group(help=f"Manage {label} entries.")
    def book_group():
        pass

    @book_group.command("add")
    @click.argument("entry_type", metavar="credit|debit", type=ENTRY_TYPES)
    @click.argument("amount")
    @click.option("--category", required=True, help=f"Entry category ({KNOWN_CATEGORIES} or any other label)")
    @click.option("--date", "entry_date", default="today", show_default=True, help="Entry date")
    @click.option("--narration", default="", help="Free-text narration")
    @click.option("--ref-id", "reference_id", help="Bill or memo number the entry settles")
    @click.option("--ref-name", "reference_name", help="Party, supplier, wallet or account name")
    @click.option("--vehicle", "vehicle_no", help="Vehicle number for vehicle expenses")
    @click.option("--mode", "payment_mode", help=f"Payment mode (defaults to {book.value})")
    @click.pass_context
    def add_entry(
        ctx,
        entry_type: str,
        amount: str,
        category: str,
        entry_date: str,
        narration: str,
        reference_id: str | None,
        reference_name: str | None,
        vehicle_no: str | None,
        payment_mode: str | None,
    ):
        """Record a movement; its category decides what it posts.

        Examples:
            haulbook bank add credit 5000 --category bill_advance --ref-id BL-7
            haulbook cash add debit 1200 --category vehicle_expense --vehicle KA01AB1234
            haulbook bank add debit 10000 --category fuel_wallet --ref-name "HP Card"
        """
        draft = CashEntryDraft(
            type=EntryType(entry_type.lower()),
            category=category,
            amount=parse_amount_or_exit(ctx, amount),
            date=parse_date_or_exit(ctx, entry_date),
            narration=narration,
            reference_id=reference_id,
            reference_name=reference_name,
            vehicle_no=vehicle_no,
            payment_mode=payment_mode,
        )
        try:
            result = CashEntryService(ctx.obj["db"], book).create_entry(draft)
            entry = result.document
            click.echo(f"Recorded {book.value} {entry.type.value} of {entry.amount:,.2f} as {entry.category} (ID: {entry.id})")
            echo_postings(result)
        except ValueError as e:
            handle_domain_error(ctx, e)

    @book_group.command("delete")
    @click.argument("entry_id", metavar="ENTRY_ID")
    @click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
    @click.pass_context
    def delete_entry(ctx, entry_id: str, yes: bool):
        """Delete an entry and everything it posted."""
        service = CashEntryService(ctx.obj["db"], book)
        if service.get_entry(entry_id) is None:
            click.echo(f"Error: Entry '{entry_id}' not found", err=True)
            ctx.exit(1)

        if not yes and not click.confirm(f"Are you sure you want to delete {label} entry '{entry_id}'?"):
            click.echo("Deletion cancelled.")
            return

        try:
            removed = service.delete_entry(entry_id)
            click.echo(f"Deleted {label} entry {entry_id} ({removed} posting(s) removed)")
        except ValueError as e:
            handle_domain_error(ctx, e)

    @book_group.command("list")
    @period_options
    @click.option("--category", help="Only entries of this category")
    @click.pass_context
    def list_entries(ctx, category: str | None, start_date: str | None, end_date: str | None, **flags):
        """List entries with the running book balance."""
        start, end = resolve_cli_date_range(
            ctx, start_date=start_date, end_date=end_date, period_flags=pop_period_flags(flags)
        )
        db = ctx.obj["db"]
        entries = CashEntryService(db, book).list_entries(start_date=start, end_date=end, category=category)
        if not entries:
            click.echo("No entries found.")
            return

        click.echo(f"\n{label.capitalize()}:")
        click.echo("-" * 100)
        for entry in entries:
            signed = entry.amount if entry.type is EntryType.CREDIT else -entry.amount
            click.echo(
                f"{entry.date} | {entry.category:18s} | {signed:>12,.2f} | "
                f"{entry.reference_id or entry.reference_name or '':15s} | {entry.narration} [{entry.id}]"
            )
        click.echo("-" * 100)
        click.echo(f"Book balance: {BalanceService(db).cash_balance(book, until=end):,.2f}")

    return book_group


def register_commands(cli):
    """Register bank and cash book commands with main CLI."""
    cli.add_command(make_book_group(CashBook.BANK), name="bank")
    cli.add_command(make_book_group(CashBook.CASH), name="cash")
