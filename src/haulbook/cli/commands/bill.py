"""Bill commands."""

import click
from haulbook.cli.commands.slip import slip_id_or_exit
from haulbook.cli.error_handling import handle_domain_error, parse_amount_or_exit, parse_date_or_exit
from haulbook.cli.formatting import echo_postings
from haulbook.domain.balances import BalanceService
from haulbook.domain.bill import BillService
from haulbook.domain.entities import BillDraft, PaymentMode
from haulbook.domain.loading_slip import LoadingSlipService

PAYMENT_MODES = click.Choice([m.value for m in PaymentMode], case_sensitive=False)
CHARGE_OPTIONS = ("detention", "extra", "rto", "mamool", "tds", "penalties", "party_commission_cut")


def charge_options(command):
    """Add one amount option per bill charge or deduction."""
    for name in reversed(CHARGE_OPTIONS):
        command = click.option(f"--{name.replace('_', '-')}", name, help=name.replace("_", " ").capitalize())(
            command
        )
    return command


@click.group()
def bill_group():
    """Manage bills (amounts receivable from parties)."""
    pass


@bill_group.command("add")
@click.argument("bill_number", metavar="BILL_NO")
@click.option("--slip", "slip_number", required=True, help="Loading slip number")
@click.option("--date", "bill_date", default="today", show_default=True, help="Bill date")
@click.option("--party", required=True, help="Party name")
@click.option("--amount", "bill_amount", required=True, help="Bill amount")
@charge_options
@click.option("--narration", help="Free-text narration")
@click.pass_context
def add_bill(ctx, bill_number: str, slip_number: str, bill_date: str, party: str, bill_amount: str,
             narration: str | None, **charges):
    """Raise a bill on a loading slip.

    Examples:
        haulbook bill add BL-7 --slip LS-101 --party "Acme Cements" --amount 20000 \\
            --rto 500 --mamool 300 --tds 200 --party-commission-cut 1000
    """
    db = ctx.obj["db"]
    draft = BillDraft(
        bill_number=bill_number,
        loading_slip_id=slip_id_or_exit(ctx, LoadingSlipService(db), slip_number),
        date=parse_date_or_exit(ctx, bill_date),
        party=party,
        bill_amount=parse_amount_or_exit(ctx, bill_amount, "bill amount"),
        narration=narration,
        **{name: parse_amount_or_exit(ctx, value or "0", name) for name, value in charges.items()},
    )
    try:
        result = BillService(db).create_bill(draft)
        click.echo(f"Created bill {result.document.bill_number} (net {result.document.net_amount:,.2f})")
        echo_postings(result)
    except ValueError as e:
        handle_domain_error(ctx, e)


@bill_group.command("update")
@click.argument("bill_number", metavar="BILL_NO")
@click.option("--number", "new_number", help="New bill number")
@click.option("--date", "bill_date", help="Bill date")
@click.option("--party", help="Party name")
@click.option("--amount", "bill_amount", help="Bill amount")
@charge_options
@click.option("--narration", help="Free-text narration")
@click.pass_context
def update_bill(ctx, bill_number: str, new_number: str | None, bill_date: str | None, party: str | None,
                bill_amount: str | None, narration: str | None, **charges):
    """Edit a bill and re-derive its postings.

    Only the given fields change.
    """
    service = BillService(ctx.obj["db"])
    bill = service.get_bill_by_number(bill_number)
    if bill is None:
        click.echo(f"Error: Bill '{bill_number}' not found", err=True)
        ctx.exit(1)

    parsed = {name: parse_amount_or_exit(ctx, value, name) for name, value in charges.items()}
    draft = BillDraft(
        bill_number=new_number or bill.bill_number,
        loading_slip_id=bill.loading_slip_id,
        date=parse_date_or_exit(ctx, bill_date) or bill.date,
        party=party or bill.party,
        bill_amount=bill.bill_amount if bill_amount is None else parse_amount_or_exit(ctx, bill_amount, "bill amount"),
        narration=narration if narration is not None else bill.narration,
        **{name: value if value is not None else getattr(bill, name) for name, value in parsed.items()},
    )
    try:
        result = service.update_bill(bill.id, draft)
        click.echo(f"Updated bill {result.document.bill_number} (net {result.document.net_amount:,.2f})")
        echo_postings(result)
    except ValueError as e:
        handle_domain_error(ctx, e)


@bill_group.command("delete")
@click.argument("bill_number", metavar="BILL_NO")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def delete_bill(ctx, bill_number: str, yes: bool):
    """Delete a bill and its postings.

    A bill that cash entries have paid into cannot be deleted until those
    entries are deleted.
    """
    service = BillService(ctx.obj["db"])
    bill = service.get_bill_by_number(bill_number)
    if bill is None:
        click.echo(f"Error: Bill '{bill_number}' not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(f"Are you sure you want to delete bill '{bill_number}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        removed = service.delete_bill(bill.id)
        click.echo(f"Deleted bill {bill_number} ({removed} posting(s) removed)")
    except ValueError as e:
        handle_domain_error(ctx, e)


@bill_group.command("list")
@click.option("--party", help="Only bills for this party")
@click.option("--pending", is_flag=True, help="Only bills with an unpaid remainder")
@click.pass_context
def list_bills(ctx, party: str | None, pending: bool):
    """List bills."""
    db = ctx.obj["db"]
    if pending:
        rows = BalanceService(db).pending_bills(party=party)
        if not rows:
            click.echo("No pending bills.")
            return
        click.echo("\nPending bills:")
        click.echo("-" * 80)
        for row in rows:
            click.echo(
                f"{row.bill_number:10s} | {row.bill_date} | {row.total_amount:>12,.2f} | "
                f"paid {row.paid_amount:>12,.2f} | pending {row.pending_amount:>12,.2f} | {row.status}"
            )
        return

    bills = BillService(db).list_bills(party=party)
    if not bills:
        click.echo("No bills found.")
        return

    click.echo("\nBills:")
    click.echo("-" * 80)
    for bill in bills:
        click.echo(
            f"{bill.bill_number:10s} | {bill.date} | {bill.party:20s} | "
            f"{bill.net_amount:>12,.2f} | {bill.status.value}"
        )


@bill_group.command("advance")
@click.argument("bill_number", metavar="BILL_NO")
@click.argument("amount")
@click.option("--date", "advance_date", default="today", show_default=True, help="Receipt date")
@click.option("--mode", type=PAYMENT_MODES, default=PaymentMode.CASH.value, show_default=True)
@click.option("--reference", help="Cheque or transfer reference")
@click.pass_context
def add_advance(ctx, bill_number: str, amount: str, advance_date: str, mode: str, reference: str | None):
    """Record an advance received against a bill."""
    try:
        bill = BillService(ctx.obj["db"]).add_advance_payment(
            bill_number,
            parse_date_or_exit(ctx, advance_date),
            parse_amount_or_exit(ctx, amount),
            mode=PaymentMode(mode.lower()),
            reference=reference,
        )
        received = sum(a.amount for a in bill.advance_payments)
        click.echo(f"Recorded advance on bill {bill.bill_number}; advances total {received:,.2f}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@bill_group.command("mark-received")
@click.argument("bill_number", metavar="BILL_NO")
@click.option("--date", "received_date", default="today", show_default=True, help="Receipt date")
@click.option("--amount", help="Amount received (defaults to the net amount)")
@click.pass_context
def mark_received(ctx, bill_number: str, received_date: str, amount: str | None):
    """Mark a bill as received."""
    try:
        bill = BillService(ctx.obj["db"]).mark_received(
            bill_number, parse_date_or_exit(ctx, received_date), parse_amount_or_exit(ctx, amount)
        )
        click.echo(f"Bill {bill.bill_number} is {bill.status.value} ({bill.received_amount:,.2f})")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register bill commands with main CLI."""
    cli.add_command(bill_group, name="bill")
