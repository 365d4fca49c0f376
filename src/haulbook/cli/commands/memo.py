"""Memo commands."""

import click
from haulbook.cli.commands.slip import slip_id_or_exit
from haulbook.cli.error_handling import handle_domain_error, parse_amount_or_exit, parse_date_or_exit
from haulbook.cli.formatting import echo_postings
from haulbook.domain.entities import MemoDraft, PaymentMode
from haulbook.domain.loading_slip import LoadingSlipService
from haulbook.domain.memo import MemoService

PAYMENT_MODES = click.Choice([m.value for m in PaymentMode], case_sensitive=False)


@click.group()
def memo_group():
    """Manage memos (amounts owed to suppliers or earned by own vehicles)."""
    pass


@memo_group.command("add")
@click.argument("memo_number", metavar="MEMO_NO")
@click.option("--slip", "slip_number", required=True, help="Loading slip number")
@click.option("--date", "memo_date", default="today", show_default=True, help="Memo date")
@click.option("--supplier", required=True, help="Supplier name")
@click.option("--freight", required=True, help="Freight amount")
@click.option("--commission", default="0", help="Commission deducted")
@click.option("--mamool", default="0", help="Mamool deducted")
@click.option("--detention", default="0", help="Detention charges")
@click.option("--extra", default="0", help="Extra charges")
@click.option("--rto", default="0", help="RTO charges")
@click.option("--narration", help="Free-text narration")
@click.pass_context
def add_memo(
    ctx,
    memo_number: str,
    slip_number: str,
    memo_date: str,
    supplier: str,
    freight: str,
    commission: str,
    mamool: str,
    detention: str,
    extra: str,
    rto: str,
    narration: str | None,
):
    """Raise a memo on a loading slip.

    Own vehicles post to the vehicle income ledger; market vehicles post the
    net payable to the supplier ledger.

    Examples:
        haulbook memo add M-1 --slip LS-101 --supplier "Ramesh Transport" \\
            --freight 10000 --commission 500 --mamool 200 --detention 300
    """
    db = ctx.obj["db"]
    draft = MemoDraft(
        memo_number=memo_number,
        loading_slip_id=slip_id_or_exit(ctx, LoadingSlipService(db), slip_number),
        date=parse_date_or_exit(ctx, memo_date),
        supplier=supplier,
        freight=parse_amount_or_exit(ctx, freight, "freight"),
        commission=parse_amount_or_exit(ctx, commission, "commission"),
        mamool=parse_amount_or_exit(ctx, mamool, "mamool"),
        detention=parse_amount_or_exit(ctx, detention, "detention"),
        extra=parse_amount_or_exit(ctx, extra, "extra"),
        rto=parse_amount_or_exit(ctx, rto, "RTO"),
        narration=narration,
    )
    try:
        result = MemoService(db).create_memo(draft)
        click.echo(f"Created memo {result.document.memo_number} (net {result.document.net_amount:,.2f})")
        echo_postings(result)
    except ValueError as e:
        handle_domain_error(ctx, e)


@memo_group.command("update")
@click.argument("memo_number", metavar="MEMO_NO")
@click.option("--number", "new_number", help="New memo number")
@click.option("--date", "memo_date", help="Memo date")
@click.option("--supplier", help="Supplier name")
@click.option("--freight", help="Freight amount")
@click.option("--commission", help="Commission deducted")
@click.option("--mamool", help="Mamool deducted")
@click.option("--detention", help="Detention charges")
@click.option("--extra", help="Extra charges")
@click.option("--rto", help="RTO charges")
@click.option("--narration", help="Free-text narration")
@click.pass_context
def update_memo(ctx, memo_number: str, new_number: str | None, memo_date: str | None, supplier: str | None,
                narration: str | None, **amounts):
    """Edit a memo and re-derive its postings.

    Only the given fields change.
    """
    service = MemoService(ctx.obj["db"])
    memo = service.get_memo_by_number(memo_number)
    if memo is None:
        click.echo(f"Error: Memo '{memo_number}' not found", err=True)
        ctx.exit(1)

    parsed = {name: parse_amount_or_exit(ctx, value, name) for name, value in amounts.items()}
    draft = MemoDraft(
        memo_number=new_number or memo.memo_number,
        loading_slip_id=memo.loading_slip_id,
        date=parse_date_or_exit(ctx, memo_date) or memo.date,
        supplier=supplier or memo.supplier,
        narration=narration if narration is not None else memo.narration,
        **{name: value if value is not None else getattr(memo, name) for name, value in parsed.items()},
    )
    try:
        result = service.update_memo(memo.id, draft)
        click.echo(f"Updated memo {result.document.memo_number} (net {result.document.net_amount:,.2f})")
        echo_postings(result)
    except ValueError as e:
        handle_domain_error(ctx, e)


@memo_group.command("delete")
@click.argument("memo_number", metavar="MEMO_NO")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def delete_memo(ctx, memo_number: str, yes: bool):
    """Delete a memo and its postings."""
    service = MemoService(ctx.obj["db"])
    memo = service.get_memo_by_number(memo_number)
    if memo is None:
        click.echo(f"Error: Memo '{memo_number}' not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(f"Are you sure you want to delete memo '{memo_number}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        removed = service.delete_memo(memo.id)
        click.echo(f"Deleted memo {memo_number} ({removed} posting(s) removed)")
    except ValueError as e:
        handle_domain_error(ctx, e)


@memo_group.command("list")
@click.option("--supplier", help="Only memos for this supplier")
@click.pass_context
def list_memos(ctx, supplier: str | None):
    """List memos."""
    memos = MemoService(ctx.obj["db"]).list_memos(supplier=supplier)
    if not memos:
        click.echo("No memos found.")
        return

    click.echo("\nMemos:")
    click.echo("-" * 80)
    for memo in memos:
        click.echo(
            f"{memo.memo_number:10s} | {memo.date} | {memo.supplier:20s} | "
            f"{memo.net_amount:>12,.2f} | {memo.status.value}"
        )


@memo_group.command("advance")
@click.argument("memo_number", metavar="MEMO_NO")
@click.argument("amount")
@click.option("--date", "advance_date", default="today", show_default=True, help="Payment date")
@click.option("--mode", type=PAYMENT_MODES, default=PaymentMode.CASH.value, show_default=True)
@click.option("--reference", help="Cheque or transfer reference")
@click.pass_context
def add_advance(ctx, memo_number: str, amount: str, advance_date: str, mode: str, reference: str | None):
    """Record an advance paid against a memo."""
    try:
        memo = MemoService(ctx.obj["db"]).add_advance_payment(
            memo_number,
            parse_date_or_exit(ctx, advance_date),
            parse_amount_or_exit(ctx, amount),
            mode=PaymentMode(mode.lower()),
            reference=reference,
        )
        paid = sum(a.amount for a in memo.advance_payments)
        click.echo(f"Recorded advance on memo {memo.memo_number}; advances total {paid:,.2f}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@memo_group.command("mark-paid")
@click.argument("memo_number", metavar="MEMO_NO")
@click.option("--date", "paid_date", default="today", show_default=True, help="Payment date")
@click.option("--amount", help="Amount paid (defaults to the net amount)")
@click.pass_context
def mark_paid(ctx, memo_number: str, paid_date: str, amount: str | None):
    """Mark a memo as paid."""
    try:
        memo = MemoService(ctx.obj["db"]).mark_paid(
            memo_number, parse_date_or_exit(ctx, paid_date), parse_amount_or_exit(ctx, amount)
        )
        click.echo(f"Memo {memo.memo_number} is {memo.status.value} ({memo.paid_amount:,.2f})")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register memo commands with main CLI."""
    cli.add_command(memo_group, name="memo")
