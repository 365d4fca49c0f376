"""Ledger view commands."""

import click
from haulbook.cli.date_filters import period_options, pop_period_flags, resolve_cli_date_range
from haulbook.domain.balances import BalanceService, running_balances
from haulbook.domain.entities import LedgerFilter, LedgerType

LEDGER_TYPES = click.Choice([t.value for t in LedgerType], case_sensitive=False)
STALE_WARNING = "Warning: a failed re-derivation touched this ledger; run 'haulbook resync --open-issues'."


@click.group()
def ledger_group():
    """View derived ledgers."""
    pass


@ledger_group.command("view")
@click.argument("reference_name", metavar="NAME", required=False)
@click.option("--type", "ledger_type", type=LEDGER_TYPES, help="Ledger type")
@click.option("--vehicle", "vehicle_no", help="Only postings for this vehicle")
@period_options
@click.pass_context
def view_ledger(ctx, reference_name: str | None, ledger_type: str | None, vehicle_no: str | None,
                start_date: str | None, end_date: str | None, **flags):
    """Show postings with their running balance.

    NAME is a party, supplier, vehicle or general account name.

    Examples:
        haulbook ledger view "Acme Cements" --type party
        haulbook ledger view KA01AB1234 --type vehicle_income --this-month
    """
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, period_flags=pop_period_flags(flags))
    service = BalanceService(ctx.obj["db"])
    ledger = LedgerType(ledger_type.lower()) if ledger_type else None
    entries = service.list_entries(
        LedgerFilter(
            ledger_type=ledger,
            reference_name=reference_name,
            vehicle_no=vehicle_no.strip().upper() if vehicle_no else None,
            start_date=start,
            end_date=end,
        )
    )
    if not entries:
        click.echo("No ledger entries found.")
        return

    click.echo(f"\nLedger: {reference_name or 'all'}{f' ({ledger.value})' if ledger else ''}")
    click.echo("-" * 110)
    for entry, balance in running_balances(entries):
        click.echo(
            f"{entry.date} | {entry.ledger_type.value:15s} | {entry.reference_name:18s} | {entry.description[:30]:30s} | "
            f"Dr {entry.debit:>10,.2f} | Cr {entry.credit:>10,.2f} | {balance:>12,.2f}"
        )
    if service.get_balance(ledger, reference_name).stale:
        click.echo(STALE_WARNING, err=True)


@ledger_group.command("balance")
@click.argument("reference_name", metavar="NAME", required=False)
@click.option("--type", "ledger_type", type=LEDGER_TYPES, required=True, help="Ledger type")
@period_options
@click.pass_context
def ledger_balance(ctx, reference_name: str | None, ledger_type: str, start_date: str | None, end_date: str | None,
                   **flags):
    """Show the folded balance of a ledger key (credit minus debit)."""
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, period_flags=pop_period_flags(flags))
    balance = BalanceService(ctx.obj["db"]).get_balance(
        LedgerType(ledger_type.lower()), reference_name, start_date=start, end_date=end
    )
    click.echo(f"{ledger_type.lower()}:{reference_name or '*'} balance {balance.amount:,.2f} ({balance.entry_count} entries)")
    if balance.stale:
        click.echo(STALE_WARNING, err=True)


@ledger_group.command("outstanding")
@click.option("--type", "ledger_type", type=LEDGER_TYPES, required=True, help="Ledger type")
@click.pass_context
def outstanding(ctx, ledger_type: str):
    """Show the balance of every key in a ledger."""
    balances = BalanceService(ctx.obj["db"]).outstanding(LedgerType(ledger_type.lower()))
    if not balances:
        click.echo("No ledger entries found.")
        return

    click.echo(f"\nOutstanding ({ledger_type.lower()}):")
    click.echo("-" * 60)
    for balance in balances:
        marker = " *stale*" if balance.stale else ""
        click.echo(f"{balance.key:30s} | {balance.amount:>14,.2f}{marker}")


@ledger_group.command("vehicle")
@click.argument("vehicle_no", metavar="VEHICLE_NO")
@period_options
@click.pass_context
def vehicle_summary(ctx, vehicle_no: str, start_date: str | None, end_date: str | None, **flags):
    """Show income, expense and net for a vehicle."""
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, period_flags=pop_period_flags(flags))
    summary = BalanceService(ctx.obj["db"]).vehicle_summary(vehicle_no, start_date=start, end_date=end)
    click.echo(f"Vehicle {summary.vehicle_no}")
    click.echo(f"  Income:  {summary.income:>14,.2f}")
    click.echo(f"  Expense: {summary.expense:>14,.2f}")
    click.echo(f"  Net:     {summary.net:>14,.2f}")


@ledger_group.command("issues")
@click.option("--all", "show_all", is_flag=True, help="Include resolved issues")
@click.pass_context
def list_issues(ctx, show_all: bool):
    """List reconciliation issues left by failed re-derivations."""
    issues = BalanceService(ctx.obj["db"]).reconciliation_issues(open_only=not show_all)
    if not issues:
        click.echo("No reconciliation issues.")
        return

    for issue in issues:
        state = "resolved" if issue.resolved_at else "open"
        click.echo(f"{issue.source_type.value}:{issue.source_id} | {issue.ledger_key:30s} | {state} | {issue.message}")


def register_commands(cli):
    """Register ledger commands with main CLI."""
    cli.add_command(ledger_group, name="ledger")
