"""Party commission ledger commands."""

import click
from haulbook.cli.date_filters import period_options, pop_period_flags, resolve_cli_date_range
from haulbook.domain.balances import BalanceService


@click.group()
def commission_group():
    """View the party commission ledger."""
    pass


@commission_group.command("summary")
@click.argument("party_name", metavar="PARTY", required=False)
@period_options
@click.pass_context
def commission_summary(ctx, party_name: str | None, start_date: str | None, end_date: str | None, **flags):
    """Show commission withheld on bills against commission paid out.

    Without PARTY the totals cover every party.
    """
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, period_flags=pop_period_flags(flags))
    summary = BalanceService(ctx.obj["db"]).get_party_commission_summary(
        party_name=party_name, start_date=start, end_date=end
    )
    click.echo(f"Party commission: {party_name or 'all parties'}")
    click.echo(f"  Withheld (credits): {summary.total_credits:>14,.2f}")
    click.echo(f"  Paid (debits):      {summary.total_debits:>14,.2f}")
    click.echo(f"  Balance:            {summary.balance:>14,.2f}")
    click.echo(f"  Entries:            {summary.entry_count:>14d}")


@commission_group.command("parties")
@click.pass_context
def commission_parties(ctx):
    """Show the commission balance of every party."""
    summaries = BalanceService(ctx.obj["db"]).commission_parties()
    if not summaries:
        click.echo("No commission entries found.")
        return

    click.echo("\nParty commission balances:")
    click.echo("-" * 80)
    for summary in summaries:
        click.echo(
            f"{summary.party_name:25s} | Cr {summary.total_credits:>12,.2f} | Dr {summary.total_debits:>12,.2f} | "
            f"{summary.balance:>12,.2f} | last {summary.last_entry_date}"
        )


@commission_group.command("statement")
@click.argument("party_name", metavar="PARTY")
@click.pass_context
def commission_statement(ctx, party_name: str):
    """Show a party's commission entries with their running balance."""
    rows = BalanceService(ctx.obj["db"]).commission_statement(party_name)
    if not rows:
        click.echo("No commission entries found.")
        return

    for entry, balance in rows:
        click.echo(
            f"{entry.date} | {entry.entry_type.value:6s} | {entry.amount:>12,.2f} | {balance:>12,.2f} | {entry.narration}"
        )


def register_commands(cli):
    """Register commission commands with main CLI."""
    cli.add_command(commission_group, name="commission")
