"""Fuel wallet transaction commands."""

import click
from haulbook.cli.error_handling import handle_domain_error, parse_amount_or_exit, parse_date_or_exit
from haulbook.cli.formatting import echo_postings
from haulbook.domain.fuel import FuelService


@click.group()
def fuel_group():
    """Manage fuel wallet credits and fuel allocations."""
    pass


@fuel_group.command("credit")
@click.argument("wallet_name", metavar="WALLET")
@click.argument("amount")
@click.option("--date", "txn_date", default="today", show_default=True, help="Credit date")
@click.option("--narration", default="", help="Free-text narration")
@click.option("--reference", "reference_id", help="Voucher or transfer reference")
@click.pass_context
def credit_wallet(ctx, wallet_name: str, amount: str, txn_date: str, narration: str, reference_id: str | None):
    """Top up a fuel wallet, creating it on first use.

    Examples:
        haulbook fuel credit "HP Card" 10000
    """
    try:
        result = FuelService(ctx.obj["db"]).credit_wallet(
            wallet_name,
            parse_amount_or_exit(ctx, amount),
            parse_date_or_exit(ctx, txn_date),
            narration=narration,
            reference_id=reference_id,
        )
        click.echo(f"Credited {result.document.amount:,.2f} to '{result.document.wallet_name}' (ID: {result.document.id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@fuel_group.command("allocate")
@click.argument("wallet_name", metavar="WALLET")
@click.argument("vehicle_no", metavar="VEHICLE_NO")
@click.argument("amount")
@click.option("--date", "txn_date", default="today", show_default=True, help="Fill date")
@click.option("--narration", default="", help="Free-text narration")
@click.option("--litres", help="Quantity filled")
@click.option("--rate", help="Rate per litre")
@click.option("--odometer", help="Odometer reading")
@click.pass_context
def allocate_fuel(
    ctx,
    wallet_name: str,
    vehicle_no: str,
    amount: str,
    txn_date: str,
    narration: str,
    litres: str | None,
    rate: str | None,
    odometer: str | None,
):
    """Spend wallet balance on fuel for a vehicle.

    Own vehicles also get a fuel debit in their expense ledger.

    Examples:
        haulbook fuel allocate "HP Card" KA01AB1234 4500 --litres 50 --rate 90
    """
    try:
        result = FuelService(ctx.obj["db"]).allocate_fuel(
            wallet_name,
            vehicle_no,
            parse_amount_or_exit(ctx, amount),
            parse_date_or_exit(ctx, txn_date),
            narration=narration,
            fuel_quantity=parse_amount_or_exit(ctx, litres, "litres"),
            rate_per_liter=parse_amount_or_exit(ctx, rate, "rate"),
            odometer_reading=parse_amount_or_exit(ctx, odometer, "odometer reading"),
        )
        txn = result.document
        click.echo(f"Allocated {txn.amount:,.2f} from '{txn.wallet_name}' to {txn.vehicle_no} (ID: {txn.id})")
        echo_postings(result)
    except ValueError as e:
        handle_domain_error(ctx, e)


@fuel_group.command("delete")
@click.argument("txn_id", metavar="TRANSACTION_ID")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def delete_transaction(ctx, txn_id: str, yes: bool):
    """Delete a fuel transaction and undo its wallet movement."""
    if not yes and not click.confirm(f"Are you sure you want to delete fuel transaction '{txn_id}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        removed = FuelService(ctx.obj["db"]).delete_transaction(txn_id)
        click.echo(f"Deleted fuel transaction {txn_id} ({removed} posting(s) removed)")
    except ValueError as e:
        handle_domain_error(ctx, e)


@fuel_group.command("list")
@click.option("--wallet", "wallet_name", help="Only this wallet")
@click.option("--vehicle", "vehicle_no", help="Only this vehicle")
@click.pass_context
def list_transactions(ctx, wallet_name: str | None, vehicle_no: str | None):
    """List fuel transactions."""
    txns = FuelService(ctx.obj["db"]).list_transactions(wallet_name=wallet_name, vehicle_no=vehicle_no)
    if not txns:
        click.echo("No fuel transactions found.")
        return

    click.echo("\nFuel transactions:")
    click.echo("-" * 90)
    for txn in txns:
        click.echo(
            f"{txn.date} | {txn.type.value:15s} | {txn.wallet_name:15s} | {txn.vehicle_no or '':12s} | "
            f"{txn.amount:>10,.2f} [{txn.id}]"
        )


def register_commands(cli):
    """Register fuel commands with main CLI."""
    cli.add_command(fuel_group, name="fuel")
