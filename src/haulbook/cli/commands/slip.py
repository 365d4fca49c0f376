"""Loading slip commands."""

import click
from haulbook.cli.error_handling import handle_domain_error, parse_amount_or_exit, parse_date_or_exit
from haulbook.domain.entities import LoadingSlipDraft
from haulbook.domain.loading_slip import LoadingSlipService


def slip_id_or_exit(ctx: click.Context, service: LoadingSlipService, slip_number: str) -> str:
    """Resolve a slip number to its ID, or exit with a CLI error."""
    slip = service.get_slip_by_number(slip_number.strip())
    if slip is None:
        click.echo(f"Error: Loading slip '{slip_number}' not found", err=True)
        ctx.exit(1)
    return slip.id


@click.group()
def slip_group():
    """Manage loading slips."""
    pass


@slip_group.command("add")
@click.argument("slip_number", metavar="SLIP_NO")
@click.option("--date", "slip_date", default="today", show_default=True, help="Slip date")
@click.option("--party", required=True, help="Party the load is for")
@click.option("--vehicle", "vehicle_no", required=True, help="Vehicle number")
@click.option("--from", "from_location", required=True, help="Loading point")
@click.option("--to", "to_location", required=True, help="Destination")
@click.option("--supplier", default="", help="Supplier providing the vehicle")
@click.option("--freight", required=True, help="Freight amount")
@click.option("--weight", default="0", help="Weight in tonnes")
@click.option("--advance", default="0", help="Advance paid at loading")
@click.option("--rto", default="0", help="RTO charges")
@click.option("--material", help="Material carried")
@click.option("--narration", help="Free-text narration")
@click.pass_context
def add_slip(
    ctx,
    slip_number: str,
    slip_date: str,
    party: str,
    vehicle_no: str,
    from_location: str,
    to_location: str,
    supplier: str,
    freight: str,
    weight: str,
    advance: str,
    rto: str,
    material: str | None,
    narration: str | None,
):
    """Record a loading slip.

    Examples:
        haulbook slip add LS-101 --party "Acme Cements" --vehicle KA01AB1234 \\
            --from Bangalore --to Chennai --freight 25000
    """
    draft = LoadingSlipDraft(
        slip_number=slip_number,
        date=parse_date_or_exit(ctx, slip_date),
        party=party,
        vehicle_no=vehicle_no,
        from_location=from_location,
        to_location=to_location,
        supplier=supplier,
        freight=parse_amount_or_exit(ctx, freight, "freight"),
        weight=parse_amount_or_exit(ctx, weight, "weight"),
        advance=parse_amount_or_exit(ctx, advance, "advance"),
        rto=parse_amount_or_exit(ctx, rto, "RTO"),
        material=material,
        narration=narration,
    )
    try:
        slip = LoadingSlipService(ctx.obj["db"]).create_slip(draft)
        click.echo(f"Created loading slip {slip.slip_number} (total freight {slip.total_freight:,.2f})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@slip_group.command("list")
@click.option("--vehicle", "vehicle_no", help="Only slips for this vehicle")
@click.pass_context
def list_slips(ctx, vehicle_no: str | None):
    """List loading slips."""
    slips = LoadingSlipService(ctx.obj["db"]).list_slips(vehicle_no=vehicle_no)
    if not slips:
        click.echo("No loading slips found.")
        return

    click.echo("\nLoading slips:")
    click.echo("-" * 90)
    for slip in slips:
        click.echo(
            f"{slip.slip_number:10s} | {slip.date} | {slip.vehicle_no:12s} | {slip.party:20s} | "
            f"{slip.from_location} -> {slip.to_location} | {slip.freight:>10,.2f}"
        )


@slip_group.command("delete")
@click.argument("slip_number", metavar="SLIP_NO")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def delete_slip(ctx, slip_number: str, yes: bool):
    """Delete a loading slip that has no memo or bill."""
    service = LoadingSlipService(ctx.obj["db"])
    slip_id = slip_id_or_exit(ctx, service, slip_number)

    if not yes and not click.confirm(f"Are you sure you want to delete loading slip '{slip_number}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_slip(slip_id)
        click.echo(f"Deleted loading slip {slip_number}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register loading slip commands with main CLI."""
    cli.add_command(slip_group, name="slip")
