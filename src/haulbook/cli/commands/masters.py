"""Reference master commands: parties, suppliers, vehicles and fuel wallets."""

import click
from haulbook.cli.error_handling import handle_domain_error, parse_amount_or_exit
from haulbook.domain.entities import OwnershipType
from haulbook.domain.masters import MasterService

OWNERSHIP_CHOICES = click.Choice([o.value for o in OwnershipType], case_sensitive=False)


@click.group()
def party_group():
    """Manage parties (customers)."""
    pass


@party_group.command("add")
@click.argument("name", metavar="PARTY_NAME")
@click.option("--address", help="Postal address")
@click.option("--phone", help="Contact number")
@click.pass_context
def add_party(ctx, name: str, address: str | None, phone: str | None):
    """Add a party.

    Examples:
        haulbook party add "Acme Cements"
        haulbook party add "Acme Cements" --phone 9876543210
    """
    service = MasterService(ctx.obj["db"])
    try:
        party_id = service.create_party(name, address=address, phone=phone)
        click.echo(f"Created party '{name.strip()}' (ID: {party_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@party_group.command("list")
@click.pass_context
def list_parties(ctx):
    """List all parties."""
    parties = MasterService(ctx.obj["db"]).list_parties()
    if not parties:
        click.echo("No parties found.")
        return

    click.echo("\nParties:")
    click.echo("-" * 60)
    for party in parties:
        click.echo(f"ID: {party.id:3d} | {party.name:30s} | {party.phone or ''}")


@click.group()
def supplier_group():
    """Manage suppliers (market vehicle operators)."""
    pass


@supplier_group.command("add")
@click.argument("name", metavar="SUPPLIER_NAME")
@click.option("--address", help="Postal address")
@click.option("--phone", help="Contact number")
@click.pass_context
def add_supplier(ctx, name: str, address: str | None, phone: str | None):
    """Add a supplier."""
    service = MasterService(ctx.obj["db"])
    try:
        supplier_id = service.create_supplier(name, address=address, phone=phone)
        click.echo(f"Created supplier '{name.strip()}' (ID: {supplier_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@supplier_group.command("list")
@click.pass_context
def list_suppliers(ctx):
    """List all suppliers."""
    suppliers = MasterService(ctx.obj["db"]).list_suppliers()
    if not suppliers:
        click.echo("No suppliers found.")
        return

    click.echo("\nSuppliers:")
    click.echo("-" * 60)
    for supplier in suppliers:
        click.echo(f"ID: {supplier.id:3d} | {supplier.name:30s} | {supplier.phone or ''}")


@click.group()
def vehicle_group():
    """Manage vehicles."""
    pass


@vehicle_group.command("add")
@click.argument("vehicle_no", metavar="VEHICLE_NO")
@click.option("--ownership", type=OWNERSHIP_CHOICES, default=OwnershipType.MARKET.value, show_default=True)
@click.option("--type", "vehicle_type", default="Truck", show_default=True, help="Vehicle type")
@click.option("--owner", help="Owner name")
@click.option("--driver", help="Driver name")
@click.pass_context
def add_vehicle(ctx, vehicle_no: str, ownership: str, vehicle_type: str, owner: str | None, driver: str | None):
    """Register a vehicle.

    Registering an own vehicle re-derives any memo, fuel allocation or
    vehicle expense already recorded against it.

    Examples:
        haulbook vehicle add KA01AB1234 --ownership own
        haulbook vehicle add MH12XY9876 --owner "Ramesh Transport"
    """
    service = MasterService(ctx.obj["db"])
    try:
        vehicle_id = service.create_vehicle(
            vehicle_no,
            ownership_type=OwnershipType(ownership.lower()),
            vehicle_type=vehicle_type,
            owner_name=owner,
            driver_name=driver,
        )
        click.echo(f"Registered vehicle {vehicle_no.strip().upper()} as {ownership.lower()} (ID: {vehicle_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@vehicle_group.command("list")
@click.pass_context
def list_vehicles(ctx):
    """List all vehicles."""
    vehicles = MasterService(ctx.obj["db"]).list_vehicles()
    if not vehicles:
        click.echo("No vehicles found.")
        return

    click.echo("\nVehicles:")
    click.echo("-" * 70)
    for vehicle in vehicles:
        click.echo(
            f"{vehicle.vehicle_no:12s} | {vehicle.ownership_type.value:6s} | "
            f"{vehicle.vehicle_type or '':10s} | {vehicle.owner_name or ''}"
        )


@vehicle_group.command("set-ownership")
@click.argument("vehicle_no", metavar="VEHICLE_NO")
@click.argument("ownership", type=OWNERSHIP_CHOICES)
@click.pass_context
def set_ownership(ctx, vehicle_no: str, ownership: str):
    """Reclassify a vehicle as own or market.

    Every memo, fuel allocation and vehicle expense for the vehicle is
    re-derived under the new classification.
    """
    service = MasterService(ctx.obj["db"])
    try:
        count = service.set_vehicle_ownership(vehicle_no, OwnershipType(ownership.lower()))
        click.echo(f"Vehicle {vehicle_no.strip().upper()} is now {ownership.lower()}; re-derived {count} document(s)")
    except ValueError as e:
        handle_domain_error(ctx, e)


@click.group()
def wallet_group():
    """Manage fuel wallets."""
    pass


@wallet_group.command("add")
@click.argument("name", metavar="WALLET_NAME")
@click.option("--opening-balance", default="0", show_default=True, help="Opening balance")
@click.pass_context
def add_wallet(ctx, name: str, opening_balance: str):
    """Create a fuel wallet."""
    balance = parse_amount_or_exit(ctx, opening_balance, "opening balance")
    service = MasterService(ctx.obj["db"])
    try:
        wallet_id = service.create_fuel_wallet(name, opening_balance=balance)
        click.echo(f"Created fuel wallet '{name.strip()}' (ID: {wallet_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@wallet_group.command("list")
@click.pass_context
def list_wallets(ctx):
    """List fuel wallets with their balances."""
    wallets = MasterService(ctx.obj["db"]).list_fuel_wallets()
    if not wallets:
        click.echo("No fuel wallets found.")
        return

    click.echo("\nFuel wallets:")
    click.echo("-" * 50)
    for wallet in wallets:
        click.echo(f"{wallet.name:30s} | {wallet.balance:>12,.2f}")


def register_commands(cli):
    """Register master commands with main CLI."""
    cli.add_command(party_group, name="party")
    cli.add_command(supplier_group, name="supplier")
    cli.add_command(vehicle_group, name="vehicle")
    cli.add_command(wallet_group, name="wallet")
