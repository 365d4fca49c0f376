"""Main CLI entry point."""

import click
from haulbook.database.factories import create_database

# Import and register all commands at module level
from haulbook.cli.commands import (
    masters,
    slip,
    memo,
    bill,
    cash,
    fuel,
    ledger,
    commission,
    resync,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides HAULBOOK_DB_PATH environment variable)",
    envvar="HAULBOOK_DB_PATH",
)
@click.pass_context
def cli(ctx, db_path: str | None):
    """Haulbook - Transport billing and bookkeeping.

    Record loading slips, memos, bills, bank and cash movements and fuel
    wallets, and read the vehicle, party, supplier, commission and general
    ledgers derived from them.
    """
    ctx.ensure_object(dict)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db


# Register all commands
masters.register_commands(cli)
slip.register_commands(cli)
memo.register_commands(cli)
bill.register_commands(cli)
cash.register_commands(cli)
fuel.register_commands(cli)
ledger.register_commands(cli)
commission.register_commands(cli)
resync.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
