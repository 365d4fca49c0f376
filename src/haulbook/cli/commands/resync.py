"""Re-derivation command."""

import click
from haulbook.cli.error_handling import handle_domain_error
from haulbook.domain.bill import BillService
from haulbook.domain.entities import SourceType
from haulbook.domain.masters import MasterService
from haulbook.domain.memo import MemoService
from haulbook.domain.reconciliation import ReconciliationService

SOURCES = {
    "bill": SourceType.BILL,
    "memo": SourceType.MEMO,
    "bank": SourceType.BANKING,
    "cash": SourceType.CASHBOOK,
    "fuel": SourceType.FUEL,
}


@click.command("resync")
@click.argument("source", type=click.Choice([*SOURCES, "vehicle"], case_sensitive=False), required=False)
@click.argument("key", required=False)
@click.option("--open-issues", is_flag=True, help="Re-derive every document with an open reconciliation issue")
@click.pass_context
def resync(ctx, source: str | None, key: str | None, open_issues: bool):
    """Re-derive postings from stored documents.

    KEY is the bill or memo number, the vehicle number, or the entry ID for
    bank, cash and fuel entries.

    Examples:
        haulbook resync bill BL-7
        haulbook resync vehicle KA01AB1234
        haulbook resync --open-issues
    """
    db = ctx.obj["db"]
    service = ReconciliationService(db)

    if open_issues:
        if source is not None:
            click.echo("Error: --open-issues cannot be combined with SOURCE and KEY.", err=True)
            ctx.exit(1)
        try:
            count = service.resync_open_issues()
            click.echo(f"Re-derived {count} document(s)")
        except ValueError as e:
            handle_domain_error(ctx, e)
        return

    if source is None or key is None:
        click.echo("Error: Give SOURCE and KEY, or --open-issues.", err=True)
        ctx.exit(1)

    source = source.lower()
    try:
        if source == "vehicle":
            count = MasterService(db, service.engine).resync_vehicle_documents(key.strip().upper())
            click.echo(f"Re-derived {count} document(s) for vehicle {key.strip().upper()}")
            return

        source_id = key
        if source == "bill":
            bill = BillService(db).get_bill_by_number(key)
            source_id = bill.id if bill else None
        elif source == "memo":
            memo = MemoService(db).get_memo_by_number(key)
            source_id = memo.id if memo else None
        if source_id is None:
            click.echo(f"Error: {source.capitalize()} '{key}' not found", err=True)
            ctx.exit(1)

        result = service.resync_source(SOURCES[source], source_id)
        click.echo(f"Re-derived {source} {key}: {len(result.postings)} posting(s)")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register resync command with main CLI."""
    cli.add_command(resync, name="resync")
