"""CLI output helpers."""

import click

from haulbook.domain.entities import PostingResult


def echo_postings(result: PostingResult) -> None:
    """Print the ledger and commission postings of a create or update."""
    for posting in result.postings:
        side = "Cr" if posting.credit else "Dr"
        amount = posting.credit or posting.debit
        click.echo(f"  {posting.ledger_type.value:16s} {posting.reference_name:20s} {side} {amount:>12,.2f}")
    for entry in result.commission_entries:
        side = "Cr" if entry.entry_type.value == "credit" else "Dr"
        click.echo(f"  {'party commission':16s} {entry.party_name:20s} {side} {entry.amount:>12,.2f}")
