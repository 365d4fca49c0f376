"""CLI error handling helpers."""

from datetime import date
from decimal import Decimal
from typing import Optional

import click

from haulbook.domain.errors import DomainError
from haulbook.utils.amount_parser import parse_amount
from haulbook.utils.date_parser import parse_date


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def parse_date_or_exit(ctx: click.Context, value: Optional[str], label: str = "date") -> Optional[date]:
    """Parse a CLI date option, or exit with a CLI error.

    Returns None when the option was not given.
    """
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def parse_amount_or_exit(ctx: click.Context, value: Optional[str], label: str = "amount") -> Optional[Decimal]:
    """Parse a CLI amount option, or exit with a CLI error."""
    if value is None:
        return None
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)
