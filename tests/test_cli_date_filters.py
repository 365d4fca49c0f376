"""Tests for CLI date filter helpers."""

from datetime import date

import click
import pytest
from click.testing import CliRunner

from haulbook.cli.date_filters import period_options, pop_period_flags, resolve_cli_date_range
from haulbook.utils.date_parser import PERIODS, get_date_range


def _ctx() -> click.Context:
    return click.Context(click.Command("test"))


def _resolve(**kwargs):
    kwargs.setdefault("start_date", None)
    kwargs.setdefault("end_date", None)
    kwargs.setdefault("period_flags", {})
    return resolve_cli_date_range(_ctx(), **kwargs)


def test_rejects_multiple_periods(capsys):
    with pytest.raises(click.exceptions.Exit) as excinfo:
        _resolve(period_flags={"this-month": True, "last-month": True})

    assert excinfo.value.exit_code == 1
    assert "Only one period option" in capsys.readouterr().err


def test_rejects_period_with_explicit_dates(capsys):
    with pytest.raises(click.exceptions.Exit) as excinfo:
        _resolve(start_date="2024-04-01", period_flags={"this-year": True})

    assert excinfo.value.exit_code == 1
    assert "cannot be combined" in capsys.readouterr().err


def test_returns_period_range():
    assert _resolve(period_flags={"last-month": True, "this-month": False}) == get_date_range("last-month")


def test_parses_explicit_dates():
    assert _resolve(start_date="01/04/2024", end_date="2024-04-30") == (date(2024, 4, 1), date(2024, 4, 30))


def test_applies_default_range_only_without_dates():
    default_range = (date(2024, 4, 1), date(2024, 4, 30))

    assert _resolve(default_range=default_range) == default_range
    assert _resolve(start_date="2024-05-01", default_range=default_range) == (date(2024, 5, 1), None)
    assert _resolve() == (None, None)


@pytest.mark.parametrize("option,message", [("start_date", "Invalid start date"), ("end_date", "Invalid end date")])
def test_invalid_dates(capsys, option, message):
    with pytest.raises(click.exceptions.Exit):
        _resolve(**{option: "not-a-date"})

    assert message in capsys.readouterr().err


def test_period_options_register_flags():
    @click.command()
    @period_options
    def report(start_date, end_date, **kwargs):
        flags = pop_period_flags(kwargs)
        assert not kwargs
        click.echo(",".join(p for p in PERIODS if flags[p]) or "none")
        click.echo(f"{start_date}|{end_date}")

    runner = CliRunner()
    result = runner.invoke(report, ["--last-week"])
    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == ["last-week", "None|None"]

    result = runner.invoke(report, ["--start-date", "2024-04-01"])
    assert result.output.splitlines() == ["none", "2024-04-01|None"]
