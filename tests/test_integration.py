"""Integration tests for end-to-end workflows."""

from haulbook.cli.main import cli


def _run(cli_runner, temp_db, *args):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])


def _seed_masters(cli_runner, temp_db):
    for args in [
        ("party", "add", "Acme Cements"),
        ("supplier", "add", "Ramesh Transport"),
        ("vehicle", "add", "ka01ab1234", "--ownership", "own"),
        ("vehicle", "add", "MH12XY9876"),
        ("wallet", "add", "HP Card", "--opening-balance", "5,000"),
    ]:
        result = _run(cli_runner, temp_db, *args)
        assert result.exit_code == 0, result.output


def _add_trip(cli_runner, temp_db):
    result = _run(
        cli_runner, temp_db,
        "slip", "add", "LS-101", "--date", "2024-04-10", "--party", "Acme Cements", "--vehicle", "KA01AB1234",
        "--from", "Bangalore", "--to", "Chennai", "--supplier", "Ramesh Transport", "--freight", "25000",
    )
    assert result.exit_code == 0, result.output
    assert "Created loading slip LS-101 (total freight 25,000.00)" in result.output

    result = _run(
        cli_runner, temp_db,
        "bill", "add", "BL-7", "--slip", "LS-101", "--date", "2024-04-10", "--party", "Acme Cements",
        "--amount", "20000", "--rto", "500", "--mamool", "300", "--tds", "200", "--party-commission-cut", "1000",
    )
    assert result.exit_code == 0, result.output
    assert "Created bill BL-7 (net 20,000.00)" in result.output

    result = _run(
        cli_runner, temp_db,
        "memo", "add", "M-1", "--slip", "LS-101", "--date", "2024-04-10", "--supplier", "Ramesh Transport",
        "--freight", "10000", "--commission", "500", "--mamool", "200", "--detention", "300",
    )
    assert result.exit_code == 0, result.output
    assert "Created memo M-1 (net 9,600.00)" in result.output


def test_full_workflow(cli_runner, temp_db):
    """Masters, trip documents, bank entries, fuel and ledger views."""
    _seed_masters(cli_runner, temp_db)
    _add_trip(cli_runner, temp_db)

    result = _run(cli_runner, temp_db, "ledger", "balance", "Acme Cements", "--type", "party")
    assert result.exit_code == 0, result.output
    assert "party:Acme Cements balance 20,000.00 (4 entries)" in result.output

    # Bank advance against the bill blocks deleting the bill
    result = _run(
        cli_runner, temp_db,
        "bank", "add", "credit", "5000", "--category", "bill_advance", "--ref-id", "BL-7", "--date", "2024-04-12",
    )
    assert result.exit_code == 0, result.output
    entry_id = result.output.split("(ID: ")[1].split(")")[0]

    result = _run(cli_runner, temp_db, "bill", "delete", "BL-7", "--yes")
    assert result.exit_code == 1
    assert "Error:" in result.output

    result = _run(cli_runner, temp_db, "bill", "list", "--pending")
    assert result.exit_code == 0, result.output
    assert "BL-7" in result.output

    result = _run(cli_runner, temp_db, "bank", "delete", entry_id, "--yes")
    assert result.exit_code == 0, result.output

    result = _run(cli_runner, temp_db, "fuel", "allocate", "HP Card", "KA01AB1234", "3000", "--date", "2024-04-11")
    assert result.exit_code == 0, result.output
    assert "Allocated 3,000.00 from 'HP Card' to KA01AB1234" in result.output

    result = _run(cli_runner, temp_db, "ledger", "vehicle", "KA01AB1234")
    assert result.exit_code == 0, result.output
    lines = [" ".join(line.split()) for line in result.output.splitlines()]
    assert "Income: 9,600.00" in lines
    assert "Expense: 3,000.00" in lines
    assert "Net: 6,600.00" in lines

    result = _run(cli_runner, temp_db, "commission", "summary", "Acme Cements")
    assert result.exit_code == 0, result.output
    assert "1,000.00" in result.output

    result = _run(cli_runner, temp_db, "vehicle", "set-ownership", "KA01AB1234", "market")
    assert result.exit_code == 0, result.output
    assert "re-derived 2 document(s)" in result.output

    result = _run(cli_runner, temp_db, "ledger", "balance", "Ramesh Transport", "--type", "supplier")
    assert "supplier:Ramesh Transport balance 9,600.00" in result.output

    result = _run(cli_runner, temp_db, "resync", "bill", "BL-7")
    assert result.exit_code == 0, result.output
    assert "Re-derived bill BL-7: 4 posting(s)" in result.output

    result = _run(cli_runner, temp_db, "ledger", "issues")
    assert "No reconciliation issues." in result.output


def test_cash_book_listing(cli_runner, temp_db):
    _seed_masters(cli_runner, temp_db)

    for args in [
        ("credit", "10000", "--category", "general", "--date", "2024-04-01"),
        ("debit", "1200", "--category", "vehicle_expense", "--vehicle", "KA01AB1234", "--date", "2024-04-02"),
    ]:
        result = _run(cli_runner, temp_db, "cash", "add", *args)
        assert result.exit_code == 0, result.output

    result = _run(cli_runner, temp_db, "cash", "list", "--start-date", "2024-04-01", "--end-date", "2024-04-30")
    assert result.exit_code == 0, result.output
    assert "Book balance: 8,800.00" in result.output

    result = _run(cli_runner, temp_db, "ledger", "view", "KA01AB1234", "--type", "vehicle_expense")
    assert result.exit_code == 0, result.output
    assert "1,200.00" in result.output


def test_unknown_references_fail_cleanly(cli_runner, temp_db):
    _seed_masters(cli_runner, temp_db)

    result = _run(
        cli_runner, temp_db,
        "bill", "add", "BL-1", "--slip", "LS-404", "--party", "Acme Cements", "--amount", "100",
    )
    assert result.exit_code == 1
    assert "Loading slip 'LS-404' not found" in result.output

    result = _run(cli_runner, temp_db, "bank", "add", "credit", "100", "--category", "bill_payment", "--ref-id", "BL-404")
    assert result.exit_code == 1
    assert "Error:" in result.output

    result = _run(cli_runner, temp_db, "cash", "add", "debit", "-5", "--category", "general")
    assert result.exit_code != 0


def test_duplicate_party_rejected(cli_runner, temp_db):
    _seed_masters(cli_runner, temp_db)

    result = _run(cli_runner, temp_db, "party", "add", "Acme Cements")
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_help_does_not_need_database(cli_runner):
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "ledger" in result.output
