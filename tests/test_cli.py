"""Tests for the command line interface."""

from datetime import datetime
from decimal import Decimal

import pytest
from fincontrol.cli.main import cli
from fincontrol.domain.entities import TransactionSource, TransactionSubtype, TransactionType
from fincontrol.domain.import_config import ResponsibilityAllocation

USER_ID = 1


@pytest.fixture
def run(cli_runner, temp_db):
    """Invoke the CLI against the temporary database."""

    def _run(*args):
        return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])

    return _run


@pytest.fixture
def stored_transaction(transaction_service, household):
    """A 100.00 expense split 60/40 between Alice and Bob."""
    return transaction_service.create_transaction(
        user_id=USER_ID,
        description="Dinner",
        date=datetime(2024, 3, 1),
        amount=Decimal("100.00"),
        type=TransactionType.EXPENSE,
        subtype=TransactionSubtype.VARIABLE,
        source=TransactionSource.PIX,
        category_id=household["groceries"],
        responsibilities=[
            ResponsibilityAllocation(household["alice"], Decimal("60")),
            ResponsibilityAllocation(household["bob"], Decimal("40")),
        ],
    )


def test_responsible_create_and_list(run):
    """Test creating and listing responsible parties."""
    result = run("responsible", "create", "Alice", "--user", "1")

    assert result.exit_code == 0
    assert "Created responsible 'Alice' (ID: 1)" in result.output

    result = run("responsible", "list", "--user", "1")
    assert result.exit_code == 0
    assert "Alice (ID: 1)" in result.output


def test_responsible_duplicate(run):
    """Test creating the same responsible party twice."""
    run("responsible", "create", "Alice", "--user", "1")
    result = run("responsible", "create", "alice", "--user", "1")

    assert result.exit_code == 1
    assert "Error:" in result.output


def test_responsible_requires_user(run, monkeypatch):
    """Test that commands acting for a user need one."""
    monkeypatch.delenv("FINCONTROL_USER_ID", raising=False)

    result = run("responsible", "list")

    assert result.exit_code == 1
    assert "No current user configured" in result.output


def test_user_from_environment(run, monkeypatch):
    """Test that the current user can come from the environment."""
    monkeypatch.setenv("FINCONTROL_USER_ID", "7")

    result = run("responsible", "create", "Dana")

    assert result.exit_code == 0
    assert "Created responsible 'Dana'" in result.output


def test_category_subcategory_and_source_entity(run):
    """Test creating the import lookup targets."""
    assert "Created category 'Groceries' (ID: 1)" in run("category", "create", "Groceries").output

    result = run("subcategory", "create", "Market", "--category", "1")
    assert result.exit_code == 0
    assert "Created subcategory 'Market'" in result.output

    result = run("source-entity", "create", "Gold Card", "--type", "credit_card", "--user", "1")
    assert result.exit_code == 0
    assert "Created source entity 'Gold Card'" in result.output

    result = run("category", "list")
    assert "Groceries (ID: 1)" in result.output
    assert "  Market (ID: 1)" in result.output


def test_subcategory_unknown_category(run):
    """Test creating a subcategory under a missing category."""
    result = run("subcategory", "create", "Market", "--category", "99")

    assert result.exit_code == 1
    assert "Category 99 not found" in result.output


class TestImportCommand:
    """Tests for the import command."""

    def test_import_ofx(self, run, household, fixtures_dir, transaction_service):
        """Test importing an OFX statement."""
        result = run(
            "import",
            str(fixtures_dir / "bank_statement.ofx"),
            "--default-category",
            str(household["groceries"]),
            "--responsible",
            f"{household['alice']}:60",
            "--responsible",
            f"{household['bob']}:40",
            "--timezone",
            "UTC",
            "--user",
            "1",
        )

        assert result.exit_code == 0, result.output
        assert "Import complete:" in result.output
        assert "Format: OFX" in result.output
        assert "Created: 2 transactions" in result.output

        stored = transaction_service.list_transactions(USER_ID)
        assert len(stored) == 2
        assert all(t.is_percentage_valid for t in stored)

    def test_import_dry_run(self, run, household, fixtures_dir, transaction_service):
        """Test that a dry run reports without saving."""
        result = run(
            "import",
            str(fixtures_dir / "bank_statement.ofx"),
            "--default-category",
            str(household["groceries"]),
            "--responsible",
            f"{household['alice']}:100",
            "--dry-run",
            "--user",
            "1",
        )

        assert result.exit_code == 0, result.output
        assert "Dry run complete (nothing saved):" in result.output
        assert "Processed: 2" in result.output
        assert "Created: 0 transactions" in result.output
        assert transaction_service.list_transactions(USER_ID) == []

    def test_import_csv_with_issues(self, run, household, fixtures_dir):
        """Test importing a CSV statement with bad rows."""
        result = run(
            "import",
            str(fixtures_dir / "household.csv"),
            "--category-column",
            "category",
            "--external-id-column",
            "id",
            "--category-map",
            f"mercado={household['groceries']}",
            "--category-map",
            f"salario={household['salary']}",
            "--default-category",
            str(household["health"]),
            "--responsible",
            f"{household['alice']}:100",
            "--user",
            "1",
        )

        assert result.exit_code == 0, result.output
        assert "Format: CSV" in result.output
        assert "Created: 3 transactions" in result.output
        assert "Line 4 [INVALID_DATE]" in result.output
        assert "Line 5 [INVALID_AMOUNT]" in result.output
        assert "Line 6 [PARSING_ERROR]" in result.output

    def test_import_twice_skips_duplicates(self, run, household, fixtures_dir):
        """Test that importing the same statement again creates nothing."""
        args = (
            "import",
            str(fixtures_dir / "bank_statement.ofx"),
            "--default-category",
            str(household["groceries"]),
            "--responsible",
            f"{household['alice']}:100",
            "--user",
            "1",
        )
        run(*args)

        result = run(*args)

        assert result.exit_code == 0
        assert "Created: 0 transactions" in result.output
        assert "Duplicates: 2" in result.output
        assert "[DUPLICATE_SKIPPED]" in result.output

    def test_import_fail_on_duplicates(self, run, household, fixtures_dir):
        """Test the fail duplicate strategy."""
        args = (
            "import",
            str(fixtures_dir / "bank_statement.ofx"),
            "--default-category",
            str(household["groceries"]),
            "--responsible",
            f"{household['alice']}:100",
            "--user",
            "1",
        )
        run(*args)

        result = run(*args, "--duplicates", "fail")

        assert result.exit_code == 1
        assert "duplicates an existing transaction" in result.output

    def test_import_split_must_total_100(self, run, household, fixtures_dir):
        """Test that an incomplete split is rejected."""
        result = run(
            "import",
            str(fixtures_dir / "bank_statement.ofx"),
            "--default-category",
            str(household["groceries"]),
            "--responsible",
            f"{household['alice']}:60",
            "--user",
            "1",
        )

        assert result.exit_code == 1
        assert "must total 100%" in result.output

    def test_import_non_numeric_percentage(self, run, household, fixtures_dir):
        """Test that a NaN share is reported as an error, not a crash."""
        result = run(
            "import",
            str(fixtures_dir / "bank_statement.ofx"),
            "--default-category",
            str(household["groceries"]),
            "--responsible",
            f"{household['alice']}:NaN",
            "--user",
            "1",
        )

        assert result.exit_code == 1
        assert "not a number" in result.output

    def test_import_malformed_options(self, run, household, fixtures_dir):
        """Test malformed split and mapping options."""
        statement = str(fixtures_dir / "bank_statement.ofx")

        result = run("import", statement, "--responsible", "abc", "--user", "1")
        assert result.exit_code == 1
        assert "expected ID:PERCENT" in result.output

        result = run(
            "import", statement, "--responsible", "1:100", "--category-map", "nope", "--user", "1"
        )
        assert result.exit_code == 1
        assert "Invalid mapping 'nope'" in result.output

    def test_import_missing_file(self, run):
        """Test importing a file that doesn't exist."""
        result = run("import", "missing.ofx", "--responsible", "1:100", "--user", "1")

        assert result.exit_code != 0
        assert "does not exist" in result.output


class TestTransactionCommands:
    """Tests for transaction show/list/update/delete."""

    def test_show(self, run, stored_transaction):
        result = run("transaction", "show", str(stored_transaction))

        assert result.exit_code == 0
        assert "Description: Dinner" in result.output
        assert "Alice: 60.00% = 60.00" in result.output
        assert "Bob: 40.00% = 40.00" in result.output

    def test_show_missing(self, run, temp_db):
        result = run("transaction", "show", "42")

        assert result.exit_code == 1
        assert "Transaction 42 not found" in result.output

    def test_list(self, run, stored_transaction):
        result = run("transaction", "list", "--user", "1")

        assert result.exit_code == 0
        assert "Found 1 transaction(s)" in result.output
        assert "Dinner" in result.output
        assert "Groceries" in result.output

    def test_list_filters(self, run, stored_transaction):
        result = run("transaction", "list", "--type", "income", "--user", "1")
        assert "No transactions found." in result.output

        result = run("transaction", "list", "--start-date", "2024-03-01", "--end-date", "2024-03-01", "--user", "1")
        assert "Found 1 transaction(s)" in result.output

    def test_list_invalid_date(self, run, household):
        result = run("transaction", "list", "--start-date", "yesterday-ish", "--user", "1")

        assert result.exit_code == 1
        assert "Invalid date" in result.output

    def test_update_amount_recalculates_split(self, run, stored_transaction, transaction_service):
        result = run("transaction", "update", str(stored_transaction), "--amount", "250.00")

        assert result.exit_code == 0
        assert f"Updated transaction {stored_transaction}" in result.output
        txn = transaction_service.get_transaction(stored_transaction)
        assert [r.calculated_amount for r in txn.responsibilities] == [Decimal("150.00"), Decimal("100.00")]

    def test_update_split(self, run, stored_transaction, household, transaction_service):
        result = run(
            "transaction",
            "update",
            str(stored_transaction),
            "--responsible",
            f"{household['alice']}:33.33",
            "--responsible",
            f"{household['bob']}:33.33",
            "--responsible",
            f"{household['carol']}:33.34:rounding",
        )

        assert result.exit_code == 0
        txn = transaction_service.get_transaction(stored_transaction)
        assert [r.calculated_amount for r in txn.responsibilities] == [
            Decimal("33.33"),
            Decimal("33.33"),
            Decimal("33.34"),
        ]
        assert txn.responsibilities[2].notes == "rounding"

    def test_update_invalid_split(self, run, stored_transaction, household):
        result = run("transaction", "update", str(stored_transaction), "--responsible", f"{household['alice']}:90")

        assert result.exit_code == 1
        assert "must total 100%" in result.output

    def test_delete(self, run, stored_transaction, transaction_service):
        result = run("transaction", "delete", str(stored_transaction), "--yes")

        assert result.exit_code == 0
        assert f"Deleted transaction {stored_transaction}" in result.output
        assert transaction_service.get_transaction(stored_transaction) is None

    def test_delete_cancelled(self, cli_runner, temp_db, stored_transaction, transaction_service):
        result = cli_runner.invoke(
            cli,
            ["--db-path", temp_db.database_path, "transaction", "delete", str(stored_transaction)],
            input="n\n",
        )

        assert "Cancelled." in result.output
        assert transaction_service.get_transaction(stored_transaction) is not None
