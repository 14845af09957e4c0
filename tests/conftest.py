"""Shared pytest fixtures for fincontrol tests."""

import tempfile
import os
from decimal import Decimal
from pathlib import Path
import pytest

from fincontrol.database.factories import create_sqlite_database
from fincontrol.domain.category import CategoryService
from fincontrol.domain.entities import TransactionSource, TransactionSubtype
from fincontrol.domain.import_config import (
    CsvConfiguration,
    ImportConfiguration,
    ResponsibilityAllocation,
)
from fincontrol.domain.responsible import ResponsibleService
from fincontrol.domain.statement_import import StatementImportService
from fincontrol.domain.transaction import TransactionService

USER_ID = 1


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def responsible_service(temp_db):
    """Create a ResponsibleService with a temporary database."""
    return ResponsibleService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def import_service(temp_db):
    """Create a StatementImportService with a temporary database."""
    return StatementImportService(temp_db)


@pytest.fixture
def household(category_service, responsible_service):
    """Create two responsible parties, categories and a card for USER_ID."""
    groceries = category_service.create_category("Groceries")
    return {
        "alice": responsible_service.create_responsible(USER_ID, "Alice"),
        "bob": responsible_service.create_responsible(USER_ID, "Bob"),
        "carol": responsible_service.create_responsible(USER_ID, "Carol"),
        "groceries": groceries,
        "salary": category_service.create_category("Salary"),
        "health": category_service.create_category("Health"),
        "market": category_service.create_subcategory("Market", groceries),
        "card": category_service.create_source_entity(
            USER_ID, "Gold Card", TransactionSource.CREDIT_CARD
        ),
    }


@pytest.fixture
def make_config(household):
    """Build ImportConfigurations with sensible defaults for the household."""

    def _make(**overrides) -> ImportConfiguration:
        values = {
            "user_id": USER_ID,
            "default_subtype": TransactionSubtype.VARIABLE,
            "default_source": TransactionSource.OTHER,
            "default_category_id": household["groceries"],
            "responsibilities": (
                ResponsibilityAllocation(household["alice"], Decimal("100")),
            ),
            "timezone": "UTC",
            "csv": CsvConfiguration(external_id_column="id", category_column="category"),
        }
        values.update(overrides)
        return ImportConfiguration(**values)

    return _make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"
