"""Tests for the delimited-text statement parser."""

from datetime import datetime
from decimal import Decimal

import pytest

from fincontrol.domain.csv_statement import parse_csv
from fincontrol.domain.errors import ImportRejectedError
from fincontrol.domain.import_config import CsvConfiguration
from fincontrol.domain.statement import ImportIssueType


@pytest.fixture
def household_csv(fixtures_dir):
    return (fixtures_dir / "household.csv").read_bytes()


def test_parse_household_csv(household_csv):
    """Good rows become entries; bad rows become issues with their line numbers."""
    result = parse_csv(
        household_csv, CsvConfiguration(category_column="category", external_id_column="id")
    )

    assert result.total_records == 6
    assert [e.external_id for e in result.entries] == ["A1", "A2", "A3"]
    assert [e.line_number for e in result.entries] == [1, 2, 3]

    market, salary, pharmacy = result.entries
    assert market.date == datetime(2024, 1, 15)
    assert market.description == "Mercado Central"
    assert market.amount == Decimal("-150.75")
    assert market.category_value == "mercado"
    assert salary.amount == Decimal("5000.00")
    assert pharmacy.amount == Decimal("-42.10")
    assert pharmacy.category_value is None

    assert [(i.line_number, i.external_reference, i.issue_type) for i in result.issues] == [
        (4, "A4", ImportIssueType.INVALID_DATE),
        (5, "A5", ImportIssueType.INVALID_AMOUNT),
        (6, "A6", ImportIssueType.PARSING_ERROR),
    ]


def test_header_names_are_case_insensitive():
    """Header cells are trimmed and compared without case."""
    content = b" DATE ;Description;AMOUNT\n2024-01-15;Bakery;-3,50\n"
    result = parse_csv(content, CsvConfiguration())
    assert result.entries[0].amount == Decimal("-3.50")


def test_custom_columns_and_dot_decimal():
    """Column names, delimiter and separators are configurable."""
    content = (
        b"Posted,Memo,Value,Kind,Channel\n"
        b'01-02-2024,"Coffee, large",1234.5,expense,pix\n'
    )
    config = CsvConfiguration(
        delimiter=",",
        locale="en-US",
        date_column="posted",
        description_column="memo",
        amount_column="value",
        type_column="kind",
        source_column="channel",
    )

    entry = parse_csv(content, config).entries[0]

    assert entry.date == datetime(2024, 2, 1)
    assert entry.description == "Coffee, large"
    assert entry.amount == Decimal("1234.50")
    assert entry.type_value == "expense"
    assert entry.source_value == "pix"


def test_configured_date_patterns_are_tried_in_order():
    """Only the configured patterns are used."""
    content = b"date;description;amount\n01/31/2024;Gym;-99,00\n"
    result = parse_csv(content, CsvConfiguration(date_patterns=("%m/%d/%Y",)))
    assert result.entries[0].date == datetime(2024, 1, 31)


def test_utf8_bom_and_latin1():
    """A UTF-8 BOM is ignored and other encodings are honoured."""
    bom = "\ufeffdate;description;amount\n15/01/2024;Padaria São João;-7,00\n".encode("utf-8")
    assert parse_csv(bom, CsvConfiguration()).entries[0].description == "Padaria São João"

    latin1 = "date;description;amount\n15/01/2024;Açougue;-7,00\n".encode("latin-1")
    entry = parse_csv(latin1, CsvConfiguration(encoding="latin-1")).entries[0]
    assert entry.description == "Açougue"


def test_missing_required_column_is_fatal():
    """A header without the amount column rejects the file."""
    with pytest.raises(ImportRejectedError, match='amount column "amount" not found'):
        parse_csv(b"date;description\n15/01/2024;Gym\n", CsvConfiguration())


def test_empty_file_is_rejected():
    """A file without a header row is rejected."""
    with pytest.raises(ImportRejectedError, match="no header"):
        parse_csv(b"", CsvConfiguration())


def test_undecodable_content_is_rejected():
    """Bytes that are not valid in the configured encoding reject the file."""
    with pytest.raises(ImportRejectedError, match="Unable to read CSV"):
        parse_csv(b"date;description;amount\n\xff\xfe;x;1\n", CsvConfiguration())


def test_short_rows_leave_missing_cells_empty():
    """Rows with fewer cells than the header report the missing value."""
    result = parse_csv(b"date;description;amount\n15/01/2024;Gym\n", CsvConfiguration())
    assert result.entries == []
    assert result.issues[0].issue_type == ImportIssueType.INVALID_AMOUNT
    assert "missing" in result.issues[0].message


def test_oversized_amount_is_a_row_issue():
    """A row whose amount overflows the cent precision does not abort the file."""
    content = b"date;description;amount\n15/01/2024;Ok;10,00\n16/01/2024;Huge;1e30\n"

    result = parse_csv(content, CsvConfiguration())

    assert [e.description for e in result.entries] == ["Ok"]
    assert [(i.line_number, i.issue_type) for i in result.issues] == [
        (2, ImportIssueType.INVALID_AMOUNT)
    ]
