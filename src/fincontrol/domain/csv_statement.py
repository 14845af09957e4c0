"""Delimited-text statement parser."""

import csv
import io
import logging
from typing import Optional

from fincontrol.domain.errors import ImportRejectedError
from fincontrol.domain.import_config import CsvConfiguration
from fincontrol.domain.lookup import normalize_name
from fincontrol.domain.statement import CsvEntry, ImportIssue, ImportIssueType, ParseResult
from fincontrol.utils.amount_parser import parse_amount
from fincontrol.utils.date_parser import parse_date

logger = logging.getLogger(__name__)


class RowError(ValueError):
    """A single row could not be turned into an entry."""

    def __init__(self, message: str, issue_type: ImportIssueType):
        super().__init__(message)
        self.issue_type = issue_type


def parse_csv(content: bytes, config: CsvConfiguration) -> ParseResult:
    """Parse delimited text into statement entries.

    Row problems (bad date, bad amount, blank description) are collected as
    issues; header problems reject the whole file.

    Args:
        content: Raw file content
        config: CSV configuration block of the import request

    Returns:
        ParseResult with entries, row issues and the raw record count

    Raises:
        ImportRejectedError: If the file cannot be decoded or the header lacks
            a required column
    """
    config.validate()
    encoding = config.resolve_encoding()
    try:
        # utf-8-sig drops the BOM some banks put before the header
        text = content.decode("utf-8-sig" if encoding == "utf-8" else encoding)
    except UnicodeDecodeError as e:
        raise ImportRejectedError(f"Unable to read CSV file as {encoding}: {e}") from e

    reader = csv.reader(io.StringIO(text), delimiter=config.delimiter)
    header = next(reader, None)
    if header is None:
        raise ImportRejectedError("CSV file has no header row")

    # Normalized header name -> column index; the first duplicate wins
    header_lookup: dict[str, int] = {}
    for index, name in enumerate(header):
        header_lookup.setdefault(normalize_name(name), index)

    date_col = _required_column(config.date_column, header_lookup, "date column")
    description_col = _required_column(config.description_column, header_lookup, "description column")
    amount_col = _required_column(config.amount_column, header_lookup, "amount column")
    optional_cols = {
        "type_value": _optional_column(config.type_column, header_lookup),
        "subtype_value": _optional_column(config.subtype_column, header_lookup),
        "source_value": _optional_column(config.source_column, header_lookup),
        "category_value": _optional_column(config.category_column, header_lookup),
        "subcategory_value": _optional_column(config.subcategory_column, header_lookup),
        "source_entity_value": _optional_column(config.source_entity_column, header_lookup),
    }
    external_id_col = _optional_column(config.external_id_column, header_lookup)

    decimal_separator = config.resolve_decimal_separator()
    grouping_separator = config.resolve_grouping_separator()
    patterns = config.safe_date_patterns()

    result = ParseResult()
    line_number = 0
    for row in reader:
        if not any(cell.strip() for cell in row):
            continue
        line_number += 1
        external_id = _cell(row, external_id_col)
        try:
            try:
                date = parse_date(_cell(row, date_col) or "", patterns)
            except ValueError as e:
                raise RowError(str(e), ImportIssueType.INVALID_DATE) from e
            try:
                amount = parse_amount(_cell(row, amount_col) or "", decimal_separator, grouping_separator)
            except ValueError as e:
                raise RowError(str(e), ImportIssueType.INVALID_AMOUNT) from e
            description = _cell(row, description_col)
            if not description:
                raise RowError("Description cannot be blank", ImportIssueType.PARSING_ERROR)
        except RowError as e:
            logger.debug("Skipping CSV line %d: %s", line_number, e)
            result.issues.append(
                ImportIssue(
                    line_number=line_number,
                    external_reference=external_id,
                    message=str(e),
                    issue_type=e.issue_type,
                )
            )
            continue

        result.entries.append(
            CsvEntry(
                line_number=line_number,
                external_id=external_id,
                date=date,
                description=description,
                amount=amount,
                **{field: _cell(row, col) for field, col in optional_cols.items()},
            )
        )

    result.total_records = line_number
    logger.debug(
        "Parsed %d CSV rows (%d rejected)", result.total_records, len(result.issues)
    )
    return result


def _required_column(desired: str, header_lookup: dict[str, int], label: str) -> int:
    index = header_lookup.get(normalize_name(desired))
    if index is None:
        raise ImportRejectedError(f'Required {label} "{desired}" not found in CSV header')
    return index


def _optional_column(desired: Optional[str], header_lookup: dict[str, int]) -> Optional[int]:
    if not desired or not desired.strip():
        return None
    return header_lookup.get(normalize_name(desired))


def _cell(row: list[str], index: Optional[int]) -> Optional[str]:
    """Return the trimmed cell value, or None when absent or blank."""
    if index is None or index >= len(row):
        return None
    value = row[index].strip()
    return value or None
