"""Parsed statement entries, import issues and import results.

Each parser produces its own record type (``OfxEntry`` or ``CsvEntry``);
``to_imported_entry`` flattens either one into the single ``ImportedEntry``
shape the rest of the pipeline works with.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from fincontrol.domain.entities import Transaction, TransactionSource, TransactionType
from fincontrol.domain.import_config import StatementFormat


class ImportIssueType(str, Enum):
    """Reason an entry did not become a new transaction."""

    PARSING_ERROR = "PARSING_ERROR"
    INVALID_DATE = "INVALID_DATE"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    MISSING_MAPPING = "MISSING_MAPPING"
    DUPLICATE_SKIPPED = "DUPLICATE_SKIPPED"
    DUPLICATE_OVERWRITTEN = "DUPLICATE_OVERWRITTEN"


@dataclass(frozen=True)
class ImportIssue:
    """Problem found with one statement entry."""

    line_number: int
    external_reference: Optional[str]
    message: str
    issue_type: ImportIssueType


@dataclass(frozen=True)
class OfxEntry:
    """Transaction read from an OFX banking or credit-card statement."""

    line_number: int
    external_id: Optional[str]
    date: Optional[datetime]
    description: Optional[str]
    amount: Optional[Decimal]
    type: TransactionType
    source: TransactionSource


@dataclass(frozen=True)
class CsvEntry:
    """Row read from a delimited-text statement; codes are raw strings."""

    line_number: int
    external_id: Optional[str]
    date: Optional[datetime]
    description: Optional[str]
    amount: Optional[Decimal]
    type_value: Optional[str] = None
    subtype_value: Optional[str] = None
    source_value: Optional[str] = None
    category_value: Optional[str] = None
    subcategory_value: Optional[str] = None
    source_entity_value: Optional[str] = None


StatementEntry = Union[OfxEntry, CsvEntry]


@dataclass(frozen=True)
class ImportedEntry:
    """Format independent statement entry waiting for mapping resolution."""

    line_number: int
    external_id: Optional[str]
    date: Optional[datetime]
    description: Optional[str]
    amount: Optional[Decimal]
    type: Optional[TransactionType] = None
    source: Optional[TransactionSource] = None
    type_value: Optional[str] = None
    subtype_value: Optional[str] = None
    source_value: Optional[str] = None
    category_value: Optional[str] = None
    subcategory_value: Optional[str] = None
    source_entity_value: Optional[str] = None


def to_imported_entry(entry: StatementEntry) -> ImportedEntry:
    """Normalize a format specific entry into an ImportedEntry."""
    if isinstance(entry, OfxEntry):
        return ImportedEntry(
            line_number=entry.line_number,
            external_id=entry.external_id,
            date=entry.date,
            description=entry.description,
            amount=entry.amount,
            type=entry.type,
            source=entry.source,
        )
    if isinstance(entry, CsvEntry):
        return ImportedEntry(
            line_number=entry.line_number,
            external_id=entry.external_id,
            date=entry.date,
            description=entry.description,
            amount=entry.amount,
            type_value=entry.type_value,
            subtype_value=entry.subtype_value,
            source_value=entry.source_value,
            category_value=entry.category_value,
            subcategory_value=entry.subcategory_value,
            source_entity_value=entry.source_entity_value,
        )
    raise TypeError(f"Unsupported statement entry: {type(entry).__name__}")


@dataclass
class ParseResult:
    """Output of a statement parser.

    ``total_records`` counts every data record read, including the ones that
    ended up in ``issues`` instead of ``entries``.
    """

    entries: list[StatementEntry] = field(default_factory=list)
    issues: list[ImportIssue] = field(default_factory=list)
    total_records: int = 0


@dataclass
class ImportResult:
    """Summary of one import call."""

    dry_run: bool
    total_entries: int = 0
    processed_entries: int = 0
    created_transactions: int = 0
    duplicate_entries: int = 0
    ignored_entries: int = 0
    overwritten_transactions: int = 0
    format: Optional[StatementFormat] = None
    created_transaction_summaries: list[Transaction] = field(default_factory=list)
    issues: list[ImportIssue] = field(default_factory=list)

    def add_issue(
        self,
        entry: "ImportedEntry",
        message: str,
        issue_type: ImportIssueType,
    ) -> None:
        self.issues.append(
            ImportIssue(
                line_number=entry.line_number,
                external_reference=entry.external_id,
                message=message or "Failed to process entry",
                issue_type=issue_type,
            )
        )
