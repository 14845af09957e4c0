"""Statement import configuration and request-level validation."""

import codecs
from dataclasses import dataclass, field
from datetime import tzinfo
from decimal import Decimal
from enum import Enum
from typing import Optional

from dateutil import tz

from fincontrol.domain.entities import TransactionSource, TransactionSubtype, TransactionType
from fincontrol.domain.errors import ImportRejectedError, ValidationError
from fincontrol.domain.responsibility import validate_split

MAX_IGNORED_DESCRIPTIONS = 100

DEFAULT_DATE_PATTERNS = ("%d/%m/%Y", "%Y-%m-%d", "%d-%m-%Y")

# (decimal separator, grouping separator) per normalized locale tag
LOCALE_SEPARATORS = {
    "pt-br": (",", "."),
}
DEFAULT_SEPARATORS = (".", ",")


class StatementFormat(str, Enum):
    """Statement file format requested for an import."""

    AUTO = "AUTO"
    OFX = "OFX"
    CSV = "CSV"


class DuplicateStrategy(str, Enum):
    """What to do with entries that match an already recorded transaction."""

    SKIP = "SKIP"
    OVERWRITE = "OVERWRITE"
    FAIL = "FAIL"


def separators_for_locale(locale: Optional[str]) -> tuple[str, str]:
    """Return the default (decimal, grouping) separators for a locale tag."""
    key = (locale or "").strip().replace("_", "-").lower()
    return LOCALE_SEPARATORS.get(key, DEFAULT_SEPARATORS)


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """Resolve an IANA zone name, falling back to the system zone."""
    if name:
        zone = tz.gettz(name)
        if zone is not None:
            return zone
    return tz.tzlocal()


@dataclass(frozen=True)
class ResponsibilityAllocation:
    """Share of every imported transaction assigned to one responsible."""

    responsible_id: int
    percentage: Decimal
    notes: Optional[str] = None


@dataclass(frozen=True)
class CsvConfiguration:
    """Parsing options for delimited-text statements."""

    contains_header: bool = True
    delimiter: str = ";"
    decimal_separator: Optional[str] = None
    grouping_separator: Optional[str] = None
    date_column: str = "date"
    description_column: str = "description"
    amount_column: str = "amount"
    type_column: Optional[str] = None
    subtype_column: Optional[str] = None
    source_column: Optional[str] = None
    category_column: Optional[str] = None
    subcategory_column: Optional[str] = None
    source_entity_column: Optional[str] = None
    external_id_column: Optional[str] = None
    date_patterns: tuple[str, ...] = DEFAULT_DATE_PATTERNS
    locale: str = "pt-BR"
    encoding: str = "utf-8"

    def resolve_decimal_separator(self) -> str:
        if self.decimal_separator:
            return self.decimal_separator
        return separators_for_locale(self.locale)[0]

    def resolve_grouping_separator(self) -> str:
        if self.grouping_separator:
            return self.grouping_separator
        return separators_for_locale(self.locale)[1]

    def resolve_encoding(self) -> str:
        """Return the configured encoding, or utf-8 when Python does not know it."""
        try:
            return codecs.lookup(self.encoding).name
        except (LookupError, TypeError):
            return "utf-8"

    def safe_date_patterns(self) -> tuple[str, ...]:
        return tuple(self.date_patterns) if self.date_patterns else ("%d/%m/%Y",)

    def validate(self) -> None:
        """Validate the CSV block on its own.

        Raises:
            ImportRejectedError: If the block cannot describe a parsable file
        """
        if not self.contains_header:
            raise ImportRejectedError("CSV import currently requires a header row to map columns")
        for label, value in (
            ("Delimiter", self.delimiter),
            ("Decimal separator", self.decimal_separator),
            ("Grouping separator", self.grouping_separator),
        ):
            if value is not None and len(value) != 1:
                raise ImportRejectedError(f"{label} must be a single character")
        for label, value in (
            ("date column", self.date_column),
            ("description column", self.description_column),
            ("amount column", self.amount_column),
        ):
            if not value or not value.strip():
                raise ImportRejectedError(f"CSV {label} must not be blank")


@dataclass(frozen=True)
class ImportConfiguration:
    """Everything one import call needs besides the file itself.

    ``user_id`` may be left unset and filled in from the current user before
    the import starts.
    """

    default_subtype: TransactionSubtype
    default_source: TransactionSource
    responsibilities: tuple[ResponsibilityAllocation, ...]
    user_id: Optional[int] = None
    default_category_id: Optional[int] = None
    default_subcategory_id: Optional[int] = None
    default_source_entity_id: Optional[int] = None
    default_type: Optional[TransactionType] = None
    format: StatementFormat = StatementFormat.AUTO
    duplicate_strategy: DuplicateStrategy = DuplicateStrategy.SKIP
    dry_run: bool = False
    timezone: Optional[str] = None
    csv: Optional[CsvConfiguration] = None
    category_mappings: dict[str, int] = field(default_factory=dict)
    subcategory_mappings: dict[str, int] = field(default_factory=dict)
    source_entity_mappings: dict[str, int] = field(default_factory=dict)
    type_mappings: dict[str, TransactionType] = field(default_factory=dict)
    subtype_mappings: dict[str, TransactionSubtype] = field(default_factory=dict)
    source_mappings: dict[str, TransactionSource] = field(default_factory=dict)
    ignore_descriptions: tuple[str, ...] = ()

    def resolve_timezone(self) -> tzinfo:
        return resolve_timezone(self.timezone)

    def validate(self) -> None:
        """Validate everything that does not depend on the file format.

        Raises:
            ImportRejectedError: If the request cannot be imported
        """
        if self.user_id is None:
            raise ImportRejectedError("A user is required to import statements")
        if self.default_subtype is None:
            raise ImportRejectedError("A default subtype is required")
        if self.default_source is None:
            raise ImportRejectedError("A default source is required")
        if len(self.ignore_descriptions) > MAX_IGNORED_DESCRIPTIONS:
            raise ImportRejectedError(
                f"At most {MAX_IGNORED_DESCRIPTIONS} ignored descriptions are allowed"
            )

        try:
            validate_split([(r.responsible_id, r.percentage) for r in self.responsibilities])
        except ValidationError as e:
            raise ImportRejectedError(str(e)) from e

        if self.default_category_id is None and not self.category_mappings:
            raise ImportRejectedError("A default category or category mappings must be provided")

    def validate_for(self, resolved_format: StatementFormat) -> None:
        """Validate the request once the statement format is known.

        Raises:
            ImportRejectedError: If the request cannot be imported
        """
        self.validate()
        if resolved_format == StatementFormat.CSV:
            if self.csv is None:
                raise ImportRejectedError("CSV configuration is required to import CSV statements")
            self.csv.validate()
