"""Mapping resolution: raw statement codes to internal ids and enums."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Mapping, Optional, Protocol, Type, TypeVar

from fincontrol.domain.entities import (
    Category,
    SourceEntity,
    Subcategory,
    TransactionSource,
    TransactionSubtype,
    TransactionType,
)
from fincontrol.domain.import_config import ImportConfiguration
from fincontrol.domain.lookup import normalize_name
from fincontrol.domain.statement import ImportedEntry, ImportIssueType
from fincontrol.domain import errors

E = TypeVar("E", bound=Enum)
T = TypeVar("T")


class LookupProvider(Protocol):
    """Resolves internal ids; CategoryService satisfies this."""

    def get_category(self, category_id: int) -> Optional[Category]: ...

    def get_subcategory(self, subcategory_id: int) -> Optional[Subcategory]: ...

    def get_source_entity(self, source_entity_id: int) -> Optional[SourceEntity]: ...


class MappingError(ValueError):
    """An entry cannot be resolved into a transaction candidate."""

    def __init__(self, message: str, issue_type: ImportIssueType):
        super().__init__(message)
        self.issue_type = issue_type


@dataclass(frozen=True)
class ResolvedEntry:
    """An entry with every id and enum decided, ready to become a transaction."""

    line_number: int
    external_id: Optional[str]
    date: datetime
    description: str
    amount: Decimal
    type: TransactionType
    subtype: TransactionSubtype
    source: TransactionSource
    category_id: int
    subcategory_id: Optional[int]
    source_entity_id: Optional[int]


def normalize_keys(source: Optional[Mapping[str, T]]) -> dict[str, T]:
    """Normalize mapping table keys; on collisions the first key wins."""
    normalized: dict[str, T] = {}
    for key, value in (source or {}).items():
        normalized.setdefault(normalize_name(key), value)
    return normalized


def parse_enum(raw: Optional[str], enum_type: Type[E]) -> Optional[E]:
    """Parse an enum by member name, returning None when it is not one."""
    if not raw or not raw.strip():
        return None
    try:
        return enum_type[raw.strip().upper()]
    except KeyError:
        return None


def _lookup(raw: Optional[str], table: Mapping[str, T]) -> Optional[T]:
    if not raw or not raw.strip():
        return None
    return table.get(normalize_name(raw))


class MappingResolver:
    """Applies the mapping tables and defaults of one import configuration."""

    def __init__(self, config: ImportConfiguration, lookup: Optional[LookupProvider] = None):
        """Initialize the resolver.

        Args:
            config: Import configuration holding tables and defaults
            lookup: Optional provider used to check that resolved ids exist
        """
        self.config = config
        self.lookup = lookup
        self.category_mappings = normalize_keys(config.category_mappings)
        self.subcategory_mappings = normalize_keys(config.subcategory_mappings)
        self.source_entity_mappings = normalize_keys(config.source_entity_mappings)
        self.type_mappings = normalize_keys(config.type_mappings)
        self.subtype_mappings = normalize_keys(config.subtype_mappings)
        self.source_mappings = normalize_keys(config.source_mappings)

    def resolve(self, entry: ImportedEntry) -> ResolvedEntry:
        """Resolve every hint of an entry.

        Raises:
            MappingError: If a mandatory value (date, amount, category, type)
                cannot be determined or a resolved id does not exist
        """
        if entry.date is None:
            raise MappingError("Transaction date is required", ImportIssueType.INVALID_DATE)
        if entry.amount is None:
            raise MappingError("Transaction amount is required", ImportIssueType.INVALID_AMOUNT)
        if not entry.description:
            raise MappingError("Transaction description is required", ImportIssueType.PARSING_ERROR)

        category_id = self.resolve_category(entry)
        subcategory_id = _lookup(entry.subcategory_value, self.subcategory_mappings)
        if subcategory_id is None:
            subcategory_id = self.config.default_subcategory_id
        source_entity_id = _lookup(entry.source_entity_value, self.source_entity_mappings)
        if source_entity_id is None:
            source_entity_id = self.config.default_source_entity_id
        self._check_ids(category_id, subcategory_id, source_entity_id)

        return ResolvedEntry(
            line_number=entry.line_number,
            external_id=entry.external_id,
            date=entry.date,
            description=entry.description,
            amount=abs(entry.amount),
            type=self.resolve_type(entry),
            subtype=self.resolve_subtype(entry),
            source=self.resolve_source(entry),
            category_id=category_id,
            subcategory_id=subcategory_id,
            source_entity_id=source_entity_id,
        )

    def resolve_category(self, entry: ImportedEntry) -> int:
        mapped = _lookup(entry.category_value, self.category_mappings)
        if mapped is not None:
            return mapped
        if self.config.default_category_id is not None:
            return self.config.default_category_id
        raise MappingError(
            f"No category mapping for '{entry.category_value or ''}' and no default category",
            ImportIssueType.MISSING_MAPPING,
        )

    def resolve_type(self, entry: ImportedEntry) -> TransactionType:
        """Pick the type: detected, mapped, named, signed, then default."""
        if entry.type is not None:
            return entry.type
        mapped = _lookup(entry.type_value, self.type_mappings)
        if mapped is not None:
            return TransactionType(mapped)
        named = parse_enum(entry.type_value, TransactionType)
        if named is not None:
            return named
        if entry.amount is not None and entry.amount < 0:
            return TransactionType.EXPENSE
        if entry.amount is not None and entry.amount > 0:
            return TransactionType.INCOME
        if self.config.default_type is not None:
            return self.config.default_type
        raise MappingError("Unable to determine transaction type", ImportIssueType.MISSING_MAPPING)

    def resolve_subtype(self, entry: ImportedEntry) -> TransactionSubtype:
        mapped = _lookup(entry.subtype_value, self.subtype_mappings)
        if mapped is not None:
            return TransactionSubtype(mapped)
        return parse_enum(entry.subtype_value, TransactionSubtype) or self.config.default_subtype

    def resolve_source(self, entry: ImportedEntry) -> TransactionSource:
        if entry.source is not None:
            return entry.source
        mapped = _lookup(entry.source_value, self.source_mappings)
        if mapped is not None:
            return TransactionSource(mapped)
        return parse_enum(entry.source_value, TransactionSource) or self.config.default_source

    def _check_ids(
        self,
        category_id: int,
        subcategory_id: Optional[int],
        source_entity_id: Optional[int],
    ) -> None:
        if self.lookup is None:
            return
        if self.lookup.get_category(category_id) is None:
            raise MappingError(errors.category_not_found(category_id), ImportIssueType.MISSING_MAPPING)
        if subcategory_id is not None and self.lookup.get_subcategory(subcategory_id) is None:
            raise MappingError(
                errors.subcategory_not_found(subcategory_id), ImportIssueType.MISSING_MAPPING
            )
        if source_entity_id is not None:
            source_entity = self.lookup.get_source_entity(source_entity_id)
            if source_entity is None or source_entity.user_id != self.config.user_id:
                raise MappingError(
                    errors.source_entity_not_found(source_entity_id), ImportIssueType.MISSING_MAPPING
                )
