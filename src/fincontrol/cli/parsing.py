"""CLI helpers for parsing repeated ``KEY=VALUE`` and split options."""

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Callable, Iterable, Optional, Type, TypeVar

from fincontrol.domain.import_config import ResponsibilityAllocation

T = TypeVar("T")
E = TypeVar("E", bound=Enum)


def parse_allocation(value: str) -> ResponsibilityAllocation:
    """Parse ``ID:PERCENT[:NOTES]`` into a ResponsibilityAllocation.

    Examples:
        "1:60" -> responsible 1 carries 60%
        "2:40:half of rent" -> responsible 2 carries 40% with a note

    Raises:
        ValueError: If the value is malformed
    """
    parts = value.split(":", 2)
    if len(parts) < 2:
        raise ValueError(f"Invalid responsibility '{value}', expected ID:PERCENT[:NOTES]")
    try:
        responsible_id = int(parts[0].strip())
    except ValueError:
        raise ValueError(f"Invalid responsible ID in '{value}'")
    try:
        percentage = Decimal(parts[1].strip())
    except InvalidOperation:
        raise ValueError(f"Invalid percentage in '{value}'")
    notes = parts[2].strip() if len(parts) == 3 and parts[2].strip() else None
    return ResponsibilityAllocation(responsible_id=responsible_id, percentage=percentage, notes=notes)


def parse_mappings(values: Iterable[str], convert: Callable[[str], T]) -> dict[str, T]:
    """Parse repeated ``CODE=VALUE`` options into a mapping table.

    Raises:
        ValueError: If an option has no ``=`` or its value cannot be converted
    """
    table: dict[str, T] = {}
    for item in values:
        code, sep, raw = item.partition("=")
        if not sep or not code.strip():
            raise ValueError(f"Invalid mapping '{item}', expected CODE=VALUE")
        try:
            table[code.strip()] = convert(raw.strip())
        except (ValueError, KeyError):
            raise ValueError(f"Invalid value in mapping '{item}'")
    return table


def enum_value(enum_type: Type[E]) -> Callable[[str], E]:
    """Return a converter that parses enum members by name, ignoring case."""

    def convert(raw: str) -> E:
        return enum_type[raw.strip().upper()]

    return convert


def optional_enum(enum_type: Type[E], raw: Optional[str]) -> Optional[E]:
    """Parse an optional click.Choice value into an enum member."""
    if raw is None:
        return None
    return enum_type[raw.upper()]
