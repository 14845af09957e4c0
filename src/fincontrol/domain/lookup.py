"""Capability interfaces shared by domain entities.

Entities opt into generic helpers by exposing the attributes a protocol
names, so lookups are plain functions instead of per-entity copies.
"""

from typing import Iterable, Optional, Protocol, TypeVar


class Named(Protocol):
    """Entity that has an id and a human readable name."""

    id: int
    name: str


class UserScoped(Protocol):
    """Entity owned by a single user."""

    user_id: int


N = TypeVar("N", bound=Named)
U = TypeVar("U", bound=UserScoped)


def normalize_name(value: Optional[str]) -> str:
    """Normalize a name or code for case-insensitive comparison."""
    if value is None:
        return ""
    return value.strip().lower()


def find_by_name(items: Iterable[N], name: str) -> Optional[N]:
    """Return the first item whose name matches, ignoring case and padding."""
    wanted = normalize_name(name)
    for item in items:
        if normalize_name(item.name) == wanted:
            return item
    return None


def owned_by(items: Iterable[U], user_id: int) -> list[U]:
    """Filter items down to those belonging to ``user_id``."""
    return [item for item in items if item.user_id == user_id]
