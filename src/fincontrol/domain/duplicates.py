"""Duplicate detection for statement imports."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from fincontrol.database.base import Database
from fincontrol.domain.entities import Transaction
from fincontrol.domain.lookup import normalize_name
from fincontrol.domain.mapping import ResolvedEntry
from fincontrol.utils.date_parser import day_bounds


@dataclass(frozen=True)
class DuplicateMatch:
    """Why an entry is considered already recorded.

    ``existing`` is the stored transaction it collides with, or None when the
    collision is with an earlier entry of the same import.
    """

    reference: str
    existing: Optional[Transaction] = None


def content_key(entry: ResolvedEntry) -> tuple[date, Decimal, str]:
    """Key used for entries without a bank identifier."""
    return (entry.date.date(), abs(entry.amount), normalize_name(entry.description))


class DuplicateDetector:
    """Finds entries that collide with stored transactions or earlier entries.

    Entries carrying an external id are matched on the stored external
    reference of the same user. Entries without one are matched on calendar
    day, absolute amount and normalized description.
    """

    def __init__(self, db: Database, user_id: int):
        self.db = db
        self.user_id = user_id
        self._seen_references: set[str] = set()
        self._seen_keys: set[tuple[date, Decimal, str]] = set()

    def find(self, entry: ResolvedEntry) -> Optional[DuplicateMatch]:
        """Return the match for an entry, or None if it is new.

        Earlier entries of the same import are checked first, so a collision
        with a row this import already wrote reports no stored transaction.
        """
        if entry.external_id:
            if entry.external_id in self._seen_references:
                return DuplicateMatch(reference=entry.external_id)
            existing = self.db.find_transaction_by_external_reference(
                self.user_id, entry.external_id
            )
            if existing is not None:
                return DuplicateMatch(reference=entry.external_id, existing=existing)
            return None

        key = content_key(entry)
        if key in self._seen_keys:
            return DuplicateMatch(reference=entry.description)
        start, end = day_bounds(entry.date)
        for candidate in self.db.find_potential_duplicates(
            user_id=self.user_id, amount=key[1], start=start, end=end
        ):
            if normalize_name(candidate.description) == key[2]:
                return DuplicateMatch(reference=entry.description, existing=candidate)
        return None

    def remember(self, entry: ResolvedEntry) -> None:
        """Record an entry so later entries of the same import can match it."""
        if entry.external_id:
            self._seen_references.add(entry.external_id)
        else:
            self._seen_keys.add(content_key(entry))
