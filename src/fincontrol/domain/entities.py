"""Domain model entities for fincontrol.

These are pure data classes representing business concepts, independent of
database schema. Mapper functions in the database layer convert ORM rows into
these entities so the import engine never touches SQLAlchemy objects.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    """Direction of a transaction."""

    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class TransactionSubtype(str, Enum):
    """Recurrence class of a transaction."""

    FIXED = "FIXED"
    VARIABLE = "VARIABLE"


class TransactionSource(str, Enum):
    """Payment channel a transaction came from."""

    CASH = "CASH"
    DEBIT_CARD = "DEBIT_CARD"
    CREDIT_CARD = "CREDIT_CARD"
    BANK_TRANSACTION = "BANK_TRANSACTION"
    PIX = "PIX"
    OTHER = "OTHER"


@dataclass(frozen=True)
class Responsible:
    """A person or account that can carry a share of a transaction."""

    id: int
    user_id: int
    name: str
    created_at: datetime


@dataclass(frozen=True)
class Category:
    """Transaction category domain entity."""

    id: int
    name: str
    created_at: datetime


@dataclass(frozen=True)
class Subcategory:
    """Subcategory domain entity, always attached to a category."""

    id: int
    name: str
    category_id: int
    created_at: datetime


@dataclass(frozen=True)
class SourceEntity:
    """Named payment source owned by a user (a card, a bank account...)."""

    id: int
    user_id: int
    name: str
    source_type: TransactionSource
    created_at: datetime


@dataclass(frozen=True)
class TransactionResponsibility:
    """Share of a transaction assigned to one responsible party."""

    responsible_id: int
    percentage: Decimal
    calculated_amount: Decimal
    notes: Optional[str] = None


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity."""

    id: int
    user_id: int
    description: str
    date: datetime
    amount: Decimal
    type: TransactionType
    subtype: TransactionSubtype
    source: TransactionSource
    category_id: int
    subcategory_id: Optional[int]
    source_entity_id: Optional[int]
    external_reference: Optional[str]
    created_at: datetime
    responsibilities: tuple[TransactionResponsibility, ...] = field(default_factory=tuple)

    @property
    def is_percentage_valid(self) -> bool:
        """True when the responsibility percentages add up to exactly 100%."""
        # Imported lazily to keep entities free of service-level imports
        from fincontrol.domain.responsibility import is_percentage_valid

        return is_percentage_valid(r.percentage for r in self.responsibilities)
