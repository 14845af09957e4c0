"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

# Import entities directly to avoid circular import through domain/__init__.py
from fincontrol.domain.entities import (
    Category,
    Responsible,
    SourceEntity,
    Subcategory,
    Transaction,
    TransactionResponsibility,
    TransactionSource,
    TransactionSubtype,
    TransactionType,
)


class Database(ABC):
    """Abstract database interface for fincontrol."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def unit_of_work(self) -> AbstractContextManager[None]:
        """Group writes into a single commit.

        Writes issued inside the block are flushed but only committed when the
        block exits normally; any exception rolls all of them back. Nested
        blocks join the outermost one.
        """
        pass

    # Responsible operations
    @abstractmethod
    def create_responsible(self, user_id: int, name: str) -> int:
        """Create a responsible party. Returns responsible ID."""
        pass

    @abstractmethod
    def get_responsible(self, responsible_id: int) -> Optional[Responsible]:
        """Get responsible party by ID."""
        pass

    @abstractmethod
    def list_responsibles(self, user_id: Optional[int] = None) -> list[Responsible]:
        """List responsible parties, optionally only those of one user."""
        pass

    # Category operations
    @abstractmethod
    def create_category(self, name: str) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def list_categories(self) -> list[Category]:
        """List all categories."""
        pass

    @abstractmethod
    def create_subcategory(self, name: str, category_id: int) -> int:
        """Create a subcategory under a category. Returns subcategory ID."""
        pass

    @abstractmethod
    def get_subcategory(self, subcategory_id: int) -> Optional[Subcategory]:
        """Get subcategory by ID."""
        pass

    @abstractmethod
    def list_subcategories(self, category_id: Optional[int] = None) -> list[Subcategory]:
        """List subcategories, optionally filtered by category."""
        pass

    # Source entity operations
    @abstractmethod
    def create_source_entity(self, user_id: int, name: str, source_type: TransactionSource) -> int:
        """Create a source entity. Returns source entity ID."""
        pass

    @abstractmethod
    def get_source_entity(self, source_entity_id: int) -> Optional[SourceEntity]:
        """Get source entity by ID."""
        pass

    @abstractmethod
    def list_source_entities(self, user_id: Optional[int] = None) -> list[SourceEntity]:
        """List source entities, optionally only those of one user."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        user_id: int,
        description: str,
        date: datetime,
        amount: Decimal,
        type: TransactionType,
        subtype: TransactionSubtype,
        source: TransactionSource,
        category_id: int,
        responsibilities: Sequence[TransactionResponsibility],
        subcategory_id: Optional[int] = None,
        source_entity_id: Optional[int] = None,
        external_reference: Optional[str] = None,
    ) -> int:
        """Create a transaction together with its responsibility rows.

        Returns transaction ID.
        """
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def update_transaction(
        self,
        transaction_id: int,
        description: Optional[str] = None,
        date: Optional[datetime] = None,
        amount: Optional[Decimal] = None,
        type: Optional[TransactionType] = None,
        subtype: Optional[TransactionSubtype] = None,
        source: Optional[TransactionSource] = None,
        category_id: Optional[int] = None,
        subcategory_id: Optional[int] = None,
        source_entity_id: Optional[int] = None,
        responsibilities: Optional[Sequence[TransactionResponsibility]] = None,
    ) -> None:
        """Update transaction fields.

        Only arguments that are not None are applied. When ``responsibilities``
        is given, the stored rows are replaced by it.
        """
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction and its responsibility rows."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        user_id: Optional[int] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        category_id: Optional[int] = None,
        type: Optional[TransactionType] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters.

        Args:
            user_id: Optional owner filter
            start_date: Optional inclusive lower bound on the transaction date
            end_date: Optional inclusive upper bound on the transaction date
            category_id: Optional category ID filter
            type: Optional transaction type filter
        """
        pass

    @abstractmethod
    def find_transaction_by_external_reference(
        self, user_id: int, external_reference: str
    ) -> Optional[Transaction]:
        """Find a user's transaction carrying the given bank identifier."""
        pass

    @abstractmethod
    def find_potential_duplicates(
        self, user_id: int, amount: Decimal, start: datetime, end: datetime
    ) -> list[Transaction]:
        """List a user's transactions with this amount dated within [start, end]."""
        pass
