"""Transaction domain service."""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Sequence

from fincontrol.database.base import Database
from fincontrol.domain import errors
from fincontrol.domain.entities import (
    Transaction as TransactionEntity,
    TransactionSource,
    TransactionSubtype,
    TransactionType,
)
from fincontrol.domain.import_config import ResponsibilityAllocation
from fincontrol.domain.responsibility import CENT, allocate, recalculate, validate_split


class TransactionService:
    """Service for managing transactions and their responsibility splits."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

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
        responsibilities: Sequence[ResponsibilityAllocation],
        subcategory_id: Optional[int] = None,
        source_entity_id: Optional[int] = None,
        external_reference: Optional[str] = None,
    ) -> int:
        """Create a transaction and split it between responsible parties.

        Args:
            user_id: Owning user ID
            description: Transaction description
            date: Transaction date
            amount: Transaction amount; stored as its absolute value
            type: INCOME or EXPENSE
            subtype: FIXED or VARIABLE
            source: Payment channel
            category_id: Category ID
            responsibilities: Split of the amount; percentages must total 100
            subcategory_id: Optional subcategory ID
            source_entity_id: Optional source entity ID
            external_reference: Optional bank identifier of the transaction

        Returns:
            Transaction ID

        Raises:
            ValidationError: If the description is blank or the split is invalid
            NotFoundError: If a referenced category, subcategory, source entity
                or responsible party doesn't exist
        """
        description = (description or "").strip()
        if not description:
            raise errors.ValidationError("Transaction description cannot be blank")
        validate_split([(r.responsible_id, r.percentage) for r in responsibilities])
        self._check_references(user_id, category_id, subcategory_id, source_entity_id, responsibilities)

        amount = _normalize_amount(amount)
        return self.db.create_transaction(
            user_id=user_id,
            description=description,
            date=date,
            amount=amount,
            type=type,
            subtype=subtype,
            source=source,
            category_id=category_id,
            responsibilities=allocate(
                amount, [(r.responsible_id, r.percentage, r.notes) for r in responsibilities]
            ),
            subcategory_id=subcategory_id,
            source_entity_id=source_entity_id,
            external_reference=external_reference,
        )

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

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
        responsibilities: Optional[Sequence[ResponsibilityAllocation]] = None,
    ) -> None:
        """Update transaction fields.

        Calculated amounts are recomputed whenever the amount or the split
        changes.

        Args:
            transaction_id: Transaction ID to update
            description: Optional new description
            date: Optional new date
            amount: Optional new amount
            type: Optional new type
            subtype: Optional new subtype
            source: Optional new source
            category_id: Optional new category ID
            subcategory_id: Optional new subcategory ID
            source_entity_id: Optional new source entity ID
            responsibilities: Optional replacement split

        Raises:
            NotFoundError: If the transaction or a referenced entity doesn't exist
            ValidationError: If the description is blank or the new split is invalid
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise errors.NotFoundError(errors.transaction_not_found(transaction_id))

        if description is not None:
            description = description.strip()
            if not description:
                raise errors.ValidationError("Transaction description cannot be blank")
        if responsibilities is not None:
            validate_split([(r.responsible_id, r.percentage) for r in responsibilities])
        self._check_references(
            txn.user_id, category_id, subcategory_id, source_entity_id, responsibilities or ()
        )

        new_amount = _normalize_amount(amount) if amount is not None else txn.amount
        new_split = None
        if responsibilities is not None:
            new_split = allocate(
                new_amount, [(r.responsible_id, r.percentage, r.notes) for r in responsibilities]
            )
        elif amount is not None:
            new_split = recalculate(new_amount, txn.responsibilities)

        self.db.update_transaction(
            transaction_id,
            description=description,
            date=date,
            amount=new_amount if amount is not None else None,
            type=type,
            subtype=subtype,
            source=source,
            category_id=category_id,
            subcategory_id=subcategory_id,
            source_entity_id=source_entity_id,
            responsibilities=new_split,
        )

    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction together with its responsibility split.

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        if self.db.get_transaction(transaction_id) is None:
            raise errors.NotFoundError(errors.transaction_not_found(transaction_id))
        self.db.delete_transaction(transaction_id)

    def list_transactions(
        self,
        user_id: int,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        category_id: Optional[int] = None,
        type: Optional[TransactionType] = None,
    ) -> list[TransactionEntity]:
        """List a user's transactions, newest first.

        Args:
            user_id: Owning user ID
            start_date: Optional inclusive start date
            end_date: Optional inclusive end date
            category_id: Optional category ID filter
            type: Optional type filter

        Returns:
            List of transaction entities
        """
        return self.db.list_transactions(
            user_id=user_id,
            start_date=start_date,
            end_date=end_date,
            category_id=category_id,
            type=type,
        )

    def _check_references(
        self,
        user_id: int,
        category_id: Optional[int],
        subcategory_id: Optional[int],
        source_entity_id: Optional[int],
        responsibilities: Sequence[ResponsibilityAllocation],
    ) -> None:
        if category_id is not None and self.db.get_category(category_id) is None:
            raise errors.NotFoundError(errors.category_not_found(category_id))
        if subcategory_id is not None and self.db.get_subcategory(subcategory_id) is None:
            raise errors.NotFoundError(errors.subcategory_not_found(subcategory_id))
        if source_entity_id is not None:
            source_entity = self.db.get_source_entity(source_entity_id)
            if source_entity is None or source_entity.user_id != user_id:
                raise errors.NotFoundError(errors.source_entity_not_found(source_entity_id))
        for allocation in responsibilities:
            responsible = self.db.get_responsible(allocation.responsible_id)
            if responsible is None or responsible.user_id != user_id:
                raise errors.NotFoundError(errors.responsible_not_found(allocation.responsible_id))


def _normalize_amount(amount: Decimal) -> Decimal:
    return abs(Decimal(amount)).quantize(CENT, rounding=ROUND_HALF_UP)
