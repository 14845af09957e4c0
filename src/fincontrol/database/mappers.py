"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the import engine only ever
sees frozen domain entities.
"""

from decimal import Decimal

from fincontrol.domain import entities as domain
from fincontrol.database.models import (
    Responsible as ORMResponsible,
    Category as ORMCategory,
    Subcategory as ORMSubcategory,
    SourceEntity as ORMSourceEntity,
    Transaction as ORMTransaction,
    TransactionResponsibility as ORMTransactionResponsibility,
)


def responsible_to_domain(orm_responsible: ORMResponsible) -> domain.Responsible:
    """Convert SQLAlchemy Responsible model to domain Responsible entity."""
    return domain.Responsible(
        id=orm_responsible.id,
        user_id=orm_responsible.user_id,
        name=orm_responsible.name,
        created_at=orm_responsible.created_at,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        name=orm_category.name,
        created_at=orm_category.created_at,
    )


def subcategory_to_domain(orm_subcategory: ORMSubcategory) -> domain.Subcategory:
    """Convert SQLAlchemy Subcategory model to domain Subcategory entity."""
    return domain.Subcategory(
        id=orm_subcategory.id,
        name=orm_subcategory.name,
        category_id=orm_subcategory.category_id,
        created_at=orm_subcategory.created_at,
    )


def source_entity_to_domain(orm_source: ORMSourceEntity) -> domain.SourceEntity:
    """Convert SQLAlchemy SourceEntity model to domain SourceEntity entity."""
    return domain.SourceEntity(
        id=orm_source.id,
        user_id=orm_source.user_id,
        name=orm_source.name,
        source_type=orm_source.source_type,
        created_at=orm_source.created_at,
    )


def responsibility_to_domain(
    orm_responsibility: ORMTransactionResponsibility,
) -> domain.TransactionResponsibility:
    """Convert a SQLAlchemy responsibility row to a domain entity."""
    return domain.TransactionResponsibility(
        responsible_id=orm_responsibility.responsible_id,
        percentage=Decimal(orm_responsibility.percentage),
        calculated_amount=Decimal(orm_responsibility.calculated_amount),
        notes=orm_responsibility.notes,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        user_id=orm_transaction.user_id,
        description=orm_transaction.description,
        date=orm_transaction.date,
        amount=Decimal(orm_transaction.amount),
        type=orm_transaction.type,
        subtype=orm_transaction.subtype,
        source=orm_transaction.source,
        category_id=orm_transaction.category_id,
        subcategory_id=orm_transaction.subcategory_id,
        source_entity_id=orm_transaction.source_entity_id,
        external_reference=orm_transaction.external_reference,
        created_at=orm_transaction.created_at,
        responsibilities=tuple(
            responsibility_to_domain(r) for r in orm_transaction.responsibilities
        ),
    )


def responsibility_to_orm(
    responsibility: domain.TransactionResponsibility,
) -> ORMTransactionResponsibility:
    """Build a SQLAlchemy responsibility row from a domain entity."""
    return ORMTransactionResponsibility(
        responsible_id=responsibility.responsible_id,
        percentage=responsibility.percentage,
        calculated_amount=responsibility.calculated_amount,
        notes=responsibility.notes,
    )
