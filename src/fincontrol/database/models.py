"""SQLAlchemy models for fincontrol database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Numeric,
    Enum,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

from fincontrol.domain.entities import TransactionSource, TransactionSubtype, TransactionType

Base = declarative_base()


class Responsible(Base):
    """Responsible party model."""

    __tablename__ = "transaction_responsibles"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False, index=True)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_responsible_user_name"),)

    # Relationships
    responsibilities = relationship("TransactionResponsibility", back_populates="responsible")


class Category(Base):
    """Transaction category model."""

    __tablename__ = "transaction_categories"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    subcategories = relationship(
        "Subcategory", back_populates="category", cascade="all, delete-orphan"
    )


class Subcategory(Base):
    """Transaction subcategory model."""

    __tablename__ = "transaction_subcategories"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    category_id = Column(Integer, ForeignKey("transaction_categories.id"), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (UniqueConstraint("category_id", "name", name="uq_subcategory_name"),)

    # Relationships
    category = relationship("Category", back_populates="subcategories")


class SourceEntity(Base):
    """Payment source entity model (a specific card or bank account)."""

    __tablename__ = "transaction_source_entities"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False, index=True)
    name = Column(String, nullable=False)
    source_type = Column(Enum(TransactionSource), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False, index=True)
    description = Column(String, nullable=False)
    date = Column(DateTime, nullable=False)
    amount = Column(Numeric(19, 2), nullable=False)
    type = Column(Enum(TransactionType), nullable=False)
    subtype = Column(Enum(TransactionSubtype), nullable=False)
    source = Column(Enum(TransactionSource), nullable=False)
    category_id = Column(Integer, ForeignKey("transaction_categories.id"), nullable=False)
    subcategory_id = Column(Integer, ForeignKey("transaction_subcategories.id"), nullable=True)
    source_entity_id = Column(Integer, ForeignKey("transaction_source_entities.id"), nullable=True)
    external_reference = Column(String, nullable=True, index=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    responsibilities = relationship(
        "TransactionResponsibility",
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="TransactionResponsibility.id",
    )


class TransactionResponsibility(Base):
    """Share of a transaction assigned to a responsible party."""

    __tablename__ = "transaction_responsibilities"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False)
    responsible_id = Column(Integer, ForeignKey("transaction_responsibles.id"), nullable=False)
    percentage = Column(Numeric(5, 2), nullable=False)
    calculated_amount = Column(Numeric(19, 2), nullable=True)
    notes = Column(String(500), nullable=True)

    # Relationships
    transaction = relationship("Transaction", back_populates="responsibilities")
    responsible = relationship("Responsible", back_populates="responsibilities")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
