"""Tests for the Database interface."""

from datetime import datetime
from decimal import Decimal

import pytest

from fincontrol.database.factories import create_sqlite_database
from fincontrol.domain import entities
from fincontrol.domain.entities import TransactionSource, TransactionSubtype, TransactionType


def add_transaction(db, category_id, responsible_id, description="Rent", amount="100.00", **overrides):
    values = {
        "user_id": 1,
        "description": description,
        "date": datetime(2024, 1, 5, 10, 0),
        "amount": Decimal(amount),
        "type": TransactionType.EXPENSE,
        "subtype": TransactionSubtype.FIXED,
        "source": TransactionSource.PIX,
        "category_id": category_id,
        "responsibilities": [
            entities.TransactionResponsibility(responsible_id, Decimal("100.00"), Decimal(amount))
        ],
    }
    values.update(overrides)
    return db.create_transaction(**values)


@pytest.fixture
def refs(temp_db):
    return {
        "category": temp_db.create_category("Housing"),
        "responsible": temp_db.create_responsible(1, "Alice"),
    }


class TestDatabaseInterface:
    """Tests to verify Database interface returns domain models."""

    def test_lookups_return_domain_models(self, temp_db, refs):
        """Lookups return frozen domain entities."""
        sub_id = temp_db.create_subcategory("Rent", refs["category"])
        card_id = temp_db.create_source_entity(1, "Gold Card", TransactionSource.CREDIT_CARD)

        assert isinstance(temp_db.get_category(refs["category"]), entities.Category)
        assert isinstance(temp_db.get_subcategory(sub_id), entities.Subcategory)
        assert isinstance(temp_db.get_source_entity(card_id), entities.SourceEntity)
        assert isinstance(temp_db.get_responsible(refs["responsible"]), entities.Responsible)
        assert temp_db.get_category(999) is None
        assert [s.id for s in temp_db.list_subcategories(category_id=refs["category"])] == [sub_id]
        assert temp_db.list_source_entities(user_id=2) == []

    def test_transaction_round_trip(self, temp_db, refs):
        """Stored transactions come back with enums, decimals and their split."""
        txn_id = add_transaction(temp_db, refs["category"], refs["responsible"], external_reference="FIT-1")

        txn = temp_db.get_transaction(txn_id)

        assert isinstance(txn, entities.Transaction)
        assert txn.amount == Decimal("100.00")
        assert txn.type == TransactionType.EXPENSE
        assert txn.responsibilities[0].calculated_amount == Decimal("100.00")
        assert isinstance(txn.created_at, datetime)

    def test_delete_cascades_to_responsibilities(self, temp_db, refs):
        """Responsibility rows are removed with their transaction."""
        from fincontrol.database.models import TransactionResponsibility

        txn_id = add_transaction(temp_db, refs["category"], refs["responsible"])
        temp_db.delete_transaction(txn_id)

        session = temp_db._get_session()
        assert session.query(TransactionResponsibility).count() == 0

    def test_find_by_external_reference(self, temp_db, refs):
        """Lookups by bank reference are scoped to the user."""
        txn_id = add_transaction(temp_db, refs["category"], refs["responsible"], external_reference="FIT-1")

        assert temp_db.find_transaction_by_external_reference(1, "FIT-1").id == txn_id
        assert temp_db.find_transaction_by_external_reference(2, "FIT-1") is None
        assert temp_db.find_transaction_by_external_reference(1, "FIT-2") is None

    def test_find_potential_duplicates(self, temp_db, refs):
        """Candidates share user and amount and fall inside the window."""
        txn_id = add_transaction(temp_db, refs["category"], refs["responsible"])
        add_transaction(temp_db, refs["category"], refs["responsible"], amount="99.99")

        found = temp_db.find_potential_duplicates(
            user_id=1,
            amount=Decimal("100.00"),
            start=datetime(2024, 1, 5),
            end=datetime(2024, 1, 5, 23, 59, 59),
        )
        assert [t.id for t in found] == [txn_id]
        assert temp_db.find_potential_duplicates(
            user_id=1, amount=Decimal("100.00"), start=datetime(2024, 1, 6), end=datetime(2024, 1, 7)
        ) == []


class TestUnitOfWork:
    """Tests for grouping writes into a single commit."""

    def test_commits_at_the_end(self, temp_db, refs):
        """Writes inside the block become visible to other connections once it exits."""
        other = create_sqlite_database(database_path=temp_db.database_path)
        try:
            with temp_db.unit_of_work():
                add_transaction(temp_db, refs["category"], refs["responsible"])
                add_transaction(temp_db, refs["category"], refs["responsible"], description="Water")
            assert len(other.list_transactions(user_id=1)) == 2
        finally:
            other.disconnect()

    def test_rolls_back_on_error(self, temp_db, refs):
        """An exception discards every write of the block."""
        with pytest.raises(RuntimeError):
            with temp_db.unit_of_work():
                add_transaction(temp_db, refs["category"], refs["responsible"])
                raise RuntimeError("boom")

        assert temp_db.list_transactions(user_id=1) == []

    def test_nested_blocks_join_the_outer_one(self, temp_db, refs):
        """A failing outer block also discards what an inner block wrote."""
        with pytest.raises(RuntimeError):
            with temp_db.unit_of_work():
                with temp_db.unit_of_work():
                    add_transaction(temp_db, refs["category"], refs["responsible"])
                raise RuntimeError("boom")

        assert temp_db.list_transactions(user_id=1) == []

    def test_pending_writes_are_visible_inside_the_block(self, temp_db, refs):
        """Flushed rows can be queried before the commit."""
        with temp_db.unit_of_work():
            add_transaction(temp_db, refs["category"], refs["responsible"], external_reference="FIT-7")
            assert temp_db.find_transaction_by_external_reference(1, "FIT-7") is not None
