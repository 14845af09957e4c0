"""Category, subcategory and source entity domain service."""

from typing import Optional

from fincontrol.database.base import Database
from fincontrol.domain import errors
from fincontrol.domain.entities import Category, SourceEntity, Subcategory, TransactionSource
from fincontrol.domain.lookup import find_by_name, owned_by


class CategoryService:
    """Service for managing categories and the lookups statement imports map onto.

    It also serves as the lookup provider the mapping resolver uses to check
    that resolved ids exist.
    """

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(self, name: str) -> int:
        """Create a category.

        Args:
            name: Category name, unique (case-insensitive)

        Returns:
            Category ID

        Raises:
            ValidationError: If the name is blank
            ConflictError: If a category with the same name exists
        """
        name = _clean_name(name, "Category")
        if find_by_name(self.db.list_categories(), name) is not None:
            raise errors.ConflictError(f"Category '{name}' already exists")
        return self.db.create_category(name=name)

    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID.

        Args:
            category_id: Category ID

        Returns:
            Category entity or None if not found
        """
        return self.db.get_category(category_id)

    def find_category(self, name: str) -> Optional[Category]:
        """Find a category by name, ignoring case."""
        return find_by_name(self.db.list_categories(), name)

    def list_categories(self) -> list[Category]:
        """List all categories."""
        return self.db.list_categories()

    def create_subcategory(self, name: str, category_id: int) -> int:
        """Create a subcategory.

        Args:
            name: Subcategory name, unique within its category
            category_id: Parent category ID

        Returns:
            Subcategory ID

        Raises:
            ValidationError: If the name is blank
            NotFoundError: If the category doesn't exist
            ConflictError: If the category already has a subcategory with that name
        """
        name = _clean_name(name, "Subcategory")
        if self.db.get_category(category_id) is None:
            raise errors.NotFoundError(errors.category_not_found(category_id))
        if find_by_name(self.db.list_subcategories(category_id=category_id), name) is not None:
            raise errors.ConflictError(f"Subcategory '{name}' already exists in category {category_id}")
        return self.db.create_subcategory(name=name, category_id=category_id)

    def get_subcategory(self, subcategory_id: int) -> Optional[Subcategory]:
        """Get subcategory by ID."""
        return self.db.get_subcategory(subcategory_id)

    def list_subcategories(self, category_id: Optional[int] = None) -> list[Subcategory]:
        """List subcategories, optionally only those of one category."""
        return self.db.list_subcategories(category_id=category_id)

    def create_source_entity(self, user_id: int, name: str, source_type: TransactionSource) -> int:
        """Create a source entity (a specific card or account) for a user.

        Raises:
            ValidationError: If the name is blank
            ConflictError: If the user already has a source entity with that name
        """
        name = _clean_name(name, "Source entity")
        if find_by_name(self.list_source_entities(user_id), name) is not None:
            raise errors.ConflictError(f"Source entity '{name}' already exists")
        return self.db.create_source_entity(user_id=user_id, name=name, source_type=source_type)

    def get_source_entity(self, source_entity_id: int) -> Optional[SourceEntity]:
        """Get source entity by ID."""
        return self.db.get_source_entity(source_entity_id)

    def list_source_entities(self, user_id: int) -> list[SourceEntity]:
        """List the source entities of a user."""
        return owned_by(self.db.list_source_entities(user_id=user_id), user_id)


def _clean_name(name: Optional[str], label: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise errors.ValidationError(f"{label} name cannot be blank")
    return cleaned
