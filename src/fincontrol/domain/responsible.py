"""Responsible party domain service."""

from typing import Optional

from fincontrol.database.base import Database
from fincontrol.domain.entities import Responsible
from fincontrol.domain.errors import ConflictError, ValidationError
from fincontrol.domain.lookup import find_by_name, owned_by


class ResponsibleService:
    """Service for managing the parties transactions are split between."""

    def __init__(self, db: Database):
        """Initialize responsible service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_responsible(self, user_id: int, name: str) -> int:
        """Create a responsible party for a user.

        Args:
            user_id: Owning user ID
            name: Display name, unique per user (case-insensitive)

        Returns:
            Responsible ID

        Raises:
            ValidationError: If the name is blank
            ConflictError: If the user already has a party with that name
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Responsible name cannot be blank")
        if find_by_name(self.list_responsibles(user_id), name) is not None:
            raise ConflictError(f"Responsible '{name}' already exists")
        return self.db.create_responsible(user_id=user_id, name=name)

    def get_responsible(self, responsible_id: int) -> Optional[Responsible]:
        """Get responsible party by ID."""
        return self.db.get_responsible(responsible_id)

    def find_responsible(self, user_id: int, name: str) -> Optional[Responsible]:
        """Find one of a user's parties by name."""
        return find_by_name(self.list_responsibles(user_id), name)

    def list_responsibles(self, user_id: int) -> list[Responsible]:
        """List the responsible parties of a user."""
        return owned_by(self.db.list_responsibles(user_id=user_id), user_id)
