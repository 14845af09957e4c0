"""Database layer for fincontrol application."""

from fincontrol.database.base import Database
from fincontrol.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
