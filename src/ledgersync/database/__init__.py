"""Database layer for ledgersync application."""

from ledgersync.database.base import Database
from ledgersync.database.factories import create_database, create_sqlite_database

__all__ = ["Database", "create_database", "create_sqlite_database"]
