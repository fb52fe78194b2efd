"""Database layer for glreports."""

from glreports.database.base import Database
from glreports.database.factories import create_database, create_sqlite_database, open_ledger

__all__ = ["Database", "create_database", "create_sqlite_database", "open_ledger"]
