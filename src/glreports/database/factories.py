"""Database factory functions for creating ledger databases."""

import logging
import os
from pathlib import Path
from typing import Optional

from glreports.database.sqlalchemy_db import SQLAlchemyDatabase

logger = logging.getLogger(__name__)

DB_PATH_ENVVAR = "GLREPORTS_DB_PATH"
DEFAULT_LEDGER_DIR = ".glreports"
DEFAULT_LEDGER_FILE = "ledger.db"


def default_ledger_path() -> Path:
    """Return the ledger file from GLREPORTS_DB_PATH, else ~/.glreports/ledger.db."""
    configured = os.environ.get(DB_PATH_ENVVAR)
    if configured:
        return Path(configured)
    ledger_dir = Path.home() / DEFAULT_LEDGER_DIR
    ledger_dir.mkdir(exist_ok=True)
    return ledger_dir / DEFAULT_LEDGER_FILE


def create_database(database_url: str) -> SQLAlchemyDatabase:
    """Create a database instance for any SQLAlchemy URL."""
    return SQLAlchemyDatabase(database_url)


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite ledger database instance (not yet connected).

    Args:
        database_path: Path to the SQLite file (defaults to default_ledger_path())
    """
    path = Path(database_path) if database_path else default_ledger_path()
    return create_database(f"sqlite:///{path}")


def open_ledger(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create, connect and initialize a SQLite ledger database.

    The chart, fiscal-year, ledger and budget tables are created if missing,
    so a fresh file is ready for posting and reporting.
    """
    db = create_sqlite_database(database_path)
    db.connect()
    db.initialize_schema()
    logger.debug("Opened ledger %s", db.database_url)
    return db
