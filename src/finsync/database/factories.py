"""Store factory functions for creating local store instances."""

import os
from pathlib import Path
from typing import Optional

from finsync.database.sqlalchemy_db import SQLAlchemyStore


def create_sqlite_store(database_path: Optional[str] = None) -> SQLAlchemyStore:
    """Create a SQLite-backed local store.

    Args:
        database_path: Path to SQLite database file. If None, checks FINSYNC_DB_PATH
            environment variable, then defaults to ~/.finsync/finsync.db

    Returns:
        SQLAlchemyStore instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("FINSYNC_DB_PATH")

    if database_path is None:
        # Default to ~/.finsync/finsync.db
        home = Path.home()
        db_dir = home / ".finsync"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "finsync.db")

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyStore(database_url)
