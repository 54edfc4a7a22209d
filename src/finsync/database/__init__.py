"""Local store layer for finsync."""

from finsync.database.base import LocalStore
from finsync.database.factories import create_sqlite_store

__all__ = ["LocalStore", "create_sqlite_store"]
