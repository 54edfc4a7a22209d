"""Remote store layer for finsync."""

from finsync.remote.base import FinanceMeta, RemoteStore
from finsync.remote.http_store import HTTPRemoteStore

__all__ = ["FinanceMeta", "RemoteStore", "HTTPRemoteStore"]
