"""Shared pytest fixtures for finsync tests."""

import tempfile
import os
from pathlib import Path
import pytest

from finsync.database.factories import create_sqlite_store
from finsync.domain.category_matcher import CategoryMatcher
from finsync.domain.errors import RemoteStoreError
from finsync.domain.finance import FinanceService
from finsync.domain.statement_import import ImportService
from finsync.domain.statement_parser import StatementParser
from finsync.domain.sync_queue import SyncQueue
from finsync.remote.base import FinanceMeta, RemoteStore

TOKEN = "test-token"


class FakeRemoteStore(RemoteStore):
    """In-memory remote store that records calls and can be told to fail."""

    def __init__(self):
        self.transactions = {}
        self.recurrences = {}
        self.categories = {}
        self.settings = None
        self.calls = []
        self.fail_all = False
        self.fail_methods = set()

    def _record(self, method, *args):
        self.calls.append((method, *args))
        if self.fail_all or method in self.fail_methods:
            raise RemoteStoreError(f"{method} unavailable", status_code=503)

    async def list_transactions(self, token):
        self._record("list_transactions")
        return list(self.transactions.values())

    async def upsert_transaction(self, token, transaction):
        self._record("upsert_transaction", transaction.id)
        self.transactions[transaction.id] = transaction

    async def delete_transaction(self, token, transaction_id):
        self._record("delete_transaction", transaction_id)
        self.transactions.pop(transaction_id, None)

    async def delete_transactions_by_batch(self, token, batch_id):
        self._record("delete_transactions_by_batch", batch_id)
        doomed = [txn.id for txn in self.transactions.values() if txn.import_batch_id == batch_id]
        for txn_id in doomed:
            del self.transactions[txn_id]
        return len(doomed)

    async def list_finance_meta(self, token):
        self._record("list_finance_meta")
        return FinanceMeta(
            recurrences=list(self.recurrences.values()),
            categories=list(self.categories.values()),
            settings=self.settings,
        )

    async def upsert_recurrence(self, token, recurrence):
        self._record("upsert_recurrence", recurrence.id)
        self.recurrences[recurrence.id] = recurrence

    async def delete_recurrence(self, token, recurrence_id):
        self._record("delete_recurrence", recurrence_id)
        self.recurrences.pop(recurrence_id, None)

    async def upsert_category(self, token, category):
        self._record("upsert_category", category.id)
        self.categories[category.id] = category

    async def delete_category(self, token, category_id):
        self._record("delete_category", category_id)
        self.categories.pop(category_id, None)

    async def upsert_settings(self, token, settings):
        self._record("upsert_settings")
        self.settings = settings


@pytest.fixture
def temp_store():
    """Create a temporary local store for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    store = create_sqlite_store(database_path=db_path)
    # Store the path for tests that need it
    store.database_path = db_path
    store.connect()
    store.initialize_schema()

    yield store

    # Cleanup
    store.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def token():
    """Bearer token used by online services."""
    return TOKEN


@pytest.fixture
def fake_remote():
    """Create an in-memory remote store."""
    return FakeRemoteStore()


@pytest.fixture
def sync_queue(temp_store, fake_remote):
    """Create a SyncQueue over the temporary store and fake remote."""
    return SyncQueue(temp_store, fake_remote)


@pytest.fixture
def parser():
    """Create a StatementParser with the default category table."""
    return StatementParser(CategoryMatcher())


@pytest.fixture
def import_service(temp_store, parser, sync_queue, fake_remote):
    """Create an offline ImportService."""
    return ImportService(temp_store, parser, sync_queue, fake_remote)


@pytest.fixture
def online_import_service(temp_store, parser, sync_queue, fake_remote):
    """Create an ImportService that has a token."""
    return ImportService(temp_store, parser, sync_queue, fake_remote, token_provider=lambda: TOKEN)


@pytest.fixture
def finance_service(temp_store, fake_remote, sync_queue):
    """Create a FinanceService that has a token."""
    return FinanceService(temp_store, fake_remote, sync_queue, token_provider=lambda: TOKEN)


@pytest.fixture
def offline_finance_service(temp_store, fake_remote, sync_queue):
    """Create a FinanceService without a token."""
    return FinanceService(temp_store, fake_remote, sync_queue)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"
