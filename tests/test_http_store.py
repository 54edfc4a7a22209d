"""Tests for the HTTP remote store."""

import json
from datetime import date
from decimal import Decimal

import httpx
import pytest

from finsync.domain.entities import EXPENSE, INCOME, Settings, Transaction
from finsync.domain.errors import RemoteStoreError
from finsync.remote.http_store import HTTPRemoteStore, normalize_base_url

BASE_URL = "https://api.example.com"


def make_store(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HTTPRemoteStore(BASE_URL + "/", client=client)


@pytest.fixture
def requests():
    return []


def recording(requests, response):
    def handler(request):
        requests.append(request)
        return response

    return handler


def test_normalize_base_url():
    """Test trailing slash handling."""
    assert normalize_base_url("http://localhost:4000/") == "http://localhost:4000"
    assert normalize_base_url("http://localhost:4000") == "http://localhost:4000"


async def test_upsert_transaction_sends_payload(requests, token):
    """Test method, path, headers and body of an upsert."""
    store = make_store(recording(requests, httpx.Response(204)))
    transaction = Transaction(
        id="import-abc",
        type=EXPENSE,
        amount=Decimal("89.90"),
        date=date(2025, 1, 7),
        description="Drogasil Farmacia",
        category_id="health",
        import_batch_id="batch-1",
    )

    await store.upsert_transaction(token, transaction)

    (request,) = requests
    assert request.method == "PUT"
    assert str(request.url) == f"{BASE_URL}/api/transactions/import-abc"
    assert request.headers["Authorization"] == f"Bearer {token}"
    body = json.loads(request.content)
    assert body["amount"] == 89.9
    assert body["date"] == "2025-01-07"
    assert body["categoryId"] == "health"
    assert body["importBatchId"] == "batch-1"


async def test_ids_are_escaped_in_paths(requests, token):
    """Test that ids are sent as a single path segment."""
    store = make_store(recording(requests, httpx.Response(204)))

    await store.delete_category(token, "a/b")

    assert requests[0].url.raw_path == b"/api/categories/a%2Fb"


async def test_list_transactions(token):
    """Test decoding a transaction list."""
    payload = {
        "transactions": [
            {
                "id": "t1",
                "type": "income",
                "amount": 6566.16,
                "date": "2025-01-05T00:00:00.000Z",
                "description": "Prefeitura Salario",
                "categoryId": "salary",
                "status": "paid",
                "isRecurring": False,
                "isTithe": False,
            }
        ]
    }
    store = make_store(lambda request: httpx.Response(200, json=payload))

    (transaction,) = await store.list_transactions(token)

    assert transaction.type == INCOME
    assert transaction.amount == Decimal("6566.16")
    assert transaction.date == date(2025, 1, 5)
    assert transaction.import_batch_id is None


async def test_list_finance_meta(token):
    """Test decoding recurrences, categories and settings."""
    payload = {
        "recurrences": [
            {
                "id": "r1",
                "type": "expense",
                "amount": 1500,
                "description": "Aluguel",
                "categoryId": "housing",
                "frequency": "monthly",
                "startDate": "2025-01-10",
                "isActive": True,
                "createAsPending": False,
            }
        ],
        "categories": [{"id": "pets", "name": "Pets", "type": "expense"}],
        "settings": {"isTither": True, "theme": "dark"},
    }
    store = make_store(lambda request: httpx.Response(200, json=payload))

    meta = await store.list_finance_meta(token)

    assert meta.recurrences[0].start_date == date(2025, 1, 10)
    assert meta.categories[0].id == "pets"
    assert meta.settings == Settings(is_tither=True, theme="dark")


async def test_finance_meta_without_settings(token):
    """Test that absent settings decode to None."""
    store = make_store(
        lambda request: httpx.Response(200, json={"recurrences": [], "categories": []})
    )

    meta = await store.list_finance_meta(token)

    assert meta.settings is None


async def test_delete_by_batch_returns_count(requests, token):
    """Test the batch delete endpoint."""
    store = make_store(recording(requests, httpx.Response(200, json={"deleted": 3})))

    assert await store.delete_transactions_by_batch(token, "batch-1") == 3
    assert requests[0].method == "DELETE"
    assert requests[0].url.path == "/api/transactions/batch/batch-1"


async def test_error_body_message_is_used(token):
    """Test that the API's error field becomes the exception message."""
    store = make_store(lambda request: httpx.Response(401, json={"error": "Invalid token"}))

    with pytest.raises(RemoteStoreError, match="Invalid token") as exc_info:
        await store.delete_transaction(token, "t1")

    assert exc_info.value.status_code == 401


async def test_error_without_body(token):
    """Test the generic message for non-JSON failures."""
    store = make_store(lambda request: httpx.Response(502, text="Bad Gateway"))

    with pytest.raises(RemoteStoreError, match="Request failed with status 502"):
        await store.upsert_settings(token, Settings())


async def test_transport_error_is_wrapped(token):
    """Test that connection failures surface as RemoteStoreError."""

    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    store = make_store(handler)

    with pytest.raises(RemoteStoreError, match="failed") as exc_info:
        await store.list_transactions(token)

    assert exc_info.value.status_code is None


async def test_context_manager_closes_owned_client():
    """Test that a store closes the client it created."""
    async with HTTPRemoteStore(BASE_URL) as store:
        client = store._client

    assert client.is_closed
