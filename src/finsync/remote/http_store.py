"""HTTP implementation of the remote store, speaking the finance REST API."""

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from finsync.domain.entities import Category, Recurrence, Settings, Transaction
from finsync.domain.errors import RemoteStoreError
from finsync.domain.payloads import (
    category_from_payload,
    category_to_payload,
    recurrence_from_payload,
    recurrence_to_payload,
    settings_from_payload,
    settings_to_payload,
    transaction_from_payload,
    transaction_to_payload,
)
from finsync.remote.base import FinanceMeta, RemoteStore

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "http://localhost:4000"
DEFAULT_TIMEOUT_SECONDS = 10.0


def normalize_base_url(base_url: str) -> str:
    """Strip a trailing slash so paths can be appended."""
    return base_url[:-1] if base_url.endswith("/") else base_url


def _segment(value: str) -> str:
    return quote(value, safe="")


class HTTPRemoteStore(RemoteStore):
    """Remote store backed by the finance API over HTTP."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize HTTP remote store.

        Construct once per process and reuse; call ``aclose`` when done.

        Args:
            base_url: API root, e.g. 'https://api.example.com'
            timeout: Request timeout in seconds
            client: Optional preconfigured client (tests pass one with a mock transport)
        """
        self.base_url = normalize_base_url(base_url)
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this store created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HTTPRemoteStore":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(
        self, method: str, path: str, token: str, body: Optional[dict[str, Any]] = None
    ) -> Any:
        """Send a request and decode the JSON response.

        Raises:
            RemoteStoreError: On transport failure or a non-2xx status
        """
        headers = {"Content-Type": "application/json", "Authorization": f"Bearer {token}"}
        try:
            response = await self._client.request(
                method, f"{self.base_url}{path}", headers=headers, json=body
            )
        except httpx.HTTPError as e:
            raise RemoteStoreError(f"Request to {path} failed: {e}") from e

        if not response.is_success:
            message = f"Request failed with status {response.status_code}"
            try:
                error_body = response.json()
            except ValueError:
                error_body = None
            if isinstance(error_body, dict) and isinstance(error_body.get("error"), str):
                message = error_body["error"]
            logger.debug("%s %s -> %d: %s", method, path, response.status_code, message)
            raise RemoteStoreError(message, status_code=response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # Transactions
    async def list_transactions(self, token: str) -> list[Transaction]:
        data = await self._request("GET", "/api/transactions", token)
        return [transaction_from_payload(item) for item in data["transactions"]]

    async def upsert_transaction(self, token: str, transaction: Transaction) -> None:
        await self._request(
            "PUT",
            f"/api/transactions/{_segment(transaction.id)}",
            token,
            transaction_to_payload(transaction),
        )

    async def delete_transaction(self, token: str, transaction_id: str) -> None:
        await self._request("DELETE", f"/api/transactions/{_segment(transaction_id)}", token)

    async def delete_transactions_by_batch(self, token: str, batch_id: str) -> int:
        data = await self._request("DELETE", f"/api/transactions/batch/{_segment(batch_id)}", token)
        return int(data.get("deleted", 0)) if data else 0

    # Recurrences, categories, settings
    async def list_finance_meta(self, token: str) -> FinanceMeta:
        data = await self._request("GET", "/api/finance-meta", token)
        settings = data.get("settings")
        return FinanceMeta(
            recurrences=[recurrence_from_payload(item) for item in data.get("recurrences", [])],
            categories=[category_from_payload(item) for item in data.get("categories", [])],
            settings=settings_from_payload(settings) if settings else None,
        )

    async def upsert_recurrence(self, token: str, recurrence: Recurrence) -> None:
        await self._request(
            "PUT",
            f"/api/recurrences/{_segment(recurrence.id)}",
            token,
            recurrence_to_payload(recurrence),
        )

    async def delete_recurrence(self, token: str, recurrence_id: str) -> None:
        await self._request("DELETE", f"/api/recurrences/{_segment(recurrence_id)}", token)

    async def upsert_category(self, token: str, category: Category) -> None:
        await self._request(
            "PUT",
            f"/api/categories/{_segment(category.id)}",
            token,
            category_to_payload(category),
        )

    async def delete_category(self, token: str, category_id: str) -> None:
        await self._request("DELETE", f"/api/categories/{_segment(category_id)}", token)

    async def upsert_settings(self, token: str, settings: Settings) -> None:
        await self._request("PUT", "/api/settings", token, settings_to_payload(settings))
