"""Content API clients for the cart and transaction resources.

All methods use a shared lazily created httpx.AsyncClient. Transport failures
and non-success responses are logged and re-raised as CartApiError.
"""

from typing import Any

import httpx

from pickngo.cart.models import CartItem, ItemId, TransactionRecord
from pickngo.config import Settings, get_settings
from pickngo.errors import CartApiError
from pickngo.logging import get_logger, sanitize_string_for_logging

logger = get_logger(__name__)


class ContentApiClient:
    """Thin wrapper around httpx for the storefront content API."""

    def __init__(self, settings: Settings | None = None, http_client: httpx.AsyncClient | None = None):
        self.settings = settings or get_settings()
        # HTTP client (lazy init)
        self._http_client: httpx.AsyncClient | None = http_client

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Lazy creation of shared httpx client with timeouts."""
        if self._http_client is None:
            headers = {"Content-Type": "application/json", "Accept": "application/json"}
            if self.settings.api_token:
                headers["Authorization"] = f"Bearer {self.settings.api_token}"
            self._http_client = httpx.AsyncClient(
                base_url=self.settings.api_url,
                headers=headers,
                timeout=httpx.Timeout(self.settings.http_timeout, connect=5.0),
            )
        return self._http_client

    async def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send a request and raise CartApiError unless it succeeds."""
        client = await self._get_http_client()
        try:
            response = await client.request(method, path, **kwargs)
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            detail = e.response.text[:200]
            logger.error(
                "Content API %s %s failed with %s: %s",
                method,
                path,
                e.response.status_code,
                detail,
            )
            raise CartApiError(
                f"Content API error {e.response.status_code}: {detail}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            logger.exception("Content API network error on %s %s", method, path)
            raise CartApiError(f"Failed to connect to content API: {e!s}") from e

    async def aclose(self) -> None:
        """Close the shared HTTP client."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None


class BaseResource:
    """Base class for content API resources sharing one client."""

    path = ""

    def __init__(self, api: ContentApiClient) -> None:
        self.api = api


class CartResource(BaseResource):
    """`/carts` collection: read and delete cart rows."""

    path = "/carts"

    async def list_for_user(self, user_name: str, limit: int | None = None) -> list[CartItem]:
        """Fetch cart rows whose user_name equals `user_name` exactly."""
        limit = limit or self.api.settings.cart_limit
        response = await self.api.request(
            "GET",
            self.path,
            params={"filters[user_name][$eq]": user_name, "_limit": limit},
        )

        try:
            rows = response.json().get("data") or []
            items = [CartItem.from_dict(row) for row in rows]
        except (ValueError, AttributeError) as e:
            logger.error(
                "Malformed cart response for user %s: %s",
                sanitize_string_for_logging(user_name),
                e,
            )
            raise CartApiError(f"Malformed cart response: {e}") from e

        logger.debug("Fetched %d cart rows", len(items))
        return items

    async def delete(self, item_id: ItemId) -> None:
        await self.api.request("DELETE", f"{self.path}/{item_id}")


class TransactionResource(BaseResource):
    """`/transactions` collection: create purchase records."""

    path = "/transactions"

    async def create(self, record: TransactionRecord) -> dict[str, Any]:
        """Create a transaction and return the created record as sent back by the API."""
        response = await self.api.request("POST", self.path, json=record.to_payload())
        try:
            created = response.json()
        except ValueError:
            created = {}
        logger.info("Transaction created for %s x%s", record.product_name, record.quantity)
        return created.get("data", created) if isinstance(created, dict) else {}
