"""Pytest configuration and fixtures"""
import json
import os
from datetime import date

import httpx
import pytest

# Set test environment variables
os.environ.setdefault("PICKNGO_API_URL", "http://strapi.test/api")
os.environ.setdefault("PICKNGO_CORS_ORIGINS", "http://testserver")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from pickngo.cart import CartView
from pickngo.config import Settings
from pickngo.services.strapi import CartResource, ContentApiClient, TransactionResource

API_URL = "http://strapi.test/api"
CHECKOUT_DAY = date(2024, 11, 5)


class FakeContentServer:
    """In-memory stand-in for the content API, served through httpx.MockTransport."""

    def __init__(self, carts=None):
        self.carts = [dict(row) for row in (carts or [])]
        self.transactions = []
        self.requests = []
        self.fail_list = False
        self.fail_create_at = None  # 1-based index of the POST that fails
        self.create_transport_error = False
        self.fail_delete_ids = set()
        self._creates = 0
        self._next_id = 1000

    def calls(self, method=None):
        return [(m, p) for m, p in self.requests if method is None or m == method]

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append((request.method, path))

        if request.method == "GET" and path == "/api/carts":
            if self.fail_list:
                return httpx.Response(500, text="boom")
            name = request.url.params.get("filters[user_name][$eq]")
            limit = int(request.url.params.get("_limit", 25))
            rows = [row for row in self.carts if row.get("user_name") == name][:limit]
            return httpx.Response(200, json={"data": rows, "meta": {}})

        if request.method == "DELETE" and path.startswith("/api/carts/"):
            item_id = path.rsplit("/", 1)[-1]
            if item_id in {str(i) for i in self.fail_delete_ids}:
                return httpx.Response(500, text="delete failed")
            row = next((r for r in self.carts if str(r["id"]) == item_id), None)
            if row is None:
                return httpx.Response(404, json={"error": {"status": 404, "name": "NotFoundError"}})
            self.carts.remove(row)
            return httpx.Response(200, json={"data": row})

        if request.method == "POST" and path == "/api/transactions":
            self._creates += 1
            if self._creates == self.fail_create_at:
                if self.create_transport_error:
                    raise httpx.ConnectError("connection refused", request=request)
                return httpx.Response(400, json={"error": {"status": 400, "message": "invalid"}})
            body = json.loads(request.content)
            self._next_id += 1
            created = {"id": self._next_id, **body["data"]}
            self.transactions.append(created)
            return httpx.Response(200, json={"data": created})

        return httpx.Response(404, text="not found")


@pytest.fixture
def settings():
    return Settings(api_url=API_URL, cart_limit=1000, currency="USD")


@pytest.fixture
def server():
    return FakeContentServer()


@pytest.fixture
def content_api(settings, server):
    """ContentApiClient whose requests are answered by the fake server."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(server.handle), base_url=API_URL)
    return ContentApiClient(settings, http_client=client)


@pytest.fixture
def alerts():
    return []


@pytest.fixture
def make_view(content_api, alerts):
    def _make(user_name="alice"):
        return CartView(
            {"name": user_name},
            carts=CartResource(content_api),
            transactions=TransactionResource(content_api),
            notifier=alerts.append,
            today=lambda: CHECKOUT_DAY,
        )
    return _make


@pytest.fixture
def sample_rows():
    """Cart rows for two users"""
    return [
        {"id": 1, "product_name": "Mug", "price": 10.0, "quantity": 2, "user_name": "alice", "branch_name": "A"},
        {"id": 2, "product_name": "Tumbler", "price": 15.5, "quantity": 1, "user_name": "alice", "branch_name": "B"},
        {"id": 3, "product_name": "Tote Bag", "price": 7.25, "quantity": 4, "user_name": "alice", "branch_name": "A"},
        {"id": 4, "product_name": "Keychain", "price": 3.0, "quantity": 1, "user_name": "bob", "branch_name": "A"},
    ]
