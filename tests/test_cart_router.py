"""Tests for the cart panel API"""
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from fastapi.testclient import TestClient

from pickngo.app import create_app
from pickngo.auth import create_web_session
from pickngo.auth import session as session_module
from pickngo.routers import deps
from pickngo.services.strapi import ContentApiClient

API_URL = "http://strapi.test/api"


@pytest.fixture
def client(settings, server, sample_rows):
    """Test client wired to the fake content server"""
    server.carts = sample_rows
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(server.handle), base_url=API_URL)
    deps.set_content_api(ContentApiClient(settings, http_client=http_client))
    with TestClient(create_app()) as test_client:
        yield test_client
    deps.set_content_api(None)


@pytest.fixture
def auth_headers():
    token = create_web_session("alice")
    return {"Authorization": f"Bearer {token}"}


def test_health_check(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.parametrize("headers", [{}, {"Authorization": "Bearer nope"}, {"Authorization": "Basic abc"}])
def test_cart_requires_session(client, server, headers):
    response = client.get("/api/webapp/cart", headers=headers)

    assert response.status_code == 401
    assert server.requests == []


def test_get_cart(client, auth_headers):
    response = client.get("/api/webapp/cart", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["user_name"] == "alice"
    assert [item["id"] for item in data["items"]] == [1, 2, 3]
    assert data["total_price"] == 0.0
    assert data["messages"] == []


def test_toggle_and_select_all(client, auth_headers):
    client.get("/api/webapp/cart", headers=auth_headers)

    data = client.post("/api/webapp/cart/items/2/toggle", headers=auth_headers).json()
    assert data["total_price"] == 15.5
    assert data["select_all"] is False

    data = client.post("/api/webapp/cart/select-all", headers=auth_headers).json()
    assert data["select_all"] is True
    assert data["total_price"] == 64.5

    data = client.post("/api/webapp/cart/select-all", headers=auth_headers).json()
    assert data["select_all"] is False
    assert data["total_price"] == 0.0


def test_toggle_unknown_item(client, auth_headers):
    response = client.post("/api/webapp/cart/items/99/toggle", headers=auth_headers)

    assert response.status_code == 404


def test_remove_item(client, server, auth_headers):
    response = client.delete("/api/webapp/cart/items/3", headers=auth_headers)

    assert response.status_code == 200
    assert [item["id"] for item in response.json()["items"]] == [1, 2]
    assert ("DELETE", "/api/carts/3") in server.requests


def test_checkout_without_selection(client, auth_headers):
    data = client.post("/api/webapp/cart/checkout", headers=auth_headers).json()

    assert data["result"]["status"] == "nothing_selected"
    assert data["cart"]["messages"] == ["Please select items to checkout."]


def test_checkout(client, server, auth_headers):
    client.post("/api/webapp/cart/items/1/toggle", headers=auth_headers)

    data = client.post("/api/webapp/cart/checkout", headers=auth_headers).json()

    assert data["result"]["status"] == "completed"
    assert data["result"]["created"][0]["total"] == 20.0
    assert data["result"]["deleted_ids"] == [1]
    assert data["cart"]["messages"] == ["Checkout successful"]
    assert [item["id"] for item in data["cart"]["items"]] == [2, 3]
    assert len(server.transactions) == 1


def test_sessions_get_separate_panels(client, auth_headers):
    client.post("/api/webapp/cart/items/1/toggle", headers=auth_headers)
    other = {"Authorization": f"Bearer {create_web_session('alice')}"}

    data = client.get("/api/webapp/cart", headers=other).json()

    assert all(item["selected"] is False for item in data["items"])


def test_first_get_loads_once(client, server, auth_headers):
    client.get("/api/webapp/cart", headers=auth_headers)

    assert server.calls("GET") == [("GET", "/api/carts")]


def test_sign_out_revokes_session_and_panel(client, auth_headers):
    token = auth_headers["Authorization"].split(" ", 1)[1]
    client.get("/api/webapp/cart", headers=auth_headers)
    assert token in deps._views

    response = client.post("/api/webapp/session/sign-out", headers=auth_headers)

    assert response.status_code == 204
    assert token not in deps._views
    assert client.get("/api/webapp/cart", headers=auth_headers).status_code == 401


def test_expired_session_releases_panel(client, auth_headers):
    token = auth_headers["Authorization"].split(" ", 1)[1]
    client.get("/api/webapp/cart", headers=auth_headers)
    expired = datetime.now(timezone.utc) - timedelta(seconds=1)
    session_module._web_sessions[token]["expires_at"] = expired.isoformat()

    response = client.get("/api/webapp/cart", headers=auth_headers)

    assert response.status_code == 401
    assert token not in deps._views
