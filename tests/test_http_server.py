import pytest
from fastapi.testclient import TestClient

from fastfood_server import http_server
from fastfood_server.appwrite_client import AppwriteException


@pytest.fixture
def api(monkeypatch, storefront):
    monkeypatch.setattr(http_server, "storefront", storefront)
    # No context manager: lifespan would build a storefront from the environment
    return TestClient(http_server.app)


def test_health(api):
    response = api.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "authenticated": False}


def test_sign_in(api):
    response = api.post("/auth/sign-in", json={"email": "john.doe@example.com", "password": "Passw0rd!"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "status": "authenticated"}
    assert api.get("/auth/status").json()["authenticated"] is True


def test_sign_in_validation_error(api):
    response = api.post("/auth/sign-in", json={"email": "nope", "password": ""})

    assert response.status_code == 400
    assert set(response.json()["errors"]) == {"email", "password"}


def test_sign_in_rate_limited(api, mock_client):
    mock_client.sign_in.side_effect = AppwriteException("Invalid credentials")
    payload = {"email": "john.doe@example.com", "password": "wrong"}

    for _ in range(5):
        assert api.post("/auth/sign-in", json=payload).status_code == 502

    response = api.post("/auth/sign-in", json=payload)

    assert response.status_code == 429
    assert response.json()["retry_after"] == 900


def test_remote_failure_detail_is_sanitized(api, mock_client):
    mock_client.sign_in.side_effect = AppwriteException("Invalid credentials")

    response = api.post("/auth/sign-in", json={"email": "john.doe@example.com", "password": "wrong"})

    assert response.status_code == 502
    assert response.json() == {"detail": "Invalid email or password. Please try again."}


def test_profile_requires_sign_in(api):
    response = api.get("/profile")

    assert response.status_code == 401
    assert response.json()["detail"] == "Please sign in to continue."


def test_profile(api):
    api.post("/auth/sign-in", json={"email": "john.doe@example.com", "password": "Passw0rd!"})

    response = api.get("/profile")

    assert response.json()["name"] == "John Doe"


def test_search_menu(api):
    response = api.post("/menu/search", json={"query": "burger"})

    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 1
    assert data["items"][0]["name"] == "Classic Burger"


def test_search_menu_rejects_unsafe_query(api):
    response = api.post("/menu/search", json={"query": "<script>"})

    assert response.status_code == 400
    assert response.json()["errors"] == {"query": "Search contains invalid characters"}


def test_cart_flow(api):
    response = api.post("/cart/add", json={"menu_id": "m1", "customization_ids": ["c1"]})
    assert response.status_code == 200
    assert response.json()["cart"]["item_count"] == 1

    api.post("/cart/increase", json={"menu_id": "m1"})
    summary = api.get("/cart").json()["summary"]
    assert summary["subtotal"] == "23.00"
    assert summary["total"] == "27.50"

    cart = api.post("/cart/remove", json={"menu_id": "m1"}).json()["cart"]
    assert cart["items"] == []


def test_empty_cart_summary(api):
    summary = api.get("/cart").json()["summary"]

    assert summary["total_items"] == 0
    assert summary["total"] == "4.50"


def test_place_order(api):
    assert api.post("/orders").status_code == 400

    api.post("/cart/add", json={"menu_id": "m1"})
    response = api.post("/orders")

    assert response.status_code == 200
    assert response.json()["total"] == "14.50"
    assert api.get("/cart").json()["cart"]["item_count"] == 0


def test_add_to_cart_quantity_limit(api):
    response = api.post("/cart/add", json={"menu_id": "m1", "quantity": 100})

    assert response.status_code == 400
    assert response.json()["errors"] == {"quantity": "Quantity must be between 1 and 99"}
    assert api.get("/cart").json()["cart"]["item_count"] == 0
