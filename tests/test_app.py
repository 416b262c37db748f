from fastapi.testclient import TestClient

from bistro.core.config import EnvironmentMode
from bistro.main import create_app
from bistro.services import orders as order_service
from tests.helpers import FRONTEND_ORIGIN


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "operational"
    assert body["database"] == "healthy"
    assert body["environment"] == "development"


def test_unknown_api_route_is_json_404(client):
    response = client.get("/api/nothing/here")

    assert response.status_code == 404
    assert response.json() == {"error": "No API route for /api/nothing/here"}


def test_wrong_method_on_api_route_is_405(client):
    response = client.put("/api/orders")

    assert response.status_code == 405
    assert response.json() == {"error": "Method Not Allowed"}
    assert set(response.headers["allow"].split(", ")) == {"GET", "POST"}


def test_frontend_is_served_outside_api(client):
    response = client.get("/")

    assert response.status_code == 200
    assert "<h1>bistro</h1>" in response.text


def test_missing_static_dir_only_disables_frontend(settings, tmp_path):
    app = create_app(settings.model_copy(update={"static_dir": str(tmp_path / "absent")}))
    with TestClient(app) as client:
        assert client.get("/health").status_code == 200
        assert client.get("/").status_code == 404


def test_cors_allows_configured_origin_with_credentials(client):
    response = client.options(
        "/api/orders",
        headers={
            "Origin": FRONTEND_ORIGIN,
            "Access-Control-Request-Method": "POST",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == FRONTEND_ORIGIN
    assert response.headers["access-control-allow-credentials"] == "true"


def test_unexpected_error_is_json_500_with_cors_headers(client, logged_in, monkeypatch):
    async def broken_listing(db, user_id):
        raise RuntimeError("boom")

    monkeypatch.setattr(order_service, "get_orders", broken_listing)
    response = client.get("/api/orders", headers={"Origin": FRONTEND_ORIGIN})

    assert response.status_code == 500
    assert response.json() == {"error": "Internal Server Error"}
    assert response.headers["access-control-allow-origin"] == FRONTEND_ORIGIN


def test_cors_rejects_other_origins(client):
    response = client.get("/health", headers={"Origin": "http://evil.test"})

    assert "access-control-allow-origin" not in response.headers


def test_debug_session_shows_decoded_cookie(client, logged_in):
    response = client.get("/api/debug-session")

    assert response.status_code == 200
    assert response.json()["user_id"] == logged_in["id"]


def test_debug_session_hidden_outside_development(settings):
    app = create_app(settings.model_copy(update={"env_mode": EnvironmentMode.PRODUCTION}))
    with TestClient(app) as client:
        assert client.get("/api/debug-session").status_code == 404


# =============================================================================
# MENU
# =============================================================================

def test_menu_is_public(client, seeded_menu):
    response = client.get("/api/menu")

    assert response.status_code == 200
    assert response.json() == [
        {
            "id": 1,
            "name": "Margherita",
            "description": "Tomato and mozzarella",
            "price": "9.50",
            "imageUrl": "/img/margherita.jpg",
        },
        {
            "id": 2,
            "name": "Tiramisu",
            "description": None,
            "price": "4.25",
            "imageUrl": None,
        },
    ]


def test_menu_item_lookup(client, seeded_menu):
    assert client.get("/api/menu/2").json()["name"] == "Tiramisu"

    missing = client.get("/api/menu/42")
    assert missing.status_code == 404
    assert missing.json() == {"error": "Menu item 42 not found"}
