import uuid

import pytest
from fastapi.testclient import TestClient

from coffee_ops.core import startup_checks


REQUIRED_ROUTES = {
    "/api/auth/register",
    "/api/auth/login",
    "/api/auth/me",
    "/api/auth/token",
    "/api/menu",
    "/api/menu/{item_id}",
    "/api/menu/{item_id}/toggle-availability",
    "/api/categories",
    "/api/categories/reorder",
    "/api/inventory",
    "/api/inventory/{item_id}/transactions",
    "/api/orders",
    "/api/orders/{order_id}",
    "/api/members",
    "/api/members/topup",
    "/api/members/transactions",
    "/api/reservations",
    "/api/reservations/availability",
    "/api/reservations/{reservation_id}/status",
    "/api/wishlist",
    "/api/wishlist/top",
    "/api/upload",
    "/api/internal/metrics",
    "/health",
    "/api/config",
}


def test_api_startup_and_router_registration(monkeypatch):
    from coffee_ops import main

    monkeypatch.setattr(main, "_startup_tasks", lambda database: None)

    with TestClient(main.app) as client:
        response = client.get("/")
        docs_response = client.get("/docs")
        openapi_response = client.get("/openapi.json")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert docs_response.status_code == 200
    assert openapi_response.status_code == 200

    paths = {route.path for route in main.app.routes}
    assert REQUIRED_ROUTES.issubset(paths)


def test_lifespan_opens_sqlite_database_and_creates_tables(monkeypatch, tmp_path):
    from coffee_ops.core.database import Database
    from coffee_ops.main import create_app

    monkeypatch.setenv("ENV", "test")
    database = Database(f"sqlite:///{tmp_path / 'shop.db'}")

    with TestClient(create_app(database=database)) as client:
        health = client.get("/health")
        menu = client.get("/api/menu")

    assert health.status_code == 200
    assert health.json() == {"status": "healthy", "database": "ok"}
    assert menu.json() == []
    assert database.is_open is False


def test_health_reports_unavailable_database():
    from coffee_ops.core.database import Database
    from coffee_ops.main import create_app

    client = TestClient(create_app(database=Database("sqlite+pysqlite:///:memory:")))

    response = client.get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "unhealthy"


def test_response_carries_request_id(client):
    generated = client.get("/")
    echoed = client.get("/", headers={"X-Request-ID": "req-123"})

    assert uuid.UUID(generated.headers["X-Request-ID"])
    assert echoed.headers["X-Request-ID"] == "req-123"


def test_cors_allows_local_frontend(client):
    response = client.options(
        "/api/menu",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "GET",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"


def test_client_config_exposes_mock_flag(client, monkeypatch):
    from coffee_ops.core import config

    monkeypatch.setattr(config, "USE_MOCK_API", True)

    assert client.get("/api/config").json() == {"useMockApi": True}


def test_internal_metrics_groups_by_route_template(client, menu_items):
    client.get("/api/menu/1")
    client.get("/api/menu/2")
    client.get("/api/menu/999")

    snapshot = client.get("/api/internal/metrics").json()["endpoints"]

    assert snapshot["GET /api/menu/{item_id}"]["total_requests"] == 3
    assert snapshot["GET /api/menu/{item_id}"]["error_count"] == 1


def test_sqlite_is_rejected_in_production(monkeypatch):
    monkeypatch.setenv("ENV", "production")

    with pytest.raises(RuntimeError, match="SQLite is forbidden"):
        startup_checks.validate_database_environment("sqlite:///./coffee_shop.db")

    startup_checks.validate_database_environment("postgresql://user:pw@db/shop")


def test_migration_check_is_skipped_in_test_env(monkeypatch):
    monkeypatch.setenv("ENV", "test")

    startup_checks.ensure_migrations_applied(engine=None, alembic_config_path=None)


def test_auto_migration_disabled_by_flag(monkeypatch):
    calls = []
    monkeypatch.setenv("AUTO_APPLY_MIGRATIONS", "false")
    monkeypatch.setattr(startup_checks.command, "upgrade", lambda *args: calls.append(args))

    startup_checks.apply_migrations(alembic_config_path=None, database_url="postgresql://db/shop")

    assert calls == []
