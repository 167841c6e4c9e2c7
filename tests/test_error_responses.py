from coffee_ops.core.errors import ConflictError


def test_malformed_json_returns_error_shape(client):
    response = client.post(
        "/api/menu",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Invalid request body"
    assert isinstance(body["details"], list)


def test_type_errors_include_field_details(client):
    response = client.post("/api/menu", json={"name": "Latte", "price": "cheap", "category": "Coffee"})

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request body"
    assert response.json()["details"][0]["loc"][-1] == "price"


def test_unknown_route_uses_error_shape(client):
    response = client.get("/api/nothing-here")

    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}


def test_conflict_error_keeps_message():
    error = ConflictError("Insufficient stock")

    assert error.status_code == 409
    assert str(error) == "Insufficient stock"


def test_get_requests_do_not_change_state(client, menu_items, member):
    first = [client.get(path).json() for path in ("/api/menu", "/api/members/10", "/api/orders/stats")]
    second = [client.get(path).json() for path in ("/api/menu", "/api/members/10", "/api/orders/stats")]

    assert first == second


def test_unexpected_exception_returns_json_500(database, member, monkeypatch):
    from fastapi.testclient import TestClient

    from coffee_ops.main import create_app
    from coffee_ops.services import members as member_service

    def _explode(*args, **kwargs):
        raise ValueError("ledger offline")

    monkeypatch.setattr(member_service, "top_up", _explode)
    client = TestClient(create_app(database=database), raise_server_exceptions=False)

    response = client.post("/api/members/topup", json={"memberId": 10, "amount": 5})

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
