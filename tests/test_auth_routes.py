import pytest

from coffee_ops.core import startup_checks
from coffee_ops.core.config import DEFAULT_JWT_SECRET
from coffee_ops.models.user import User
from tests.fixtures_data import USER_PAYLOAD


def _register(client, **overrides):
    return client.post("/api/auth/register", json={**USER_PAYLOAD, **overrides})


def test_register_returns_user_and_token(client, session):
    response = _register(client)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["user"]["email"] == "carla@example.com"
    assert body["user"]["name"] == "Carla"
    assert "password_hash" not in body["user"]
    assert body["token"]

    stored = session.query(User).filter(User.email == "carla@example.com").one()
    assert stored.password_hash != USER_PAYLOAD["password"]


def test_register_rejects_duplicate_email(client):
    _register(client)

    response = _register(client, email="CARLA@example.com")

    assert response.status_code == 409
    assert response.json() == {"error": "User already exists with this email"}


def test_register_requires_all_fields(client):
    response = client.post("/api/auth/register", json={"email": "x@example.com"})

    assert response.status_code == 400
    assert response.json()["error"] == "Email, password, and name are required"


def test_login_with_valid_and_wrong_password(client):
    _register(client)

    ok = client.post("/api/auth/login", json={"email": "carla@example.com", "password": USER_PAYLOAD["password"]})
    wrong = client.post("/api/auth/login", json={"email": "carla@example.com", "password": "nope-nope"})
    unknown = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "whatever"})

    assert ok.status_code == 200
    assert ok.json()["user"]["email"] == "carla@example.com"
    assert wrong.status_code == 401
    assert wrong.json() == {"error": "Invalid email or password"}
    assert unknown.status_code == 401


def test_login_requires_email_and_password(client):
    response = client.post("/api/auth/login", json={"email": "carla@example.com"})

    assert response.status_code == 400
    assert response.json()["error"] == "Email and password are required"


def test_me_returns_current_user(client):
    token = _register(client).json()["token"]

    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.json()["user"]["email"] == "carla@example.com"


def test_me_requires_valid_token(client):
    missing = client.get("/api/auth/me")
    garbage = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert missing.status_code == 401
    assert missing.json() == {"error": "No token provided"}
    assert garbage.status_code == 401
    assert garbage.json() == {"error": "Invalid token"}


def test_token_endpoint_accepts_password_form(client):
    _register(client)

    response = client.post(
        "/api/auth/token",
        data={"username": "carla@example.com", "password": USER_PAYLOAD["password"]},
    )

    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"
    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {response.json()['access_token']}"})
    assert me.json()["user"]["name"] == "Carla"


def test_default_jwt_secret_is_rejected_in_production(monkeypatch):
    monkeypatch.setenv("ENV", "production")

    with pytest.raises(RuntimeError, match="JWT_SECRET must be set"):
        startup_checks.validate_jwt_secret(DEFAULT_JWT_SECRET)

    startup_checks.validate_jwt_secret("a-real-secret")
