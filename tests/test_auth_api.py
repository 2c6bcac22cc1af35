"""Tests for auth pass-through and session endpoints."""

from types import SimpleNamespace
from unittest.mock import patch

from fastapi.testclient import TestClient

from app.main import app


def test_session_unauthenticated(fake_db):
    client = TestClient(app)
    response = client.get("/v1/session")
    assert response.status_code == 200
    assert response.json()["authenticated"] is False


def test_session_authenticated(fake_db, owner):
    client = TestClient(app)
    data = client.get("/v1/session", headers={"Authorization": f"Bearer {owner['token']}"}).json()

    assert data["authenticated"] is True
    assert data["profile"]["org_id"] == owner["org_id"]
    assert data["has_knowledge_base"] is True


def test_sign_in_returns_tokens(fake_db):
    client = TestClient(app)
    auth_response = SimpleNamespace(
        session=SimpleNamespace(access_token="access", refresh_token="refresh"),
        user=SimpleNamespace(id="user-1", email="a@example.com"),
    )
    with patch("app.api.auth.get_auth_client") as mock_client:
        mock_client.return_value.auth.sign_in_with_password.return_value = auth_response
        response = client.post("/v1/auth/sign-in", json={"email": "a@example.com", "password": "pw"})

    assert response.status_code == 200
    assert response.json()["access_token"] == "access"
    assert response.json()["user_id"] == "user-1"


def test_sign_in_failure_is_401(fake_db):
    client = TestClient(app)
    with patch("app.api.auth.get_auth_client") as mock_client:
        mock_client.return_value.auth.sign_in_with_password.side_effect = RuntimeError("Invalid login credentials")
        response = client.post("/v1/auth/sign-in", json={"email": "a@example.com", "password": "bad"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid login credentials"


def test_sign_in_with_session_redirects_to_dashboard(fake_db, owner):
    client = TestClient(app)
    response = client.post(
        "/v1/auth/sign-in",
        json={"email": "owner@example.com", "password": "pw"},
        headers={"Authorization": f"Bearer {owner['token']}"},
    )
    assert response.status_code == 403
    assert response.json()["detail"]["redirect_to"] == "/dashboard"


def test_sign_out(fake_db, owner):
    client = TestClient(app)
    response = client.post("/v1/auth/sign-out", headers={"Authorization": f"Bearer {owner['token']}"})
    assert response.status_code == 204


def test_reset_password_with_bad_link(fake_db):
    client = TestClient(app)
    response = client.post(
        "/v1/auth/reset-password", json={"access_token": "expired", "new_password": "new-secret"}
    )
    assert response.status_code == 400
