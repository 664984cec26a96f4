"""Tests covering cross-cutting request handling: CORS, limits and JSON errors."""

from __future__ import annotations

from flask import Flask

from app import create_app
from config import Config


class _SecurityBaseConfig(Config):
    TESTING = True
    APP_ENV = "testing"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    JWT_SECRET_KEY = "security-test-jwt-secret-key-long-enough-for-hs256"
    MAIL_SUPPRESS_SEND = True


def _build_app(**overrides) -> Flask:
    config = type("OverrideConfig", (_SecurityBaseConfig,), overrides)
    return create_app(config)


def test_cors_allows_configured_origin():
    app = _build_app(CORS_ORIGINS=["https://gym.example"])
    client = app.test_client()

    response = client.get("/health", headers={"Origin": "https://gym.example"})

    assert response.status_code == 200
    assert response.headers.get("Access-Control-Allow-Origin") == "https://gym.example"
    assert response.headers.get("X-Request-ID")


def test_rate_limit_exceeded_returns_json():
    app = _build_app(RATE_LIMIT="2 per minute")
    client = app.test_client()

    client.get("/health")
    client.get("/health")
    response = client.get("/health")

    assert response.status_code == 429
    payload = response.get_json()
    assert payload["error"] == "Too Many Requests"
    assert "request_id" in payload


def test_non_json_body_is_rejected():
    client = _build_app().test_client()

    response = client.post("/auth/login", data="email=a", content_type="text/plain")

    assert response.status_code == 400
    payload = response.get_json()
    assert payload["error"] == "Bad Request"
    assert "Request content type" in payload["detail"]
    assert payload["request_id"]


def test_request_id_is_echoed():
    client = _build_app().test_client()

    response = client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.headers.get("X-Request-ID") == "req-123"


def test_unknown_route_is_json_404():
    client = _build_app().test_client()

    response = client.get("/does-not-exist")

    assert response.status_code == 404
    assert response.get_json()["error"] == "Not Found"


def test_unhandled_error_hides_details():
    app = _build_app(APP_ENV="production")

    @app.route("/boom")
    def boom():
        raise RuntimeError("database password is hunter2")

    response = app.test_client().get("/boom")

    assert response.status_code == 500
    payload = response.get_json()
    assert payload["detail"] == "An unexpected error occurred."
    assert "hunter2" not in response.get_data(as_text=True)


def test_protected_route_without_token_returns_json_401():
    client = _build_app().test_client()

    response = client.get("/auth/validate")

    assert response.status_code == 401
    payload = response.get_json()
    assert payload["error"] == "Unauthorized"
    assert payload["detail"] == "No token provided."
    assert payload["request_id"]
