# app/tests/test_security.py
"""Tests for security middleware."""
import pytest
from fastapi.testclient import TestClient

from app.config import AppConfig
from app.main import create_app

TEST_SECRET = "s" * 32


@pytest.fixture
def small_limit_client(db, clock):
    """Client for an app that accepts at most 1KB request bodies."""
    config = AppConfig(session_secret=TEST_SECRET, environment="test", max_request_size_bytes=1024)
    with TestClient(create_app(config=config, db=db, clock=clock)) as client:
        yield client


class TestRequestSizeLimit:
    """Tests for request size limit middleware."""

    def test_small_request_allowed(self, small_limit_client):
        response = small_limit_client.post(
            "/api/auth/login",
            json={"email": "owner@example.com", "password": "wrong-password-xyz"},
        )
        assert response.status_code == 401

    def test_large_request_rejected(self, small_limit_client):
        response = small_limit_client.post(
            "/api/auth/login",
            content=b"x" * 2048,
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 413
        assert response.json()["error"] == "Request entity too large"


class TestSecurityHeaders:
    """Tests for security headers middleware."""

    def test_security_headers_present(self, client):
        response = client.get("/health")

        assert response.headers.get("X-Content-Type-Options") == "nosniff"
        assert response.headers.get("X-Frame-Options") == "DENY"
        assert response.headers.get("Referrer-Policy") == "strict-origin-when-cross-origin"
        assert response.headers.get("Cache-Control") == "no-store"

    def test_security_headers_on_error_responses(self, client):
        response = client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.headers.get("X-Content-Type-Options") == "nosniff"


class TestSecureCookies:
    """Session cookies carry Secure only in production."""

    def test_production_cookie_is_secure(self, db, clock, fast_hashing):
        config = AppConfig(session_secret=TEST_SECRET, environment="production")
        app = create_app(config=config, db=db, clock=clock)
        app.state.auth_service.ensure_owner_exists("owner@example.com", "correct-horse-battery")

        with TestClient(app) as client:
            response = client.post(
                "/api/auth/login",
                json={"email": "owner@example.com", "password": "correct-horse-battery"},
            )

        assert response.status_code == 200
        assert "Secure" in response.headers["set-cookie"]

    def test_test_environment_cookie_is_not_secure(self, logged_in_client):
        response = logged_in_client.post("/api/auth/rotate")
        assert "Secure" not in response.headers["set-cookie"]


class TestUnhandledErrors:

    def test_storage_failure_is_opaque_500(self, logged_in_client, monkeypatch, caplog):
        import sqlite3

        def broken(db, owner_id):
            raise sqlite3.OperationalError("database is locked")

        monkeypatch.setattr("content.pets.list_pets", broken)
        response = logged_in_client.get("/api/pets")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal Server Error"}
        assert "database is locked" not in response.text
        assert any("Unhandled error" in r.getMessage() for r in caplog.records)

    def test_unhandled_error_log_carries_request_id(self, logged_in_client, monkeypatch, caplog):
        def broken(db, owner_id):
            raise RuntimeError("boom")

        monkeypatch.setattr("content.pets.list_pets", broken)
        response = logged_in_client.get("/api/pets", headers={"X-Request-Id": "trace-500"})

        assert response.status_code == 500
        assert any(
            "[trace-500] Unhandled error" in r.getMessage() for r in caplog.records
        )
