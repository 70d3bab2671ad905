"""Configure pytest for the Four Paws project."""
import os
import sys
from pathlib import Path

import pytest

# =============================================================================
# Test Environment Configuration
# =============================================================================
# Set environment for tests BEFORE any imports
# app.main builds a module-level app from these at import time
os.environ.setdefault("SESSION_SECRET", "test-session-secret-0123456789abcdef")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_PATH", ":memory:")

# Add project root so tests can import the top-level packages
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

OWNER_EMAIL = "owner@example.com"
OWNER_PASSWORD = "correct-horse-battery"
TEST_SECRET = os.environ["SESSION_SECRET"]


class FakeClock:
    """Callable clock in epoch seconds that tests advance by hand."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fast_hashing(monkeypatch):
    """Drop the bcrypt cost so suites that hash many passwords stay quick."""
    monkeypatch.setattr("auth.password.BCRYPT_ROUNDS", 4)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def db():
    from persistence.db import Database

    database = Database(":memory:")
    database.init_schema()
    yield database
    database.close()


@pytest.fixture
def auth_service(db, clock, fast_hashing):
    from auth.service import build_auth_service

    return build_auth_service(db, secret=TEST_SECRET, clock=clock)


@pytest.fixture
def owner(auth_service):
    return auth_service.ensure_owner_exists(OWNER_EMAIL, OWNER_PASSWORD, display_name="Studio Owner")


@pytest.fixture
def app(db, clock, fast_hashing):
    from app.config import AppConfig
    from app.main import create_app

    config = AppConfig(session_secret=TEST_SECRET, environment="test", database_path=":memory:")
    return create_app(config=config, db=db, clock=clock)


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def logged_in_client(client, app):
    """A client holding a live session cookie for the seeded owner."""
    app.state.auth_service.ensure_owner_exists(OWNER_EMAIL, OWNER_PASSWORD)
    response = client.post("/api/auth/login", json={"email": OWNER_EMAIL, "password": OWNER_PASSWORD})
    assert response.status_code == 200
    return client
