"""
Shared fixtures for the patient dashboard tests.

Every API test gets a fresh application backed by an in-memory SQLite
database, so tests never see each other's records.
"""

import uuid

import pytest
from fastapi.testclient import TestClient

from patient_dashboard.config import Settings
from patient_dashboard.main import create_app

API = "/api/v1"
TEST_SECRET = "test-secret-key-that-is-at-least-32-bytes-long"
PASSWORD = "Secret123"


def make_settings(**overrides) -> Settings:
    """Settings for tests; keyword arguments override the defaults."""
    values = dict(
        ENV="test",
        JWT_SECRET=TEST_SECRET,
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        BCRYPT_SALT_ROUNDS=10,
        RATE_LIMIT_MAX_REQUESTS=10000,
        LOG_LEVEL="WARNING",
        DB_MAX_RETRIES=1,
        DB_RETRY_DELAY=0,
        ALLOW_ROLE_SELF_ASSIGNMENT=True,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def client(settings):
    """Test client with the application lifespan running."""
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def register_user(client):
    """Register a user and return the auth payload (user, token, refreshToken)."""
    def _register(email=None, role=None, password=PASSWORD, name="Jane Doe"):
        body = {
            "email": email or f"user-{uuid.uuid4().hex[:8]}@example.com",
            "password": password,
            "name": name,
            "dob": "1990-05-15",
        }
        if role is not None:
            body["role"] = role
        response = client.post(f"{API}/auth/register", json=body)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _register


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers(register_user):
    return bearer(register_user()["token"])


@pytest.fixture
def other_user_headers(register_user):
    return bearer(register_user()["token"])


@pytest.fixture
def admin_headers(register_user):
    return bearer(register_user(role="admin")["token"])


@pytest.fixture
def client_factory():
    """Build extra clients with overridden settings; all are closed after the test."""
    clients = []

    def _build(**overrides):
        test_client = TestClient(create_app(make_settings(**overrides)))
        test_client.__enter__()
        clients.append(test_client)
        return test_client

    yield _build

    for test_client in clients:
        test_client.__exit__(None, None, None)
