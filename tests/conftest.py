# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from tarot_gate.admin import AdminGate
from tarot_gate.config import Settings
from tarot_gate.db import Database
from tarot_gate.tokens import TokenService

ADMIN_KEYWORD = "open-sesame"


class FakeReadingClient:
    """Stands in for GeminiClient; records every call it receives."""

    def __init__(self, reply="The cards speak.", configured=True, error=None):
        self.reply = reply
        self.configured = configured
        self.error = error
        self.calls = []

    def generate(self, system_instruction, prompt):
        self.calls.append((system_instruction, prompt))
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite://",
        google_api_key="test-key",
        admin_keyword=ADMIN_KEYWORD,
        session_secret="test-session-secret",
    )


@pytest.fixture
def database(settings):
    db = Database(settings.database_url)
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def token_service(database, settings):
    return TokenService(database, settings)


@pytest.fixture
def admin_gate(settings):
    return AdminGate(settings)


@pytest.fixture
def admin(admin_gate):
    """A capability obtained through a real keyword login."""
    return admin_gate.login({}, ADMIN_KEYWORD)


@pytest.fixture
def reading_client():
    return FakeReadingClient()


@pytest.fixture
def app(settings, reading_client):
    return create_app(settings=settings, reading_client=reading_client)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_client(client):
    response = client.post("/api/admin/login", json={"keyword": ADMIN_KEYWORD})
    assert response.status_code == 200
    return client
