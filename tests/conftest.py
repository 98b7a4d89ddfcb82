import os

# The module-level app in ``main`` is built on import; keep it off disk.
os.environ.setdefault("DATABASE_URL", ":memory:")

import pytest
from fastapi.testclient import TestClient

from community_sport_api.app.core.config import Settings
from community_sport_api.app.core.context import AppContext, build_context
from community_sport_api.app.main import create_app
from community_sport_api.app.schemas.program import Program

ADMIN_TOKEN = "test-admin-token"


class FakeClock:
    """Monotonic clock the tests advance by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def program_document(**overrides):
    """A stored program document using the Python field names."""
    document = {
        "title": "Netball Night",
        "sport": "Netball",
        "organizer_email": "coach@example.com",
        "description": "Social netball for all levels",
        "age_groups": ["adult"],
        "cost": 0,
        "cost_unit": "session",
        "accessibility": [],
        "inclusivity_tags": [],
        "venue": {"name": "Carlton Courts", "suburb": "Carlton", "address": "1 Court St"},
        "status": "active",
    }
    document.update(overrides)
    return document


def make_program(program_id: str = "p1", **overrides) -> Program:
    return Program.model_validate({"id": program_id, **program_document(**overrides)})


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=str(tmp_path / "community_sport.db"),
        secret_key="test-secret",
        admin_token=ADMIN_TOKEN,
        log_level="WARNING",
    )


@pytest.fixture
def ctx(settings) -> AppContext:
    return build_context(settings)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture
def register(client):
    """Register an account through the API and return its auth headers."""

    def _register(email: str, role: str | None = None, password: str = "s3cret!"):
        body = {"email": email, "password": password}
        if role is not None:
            body["role"] = role
        response = client.post("/api/v1/auth/register", json=body)
        assert response.status_code == 201, response.text
        data = response.json()
        return {"Authorization": f"Bearer {data['access_token']}"}, data

    return _register
