# tests/conftest.py
import os
import tempfile
import uuid

# Settings are cached on first use, so the test environment must be in place
# before anything from the application is imported.
_DB_DIR = tempfile.mkdtemp(prefix="meeting_scheduler_tests_")
os.environ["APP_ENV"] = "test"
os.environ["STORE_BACKEND"] = "sql"
os.environ["DB_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ.pop("INTERNAL_API_KEY", None)
os.environ.pop("PUSH_WEBHOOK_URL", None)
os.environ.pop("SMTP_HOST", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from meeting_scheduler.main import create_app  # noqa: E402


@pytest.fixture(scope="session")
def client() -> TestClient:
    """
    Shared TestClient fixture for all API tests.

    Entering the client runs the startup hook, which creates the schema in a
    throwaway SQLite database.
    """
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(client):
    """
    Provision a user through the internal endpoint and return its record.
    """

    def _make_user(name: str, role: str = "member", **extra) -> dict:
        payload = {
            "name": name,
            "username": f"{name.split()[0].lower()}-{uuid.uuid4().hex[:8]}",
            "email": f"{uuid.uuid4().hex[:8]}@example.com",
            "role": role,
            **extra,
        }
        resp = client.post("/internal/users", json=payload)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make_user


@pytest.fixture
def make_room(client):
    """
    Create a room as the given admin and return its record.
    """

    def _make_room(admin: dict, name: str | None = None, **extra) -> dict:
        payload = {"name": name or f"Sala {uuid.uuid4().hex[:6]}", **extra}
        resp = client.post("/rooms", json=payload, headers={"X-User-Id": admin["id"]})
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make_room