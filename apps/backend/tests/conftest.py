import uuid
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from core.application_store import INITIAL_STATUS, STATUS_PIPELINE
from core.identity import Identity


class FakePageFetcher:
    """Serves canned HTML instead of touching the network."""

    def __init__(self, html: str = "", error: Exception | None = None):
        self.html = html
        self.error = error
        self.calls = []

    async def fetch_page(self, url: str) -> str:
        self.calls.append(url)
        if self.error:
            raise self.error
        return self.html


class FakeApplicationStore:
    """In-memory stand-in for ApplicationStore with the same owner scoping."""

    def __init__(self):
        self.rows = {}

    def _owned(self, user_id, application_id):
        row = self.rows.get(application_id)
        if row is None or row["user_id"] != user_id:
            return None
        return row

    def list_for_owner(self, user_id):
        # Insertion order stands in for created_at, newest first
        return [dict(r) for r in reversed(list(self.rows.values())) if r["user_id"] == user_id]

    def insert(self, user_id, fields):
        row = {
            "id": str(uuid.uuid4()),
            "user_id": user_id,
            "title": fields["title"],
            "company": fields["company"],
            "location": fields["location"],
            "status": INITIAL_STATUS,
            "deadline": fields["deadline"].isoformat() if fields.get("deadline") else None,
            "link": fields.get("link"),
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        self.rows[row["id"]] = row
        return dict(row)

    def update(self, user_id, application_id, fields):
        row = self._owned(user_id, application_id)
        if row is None:
            return None
        for key in ("title", "company", "location", "link"):
            row[key] = fields.get(key)
        row["deadline"] = fields["deadline"].isoformat() if fields.get("deadline") else None
        return dict(row)

    def update_status(self, user_id, application_id, status):
        assert status in STATUS_PIPELINE
        row = self._owned(user_id, application_id)
        if row is None:
            return None
        row["status"] = status
        return dict(row)

    def delete(self, user_id, application_id):
        if self._owned(user_id, application_id) is None:
            return False
        del self.rows[application_id]
        return True


@pytest.fixture(autouse=True)
def disable_rate_limits():
    from app.rate_limit import limiter
    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture
def app():
    from main import app as fastapi_app
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def fake_store():
    return FakeApplicationStore()


@pytest.fixture
def alice():
    return Identity(user_id="user-alice", email="alice@example.com")


@pytest.fixture
def bob():
    return Identity(user_id="user-bob", email="bob@example.com")


@pytest.fixture
def make_fetcher():
    return FakePageFetcher
