"""Pytest configuration and shared fixtures.

The app needs Supabase settings at import time; tests never reach the real
backend, so placeholders are enough.
"""

import os

os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-key")

import itertools  # noqa: E402
from datetime import date  # noqa: E402
from types import SimpleNamespace  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.api.deps import get_auth_service, get_data_store  # noqa: E402
from app.api.routes import get_today  # noqa: E402
from app.core.rate_limit import limiter  # noqa: E402
from app.main import app  # noqa: E402
from app.models.auth import AuthSession, AuthUser  # noqa: E402
from app.services.auth import AuthError  # noqa: E402
from app.services.data_store import DataStore  # noqa: E402

TODAY = date(2024, 6, 15)
USER = AuthUser(id="user-1", email="driver@example.com", full_name="Test Driver")
OTHER_USER_ID = "user-2"


# ---------------------------------------------------------------------------
# In-memory stand-in for the supabase-py table query builder
# ---------------------------------------------------------------------------


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str, action: str, payload: Any = None):
        self.db = db
        self.table = table
        self.action = action
        self.payload = payload
        self.predicates: list = []
        self._order: tuple[str, bool] | None = None
        self._limit: int | None = None
        self._negate = False

    def _add(self, predicate):
        if self._negate:
            self._negate = False
            self.predicates.append(lambda row: not predicate(row))
        else:
            self.predicates.append(predicate)
        return self

    @property
    def not_(self) -> "FakeQuery":
        self._negate = True
        return self

    def eq(self, column, value):
        return self._add(lambda row: row.get(column) == value)

    def neq(self, column, value):
        return self._add(lambda row: row.get(column) != value)

    def gt(self, column, value):
        return self._add(lambda row: row.get(column) is not None and row[column] > value)

    def gte(self, column, value):
        return self._add(lambda row: row.get(column) is not None and row[column] >= value)

    def lt(self, column, value):
        return self._add(lambda row: row.get(column) is not None and row[column] < value)

    def lte(self, column, value):
        return self._add(lambda row: row.get(column) is not None and row[column] <= value)

    def ilike(self, column, pattern):
        needle = pattern.strip("%").lower()
        return self._add(lambda row: needle in str(row.get(column, "")).lower())

    def is_(self, column, value):
        expected = None if value == "null" else value
        return self._add(lambda row: row.get(column) is expected)

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def limit(self, n):
        self._limit = n
        return self

    def execute(self):
        self.db.calls.append((self.action, self.table))
        if self.db.fail:
            raise RuntimeError("backend unavailable")

        rows = self.db.tables.setdefault(self.table, [])
        if self.action == "insert":
            new_row = {"id": f"{self.table}-{next(self.db.ids)}", **self.payload}
            rows.append(new_row)
            return SimpleNamespace(data=[dict(new_row)])

        matched = [r for r in rows if all(p(r) for p in self.predicates)]
        if self.action == "update":
            for r in matched:
                r.update(self.payload)
        elif self.action == "delete":
            self.db.tables[self.table] = [r for r in rows if r not in matched]
        else:
            if self._order:
                column, desc = self._order
                matched.sort(key=lambda r: (r.get(column) is None, r.get(column) or ""))
                if desc:
                    matched.reverse()
            if self._limit is not None:
                matched = matched[: self._limit]
        return SimpleNamespace(data=[dict(r) for r in matched])


class FakeTable:
    def __init__(self, db: "FakeSupabase", name: str):
        self.db = db
        self.name = name

    def select(self, columns="*"):
        return FakeQuery(self.db, self.name, "select")

    def insert(self, row):
        return FakeQuery(self.db, self.name, "insert", row)

    def update(self, values):
        return FakeQuery(self.db, self.name, "update", values)

    def delete(self):
        return FakeQuery(self.db, self.name, "delete")


class FakeSupabase:
    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.calls: list[tuple[str, str]] = []
        self.ids = itertools.count(1)
        self.fail = False

    def table(self, name: str) -> FakeTable:
        return FakeTable(self, name)


class FakeAuthService:
    """Stands in for AuthService in API tests."""

    def __init__(self) -> None:
        self.signed_out: list[str] = []

    def get_user(self, token: str):
        return USER if token == "good-token" else None

    def sign_in(self, email: str, password: str):
        if password != "secret":
            raise AuthError("Invalid login credentials")
        return AuthSession(access_token="good-token", refresh_token="refresh", user=USER)

    def sign_up(self, email, password, full_name, mobile_number=None):
        return AuthUser(id="new-user", email=email, full_name=full_name)

    def sign_out(self, token: str) -> None:
        self.signed_out.append(token)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def store(fake_db) -> DataStore:
    return DataStore(fake_db)


@pytest.fixture
def fake_auth() -> FakeAuthService:
    return FakeAuthService()


@pytest.fixture
def client(store, fake_auth):
    """TestClient with the data store, auth and clock overridden."""
    limiter.enabled = False
    app.dependency_overrides[get_data_store] = lambda: store
    app.dependency_overrides[get_auth_service] = lambda: fake_auth
    app.dependency_overrides[get_today] = lambda: TODAY
    yield TestClient(app)
    app.dependency_overrides.clear()
    limiter.enabled = True


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": "Bearer good-token"}


@pytest.fixture
def vehicle_row(fake_db) -> dict[str, Any]:
    row = {
        "id": "veh-1",
        "user_id": USER.id,
        "vehicle_brand": "Maruti",
        "vehicle_model": "Swift",
        "vehicle_variant": "VXI",
        "vehicle_year": 2020,
        "registration_number": "KA01AB1234",
        "current_kms": 12000,
        "kms_per_day": None,
        "kms_per_month": 1000,
        "created_at": "2024-01-01T00:00:00+00:00",
    }
    fake_db.tables.setdefault("vehicles", []).append(row)
    return row
