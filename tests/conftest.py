"""Shared fixtures: an in-memory stand-in for the Supabase client.

FakeSupabase implements the slice of the supabase-py surface the app uses
(table query builder, auth, auth.admin) and enforces the same constraints as
supabase/migrations, raising postgrest APIError with real Postgres codes.
"""

import os

os.environ.setdefault("RATE_LIMIT", "10000/minute")
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from postgrest.exceptions import APIError
from starlette.testclient import TestClient

from app.core.access_gate import AccessGate
from app.database.supabase_client import get_supabase, get_supabase_admin
from app.main import app
from app.modules.auth.service import clear_auth_cache


TABLES = {
    "profiles": {
        "primary_key": "id",
        "unique": ["email"],
        "required": ["id", "email"],
        "references": "id",
    },
    "messages": {
        "primary_key": "id",
        "unique": [],
        "required": ["user_id", "content", "is_user_message"],
        "references": "user_id",
    },
}


class FakeDatabase:
    def __init__(self):
        self.rows = {name: [] for name in TABLES}
        self.users = {}
        self.passwords = {}
        self.tokens = {}
        self.failures = {}
        self._tick = 0
        self._epoch = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def now(self) -> str:
        # Strictly increasing so ordering by timestamp is deterministic
        self._tick += 1
        return (self._epoch + timedelta(milliseconds=self._tick)).isoformat(timespec="microseconds")

    def fail_next(self, table: str, operation: str, error: Exception):
        self.failures[(table, operation)] = error

    def take_failure(self, table: str, operation: str):
        return self.failures.pop((table, operation), None)

    def add_user(self, user_id: str, email: str, password: str = "secret123"):
        created = self.now()
        user = SimpleNamespace(
            id=user_id,
            email=email,
            user_metadata={},
            app_metadata={},
            created_at=created,
            updated_at=created,
        )
        self.users[user_id] = user
        self.passwords[user_id] = password
        return user

    def issue_token(self, user_id: str) -> str:
        token = f"token-{uuid.uuid4().hex}"
        self.tokens[token] = user_id
        return token


def _api_error(code: str, message: str, details: str = None) -> APIError:
    return APIError({"message": message, "code": code, "details": details, "hint": None})


class FakeQuery:
    def __init__(self, db: FakeDatabase, table: str):
        self.db = db
        self.table = table
        self.operation = "select"
        self.payload = None
        self.filters = []
        self.orders = []
        self.row_limit = None
        self.row_offset = 0
        self.count = None

    def select(self, *columns, count=None, **kwargs):
        self.operation = "select"
        self.count = count
        return self

    def insert(self, payload):
        self.operation = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.operation = "update"
        self.payload = payload
        return self

    def delete(self):
        self.operation = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: str(row.get(column)) == str(value))
        return self

    def in_(self, column, values):
        allowed = {str(v) for v in values}
        self.filters.append(lambda row: str(row.get(column)) in allowed)
        return self

    def order(self, column, desc=False):
        self.orders.append((column, desc))
        return self

    def limit(self, size):
        self.row_limit = size
        return self

    def offset(self, start):
        self.row_offset = start
        return self

    def _matching(self):
        return [row for row in self.db.rows[self.table] if all(f(row) for f in self.filters)]

    def execute(self):
        failure = self.db.take_failure(self.table, self.operation)
        if failure is not None:
            raise failure
        handler = getattr(self, f"_execute_{self.operation}")
        count = len(self._matching()) if self.count == "exact" else None
        return SimpleNamespace(data=handler(), count=count)

    def _execute_select(self):
        rows = self._matching()
        for column, desc in reversed(self.orders):
            rows = sorted(rows, key=lambda row: str(row.get(column)), reverse=desc)
        rows = rows[self.row_offset:]
        if self.row_limit is not None:
            rows = rows[:self.row_limit]
        return [dict(row) for row in rows]

    def _execute_insert(self):
        payload = self.payload if isinstance(self.payload, list) else [self.payload]
        schema = TABLES[self.table]
        inserted = []
        for item in payload:
            row = dict(item)
            if self.table == "profiles":
                row.setdefault("user_name", None)
                row.setdefault("created_at", self.db.now())
            else:
                row.setdefault("id", str(uuid.uuid4()))
                row.setdefault("timestamp", self.db.now())
            for column in schema["required"]:
                if row.get(column) is None:
                    raise _api_error(
                        "23502",
                        f'null value in column "{column}" of relation "{self.table}" violates not-null constraint',
                    )
            owner = row[schema["references"]]
            if owner not in self.db.users:
                raise _api_error(
                    "23503",
                    f'insert or update on table "{self.table}" violates foreign key constraint',
                    f'Key ({schema["references"]})=({owner}) is not present in table "users".',
                )
            for column in [schema["primary_key"]] + schema["unique"]:
                if any(existing.get(column) == row[column] for existing in self.db.rows[self.table]):
                    raise _api_error(
                        "23505",
                        f'duplicate key value violates unique constraint "{self.table}_{column}_key"',
                        f"Key ({column})=({row[column]}) already exists.",
                    )
            self.db.rows[self.table].append(row)
            inserted.append(dict(row))
        return inserted

    def _execute_update(self):
        updated = []
        for row in self._matching():
            row.update(self.payload)
            updated.append(dict(row))
        return updated

    def _execute_delete(self):
        doomed = self._matching()
        self.db.rows[self.table] = [row for row in self.db.rows[self.table] if row not in doomed]
        return [dict(row) for row in doomed]


class FakeAdmin:
    def __init__(self, db: FakeDatabase):
        self.db = db
        self.fail_delete = None
        self.signed_out = []

    def delete_user(self, user_id):
        if self.fail_delete is not None:
            raise self.fail_delete
        if user_id not in self.db.users:
            raise Exception("User not found")
        del self.db.users[user_id]
        self.db.passwords.pop(user_id, None)
        self.db.tokens = {t: uid for t, uid in self.db.tokens.items() if uid != user_id}
        # ON DELETE CASCADE from auth.users
        self.db.rows["profiles"] = [row for row in self.db.rows["profiles"] if row["id"] != user_id]
        self.db.rows["messages"] = [row for row in self.db.rows["messages"] if row["user_id"] != user_id]

    def sign_out(self, jwt, scope="global"):
        user_id = self.db.tokens.get(jwt)
        if user_id is None:
            raise Exception("invalid JWT: unable to parse or verify signature")
        if scope == "global":
            self.db.tokens = {t: uid for t, uid in self.db.tokens.items() if uid != user_id}
        else:
            self.db.tokens.pop(jwt, None)
        self.signed_out.append(user_id)

    def list_users(self, page=None, per_page=None):
        users = list(self.db.users.values())
        page = page or 1
        per_page = per_page or 50
        start = (page - 1) * per_page
        return users[start:start + per_page]


class FakeAuth:
    def __init__(self, db: FakeDatabase):
        self.db = db
        self.admin = FakeAdmin(db)

    def sign_up(self, credentials):
        email = credentials["email"]
        if any(user.email == email for user in self.db.users.values()):
            raise Exception("User already registered")
        user = self.db.add_user(str(uuid.uuid4()), email, credentials["password"])
        return SimpleNamespace(user=user, session=None)

    def sign_in_with_password(self, credentials):
        for user in self.db.users.values():
            if user.email == credentials["email"] and self.db.passwords[user.id] == credentials["password"]:
                token = self.db.issue_token(user.id)
                return SimpleNamespace(user=user, session=SimpleNamespace(access_token=token))
        raise Exception("Invalid login credentials")

    def get_user(self, jwt=None):
        user_id = self.db.tokens.get(jwt)
        if user_id is None or user_id not in self.db.users:
            raise Exception("invalid JWT: unable to parse or verify signature")
        return SimpleNamespace(user=self.db.users[user_id])


class FakeSupabase:
    def __init__(self):
        self.db = FakeDatabase()
        self.auth = FakeAuth(self.db)

    def table(self, name):
        return FakeQuery(self.db, name)


@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def gate():
    return AccessGate()


@pytest.fixture
def client(fake_supabase):
    app.dependency_overrides[get_supabase] = lambda: fake_supabase
    app.dependency_overrides[get_supabase_admin] = lambda: fake_supabase
    clear_auth_cache()
    yield TestClient(app)
    app.dependency_overrides.clear()
    clear_auth_cache()


@pytest.fixture
def signup(client):
    """Register and log in a principal over HTTP; returns its id and auth headers."""
    def _signup(email, password="secret123"):
        resp = client.post("/api/v1/auth/register", json={"email": email, "password": password})
        assert resp.status_code == 201, resp.text
        login = client.post("/api/v1/auth/login", json={"email": email, "password": password})
        assert login.status_code == 200, login.text
        token = login.json()["access_token"]
        return SimpleNamespace(
            id=resp.json()["user_id"],
            email=email,
            headers={"Authorization": f"Bearer {token}"},
        )
    return _signup
