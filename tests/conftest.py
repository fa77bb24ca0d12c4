"""Pytest configuration and fixtures."""

import itertools
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

_BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FakeResponse:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    """Subset of the PostgREST query builder, evaluated against in-memory rows."""

    def __init__(self, db, table):
        self._db = db
        self._table = table
        self._op = "select"
        self._columns = "*"
        self._count = None
        self._head = False
        self._payload = None
        self._filters = []
        self._order = []
        self._range = None
        self._limit = None
        self._error = None

    # Operations
    def select(self, columns="*", count=None, head=False):
        self._op = "select"
        self._columns = columns
        self._count = count
        self._head = head
        return self

    def insert(self, payload):
        self._op = "insert"
        self._payload = payload
        return self

    def update(self, payload):
        self._op = "update"
        self._payload = payload
        return self

    def delete(self):
        self._op = "delete"
        return self

    # Filters
    def eq(self, column, value):
        self._filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        limit = self._db.max_in_values
        if limit is not None and len(values) > limit:
            self._error = "414 Request-URI Too Large"
        self._filters.append(lambda row: row.get(column) in values)
        return self

    def gt(self, column, value):
        self._filters.append(lambda row: row.get(column) is not None and row.get(column) > value)
        return self

    def is_(self, column, value):
        if value == "null":
            self._filters.append(lambda row: row.get(column) is None)
        else:
            self._filters.append(lambda row: row.get(column) is value)
        return self

    def contains(self, column, values):
        self._filters.append(lambda row: all(v in (row.get(column) or []) for v in values))
        return self

    # Modifiers
    def order(self, column, desc=False):
        self._order.append((column, desc))
        return self

    def range(self, start, end):
        self._range = (start, end)
        return self

    def limit(self, count):
        self._limit = count
        return self

    def _matching(self):
        return [row for row in self._db.rows(self._table) if all(f(row) for f in self._filters)]

    def _project(self, row):
        if self._columns.strip() == "*":
            return dict(row)
        return {c.strip(): row.get(c.strip()) for c in self._columns.split(",")}

    def execute(self):
        self._db.executed.append((self._table, self._op, self._range, self._limit))
        if self._table in self._db.failing_tables:
            raise Exception(f"connection to {self._table} refused")
        if self._error:
            raise Exception(self._error)

        if self._op == "insert":
            payload = self._payload if isinstance(self._payload, list) else [self._payload]
            inserted = [self._db.insert(self._table, row) for row in payload]
            return FakeResponse([dict(r) for r in inserted])

        rows = self._matching()

        if self._op == "update":
            for row in rows:
                row.update(self._payload)
            return FakeResponse([dict(r) for r in rows])

        if self._op == "delete":
            self._db.tables[self._table] = [
                r for r in self._db.rows(self._table) if not any(r is m for m in rows)
            ]
            return FakeResponse([dict(r) for r in rows])

        for column, desc in reversed(self._order):
            present = [r for r in rows if r.get(column) is not None]
            missing = [r for r in rows if r.get(column) is None]
            present.sort(key=lambda r: r[column], reverse=desc)
            rows = present + missing

        count = len(rows) if self._count == "exact" else None
        if self._head:
            return FakeResponse([], count=count)
        if self._range is not None:
            start, end = self._range
            rows = rows[start:end + 1]
        if self._limit is not None:
            rows = rows[:self._limit]
        if self._db.max_rows is not None:
            # PostgREST silently truncates at the server's max-rows
            rows = rows[:self._db.max_rows]
        return FakeResponse([self._project(r) for r in rows], count=count)


class FakeAuthAdmin:
    def __init__(self, auth):
        self._auth = auth

    def create_user(self, attributes):
        email = attributes["email"]
        if email in self._auth.accounts:
            raise Exception("A user with this email address has already been registered")
        user = self._auth.register(
            str(uuid.uuid4()), email, attributes["password"],
            (attributes.get("user_metadata") or {}).get("username"),
        )
        return SimpleNamespace(user=user)

    def delete_user(self, user_id):
        self._auth.deleted_users.append(user_id)
        self._auth.accounts = {
            email: account for email, account in self._auth.accounts.items()
            if account[1].id != user_id
        }
        self._auth.tokens = {t: u for t, u in self._auth.tokens.items() if u.id != user_id}

    def sign_out(self, jwt, scope="global"):
        user = self._auth.tokens.get(jwt)
        if user is None:
            raise Exception("invalid JWT: unable to parse or verify signature")
        if scope == "global":
            self._auth.revoke_user(user.id)
        else:
            self._auth.revoke(jwt)


class FakeAuth:
    """Supabase Auth stand-in: accounts by e-mail, sessions by access token."""

    def __init__(self):
        self.accounts = {}
        self.tokens = {}
        self.deleted_users = []
        self.reset_requests = []
        self.revoked = []
        self.current_session = None
        self.admin = FakeAuthAdmin(self)

    def register(self, user_id, email, password, username=None):
        user = SimpleNamespace(
            id=user_id,
            email=email,
            user_metadata={"username": username} if username else {},
            email_confirmed_at="2024-01-01T00:00:00Z",
            created_at="2024-01-01T00:00:00Z",
            last_sign_in_at=None,
        )
        self.accounts[email] = (password, user)
        return user

    def issue_token(self, user):
        token = f"token-{user.id}"
        self.tokens[token] = user
        return token

    def get_user(self, token):
        user = self.tokens.get(token)
        if user is None:
            raise Exception("invalid JWT: unable to parse or verify signature")
        return SimpleNamespace(user=user)

    def sign_in_with_password(self, credentials):
        account = self.accounts.get(credentials["email"])
        if account is None or account[0] != credentials["password"]:
            raise Exception("Invalid login credentials")
        user = account[1]
        session = SimpleNamespace(
            access_token=self.issue_token(user),
            refresh_token=f"refresh-{user.id}",
            expires_at=1900000000,
        )
        self.current_session = session
        return SimpleNamespace(user=user, session=session)

    def sign_out(self):
        # Client-level sign-out revokes whatever session the client last stored
        if self.current_session is not None:
            user = self.tokens.get(self.current_session.access_token)
            if user is not None:
                self.revoke_user(user.id)
            self.current_session = None

    def revoke(self, token):
        if self.tokens.pop(token, None) is not None:
            self.revoked.append(token)

    def revoke_user(self, user_id):
        for token in [t for t, u in self.tokens.items() if u.id == user_id]:
            self.revoke(token)

    def reset_password_email(self, email, options=None):
        self.reset_requests.append((email, options))


class FakeSupabase:
    """In-memory Supabase client serving both table access and auth."""

    def __init__(self):
        self.tables = {}
        self.failing_tables = set()
        self.executed = []
        self.max_rows = None
        self.max_in_values = None
        self.auth = FakeAuth()
        self._clock = itertools.count(1)

    def table(self, name):
        return FakeQuery(self, name)

    def rows(self, name):
        return self.tables.setdefault(name, [])

    def insert(self, name, row):
        stored = dict(row)
        stored.setdefault("id", str(uuid.uuid4()))
        stored.setdefault("created_at", (_BASE_TIME + timedelta(seconds=next(self._clock))).isoformat())
        self.rows(name).append(stored)
        return stored

    def add_user(self, user_id, email, username, role="user", password="Secret#123"):
        """Register an auth account plus profile; returns a valid access token."""
        user = self.auth.register(user_id, email, password, username)
        self.insert("profiles", {
            "id": user_id,
            "email": email,
            "username": username,
            "role": role,
        })
        return self.auth.issue_token(user)


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep tests independent of any local .env."""
    for key in ("TURNSTILE_SECRET_KEY", "LLM_API_KEY", "OPENAI_API_KEY", "DB_PAGE_SIZE", "ENVIRONMENT"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def fake_db():
    return FakeSupabase()


@pytest.fixture
def client(fake_db):
    from fastapi.testclient import TestClient

    from tradersjournal.web.dependencies import get_auth_client, get_db, get_sign_in_client
    from tradersjournal.web.server import app

    app.dependency_overrides[get_db] = lambda: fake_db
    app.dependency_overrides[get_auth_client] = lambda: fake_db
    app.dependency_overrides[get_sign_in_client] = lambda: fake_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def user_token(fake_db):
    return fake_db.add_user("user-1", "alice@example.com", "alice_trader")


@pytest.fixture
def other_token(fake_db):
    return fake_db.add_user("user-2", "bob@example.com", "bob_trader")


@pytest.fixture
def admin_token(fake_db):
    return fake_db.add_user("admin-1", "admin@example.com", "admin_user", role="Admin")


@pytest.fixture
def sample_trades():
    """Trade rows as stored in the ``trades`` table."""
    return [
        {
            "user_id": "user-1",
            "currency_pair": "EURUSD",
            "trade_type": "LONG",
            "profit_loss": 120.0,
            "pips": 24.0,
            "duration": 30,
            "date": "2024-01-15T09:00:00+00:00",
            "tags": ["breakout"],
        },
        {
            "user_id": "user-1",
            "currency_pair": "EURUSD",
            "trade_type": "SHORT",
            "profit_loss": -60.0,
            "pips": -12.0,
            "duration": 90,
            "date": "2024-01-15T13:00:00+00:00",
            "tags": ["breakout", "news"],
        },
        {
            "user_id": "user-1",
            "currency_pair": "USDJPY",
            "trade_type": "LONG",
            "profit_loss": 45.0,
            "pips": 15.0,
            "duration": 60,
            "date": "2024-01-16T10:00:00+00:00",
            "tags": [],
        },
    ]
