import copy
import itertools
import os
import re
import sys
import threading
import uuid

import django
import pytest

# Ensure project root is on sys.path
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "console_app.settings")
django.setup()

from postgrest.exceptions import APIError  # noqa: E402
from storage3.utils import StorageException  # noqa: E402

from procurement.services import (  # noqa: E402
    bank_details_service,
    master_product_service,
    supabase_client,
)


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Chainable stand-in for a PostgREST request builder."""

    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.op = "select"
        self.payload = None
        self.filters = []
        self.orders = []
        self.limit_count = None

    def select(self, *columns, **kwargs):
        self.op = "select"
        return self

    def insert(self, payload):
        self.op = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.op = "update"
        self.payload = payload
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def ilike(self, column, pattern):
        needle = pattern.strip("%").lower()
        self.filters.append(lambda row: needle in str(row.get(column) or "").lower())
        return self

    def or_(self, filters):
        checks = [self._condition(*condition.split(".", 2)) for condition in filters.split(",")]
        self.filters.append(lambda row: any(check(row) for check in checks))
        return self

    @staticmethod
    def _condition(column, op, value):
        if op == "ilike":
            regex = "".join(
                ".*" if ch == "%" else "." if ch == "_" else re.escape(ch) for ch in value
            )
            pattern = re.compile(f"^{regex}$", re.IGNORECASE)
            return lambda row: bool(pattern.match(str(row.get(column) or "")))
        if op == "eq":
            return lambda row: str(row.get(column)) == value
        raise NotImplementedError(op)

    def gte(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and row.get(column) >= value)
        return self

    def lte(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and row.get(column) <= value)
        return self

    def order(self, column, desc=False, **kwargs):
        self.orders.append((column, desc))
        return self

    def limit(self, count):
        self.limit_count = count
        return self

    def _matches(self, row):
        return all(check(row) for check in self.filters)

    def execute(self):
        return self.db.execute(self)


class FakeRpc:
    def __init__(self, db, name, params):
        self.db = db
        self.name = name
        self.params = params

    def execute(self):
        self.db.rpc_calls.append((self.name, dict(self.params or {})))
        handler = self.db.rpc_handlers.get(self.name)
        if handler is None:
            raise APIError(
                {
                    "message": f"Could not find the function public.{self.name} in the schema cache",
                    "code": "PGRST202",
                }
            )
        return FakeResponse(handler(self.params))


class FakeBucket:
    def __init__(self, storage, name):
        self.storage = storage
        self.name = name

    def upload(self, path, file, file_options=None):
        if self.storage.error is not None:
            raise self.storage.error
        self.storage.files[(self.name, path)] = file
        return {"Key": f"{self.name}/{path}"}

    def download(self, path):
        if self.storage.error is not None:
            raise self.storage.error
        try:
            return self.storage.files[(self.name, path)]
        except KeyError:
            raise StorageException({"message": "Object not found", "statusCode": 404})

    def create_signed_url(self, path, expires_in):
        if self.storage.sign_error is not None:
            raise self.storage.sign_error
        return {
            "signedURL": f"https://project.supabase.co/storage/v1/object/sign/{self.name}/{path}?token=x&ttl={expires_in}"
        }


class FakeStorage:
    def __init__(self):
        self.files = {}
        self.error = None
        self.sign_error = None

    def from_(self, bucket):
        return FakeBucket(self, bucket)


class FakeSupabase:
    """In-memory Supabase client covering the calls the console makes.

    ``errors[(table, op)]`` raises on a table operation, ``columns[table]``
    restricts the columns an insert may use, ``enum_values[(table, column)]``
    restricts the values an update may write, ``delays[table]`` blocks reads
    until released, and ``rpc_handlers[name]`` implements RPC functions.
    Columns in ``uuid_columns`` reject values that are not UUIDs, like the
    ``users(id)`` foreign keys they mirror.
    """

    uuid_columns = {
        ("orders", "admin_verified_by"),
        ("order_documents", "verified_by"),
        ("order_documents", "uploaded_by"),
        ("po_audit_logs", "actor_user_id"),
        ("custom_item_requests", "assigned_by"),
        ("supplier_payouts", "created_by"),
    }

    def __init__(self):
        self.tables = {}
        self.errors = {}
        self.columns = {}
        self.enum_values = {}
        self.delays = {}
        self.rpc_handlers = {}
        self.rpc_calls = []
        self.storage = FakeStorage()
        self._ids = itertools.count(1)

    def seed(self, table, rows):
        self.tables.setdefault(table, []).extend(copy.deepcopy(rows))

    def rows(self, table):
        return self.tables.setdefault(table, [])

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, name, params=None):
        return FakeRpc(self, name, params)

    def _check_columns(self, table, payload):
        allowed = self.columns.get(table)
        if allowed is None:
            return
        for column in payload:
            if column not in allowed:
                raise APIError(
                    {
                        "message": f"Could not find the '{column}' column of '{table}' in the schema cache",
                        "code": "PGRST204",
                    }
                )

    def _check_uuids(self, table, payload):
        for column, value in payload.items():
            if value is None or (table, column) not in self.uuid_columns:
                continue
            try:
                uuid.UUID(str(value))
            except ValueError:
                raise APIError(
                    {
                        "message": f'invalid input syntax for type uuid: "{value}"',
                        "code": "22P02",
                    }
                )

    def _check_enums(self, table, payload):
        for (enum_table, column), allowed in self.enum_values.items():
            if enum_table == table and column in payload and payload[column] not in allowed:
                raise APIError(
                    {
                        "message": f'invalid input value for enum {column}_enum: "{payload[column]}"',
                        "code": "22P02",
                    }
                )

    def execute(self, query):
        error = self.errors.get((query.table, query.op))
        if error is not None:
            raise error
        delay = self.delays.get(query.table)
        if delay is not None and query.op == "select":
            delay.wait(5)
        rows = self.rows(query.table)
        if query.op == "insert":
            items = query.payload if isinstance(query.payload, list) else [query.payload]
            inserted = []
            for item in items:
                self._check_columns(query.table, item)
                self._check_enums(query.table, item)
                self._check_uuids(query.table, item)
                row = {"id": f"{query.table}-{next(self._ids)}", "created_at": "2026-01-01T00:00:00+00:00"}
                row.update(copy.deepcopy(item))
                rows.append(row)
                inserted.append(copy.deepcopy(row))
            return FakeResponse(inserted)
        matched = [row for row in rows if query._matches(row)]
        if query.op == "update":
            self._check_enums(query.table, query.payload)
            self._check_uuids(query.table, query.payload)
            for row in matched:
                row.update(copy.deepcopy(query.payload))
            return FakeResponse(copy.deepcopy(matched))
        if query.op == "delete":
            self.tables[query.table] = [row for row in rows if row not in matched]
            return FakeResponse(copy.deepcopy(matched))
        result = copy.deepcopy(matched)
        for column, desc in reversed(query.orders):
            present = [row for row in result if row.get(column) is not None]
            missing = [row for row in result if row.get(column) is None]
            present.sort(key=lambda row: row[column], reverse=desc)
            result = present + missing
        if query.limit_count is not None:
            result = result[: query.limit_count]
        return FakeResponse(result)


@pytest.fixture
def fake_supabase(monkeypatch):
    fake = FakeSupabase()
    monkeypatch.setattr(supabase_client, "_client", fake)
    yield fake
    for event in fake.delays.values():
        event.set()


@pytest.fixture
def no_supabase(monkeypatch, settings):
    """Run with the backend unconfigured."""
    monkeypatch.setattr(supabase_client, "_client", None)
    settings.SUPABASE_URL = ""
    settings.SUPABASE_KEY = ""
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_KEY", raising=False)


ADMIN_USER_ID = "5d8f6c2e-1b7a-4c3e-9f0d-8a2b4c6e1f37"


@pytest.fixture
def admin_user_id(settings):
    """Map the console operator to a marketplace admin ``users.id``."""
    settings.CONSOLE_ADMIN_USER_ID = ADMIN_USER_ID
    return ADMIN_USER_ID


@pytest.fixture
def blocker():
    """Event that keeps delayed fake reads waiting until set."""
    event = threading.Event()
    yield event
    event.set()


@pytest.fixture(autouse=True)
def reset_caches():
    master_product_service.get_categories.invalidate()
    bank_details_service.cached_active_bank_details.invalidate()
    yield
    master_product_service.get_categories.invalidate()
    bank_details_service.cached_active_bank_details.invalidate()


@pytest.fixture(autouse=True)
def logged_in_client(client, db):
    """Log in the default admin user for tests that require authentication."""

    from django.contrib.auth import get_user_model

    User = get_user_model()
    user, _ = User.objects.get_or_create(username="admin", defaults={"is_staff": True})
    if not user.has_usable_password():
        user.set_password("admin")
        user.save()
    client.force_login(user)
    yield
    client.logout()
