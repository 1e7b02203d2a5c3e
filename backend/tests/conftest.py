# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# Sets up test environment variables before any application import and
# provides fakes for the Supabase edge functions and auth tokens.
# =============================================================================

import os
from datetime import datetime, timedelta, timezone

# This must happen before importing wedding_admin.config, which loads settings
# at import time
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-with-enough-length-123")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DEBUG", "false")

import pytest
from jose import jwt

TEST_JWT_SECRET = os.environ["SUPABASE_JWT_SECRET"]


def make_token(role="admin", sub="0b6f3e1c-5d2a-4a53-9d37-3c8f1f0f2a11", **overrides):
    """Build a Supabase-style access token."""
    claims = {
        "sub": sub,
        "email": "ops@example.com",
        "aud": "authenticated",
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        "user_metadata": {"role": role},
    }
    claims.update(overrides)
    return jwt.encode(claims, TEST_JWT_SECRET, algorithm="HS256")


class FakeEdgeFunctions:
    """Records every invoke call; rows whose name is listed fail."""

    def __init__(self):
        self.calls = []
        self.fail_names = set()
        self.raise_names = set()
        self.error_message = "Email already registered"
        self.on_invoke = None

    async def invoke(self, function_name, payload):
        self.calls.append((function_name, payload))
        if self.on_invoke is not None:
            self.on_invoke(function_name, payload)
        name = payload.get("name")
        if name in self.raise_names:
            raise RuntimeError("connection reset")
        if name in self.fail_names:
            return {"success": False, "status_code": 400, "error": self.error_message}
        return {"success": True, "status_code": 200, "data": {"id": f"id-{len(self.calls)}"}}


class FakeTables:
    """In-memory stand-in for the Supabase table service."""

    def __init__(self):
        self.inserts = []
        self.records = {"couples": [], "vendors": []}
        self.fail_tables = set()

    async def insert(self, table, row):
        if table in self.fail_tables:
            return {"success": False, "status_code": 409, "error": f"insert into {table} failed"}
        self.inserts.append((table, row))
        return {"success": True, "status_code": 201, "data": {"id": f"{table}-{len(self.inserts)}", **row}}

    async def find_by_name(self, table, name):
        matches = [r for r in self.records.get(table, []) if r["name"].lower() == name.lower()]
        return matches[0] if len(matches) == 1 else None


@pytest.fixture
def fake_edge():
    return FakeEdgeFunctions()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def user_headers():
    return {"Authorization": f"Bearer {make_token(role='couple')}"}


@pytest.fixture
def couple_kind():
    from wedding_admin.services.csv_import_service import IMPORT_KINDS
    return IMPORT_KINDS["couples"]


@pytest.fixture
def vendor_kind():
    from wedding_admin.services.csv_import_service import IMPORT_KINDS
    return IMPORT_KINDS["vendors"]


@pytest.fixture
def fake_tables():
    return FakeTables()


@pytest.fixture
def venue_kind():
    from wedding_admin.services.csv_import_service import IMPORT_KINDS
    return IMPORT_KINDS["venues"]


@pytest.fixture
def package_kind():
    from wedding_admin.services.csv_import_service import IMPORT_KINDS
    return IMPORT_KINDS["service_packages"]


@pytest.fixture
def booking_kind():
    from wedding_admin.services.csv_import_service import IMPORT_KINDS
    return IMPORT_KINDS["bookings"]


@pytest.fixture
def api(fake_edge, fake_tables):
    """The FastAPI app wired to the fake Supabase services and a fresh session store."""
    from wedding_admin.main import app
    from wedding_admin.services.edge_function_service import get_edge_function_service
    from wedding_admin.services.row_importer import ImportSessionStore, get_import_session_store
    from wedding_admin.services.supabase_table_service import get_supabase_table_service

    store = ImportSessionStore()
    app.dependency_overrides[get_edge_function_service] = lambda: fake_edge
    app.dependency_overrides[get_supabase_table_service] = lambda: fake_tables
    app.dependency_overrides[get_import_session_store] = lambda: store
    try:
        yield app
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def other_admin_headers():
    return {"Authorization": f"Bearer {make_token(sub='5e0c2f0a-8f1e-4c7b-a3b2-6f2f7e9d1c44')}"}
