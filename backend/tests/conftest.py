import os

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["SUPABASE_URL"] = "https://project.supabase.test"
os.environ["SUPABASE_ANON_KEY"] = "anon-key"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "service-role-key"
os.environ["APP_BASE_URL"] = "https://attendance.example.edu"
os.environ["AUTH_COOKIE_SECRET"] = "test-session-secret-with-enough-entropy"
os.environ["ALLOWED_EMAIL_DOMAIN"] = "example.edu"

import json
from collections.abc import AsyncGenerator
from typing import Any

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from attendance_hub.config import Settings, get_settings
from attendance_hub.main import app
from attendance_hub.models.role import AppRole
from attendance_hub.schemas.auth import SessionPayload
from attendance_hub.utils.auth import get_http_transport, get_role_store
from attendance_hub.utils.session import sign_session


class FakeRoleStore:
    """In-memory role assignments keyed by user id."""

    def __init__(self, roles: dict[str, Any] | None = None):
        self.roles = dict(roles or {})
        self.lookups: list[str] = []

    async def fetch_role(self, user_id: str) -> str | None:
        self.lookups.append(user_id)
        return self.roles.get(user_id)


class FakeSupabase:
    """Stands in for the Supabase token endpoint behind an httpx.MockTransport."""

    def __init__(self):
        self.status_code = 200
        self.user: dict[str, Any] | None = {
            "id": "user-123",
            "email": "student@example.edu",
            "user_metadata": {"full_name": "Sam Student"},
        }
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path != "/auth/v1/token":
            return httpx.Response(404, json={"error": "not found"})
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"error": "invalid_grant"})
        return httpx.Response(200, json={"access_token": "provider-token", "user": self.user})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last_body(self) -> dict[str, Any]:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def settings() -> Settings:
    return get_settings()


@pytest.fixture
def fake_role_store() -> FakeRoleStore:
    return FakeRoleStore()


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest_asyncio.fixture(scope="function")
async def client(
    fake_role_store: FakeRoleStore, fake_supabase: FakeSupabase
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with the role store and Supabase faked out."""
    app.dependency_overrides[get_role_store] = lambda: fake_role_store
    app.dependency_overrides[get_http_transport] = lambda: fake_supabase.transport

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def session_payload() -> SessionPayload:
    return SessionPayload(
        subject="user-123",
        email="staff@example.edu",
        role=AppRole.program_office,
        full_name="Pat Office",
    )


@pytest.fixture
def session_cookie(settings: Settings, session_payload: SessionPayload) -> str:
    """Cookie header carrying a valid session for ``session_payload``."""
    token = sign_session(session_payload, settings.auth_cookie_secret)
    return f"session={token}"
