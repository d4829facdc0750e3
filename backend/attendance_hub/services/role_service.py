import logging
from typing import Protocol

import httpx

from attendance_hub.models.role import AppRole, narrow_role

logger = logging.getLogger(__name__)

USER_ROLES_TABLE = "user_roles"


class RoleStore(Protocol):
    async def fetch_role(self, user_id: str) -> str | None: ...


class SupabaseRoleStore:
    """Read-only lookup of role assignments through the Supabase REST interface."""

    def __init__(
        self,
        supabase_url: str,
        service_role_key: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = supabase_url.rstrip("/")
        self.service_role_key = service_role_key
        self.timeout = timeout
        self.transport = transport

    async def fetch_role(self, user_id: str) -> str | None:
        headers = {
            "apikey": self.service_role_key,
            "Authorization": f"Bearer {self.service_role_key}",
            "Accept": "application/json",
        }
        params = {
            "select": "role",
            "user_id": f"eq.{user_id}",
            "limit": "1",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(
                    f"{self.base_url}/rest/v1/{USER_ROLES_TABLE}",
                    headers=headers,
                    params=params,
                )
                response.raise_for_status()
                rows = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Role lookup failed for user %s: %s", user_id, e)
            return None

        if not isinstance(rows, list) or not rows or not isinstance(rows[0], dict):
            return None
        role = rows[0].get("role")
        return role if isinstance(role, str) else None


class RoleService:
    def __init__(self, store: RoleStore):
        self.store = store

    async def resolve_role(self, user_id: str) -> AppRole:
        """Resolve the application role for a user; absent or unknown assignments map to ``user``."""
        role = narrow_role(await self.store.fetch_role(user_id))
        logger.debug("Resolved role %s for user %s", role, user_id)
        return role
