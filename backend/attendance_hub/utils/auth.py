from typing import Annotated, Optional

import httpx
from fastapi import Depends, HTTPException, Request, status

from attendance_hub.config import Settings, get_settings
from attendance_hub.models.role import AppRole
from attendance_hub.schemas.auth import SessionPayload
from attendance_hub.services.role_service import RoleService, RoleStore, SupabaseRoleStore
from attendance_hub.services.session_service import load_session
from attendance_hub.utils.cookies import SESSION_COOKIE, parse_cookies

SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_http_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Transport for outbound Supabase calls; None uses httpx's default network transport."""
    return None


HttpTransportDep = Annotated[Optional[httpx.AsyncBaseTransport], Depends(get_http_transport)]


def get_role_store(settings: SettingsDep, transport: HttpTransportDep) -> RoleStore:
    return SupabaseRoleStore(
        settings.supabase_url or "",
        settings.supabase_service_role_key or "",
        timeout=settings.oauth_http_timeout,
        transport=transport,
    )


def get_role_service(store: Annotated[RoleStore, Depends(get_role_store)]) -> RoleService:
    return RoleService(store)


async def get_current_session_optional(
    request: Request, settings: SettingsDep
) -> Optional[SessionPayload]:
    """
    Get the session carried by the session cookie.
    Returns None if the cookie is missing or fails verification.
    """
    cookies = parse_cookies(request.headers.get("cookie"))
    return load_session(cookies.get(SESSION_COOKIE), settings.auth_cookie_secret)


async def get_current_session(
    session: Annotated[Optional[SessionPayload], Depends(get_current_session_optional)],
) -> SessionPayload:
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return session


CurrentSession = Annotated[SessionPayload, Depends(get_current_session)]
CurrentSessionOptional = Annotated[Optional[SessionPayload], Depends(get_current_session_optional)]


def require_roles(*roles: AppRole):
    """Dependency factory restricting a route to the given application roles."""

    async def _check(session: CurrentSession) -> SessionPayload:
        if session.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient role",
            )
        return session

    return _check


# Type aliases for dependency injection
RoleServiceDep = Annotated[RoleService, Depends(get_role_service)]
