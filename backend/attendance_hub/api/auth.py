import logging

import httpx
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse, RedirectResponse, Response

from attendance_hub.schemas.auth import ErrorResponse, LogoutResponse, MeResponse
from attendance_hub.services.oauth_service import GoogleOAuthService
from attendance_hub.services.session_service import build_me_response
from attendance_hub.utils.auth import (
    CurrentSessionOptional,
    HttpTransportDep,
    RoleServiceDep,
    SettingsDep,
)
from attendance_hub.utils.cookies import (
    FLOW_COOKIE,
    FLOW_COOKIE_MAX_AGE,
    SESSION_COOKIE,
    SESSION_COOKIE_MAX_AGE,
    CookieOptions,
    expired_cookie,
    parse_cookies,
    serialize_cookie,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])
logger = logging.getLogger(__name__)


def _first_query_value(request: Request, name: str) -> str:
    values = request.query_params.getlist(name)
    return values[0] if values else ""


def _redirect(location: str, cookies: list[str]) -> RedirectResponse:
    response = RedirectResponse(location, status_code=status.HTTP_302_FOUND)
    for cookie in cookies:
        response.headers.append("set-cookie", cookie)
    return response


@router.api_route("/google/start", methods=["GET", "POST"])
async def google_start(
    settings: SettingsDep,
    role_service: RoleServiceDep,
    transport: HttpTransportDep,
) -> Response:
    try:
        service = GoogleOAuthService(settings, role_service, transport=transport)
        payload = service.build_start_payload()
    except Exception as e:
        logger.error("Failed to initiate Google login: %s", e)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(error=str(e) or "Failed to initiate login").model_dump(),
        )

    flow_cookie = serialize_cookie(
        FLOW_COOKIE,
        payload.flow_cookie_value,
        CookieOptions(max_age=FLOW_COOKIE_MAX_AGE, secure=settings.is_production),
    )
    return _redirect(payload.authorize_url, [flow_cookie])


@router.api_route("/google/callback", methods=["GET", "POST"])
async def google_callback(
    request: Request,
    settings: SettingsDep,
    role_service: RoleServiceDep,
    transport: HttpTransportDep,
) -> Response:
    service = GoogleOAuthService(settings, role_service, transport=transport)
    cookies = parse_cookies(request.headers.get("cookie"))
    result = await service.exchange_callback(
        _first_query_value(request, "code"),
        _first_query_value(request, "state"),
        cookies.get(FLOW_COOKIE),
    )

    set_cookies = [expired_cookie(FLOW_COOKIE, secure=settings.is_production)]
    if result.session_token:
        set_cookies.append(
            serialize_cookie(
                SESSION_COOKIE,
                result.session_token,
                CookieOptions(max_age=SESSION_COOKIE_MAX_AGE, secure=settings.is_production),
            )
        )

    if result.error:
        location = httpx.URL(f"{result.app_base_url}{result.redirect_path}").copy_set_param(
            "auth_error", result.error
        )
        return _redirect(str(location), set_cookies)

    return _redirect(f"{result.app_base_url}{result.redirect_path}", set_cookies)


@router.post("/logout", response_model=LogoutResponse)
async def logout(settings: SettingsDep) -> Response:
    response = JSONResponse(status_code=status.HTTP_200_OK, content=LogoutResponse().model_dump())
    response.headers.append("set-cookie", expired_cookie(SESSION_COOKIE, secure=settings.is_production))
    response.headers.append("set-cookie", expired_cookie(FLOW_COOKIE, secure=settings.is_production))
    return response


@router.get(
    "/me",
    response_model=MeResponse,
    responses={status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse}},
)
async def me(session: CurrentSessionOptional) -> Response:
    if session is None:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=ErrorResponse(error="Not authenticated").model_dump(),
        )
    return JSONResponse(content=build_me_response(session).model_dump(mode="json"))
