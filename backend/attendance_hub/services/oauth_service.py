import base64
import hashlib
import logging
import secrets
import time
from collections.abc import Callable

import httpx
from pydantic import ValidationError

from attendance_hub.config import Settings
from attendance_hub.schemas.auth import (
    CallbackResult,
    ExternalIdentity,
    FlowState,
    OAuthStartPayload,
    SessionPayload,
    TokenExchangeResponse,
)
from attendance_hub.services.role_service import RoleService
from attendance_hub.utils.session import sign_session

logger = logging.getLogger(__name__)

FLOW_STATE_TTL_MS = 10 * 60 * 1000
STATE_BYTES = 20
VERIFIER_BYTES = 32

CALLBACK_PATH = "/api/auth/google/callback"
SUCCESS_REDIRECT_PATH = "/dashboard"
ERROR_REDIRECT_PATH = "/"


class OAuthFlowError(Exception):
    """A login failure whose message is safe to show to the user."""


def to_base64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def code_challenge_for(verifier: str) -> str:
    return to_base64url(hashlib.sha256(verifier.encode("ascii")).digest())


def display_name_for(identity: ExternalIdentity) -> str:
    for key in ("full_name", "name"):
        value = identity.user_metadata.get(key)
        if isinstance(value, str) and value:
            return value
    if identity.email:
        local_part = identity.email.split("@")[0]
        if local_part:
            return local_part
    return "user"


class GoogleOAuthService:
    """
    Google sign-in through Supabase using the authorization-code + PKCE grant.

    The server keeps no per-login state: the PKCE verifier and CSRF state
    travel in the flow cookie and are checked on callback.
    """

    def __init__(
        self,
        settings: Settings,
        role_service: RoleService,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.time,
    ):
        settings.validate_auth()
        self.settings = settings
        self.role_service = role_service
        self.transport = transport
        self.clock = clock

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    def new_flow_state(self) -> FlowState:
        return FlowState(
            state=to_base64url(secrets.token_bytes(STATE_BYTES)),
            verifier=to_base64url(secrets.token_bytes(VERIFIER_BYTES)),
            created_at=self._now_ms(),
        )

    def build_start_payload(self) -> OAuthStartPayload:
        flow = self.new_flow_state()
        authorize_url = httpx.URL(
            f"{self.settings.supabase_url}/auth/v1/authorize",
            params={
                "provider": "google",
                "redirect_to": f"{self.settings.app_base_url}{CALLBACK_PATH}",
                "code_challenge": code_challenge_for(flow.verifier),
                "code_challenge_method": "s256",
                "state": flow.state,
                "prompt": "select_account",
                "hd": self.settings.allowed_email_domain,
            },
        )
        logger.info("Starting Google OAuth flow")
        return OAuthStartPayload(
            authorize_url=str(authorize_url),
            flow_cookie_value=flow.model_dump_json(by_alias=True),
        )

    def _failure(self, message: str) -> CallbackResult:
        logger.warning("OAuth callback rejected: %s", message)
        return CallbackResult(
            app_base_url=self.settings.app_base_url,
            redirect_path=ERROR_REDIRECT_PATH,
            error=message,
        )

    async def exchange_callback(
        self, code: str, state: str, raw_flow_cookie: str | None
    ) -> CallbackResult:
        if not code or not state:
            return self._failure("Missing OAuth code/state")
        if not raw_flow_cookie:
            return self._failure("Login session expired. Please retry.")

        try:
            flow = FlowState.model_validate_json(raw_flow_cookie)
        except ValidationError:
            return self._failure("Invalid OAuth session")

        expired = self._now_ms() - flow.created_at > FLOW_STATE_TTL_MS
        if not secrets.compare_digest(flow.state.encode(), state.encode()) or expired:
            return self._failure("Invalid or expired OAuth state")

        try:
            identity = await self._exchange_code(code, flow.verifier)
            domain = self.settings.allowed_email_domain
            _, at, email_domain = identity.email.rpartition("@")
            if not at or email_domain != domain:
                raise OAuthFlowError(f"Only @{domain} accounts are allowed.")

            role = await self.role_service.resolve_role(identity.id)
            session_token = sign_session(
                SessionPayload(
                    subject=identity.id,
                    email=identity.email,
                    role=role,
                    full_name=display_name_for(identity),
                ),
                self.settings.auth_cookie_secret,
            )
        except OAuthFlowError as e:
            return self._failure(str(e))
        except Exception:
            logger.exception("Unexpected error completing Google OAuth callback")
            return self._failure("Login failed")

        logger.info("User %s signed in with role %s", identity.id, role)
        return CallbackResult(
            app_base_url=self.settings.app_base_url,
            redirect_path=SUCCESS_REDIRECT_PATH,
            session_token=session_token,
        )

    async def _exchange_code(self, code: str, verifier: str) -> ExternalIdentity:
        try:
            async with httpx.AsyncClient(
                timeout=self.settings.oauth_http_timeout, transport=self.transport
            ) as client:
                response = await client.post(
                    f"{self.settings.supabase_url}/auth/v1/token",
                    params={"grant_type": "pkce"},
                    headers={"apikey": self.settings.supabase_anon_key},
                    json={"auth_code": code, "code_verifier": verifier},
                )
        except httpx.HTTPError as e:
            logger.error("Supabase token exchange request failed: %s", e)
            raise OAuthFlowError("Failed to exchange OAuth code with Supabase") from None

        if not response.is_success:
            logger.error("Supabase token exchange returned HTTP %s", response.status_code)
            raise OAuthFlowError("Failed to exchange OAuth code with Supabase")

        try:
            user = TokenExchangeResponse.model_validate_json(response.content).user
        except ValidationError:
            user = None
        if user is None or not user.id or not user.email:
            raise OAuthFlowError("Supabase returned an invalid user session")
        return user
