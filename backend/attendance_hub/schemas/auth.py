from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from attendance_hub.models.role import AppRole


class SessionPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    subject: str  # Supabase user id
    email: str
    role: AppRole
    full_name: str | None = None


class FlowState(BaseModel):
    """Per-login-attempt data carried in the flow cookie between start and callback."""

    model_config = ConfigDict(populate_by_name=True)

    state: str = Field(..., min_length=1)
    verifier: str = Field(..., min_length=1)
    created_at: int | float = Field(..., alias="createdAt")  # epoch milliseconds


class ExternalIdentity(BaseModel):
    id: str | None = None
    email: str | None = None
    user_metadata: dict[str, Any] = Field(default_factory=dict)


class TokenExchangeResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    user: ExternalIdentity | None = None


@dataclass(frozen=True)
class OAuthStartPayload:
    authorize_url: str
    flow_cookie_value: str


@dataclass(frozen=True)
class CallbackResult:
    app_base_url: str
    redirect_path: str
    flow_cookie_clear: bool = True
    session_token: str | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.session_token is not None


class UserMetadata(BaseModel):
    full_name: str
    name: str


class SessionUser(BaseModel):
    id: str
    email: str
    user_metadata: UserMetadata


class MeResponse(BaseModel):
    user: SessionUser
    role: AppRole


class LogoutResponse(BaseModel):
    ok: bool = True


class ErrorResponse(BaseModel):
    error: str
