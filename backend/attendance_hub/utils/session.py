from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from pydantic import ValidationError

from attendance_hub.schemas.auth import SessionPayload

SESSION_ISSUER = "attendance-hub-api"
SESSION_AUDIENCE = "attendance-hub-web"
SESSION_ALGORITHM = "HS256"
SESSION_TTL = timedelta(days=7)


class InvalidSessionError(Exception):
    """Raised for any session token that must not be trusted."""


def sign_session(payload: SessionPayload, secret: str, now: datetime | None = None) -> str:
    """
    Sign a session token carrying the user's identity and role.

    The token is an HS256 JWT with fixed issuer and audience, issued at
    ``now`` and expiring ``SESSION_TTL`` later.
    """
    if not secret:
        raise ValueError("Session secret must not be empty")

    issued_at = now or datetime.now(timezone.utc)
    claims = {
        "sub": payload.subject,
        "email": payload.email,
        "role": payload.role.value,
        "full_name": payload.full_name or "",
        "iss": SESSION_ISSUER,
        "aud": SESSION_AUDIENCE,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + SESSION_TTL).timestamp()),
    }
    return jwt.encode(claims, secret, algorithm=SESSION_ALGORITHM)


def verify_session(token: str, secret: str) -> SessionPayload:
    """
    Verify a session token and return its payload.

    Signature, issuer, audience, expiry and role are all checked. Every
    failure surfaces as ``InvalidSessionError`` so callers cannot tell them apart.
    """
    if not token or not secret:
        raise InvalidSessionError("Invalid session")

    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[SESSION_ALGORITHM],
            audience=SESSION_AUDIENCE,
            issuer=SESSION_ISSUER,
            options={
                "verify_exp": True,
                "require_exp": True,
                "require_iat": True,
                "require_sub": True,
                "require_aud": True,
                "require_iss": True,
            },
        )
        return SessionPayload(
            subject=str(claims["sub"]),
            email=str(claims["email"]),
            role=claims["role"],
            full_name=str(claims["full_name"]) if claims.get("full_name") else None,
        )
    except (JWTError, KeyError, ValidationError) as e:
        raise InvalidSessionError("Invalid session") from e
