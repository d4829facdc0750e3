import logging
from typing import Optional

from attendance_hub.schemas.auth import MeResponse, SessionPayload, SessionUser, UserMetadata
from attendance_hub.utils.session import InvalidSessionError, verify_session

logger = logging.getLogger(__name__)


def load_session(token: str | None, secret: str | None) -> Optional[SessionPayload]:
    """Return the verified session payload, or None when the token is missing or untrusted."""
    if not token or not secret:
        return None
    try:
        return verify_session(token, secret)
    except InvalidSessionError:
        logger.debug("Rejected invalid session token")
        return None


def build_me_response(session: SessionPayload) -> MeResponse:
    full_name = session.full_name or ""
    return MeResponse(
        user=SessionUser(
            id=session.subject,
            email=session.email,
            user_metadata=UserMetadata(full_name=full_name, name=full_name),
        ),
        role=session.role,
    )
