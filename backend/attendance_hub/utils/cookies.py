from dataclasses import dataclass
from typing import Literal
from urllib.parse import quote, unquote

FLOW_COOKIE = "flow-oauth"
SESSION_COOKIE = "session"

FLOW_COOKIE_MAX_AGE = 60 * 10
SESSION_COOKIE_MAX_AGE = 60 * 60 * 24 * 7

# Characters left unescaped by JavaScript's encodeURIComponent
_COOKIE_VALUE_SAFE = "-_.!~*'()"

SameSite = Literal["Lax", "Strict", "None"]


@dataclass(frozen=True)
class CookieOptions:
    max_age: int | None = None
    path: str = "/"
    http_only: bool = True
    secure: bool = True
    same_site: SameSite = "Lax"


def parse_cookies(cookie_header: str | None) -> dict[str, str]:
    """
    Parse a ``Cookie`` request header into a name -> value mapping.

    Values are percent-decoded. Entries without a name are skipped and
    malformed entries never raise: a pair without ``=`` gets an empty value.
    """
    if not cookie_header:
        return {}

    cookies: dict[str, str] = {}
    for part in cookie_header.split(";"):
        name, _, raw_value = part.strip().partition("=")
        if not name:
            continue
        cookies[name] = unquote(raw_value)
    return cookies


def serialize_cookie(name: str, value: str, options: CookieOptions | None = None) -> str:
    """Build a ``Set-Cookie`` header value."""
    options = options or CookieOptions()
    parts = [f"{name}={quote(value, safe=_COOKIE_VALUE_SAFE)}"]
    if options.max_age is not None:
        parts.append(f"Max-Age={options.max_age}")
    parts.append(f"Path={options.path}")
    if options.http_only:
        parts.append("HttpOnly")
    if options.secure:
        parts.append("Secure")
    parts.append(f"SameSite={options.same_site}")
    return "; ".join(parts)


def expired_cookie(name: str, secure: bool) -> str:
    """Header value that makes the browser drop ``name`` immediately."""
    return serialize_cookie(name, "", CookieOptions(max_age=0, secure=secure))
