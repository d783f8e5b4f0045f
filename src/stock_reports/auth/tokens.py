"""Session tokens: HS256 JWTs carrying the signed-in email and provider."""
import logging
import os
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from stock_reports.utils import parse_timestamp

logger = logging.getLogger(__name__)


def resolve_session_secret(configured: str | None) -> str:
    """Return the configured signing secret, or a random per-process one.

    Without SESSION_SECRET, tokens stop verifying on restart and are not
    shared between workers, but they can never be forged from a known default.
    """
    if configured:
        return configured
    logger.warning(
        "SESSION_SECRET is not set; using a random secret. Sessions will not survive a restart."
    )
    return secrets.token_urlsafe(32)


SESSION_SECRET = resolve_session_secret(os.getenv("SESSION_SECRET"))
SESSION_TTL_MINUTES = int(os.getenv("SESSION_TTL_MINUTES", "43200"))  # 30 days
ALGORITHM = "HS256"


@dataclass(frozen=True)
class SessionIdentity:
    """The authenticated caller, passed explicitly into handlers."""

    email: str
    provider: str | None = None
    provider_account_id: str | None = None
    expires_at: datetime | None = None


def create_session_token(
    email: str,
    provider: str | None = None,
    provider_account_id: str | None = None,
    *,
    secret: str | None = None,
    ttl: timedelta | None = None,
) -> str:
    """Sign a session token for the given identity."""
    expire = datetime.now(timezone.utc) + (ttl or timedelta(minutes=SESSION_TTL_MINUTES))
    claims = {"sub": email, "exp": expire}
    if provider:
        claims["provider"] = provider
    if provider_account_id:
        claims["provider_account_id"] = provider_account_id
    return jwt.encode(claims, secret or SESSION_SECRET, algorithm=ALGORITHM)


def decode_session_token(token: str, *, secret: str | None = None) -> SessionIdentity | None:
    """Verify a session token. Returns None for invalid, expired or subject-less tokens."""
    try:
        payload = jwt.decode(token, secret or SESSION_SECRET, algorithms=[ALGORITHM])
    except JWTError as exc:
        logger.debug("Rejected session token: %s", exc)
        return None
    email = payload.get("sub")
    if not email:
        return None
    exp = payload.get("exp")
    return SessionIdentity(
        email=email,
        provider=payload.get("provider"),
        provider_account_id=payload.get("provider_account_id"),
        expires_at=parse_timestamp(exp) if exp is not None else None,
    )
