"""FastAPI dependency injection: app.state holds singletons; Depends() resolves them.

No external DI container. The lifespan (main.py) creates the engine and the
HTTP clients once and attaches them to app.state; these getters build the
per-request session, identity and services.
"""
import os
import secrets
from collections.abc import Generator
from typing import Annotated

from fastapi import Cookie, Depends, Header, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from stock_reports.auth import SessionIdentity, decode_session_token
from stock_reports.core import AuthenticationRequired, PermissionDenied
from stock_reports.db.sessions import get_session
from stock_reports.repositories import AnalysisRepository, UserRepository
from stock_reports.services import AnalysisService, PaymentService, UserService

SESSION_COOKIE = "session_token"

_bearer = HTTPBearer(auto_error=False)


def get_db_session(request: Request) -> Generator[Session, None, None]:
    """One session per request on the app's engine."""
    with get_session(request.app.state.engine) as session:
        yield session


def get_optional_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    session_token: str | None = Cookie(default=None),
) -> SessionIdentity | None:
    """Resolve the caller from a bearer token or the session cookie; None if anonymous or invalid."""
    token = credentials.credentials if credentials else session_token
    if not token:
        return None
    return decode_session_token(token)


def require_identity(
    identity: SessionIdentity | None = Depends(get_optional_identity),
) -> SessionIdentity:
    """Like get_optional_identity but rejects anonymous callers with 401."""
    if identity is None:
        raise AuthenticationRequired("Unauthorized - login required")
    return identity


def _check_secret(expected: str | None, supplied: str | None) -> None:
    if not expected or not supplied or not secrets.compare_digest(expected, supplied):
        raise PermissionDenied("Invalid or missing credentials")


def require_auth_secret(x_auth_secret: str | None = Header(default=None)) -> None:
    """Guard for the sign-in callback, which only the OAuth front end may call."""
    _check_secret(os.getenv("AUTH_SHARED_SECRET"), x_auth_secret)


def require_admin(x_admin_key: str | None = Header(default=None)) -> None:
    """Guard for administrative operations (soft-deleting analyses)."""
    _check_secret(os.getenv("ADMIN_API_KEY"), x_admin_key)


DbSession = Annotated[Session, Depends(get_db_session)]
OptionalIdentity = Annotated[SessionIdentity | None, Depends(get_optional_identity)]
Identity = Annotated[SessionIdentity, Depends(require_identity)]


def get_analysis_service(request: Request, session: DbSession) -> AnalysisService:
    """Inject the analysis service (repositories on this request's session + AI backend)."""
    return AnalysisService(
        AnalysisRepository(session),
        UserRepository(session),
        backend=request.app.state.analysis_backend,
    )


def get_user_service(session: DbSession) -> UserService:
    return UserService(UserRepository(session))


def get_payment_service(request: Request, session: DbSession) -> PaymentService:
    return PaymentService(UserRepository(session), request.app.state.payments_client)


# Type aliases for route injection
AnalysisServiceDep = Annotated[AnalysisService, Depends(get_analysis_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
PaymentServiceDep = Annotated[PaymentService, Depends(get_payment_service)]
