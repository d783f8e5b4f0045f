"""Sign-in callback and provider discovery.

The OAuth exchange itself happens in the front end. After a provider
verifies the user, the front end posts the identity here (authenticated
with the shared X-Auth-Secret header) and receives a session token.
"""
import logging

from fastapi import APIRouter, Depends

from stock_reports.auth import create_session_token, enabled_providers
from stock_reports.deps import UserServiceDep, require_auth_secret
from stock_reports.schemas import (AuthProvidersResponse, SignInRequest,
                                   SignInResponse)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get("/providers", response_model=AuthProvidersResponse)
def list_auth_providers() -> AuthProvidersResponse:
    """OAuth providers with configured client credentials."""
    return AuthProvidersResponse(providers=enabled_providers())


@router.post(
    "/sign-in",
    response_model=SignInResponse,
    dependencies=[Depends(require_auth_secret)],
)
def sign_in(payload: SignInRequest, service: UserServiceDep) -> SignInResponse:
    """Upsert the account and issue a session token.

    Database trouble never blocks sign-in: the token is issued anyway and
    the failure is reported in `warnings` with `user` set to null.
    """
    outcome = service.sign_in(
        payload.email,
        payload.provider,
        payload.provider_account_id,
        name=payload.name,
    )
    if outcome.warnings:
        logger.warning("Sign-in for %s completed with warnings: %s", payload.email, outcome.warnings)
    token = create_session_token(
        payload.email, payload.provider, payload.provider_account_id
    )
    return SignInResponse(token=token, user=outcome.value, warnings=outcome.warnings)
