"""Signed-in user routes: profile, history, credits, linked providers, account deletion."""
import logging

from fastapi import APIRouter, Body, Query

from stock_reports.deps import AnalysisServiceDep, Identity, UserServiceDep
from stock_reports.schemas import (AnalysisRead, CreditResponse,
                                   HistoryListResponse, HistoryWithAnalysis,
                                   MessageResponse, ProfileResponse,
                                   ProviderRead, ProvidersResponse,
                                   UnlinkProviderRequest, UserProfile)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/user", tags=["user"])


@router.get("/profile", response_model=ProfileResponse)
def get_profile(service: UserServiceDep, identity: Identity) -> ProfileResponse:
    """Profile of the signed-in user (no internal ids)."""
    return ProfileResponse(user=UserProfile.model_validate(service.current_user(identity)))


@router.get("/analyses-history", response_model=HistoryListResponse)
def get_analyses_history(
    service: AnalysisServiceDep,
    identity: Identity,
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> HistoryListResponse:
    """The signed-in user's analysis history, newest first, with each analysis inlined."""
    rows = service.user_history(identity, limit=limit, offset=offset)
    data = [
        HistoryWithAnalysis(
            id=history.id,
            user_id=history.user_id,
            analysis_id=history.analysis_id,
            created_at=history.created_at,
            updated_at=history.updated_at,
            stock_analyses=AnalysisRead.model_validate(analysis),
        )
        for history, analysis in rows
    ]
    return HistoryListResponse(data=data, count=len(data))


@router.post("/decrement-analysis", response_model=CreditResponse)
def decrement_analysis(service: UserServiceDep, identity: Identity) -> CreditResponse:
    """Consume one analysis credit; 403 when none are left."""
    user = service.decrement_credit(identity)
    return CreditResponse(analysis_count=user.analysis_count, message="Analysis credit used")


@router.get("/providers", response_model=ProvidersResponse)
def list_providers(service: UserServiceDep, identity: Identity) -> ProvidersResponse:
    providers = service.list_providers(identity)
    return ProvidersResponse(providers=[ProviderRead.model_validate(p) for p in providers])


@router.delete("/providers", response_model=MessageResponse)
def unlink_provider(
    service: UserServiceDep,
    identity: Identity,
    payload: UnlinkProviderRequest = Body(...),
) -> MessageResponse:
    """Unlink one OAuth provider; the last remaining one cannot be removed."""
    service.unlink_provider(identity, payload.provider)
    return MessageResponse(message="Provider unlinked successfully")


@router.delete("/account", response_model=MessageResponse)
def delete_account(service: UserServiceDep, identity: Identity) -> MessageResponse:
    """Irreversibly delete the account with its provider links and history."""
    service.delete_account(identity)
    logger.info("Account deleted: %s", identity.email)
    return MessageResponse(message="Account deleted")
