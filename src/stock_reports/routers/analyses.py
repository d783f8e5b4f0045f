"""Analysis routes: browse, create-or-reuse, cache check, generation and history.

Handlers only validate, call AnalysisService and shape the response; domain
errors propagate to the exception handlers registered in main.py.
"""
import logging

from fastapi import APIRouter, Depends, Query

from stock_reports.core import AnalysisOutcome
from stock_reports.deps import (AnalysisServiceDep, Identity,
                                OptionalIdentity, require_admin)
from stock_reports.schemas import (AnalysisCreate, AnalysisListResponse,
                                   AnalysisRead, AnalysisResponse,
                                   AnalysisResultResponse, CacheCheckRequest,
                                   CacheCheckResponse, DeleteResponse,
                                   HistoryRead, HistoryResponse,
                                   SaveHistoryRequest)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/analyses", tags=["analyses"])


def _result(outcome: AnalysisOutcome) -> AnalysisResultResponse:
    return AnalysisResultResponse(
        data=AnalysisRead.model_validate(outcome.value),
        from_cache=outcome.from_cache,
        warnings=outcome.warnings,
    )


@router.get("", response_model=AnalysisListResponse)
def list_analyses(
    service: AnalysisServiceDep,
    limit: int = Query(default=50, ge=1, le=100, description="Page size"),
    offset: int = Query(default=0, ge=0, description="Rows to skip"),
    market: str | None = Query(default=None, description="Filter by market (e.g. KOSPI)"),
    q: str | None = Query(default=None, description="Search symbol or company name"),
) -> AnalysisListResponse:
    """List stored analyses, newest first. No login required."""
    analyses = service.list_analyses(limit=limit, offset=offset, market=market, q=q)
    return AnalysisListResponse(
        data=[AnalysisRead.model_validate(a) for a in analyses],
        count=len(analyses),
    )


@router.post("", response_model=AnalysisResultResponse)
def create_analysis(
    payload: AnalysisCreate,
    service: AnalysisServiceDep,
    identity: OptionalIdentity,
) -> AnalysisResultResponse:
    """Store a finished report unless a fresh identical one exists.

    Returns the stored or cached analysis with `fromCache`. When signed in,
    the request is also appended to the user's history (best effort; any
    failure is reported in `warnings`).
    """
    return _result(service.create_analysis(payload, identity))


@router.post("/check-cache", response_model=CacheCheckResponse)
def check_cache(
    request: CacheCheckRequest,
    service: AnalysisServiceDep,
    identity: OptionalIdentity,
) -> CacheCheckResponse:
    """Look for a fresh identical analysis before asking for a new one."""
    outcome = service.check_cache(request, identity)
    if outcome is None:
        return CacheCheckResponse(cached=False, data=None)
    return CacheCheckResponse(cached=True, data=AnalysisRead.model_validate(outcome.value))


@router.post("/generate", response_model=AnalysisResultResponse)
async def generate_analysis(
    request: CacheCheckRequest,
    service: AnalysisServiceDep,
    identity: Identity,
) -> AnalysisResultResponse:
    """Serve from cache or spend one credit on a newly generated report."""
    return _result(await service.generate_analysis(request, identity))


@router.post("/save-history", response_model=HistoryResponse)
def save_history(
    payload: SaveHistoryRequest,
    service: AnalysisServiceDep,
    identity: Identity,
) -> HistoryResponse:
    """Record that the signed-in user obtained an analysis."""
    entry = service.save_history(identity, payload.analysis_id)
    return HistoryResponse(data=HistoryRead.model_validate(entry))


@router.get("/latest/{symbol}", response_model=AnalysisResponse)
def latest_for_symbol(symbol: str, service: AnalysisServiceDep) -> AnalysisResponse:
    return AnalysisResponse(data=AnalysisRead.model_validate(service.latest_for_symbol(symbol)))


@router.get("/{analysis_id}", response_model=AnalysisResponse)
def get_analysis(analysis_id: int, service: AnalysisServiceDep) -> AnalysisResponse:
    return AnalysisResponse(data=AnalysisRead.model_validate(service.get_analysis(analysis_id)))


@router.delete(
    "/{analysis_id}",
    response_model=DeleteResponse,
    dependencies=[Depends(require_admin)],
)
def delete_analysis(analysis_id: int, service: AnalysisServiceDep) -> DeleteResponse:
    """Soft-delete an analysis (administrators only)."""
    service.delete_analysis(analysis_id)
    return DeleteResponse(message=f"Analysis {analysis_id} deleted")
