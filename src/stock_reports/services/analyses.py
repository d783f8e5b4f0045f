"""Analysis service: cache lookup, create-or-reuse, generation and history recording."""
import asyncio
import logging

import httpx
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from stock_reports.auth import SessionIdentity
from stock_reports.clients import (AnalysisBackendClient, AnalyzeRequest,
                                   GeneratedReport)
from stock_reports.core import (AnalysisOutcome, NotFoundError,
                                PersistenceError, UpstreamError)
from stock_reports.db.models import AnalysisHistory, StockAnalysis
from stock_reports.repositories import AnalysisRepository, UserRepository
from stock_reports.schemas import AnalysisCreate, CacheCheckRequest

logger = logging.getLogger(__name__)


class AnalysisService:
    """Orchestrates the analysis repository, the user repository and the AI backend.

    History recording is best effort everywhere: its failures end up in the
    outcome's warnings and never fail the request.
    """

    def __init__(
        self,
        analyses: AnalysisRepository,
        users: UserRepository,
        backend: AnalysisBackendClient | None = None,
    ) -> None:
        self._analyses = analyses
        self._users = users
        self._backend = backend

    def find_cached(self, request: CacheCheckRequest) -> StockAnalysis | None:
        return self._analyses.find_cached(
            request.market,
            request.symbol,
            request.name,
            request.compare_periods,
            request.model,
        )

    def _record_history(self, outcome: AnalysisOutcome, identity: SessionIdentity | None) -> None:
        """Link the outcome's analysis to the signed-in user, collecting failures as warnings."""
        if identity is None:
            logger.debug("Anonymous request; history not recorded")
            return
        try:
            user = self._users.get_by_email(identity.email)
            if user is None:
                outcome.warn(f"User not found: {identity.email}", logger=logger)
                return
            self._analyses.add_history(user.id, outcome.value.id)
        except SQLAlchemyError as exc:
            logger.exception("Failed to record analysis history")
            self._users.rollback()
            outcome.warn(f"Failed to record analysis history: {exc}")

    def create_analysis(
        self, payload: AnalysisCreate, identity: SessionIdentity | None = None
    ) -> AnalysisOutcome:
        """Reuse a fresh matching analysis or persist the supplied one, then record history.

        Raises:
            PersistenceError: Storing a new analysis failed.
        """
        cached = self.find_cached(payload)
        if cached is not None:
            logger.info("Using cached analysis id=%s", cached.id)
            outcome = AnalysisOutcome(value=cached, from_cache=True)
        else:
            try:
                created = self._analyses.create(payload.to_model())
            except SQLAlchemyError as exc:
                logger.exception("Failed to save analysis %s:%s", payload.market, payload.symbol)
                raise PersistenceError("Failed to save analysis") from exc
            outcome = AnalysisOutcome(value=created, from_cache=False)
        self._record_history(outcome, identity)
        return outcome

    def check_cache(
        self, request: CacheCheckRequest, identity: SessionIdentity | None = None
    ) -> AnalysisOutcome | None:
        """Cache lookup ahead of generation; a hit is recorded in the user's history."""
        cached = self.find_cached(request)
        if cached is None:
            return None
        outcome = AnalysisOutcome(value=cached, from_cache=True)
        self._record_history(outcome, identity)
        return outcome

    def save_history(self, identity: SessionIdentity, analysis_id: int) -> AnalysisHistory:
        """Explicitly record that the signed-in user obtained an analysis."""
        user = self._users.get_by_email(identity.email)
        if user is None:
            raise NotFoundError("User not found")
        if self._analyses.get(analysis_id) is None:
            raise NotFoundError(f"Analysis {analysis_id} not found")
        try:
            return self._analyses.add_history(user.id, analysis_id)
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to save analysis history") from exc

    def list_analyses(
        self,
        limit: int = 50,
        offset: int = 0,
        market: str | None = None,
        q: str | None = None,
    ) -> list[StockAnalysis]:
        return self._analyses.list_recent(limit=limit, offset=offset, market=market, q=q)

    def get_analysis(self, analysis_id: int) -> StockAnalysis:
        analysis = self._analyses.get(analysis_id)
        if analysis is None:
            raise NotFoundError(f"Analysis {analysis_id} not found")
        return analysis

    def latest_for_symbol(self, symbol: str) -> StockAnalysis:
        analysis = self._analyses.latest_for_symbol(symbol)
        if analysis is None:
            raise NotFoundError(f"No analysis for symbol '{symbol}'")
        return analysis

    def delete_analysis(self, analysis_id: int) -> StockAnalysis:
        return self._analyses.soft_delete(self.get_analysis(analysis_id))

    def user_history(
        self, identity: SessionIdentity, limit: int = 50, offset: int = 0
    ) -> list[tuple[AnalysisHistory, StockAnalysis]]:
        user = self._users.get_by_email(identity.email)
        if user is None:
            raise NotFoundError("User not found")
        return self._analyses.list_history(user.id, limit=limit, offset=offset)

    async def generate_analysis(
        self, request: CacheCheckRequest, identity: SessionIdentity
    ) -> AnalysisOutcome:
        """Serve from cache, or spend one credit and have the AI backend write the report.

        Raises:
            NoCreditsError: Cache miss and no credits left.
            UpstreamError: The backend failed; the credit is refunded (best effort).
            PersistenceError: The generated report could not be stored.
        """
        cached = await asyncio.to_thread(self.find_cached, request)
        if cached is not None:
            outcome = AnalysisOutcome(value=cached, from_cache=True)
            await asyncio.to_thread(self._record_history, outcome, identity)
            return outcome

        if self._backend is None:
            raise UpstreamError("Analysis backend is not configured")
        await asyncio.to_thread(self._users.decrement_credit, identity.email)
        try:
            generated = await self._backend.analyze(
                AnalyzeRequest(
                    market=request.market,
                    symbol=request.symbol,
                    name=request.name,
                    compare_periods=request.compare_periods,
                    model=request.model,
                )
            )
        except (httpx.HTTPError, ValidationError) as exc:
            logger.warning("Analysis backend failed for %s:%s: %s", request.market, request.symbol, exc)
            await asyncio.to_thread(self._refund_credit, identity.email)
            raise UpstreamError("Analysis backend failed to generate a report") from exc

        try:
            created = await asyncio.to_thread(
                self._analyses.create, self._to_model(request, generated)
            )
        except SQLAlchemyError as exc:
            logger.exception("Failed to save generated analysis")
            raise PersistenceError("Failed to save analysis") from exc
        outcome = AnalysisOutcome(value=created, from_cache=False)
        await asyncio.to_thread(self._record_history, outcome, identity)
        return outcome

    def _refund_credit(self, email: str) -> None:
        try:
            self._users.add_credits(email, 1)
        except (SQLAlchemyError, NotFoundError):
            logger.exception("Failed to refund analysis credit for %s", email)

    @staticmethod
    def _to_model(request: CacheCheckRequest, generated: GeneratedReport) -> StockAnalysis:
        return StockAnalysis(
            market=request.market,
            symbol=request.symbol,
            name=request.name,
            sector=generated.sector,
            report=generated.report,
            financial_table=generated.financial_table,
            compare_periods=list(request.compare_periods),
            model=generated.model or request.model,
            citations=list(generated.citations),
        )
