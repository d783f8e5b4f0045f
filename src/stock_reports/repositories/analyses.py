"""Analysis repository: stock_analyses, the freshness-window cache and analyses_history."""
import logging
from collections.abc import Iterable
from datetime import timedelta

from sqlalchemy import or_
from sqlmodel import Session, select

from stock_reports.db.models import AnalysisHistory, StockAnalysis
from stock_reports.utils import utcnow

logger = logging.getLogger(__name__)

# Identical requests within this window are served from the stored analysis.
CACHE_TTL = timedelta(days=7)


def periods_cover(stored: Iterable[str] | None, requested: Iterable[str] | None) -> bool:
    """True if the stored compare periods contain every requested one (order-insensitive)."""
    return set(stored or ()) >= set(requested or ())


class AnalysisRepository:
    """Database operations over stock_analyses and analyses_history.

    Soft-deleted analyses are invisible to every read here, the cache
    lookup included.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def _visible(self):
        return select(StockAnalysis).where(StockAnalysis.deleted_at.is_(None))

    def find_cached(
        self,
        market: str,
        symbol: str,
        name: str,
        compare_periods: list[str] | None = None,
        model: str | None = None,
    ) -> StockAnalysis | None:
        """Return the newest analysis that can stand in for this request.

        Matches market, symbol and name exactly, requires creation within
        CACHE_TTL, requires the stored compare periods to cover the requested
        ones, and matches model exactly when one is given.

        Returns:
            The most recently created match, or None when nothing qualifies.
        """
        cutoff = utcnow() - CACHE_TTL
        statement = self._visible().where(
            StockAnalysis.market == market,
            StockAnalysis.symbol == symbol,
            StockAnalysis.name == name,
            StockAnalysis.created_at >= cutoff,
        )
        if model:
            statement = statement.where(StockAnalysis.model == model)
        statement = statement.order_by(
            StockAnalysis.created_at.desc(), StockAnalysis.id.desc()
        )
        # JSON containment is not portable across backends; filter periods here.
        for analysis in self._session.exec(statement):
            if periods_cover(analysis.compare_periods, compare_periods):
                logger.debug(
                    "Cache hit: id=%s symbol=%s created_at=%s",
                    analysis.id, analysis.symbol, analysis.created_at,
                )
                return analysis
        return None

    def create(self, analysis: StockAnalysis) -> StockAnalysis:
        """Insert a new analysis stamped with the current time."""
        now = utcnow()
        analysis.created_at = now
        analysis.updated_at = now
        self._session.add(analysis)
        try:
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        self._session.refresh(analysis)
        logger.info("Analysis saved: id=%s %s:%s", analysis.id, analysis.market, analysis.symbol)
        return analysis

    def get(self, analysis_id: int) -> StockAnalysis | None:
        statement = self._visible().where(StockAnalysis.id == analysis_id)
        return self._session.exec(statement).first()

    def list_recent(
        self,
        limit: int = 50,
        offset: int = 0,
        market: str | None = None,
        q: str | None = None,
    ) -> list[StockAnalysis]:
        """Page through analyses, newest first.

        Optionally restricted to one market and to analyses whose symbol or
        name contains `q` (case-insensitive).
        """
        statement = self._visible()
        if market:
            statement = statement.where(StockAnalysis.market == market)
        if q:
            statement = statement.where(
                or_(
                    StockAnalysis.symbol.icontains(q, autoescape=True),
                    StockAnalysis.name.icontains(q, autoescape=True),
                )
            )
        statement = (
            statement.order_by(StockAnalysis.created_at.desc(), StockAnalysis.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(self._session.exec(statement).all())

    def latest_for_symbol(self, symbol: str) -> StockAnalysis | None:
        statement = (
            self._visible()
            .where(StockAnalysis.symbol == symbol)
            .order_by(StockAnalysis.created_at.desc(), StockAnalysis.id.desc())
        )
        return self._session.exec(statement).first()

    def soft_delete(self, analysis: StockAnalysis) -> StockAnalysis:
        now = utcnow()
        analysis.deleted_at = now
        analysis.updated_at = now
        self._session.add(analysis)
        self._session.commit()
        self._session.refresh(analysis)
        logger.info("Analysis soft-deleted: id=%s", analysis.id)
        return analysis

    def add_history(self, user_id: int, analysis_id: int) -> AnalysisHistory:
        """Append a history row; rolls the session back if the insert fails."""
        entry = AnalysisHistory(user_id=user_id, analysis_id=analysis_id)
        self._session.add(entry)
        try:
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        self._session.refresh(entry)
        logger.info("History recorded: user_id=%s analysis_id=%s", user_id, analysis_id)
        return entry

    def list_history(
        self, user_id: int, limit: int = 50, offset: int = 0
    ) -> list[tuple[AnalysisHistory, StockAnalysis]]:
        """A user's history, newest first, each entry joined with its analysis."""
        statement = (
            select(AnalysisHistory, StockAnalysis)
            .join(StockAnalysis, StockAnalysis.id == AnalysisHistory.analysis_id)
            .where(
                AnalysisHistory.user_id == user_id,
                StockAnalysis.deleted_at.is_(None),
            )
            .order_by(AnalysisHistory.created_at.desc(), AnalysisHistory.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return [(history, analysis) for history, analysis in self._session.exec(statement)]
