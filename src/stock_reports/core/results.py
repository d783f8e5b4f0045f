"""Result types for operations with best-effort side steps."""
import logging
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from stock_reports.db.models import StockAnalysis

T = TypeVar("T")


@dataclass
class Outcome(Generic[T]):
    """Primary outcome plus the non-fatal warnings collected on the way."""

    value: T
    warnings: list[str] = field(default_factory=list)

    def warn(self, message: str, *, logger: logging.Logger | None = None) -> None:
        """Record a non-fatal failure (and log it when a logger is given)."""
        if logger is not None:
            logger.warning(message)
        self.warnings.append(message)

    @property
    def ok(self) -> bool:
        return not self.warnings


@dataclass
class AnalysisOutcome(Outcome[StockAnalysis]):
    """Result of create/generate: the analysis and whether it came from cache."""

    from_cache: bool = False
