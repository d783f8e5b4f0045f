"""Request and response schemas for /api/analyses."""
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from stock_reports.db.models import StockAnalysis


class CacheCheckRequest(BaseModel):
    """Identifies an analysis request: the cache key tuple."""

    market: str = Field(min_length=1)
    symbol: str = Field(min_length=1)
    name: str = Field(min_length=1)
    compare_periods: list[str] = Field(default_factory=list)
    model: str | None = None

    @field_validator("compare_periods", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return [] if value is None else value


class AnalysisCreate(CacheCheckRequest):
    """Body of POST /api/analyses: a finished report to cache."""

    report: str = Field(min_length=1)
    sector: str | None = None
    financial_table: str | None = None
    citations: list[str] = Field(default_factory=list)

    @field_validator("citations", mode="before")
    @classmethod
    def _citations_none_as_empty(cls, value):
        return [] if value is None else value

    def to_model(self) -> StockAnalysis:
        return StockAnalysis(
            market=self.market,
            symbol=self.symbol,
            name=self.name,
            sector=self.sector,
            report=self.report,
            financial_table=self.financial_table,
            compare_periods=list(self.compare_periods),
            model=self.model,
            citations=list(self.citations),
        )


class SaveHistoryRequest(BaseModel):
    analysis_id: int = Field(alias="analysisId")

    model_config = {"populate_by_name": True}


class AnalysisRead(BaseModel):
    """Public view of a stored analysis."""

    id: int
    market: str
    symbol: str
    name: str
    sector: str | None = None
    report: str
    financial_table: str | None = None
    compare_periods: list[str] = Field(default_factory=list)
    model: str | None = None
    citations: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class HistoryRead(BaseModel):
    id: int
    user_id: int
    analysis_id: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class HistoryWithAnalysis(HistoryRead):
    stock_analyses: AnalysisRead


class AnalysisListResponse(BaseModel):
    success: bool = True
    data: list[AnalysisRead]
    count: int


class AnalysisResponse(BaseModel):
    success: bool = True
    data: AnalysisRead


class AnalysisResultResponse(BaseModel):
    """Created-or-cached analysis plus the cache flag and best-effort warnings."""

    success: bool = True
    data: AnalysisRead
    from_cache: bool = Field(serialization_alias="fromCache")
    warnings: list[str] = Field(default_factory=list)


class CacheCheckResponse(BaseModel):
    success: bool = True
    cached: bool
    data: AnalysisRead | None = None


class HistoryResponse(BaseModel):
    success: bool = True
    data: HistoryRead


class HistoryListResponse(BaseModel):
    success: bool = True
    data: list[HistoryWithAnalysis]
    count: int


class DeleteResponse(BaseModel):
    success: bool = True
    message: str
