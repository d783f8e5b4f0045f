"""Database models for the stock reports service.

Users and their linked OAuth identities, generated analyses, and the
append-only history linking the two.
"""
from datetime import datetime
from enum import Enum

from sqlalchemy import JSON, CheckConstraint, DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel

from stock_reports.utils import utcnow

STARTING_CREDITS = 10

# Timestamps are stored timezone-aware, always in UTC.


class Plan(str, Enum):
    """Billing tier of a user account."""

    FREE = "free"
    PAID = "paid"


class User(SQLModel, table=True):
    """User account, keyed by email."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("analysis_count >= 0", name="ck_users_analysis_count_nonnegative"),
    )

    id: int | None = Field(default=None, primary_key=True)
    email: str = Field(unique=True, index=True)
    name: str | None = None
    analysis_count: int = Field(default=STARTING_CREDITS)  # remaining credits, floor 0
    plan: str = Field(default=Plan.FREE.value)  # Plan value
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    last_login_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))


class UserProvider(SQLModel, table=True):
    """One linked OAuth identity (kakao, naver, ...) of a user."""

    __tablename__ = "user_providers"
    __table_args__ = (
        UniqueConstraint("provider", "provider_account_id", name="uq_provider_account"),
    )

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", ondelete="CASCADE", index=True)
    provider: str
    provider_account_id: str
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


class StockAnalysis(SQLModel, table=True):
    """A generated equity research report."""

    __tablename__ = "stock_analyses"

    id: int | None = Field(default=None, primary_key=True)
    market: str = Field(index=True)  # KOSPI | KOSDAQ | NASDAQ | ...
    symbol: str = Field(index=True)
    name: str
    sector: str | None = None
    report: str
    financial_table: str | None = None
    compare_periods: list[str] = Field(default_factory=list, sa_type=JSON)
    model: str | None = None
    citations: list[str] = Field(default_factory=list, sa_type=JSON)
    created_at: datetime = Field(default_factory=utcnow, index=True, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    deleted_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))


class AnalysisHistory(SQLModel, table=True):
    """Append-only record of a user obtaining an analysis."""

    __tablename__ = "analyses_history"

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", ondelete="CASCADE", index=True)
    analysis_id: int = Field(foreign_key="stock_analyses.id", ondelete="CASCADE")
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
