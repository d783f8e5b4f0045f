"""Database package: models and session management."""
from stock_reports.db.models import (AnalysisHistory, Plan, StockAnalysis,
                                     User, UserProvider)

__all__ = ["AnalysisHistory", "Plan", "StockAnalysis", "User", "UserProvider"]
