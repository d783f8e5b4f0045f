"""Repositories: one class per aggregate, each wrapping a request's Session."""
from stock_reports.repositories.analyses import CACHE_TTL, AnalysisRepository
from stock_reports.repositories.users import UserRepository

__all__ = ["CACHE_TTL", "AnalysisRepository", "UserRepository"]
