"""Core abstractions: domain errors, error mapping and result types."""
from stock_reports.core.error_mapper import ServiceErrorMapper
from stock_reports.core.exceptions import (AuthenticationRequired,
                                           LastProviderError, NoCreditsError,
                                           NotFoundError, PaymentRejectedError,
                                           PermissionDenied, PersistenceError,
                                           RequestValidationFailed,
                                           ServiceError, UpstreamError)
from stock_reports.core.results import AnalysisOutcome, Outcome

__all__ = [
    "AnalysisOutcome",
    "AuthenticationRequired",
    "LastProviderError",
    "NoCreditsError",
    "NotFoundError",
    "Outcome",
    "PaymentRejectedError",
    "PermissionDenied",
    "PersistenceError",
    "RequestValidationFailed",
    "ServiceError",
    "ServiceErrorMapper",
    "UpstreamError",
]
