"""Domain concept for mapping service exceptions to HTTP responses."""
from dataclasses import dataclass

import httpx
from sqlalchemy.exc import SQLAlchemyError

from stock_reports.core.exceptions import (AuthenticationRequired,
                                           LastProviderError, NoCreditsError,
                                           NotFoundError, PaymentRejectedError,
                                           PermissionDenied, PersistenceError,
                                           RequestValidationFailed,
                                           UpstreamError)

_STATUS_BY_ERROR: tuple[tuple[type[Exception], int], ...] = (
    (RequestValidationFailed, 400),
    (LastProviderError, 400),
    (PaymentRejectedError, 400),
    (AuthenticationRequired, 401),
    (NoCreditsError, 403),
    (PermissionDenied, 403),
    (NotFoundError, 404),
    (PersistenceError, 500),
    (UpstreamError, 500),
)


@dataclass(frozen=True)
class ServiceErrorMapper:
    """Maps service/backend exceptions to HTTP (status_code, detail).

    The application registers exception handlers that delegate here, so the
    status code of every failure is decided in one place.
    """

    api_name: str = "Upstream API"

    def to_http(self, exc: Exception) -> tuple[int, str]:
        """Map an exception to (status_code, detail) for the JSON error body.

        Args:
            exc: The exception raised by a service, repository or client.

        Returns:
            (status_code, detail) suitable for an error response.
        """
        for error_type, status in _STATUS_BY_ERROR:
            if isinstance(exc, error_type):
                return (status, str(exc))
        if isinstance(exc, httpx.TimeoutException):
            return (500, f"Request to {self.api_name} timed out")
        if isinstance(exc, httpx.HTTPError):
            return (500, f"{self.api_name} error")
        if isinstance(exc, SQLAlchemyError):
            return (500, "Database error")
        return (500, "Internal server error")
