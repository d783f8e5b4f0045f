"""Domain exceptions raised by repositories and services.

Routers never build error responses themselves; these propagate to the
handlers registered in main.py, which map them through ServiceErrorMapper.
"""


class ServiceError(Exception):
    """Base class for expected, client-visible failures."""

    default_message = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class RequestValidationFailed(ServiceError):
    default_message = "Invalid request"


class AuthenticationRequired(ServiceError):
    default_message = "Unauthorized - login required"


class PermissionDenied(ServiceError):
    default_message = "Permission denied"


class NotFoundError(ServiceError):
    default_message = "Resource not found"


class NoCreditsError(ServiceError):
    """The user has no analysis credits left."""

    default_message = "No analysis credits remaining"


class LastProviderError(ServiceError):
    """Unlinking would leave the account without a login method."""

    default_message = "Cannot remove the last login method"


class PaymentRejectedError(ServiceError):
    """The payment processor refused the confirmation."""

    default_message = "Payment was rejected"


class PersistenceError(ServiceError):
    default_message = "Database error"


class UpstreamError(ServiceError):
    """An external HTTP service (AI backend, payment processor) failed."""

    default_message = "Upstream service error"
