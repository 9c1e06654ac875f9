"""
Exception classes for API error handling.

Purge outcomes (unknown scope, store failure, cancellation) are not raised;
they travel in the purge response body. These cover everything else.
"""


class APIException(Exception):
    """
    Base exception for API errors.

    Rendered by the application as ``{"error": {"type", "message", "detail"}}``.
    """

    status_code: int = 500
    error_type: str = "api_error"
    message: str = "An error occurred"

    def __init__(self, message: str | None = None, detail: str | None = None) -> None:
        self.message = message or type(self).message
        self.detail = detail
        super().__init__(self.message)


class NotFoundError(APIException):
    """Unknown scope requested through the read-only endpoints."""

    status_code = 404
    error_type = "not_found"
    message = "Resource not found"


class ConflictError(APIException):
    """Another purge is already running in this process."""

    status_code = 409
    error_type = "conflict"
    message = "A purge is already in progress"


class ServiceUnavailableError(APIException):
    """The engine has not been built yet."""

    status_code = 503
    error_type = "service_unavailable"
    message = "Service temporarily unavailable"
