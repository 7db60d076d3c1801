"""Search errors and the HTTP status each one maps to.

Everything the service raises on purpose derives from ``AppException``;
``rentgeo.middleware.error_handler`` renders these as JSON bodies.
"""

from typing import Any, Dict, Optional


class AppException(Exception):
    """Base class for errors that carry their own HTTP status.

    Attributes:
        message: Text returned to the caller as ``error``.
        status_code: Response status.
        details: Structured context returned alongside the message.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundException(AppException):
    """Raised when a referenced property or location does not exist."""

    def __init__(
        self,
        message: str = "Resource not found",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, status_code=404, details=details)


class ValidationException(AppException):
    """Raised when search input is missing or malformed.

    Detected before the store is touched and never retried.
    """

    def __init__(
        self,
        message: str = "Validation error",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, status_code=422, details=details)


class StoreQueryException(AppException):
    """Raised when the spatial store fails to execute a query.

    The message is safe to show to callers. The underlying driver error
    is chained as ``__cause__`` and only the operation name goes into
    ``details``.
    """

    def __init__(
        self,
        message: str = "Spatial query failed",
        operation: Optional[str] = None,
    ) -> None:
        """Initialize store query exception.

        Args:
            message: Caller-safe error message.
            operation: Name of the service operation that failed.
        """
        details = {"operation": operation} if operation else None
        super().__init__(message=message, status_code=500, details=details)
        self.operation = operation
