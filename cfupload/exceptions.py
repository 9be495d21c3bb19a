"""Exception classes for cfupload.

This module defines the exception hierarchy used throughout the upload
pipeline. Every error is fatal for the run; the CLI turns any
``CfUploadError`` into a red message and exit code 1.
"""

from typing import Optional, Dict, Any


USAGE_LINE = "cfupload -t <token> -s <space-id> -c <content-type> <glob>"


class CfUploadError(Exception):
    """Base exception class for all cfupload errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class UsageError(CfUploadError):
    """Exception raised for missing or invalid command-line input."""

    def __init__(
        self,
        message: str,
        show_usage: bool = False,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message
            show_usage: Whether the usage line should be printed with the error
            details: Optional additional error details
        """
        super().__init__(message, details)
        self.show_usage = show_usage


class ConfigError(UsageError):
    """Exception raised for configuration-related errors."""
    pass


class UploadAborted(CfUploadError):
    """Raised inside an upload task when another task already failed."""
    pass


class APIError(CfUploadError):
    """Base exception for Contentful API errors."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_data: Optional[Dict[str, Any]] = None
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message
            status_code: HTTP status code
            response_data: Raw response data from API
        """
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data or {}

    @property
    def error_id(self) -> Optional[str]:
        """Contentful error type, e.g. ``VersionMismatch`` or ``NotFound``."""
        sys_data = self.response_data.get("sys") or {}
        if isinstance(sys_data, dict):
            return sys_data.get("id")
        return None

    @property
    def request_id(self) -> Optional[str]:
        """Contentful request id, useful when contacting support."""
        return self.response_data.get("requestId")

    @property
    def api_details(self) -> Dict[str, Any]:
        """The ``details`` object of the error body, if any."""
        details = self.response_data.get("details")
        return details if isinstance(details, dict) else {}


class ConnectionFailedError(APIError):
    """Exception raised when the API could not be reached at all."""
    pass


class BadRequestError(APIError):
    """Exception raised for 400 Bad Request errors."""
    pass


class UnauthorizedError(APIError):
    """Exception raised for 401 Unauthorized errors."""
    pass


class ForbiddenError(APIError):
    """Exception raised for 403 Forbidden errors."""
    pass


class NotFoundError(APIError):
    """Exception raised for 404 Not Found errors."""
    pass


class VersionConflictError(APIError):
    """Exception raised for 409 errors, typically a version mismatch."""
    pass


class UnprocessableEntityError(APIError):
    """Exception raised for 422 errors, e.g. entry fields rejected by Contentful."""
    pass


class ServerError(APIError):
    """Exception raised for 5xx server errors."""
    pass


class RateLimitError(APIError):
    """Exception raised for 429 Rate Limit errors."""

    def __init__(
        self,
        message: str,
        retry_after: Optional[int] = None,
        **kwargs: Any
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message
            retry_after: Seconds until the rate limit resets
            **kwargs: Additional arguments passed to parent class
        """
        super().__init__(message, **kwargs)
        self.retry_after = retry_after
