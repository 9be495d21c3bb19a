"""Utility exception classes for cfupload.

This module provides the file and validation errors raised by the loader,
validator and uploader, and the helper that formats any error for the
console.
"""

import json
from typing import Optional, Any, List

from ..exceptions import CfUploadError, UsageError, APIError, RateLimitError, USAGE_LINE


class FileLoadError(UsageError):
    """Exception raised when an input file cannot be read or parsed."""

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message
            file_path: Path to the file that caused the error
            operation: Operation that failed (read, parse)
            **kwargs: Additional arguments
        """
        super().__init__(message, **kwargs)
        self.file_path = file_path
        self.operation = operation


class EntryValidationError(UsageError):
    """Exception raised when an entry does not match the content type."""

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        missing_fields: Optional[List[str]] = None,
        invalid_fields: Optional[List[str]] = None,
        **kwargs: Any
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message
            file_path: Path of the file the entry was built from
            missing_fields: Required schema fields absent from the entry
            invalid_fields: Entry fields unknown to the schema
            **kwargs: Additional arguments
        """
        super().__init__(message, **kwargs)
        self.file_path = file_path
        self.missing_fields = missing_fields or []
        self.invalid_fields = invalid_fields or []


def format_error_for_user(error: Exception, debug: bool = False) -> str:
    """Format an error message for user display.

    Args:
        error: The exception to format
        debug: Whether to include debug information

    Returns:
        Formatted error message
    """
    if isinstance(error, EntryValidationError):
        message = f"Error: {error.message}"
        if error.file_path:
            message += "\n " + json.dumps({"file": error.file_path})
        return message

    if isinstance(error, FileLoadError):
        message = f"Error: {error.message}"
        if error.file_path:
            message += f"\n>> {error.file_path}"
        if error.operation and debug:
            message += f"\nOperation: {error.operation}"
        return message

    if isinstance(error, UsageError):
        message = f"Error: {error.message}"
        if error.show_usage:
            message += (
                "\n\nYou didn't enter all required options, please use as specified:\n"
                f">>  {USAGE_LINE}"
            )
        return message

    if isinstance(error, APIError):
        if error.response_data:
            message = "Contentful Api Error: " + json.dumps(error.response_data, default=str)
        else:
            message = f"Contentful Api Error: {error.message}"
        if error.status_code:
            message += f"\nStatus code: {error.status_code}"
        if isinstance(error, RateLimitError) and error.retry_after:
            message += f"\nRetry after: {error.retry_after} seconds"
        if debug and error.request_id:
            message += f"\nRequest id: {error.request_id}"
        return message

    if isinstance(error, CfUploadError):
        return f"Error: {error.message}"

    # Default formatting
    if debug:
        return f"Error: {str(error)}\nType: {type(error).__name__}"
    else:
        return f"Error: {str(error)}"
