"""Utility modules for cfupload.

This package contains the request throttle and the file and validation
error classes shared by the pipeline stages.
"""

from .throttle import RateThrottle
from .exceptions import FileLoadError, EntryValidationError, format_error_for_user

__all__ = [
    "RateThrottle",
    "FileLoadError",
    "EntryValidationError",
    "format_error_for_user",
]
