"""Contentful upload CLI package.

A command-line tool that uploads local content files with YAML front
matter as entries of a Contentful content type, validating them against
the content type first and optionally publishing them.
"""

__version__ = "0.1.0"
__description__ = "Upload front-matter content files as Contentful entries"

# Re-export main classes for convenience
from .client import ContentfulClient
from .config import UploadSettings, build_settings
from .pipeline import run_upload
from .uploader import Uploader
from .publisher import Publisher
from .utils.throttle import RateThrottle
from .exceptions import (
    CfUploadError,
    UsageError,
    ConfigError,
    APIError,
    ConnectionFailedError,
    BadRequestError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    VersionConflictError,
    UnprocessableEntityError,
    ServerError,
    RateLimitError,
)
from .utils.exceptions import FileLoadError, EntryValidationError

__all__ = [
    "__version__",
    "__description__",
    "ContentfulClient",
    "UploadSettings",
    "build_settings",
    "run_upload",
    "Uploader",
    "Publisher",
    "RateThrottle",
    "CfUploadError",
    "UsageError",
    "ConfigError",
    "APIError",
    "ConnectionFailedError",
    "BadRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "VersionConflictError",
    "UnprocessableEntityError",
    "ServerError",
    "RateLimitError",
    "FileLoadError",
    "EntryValidationError",
]
