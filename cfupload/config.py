"""Settings for an upload run.

Settings come from command-line flags and an optional JSON config file.
Values in the config file override the flags, so a shared settings file
always wins over whatever was typed on the command line.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigError, UsageError

DEFAULT_API_URL = "https://api.contentful.com"
DEFAULT_LANG = "en-US"

REQUIRED_SETTINGS = {
    "token": "Api token is required",
    "space_id": "A contentful space id is required",
    "content_type": "A contentful content type id is required",
}


class UploadSettings(BaseModel):
    """Validated settings for one upload run."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    token: str = Field(..., description="Content Management API token")
    space_id: str = Field(..., alias="spaceId", description="Contentful space id")
    content_type: str = Field(..., alias="contentType", description="Content type id")
    lang: str = Field(default=DEFAULT_LANG, description="Locale of the uploaded values")
    mapper: Optional[str] = Field(None, description="Mapper file or module:function")
    publish: bool = Field(default=False, description="Publish entries after upload")
    concurrency: int = Field(default=4, description="Number of concurrent uploads")
    api_url: str = Field(default=DEFAULT_API_URL, alias="apiUrl", description="API base URL")
    timeout: int = Field(default=30, description="Request timeout in seconds")
    dry_run: bool = Field(default=False, alias="dryRun", description="Validate without uploading")

    @field_validator("token", "space_id", "content_type", "lang")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject empty or whitespace-only values."""
        if not v or not v.strip():
            raise ValueError("Value cannot be empty")
        return v.strip()

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        """Validate the API base URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("API URL must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("concurrency")
    @classmethod
    def validate_concurrency(cls, v: int) -> int:
        """Validate the worker pool size."""
        if v < 1:
            raise ValueError("Concurrency must be at least 1")
        if v > 32:
            raise ValueError("Concurrency cannot exceed 32")
        return v

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        """Validate timeout value."""
        if v <= 0:
            raise ValueError("Timeout must be greater than 0")
        if v > 300:  # 5 minutes max
            raise ValueError("Timeout cannot exceed 300 seconds")
        return v

    @property
    def space_url(self) -> str:
        """Base URL of all space-scoped endpoints."""
        return f"{self.api_url}/spaces/{self.space_id}"


def load_config_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a JSON settings file.

    Args:
        path: Path to the settings file

    Returns:
        Settings as a dictionary

    Raises:
        ConfigError: If the file cannot be read or is not a JSON object
    """
    config_path = Path(path)
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {config_path}")
    except json.JSONDecodeError as e:
        raise ConfigError(f"Config file {config_path} is not valid JSON: {e}")
    except OSError as e:
        raise ConfigError(f"Failed to read config file {config_path}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a JSON object")

    return data


def _normalize_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    """Map camelCase and dashed keys onto setting names."""
    aliases = {
        name: name for name in UploadSettings.model_fields
    }
    for name, field in UploadSettings.model_fields.items():
        if field.alias:
            aliases[field.alias] = name
        aliases[name.replace("_", "-")] = name

    normalized = {}
    for key, value in data.items():
        normalized[aliases.get(key, key)] = value
    return normalized


def build_settings(
    cli_options: Dict[str, Any],
    config_path: Optional[Union[str, Path]] = None,
) -> UploadSettings:
    """Merge flags and the config file into validated settings.

    Args:
        cli_options: Option values from the command line; ``None`` means unset
        config_path: Optional JSON config file whose values take precedence

    Returns:
        Validated settings

    Raises:
        UsageError: If a required setting is missing
        ConfigError: If a setting is invalid or the config file is unusable
    """
    merged = {key: value for key, value in _normalize_keys(cli_options).items() if value is not None}

    if config_path:
        merged.update(_normalize_keys(load_config_file(config_path)))

    for name, message in REQUIRED_SETTINGS.items():
        if not merged.get(name):
            raise UsageError(message, show_usage=True)

    try:
        return UploadSettings(**merged)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigError(f"Invalid settings: {problems}")
