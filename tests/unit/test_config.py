"""Unit tests for config.py module.

Tests the UploadSettings model and the merging of command-line flags
with the JSON config file.
"""

import json
import pytest

from pydantic import ValidationError

from cfupload.config import UploadSettings, build_settings, load_config_file
from cfupload.exceptions import ConfigError, UsageError


REQUIRED = {"token": "secret-token", "space_id": "space1", "content_type": "page"}


class TestUploadSettings:
    """Test cases for the UploadSettings model."""

    def test_defaults(self):
        """Test creating settings with only the required values."""
        settings = UploadSettings(**REQUIRED)

        assert settings.lang == "en-US"
        assert settings.mapper is None
        assert settings.publish is False
        assert settings.concurrency == 4
        assert settings.api_url == "https://api.contentful.com"
        assert settings.timeout == 30
        assert settings.dry_run is False

    def test_space_url(self):
        """Test the space-scoped base URL."""
        settings = UploadSettings(**REQUIRED, api_url="https://api.example.com/")

        assert settings.space_url == "https://api.example.com/spaces/space1"

    def test_camel_case_aliases(self):
        """Test that config files written with camelCase keys are accepted."""
        settings = UploadSettings.model_validate({
            "token": "t",
            "spaceId": "space1",
            "contentType": "page",
            "dryRun": True,
        })

        assert settings.space_id == "space1"
        assert settings.content_type == "page"
        assert settings.dry_run is True

    def test_blank_values_rejected(self):
        """Test that whitespace-only ids are rejected."""
        with pytest.raises(ValidationError):
            UploadSettings(**{**REQUIRED, "space_id": "   "})

    def test_concurrency_validation(self):
        """Test concurrency bounds."""
        for value in [1, 4, 32]:
            assert UploadSettings(**REQUIRED, concurrency=value).concurrency == value

        for value in [0, -1, 33]:
            with pytest.raises(ValidationError):
                UploadSettings(**REQUIRED, concurrency=value)

    def test_timeout_validation(self):
        """Test timeout validation."""
        for value in [0, -1, 301]:
            with pytest.raises(ValidationError):
                UploadSettings(**REQUIRED, timeout=value)

    def test_api_url_validation(self):
        """Test that the API URL must be http(s)."""
        with pytest.raises(ValidationError):
            UploadSettings(**REQUIRED, api_url="ftp://example.com")


class TestLoadConfigFile:
    """Test cases for load_config_file."""

    def test_load_valid_file(self, tmp_path):
        """Test reading a JSON object."""
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"token": "abc"}), encoding="utf-8")

        assert load_config_file(config_file) == {"token": "abc"}

    def test_missing_file(self, tmp_path):
        """Test that a missing config file is a configuration error."""
        with pytest.raises(ConfigError, match="Config file not found"):
            load_config_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        """Test that invalid JSON is a configuration error."""
        config_file = tmp_path / "config.json"
        config_file.write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigError, match="not valid JSON"):
            load_config_file(config_file)

    def test_non_object(self, tmp_path):
        """Test that a JSON array is rejected."""
        config_file = tmp_path / "config.json"
        config_file.write_text("[1, 2]", encoding="utf-8")

        with pytest.raises(ConfigError, match="must contain a JSON object"):
            load_config_file(config_file)


class TestBuildSettings:
    """Test cases for merging flags and config file."""

    def test_flags_only(self):
        """Test building settings from flags, ignoring unset ones."""
        settings = build_settings({**REQUIRED, "lang": None, "publish": True})

        assert settings.token == "secret-token"
        assert settings.lang == "en-US"
        assert settings.publish is True

    def test_config_file_overrides_flags(self, tmp_path):
        """Test that config file values take precedence over flags."""
        config_file = tmp_path / "config.json"
        config_file.write_text(
            json.dumps({"spaceId": "from-file", "lang": "de-DE", "publish": True}),
            encoding="utf-8",
        )

        settings = build_settings({**REQUIRED, "lang": "fr-FR", "publish": False}, config_path=config_file)

        assert settings.space_id == "from-file"
        assert settings.lang == "de-DE"
        assert settings.publish is True
        assert settings.token == "secret-token"

    def test_config_file_supplies_required_values(self, tmp_path):
        """Test that required values may come only from the config file."""
        config_file = tmp_path / "config.json"
        config_file.write_text(
            json.dumps({"token": "t", "space-id": "s", "content_type": "c"}),
            encoding="utf-8",
        )

        settings = build_settings({"token": None}, config_path=config_file)

        assert (settings.token, settings.space_id, settings.content_type) == ("t", "s", "c")

    def test_unknown_config_keys_are_ignored(self, tmp_path):
        """Test that extra keys in the config file do not fail the run."""
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({**REQUIRED, "comment": "hello"}), encoding="utf-8")

        settings = build_settings({}, config_path=config_file)

        assert not hasattr(settings, "comment")

    @pytest.mark.parametrize("missing,message", [
        ("token", "Api token is required"),
        ("space_id", "A contentful space id is required"),
        ("content_type", "A contentful content type id is required"),
    ])
    def test_missing_required_value(self, missing, message):
        """Test that missing required values are usage errors."""
        options = {key: value for key, value in REQUIRED.items() if key != missing}

        with pytest.raises(UsageError, match=message) as exc_info:
            build_settings(options)

        assert exc_info.value.show_usage is True

    def test_invalid_value_is_config_error(self):
        """Test that validation failures become configuration errors."""
        with pytest.raises(ConfigError, match="Invalid settings"):
            build_settings({**REQUIRED, "concurrency": 0})
