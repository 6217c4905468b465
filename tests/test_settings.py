"""Tests for configuration loading."""

import pytest
from pathlib import Path

from pydantic import ValidationError

from labcash.config import (
    AppSettings,
    GeminiSettings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)


class TestSettings:
    """Tests for the pydantic-settings classes."""

    def test_defaults(self):
        """Test default values."""
        app = AppSettings()
        assert app.currency_code == "PKR"
        assert app.future_date_tolerance_days == 1
        assert GeminiSettings().model_name == "gemini-2.5-flash"
        assert StorageSettings(data_dir=Path(".labcash")).audit_file_name == "audit.jsonl"

    def test_environment_overrides(self, monkeypatch):
        """Test reading values from the environment."""
        monkeypatch.setenv("GEMINI_API_KEY", "secret")
        monkeypatch.setenv("MAX_AMOUNT", "1000")

        assert GeminiSettings().is_configured
        assert AppSettings().max_amount == 1000.0

    def test_blank_key_is_not_configured(self):
        """Test that whitespace is not a key."""
        assert not GeminiSettings(api_key="   ").is_configured

    @pytest.mark.parametrize("name", ["../entries.json", "a/b.json", ".."])
    def test_rejects_escaping_file_names(self, name):
        """Test that blob names stay inside the data directory."""
        with pytest.raises(ValidationError):
            StorageSettings(entries_file_name=name)

    def test_rejects_unknown_log_level(self):
        """Test log level validation."""
        with pytest.raises(ValidationError):
            AppSettings(log_level="LOUD")

    def test_get_settings_is_cached(self):
        """Test that the root settings object is reused."""
        assert get_settings() is get_settings()

    def test_validate_all_settings(self, monkeypatch):
        """Test per-section status for the settings page."""
        status = validate_all_settings()
        assert status["gemini"] is False
        assert "GEMINI_API_KEY" in status["gemini_error"]
        assert status["storage"] is True
        assert status["app"] is True

        monkeypatch.setenv("FUTURE_DATE_TOLERANCE_DAYS", "-3")
        status = validate_all_settings()
        assert status["app"] is False
        assert "app_error" in status
