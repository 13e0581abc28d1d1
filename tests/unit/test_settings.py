"""Unit tests for application settings and logging setup."""

from pathlib import Path

import pytest
import structlog
from pydantic import ValidationError

from immofind.core.exceptions import ConfigurationError, ImmoFindError, InvalidParameterError, SettingsError
from immofind.core.logging import get_logger
from immofind.core.settings import AppSettings


class TestAppSettings:
    """Tests for environment-driven configuration."""

    def test_defaults(self, app_settings):
        assert app_settings.settings_file == Path("data/settings.json")
        assert app_settings.non_apportionable_cost_pct == 1.5
        assert app_settings.default_loan_term_years == 30
        assert app_settings.api_base_url is None

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("IMMOFIND_DEFAULT_EQUITY", "25000")
        monkeypatch.setenv("IMMOFIND_API_BASE_URL", "https://api.example.org")
        settings = AppSettings(_env_file=None)
        assert settings.default_equity == 25000
        assert settings.api_base_url == "https://api.example.org"

    def test_invalid_value(self, monkeypatch):
        monkeypatch.setenv("IMMOFIND_SCHEDULE_PREVIEW_MONTHS", "0")
        with pytest.raises(ValidationError):
            AppSettings(_env_file=None)


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_hierarchy(self):
        assert issubclass(SettingsError, ImmoFindError)
        assert issubclass(InvalidParameterError, ImmoFindError)
        assert issubclass(ConfigurationError, ImmoFindError)

    def test_invalid_parameter_message(self):
        error = InvalidParameterError("rent_per_sqm", -1, "must be a positive number")
        assert error.param_name == "rent_per_sqm"
        assert str(error) == "Invalid parameter 'rent_per_sqm': -1 - must be a positive number"


def test_get_logger_binds_name():
    log = get_logger("immofind.tests")
    log.info("logger_ready")
    assert structlog.get_context(log)["logger_name"] == "immofind.tests"
