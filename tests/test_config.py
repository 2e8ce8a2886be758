"""Tests for configuration loading."""

import json

import pytest

from calendar_aggregator.config import (
    DEFAULT_TIMEZONE,
    Settings,
    load_settings,
    parse_calendar_ids,
    parse_credentials,
)
from calendar_aggregator.exceptions import ConfigurationError


class TestParseCalendarIds:
    """Tests for GOOGLE_CALENDAR_IDS parsing."""

    def test_comma_separated(self):
        assert parse_calendar_ids("work, family ,,holidays") == ["work", "family", "holidays"]

    def test_falls_back_to_single_id(self):
        assert parse_calendar_ids("", " primary ") == ["primary"]

    def test_list_takes_precedence_over_single_id(self):
        assert parse_calendar_ids("a,b", "c") == ["a", "b"]

    def test_duplicates_removed_in_order(self):
        assert parse_calendar_ids("a,b,a") == ["a", "b"]

    def test_nothing_configured(self):
        assert parse_calendar_ids(None, None) == []


class TestParseCredentials:
    """Tests for GOOGLE_SERVICE_ACCOUNT_JSON parsing."""

    def test_valid_json(self):
        assert parse_credentials('{"client_email": "x"}') == {"client_email": "x"}

    def test_empty_is_none(self):
        assert parse_credentials("") is None
        assert parse_credentials(None) is None

    def test_invalid_json(self):
        with pytest.raises(ConfigurationError, match="not valid JSON"):
            parse_credentials("{not json")

    def test_non_object_json(self):
        with pytest.raises(ConfigurationError):
            parse_credentials("[1, 2]")


class TestLoadSettings:
    """Tests for building Settings from an environment mapping."""

    def test_full_environment(self):
        settings = load_settings({
            "GOOGLE_SERVICE_ACCOUNT_JSON": json.dumps({"client_email": "x"}),
            "GOOGLE_CALENDAR_IDS": "a,b",
            "TIMEZONE": "Europe/Berlin",
            "PORT": "8080",
            "LOG_LEVEL": "debug",
        })
        assert settings.service_account_credentials == {"client_email": "x"}
        assert settings.calendar_ids == ["a", "b"]
        assert settings.timezone == "Europe/Berlin"
        assert settings.port == 8080
        assert settings.log_level == "DEBUG"

    def test_defaults(self):
        settings = load_settings({})
        assert settings.service_account_credentials is None
        assert settings.calendar_ids == []
        assert settings.timezone == DEFAULT_TIMEZONE
        assert settings.port == 3000

    def test_invalid_port(self):
        with pytest.raises(ConfigurationError, match="PORT"):
            load_settings({"PORT": "abc"})

    def test_invalid_log_level(self):
        with pytest.raises(ConfigurationError, match="LOG_LEVEL"):
            load_settings({"LOG_LEVEL": "chatty"})

    def test_log_level_normalized(self):
        assert load_settings({"LOG_LEVEL": " warning "}).log_level == "WARNING"


class TestSettingsValidation:
    """Tests for the pre-flight checks on Settings."""

    def test_require_credentials_missing(self):
        with pytest.raises(ConfigurationError, match="GOOGLE_SERVICE_ACCOUNT_JSON"):
            Settings().require_credentials()

    def test_require_calendar_ids_missing(self):
        with pytest.raises(ConfigurationError, match="GOOGLE_CALENDAR_IDS"):
            Settings().require_calendar_ids()

    def test_require_calendar_ids_returns_copy(self):
        settings = Settings(calendar_ids=["a"])
        ids = settings.require_calendar_ids()
        ids.append("b")
        assert settings.calendar_ids == ["a"]

    def test_unknown_timezone(self):
        with pytest.raises(ConfigurationError, match="TIMEZONE"):
            Settings(timezone="Mars/Olympus_Mons").zone()

    def test_known_timezone(self):
        assert str(Settings(timezone="Europe/Berlin").zone()) == "Europe/Berlin"
