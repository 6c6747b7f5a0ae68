"""Tests for environment-based settings and logging setup."""

import io
import json
import logging
from decimal import Decimal

import pytest

from overtime_tool.config import Settings, get_settings
from overtime_tool.logging_config import JSONFormatter, setup_logging
from overtime_tool.models import AmountDisplay


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)
        params = settings.calc_params()
        assert params.daily_threshold == Decimal("8")
        assert params.overtime_multiplier == Decimal("1.5")
        assert settings.feature_flags().enable_tiered_ot is False
        assert settings.allow_all_origins is False

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("OVERTIME_DAILY_THRESHOLD", "7.5")
        monkeypatch.setenv("OVERTIME_ENABLE_TIERED_OT", "true")
        monkeypatch.setenv("OVERTIME_AMOUNT_DISPLAY", "COST")
        settings = get_settings()
        assert settings.calc_params().daily_threshold == Decimal("7.5")
        flags = settings.feature_flags()
        assert flags.enable_tiered_ot is True
        assert flags.amount_display is AmountDisplay.COST

    def test_comma_separated_origins(self, monkeypatch):
        monkeypatch.setenv("OVERTIME_ALLOWED_ORIGINS", "http://a.example, http://b.example")
        settings = Settings(_env_file=None)
        assert settings.allowed_origins == ["http://a.example", "http://b.example"]

    def test_json_origins_and_wildcard(self, monkeypatch):
        monkeypatch.setenv("OVERTIME_ALLOWED_ORIGINS", '["*"]')
        assert Settings(_env_file=None).allow_all_origins is True

    def test_cached(self):
        assert get_settings() is get_settings()


class TestLogging:
    def test_json_formatter(self):
        record = logging.LogRecord("overtime", logging.INFO, __file__, 10, "hello %s", ("x",), None)
        record.worker_id = "u1"
        data = json.loads(JSONFormatter().format(record))
        assert data["message"] == "hello x"
        assert data["level"] == "INFO"
        assert data["worker_id"] == "u1"

    def test_setup_logging_writes_to_stream(self):
        stream = io.StringIO()
        setup_logging("DEBUG", json_output=True, stream=stream)
        logging.getLogger("overtime_tool.test").debug("ping")
        assert json.loads(stream.getvalue().strip())["message"] == "ping"

    def test_third_party_loggers_stay_quiet(self):
        stream = io.StringIO()
        setup_logging("DEBUG", stream=stream)
        logging.getLogger("somelib.internal").info("chatter")
        logging.getLogger("api.routes").debug("kept")
        output = stream.getvalue()
        assert "chatter" not in output
        assert "kept" in output
