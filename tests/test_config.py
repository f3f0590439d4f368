"""Tests for runtime settings."""

import logging

from talent_engine.config import Settings, configure_logging, settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("GEMINI_API_KEY", "GEMINI_MODEL", "TARGET_CONFIDENCE", "BYOK_DEFAULT_BUDGET_USD", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        s = Settings(_env_file=None)
        assert s.gemini_api_key is None
        assert s.gemini_model == "gemini-2.5-flash"
        assert s.target_confidence == 60
        assert s.byok_default_budget_usd == 25.0
        assert s.log_level == "INFO"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")
        monkeypatch.setenv("TARGET_CONFIDENCE", "70")
        monkeypatch.setenv("GEMINI_TIMEOUT_SECONDS", "5.5")
        s = Settings(_env_file=None)
        assert s.gemini_api_key == "env-key"
        assert s.target_confidence == 70
        assert s.gemini_timeout_seconds == 5.5


class TestLogging:
    def test_configure_logging(self, monkeypatch):
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
        configure_logging("debug")
        assert calls[0]["level"] == "DEBUG"

    def test_configure_logging_uses_settings_level(self, monkeypatch):
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
        monkeypatch.setattr(settings, "log_level", "warning")
        configure_logging()
        assert calls[0]["level"] == "WARNING"
