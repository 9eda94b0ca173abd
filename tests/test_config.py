"""Tests for settings loading."""

import pytest
from pydantic import ValidationError

from src.config import AppSettings, GeminiSettings, get_settings, validate_all_settings


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("GEMINI_API_KEY", "API_KEY", "GEMINI_MODEL_NAME", "LOG_LEVEL", "AUDIT_MAX_EVENTS"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


class TestGeminiSettings:
    """Tests for the chat model configuration."""

    def test_defaults(self, clean_env):
        settings = GeminiSettings(_env_file=None)
        assert settings.api_key is None
        assert settings.is_configured is False
        assert settings.model_name == "gemini-2.5-flash"

    def test_key_from_env(self, clean_env):
        clean_env.setenv("GEMINI_API_KEY", "abc123")
        settings = GeminiSettings(_env_file=None)
        assert settings.api_key == "abc123"
        assert settings.is_configured is True

    def test_short_key_alias(self, clean_env):
        clean_env.setenv("API_KEY", "abc123")
        assert GeminiSettings(_env_file=None).is_configured is True

    def test_blank_key_is_missing(self, clean_env):
        clean_env.setenv("GEMINI_API_KEY", "   ")
        assert GeminiSettings(_env_file=None).is_configured is False

    def test_prefixed_model_name(self, clean_env):
        clean_env.setenv("GEMINI_MODEL_NAME", "gemini-2.5-pro")
        assert GeminiSettings(_env_file=None).model_name == "gemini-2.5-pro"


class TestAppSettings:
    """Tests for application settings."""

    def test_defaults(self, clean_env):
        settings = AppSettings(_env_file=None)
        assert settings.currency_code == "SEK"
        assert settings.log_level == "INFO"
        assert settings.audit_max_events == 500

    def test_log_level_is_upper_cased(self, clean_env):
        clean_env.setenv("LOG_LEVEL", "debug")
        assert AppSettings(_env_file=None).log_level == "DEBUG"

    def test_rejects_unknown_log_level(self, clean_env):
        clean_env.setenv("LOG_LEVEL", "chatty")
        with pytest.raises(ValidationError):
            AppSettings(_env_file=None)

    def test_rejects_zero_audit_capacity(self, clean_env):
        clean_env.setenv("AUDIT_MAX_EVENTS", "0")
        with pytest.raises(ValidationError):
            AppSettings(_env_file=None)


class TestValidateAllSettings:
    """Tests for the start-up check."""

    def test_reports_missing_key(self, clean_env, tmp_path):
        clean_env.chdir(tmp_path)
        results = validate_all_settings()
        assert results["gemini"] is False
        assert "GEMINI_API_KEY" in results["gemini_error"]
        assert results["app"] is True

    def test_reports_configured_key(self, clean_env, tmp_path):
        clean_env.chdir(tmp_path)
        clean_env.setenv("GEMINI_API_KEY", "abc123")
        assert validate_all_settings()["gemini"] is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
