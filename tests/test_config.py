"""Tests for environment-driven settings."""

from claimwatch.config import Settings


def test_defaults_without_api_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setattr("claimwatch.config.load_dotenv", lambda: None)

    settings = Settings.from_env()

    assert not settings.ai_enabled
    assert settings.embedding_dimension == 1536
    assert settings.max_concurrent_ai_calls == 3
    assert settings.similarity_threshold == 0.8
    assert settings.cors_origins == ["*"]


def test_environment_overrides(monkeypatch):
    monkeypatch.setattr("claimwatch.config.load_dotenv", lambda: None)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("CLAIMWATCH_MAX_CONCURRENT_AI_CALLS", "5")
    monkeypatch.setenv("CLAIMWATCH_FEATURE_TIMEOUT", "2.5")
    monkeypatch.setenv("CLAIMWATCH_AUTO_ANALYZE", "false")
    monkeypatch.setenv("CLAIMWATCH_CORS_ORIGINS", "http://a.test, http://b.test")
    monkeypatch.setenv("CLAIMWATCH_LOG_LEVEL", "debug")

    settings = Settings.from_env()

    assert settings.ai_enabled
    assert settings.max_concurrent_ai_calls == 5
    assert settings.feature_timeout == 2.5
    assert settings.auto_analyze is False
    assert settings.cors_origins == ["http://a.test", "http://b.test"]
    assert settings.log_level == "DEBUG"
