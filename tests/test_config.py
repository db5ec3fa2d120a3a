# tests/test_config.py
import logging

import pytest

from tarot_gate import config
from tarot_gate.config import Settings, configure_logging

ENV_VARS = [
    "DATABASE_URL", "GOOGLE_API_KEY", "GEMINI_TOKEN", "GEMINI_MODEL", "GEMINI_TIMEOUT",
    "ADMIN_KEYWORD", "SESSION_SECRET", "SESSION_MAX_AGE", "MAX_TOKEN_BATCH",
    "TOKEN_LENGTH", "CORS_ORIGINS", "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch):
    # keep a developer's .env out of the picture
    monkeypatch.setattr(config, "load_dotenv", lambda *a, **kw: False)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    s = Settings.from_env()

    assert s.database_url == config.DEFAULT_DATABASE_URL
    assert s.google_api_key is None
    assert s.admin_keyword is None
    assert s.max_token_batch == 50
    assert s.token_length == 16
    assert s.gemini_timeout == 30.0
    assert s.cors_origins == ["*"]
    assert s.session_secret


def test_reads_environment(clean_env):
    clean_env.setenv("DATABASE_URL", "postgresql://u:p@db/tarot")
    clean_env.setenv("GEMINI_TOKEN", "legacy-key")
    clean_env.setenv("ADMIN_KEYWORD", "kw")
    clean_env.setenv("MAX_TOKEN_BATCH", "10")
    clean_env.setenv("CORS_ORIGINS", "http://a.test, http://b.test")
    clean_env.setenv("LOG_LEVEL", "debug")

    s = Settings.from_env()

    assert s.database_url == "postgresql://u:p@db/tarot"
    assert s.google_api_key == "legacy-key"
    assert s.admin_keyword == "kw"
    assert s.max_token_batch == 10
    assert s.cors_origins == ["http://a.test", "http://b.test"]
    assert s.log_level == "DEBUG"


def test_google_api_key_wins_over_alias(clean_env):
    clean_env.setenv("GOOGLE_API_KEY", "primary")
    clean_env.setenv("GEMINI_TOKEN", "legacy")
    assert Settings.from_env().google_api_key == "primary"


def test_bad_integer_is_reported(clean_env):
    clean_env.setenv("MAX_TOKEN_BATCH", "lots")
    with pytest.raises(ValueError, match="MAX_TOKEN_BATCH"):
        Settings.from_env()


def test_short_tokens_are_refused():
    with pytest.raises(ValueError):
        Settings(token_length=8)


def test_configure_logging_is_idempotent():
    first = configure_logging("DEBUG")
    handlers = list(first.handlers)
    second = configure_logging("INFO")

    assert first is second
    assert second.handlers == handlers
    assert second.level == logging.INFO
