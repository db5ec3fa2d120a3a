"""
config.py — Runtime settings and logging setup.

Settings are read once from the environment (and a local .env file) and then
passed explicitly to every service; nothing below reads os.environ at call time.
"""

from __future__ import annotations

import logging
import os
import secrets
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

DEFAULT_DATABASE_URL = "sqlite:///./tarot_gate.db"
DEFAULT_MODEL = "gemini-1.5-flash"
MIN_TOKEN_LENGTH = 12


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    google_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_MODEL
    gemini_timeout: float = 30.0
    admin_keyword: Optional[str] = None
    session_secret: str = field(default_factory=lambda: secrets.token_urlsafe(32))
    session_max_age: int = 86400
    max_token_batch: int = 50
    token_length: int = 16
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    def __post_init__(self):
        if self.token_length < MIN_TOKEN_LENGTH:
            raise ValueError(f"token_length must be >= {MIN_TOKEN_LENGTH}, got {self.token_length}")
        if self.max_token_batch < 1:
            raise ValueError("max_token_batch must be a positive integer")

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from environment variables (a .env file is loaded first).

        GOOGLE_API_KEY is preferred; GEMINI_TOKEN is accepted as an alias.
        """
        load_dotenv()

        session_secret = os.getenv("SESSION_SECRET")
        if not session_secret:
            logger.warning("SESSION_SECRET is not set; admin sessions will not survive a restart")
            session_secret = secrets.token_urlsafe(32)

        admin_keyword = os.getenv("ADMIN_KEYWORD") or None
        if admin_keyword is None:
            logger.warning("ADMIN_KEYWORD is not set; admin login is disabled")

        origins = os.getenv("CORS_ORIGINS", "*")

        return cls(
            database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
            google_api_key=os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_TOKEN") or None,
            gemini_model=os.getenv("GEMINI_MODEL", DEFAULT_MODEL),
            gemini_timeout=_env_float("GEMINI_TIMEOUT", 30.0),
            admin_keyword=admin_keyword,
            session_secret=session_secret,
            session_max_age=_env_int("SESSION_MAX_AGE", 86400),
            max_token_batch=_env_int("MAX_TOKEN_BATCH", 50),
            token_length=_env_int("TOKEN_LENGTH", 16),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a single console handler to the package logger (safe to call repeatedly)."""
    pkg_logger = logging.getLogger("tarot_gate")
    pkg_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not pkg_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        pkg_logger.addHandler(handler)

    return pkg_logger
