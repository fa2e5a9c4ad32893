"""Environment-driven settings.

Each value is read on demand so tests can monkeypatch the environment.
Garbage values raise ValueError instead of silently falling back.
"""
from __future__ import annotations

import os

__all__ = [
    "DEFAULT_NUMBER_RETRIES",
    "DEFAULT_CORS_ORIGINS",
    "get_log_level_from_env",
    "get_app_version_from_env",
    "get_number_retries_from_env",
    "get_cors_origins_from_env",
]

DEFAULT_NUMBER_RETRIES = 5
DEFAULT_CORS_ORIGINS = ("http://localhost:3000", "http://localhost:5000")


def get_log_level_from_env() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_app_version_from_env() -> str:
    return os.getenv("APP_VERSION", "0.1.0")


def get_number_retries_from_env() -> int:
    """Return QUEUE_NUMBER_RETRIES, the attempts allowed to claim a token number."""
    raw = os.getenv("QUEUE_NUMBER_RETRIES")
    if raw is None:
        return DEFAULT_NUMBER_RETRIES
    try:
        val = int(raw, 10)
    except ValueError as e:
        raise ValueError("QUEUE_NUMBER_RETRIES must be an integer") from e
    if val < 1:
        raise ValueError("QUEUE_NUMBER_RETRIES must be >= 1")
    return val


def get_cors_origins_from_env() -> list[str]:
    """Return CORS_ORIGINS split on commas; blanks are dropped."""
    raw = os.getenv("CORS_ORIGINS")
    if raw is None:
        return list(DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]
