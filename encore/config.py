"""Application configuration for Encore.

Every value can be overridden through the environment (or a ``.env`` file);
``APP_ENV`` picks the class from ``config_by_name``.
"""

from __future__ import annotations

import os
from datetime import timedelta
from typing import Dict, Type

from dotenv import load_dotenv
from sqlalchemy.engine.url import make_url

load_dotenv()


def _env_int(name: str, default: int) -> int:
    return int(os.environ.get(name, str(default)))


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


def _engine_options_from_uri(uri: str) -> dict:
    url = make_url(uri)
    backend = url.get_backend_name()
    if backend == "sqlite":
        # Forecast admin writes are rare; wait on the file lock rather than fail.
        return {"pool_pre_ping": True, "connect_args": {"timeout": 30}}
    if backend in {"postgresql", "postgres"}:
        return {
            "pool_pre_ping": True,
            "connect_args": {"connect_timeout": _env_int("DB_CONNECT_TIMEOUT_SECONDS", 10)},
        }
    return {"pool_pre_ping": True}


class BaseConfig:
    """Base configuration loaded for all environments."""

    SECRET_KEY = os.environ.get("SECRET_KEY", "change-me")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///instance/encore.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = _engine_options_from_uri(SQLALCHEMY_DATABASE_URI)

    # The session only carries the CSRF token for admin mutations.
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = _env_flag("SESSION_COOKIE_SECURE", "false")
    WTF_CSRF_ENABLED = _env_flag("CSRF_ENABLED", "true")

    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", SECRET_KEY)
    JWT_TOKEN_LOCATION = ["headers"]
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=_env_int("JWT_ACCESS_MINUTES", 30))

    RATELIMIT_DEFAULT = os.environ.get("RATELIMIT_DEFAULT", "200/hour")
    RATELIMIT_STORAGE_URI = os.environ.get("REDIS_URL", "memory://")
    RATELIMIT_ENABLED = _env_flag("RATELIMIT_ENABLED", "true")

    MAX_CONTENT_LENGTH = _env_int("MAX_CONTENT_LENGTH", 64 * 1024)

    # Forecast generation
    FORECAST_DEFAULT_MONTHS = _env_int("FORECAST_DEFAULT_MONTHS", 12)
    FORECAST_MAX_MONTHS = _env_int("FORECAST_MAX_MONTHS", 60)
    FORECAST_LOOKBACK_MONTHS = _env_int("FORECAST_LOOKBACK_MONTHS", 6)
    FORECAST_BASELINE_MONTHS = _env_int("FORECAST_BASELINE_MONTHS", 3)
    FORECAST_ADMIN_ROLE = os.environ.get("FORECAST_ADMIN_ROLE", "admin")


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG").upper()


class TestingConfig(BaseConfig):
    TESTING = True
    # In-memory by default; each app instance gets its own engine and schema.
    SQLALCHEMY_DATABASE_URI = os.environ.get("TEST_DATABASE_URL", "sqlite://")
    SQLALCHEMY_ENGINE_OPTIONS = _engine_options_from_uri(SQLALCHEMY_DATABASE_URI)
    WTF_CSRF_ENABLED = False
    RATELIMIT_ENABLED = False
    JWT_SECRET_KEY = "testing-secret-key-with-enough-length-for-hs256"


class ProductionConfig(BaseConfig):
    SESSION_COOKIE_SECURE = True
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "WARNING").upper()


config_by_name: Dict[str, Type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    # CI pipelines set APP_ENV=ci; map to testing defaults.
    "ci": TestingConfig,
}
