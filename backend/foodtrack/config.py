# backend/foodtrack/config.py
from __future__ import annotations
import os


class ConfigError(RuntimeError):
    """Raised at startup when required configuration is missing."""


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int | None) -> int | None:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer")


class Config:
    # Symmetric token-signing secret. No fallback: create_app refuses to start without it.
    JWT_SECRET = os.environ.get("JWT_SECRET")
    JWT_ALGORITHM = "HS256"

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///foodtrack.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    HOST = os.environ.get("HOST", "0.0.0.0")
    PORT = _env_int("PORT", 8080)

    # Bounded pool shared by all in-flight requests (ignored for SQLite)
    DB_POOL_SIZE = _env_int("DB_POOL_SIZE", 5)
    # Server-side statement deadline in ms (PostgreSQL only); None = no deadline
    DB_STATEMENT_TIMEOUT_MS = _env_int("DB_STATEMENT_TIMEOUT_MS", None)

    # Re-check the token signature in addition to the access_tokens row lookup
    VERIFY_TOKEN_SIGNATURE = _env_flag("VERIFY_TOKEN_SIGNATURE", False)

    # Revoked/expired access tokens older than this are purged by `flask tokens cleanup`
    TOKEN_RETENTION_DAYS = _env_int("TOKEN_RETENTION_DAYS", 30)

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_REDACT_PII = _env_flag("LOG_REDACT_PII", True)

    CORS_ORIGINS = [
        origin.strip()
        for origin in os.environ.get("CORS_ORIGINS", "*").split(",")
        if origin.strip()
    ]


def build_engine_options(config) -> dict:
    """
    SQLAlchemy engine options derived from the loaded config.

    SQLite keeps the driver defaults (in-memory test databases need a single
    static connection). Server databases get a bounded pool and, optionally,
    a statement timeout.
    """
    uri = config.get("SQLALCHEMY_DATABASE_URI") or ""
    if uri.startswith("sqlite"):
        return {}

    options = {
        "pool_size": config.get("DB_POOL_SIZE") or 5,
        "max_overflow": 0,
        "pool_pre_ping": True,
    }
    timeout_ms = config.get("DB_STATEMENT_TIMEOUT_MS")
    if timeout_ms and uri.startswith("postgresql"):
        options["connect_args"] = {"options": f"-c statement_timeout={int(timeout_ms)}"}
    return options
