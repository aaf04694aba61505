# backend/gasflow/config.py
from __future__ import annotations
import os


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    return int(value) if value else default


def engine_options_for(database_uri: str) -> dict:
    """
    Row locks (SELECT ... FOR UPDATE) guard check-then-write on inventory rows.
    PostgreSQL honors them under READ COMMITTED; SQLite serializes writers instead.
    """
    if database_uri.startswith("postgresql"):
        return {"isolation_level": "READ COMMITTED"}
    return {}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/gasflow.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///gasflow.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Derived from the URI in create_app(); see engine_options_for().
    SQLALCHEMY_ENGINE_OPTIONS: dict = {}

    # Bootstrap admin created by `flask system init`
    ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", "admin@gasflow.local")
    ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "Password123!")
    ADMIN_NAME = os.environ.get("ADMIN_NAME", "Administrator")

    SESSION_ABSOLUTE_TIMEOUT_HOURS = _env_int("SESSION_ABSOLUTE_TIMEOUT_HOURS", 24)
    SESSION_IDLE_TIMEOUT_HOURS = _env_int("SESSION_IDLE_TIMEOUT_HOURS", 2)

    LOW_STOCK_THRESHOLD = _env_int("LOW_STOCK_THRESHOLD", 10)
    DEFAULT_PAGE_SIZE = _env_int("DEFAULT_PAGE_SIZE", 10)
    MAX_PAGE_SIZE = _env_int("MAX_PAGE_SIZE", 100)

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    CORS_ALLOWED_ORIGINS = [
        origin.strip()
        for origin in os.environ.get(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173",
        ).split(",")
        if origin.strip()
    ]
