# backend/adega/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/adega.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///adega.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Seconds a writer waits on a locked database before giving up
    DATABASE_LOCK_TIMEOUT = float(os.environ.get("DATABASE_LOCK_TIMEOUT", "5"))

    # Reject on-account sales that would push debt above the customer's credit limit
    ENFORCE_CREDIT_LIMIT = _env_flag("ENFORCE_CREDIT_LIMIT", False)

    CHECKOUT_RETRY_ATTEMPTS = int(os.environ.get("CHECKOUT_RETRY_ATTEMPTS", "3"))
    CHECKOUT_RETRY_BACKOFF = float(os.environ.get("CHECKOUT_RETRY_BACKOFF", "0.1"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    CHECKOUT_RETRY_BACKOFF = 0.0
    ENFORCE_CREDIT_LIMIT = False
