# backend/pharmapos/config.py
from __future__ import annotations

import os
from datetime import timedelta


# Development-only seed password; bootstrap warns when it is still in use
DEFAULT_SUPERADMIN_PASSWORD = "password123"


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # Access tokens are signed with their own key when one is provided
    JWT_SECRET_KEY = os.environ.get(
        "JWT_SECRET_KEY",
        "dev-jwt-secret-key-change-me-before-deploying",
    )
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=24)

    # SQLite DB stored in backend/instance/pharmapos.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location (mysql+pymysql://..., postgresql://...)
        "sqlite:///pharmapos.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS: dict = {"pool_pre_ping": True}

    # Only applied to server databases; SQLite manages its own pool
    DB_POOL_SIZE = int(os.environ.get("DB_POOL_SIZE", "10"))

    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    BOOTSTRAP_ON_STARTUP = _env_flag("BOOTSTRAP_ON_STARTUP", "true")
    SUPERADMIN_USERNAME = os.environ.get("SUPERADMIN_USERNAME", "superadmin")
    SUPERADMIN_PASSWORD = os.environ.get("SUPERADMIN_PASSWORD", DEFAULT_SUPERADMIN_PASSWORD)

    # Sales do not write inventory history unless this is switched on
    RECORD_SALE_HISTORY = _env_flag("RECORD_SALE_HISTORY")

    SUBSTITUTION_API_URL = os.environ.get("SUBSTITUTION_API_URL", "")
    SUBSTITUTION_API_KEY = os.environ.get("SUBSTITUTION_API_KEY", "")
    SUBSTITUTION_TIMEOUT = float(os.environ.get("SUBSTITUTION_TIMEOUT", "30"))

    CORS_ORIGINS = tuple(
        origin.strip()
        for origin in os.environ.get(
            "CORS_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000",
        ).split(",")
        if origin.strip()
    )
