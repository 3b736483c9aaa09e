# backend/driverpunch/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/driverpunch.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///driverpunch.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # face-api.js weight manifests served to the browser; None -> <instance>/models
    FACE_MODEL_DIR = os.environ.get("FACE_MODEL_DIR")

    # Admin accounts are normally created with `flask users create-admin`
    ALLOW_ADMIN_SIGNUP = _env_flag("ALLOW_ADMIN_SIGNUP", False)

    # Max rows pushed per live snapshot
    SNAPSHOT_LIMIT = int(os.environ.get("SNAPSHOT_LIMIT", "500"))
