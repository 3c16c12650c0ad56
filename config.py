# config.py

"""Settings loaded from environment variables (+ optional .env file).

Every variable uses the ``TRACKWISE_`` prefix; ``DATABASE_URL`` and the
``SMTP_*`` names are also accepted unprefixed.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import time
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "TRACKWISE"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_time(name: str, default: time) -> time:
    """Parse ``HH:MM`` (24h). Bad values fall back to the default."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        hh, mm = raw.strip().split(":", 1)
        return time(int(hh), int(mm))
    except ValueError:
        return default


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    log_dir: Path

    # ---- Store ----
    database_url: str
    store_timeout_seconds: float

    # ---- Reminders ----
    reminder_time: time

    # ---- Email ----
    smtp_host: str
    smtp_port: int
    smtp_user: Optional[str]
    smtp_password: Optional[str]
    smtp_use_tls: bool
    mail_from: str

    @staticmethod
    def from_env() -> "Settings":
        smtp_user = _first_env(_k("SMTP_USER"), "SMTP_USER", "EMAIL_USER")
        return Settings(
            app_name=_first_env(_k("APP_NAME"), default="trackwise") or "trackwise",
            log_level=_first_env(_k("LOG_LEVEL"), default="INFO") or "INFO",
            log_dir=Path(_first_env(_k("LOG_DIR"), default=".local/trackwise") or ".local/trackwise").expanduser(),
            database_url=_first_env(_k("DATABASE_URL"), "DATABASE_URL", default="sqlite:///trackwise.db")
            or "sqlite:///trackwise.db",
            store_timeout_seconds=_env_float(_k("STORE_TIMEOUT"), 10.0),
            reminder_time=_env_time(_k("REMINDER_TIME"), time(9, 0)),
            smtp_host=_first_env(_k("SMTP_HOST"), "SMTP_HOST", default="smtp.gmail.com") or "smtp.gmail.com",
            smtp_port=_env_int(_k("SMTP_PORT"), _env_int("SMTP_PORT", 587)),
            smtp_user=smtp_user,
            smtp_password=_first_env(_k("SMTP_PASSWORD"), "SMTP_PASSWORD", "EMAIL_PASS"),
            smtp_use_tls=_env_bool(_k("SMTP_TLS"), True),
            mail_from=_first_env(_k("MAIL_FROM"), default=smtp_user or "noreply@localhost") or "noreply@localhost",
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
