# src/overdue_triage/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time (the API token is optional).
- Components receive settings explicitly; get_settings() is only used by the CLI.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

ENV_PREFIX = "TRIAGE"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Backend API ----
    api_base_url: str
    api_token: Optional[str]
    request_timeout_seconds: float
    connect_timeout_seconds: float

    # ---- Row actions ----
    action_timeout_seconds: float

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "overdue-triage").strip() or "overdue-triage"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/triage"))

        api_base_url = _env(_k("API_BASE_URL"), "http://localhost:8000/api").strip().rstrip("/")
        api_token = _env(_k("API_TOKEN"), "").strip() or None

        request_timeout = _env_float(_k("REQUEST_TIMEOUT_SECONDS"), 10.0)
        connect_timeout = _env_float(_k("CONNECT_TIMEOUT_SECONDS"), 5.0)
        # 0 (or negative) disables the per-action deadline.
        action_timeout = _env_float(_k("ACTION_TIMEOUT_SECONDS"), 60.0)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            api_base_url=api_base_url,
            api_token=api_token,
            request_timeout_seconds=max(0.1, request_timeout),
            connect_timeout_seconds=max(0.1, connect_timeout),
            action_timeout_seconds=action_timeout,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Process settings, built once on first use (loads .env on that first call)."""
    global _SETTINGS
    if _SETTINGS is None:
        _load_dotenv_if_available()
        _SETTINGS = Settings.from_env()
    return _SETTINGS
