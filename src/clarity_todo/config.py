# src/clarity_todo/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (server and console client).
- Nothing required at import time; every value has a local default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "CLARITY"

_PRIORITY_VALUES = {"none", "low", "medium", "high"}


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


# Local .env never overrides variables already set in the environment.
load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


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

    # ---- Server ----
    host: str
    port: int

    # ---- Storage (ignored by git) ----
    data_dir: Path
    tasks_db_path: Path
    storage_key: str

    # ---- Console client ----
    api_base_url: str
    api_timeout_seconds: float
    default_priority: str

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "clarity").strip() or "clarity"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        host = _env(_k("HOST"), "127.0.0.1").strip() or "127.0.0.1"
        port = _env_int(_k("PORT"), 8787)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/clarity"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "todos.sqlite3")
        storage_key = _env(_k("STORAGE_KEY"), "todos_list_v1").strip() or "todos_list_v1"

        api_base_url = _env(_k("API_BASE_URL"), f"http://{host}:{port}").rstrip("/")
        api_timeout_seconds = max(0.5, _env_float(_k("API_TIMEOUT_SECONDS"), 10.0))

        # Unknown values fall back to "none" rather than failing at start-up.
        default_priority = _env(_k("DEFAULT_PRIORITY"), "none").strip().lower()
        if default_priority not in _PRIORITY_VALUES:
            default_priority = "none"

        return Settings(
            app_name=app_name,
            log_level=log_level,
            host=host,
            port=port,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            storage_key=storage_key,
            api_base_url=api_base_url,
            api_timeout_seconds=api_timeout_seconds,
            default_priority=default_priority,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
