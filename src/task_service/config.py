# src/task_service/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time.
- Every value has a sane local default so the service starts with no config.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASK_SERVICE"

STORAGE_BACKENDS = ("sqlite", "memory")
PUT_MODES = ("partial", "replace")

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


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


def _env_choice(name: str, choices: tuple[str, ...], default: str) -> str:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    return value if value in choices else default


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
    log_to_file: bool

    # ---- HTTP server ----
    host: str
    port: int

    # ---- Storage ----
    storage_backend: str  # "sqlite" | "memory"
    data_dir: Path
    tasks_db_path: Path
    seed_demo_data: bool

    # ---- API behaviour ----
    put_mode: str  # "partial" | "replace"
    default_page_size: int
    max_page_size: int

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "task-service").strip() or "task-service"
        log_level = _env(_k("LOG_LEVEL"), "INFO").strip().upper() or "INFO"
        log_to_file = _env_bool(_k("LOG_TO_FILE"), True)

        host = _env(_k("HOST"), "127.0.0.1").strip() or "127.0.0.1"
        port = _env_int(_k("PORT"), 8000)

        storage_backend = _env_choice(_k("STORAGE"), STORAGE_BACKENDS, "sqlite")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/task-service"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")
        seed_demo_data = _env_bool(_k("SEED_DEMO_DATA"), False)

        put_mode = _env_choice(_k("PUT_MODE"), PUT_MODES, "partial")

        max_page_size = max(1, _env_int(_k("MAX_PAGE_SIZE"), 100))
        default_page_size = _env_int(_k("DEFAULT_PAGE_SIZE"), 10)
        # Default must itself be a valid page size, otherwise a bare GET /tasks fails.
        default_page_size = min(max(1, default_page_size), max_page_size)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            log_to_file=log_to_file,
            host=host,
            port=port,
            storage_backend=storage_backend,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            seed_demo_data=seed_demo_data,
            put_mode=put_mode,
            default_page_size=default_page_size,
            max_page_size=max_page_size,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
