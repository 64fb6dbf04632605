# tests/test_bootstrap.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from task_service.api.app import create_app
from task_service.cli.bootstrap import DEMO_TASKS, create_initial_state, seed_demo_tasks
from task_service.config import Settings
from task_service.logging_setup import setup_logging
from task_service.tasks.memory_store import InMemoryTaskStore
from task_service.tasks.task_service import TaskService
from task_service.tasks.task_store import TaskStore

_ENV_NAMES = [
    "APP_NAME",
    "LOG_LEVEL",
    "LOG_TO_FILE",
    "HOST",
    "PORT",
    "STORAGE",
    "DATA_DIR",
    "TASKS_DB_PATH",
    "SEED_DEMO_DATA",
    "PUT_MODE",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
]


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in _ENV_NAMES:
        monkeypatch.delenv(f"TASK_SERVICE_{name}", raising=False)
    return monkeypatch


def test_settings_defaults(clean_env) -> None:
    s = Settings.from_env()

    assert s.app_name == "task-service"
    assert s.storage_backend == "sqlite"
    assert s.put_mode == "partial"
    assert s.default_page_size == 10
    assert s.max_page_size == 100
    assert s.port == 8000
    assert s.tasks_db_path == Path(".local/task-service") / "tasks.sqlite3"
    assert s.seed_demo_data is False


def test_settings_from_env(clean_env, tmp_path: Path) -> None:
    clean_env.setenv("TASK_SERVICE_STORAGE", "MEMORY")
    clean_env.setenv("TASK_SERVICE_PUT_MODE", "replace")
    clean_env.setenv("TASK_SERVICE_PORT", "9001")
    clean_env.setenv("TASK_SERVICE_DATA_DIR", str(tmp_path))
    clean_env.setenv("TASK_SERVICE_SEED_DEMO_DATA", "yes")
    clean_env.setenv("TASK_SERVICE_LOG_LEVEL", "debug")

    s = Settings.from_env()

    assert s.storage_backend == "memory"
    assert s.put_mode == "replace"
    assert s.port == 9001
    assert s.data_dir == tmp_path
    assert s.tasks_db_path == tmp_path / "tasks.sqlite3"
    assert s.seed_demo_data is True
    assert s.log_level == "DEBUG"


def test_settings_bad_values_fall_back(clean_env) -> None:
    clean_env.setenv("TASK_SERVICE_STORAGE", "postgres")
    clean_env.setenv("TASK_SERVICE_PUT_MODE", "merge")
    clean_env.setenv("TASK_SERVICE_PORT", "eighty")
    clean_env.setenv("TASK_SERVICE_MAX_PAGE_SIZE", "50")
    clean_env.setenv("TASK_SERVICE_DEFAULT_PAGE_SIZE", "500")

    s = Settings.from_env()

    assert s.storage_backend == "sqlite"
    assert s.put_mode == "partial"
    assert s.port == 8000
    assert s.max_page_size == 50
    assert s.default_page_size == 50


def test_create_initial_state_sqlite_with_seed(clean_env, tmp_path: Path) -> None:
    clean_env.setenv("TASK_SERVICE_DATA_DIR", str(tmp_path / "data"))
    clean_env.setenv("TASK_SERVICE_SEED_DEMO_DATA", "1")
    settings = Settings.from_env()

    state = create_initial_state(settings=settings)

    assert isinstance(state.task_store, TaskStore)
    assert (tmp_path / "data" / "tasks.sqlite3").exists()
    assert state.task_store.count_tasks() == len(DEMO_TASKS)

    # Seeding only fills an empty store.
    again = create_initial_state(settings=settings)
    assert again.task_store.count_tasks() == len(DEMO_TASKS)


def test_create_initial_state_memory_serves_requests(clean_env, tmp_path: Path) -> None:
    clean_env.setenv("TASK_SERVICE_STORAGE", "memory")
    clean_env.setenv("TASK_SERVICE_DATA_DIR", str(tmp_path))
    clean_env.setenv("TASK_SERVICE_SEED_DEMO_DATA", "true")
    state = create_initial_state(settings=Settings.from_env())

    assert isinstance(state.task_store, InMemoryTaskStore)

    client = TestClient(create_app(state))
    resp = client.get("/tasks", params={"status": "completed"})
    assert resp.status_code == 200
    assert [t["title"] for t in resp.json()["items"]] == ["Setup development environment"]


def test_seed_demo_tasks_statuses() -> None:
    store = InMemoryTaskStore()
    added = seed_demo_tasks(TaskService(store), store)

    assert added == 3
    statuses = sorted(t.status.value for t in TaskService(store).list_tasks().items)
    assert statuses == ["completed", "in-progress", "pending"]


def test_setup_logging_writes_file(tmp_path: Path) -> None:
    root = logging.getLogger()
    saved = list(root.handlers)
    saved_level = root.level
    try:
        setup_logging(log_dir=tmp_path, console_level=logging.WARNING)
        logging.getLogger("task_service.test").info("hello from test")
        for h in root.handlers:
            h.flush()

        text = (tmp_path / "task-service.log").read_text("utf-8")
        assert "task_service.test: hello from test" in text
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved:
            root.addHandler(h)
        root.setLevel(saved_level)
        logging.captureWarnings(False)
