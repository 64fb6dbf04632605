# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from task_service.api.app import create_app
from task_service.core.state import AppState
from task_service.tasks.memory_store import InMemoryTaskStore
from task_service.tasks.task_service import TaskService
from task_service.tasks.task_store import TaskStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the app factory.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="task-service-test",
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        storage_backend="sqlite",
        seed_demo_data=False,
        put_mode="partial",
        default_page_size=10,
        max_page_size=100,
    )


@pytest.fixture(params=["sqlite", "memory"])
def store(request, tmp_path: Path):
    """Both store backends; contract tests run once per backend."""
    if request.param == "sqlite":
        s = TaskStore(tmp_path / "tasks.sqlite3")
    else:
        s = InMemoryTaskStore()
    yield s
    s.close()


@pytest.fixture()
def service(store) -> TaskService:
    return TaskService(store)


@pytest.fixture()
def state(settings: SimpleNamespace) -> AppState:
    """
    AppState wired with a real SQLite store.

    NOTE: the store's correctness is part of what we want to test through HTTP.
    """
    task_store = TaskStore(settings.tasks_db_path)
    return AppState(
        settings=settings,
        task_store=task_store,
        tasks=TaskService(
            task_store,
            default_page_size=settings.default_page_size,
            max_page_size=settings.max_page_size,
        ),
    )


@pytest.fixture()
def client(state: AppState) -> TestClient:
    return TestClient(create_app(state))
