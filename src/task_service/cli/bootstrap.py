# src/task_service/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- picks the store backend and wires it into AppState,
- optionally seeds a few demo tasks into an empty store.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from ..config import get_settings
from ..core.ports import TaskRepo
from ..core.state import AppState
from ..tasks.memory_store import InMemoryTaskStore
from ..tasks.task_models import TaskStatus, utc_now
from ..tasks.task_service import TaskService
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)

DEMO_TASKS: tuple[dict, ...] = (
    {
        "title": "Setup development environment",
        "description": "Install all necessary tools and dependencies",
        "due_in_days": 2,
        "status": TaskStatus.COMPLETED,
    },
    {
        "title": "Design database schema",
        "description": "Create entity relationship diagrams and define database structure",
        "due_in_days": 5,
        "status": TaskStatus.IN_PROGRESS,
    },
    {
        "title": "Implement authentication",
        "description": "Add token-based authentication to the API",
        "due_in_days": 10,
        "status": TaskStatus.PENDING,
    },
)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    if settings.storage_backend == "sqlite":
        settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_task_store(settings) -> TaskRepo:
    if settings.storage_backend == "memory":
        return InMemoryTaskStore()
    return TaskStore(settings.tasks_db_path)


def seed_demo_tasks(service: TaskService, store: TaskRepo) -> int:
    """Insert DEMO_TASKS if the store is empty. Returns how many were added."""
    if store.count_tasks() > 0:
        return 0
    now = utc_now()
    for demo in DEMO_TASKS:
        service.create_task(
            title=demo["title"],
            description=demo["description"],
            due_date=now + timedelta(days=demo["due_in_days"]),
            status=demo["status"],
        )
    logger.info("Seeded %d demo tasks", len(DEMO_TASKS))
    return len(DEMO_TASKS)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    store = create_task_store(settings)
    service = TaskService(
        store,
        default_page_size=settings.default_page_size,
        max_page_size=settings.max_page_size,
    )

    if settings.seed_demo_data:
        seed_demo_tasks(service, store)

    logger.info(
        "State ready storage=%s put_mode=%s",
        settings.storage_backend,
        settings.put_mode,
    )
    return AppState(settings=settings, task_store=store, tasks=service)
