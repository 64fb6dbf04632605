# src/task_service/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The service depends on a Protocol instead of a concrete store.
This keeps the storage backend swappable and makes testing easier.
"""

from typing import Protocol

from ..tasks.task_models import Task, TaskQuery


class TaskRepo(Protocol):
    """
    Persistence port for tasks.

    Implementations must hand out copies: mutating a returned Task must not
    change stored state until it is passed back through save_task().
    """

    def get_task(self, task_id: str) -> Task | None: ...

    def query_tasks(
            self,
            query: TaskQuery,
            *,
            offset: int,
            limit: int,
    ) -> tuple[list[Task], int]:
        """Return (page of tasks newest first, total matching count)."""
        ...

    def insert_task(self, task: Task) -> None: ...

    def save_task(self, task: Task) -> bool:
        """Overwrite the stored row with this id. Returns False if it no longer exists."""
        ...

    def delete_task(self, task_id: str) -> bool: ...

    def count_tasks(self) -> int: ...

    def close(self) -> None: ...
