# src/task_service/tasks/memory_store.py

from __future__ import annotations

import logging
import threading
from dataclasses import replace

from .task_models import Task, TaskQuery

logger = logging.getLogger(__name__)


class InMemoryTaskStore:
    """
    Process-local task store.

    Same contract as TaskStore (SQLite), without durability. Used for demos,
    tests and `TASK_SERVICE_STORAGE=memory`.

    Thread-safety:
    - one lock around the dict; every read/write hands out copies
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tasks: dict[str, Task] = {}
        # insertion counter: tie-breaker for identical created_at values
        self._seq: dict[str, int] = {}
        self._next_seq = 1
        logger.info("InMemoryTaskStore ready")

    def close(self) -> None:
        with self._lock:
            self._tasks.clear()
            self._seq.clear()

    def count_tasks(self) -> int:
        with self._lock:
            return len(self._tasks)

    def get_task(self, task_id: str) -> Task | None:
        with self._lock:
            task = self._tasks.get(task_id)
            return replace(task) if task is not None else None

    def query_tasks(
        self,
        query: TaskQuery,
        *,
        offset: int,
        limit: int,
    ) -> tuple[list[Task], int]:
        with self._lock:
            matched = [t for t in self._tasks.values() if query.matches(t)]
            matched.sort(key=lambda t: (t.created_at, self._seq[t.id]), reverse=True)
            window = matched[offset : offset + limit]
            return [replace(t) for t in window], len(matched)

    def insert_task(self, task: Task) -> None:
        with self._lock:
            if task.id in self._tasks:
                raise ValueError(f"duplicate task id {task.id}")
            self._tasks[task.id] = replace(task)
            self._seq[task.id] = self._next_seq
            self._next_seq += 1
        logger.debug("Task inserted id=%s status=%s", task.id, task.status.value)

    def save_task(self, task: Task) -> bool:
        with self._lock:
            if task.id not in self._tasks:
                return False
            self._tasks[task.id] = replace(task)
        logger.debug("Task saved id=%s status=%s", task.id, task.status.value)
        return True

    def delete_task(self, task_id: str) -> bool:
        with self._lock:
            deleted = self._tasks.pop(task_id, None) is not None
            self._seq.pop(task_id, None)
        logger.debug("Task delete id=%s ok=%s", task_id, deleted)
        return deleted
