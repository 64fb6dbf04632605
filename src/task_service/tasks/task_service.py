# src/task_service/tasks/task_service.py

"""
Task operations on top of a TaskRepo.

All validation happens here (not only at the HTTP edge) so every caller gets
the same rules. Order inside each mutating operation is always:
validate input -> load existing row (NotFoundError) -> modify copy -> save.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from dataclasses import replace
from datetime import datetime
from typing import Any

from ..core.errors import NotFoundError, ValidationError
from ..core.ports import TaskRepo
from .task_models import Page, Task, TaskQuery, TaskStatus, as_utc, utc_now

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000

UPDATABLE_FIELDS = frozenset({"title", "description", "due_date", "status"})

_INCOMPLETE = frozenset({TaskStatus.PENDING, TaskStatus.IN_PROGRESS})


def clean_title(raw: Any) -> str:
    if raw is None:
        raise ValidationError("Title is required")
    if not isinstance(raw, str):
        raise ValidationError("Title must be a string")
    title = raw.strip()
    if not title:
        raise ValidationError("Title cannot be empty or only whitespace")
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f"Title cannot exceed {TITLE_MAX_LENGTH} characters")
    return title


def clean_description(raw: Any) -> str | None:
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise ValidationError("Description must be a string")
    description = raw.strip()
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(f"Description cannot exceed {DESCRIPTION_MAX_LENGTH} characters")
    return description or None


def coerce_status(raw: Any) -> TaskStatus:
    if isinstance(raw, TaskStatus):
        return raw
    if not isinstance(raw, str):
        raise ValidationError("Status is required")
    try:
        return TaskStatus.parse(raw)
    except ValueError as e:
        raise ValidationError(str(e)) from e


def coerce_due_date(raw: Any) -> datetime | None:
    if raw is None:
        return None
    if not isinstance(raw, datetime):
        raise ValidationError("Due date must be a timestamp")
    try:
        return as_utc(raw)
    except OverflowError:
        raise ValidationError("Due date is out of range") from None


def status_filter(raw: str | None) -> frozenset[TaskStatus] | None:
    """
    Translate the list `status` parameter into the set of allowed statuses.

    Besides the status values themselves, "incomplete" selects everything
    that is not completed.
    """
    if raw is None or not raw.strip():
        return None
    if raw.strip().lower() == "incomplete":
        return _INCOMPLETE
    return frozenset({coerce_status(raw)})


class TaskService:
    def __init__(
        self,
        repo: TaskRepo,
        *,
        default_page_size: int = 10,
        max_page_size: int = 100,
    ) -> None:
        self._repo = repo
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size

    def _require(self, task_id: str) -> Task:
        task = self._repo.get_task(task_id)
        if task is None:
            raise NotFoundError(task_id)
        return task

    def _save(self, task: Task) -> Task:
        task.updated_at = max(utc_now(), task.created_at)
        if not self._repo.save_task(task):
            # Deleted between our read and write.
            raise NotFoundError(task.id)
        return task

    # ---- queries ----

    def list_tasks(
        self,
        *,
        status: str | None = None,
        search: str | None = None,
        page_number: int = 1,
        page_size: int | None = None,
    ) -> Page[Task]:
        if page_size is None:
            page_size = self.default_page_size
        if page_number < 1:
            raise ValidationError("Page number must be greater than 0")
        if page_size < 1 or page_size > self.max_page_size:
            raise ValidationError(f"Page size must be between 1 and {self.max_page_size}")

        query = TaskQuery(
            statuses=status_filter(status),
            search=search.strip() if search and search.strip() else None,
        )
        items, total = self._repo.query_tasks(
            query,
            offset=(page_number - 1) * page_size,
            limit=page_size,
        )
        return Page(items=items, page_number=page_number, page_size=page_size, total_count=total)

    def get_task(self, task_id: str) -> Task:
        return self._require(task_id)

    # ---- mutations ----

    def create_task(
        self,
        *,
        title: Any,
        description: Any = None,
        due_date: Any = None,
        status: Any = None,
    ) -> Task:
        task_title = clean_title(title)
        task_description = clean_description(description)
        task_due = coerce_due_date(due_date)
        task_status = TaskStatus.PENDING if status is None else coerce_status(status)

        now = utc_now()
        task = Task(
            id=uuid.uuid4().hex,
            title=task_title,
            description=task_description,
            due_date=task_due,
            status=task_status,
            created_at=now,
            updated_at=now,
        )
        self._repo.insert_task(task)
        logger.info("Task created id=%s status=%s", task.id, task.status.value)
        return task

    def replace_task(
        self,
        task_id: str,
        *,
        title: Any,
        description: Any = None,
        due_date: Any = None,
        status: Any = None,
    ) -> Task:
        """Full update: every mutable field is overwritten, omitted ones are reset."""
        new_title = clean_title(title)
        new_description = clean_description(description)
        new_due = coerce_due_date(due_date)
        new_status = TaskStatus.PENDING if status is None else coerce_status(status)

        existing = self._require(task_id)
        updated = replace(
            existing,
            title=new_title,
            description=new_description,
            due_date=new_due,
            status=new_status,
        )
        return self._save(updated)

    def update_task(self, task_id: str, changes: Mapping[str, Any]) -> Task:
        """
        Partial update: only keys present in `changes` are applied.

        A present description/due_date of None clears the field; a present
        title or status must be valid.
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError("Unknown field(s): " + ", ".join(sorted(unknown)))

        fields: dict[str, Any] = {}
        if "title" in changes:
            fields["title"] = clean_title(changes["title"])
        if "description" in changes:
            fields["description"] = clean_description(changes["description"])
        if "due_date" in changes:
            fields["due_date"] = coerce_due_date(changes["due_date"])
        if "status" in changes:
            fields["status"] = coerce_status(changes["status"])

        existing = self._require(task_id)
        return self._save(replace(existing, **fields))

    def set_status(self, task_id: str, status: TaskStatus) -> Task:
        existing = self._require(task_id)
        return self._save(replace(existing, status=status))

    def mark_complete(self, task_id: str) -> Task:
        return self.set_status(task_id, TaskStatus.COMPLETED)

    def mark_incomplete(self, task_id: str) -> Task:
        return self.set_status(task_id, TaskStatus.PENDING)

    def delete_task(self, task_id: str) -> None:
        self._require(task_id)
        if not self._repo.delete_task(task_id):
            raise NotFoundError(task_id)
        logger.info("Task deleted id=%s", task_id)
