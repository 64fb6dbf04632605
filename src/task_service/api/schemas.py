# src/task_service/api/schemas.py

"""
Wire DTOs.

camelCase on the wire (`dueDate`, `pageNumber`, ...); request bodies accept
snake_case too. Request models are deliberately permissive about content:
trimming, length limits and status spelling are enforced by TaskService so
HTTP and non-HTTP callers share one set of rules.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..tasks.task_models import Page, Task, TaskStatus

_STATUS_VALUES = [s.value for s in TaskStatus]


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TaskCreate(_WireModel):
    title: str | None = Field(default=None, examples=["Complete project documentation"])
    description: str | None = None
    due_date: datetime | None = None
    status: str | None = Field(default=None, json_schema_extra={"enum": _STATUS_VALUES})


class TaskPatch(_WireModel):
    """
    Update body.

    Used as-is for full replacement, and through changes() for partial
    updates, where only fields present in the JSON are applied.
    """

    title: str | None = None
    description: str | None = None
    due_date: datetime | None = None
    status: str | None = Field(default=None, json_schema_extra={"enum": _STATUS_VALUES})

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class TaskOut(_WireModel):
    id: str
    title: str
    description: str | None
    due_date: datetime | None
    status: TaskStatus
    created_at: datetime
    updated_at: datetime


class PaginationOut(_WireModel):
    page_number: int
    page_size: int
    total_count: int
    total_pages: int
    has_previous_page: bool
    has_next_page: bool


class TaskPageOut(_WireModel):
    items: list[TaskOut]
    pagination: PaginationOut


class ErrorOut(BaseModel):
    error: str
    details: list[dict[str, Any]] | None = None


def task_to_out(task: Task) -> TaskOut:
    return TaskOut(
        id=task.id,
        title=task.title,
        description=task.description,
        due_date=task.due_date,
        status=task.status,
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


def page_to_out(page: Page[Task]) -> TaskPageOut:
    return TaskPageOut(
        items=[task_to_out(t) for t in page.items],
        pagination=PaginationOut(
            page_number=page.page_number,
            page_size=page.page_size,
            total_count=page.total_count,
            total_pages=page.total_pages,
            has_previous_page=page.has_previous_page,
            has_next_page=page.has_next_page,
        ),
    )
