# src/task_service/tasks/task_models.py

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Generic, TypeVar

T = TypeVar("T")


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Any transition is allowed; clients may set any value at any time.
    """

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, raw: str) -> TaskStatus:
        """
        Parse a client-supplied status.

        Case-insensitive; also accepts the spellings older clients send
        ("in_progress", "InProgress", "done", "complete").
        Raises ValueError on anything else.
        """
        key = raw.strip().lower().replace("_", "-")
        if key in _STATUS_ALIASES:
            return _STATUS_ALIASES[key]
        raise ValueError(
            f"Invalid status '{raw}'. Must be one of: " + ", ".join(s.value for s in cls)
        )

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.PENDING
        try:
            return cls(raw)
        except ValueError:
            return cls.PENDING


_STATUS_ALIASES: dict[str, TaskStatus] = {
    "pending": TaskStatus.PENDING,
    "in-progress": TaskStatus.IN_PROGRESS,
    "inprogress": TaskStatus.IN_PROGRESS,
    "completed": TaskStatus.COMPLETED,
    "complete": TaskStatus.COMPLETED,
    "done": TaskStatus.COMPLETED,
}


def utc_now() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


@dataclass(slots=True)
class Task:
    id: str
    title: str
    description: str | None
    due_date: datetime | None
    status: TaskStatus
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class TaskQuery:
    """
    Store-level filter.

    statuses: allowed statuses (None = any)
    search:   case-insensitive substring matched against title or description
    """

    statuses: frozenset[TaskStatus] | None = None
    search: str | None = None

    def matches(self, task: Task) -> bool:
        if self.statuses is not None and task.status not in self.statuses:
            return False
        if self.search:
            needle = self.search.casefold()
            in_title = needle in task.title.casefold()
            in_desc = task.description is not None and needle in task.description.casefold()
            if not (in_title or in_desc):
                return False
        return True


def total_pages(total_count: int, page_size: int) -> int:
    return math.ceil(total_count / page_size) if total_count > 0 else 0


@dataclass(frozen=True, slots=True)
class Page(Generic[T]):
    items: list[T] = field(default_factory=list)
    page_number: int = 1
    page_size: int = 10
    total_count: int = 0

    @property
    def total_pages(self) -> int:
        return total_pages(self.total_count, self.page_size)

    @property
    def has_previous_page(self) -> bool:
        return self.page_number > 1

    @property
    def has_next_page(self) -> bool:
        return self.page_number < self.total_pages
