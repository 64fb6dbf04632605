# src/task_service/core/errors.py

"""
Error taxonomy shared by the service layer, the stores and the HTTP edge.

The HTTP layer maps these to status codes; nothing below it knows about HTTP.
"""

from __future__ import annotations


class TaskServiceError(Exception):
    """Base class for all errors raised deliberately by this package."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(TaskServiceError):
    """Malformed or missing input: blank title, bad enum value, bad pagination."""


class NotFoundError(TaskServiceError):
    """No task exists with the requested id."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task with id '{task_id}' was not found")
        self.task_id = task_id


class StoreError(TaskServiceError):
    """The backing store failed. The message is for logs, never for clients."""
