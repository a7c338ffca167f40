# src/todo_tracker/core/errors.py

"""
Error taxonomy shared by the domain service, the store and the session layer.

Propagation:
- ValidationError always reaches the immediate caller.
- StorageReadError is swallowed by TaskStore.load_all (degrades to []).
- Write-side StorageError subclasses reach the caller of save_all/clear.
"""

from __future__ import annotations


class TodoTrackerError(Exception):
    """Base class for all errors raised by todo_tracker."""


class ValidationError(TodoTrackerError):
    def __init__(self, message: str, *, length: int | None = None) -> None:
        super().__init__(message)
        self.length = length


class TaskNotFoundError(TodoTrackerError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class StorageError(TodoTrackerError):
    """Any failure talking to the persistence backend."""


class StorageLimitError(StorageError):
    """Serialized collection is larger than the configured ceiling."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"Task collection is too large to persist ({size} > {limit} bytes)")
        self.size = size
        self.limit = limit


class StorageQuotaError(StorageError):
    """Backend rejected the write because it ran out of space."""


class StorageWriteError(StorageError):
    pass


class StorageReadError(StorageError):
    pass


def friendly_error_message(exc: BaseException) -> str:
    """Short user-facing text for an error (used by the session and the console)."""
    if isinstance(exc, StorageQuotaError):
        return "You are out of storage space. Delete some tasks and try again."
    if isinstance(exc, StorageLimitError):
        return "This task list is too large to save. Clear completed tasks and try again."
    if isinstance(exc, StorageError):
        return "Could not save your tasks. Your changes are kept in memory for now."
    if isinstance(exc, TodoTrackerError):
        return str(exc)
    return "An unexpected error occurred."
