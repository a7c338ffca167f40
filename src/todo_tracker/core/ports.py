# src/todo_tracker/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The store depends on a tiny key-value Protocol instead of a concrete backend,
and the session depends on TaskRepo instead of TaskStore.
This keeps storage swappable and makes testing easier.
"""

from typing import Iterable, Protocol

from ..tasks.task_models import Task


class KeyValueBackend(Protocol):
    """
    Durable string-keyed storage (local-storage style).

    Implementations raise StorageQuotaError when out of capacity.
    Any other exception is treated as a generic I/O fault by the store.
    """

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...
    def remove(self, key: str) -> None: ...


class TaskRepo(Protocol):
    # Whole-collection API
    def load_all(self) -> list[Task]: ...
    def save_all(self, tasks: Iterable[Task]) -> None: ...
    def clear(self) -> None: ...

    # Per-task API
    def find_by_id(self, task_id: str) -> Task | None: ...
    def save(self, task: Task) -> Task: ...
    def delete(self, task_id: str) -> bool: ...
