# src/todo_tracker/tasks/task_models.py

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class TaskStatus(StrEnum):
    PENDING = "pending"
    COMPLETED = "completed"

    def toggled(self) -> TaskStatus:
        return TaskStatus.COMPLETED if self is TaskStatus.PENDING else TaskStatus.PENDING


class FilterType(StrEnum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class Task:
    """
    A single to-do item.

    Values are immutable: task_service.update_task returns a new Task and the
    old one stays valid. Timestamps are timezone-aware (UTC).
    """

    id: str
    title: str
    status: TaskStatus
    created_at: datetime
    updated_at: datetime

    @property
    def is_completed(self) -> bool:
        return self.status is TaskStatus.COMPLETED


@dataclass(frozen=True, slots=True)
class TaskStats:
    total: int
    completed: int
    pending: int
    completion_rate: int  # integer percent, 0 when total == 0


@dataclass(frozen=True, slots=True)
class TaskFilter:
    type: FilterType
    predicate: Callable[[Task], bool]
