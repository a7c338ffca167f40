# src/todo_tracker/tasks/task_service.py

"""
Task domain service.

Stateless rule-set over plain Task values:
- creation with title normalization/validation and id generation,
- value-producing updates (no in-place mutation, no-op detection),
- filtering, searching, stable sorting, statistics.

The module itself is the single shared instance; nothing here holds state,
so every function is safe to call from any number of readers.
"""

from __future__ import annotations

import logging
import re
import secrets
import string
import time
from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import UTC, datetime, timedelta

from ..core.errors import ValidationError
from .task_models import FilterType, Task, TaskFilter, TaskStats, TaskStatus

logger = logging.getLogger(__name__)

TITLE_MIN_LENGTH = 1
TITLE_MAX_LENGTH = 255

_WHITESPACE_RE = re.compile(r"\s+")
_ID_ALPHABET = string.digits + string.ascii_lowercase
_ID_SUFFIX_LEN = 9

_FILTERS: dict[FilterType, TaskFilter] = {
    FilterType.ALL: TaskFilter(FilterType.ALL, lambda task: True),
    FilterType.ACTIVE: TaskFilter(FilterType.ACTIVE, lambda task: task.status is TaskStatus.PENDING),
    FilterType.COMPLETED: TaskFilter(
        FilterType.COMPLETED, lambda task: task.status is TaskStatus.COMPLETED
    ),
}


def _now() -> datetime:
    return datetime.now(UTC)


# ---- helpers ----


def normalize_title(title: str) -> str:
    """Trim and collapse internal whitespace runs to a single space."""
    return _WHITESPACE_RE.sub(" ", title.strip())


def validate_title(title: str) -> bool:
    return TITLE_MIN_LENGTH <= len(title) <= TITLE_MAX_LENGTH


def _clean_title(title: str) -> str:
    clean = normalize_title(title)
    if not validate_title(clean):
        raise ValidationError(
            f"Task title must be between {TITLE_MIN_LENGTH} and {TITLE_MAX_LENGTH} characters",
            length=len(clean),
        )
    return clean


def generate_task_id() -> str:
    """task_<epoch ms>_<random base36 suffix>."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_SUFFIX_LEN))
    return f"task_{time.time_ns() // 1_000_000}_{suffix}"


def get_filter(filter_type: FilterType | str) -> TaskFilter:
    try:
        return _FILTERS[FilterType(filter_type)]
    except ValueError:
        raise ValueError(f"Unknown filter type: {filter_type!r}") from None


# ---- single-task operations ----


def create_task(title: str) -> Task:
    clean = _clean_title(title)
    now = _now()
    task = Task(
        id=generate_task_id(),
        title=clean,
        status=TaskStatus.PENDING,
        created_at=now,
        updated_at=now,
    )
    logger.debug("Task created id=%s", task.id)
    return task


def update_task(
    task: Task,
    *,
    title: str | None = None,
    status: TaskStatus | str | None = None,
) -> Task:
    """
    Return a new Task with the patch applied.

    Only fields whose value actually differs count as a change; if nothing
    changed the input task is returned as-is (updated_at untouched).
    When something changed, updated_at is strictly greater than before.
    """
    changes: dict[str, object] = {}

    if title is not None:
        clean = _clean_title(title)
        if clean != task.title:
            changes["title"] = clean

    if status is not None:
        new_status = TaskStatus(status)
        if new_status is not task.status:
            changes["status"] = new_status

    if not changes:
        return task

    now = _now()
    if now <= task.updated_at:
        # Clock did not advance (or went backwards); keep updated_at monotonic.
        now = task.updated_at + timedelta(microseconds=1)
    return replace(task, updated_at=now, **changes)


def toggle_task_status(task: Task) -> Task:
    return update_task(task, status=task.status.toggled())


# ---- collection queries ----


def filter_tasks(tasks: Iterable[Task], filter_type: FilterType | str) -> list[Task]:
    predicate = get_filter(filter_type).predicate
    return [t for t in tasks if predicate(t)]


def search_tasks(tasks: Iterable[Task], query: str) -> list[Task]:
    needle = query.strip().casefold()
    if not needle:
        return list(tasks)
    return [t for t in tasks if needle in t.title.casefold()]


def sort_tasks_by_creation(tasks: Iterable[Task], descending: bool = False) -> list[Task]:
    # list.sort is stable even with reverse=True, so equal created_at keep input order.
    out = list(tasks)
    out.sort(key=lambda t: t.created_at, reverse=descending)
    return out


def calculate_stats(tasks: Sequence[Task]) -> TaskStats:
    total = len(tasks)
    completed = sum(1 for t in tasks if t.status is TaskStatus.COMPLETED)
    # Round half up in integer arithmetic: 1/3 -> 33, 1/8 -> 13.
    rate = (200 * completed + total) // (2 * total) if total else 0
    return TaskStats(
        total=total,
        completed=completed,
        pending=total - completed,
        completion_rate=rate,
    )


# ---- collection edits (used by the session layer) ----


def find_task(tasks: Iterable[Task], task_id: str) -> Task | None:
    return next((t for t in tasks if t.id == task_id), None)


def replace_task(tasks: Iterable[Task], task: Task) -> list[Task]:
    """Swap in `task` by id, or append it if the id is new."""
    out = list(tasks)
    for i, existing in enumerate(out):
        if existing.id == task.id:
            out[i] = task
            return out
    out.append(task)
    return out


def remove_task(tasks: Iterable[Task], task_id: str) -> list[Task]:
    return [t for t in tasks if t.id != task_id]


def clear_completed(tasks: Iterable[Task]) -> list[Task]:
    return [t for t in tasks if t.status is not TaskStatus.COMPLETED]
