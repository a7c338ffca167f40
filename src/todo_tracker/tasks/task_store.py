# src/todo_tracker/tasks/task_store.py

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from ..core.errors import (
    StorageError,
    StorageLimitError,
    StorageReadError,
    StorageWriteError,
)
from ..core.ports import KeyValueBackend
from .task_models import Task, TaskStatus

logger = logging.getLogger(__name__)

STORAGE_KEY = "todoapp_tasks_v1"
DEFAULT_MAX_PAYLOAD_BYTES = 5 * 1024 * 1024

_STATUSES = {s.value for s in TaskStatus}


@dataclass(frozen=True, slots=True)
class Rejected:
    """Parse outcome for a persisted record that is not a valid task."""

    reason: str


# ---- record codec ----


def format_timestamp(dt: datetime) -> str:
    """ISO-8601 in UTC with microseconds and a trailing Z."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat(timespec="microseconds").replace("+00:00", "Z")


def parse_timestamp(raw: str) -> datetime | None:
    try:
        dt = datetime.fromisoformat(raw)
        if dt.tzinfo is None:
            return dt.replace(tzinfo=UTC)
        # Offsets near year 1 or 9999 overflow the datetime range.
        return dt.astimezone(UTC)
    except (ValueError, OverflowError):
        return None


def serialize_task(task: Task) -> dict[str, str]:
    return {
        "id": task.id,
        "title": task.title,
        "status": task.status.value,
        "createdAt": format_timestamp(task.created_at),
        "updatedAt": format_timestamp(task.updated_at),
    }


def parse_task_record(raw: Any) -> Task | Rejected:
    """Validate one untrusted persisted element; never raises."""
    if not isinstance(raw, dict):
        return Rejected(f"not an object ({type(raw).__name__})")

    for field in ("id", "title", "status", "createdAt", "updatedAt"):
        if not isinstance(raw.get(field), str):
            return Rejected(f"missing or non-string {field!r}")

    if raw["status"] not in _STATUSES:
        return Rejected(f"unknown status {raw['status']!r}")

    created_at = parse_timestamp(raw["createdAt"])
    updated_at = parse_timestamp(raw["updatedAt"])
    if created_at is None or updated_at is None:
        return Rejected("unparseable timestamp")

    return Task(
        id=raw["id"],
        title=raw["title"],
        status=TaskStatus(raw["status"]),
        created_at=created_at,
        updated_at=updated_at,
    )


class TaskStore:
    """
    Whole-collection task persistence over a key-value backend.

    The full list is stored as one JSON array under a single key.
    Each public call holds the store lock, so saves never interleave with
    other saves, loads or clears on the same store.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        *,
        key: str = STORAGE_KEY,
        max_payload_bytes: int = DEFAULT_MAX_PAYLOAD_BYTES,
    ) -> None:
        self._backend = backend
        self._key = key
        self._max_payload_bytes = int(max_payload_bytes)
        self._lock = threading.RLock()
        logger.info(
            "TaskStore ready backend=%s key=%s limit=%s",
            type(backend).__name__,
            key,
            self._max_payload_bytes,
        )

    @property
    def key(self) -> str:
        return self._key

    # ---- low-level helpers ----

    def _read_raw(self) -> str | None:
        try:
            return self._backend.get(self._key)
        except Exception as e:
            raise StorageReadError(f"Failed to read {self._key!r}") from e

    def _write_raw(self, payload: str) -> None:
        try:
            self._backend.set(self._key, payload)
        except StorageError:
            raise
        except Exception as e:
            raise StorageWriteError(f"Failed to write {self._key!r}") from e

    # ---- whole-collection API ----

    def load_all(self) -> list[Task]:
        try:
            return self._load()
        except StorageReadError:
            logger.warning("Failed to load tasks; starting empty.", exc_info=True)
            return []

    def _load(self) -> list[Task]:
        """Like load_all, but a backend read failure raises StorageReadError."""
        with self._lock:
            data = self._read_raw()

        if data is None or data == "":
            return []

        try:
            items = json.loads(data)
        except (ValueError, RecursionError):
            logger.warning("Stored tasks under %r are not valid JSON; ignoring.", self._key)
            return []

        if not isinstance(items, list):
            logger.warning(
                "Stored tasks under %r are not a list (%s); ignoring.",
                self._key,
                type(items).__name__,
            )
            return []

        tasks: list[Task] = []
        seen: set[str] = set()
        for index, raw in enumerate(items):
            parsed = parse_task_record(raw)
            if isinstance(parsed, Rejected):
                logger.debug("Dropping stored task #%d: %s", index, parsed.reason)
                continue
            if parsed.id in seen:
                logger.debug("Dropping stored task #%d: duplicate id %s", index, parsed.id)
                continue
            seen.add(parsed.id)
            tasks.append(parsed)

        if len(tasks) != len(items):
            logger.info("Loaded %d of %d stored tasks.", len(tasks), len(items))
        return tasks

    def save_all(self, tasks: Iterable[Task]) -> None:
        records = [serialize_task(t) for t in tasks]
        payload = json.dumps(records, ensure_ascii=False, separators=(",", ":"))
        size = len(payload.encode("utf-8"))
        if size > self._max_payload_bytes:
            raise StorageLimitError(size, self._max_payload_bytes)

        with self._lock:
            self._write_raw(payload)
        logger.debug("Saved %d tasks (%d bytes) under %r", len(records), size, self._key)

    def clear(self) -> None:
        with self._lock:
            try:
                self._backend.remove(self._key)
            except Exception as e:
                raise StorageWriteError(f"Failed to clear {self._key!r}") from e
        logger.info("Cleared stored tasks under %r", self._key)

    # ---- per-task API ----

    def find_by_id(self, task_id: str) -> Task | None:
        return next((t for t in self.load_all() if t.id == task_id), None)

    def save(self, task: Task) -> Task:
        """
        Upsert one task (read-modify-write under the store lock).

        A failed read raises StorageReadError instead of saving over the
        stored list; delete() behaves the same way.
        """
        with self._lock:
            tasks = self._load()
            for i, existing in enumerate(tasks):
                if existing.id == task.id:
                    tasks[i] = task
                    break
            else:
                tasks.append(task)
            self.save_all(tasks)
        return task

    def delete(self, task_id: str) -> bool:
        with self._lock:
            tasks = self._load()
            kept = [t for t in tasks if t.id != task_id]
            if len(kept) == len(tasks):
                return False
            self.save_all(kept)
        return True
