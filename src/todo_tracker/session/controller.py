# src/todo_tracker/session/controller.py

"""
Session controller.

Holds the live task collection for one user session:
- loads it from the store at startup,
- routes every mutation through the task service,
- persists the result (synchronously, or through a DebouncedSaver),
- derives the display view (sorted, filtered) and statistics.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..core.errors import (
    StorageError,
    TaskNotFoundError,
    ValidationError,
    friendly_error_message,
)
from ..core.ports import TaskRepo
from ..tasks import task_service
from ..tasks.task_models import FilterType, Task, TaskStats
from .autosave import DebouncedSaver

logger = logging.getLogger(__name__)


class TaskSession:
    def __init__(
        self,
        store: TaskRepo,
        *,
        saver: DebouncedSaver | None = None,
        sort_descending: bool = True,
    ) -> None:
        self._store = store
        self._saver = saver
        self._sort_descending = sort_descending

        self._tasks: list[Task] = []
        self.current_filter: FilterType = FilterType.ALL
        self.editing_task_id: str | None = None
        self.error: str | None = None
        self.is_loading = False
        self.has_unsaved_changes = False

        if saver is not None:
            if saver.on_saved is None:
                saver.on_saved = self.mark_saved
            if saver.on_error is None:
                saver.on_error = self.report_storage_error

    # ---- loading ----

    def load(self) -> None:
        self.is_loading = True
        try:
            # load_all never raises for read faults; it degrades to [].
            self._tasks = self._store.load_all()
            logger.info("Session loaded %d tasks", len(self._tasks))
        finally:
            self.is_loading = False

    # ---- derived views ----

    @property
    def tasks(self) -> list[Task]:
        return task_service.sort_tasks_by_creation(self._tasks, descending=self._sort_descending)

    @property
    def visible_tasks(self) -> list[Task]:
        return task_service.filter_tasks(self.tasks, self.current_filter)

    @property
    def stats(self) -> TaskStats:
        return task_service.calculate_stats(self._tasks)

    def search(self, query: str) -> list[Task]:
        return task_service.search_tasks(self.visible_tasks, query)

    def get_task(self, task_id: str) -> Task:
        task = task_service.find_task(self._tasks, task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    # ---- mutations ----

    def add_task(self, title: str) -> Task:
        self.error = None
        try:
            task = task_service.create_task(title)
        except ValidationError as e:
            self.error = str(e)
            raise
        self._commit([*self._tasks, task])
        return task

    def rename_task(self, task_id: str, title: str) -> Task:
        self.error = None
        current = self.get_task(task_id)
        try:
            updated = task_service.update_task(current, title=title)
        except ValidationError as e:
            self.error = str(e)
            raise
        self.editing_task_id = None
        if updated is not current:
            self._commit(task_service.replace_task(self._tasks, updated))
        return updated

    def toggle_task(self, task_id: str) -> Task:
        self.error = None
        updated = task_service.toggle_task_status(self.get_task(task_id))
        self._commit(task_service.replace_task(self._tasks, updated))
        return updated

    def delete_task(self, task_id: str) -> Task:
        self.error = None
        task = self.get_task(task_id)
        if self.editing_task_id == task_id:
            self.editing_task_id = None
        self._commit(task_service.remove_task(self._tasks, task_id))
        return task

    def clear_completed(self) -> int:
        self.error = None
        kept = task_service.clear_completed(self._tasks)
        removed = len(self._tasks) - len(kept)
        if removed:
            self._commit(kept)
        return removed

    # ---- UI state ----

    def set_filter(self, filter_type: FilterType | str) -> None:
        self.current_filter = task_service.get_filter(filter_type).type

    def start_editing(self, task_id: str) -> None:
        self.editing_task_id = self.get_task(task_id).id

    def cancel_editing(self) -> None:
        self.editing_task_id = None

    def clear_error(self) -> None:
        self.error = None

    # ---- persistence ----

    def _commit(self, tasks: Sequence[Task]) -> None:
        self._tasks = list(tasks)
        self.has_unsaved_changes = True
        if self._saver is not None:
            self._saver.request_save(self._tasks)
            return
        self.save()

    def save(self) -> bool:
        """
        Write the collection now. Returns False on failure.

        On failure the in-memory collection is kept and `error` is set;
        it stays diverged from storage until the next successful save.
        """
        try:
            self._store.save_all(self._tasks)
        except StorageError as e:
            logger.warning("Failed to save tasks: %s", e)
            self.error = friendly_error_message(e)
            return False
        self.has_unsaved_changes = False
        return True

    def mark_saved(self, snapshot: Sequence[Task]) -> None:
        """on_saved hook for DebouncedSaver."""
        # An older snapshot landing after a newer mutation leaves the flag set.
        if list(snapshot) == self._tasks:
            self.has_unsaved_changes = False

    def report_storage_error(self, exc: StorageError) -> None:
        """on_error hook for DebouncedSaver."""
        self.error = friendly_error_message(exc)
