# src/todo_tracker/session/autosave.py

from __future__ import annotations

"""
Debounced persistence.

Rapid successive mutations only produce one write: each request_save()
replaces the pending snapshot and restarts the delay. Once the delay has
elapsed without a newer request, the latest snapshot is written.

To stop the saver, call close() (flushes the pending snapshot first).
"""

import asyncio
import contextlib
import logging
from collections.abc import Callable, Iterable

from ..core.errors import StorageError
from ..core.ports import TaskRepo
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[StorageError], None]
SavedCallback = Callable[[tuple[Task, ...]], None]


class DebouncedSaver:
    def __init__(
        self,
        store: TaskRepo,
        *,
        delay_seconds: float = 0.5,
        on_error: ErrorCallback | None = None,
        on_saved: SavedCallback | None = None,
    ) -> None:
        self._store = store
        self._delay = max(0.0, float(delay_seconds))
        self.on_error = on_error
        self.on_saved = on_saved
        self._pending: tuple[Task, ...] | None = None
        self._timer: asyncio.Task[None] | None = None
        self._write_lock = asyncio.Lock()
        self._closed = False

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def request_save(self, tasks: Iterable[Task]) -> None:
        """Snapshot `tasks` and (re)start the debounce timer. Needs a running loop."""
        if self._closed:
            raise RuntimeError("DebouncedSaver is closed")
        self._pending = tuple(tasks)
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._delayed_write())

    async def _delayed_write(self) -> None:
        await asyncio.sleep(self._delay)
        # A write already in flight must finish even if a newer request cancels the timer.
        await asyncio.shield(self._write_pending())

    async def _write_pending(self) -> None:
        async with self._write_lock:
            snapshot = self._pending
            if snapshot is None:
                return
            self._pending = None
            try:
                await asyncio.to_thread(self._store.save_all, snapshot)
            except StorageError as e:
                logger.warning("Autosave failed: %s", e)
                if self.on_error is not None:
                    self.on_error(e)
                return
            logger.debug("Autosave wrote %d tasks", len(snapshot))
            if self.on_saved is not None:
                self.on_saved(snapshot)

    async def flush(self) -> None:
        """Write the pending snapshot now instead of waiting for the delay."""
        timer = self._timer
        if timer is not None and not timer.done():
            timer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await timer
        await self._write_pending()

    async def close(self) -> None:
        await self.flush()
        self._closed = True
