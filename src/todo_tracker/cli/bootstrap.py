# src/todo_tracker/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- picks the storage backend and wires TaskStore + TaskSession into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import KeyValueBackend
from ..core.state import AppState
from ..session.controller import TaskSession
from ..storage.backends import JsonFileBackend, MemoryBackend, SQLiteBackend
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.storage_path.parent.mkdir(parents=True, exist_ok=True)


def create_backend(settings) -> KeyValueBackend:
    kind = str(getattr(settings, "storage_backend", "sqlite")).lower()
    if kind == "memory":
        logger.warning("Using in-memory storage; tasks will not survive a restart.")
        return MemoryBackend()
    if kind == "file":
        return JsonFileBackend(settings.storage_path)
    return SQLiteBackend(settings.storage_path)


def create_initial_state(*, settings=None, backend: KeyValueBackend | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the backend) injectable makes the app easier to test.
    If settings is None, falls back to get_settings().
    The session is returned unloaded; call state.session.load() before use.
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    store = TaskStore(
        backend if backend is not None else create_backend(settings),
        key=settings.storage_key,
        max_payload_bytes=settings.max_payload_bytes,
    )
    session = TaskSession(store, sort_descending=settings.sort_descending)
    return AppState(settings=settings, store=store, session=session)
