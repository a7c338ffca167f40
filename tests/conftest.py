# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from todo_tracker.cli.bootstrap import create_initial_state
from todo_tracker.core.state import AppState
from todo_tracker.storage.backends import MemoryBackend
from todo_tracker.tasks.task_store import TaskStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="todo-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        storage_backend="memory",
        storage_path=tmp_path / "tasks.sqlite3",
        storage_key="todoapp_tasks_v1",
        max_payload_bytes=5 * 1024 * 1024,
        autosave_delay=0.01,
        sort_descending=True,
    )


@pytest.fixture()
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture()
def store(backend: MemoryBackend) -> TaskStore:
    return TaskStore(backend)


@pytest.fixture()
def state(settings: SimpleNamespace, backend: MemoryBackend) -> AppState:
    """AppState wired with an in-memory backend and a loaded (empty) session."""
    st = create_initial_state(settings=settings, backend=backend)
    st.session.load()
    return st
