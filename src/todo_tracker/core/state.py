# src/todo_tracker/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..session.controller import TaskSession
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Settings object (config.Settings or a test namespace with the same fields).
    settings: object

    store: TaskStore
    session: TaskSession
