# tests/test_session.py

from __future__ import annotations

import pytest

from todo_tracker.core.errors import TaskNotFoundError, ValidationError
from todo_tracker.session.controller import TaskSession
from todo_tracker.storage.backends import MemoryBackend
from todo_tracker.tasks.task_models import FilterType, TaskStatus
from todo_tracker.tasks.task_store import TaskStore

from .fakes import BrokenBackend, make_task


def _seeded_session(store: TaskStore) -> TaskSession:
    store.save_all(
        [
            make_task("old", "Oldest", created_offset_s=0),
            make_task("mid", "Middle", status=TaskStatus.COMPLETED, created_offset_s=10),
            make_task("new", "Newest", created_offset_s=20),
        ]
    )
    session = TaskSession(store)
    session.load()
    return session


def test_load_sorts_newest_first(store: TaskStore) -> None:
    session = _seeded_session(store)
    assert [t.id for t in session.tasks] == ["new", "mid", "old"]
    assert session.is_loading is False
    assert session.has_unsaved_changes is False


def test_ascending_order_when_configured(store: TaskStore) -> None:
    store.save_all([make_task("b", created_offset_s=5), make_task("a")])
    session = TaskSession(store, sort_descending=False)
    session.load()
    assert [t.id for t in session.tasks] == ["a", "b"]


def test_filter_and_stats(store: TaskStore) -> None:
    session = _seeded_session(store)

    session.set_filter("active")
    assert session.current_filter is FilterType.ACTIVE
    assert [t.id for t in session.visible_tasks] == ["new", "old"]

    session.set_filter(FilterType.COMPLETED)
    assert [t.id for t in session.visible_tasks] == ["mid"]

    # stats are always over the whole collection
    assert session.stats.total == 3
    assert session.stats.completion_rate == 33

    with pytest.raises(ValueError):
        session.set_filter("bogus")


def test_add_task_persists(store: TaskStore, backend: MemoryBackend) -> None:
    session = TaskSession(store)
    session.load()
    task = session.add_task("  Buy   milk ")

    assert task.title == "Buy milk"
    assert session.has_unsaved_changes is False
    assert TaskStore(backend).load_all() == [task]


def test_add_invalid_task_records_error(store: TaskStore) -> None:
    session = TaskSession(store)
    session.load()
    with pytest.raises(ValidationError):
        session.add_task("   ")
    assert session.error is not None
    assert session.tasks == []
    assert store.load_all() == []

    session.clear_error()
    assert session.error is None


def test_toggle_rename_delete(store: TaskStore) -> None:
    session = _seeded_session(store)

    toggled = session.toggle_task("old")
    assert toggled.status is TaskStatus.COMPLETED
    assert store.find_by_id("old").status is TaskStatus.COMPLETED

    session.start_editing("new")
    renamed = session.rename_task("new", "Newest, renamed")
    assert renamed.title == "Newest, renamed"
    assert session.editing_task_id is None

    session.start_editing("mid")
    session.delete_task("mid")
    assert session.editing_task_id is None
    assert [t.id for t in store.load_all()] == ["old", "new"]


def test_rename_to_same_title_is_a_noop(store: TaskStore) -> None:
    session = _seeded_session(store)
    before = session.get_task("old")
    after = session.rename_task("old", " Oldest ")
    assert after is before
    assert session.has_unsaved_changes is False


def test_rename_invalid_keeps_editing(store: TaskStore) -> None:
    session = _seeded_session(store)
    session.start_editing("old")
    with pytest.raises(ValidationError):
        session.rename_task("old", "x" * 300)
    assert session.editing_task_id == "old"
    assert session.get_task("old").title == "Oldest"


def test_clear_completed(store: TaskStore) -> None:
    session = _seeded_session(store)
    assert session.clear_completed() == 1
    assert session.clear_completed() == 0
    assert {t.id for t in store.load_all()} == {"old", "new"}


def test_unknown_task_id(store: TaskStore) -> None:
    session = _seeded_session(store)
    with pytest.raises(TaskNotFoundError):
        session.toggle_task("missing")
    with pytest.raises(TaskNotFoundError):
        session.start_editing("missing")


def test_search_runs_over_visible_tasks(store: TaskStore) -> None:
    session = _seeded_session(store)
    assert [t.id for t in session.search("EST")] == ["new", "old"]
    session.set_filter("completed")
    assert session.search("est") == []


def test_write_failure_keeps_memory_state() -> None:
    backend = BrokenBackend()
    session = TaskSession(TaskStore(backend))
    session.load()
    backend.fail_writes = True

    task = session.add_task("Survives in memory")

    assert session.tasks == [task]
    assert session.has_unsaved_changes is True
    assert session.error is not None
    assert backend.data == {}

    backend.fail_writes = False
    assert session.save() is True
    assert session.has_unsaved_changes is False


def test_quota_failure_message() -> None:
    session = TaskSession(TaskStore(MemoryBackend(capacity_bytes=32)))
    session.load()
    session.add_task("This will not fit")
    assert "out of storage space" in (session.error or "")


def test_limit_failure_message() -> None:
    session = TaskSession(TaskStore(MemoryBackend(), max_payload_bytes=10))
    session.load()
    session.add_task("This will not fit")
    assert "too large" in (session.error or "")
