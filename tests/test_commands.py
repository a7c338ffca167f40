# tests/test_commands.py

from __future__ import annotations

from todo_tracker.cli.commands import CommandRegistry, registry
from todo_tracker.connectors.console_connector import handle_line
from todo_tracker.core.errors import TaskNotFoundError
from todo_tracker.core.state import AppState
from todo_tracker.tasks.task_models import TaskStatus


def test_command_registry_routes_and_aliases(state: AppState) -> None:
    reg = CommandRegistry()
    seen: list[list[str]] = []

    def h(state, args):
        seen.append(args)
        return "ok"

    reg.register("a", h, "a", aliases=["alpha"])

    assert reg.handle(state, "/a x y") == "ok"
    assert reg.handle(state, "/ALPHA") == "ok"
    assert seen == [["x", "y"], []]


def test_command_registry_unknown_and_non_command(state: AppState) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_command_registry_turns_domain_errors_into_messages(state: AppState) -> None:
    reg = CommandRegistry()

    def boom(state, args):
        raise TaskNotFoundError("t1")

    reg.register("boom", boom, "boom")
    assert reg.handle(state, "/boom") == "Task not found: t1"


def test_plain_line_adds_task(state: AppState) -> None:
    reply = handle_line(state, "  Buy   milk ")
    assert reply == "Added: Buy milk"
    assert [t.title for t in state.store.load_all()] == ["Buy milk"]


def test_invalid_title_is_reported(state: AppState) -> None:
    reply = handle_line(state, "/add " + "a" * 256)
    assert "between 1 and 255" in reply
    assert state.store.load_all() == []


def test_done_edit_rm_by_position(state: AppState) -> None:
    handle_line(state, "Write report")

    assert handle_line(state, "/done 1") == "Completed: Write report"
    assert state.session.tasks[0].status is TaskStatus.COMPLETED

    assert handle_line(state, "/done 1") == "Reopened: Write report"
    assert handle_line(state, "/edit 1 Write the report") == "Renamed: Write the report"
    assert handle_line(state, "/rm 1") == "Deleted: Write the report"
    assert state.store.load_all() == []


def test_task_reference_by_id_prefix(state: AppState) -> None:
    task = state.session.add_task("By id")
    reply = handle_line(state, f"/done {task.id}")
    assert reply == "Completed: By id"
    assert "Task not found" in handle_line(state, "/done 99")
    assert "Task not found" in handle_line(state, "/rm nope")


def test_list_filter_stats_search(state: AppState) -> None:
    learn = state.session.add_task("Learn React")
    handle_line(state, "Buy milk")
    handle_line(state, f"/done {learn.id}")

    listing = handle_line(state, "/list")
    assert "Learn React" in listing and "Buy milk" in listing

    active = handle_line(state, "/list active")
    assert "Learn React" not in active
    assert "Buy milk" in active

    assert "Unknown filter" in handle_line(state, "/filter later")
    assert handle_line(state, "/filter all") == "Filter set to all."

    stats = handle_line(state, "/stats")
    assert "Total: 2" in stats
    assert "Completion: 50%" in stats

    assert "Learn React" in handle_line(state, "/search REACT")
    assert handle_line(state, "/search python") == "No matching tasks."


def test_clear_completed_command(state: AppState) -> None:
    assert handle_line(state, "/clear-completed") == "No completed tasks to clear."
    task = state.session.add_task("Done soon")
    state.session.toggle_task(task.id)
    assert handle_line(state, "/clear-completed") == "Cleared 1 completed task(s)."


def test_help_lists_commands(state: AppState) -> None:
    text = registry.handle(state, "/help") or ""
    for name in ("/add", "/list", "/done", "/edit", "/rm", "/search", "/stats", "/clear-completed"):
        assert name in text
