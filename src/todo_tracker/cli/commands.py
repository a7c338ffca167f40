# src/todo_tracker/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..core.errors import TaskNotFoundError, TodoTrackerError, friendly_error_message
from ..core.state import AppState
from ..tasks.task_models import FilterType, Task

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /list, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            return handler(state, args)
        except TodoTrackerError as e:
            logger.debug("Command /%s failed: %s", name, e)
            return friendly_error_message(e)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        lines.append("Any line that does not start with / is added as a new task.")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- formatting / lookup helpers ----


def format_task(index: int, task: Task) -> str:
    mark = "x" if task.is_completed else " "
    return f"{index:>3}. [{mark}] {task.title}  ({task.id})"


def format_tasks(tasks: list[Task], empty: str = "No tasks.") -> str:
    if not tasks:
        return empty
    return "\n".join(format_task(i, t) for i, t in enumerate(tasks, start=1))


def resolve_task(state: AppState, ref: str) -> Task:
    """
    Resolve a user reference to a task:
    - 1-based position in the currently visible list,
    - or a full task id / unique id prefix.
    """
    visible = state.session.visible_tasks
    if ref.isdigit():
        pos = int(ref)
        if 1 <= pos <= len(visible):
            return visible[pos - 1]
        raise TaskNotFoundError(ref)

    matches = [t for t in state.session.tasks if t.id == ref or t.id.startswith(ref)]
    exact = [t for t in matches if t.id == ref]
    if exact:
        return exact[0]
    if len(matches) == 1:
        return matches[0]
    raise TaskNotFoundError(ref)


# ---- handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /add <title>"
    task = state.session.add_task(" ".join(args))
    return _with_save_warning(state, f"Added: {task.title}")


def cmd_list(state: AppState, args: list[str]) -> str:
    if args:
        msg = _apply_filter(state, args[0])
        if msg:
            return msg
    session = state.session
    header = f"Tasks ({session.current_filter.value}):"
    return header + "\n" + format_tasks(session.visible_tasks)


def cmd_filter(state: AppState, args: list[str]) -> str:
    if not args:
        return f"Current filter: {state.session.current_filter.value}. Use /filter all|active|completed."
    msg = _apply_filter(state, args[0])
    return msg or f"Filter set to {state.session.current_filter.value}."


def cmd_done(state: AppState, args: list[str]) -> str:
    """
    /done <n|id>   -> toggle completed/pending
    """
    if not args:
        return "Usage: /done <n|id>"
    task = state.session.toggle_task(resolve_task(state, args[0]).id)
    verb = "Completed" if task.is_completed else "Reopened"
    return _with_save_warning(state, f"{verb}: {task.title}")


def cmd_edit(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /edit <n|id> <new title>"
    target = resolve_task(state, args[0])
    task = state.session.rename_task(target.id, " ".join(args[1:]))
    return _with_save_warning(state, f"Renamed: {task.title}")


def cmd_rm(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /rm <n|id>"
    task = state.session.delete_task(resolve_task(state, args[0]).id)
    return _with_save_warning(state, f"Deleted: {task.title}")


def cmd_search(state: AppState, args: list[str]) -> str:
    found = state.session.search(" ".join(args))
    return format_tasks(found, empty="No matching tasks.")


def cmd_stats(state: AppState, args: list[str]) -> str:
    s = state.session.stats
    return (
        "Stats:\n"
        f"  Total: {s.total}\n"
        f"  Completed: {s.completed}\n"
        f"  Pending: {s.pending}\n"
        f"  Completion: {s.completion_rate}%"
    )


def cmd_clear_completed(state: AppState, args: list[str]) -> str:
    removed = state.session.clear_completed()
    if not removed:
        return "No completed tasks to clear."
    return _with_save_warning(state, f"Cleared {removed} completed task(s).")


def _apply_filter(state: AppState, raw: str) -> str | None:
    try:
        state.session.set_filter(raw.lower())
    except ValueError:
        options = ", ".join(f.value for f in FilterType)
        return f"Unknown filter: {raw}. Use one of: {options}."
    return None


def _with_save_warning(state: AppState, text: str) -> str:
    err = state.session.error
    return f"{text}\n[WARN] {err}" if err else text


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("add", cmd_add, help_text="Add a task: /add <title>.")
registry.register(
    "list", cmd_list, help_text="List tasks: /list [all|active|completed].", aliases=["ls"]
)
registry.register("filter", cmd_filter, help_text="Set the list filter: /filter all|active|completed.")
registry.register("done", cmd_done, help_text="Toggle a task completed/pending: /done <n|id>.")
registry.register("edit", cmd_edit, help_text="Rename a task: /edit <n|id> <title>.")
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <n|id>.", aliases=["del"])
registry.register("search", cmd_search, help_text="Search visible tasks: /search <text>.")
registry.register("stats", cmd_stats, help_text="Show totals and completion rate.")
registry.register(
    "clear-completed", cmd_clear_completed, help_text="Delete all completed tasks."
)
