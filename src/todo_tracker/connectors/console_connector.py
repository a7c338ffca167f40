# src/todo_tracker/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.commands import format_tasks
from ..cli.commands import registry as command_registry
from ..core.errors import TodoTrackerError, friendly_error_message
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def handle_line(state: AppState, line: str) -> str:
    """
    One REPL step: slash commands go to the registry,
    anything else becomes a new task.
    """
    try:
        reply = command_registry.handle(state, line)
        if reply is not None:
            return reply
        task = state.session.add_task(line)
    except TodoTrackerError as e:
        return friendly_error_message(e)
    except Exception:
        logger.exception("Console command crashed.")
        return "Internal error while handling the command."

    text = f"Added: {task.title}"
    if state.session.error:
        text += f"\n[WARN] {state.session.error}"
    return text


def run_console_loop(state: AppState) -> None:
    logger.info("Console started.")
    app_name = str(getattr(getattr(state, "settings", None), "app_name", "todo"))

    _print_ts(f"[{app_name}] Type a task to add it. Use /help for commands. Use /exit to quit.")
    print(format_tasks(state.session.visible_tasks))

    while True:
        try:
            user_input = input(f"{app_name}> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        print(handle_line(state, user_input))

    logger.info("Console finished.")
