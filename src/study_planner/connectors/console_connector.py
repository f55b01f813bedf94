# src/study_planner/connectors/console_connector.py

from __future__ import annotations

import logging
import sys
from datetime import datetime
from typing import TextIO

from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str, stream: TextIO | None = None) -> None:
    print(f"[{_ts_local()}] {text}", file=stream or sys.stdout, flush=True)


class ConsoleNotifier:
    """
    Notification sink that prints reminders as timestamped console lines.

    Called from the timer thread while the REPL may be waiting in input(); the line
    simply lands above the prompt.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def notify(self, message: str) -> None:
        _print_ts(f"[REMINDER] {message}", self._stream)


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Study planner ready. Use /help for commands. Use /exit to quit.\n")

    lock = state.lock

    while True:
        try:
            user_input = input(">>> ").strip()
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

        if not user_input.startswith("/"):
            _print_ts("Commands start with '/'. Use /help to list them.")
            continue

        try:
            with lock:
                response = command_registry.handle(state, user_input)
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        if response is not None:
            _print_ts(response)

    logger.info("Console connector finished.")
