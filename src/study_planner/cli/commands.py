# src/study_planner/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..core.state import AppState
from ..tasks.task_api import add_task_from_text
from ..tasks.task_models import Task
from ..tasks.task_views import TimelineMarker, build_listing, build_timeline, compute_stats

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)

_ADD_USAGE = (
    "Usage: /add <due> | <title> | <subject> [| low|medium|high] [| notes]\n"
    "  due: YYYY-MM-DD HH:MM, YYYY-MM-DD (23:59), or relative +90m / +2h / +1d2h"
)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

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

        return handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        lines.append("  /exit - Quit.")
        return "\n".join(lines)


registry = CommandRegistry()


def _fmt_ts(ts: datetime) -> str:
    return ts.astimezone().strftime("%Y-%m-%d %H:%M")


def _with_persist_warning(state: AppState, text: str) -> str:
    result = state.task_store.last_persist
    if result.ok:
        return text
    return f"{text}\n  [WARN] Changes are kept in memory but could not be saved: {result.error}"


def _parse_id(args: list[str]) -> int | None:
    if len(args) != 1:
        return None
    try:
        return int(args[0].lstrip("#"))
    except ValueError:
        return None


def _task_line(task: Task) -> str:
    box = "[x]" if task.completed else "[ ]"
    return f"#{task.id} {box} {task.title} ({task.priority.value}) - {task.subject}"


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    settings = state.settings
    backend = str(getattr(settings, "storage_backend", "?"))
    persist = state.task_store.last_persist
    saved = "OK" if persist.ok else f"FAILED ({persist.error})"
    return (
        "Status:\n"
        f"  Tasks: {state.task_store.count_tasks()}\n"
        f"  Storage: {backend} (last save: {saved})\n"
        f"  Reminders: every {state.scheduler.interval_seconds:.0f}s, "
        f"dedupe {'ON' if state.scheduler.dedupe else 'OFF'}, "
        f"{'running' if state.scheduler.running else 'stopped'}"
    )


def cmd_add(state: AppState, args: list[str]) -> str:
    if not args:
        return _ADD_USAGE
    try:
        task = add_task_from_text(state.task_store, " ".join(args), state.clock.now())
    except ValueError as e:
        return f"Invalid task: {e}\n{_ADD_USAGE}"
    return _with_persist_warning(
        state, f"Task added successfully! #{task.id} due {_fmt_ts(task.due_at)}"
    )


def cmd_done(state: AppState, args: list[str]) -> str:
    task_id = _parse_id(args)
    if task_id is None:
        return "Usage: /done <id>"
    task = state.task_store.toggle_task(task_id)
    if task is None:
        return f"No task #{task_id}."
    text = "Task completed! Great job!" if task.completed else "Task marked as incomplete"
    return _with_persist_warning(state, f"{text} (#{task.id})")


def cmd_delete(state: AppState, args: list[str]) -> str:
    task_id = _parse_id(args)
    if task_id is None:
        return "Usage: /delete <id>"
    if not state.task_store.delete_task(task_id):
        return f"No task #{task_id}."
    return _with_persist_warning(state, f"Task deleted successfully (#{task_id})")


def cmd_list(state: AppState, args: list[str]) -> str:
    rows = build_listing(state.task_store.tasks(), state.clock.now())
    if not rows:
        return "No tasks yet. Add your first study task with /add."

    lines = ["Tasks:"]
    for row in rows:
        when = f"due {_fmt_ts(row.task.due_at)}"
        if row.overdue:
            when += " - OVERDUE"
        elif row.time_label:
            when += f" - in {row.time_label}"
        lines.append(f"  {_task_line(row.task)} - {when}")
        if row.task.notes:
            lines.append(f"      notes: {row.task.notes}")
    return "\n".join(lines)


_MARKERS = {
    TimelineMarker.COMPLETED: "done",
    TimelineMarker.OVERDUE: "OVERDUE",
    TimelineMarker.UPCOMING: "upcoming",
}


def cmd_timeline(state: AppState, args: list[str]) -> str:
    entries = build_timeline(state.task_store.tasks(), state.clock.now())
    if not entries:
        return "Your study timeline will appear here once you add tasks."

    lines = ["Timeline:"]
    for e in entries:
        lines.append(
            f"  {_fmt_ts(e.task.due_at)}  [{_MARKERS[e.marker]}] {e.task.title} - {e.task.subject}"
        )
    return "\n".join(lines)


def cmd_stats(state: AppState, args: list[str]) -> str:
    stats = compute_stats(state.task_store.tasks())
    filled = stats.progress_percent // 5
    bar = "#" * filled + "-" * (20 - filled)
    return (
        f"Total: {stats.total} | Completed: {stats.completed} | Pending: {stats.pending}\n"
        f"Progress: [{bar}] {stats.progress_percent}%"
    )


def cmd_remind(state: AppState, args: list[str]) -> str:
    sent = state.scheduler.tick()
    logger.debug("Manual reminder tick sent %d reminder(s)", len(sent))
    return f"Reminder check done: {len(sent)} reminder(s) sent."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show storage and reminder settings.")
registry.register("add", cmd_add, help_text="Add a task: /add <due> | <title> | <subject> [| priority] [| notes].")
registry.register("done", cmd_done, help_text="Toggle completion: /done <id>.", aliases=["toggle"])
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <id>.", aliases=["del", "rm"])
registry.register("list", cmd_list, help_text="List tasks (open first, by due date).", aliases=["ls"])
registry.register("timeline", cmd_timeline, help_text="Show tasks in due-date order.")
registry.register("stats", cmd_stats, help_text="Show totals and progress.")
registry.register("remind", cmd_remind, help_text="Run a reminder check now.")
