# tests/test_commands.py

from __future__ import annotations

from datetime import timedelta

from study_planner.cli.commands import CommandRegistry, registry
from study_planner.core.state import AppState

from .conftest import NOW
from .fakes import FailingPersistence, RecordingNotifier


def test_command_registry_routes_aliases(state: AppState) -> None:
    reg = CommandRegistry()
    called: list[list[str]] = []

    def handler(state, args):
        called.append(args)
        return "ok"

    reg.register("a", handler, "a", aliases=["alpha"])

    assert reg.handle(state, "/a x y") == "ok"
    assert reg.handle(state, "/ALPHA") == "ok"
    assert called == [["x", "y"], []]


def test_command_registry_unknown_and_non_command(state: AppState) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_add_list_done_delete_flow(state: AppState) -> None:
    reply = registry.handle(state, "/add +2h | Read chapter 5 | Biology | high | pages 80-95")
    assert reply is not None and reply.startswith("Task added successfully!")
    (task,) = state.task_store.tasks()

    listing = registry.handle(state, "/list") or ""
    assert f"#{task.id} [ ] Read chapter 5 (high) - Biology" in listing
    assert "in 2h 0m" in listing
    assert "notes: pages 80-95" in listing

    assert "Task completed! Great job!" in (registry.handle(state, f"/done {task.id}") or "")
    assert "Task marked as incomplete" in (registry.handle(state, f"/toggle #{task.id}") or "")
    assert "Task deleted successfully" in (registry.handle(state, f"/delete {task.id}") or "")
    assert state.task_store.count_tasks() == 0
    assert "No task" in (registry.handle(state, f"/delete {task.id}") or "")


def test_add_reports_invalid_input(state: AppState) -> None:
    reply = registry.handle(state, "/add whenever | Essay | History") or ""
    assert reply.startswith("Invalid task:")
    assert state.task_store.count_tasks() == 0


def test_usage_for_bad_ids(state: AppState) -> None:
    assert (registry.handle(state, "/done") or "").startswith("Usage")
    assert (registry.handle(state, "/delete abc") or "").startswith("Usage")


def test_list_marks_overdue_and_timeline_and_stats(state: AppState) -> None:
    store = state.task_store
    store.add_task(title="Late essay", subject="History", due_at=NOW - timedelta(minutes=30))
    done = store.add_task(title="Quiz prep", subject="Math", due_at=NOW + timedelta(hours=4))
    store.add_task(title="Lab", subject="Chemistry", due_at=NOW + timedelta(days=1, hours=2))
    store.add_task(title="Reading", subject="English", due_at=NOW + timedelta(days=2))
    store.toggle_task(done.id)

    listing = registry.handle(state, "/list") or ""
    assert "Late essay" in listing and "OVERDUE" in listing
    assert listing.index("Late essay") < listing.index("Lab") < listing.index("Quiz prep")

    timeline = registry.handle(state, "/timeline") or ""
    assert "[OVERDUE] Late essay" in timeline
    assert "[done] Quiz prep" in timeline
    assert timeline.index("Quiz prep") < timeline.index("Lab")

    stats = registry.handle(state, "/stats") or ""
    assert "Total: 4 | Completed: 1 | Pending: 3" in stats
    assert "25%" in stats


def test_empty_views(state: AppState) -> None:
    assert "No tasks yet" in (registry.handle(state, "/list") or "")
    assert "timeline will appear" in (registry.handle(state, "/timeline") or "")
    assert "0%" in (registry.handle(state, "/stats") or "")


def test_remind_runs_a_tick(state: AppState, notifier: RecordingNotifier) -> None:
    state.task_store.add_task(title="Urgent", subject="Math", due_at=NOW + timedelta(minutes=10))

    reply = registry.handle(state, "/remind") or ""

    assert "1 reminder(s) sent" in reply
    assert notifier.messages == ['Urgent: "Urgent" is due in less than 1 hour!']


def test_status_and_persist_warning(state: AppState) -> None:
    state.task_store._persistence = FailingPersistence()  # simulate a full disk

    reply = registry.handle(state, "/add +1d | Essay | History") or ""
    assert "could not be saved" in reply
    assert state.task_store.count_tasks() == 1

    status = registry.handle(state, "/status") or ""
    assert "Tasks: 1" in status
    assert "FAILED" in status
    assert "every 60s" in status


def test_help_lists_commands(state: AppState) -> None:
    text = registry.handle(state, "/help") or ""
    for name in ("/add", "/done", "/delete", "/list", "/timeline", "/stats", "/remind", "/exit"):
        assert name in text
