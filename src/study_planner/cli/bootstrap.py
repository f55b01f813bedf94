# src/study_planner/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires persistence, clock, notification sink and scheduler into AppState.
"""

from __future__ import annotations

import logging
import threading

from ..config import get_settings
from ..connectors.console_connector import ConsoleNotifier
from ..core.clock import SystemClock
from ..core.ports import Clock, NotificationSink, TaskPersistence
from ..core.state import AppState
from ..tasks.task_persistence import JsonFileTaskPersistence, SqliteTaskPersistence
from ..tasks.task_scheduler import ReminderScheduler
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.tasks_json_path.parent.mkdir(parents=True, exist_ok=True)


def create_persistence(settings) -> TaskPersistence:
    if settings.storage_backend == "json":
        return JsonFileTaskPersistence(settings.tasks_json_path)
    return SqliteTaskPersistence(settings.tasks_db_path)


def create_initial_state(
    *,
    settings=None,
    persistence: TaskPersistence | None = None,
    notifier: NotificationSink | None = None,
    clock: Clock | None = None,
) -> AppState:
    """
    Create AppState from the provided settings and load saved tasks.

    Every collaborator is injectable, which keeps the app easy to test. If settings
    is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    clock = clock or SystemClock()
    notifier = notifier or ConsoleNotifier()
    store = TaskStore(persistence or create_persistence(settings), clock=clock)
    store.load_tasks()

    lock = threading.RLock()
    scheduler = ReminderScheduler(
        store,
        notifier,
        clock=clock,
        interval_seconds=settings.reminder_interval_seconds,
        dedupe=settings.reminder_dedupe,
        lock=lock,
    )

    return AppState(
        settings=settings,
        task_store=store,
        scheduler=scheduler,
        notifier=notifier,
        clock=clock,
        lock=lock,
    )
