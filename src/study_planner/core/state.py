# src/study_planner/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ..tasks.task_scheduler import ReminderScheduler
from ..tasks.task_store import TaskStore
from .ports import Clock, NotificationSink


@dataclass
class AppState:
    # Settings stay on the state so command handlers can report them.
    settings: Any

    task_store: TaskStore
    scheduler: ReminderScheduler
    notifier: NotificationSink
    clock: Clock

    # Shared by the console thread and the timer thread; held around every store
    # access and every reminder tick.
    lock: threading.RLock = field(default_factory=threading.RLock)
