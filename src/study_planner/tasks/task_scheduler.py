# src/study_planner/tasks/task_scheduler.py

from __future__ import annotations

"""
Reminder scheduler.

A periodic scan that:
- takes a snapshot of all tasks,
- classifies every incomplete task into at most one reminder window,
- sends the reminder text through an injected notification sink.

Each tick is a self-contained full scan. By default nothing carries over between
ticks, so a task that sits inside a window re-notifies on every tick (with a 60s
interval and a one-hour window that is up to 60 reminders). Pass dedupe=True to
remember which windows already fired per task.

How the message is displayed belongs to the sink, not the scheduler.
"""

import contextlib
import logging
import threading
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from ..core.ports import Clock, NotificationSink, TaskReader, Timer, TimerHandle
from .task_models import Task

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 60.0

_ONE_HOUR = timedelta(hours=1)


class ReminderKind(str, Enum):
    DAY_AHEAD = "24h"
    HOUR_AHEAD = "1h"
    OVERDUE = "overdue"


@dataclass(slots=True, frozen=True)
class Reminder:
    task: Task
    kind: ReminderKind
    text: str


def hours_until_due(task: Task, now: datetime) -> float:
    return (task.due_at - now) / _ONE_HOUR


def classify_reminder(hours: float) -> ReminderKind | None:
    """
    Map "hours until due" to a reminder window.

    (23, 24]  -> DAY_AHEAD
    (0, 1]    -> HOUR_AHEAD
    (-1, 0)   -> OVERDUE

    The windows do not overlap, so at most one matches.
    """
    if 23 < hours <= 24:
        return ReminderKind.DAY_AHEAD
    if 0 < hours <= 1:
        return ReminderKind.HOUR_AHEAD
    if -1 < hours < 0:
        return ReminderKind.OVERDUE
    return None


def build_reminder_text(task: Task, kind: ReminderKind) -> str:
    if kind == ReminderKind.DAY_AHEAD:
        return f'Reminder: "{task.title}" is due in 24 hours!'
    if kind == ReminderKind.HOUR_AHEAD:
        return f'Urgent: "{task.title}" is due in less than 1 hour!'
    return f'Overdue: "{task.title}" was due!'


def build_reminder(task: Task, now: datetime) -> Reminder | None:
    """Reminder for `task` at `now`, or None (completed, or outside every window)."""
    if task.completed:
        return None
    kind = classify_reminder(hours_until_due(task, now))
    if kind is None:
        return None
    return Reminder(task=task, kind=kind, text=build_reminder_text(task, kind))


class ReminderScheduler:
    """
    Periodic reminder scan over a task repository.

    start(timer) runs one tick right away (covers tasks already due at startup) and
    then one tick every interval_seconds until stop().

    If `lock` is given it is held for the whole tick, so a scan never interleaves
    with a store mutation done under the same lock.
    """

    def __init__(
        self,
        repo: TaskReader,
        notifier: NotificationSink,
        *,
        clock: Clock,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        dedupe: bool = False,
        lock: threading.RLock | None = None,
    ) -> None:
        if float(interval_seconds) <= 0:
            raise ValueError("interval_seconds must be positive")
        self._repo = repo
        self._notifier = notifier
        self._clock = clock
        self._interval = float(interval_seconds)
        self._dedupe = bool(dedupe)
        self._lock = lock
        self._fired: dict[int, set[ReminderKind]] = {}
        self._handle: TimerHandle | None = None
        self._ticks = 0

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def dedupe(self) -> bool:
        return self._dedupe

    @property
    def running(self) -> bool:
        return self._handle is not None

    @property
    def ticks(self) -> int:
        return self._ticks

    def fired_for(self, task_id: int) -> frozenset[ReminderKind]:
        return frozenset(self._fired.get(task_id, ()))

    # ---- lifecycle ----

    def start(self, timer: Timer) -> TimerHandle:
        if self._handle is not None:
            raise RuntimeError("Reminder scheduler is already running")
        self.tick()
        self._handle = timer.schedule_repeating(self._interval, self.tick)
        logger.info(
            "Reminder scheduler started (interval=%.0fs dedupe=%s)", self._interval, self._dedupe
        )
        return self._handle

    def stop(self) -> None:
        if self._handle is None:
            return
        self._handle.cancel()
        self._handle = None
        logger.info("Reminder scheduler stopped after %d tick(s)", self._ticks)

    # ---- scanning ----

    def tick(self) -> list[Reminder]:
        """One full scan. Returns the reminders that were sent."""
        with self._locked():
            return self._tick_unlocked()

    @contextlib.contextmanager
    def _locked(self) -> Iterator[None]:
        if self._lock is None:
            yield
            return
        with self._lock:
            yield

    def _tick_unlocked(self) -> list[Reminder]:
        self._ticks += 1
        now = self._clock.now()

        try:
            tasks = self._repo.tasks()
        except Exception:
            logger.exception("Reminder tick: reading tasks failed")
            return []

        if self._dedupe:
            self._forget_finished(tasks)

        sent: list[Reminder] = []
        for task in tasks:
            reminder = build_reminder(task, now)
            if reminder is None:
                continue

            if self._dedupe and reminder.kind in self._fired.get(task.id, ()):
                continue

            try:
                self._notifier.notify(reminder.text)
            except Exception:
                logger.exception(
                    "notify failed task_id=%s kind=%s", task.id, reminder.kind.value
                )
                continue

            if self._dedupe:
                self._fired.setdefault(task.id, set()).add(reminder.kind)
            logger.info("Reminder sent task_id=%s kind=%s", task.id, reminder.kind.value)
            sent.append(reminder)

        logger.debug("Reminder tick #%d: %d task(s), %d sent", self._ticks, len(tasks), len(sent))
        return sent

    def _forget_finished(self, tasks: tuple[Task, ...]) -> None:
        # Deleted or completed tasks lose their fired thresholds.
        open_ids = {t.id for t in tasks if not t.completed}
        for task_id in list(self._fired):
            if task_id not in open_ids:
                del self._fired[task_id]
