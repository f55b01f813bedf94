# src/study_planner/tasks/task_views.py

"""
Derived views over the task collection.

Everything here is a pure function of (tasks, now): nothing is cached or stored, so
views are simply recomputed on every display request. Rendering (HTML, terminal,
JSON) is left to the caller.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import StrEnum

from .task_models import Task

_MS_PER_MINUTE = 60_000
_MS_PER_HOUR = 3_600_000
_MS_PER_DAY = 86_400_000
_ONE_MS = timedelta(milliseconds=1)


@dataclass(slots=True, frozen=True)
class TaskStats:
    total: int
    completed: int
    progress_percent: int

    @property
    def pending(self) -> int:
        return self.total - self.completed


class TimelineMarker(StrEnum):
    COMPLETED = "completed"
    OVERDUE = "overdue"
    UPCOMING = "upcoming"


@dataclass(slots=True, frozen=True)
class TaskRow:
    task: Task
    overdue: bool
    time_label: str | None


@dataclass(slots=True, frozen=True)
class TimelineEntry:
    task: Task
    marker: TimelineMarker


def compute_stats(tasks: Iterable[Task]) -> TaskStats:
    items = list(tasks)
    total = len(items)
    completed = sum(1 for t in items if t.completed)
    # round half up (not banker's rounding): 1/8 -> 13%
    progress = math.floor(100 * completed / total + 0.5) if total > 0 else 0
    return TaskStats(total=total, completed=completed, progress_percent=progress)


def sort_for_listing(tasks: Iterable[Task]) -> list[Task]:
    """Incomplete first, then by due date. sorted() is stable, so ties keep insertion order."""
    return sorted(tasks, key=lambda t: (t.completed, t.due_at))


def sort_for_timeline(tasks: Iterable[Task]) -> list[Task]:
    return sorted(tasks, key=lambda t: t.due_at)


def is_overdue(task: Task, now: datetime) -> bool:
    return task.due_at < now and not task.completed


def time_until_due(due_at: datetime, now: datetime) -> str | None:
    """
    Remaining time as "Nd Nh", "Nh Nm" or "Nm"; None once the due time has passed.
    """
    if due_at < now:
        return None

    diff_ms = (due_at - now) // _ONE_MS
    days = diff_ms // _MS_PER_DAY
    hours = (diff_ms % _MS_PER_DAY) // _MS_PER_HOUR
    minutes = (diff_ms % _MS_PER_HOUR) // _MS_PER_MINUTE

    if days > 0:
        return f"{days}d {hours}h"
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def build_listing(tasks: Iterable[Task], now: datetime) -> list[TaskRow]:
    rows: list[TaskRow] = []
    for t in sort_for_listing(tasks):
        overdue = is_overdue(t, now)
        rows.append(
            TaskRow(
                task=t,
                overdue=overdue,
                time_label=None if overdue else time_until_due(t.due_at, now),
            )
        )
    return rows


def build_timeline(tasks: Iterable[Task], now: datetime) -> list[TimelineEntry]:
    out: list[TimelineEntry] = []
    for t in sort_for_timeline(tasks):
        if t.completed:
            marker = TimelineMarker.COMPLETED
        elif is_overdue(t, now):
            marker = TimelineMarker.OVERDUE
        else:
            marker = TimelineMarker.UPCOMING
        out.append(TimelineEntry(task=t, marker=marker))
    return out
