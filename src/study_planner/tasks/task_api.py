# src/study_planner/tasks/task_api.py

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta

from .task_models import Priority, Task
from .task_store import TaskStore

logger = logging.getLogger(__name__)

_RELATIVE_RE = re.compile(r"^\+(?:(\d+)d)?(?:(\d+)h)?(?:(\d+)m)?$", re.IGNORECASE)

_ABSOLUTE_FORMATS = (
    "%Y-%m-%d %H:%M",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
)


def parse_due(raw: str, now: datetime) -> datetime:
    """
    Parse a user-entered due date.

    Accepted:
    - "+90m", "+2h", "+1d", "+1d2h30m" (relative to `now`)
    - "YYYY-MM-DD HH:MM" / "YYYY-MM-DDTHH:MM" (optionally with seconds)
    - "YYYY-MM-DD" (end of that day, 23:59)

    Naive values are interpreted in the host's local zone.
    Raises ValueError for anything else.
    """
    text = (raw or "").strip()
    if not text:
        raise ValueError("due date is required")

    m = _RELATIVE_RE.match(text)
    if m:
        if not any(m.groups()):
            raise ValueError(f"empty relative due date: {raw!r}")
        days, hours, minutes = (int(g) if g else 0 for g in m.groups())
        try:
            return now + timedelta(days=days, hours=hours, minutes=minutes)
        except (OverflowError, ValueError):
            raise ValueError(f"due date out of range: {raw!r}") from None

    for fmt in _ABSOLUTE_FORMATS:
        try:
            return datetime.strptime(text, fmt).astimezone()
        except ValueError:
            continue

    try:
        day = datetime.strptime(text, "%Y-%m-%d")
    except ValueError:
        raise ValueError(f"unrecognized due date: {raw!r}") from None
    return day.replace(hour=23, minute=59).astimezone()


@dataclass(slots=True, frozen=True)
class TaskInput:
    title: str
    subject: str
    due_at: datetime
    priority: Priority
    notes: str


def parse_task_input(line: str, now: datetime) -> TaskInput:
    """
    Parse "<due> | <title> | <subject> [| <priority>] [| <notes>]".

    Raises ValueError with a user-facing message.
    """
    parts = [p.strip() for p in (line or "").split("|")]
    if len(parts) < 3:
        raise ValueError("expected: <due> | <title> | <subject> [| <priority>] [| <notes>]")

    due_raw, title, subject = parts[0], parts[1], parts[2]
    if not title:
        raise ValueError("title is required")
    if not subject:
        raise ValueError("subject is required")

    priority = Priority.MEDIUM
    if len(parts) >= 4 and parts[3]:
        try:
            priority = Priority(parts[3].lower())
        except ValueError:
            raise ValueError(
                f"unknown priority {parts[3]!r} (use {', '.join(p.value for p in Priority)})"
            ) from None

    notes = " | ".join(parts[4:]).strip() if len(parts) >= 5 else ""

    return TaskInput(
        title=title,
        subject=subject,
        due_at=parse_due(due_raw, now),
        priority=priority,
        notes=notes,
    )


def add_task_from_text(store: TaskStore, line: str, now: datetime) -> Task:
    """Convenience helper used by front ends: parse the line, then add the task."""
    data = parse_task_input(line, now)
    task = store.add_task(
        title=data.title,
        subject=data.subject,
        due_at=data.due_at,
        priority=data.priority,
        notes=data.notes,
    )
    logger.info("Task %s added via text input (due %s)", task.id, task.due_at.isoformat())
    return task
