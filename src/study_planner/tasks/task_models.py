# src/study_planner/tasks/task_models.py

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def from_db(cls, raw: str | None) -> Priority:
        if not raw:
            return cls.MEDIUM
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.MEDIUM


@dataclass(slots=True, frozen=True)
class Task:
    """
    A single study item.

    Instances are immutable: the store replaces the record when `completed` flips,
    so snapshots handed to views and the scheduler never change under them.
    """

    id: int
    title: str
    subject: str
    due_at: datetime
    priority: Priority
    completed: bool
    created_at: datetime
    notes: str = ""


class TaskDecodeError(ValueError):
    """Saved blob is not a JSON list of tasks."""


def _ts_to_str(ts: datetime) -> str:
    return ts.isoformat()


def _str_to_ts(raw: Any) -> datetime:
    if not isinstance(raw, str) or not raw.strip():
        raise ValueError(f"not a timestamp: {raw!r}")
    ts = datetime.fromisoformat(raw.strip())
    if ts.tzinfo is None:
        ts = ts.astimezone()
    return ts


def _str_to_completed(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    logger.warning("Saved completed flag %r is not a boolean; reading it as False", raw)
    return False


def task_to_dict(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "subject": task.subject,
        "dueDate": _ts_to_str(task.due_at),
        "priority": task.priority.value,
        "notes": task.notes,
        "completed": task.completed,
        "createdAt": _ts_to_str(task.created_at),
    }


def task_from_dict(data: dict[str, Any]) -> Task:
    """
    Revive one saved task. Raises ValueError/TypeError for entries that cannot
    produce a valid Task (missing id or unparseable timestamps).
    """
    raw_id = data["id"]
    if isinstance(raw_id, bool):
        raise TypeError("id must be an integer")
    return Task(
        id=int(raw_id),
        title=str(data.get("title") or ""),
        subject=str(data.get("subject") or ""),
        due_at=_str_to_ts(data.get("dueDate")),
        priority=Priority.from_db(data.get("priority")),
        completed=_str_to_completed(data.get("completed", False)),
        created_at=_str_to_ts(data.get("createdAt")),
        notes=str(data.get("notes") or ""),
    )


def tasks_to_json(tasks: Iterable[Task]) -> str:
    return json.dumps([task_to_dict(t) for t in tasks], ensure_ascii=False)


def tasks_from_json(blob: str) -> list[Task]:
    """
    Decode a saved collection.

    - invalid JSON / non-list payload -> TaskDecodeError
    - individual broken entries are skipped (logged), the rest is kept
    """
    try:
        data = json.loads(blob)
    except (TypeError, ValueError) as e:
        raise TaskDecodeError(f"invalid JSON: {e}") from e

    if not isinstance(data, list):
        raise TaskDecodeError(f"expected a list of tasks, got {type(data).__name__}")

    out: list[Task] = []
    seen: set[int] = set()
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            logger.warning("Skipping saved task #%d: not an object", i)
            continue
        try:
            task = task_from_dict(item)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping saved task #%d: %s", i, e)
            continue
        if task.id in seen:
            logger.warning("Skipping saved task #%d: duplicate id=%s", i, task.id)
            continue
        seen.add(task.id)
        out.append(task)
    return out
