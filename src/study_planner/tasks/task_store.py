# src/study_planner/tasks/task_store.py

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, replace
from datetime import datetime

from ..core.ports import Clock, TaskPersistence
from .task_models import Priority, Task, TaskDecodeError, tasks_from_json, tasks_to_json

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class PersistResult:
    ok: bool
    error: str | None = None


class TaskStore:
    """
    Authoritative in-memory task collection with write-through persistence.

    - every successful mutation writes the whole collection (no batching)
    - persistence failures never raise into the mutation path; they are logged and
      reported via persist() / last_persist, and memory stays the source of truth
    - ids come from a monotonic counter and are never reused in a process lifetime

    Not thread-safe by itself: callers that touch the store from several threads
    share one lock (see AppState.lock).
    """

    def __init__(self, persistence: TaskPersistence, *, clock: Clock) -> None:
        self._persistence = persistence
        self._clock = clock
        self._tasks: list[Task] = []
        self._ids = itertools.count(1)
        self._last_persist = PersistResult(ok=True)

    # ---- low-level helpers ----

    def _next_id(self) -> int:
        return next(self._ids)

    def _index_of(self, task_id: int) -> int | None:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    # ---- public API ----

    @property
    def last_persist(self) -> PersistResult:
        return self._last_persist

    def tasks(self) -> tuple[Task, ...]:
        """Snapshot in insertion order."""
        return tuple(self._tasks)

    def get_task(self, task_id: int) -> Task | None:
        idx = self._index_of(task_id)
        return self._tasks[idx] if idx is not None else None

    def count_tasks(self) -> int:
        return len(self._tasks)

    def load_tasks(self) -> list[Task]:
        """
        Restore the collection from persistence (startup).

        Missing, unreadable or corrupt state yields an empty collection.
        """
        try:
            blob = self._persistence.load()
        except Exception:
            logger.exception("Failed to read saved tasks; starting empty.")
            blob = None

        loaded: list[Task] = []
        if blob:
            try:
                loaded = tasks_from_json(blob)
            except TaskDecodeError as e:
                logger.warning("Saved tasks are corrupt (%s); starting empty.", e)
                loaded = []

        self._tasks = list(loaded)
        start = max((t.id for t in loaded), default=0) + 1
        self._ids = itertools.count(start)
        logger.info("Loaded %d task(s)", len(loaded))
        return list(loaded)

    def persist(self) -> PersistResult:
        try:
            blob = tasks_to_json(self._tasks)
            self._persistence.save(blob)
        except Exception as e:
            logger.exception("Failed to persist %d task(s)", len(self._tasks))
            result = PersistResult(ok=False, error=f"{type(e).__name__}: {e}")
        else:
            result = PersistResult(ok=True)
        self._last_persist = result
        return result

    def add_task(
        self,
        *,
        title: str,
        subject: str,
        due_at: datetime,
        priority: Priority | str = Priority.MEDIUM,
        notes: str | None = None,
    ) -> Task:
        if not isinstance(due_at, datetime):
            raise TypeError("due_at must be a datetime")
        if not title or not title.strip():
            raise ValueError("title is required")
        if not subject or not subject.strip():
            raise ValueError("subject is required")

        if due_at.tzinfo is None:
            due_at = due_at.astimezone()

        task = Task(
            id=self._next_id(),
            title=title.strip(),
            subject=subject.strip(),
            due_at=due_at,
            priority=priority if isinstance(priority, Priority) else Priority.from_db(priority),
            completed=False,
            created_at=self._clock.now(),
            notes=(notes or "").strip(),
        )
        self._tasks.append(task)
        self.persist()
        logger.debug(
            "Task added id=%s subject=%s priority=%s due_at=%s",
            task.id,
            task.subject,
            task.priority.value,
            task.due_at.isoformat(),
        )
        return task

    def toggle_task(self, task_id: int) -> Task | None:
        """Flip `completed`. Unknown id: no-op, returns None."""
        idx = self._index_of(task_id)
        if idx is None:
            logger.debug("toggle_task: no task id=%s", task_id)
            return None

        updated = replace(self._tasks[idx], completed=not self._tasks[idx].completed)
        self._tasks[idx] = updated
        self.persist()
        logger.debug("Task %s completed=%s", task_id, updated.completed)
        return updated

    def delete_task(self, task_id: int) -> bool:
        """Remove a task. Unknown id: no-op, returns False."""
        idx = self._index_of(task_id)
        if idx is None:
            logger.debug("delete_task: no task id=%s", task_id)
            return False

        del self._tasks[idx]
        self.persist()
        logger.debug("Task %s deleted", task_id)
        return True
