# src/study_planner/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The task store and the reminder scheduler depend on Protocols instead of concrete
implementations. Storage, clocks, timers and notification sinks stay swappable, and
tests can drive time deterministically.
"""

from collections.abc import Callable
from datetime import datetime
from typing import Any, Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class TaskPersistence(Protocol):
    """
    Key-value blob storage for the whole task collection.

    save() raises on failure; load() returns None when nothing was saved yet.
    """

    def save(self, blob: str) -> None: ...
    def load(self) -> str | None: ...


class NotificationSink(Protocol):
    """Fire-and-forget message display (console line, banner widget, ...)."""
    def notify(self, message: str) -> None: ...


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Timer(Protocol):
    """Runs `callback` every `interval_seconds` until the returned handle is cancelled."""
    def schedule_repeating(
            self,
            interval_seconds: float,
            callback: Callable[[], Any],
    ) -> TimerHandle: ...


class TaskReader(Protocol):
    # Scheduler API: read-only snapshot of the collection.
    def tasks(self) -> tuple[Any, ...]: ...
