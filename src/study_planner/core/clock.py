# src/study_planner/core/clock.py

from __future__ import annotations

from datetime import datetime


class SystemClock:
    """Host wall clock, timezone-aware in the host's local zone."""

    def now(self) -> datetime:
        return datetime.now().astimezone()
