# tests/conftest.py

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from types import SimpleNamespace

import pytest

from study_planner.cli.bootstrap import create_initial_state
from study_planner.core.state import AppState
from study_planner.tasks.task_store import TaskStore

from .fakes import FakeClock, InMemoryPersistence, RecordingNotifier

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture()
def persistence() -> InMemoryPersistence:
    return InMemoryPersistence()


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def store(persistence: InMemoryPersistence, clock: FakeClock) -> TaskStore:
    return TaskStore(persistence, clock=clock)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and commands.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="study-planner-test",
        log_level="DEBUG",
        console_enabled=False,
        storage_backend="sqlite",
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        tasks_json_path=tmp_path / "tasks.json",
        reminder_interval_seconds=60.0,
        reminder_dedupe=False,
    )


@pytest.fixture()
def state(
    settings: SimpleNamespace,
    persistence: InMemoryPersistence,
    notifier: RecordingNotifier,
    clock: FakeClock,
) -> AppState:
    """AppState wired with deterministic fakes (in-memory storage, fixed clock)."""
    return create_initial_state(
        settings=settings,
        persistence=persistence,
        notifier=notifier,
        clock=clock,
    )
