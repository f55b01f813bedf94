# tests/test_task_store.py

from __future__ import annotations

import dataclasses
from datetime import datetime, timedelta

import pytest

from study_planner.tasks.task_models import Priority, tasks_from_json, tasks_to_json
from study_planner.tasks.task_store import TaskStore

from .conftest import NOW
from .fakes import FailingPersistence, FakeClock, InMemoryPersistence


def _add(store: TaskStore, title: str = "Read chapter", hours: float = 5, **kw):
    return store.add_task(
        title=title,
        subject=kw.pop("subject", "Biology"),
        due_at=NOW + timedelta(hours=hours),
        **kw,
    )


def test_add_task_sets_defaults_and_persists(store: TaskStore, persistence: InMemoryPersistence) -> None:
    task = _add(store, priority="high", notes="  figures 1-4 ")

    assert task.completed is False
    assert task.created_at == NOW
    assert task.priority is Priority.HIGH
    assert task.notes == "figures 1-4"
    assert store.tasks() == (task,)
    assert persistence.saves == 1
    assert tasks_from_json(persistence.blob or "") == [task]


def test_ids_are_unique_and_never_reused(store: TaskStore) -> None:
    a = _add(store, "a")
    b = _add(store, "b")
    store.delete_task(b.id)
    c = _add(store, "c")

    assert len({a.id, b.id, c.id}) == 3
    assert c.id > b.id > a.id


def test_toggle_twice_restores_task(store: TaskStore) -> None:
    original = _add(store)

    once = store.toggle_task(original.id)
    twice = store.toggle_task(original.id)

    assert once is not None and once.completed is True
    assert twice == original


def test_toggle_unknown_id_is_a_no_op(store: TaskStore, persistence: InMemoryPersistence) -> None:
    task = _add(store)
    saves = persistence.saves

    assert store.toggle_task(task.id + 100) is None
    assert store.tasks() == (task,)
    assert persistence.saves == saves


def test_delete_removes_task_and_unknown_id_changes_nothing(
    store: TaskStore, persistence: InMemoryPersistence
) -> None:
    keep = _add(store, "keep")
    gone = _add(store, "gone")

    assert store.delete_task(gone.id) is True
    assert [t.id for t in store.tasks()] == [keep.id]
    assert all(t.id != gone.id for t in tasks_from_json(persistence.blob or ""))

    saves = persistence.saves
    assert store.delete_task(gone.id) is False
    assert store.tasks() == (keep,)
    assert persistence.saves == saves


def test_snapshots_are_not_affected_by_later_mutations(store: TaskStore) -> None:
    task = _add(store)
    snapshot = store.tasks()

    store.toggle_task(task.id)

    assert snapshot[0].completed is False
    with pytest.raises(dataclasses.FrozenInstanceError):
        snapshot[0].completed = True  # type: ignore[misc]


def test_add_task_rejects_invalid_input(store: TaskStore) -> None:
    with pytest.raises(TypeError):
        store.add_task(title="x", subject="y", due_at="2025-03-10 12:00")  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        store.add_task(title="  ", subject="y", due_at=NOW)
    with pytest.raises(ValueError):
        store.add_task(title="x", subject="", due_at=NOW)
    assert store.count_tasks() == 0


def test_naive_due_date_gets_local_zone(store: TaskStore) -> None:
    task = store.add_task(title="x", subject="y", due_at=datetime(2025, 3, 11, 9, 0))
    assert task.due_at.tzinfo is not None


def test_load_restores_saved_collection_and_continues_ids(clock: FakeClock) -> None:
    backend = InMemoryPersistence()
    first = TaskStore(backend, clock=clock)
    a = _add(first, "a")
    b = _add(first, "b", hours=-2)
    first.toggle_task(b.id)

    second = TaskStore(backend, clock=clock)
    loaded = second.load_tasks()

    assert loaded == list(first.tasks())
    assert _add(second, "c").id > max(a.id, b.id)


@pytest.mark.parametrize("blob", [None, "", "{corrupt", '{"not": "a list"}'])
def test_load_missing_or_corrupt_state_starts_empty(blob: str | None, clock: FakeClock) -> None:
    store = TaskStore(InMemoryPersistence(blob), clock=clock)
    assert store.load_tasks() == []
    assert store.tasks() == ()


def test_load_survives_storage_read_error(clock: FakeClock) -> None:
    store = TaskStore(FailingPersistence(fail_load=True), clock=clock)
    assert store.load_tasks() == []


def test_persistence_failure_is_non_fatal(clock: FakeClock) -> None:
    backend = FailingPersistence()
    store = TaskStore(backend, clock=clock)

    task = _add(store)

    assert store.tasks() == (task,)
    assert store.last_persist.ok is False
    assert "quota exceeded" in (store.last_persist.error or "")

    toggled = store.toggle_task(task.id)
    assert toggled is not None and toggled.completed is True
    assert store.delete_task(task.id) is True
    assert backend.attempts == 3


def test_persist_recovers_after_failure(clock: FakeClock) -> None:
    class Flaky(InMemoryPersistence):
        fail = True

        def save(self, blob: str) -> None:
            if self.fail:
                raise OSError("disk full")
            super().save(blob)

    backend = Flaky()
    store = TaskStore(backend, clock=clock)
    task = _add(store)
    assert store.last_persist.ok is False

    backend.fail = False
    assert store.persist().ok is True
    assert store.last_persist.ok is True
    assert backend.blob == tasks_to_json([task])
