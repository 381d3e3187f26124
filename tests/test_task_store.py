# tests/test_task_store.py

from __future__ import annotations

import json

from taskchat.storage.kv_store import MemoryKeyValueStore
from taskchat.tasks.task_models import TaskPriority, TaskStatus
from taskchat.tasks.task_store import TASKS_KEY, TaskStore


def _store() -> TaskStore:
    return TaskStore(MemoryKeyValueStore().scoped("u1"))


def test_add_applies_defaults_and_keeps_order() -> None:
    store = _store()

    tasks = store.apply("add", {"title": "Buy milk"})
    tasks = store.apply("add", {"title": "Call mom", "priority": "high", "description": "Sunday"})

    assert [t.title for t in tasks] == ["Buy milk", "Call mom"]
    first, second = tasks
    assert first.description == ""
    assert first.priority is TaskPriority.MEDIUM
    assert first.status == TaskStatus.PENDING
    assert first.created_at
    assert second.priority is TaskPriority.HIGH
    assert second.description == "Sunday"


def test_many_adds_yield_unique_ids() -> None:
    store = _store()
    for i in range(25):
        store.apply("add", {"title": f"task {i}"})

    tasks = store.list()
    ids = [t.id for t in tasks]
    assert len(tasks) == 25
    assert len(set(ids)) == 25
    assert [t.title for t in tasks] == [f"task {i}" for i in range(25)]


def test_update_merges_fields_and_keeps_identity() -> None:
    store = _store()
    task = store.add({"title": "Buy milk", "description": "2 litres"})

    tasks = store.apply("update", {"id": task.id, "status": "completed", "createdAt": "nope"})

    (updated,) = tasks
    assert updated.id == task.id
    assert updated.status == "completed"
    assert updated.title == "Buy milk"
    assert updated.description == "2 litres"
    assert updated.created_at == task.created_at


def test_update_accepts_nested_updates_payload() -> None:
    store = _store()
    task = store.add({"title": "Buy milk"})

    (updated,) = store.apply("update", {"id": task.id, "updates": {"title": "Buy oat milk", "priority": "low"}})

    assert updated.title == "Buy oat milk"
    assert updated.priority is TaskPriority.LOW


def test_update_and_delete_unknown_id_leave_collection_unchanged() -> None:
    kv = MemoryKeyValueStore()
    store = TaskStore(kv.scoped("u1"))
    store.add({"title": "Buy milk"})
    store.add({"title": "Walk dog"})
    before = json.dumps(kv.get("u1", TASKS_KEY), sort_keys=True)

    store.apply("update", {"id": "does-not-exist", "status": "completed"})
    store.apply("delete", {"id": "does-not-exist"})
    store.apply("update", {"status": "completed"})
    store.apply("delete", {})

    assert json.dumps(kv.get("u1", TASKS_KEY), sort_keys=True) == before


def test_delete_removes_only_the_matching_task() -> None:
    store = _store()
    a = store.add({"title": "a"})
    b = store.add({"title": "b"})
    c = store.add({"title": "c"})

    tasks = store.apply("delete", {"id": b.id})

    assert [t.id for t in tasks] == [a.id, c.id]


def test_numeric_id_from_payload_matches_string_id() -> None:
    store = _store()
    task = store.add({"title": "a"})

    (updated,) = store.apply("update", {"id": int(task.id), "status": "completed"})

    assert updated.status == "completed"


def test_update_ignores_unknown_priority() -> None:
    store = _store()
    (task,) = store.apply("add", {"title": "Ship release", "priority": "high"})

    (task,) = store.apply("update", {"id": task.id, "priority": "urgent", "status": "completed"})

    assert task.priority is TaskPriority.HIGH
    assert task.status == "completed"


def test_update_accepts_priority_in_any_case() -> None:
    store = _store()
    (task,) = store.apply("add", {"title": "Ship release"})

    (task,) = store.apply("update", {"id": task.id, "priority": " LOW "})

    assert task.priority is TaskPriority.LOW


def test_created_at_is_millisecond_utc_with_z() -> None:
    (task,) = _store().apply("add", {"title": "Stamp"})

    assert task.created_at.endswith("Z")
    # 2024-05-01T12:00:00.000Z
    assert len(task.created_at) == 24
