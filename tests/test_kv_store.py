# tests/test_kv_store.py

from __future__ import annotations

from pathlib import Path

from taskchat.chat.history import ChatHistory, ChatRole, ChatTurn
from taskchat.storage.kv_store import SqliteKeyValueStore
from taskchat.tasks.task_store import TaskStore


def test_absent_key_reads_as_none(tmp_path: Path) -> None:
    kv = SqliteKeyValueStore(tmp_path / "kv.sqlite3")
    assert kv.get("u1", "tasks") is None
    assert TaskStore(kv.scoped("u1")).list() == []
    assert ChatHistory(kv.scoped("u1")).load() == []


def test_tasks_and_history_round_trip_through_sqlite(tmp_path: Path) -> None:
    db = tmp_path / "kv.sqlite3"
    kv = SqliteKeyValueStore(db)
    tasks = TaskStore(kv.scoped("u1"))
    tasks.add({"title": "Buy milk"})
    tasks.add({"title": "Walk dog", "priority": "low"})

    history = ChatHistory(kv.scoped("u1"))
    turns = [
        ChatTurn(role=ChatRole.USER, content="hi", timestamp=1),
        ChatTurn(role=ChatRole.ASSISTANT, content="hello", timestamp=2),
    ]
    history.save(turns)

    # Fresh store object on the same file.
    reopened = SqliteKeyValueStore(db)
    assert TaskStore(reopened.scoped("u1")).list_dicts() == tasks.list_dicts()
    assert ChatHistory(reopened.scoped("u1")).load() == turns


def test_namespaces_are_isolated(tmp_path: Path) -> None:
    kv = SqliteKeyValueStore(tmp_path / "kv.sqlite3")
    TaskStore(kv.scoped("alice")).add({"title": "alice task"})

    assert TaskStore(kv.scoped("bob")).list() == []
    assert [t.title for t in TaskStore(kv.scoped("alice")).list()] == ["alice task"]


def test_put_overwrites_value(tmp_path: Path) -> None:
    kv = SqliteKeyValueStore(tmp_path / "kv.sqlite3")
    kv.put("u1", "k", [1, 2])
    kv.put("u1", "k", {"a": "ü"})
    assert kv.get("u1", "k") == {"a": "ü"}
