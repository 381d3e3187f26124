# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskchat.core.state import AppState
from taskchat.storage.kv_store import MemoryKeyValueStore, SqliteKeyValueStore

from .fakes import FailingCompletionClient


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and core modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskchat-test",
        data_dir=tmp_path,
        db_path=tmp_path / "taskchat.sqlite3",
        llm_temperature=0.5,
        llm_max_tokens=512,
        llm_timeout_seconds=2.0,
        history_max_turns=50,
        history_context_turns=10,
        default_user_id="demo-user",
        cors_origins=["*"],
    )


@pytest.fixture()
def memory_kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def sqlite_kv(settings: SimpleNamespace) -> SqliteKeyValueStore:
    return SqliteKeyValueStore(settings.db_path)


@pytest.fixture()
def make_state(settings: SimpleNamespace, sqlite_kv: SqliteKeyValueStore):
    """
    Build an AppState around a given completion client.

    NOTE: We keep the real SQLite store here because persistence is part of
    what we want to test.
    """
    created: list[AppState] = []

    def _make(llm=None) -> AppState:
        state = AppState(settings=settings, llm=llm or FailingCompletionClient(), kv=sqlite_kv)
        created.append(state)
        return state

    yield _make

    for s in created:
        s.close()
