# src/taskchat/core/state.py

from __future__ import annotations

import threading
import weakref
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from ..chat.history import ChatHistory
from ..storage.kv_store import MemoryKeyValueStore, SqliteKeyValueStore
from ..tasks.task_store import TaskStore
from .engine import ConversationalTaskEngine
from .ports import CompletionClient


@dataclass
class AppState:
    """
    Composition object shared by the HTTP layer and the console.

    Holds one lock per user key: every engine handed out for that key shares it,
    so a user's operations are serialized no matter which thread serves them.
    Locks are weakly held; an entry disappears once no engine for that key is alive.
    """

    settings: Any
    llm: CompletionClient
    kv: SqliteKeyValueStore | MemoryKeyValueStore

    executor: ThreadPoolExecutor = field(
        default_factory=lambda: ThreadPoolExecutor(max_workers=8, thread_name_prefix="taskchat-llm")
    )
    _user_locks: weakref.WeakValueDictionary[str, Any] = field(default_factory=weakref.WeakValueDictionary)
    _user_locks_guard: threading.Lock = field(default_factory=threading.Lock)

    def lock_for(self, user_key: str) -> threading.RLock:
        with self._user_locks_guard:
            lock = self._user_locks.get(user_key)
            if lock is None:
                lock = threading.RLock()
                self._user_locks[user_key] = lock
            return lock

    def engine_for(self, user_key: str) -> ConversationalTaskEngine:
        scoped = self.kv.scoped(user_key)
        max_turns = int(getattr(self.settings, "history_max_turns", 50))
        return ConversationalTaskEngine(
            tasks=TaskStore(scoped),
            history=ChatHistory(scoped, max_turns=max_turns),
            llm=self.llm,
            settings=self.settings,
            lock=self.lock_for(user_key),
            executor=self.executor,
        )

    def close(self) -> None:
        self.executor.shutdown(wait=False, cancel_futures=True)
        if isinstance(self.kv, SqliteKeyValueStore):
            self.kv.close()
