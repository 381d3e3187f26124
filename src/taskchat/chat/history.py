# src/taskchat/chat/history.py

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from ..core.ports import ChatMessage, KeyValueStore

logger = logging.getLogger(__name__)

HISTORY_KEY = "chatHistory"


class ChatRole(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(slots=True)
class ChatTurn:
    role: ChatRole
    content: str
    timestamp: int  # epoch milliseconds

    def to_dict(self) -> dict[str, Any]:
        return {"role": str(self.role), "content": self.content, "timestamp": self.timestamp}

    def to_message(self) -> ChatMessage:
        return {"role": str(self.role), "content": self.content}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> ChatTurn:
        role_s = str(raw.get("role", "user"))
        role = ChatRole.ASSISTANT if role_s == ChatRole.ASSISTANT else ChatRole.USER
        try:
            ts = int(raw.get("timestamp") or 0)
        except (TypeError, ValueError):
            ts = 0
        return cls(role=role, content=str(raw.get("content", "")), timestamp=ts)


def trim_history(turns: list[ChatTurn], max_turns: int) -> list[ChatTurn]:
    """Keep the newest max_turns turns, oldest first."""
    if max_turns <= 0:
        return []
    if len(turns) <= max_turns:
        return turns
    overflow = len(turns) - max_turns
    logger.debug("History trimmed: dropped %d oldest turns", overflow)
    return turns[overflow:]


class ChatHistory:
    """Chat transcript for one user, persisted under the "chatHistory" key."""

    def __init__(self, store: KeyValueStore, *, max_turns: int = 50) -> None:
        self._store = store
        self.max_turns = max_turns

    def load(self) -> list[ChatTurn]:
        raw = self._store.get(HISTORY_KEY) or []
        if not isinstance(raw, list):
            logger.warning("Stored chat history is not a list; treating as empty.")
            return []
        return [ChatTurn.from_dict(m) for m in raw if isinstance(m, dict)]

    def save(self, turns: list[ChatTurn]) -> list[ChatTurn]:
        """Trim to max_turns and persist. Returns what was stored."""
        kept = trim_history(turns, self.max_turns)
        self._store.put(HISTORY_KEY, [t.to_dict() for t in kept])
        return kept

    def list_dicts(self) -> list[dict[str, Any]]:
        return [t.to_dict() for t in self.load()]
