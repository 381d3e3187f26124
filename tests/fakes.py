# tests/fakes.py

from __future__ import annotations

import threading
from typing import Any

from taskchat.core.ports import ChatMessage


class FakeCompletionClient:
    """
    Deterministic completion client for unit tests.

    - Captures calls for assertions
    - Returns a predefined value (string or any envelope object)
    """

    def __init__(self, response: Any = '{"reply": "ok", "action": "none"}') -> None:
        self.response = response
        self.calls: list[tuple[list[ChatMessage], float, int]] = []

    def complete(self, messages: list[ChatMessage], *, temperature: float, max_tokens: int) -> Any:
        self.calls.append((messages, temperature, max_tokens))
        return self.response


class FailingCompletionClient:
    """Raises on every call, like an unreachable service."""

    def __init__(self, exc: Exception | None = None) -> None:
        self.exc = exc or RuntimeError("LLM network/timeout error. Try again later or change models.")
        self.calls = 0

    def complete(self, messages: list[ChatMessage], *, temperature: float, max_tokens: int) -> Any:
        self.calls += 1
        raise self.exc


class BlockingCompletionClient:
    """Blocks until released; used to exercise the completion deadline."""

    def __init__(self) -> None:
        self.release = threading.Event()

    def complete(self, messages: list[ChatMessage], *, temperature: float, max_tokens: int) -> Any:
        self.release.wait(timeout=5.0)
        return '{"reply": "too late", "action": "none"}'
