# src/taskchat/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage/LLM providers swappable and makes testing easier.
"""

from typing import Any, Protocol

ChatMessage = dict[str, str]
# OpenAI-style chat messages: {"role": "...", "content": "..."}.


class KeyValueStore(Protocol):
    """
    Durable store scoped to one user key.

    Values are JSON-compatible (lists/dicts/str/numbers). Absent keys return None.
    """

    def get(self, key: str) -> Any | None: ...
    def put(self, key: str, value: Any) -> None: ...


class CompletionClient(Protocol):
    """
    Non-streaming chat completion.

    The return value is deliberately untyped: it may be a bare string or any
    envelope object; see llm/response.py for how text is read out of it.
    """

    def complete(
            self,
            messages: list[ChatMessage],
            *,
            temperature: float,
            max_tokens: int,
    ) -> Any: ...
