# src/taskchat/llm/offline.py

from __future__ import annotations

from ..core.ports import ChatMessage

OFFLINE_TEXT = (
    "Offline mode: no external LLM is configured. "
    "Set TASKCHAT_OPENAI_API_KEY (and TASKCHAT_LLM_MODELS) to enable model replies."
)


class OfflineCompletionClient:
    """
    Offline deterministic client used when no external API is configured.

    It answers with fixed prose (no JSON object, and never echoes user text that
    might contain one), so every chat message is handled by the keyword-based
    fallback in core/actions.py.
    """

    def complete(
            self,
            messages: list[ChatMessage],
            *,
            temperature: float,
            max_tokens: int,
    ) -> str:
        return OFFLINE_TEXT
