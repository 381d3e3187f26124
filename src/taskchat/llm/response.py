# src/taskchat/llm/response.py

"""
Reading text out of whatever a completion client returned.

Providers disagree on the envelope: some hand back a bare string, some wrap it
as {"response": ...}, {"result": {"response": ...}} or {"text": ...}, and the
OpenAI SDK returns a ChatCompletion object. read_completion() classifies the
value into one ResponseShape and never raises.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)


class ResponseShape(StrEnum):
    TEXT = "text"  # bare string
    RESPONSE_FIELD = "response"  # {"response": "..."}
    RESULT_RESPONSE = "result.response"  # {"result": {"response": "..."}}
    TEXT_FIELD = "text_field"  # {"text": "..."}
    CHAT_CHOICES = "choices"  # {"choices": [{"message": {"content": "..."}}]}
    UNKNOWN = "unknown"  # serialized as-is


@dataclass(frozen=True, slots=True)
class CompletionText:
    shape: ResponseShape
    text: str


def _field(obj: Any, name: str) -> Any:
    """Mapping key or attribute lookup, None when absent."""
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def _chat_choice_content(raw: Any) -> str | None:
    choices = _field(raw, "choices")
    if not isinstance(choices, (list, tuple)) or not choices:
        return None
    message = _field(choices[0], "message")
    content = _field(message, "content")
    return content if isinstance(content, str) else None


def _dump(raw: Any) -> str:
    try:
        return json.dumps(raw, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return str(raw)


def read_completion(raw: Any) -> CompletionText:
    if isinstance(raw, str):
        return CompletionText(ResponseShape.TEXT, raw)

    response = _field(raw, "response")
    if isinstance(response, str) and response:
        return CompletionText(ResponseShape.RESPONSE_FIELD, response)

    nested = _field(_field(raw, "result"), "response")
    if isinstance(nested, str) and nested:
        return CompletionText(ResponseShape.RESULT_RESPONSE, nested)

    text = _field(raw, "text")
    if isinstance(text, str) and text:
        return CompletionText(ResponseShape.TEXT_FIELD, text)

    content = _chat_choice_content(raw)
    if content:
        return CompletionText(ResponseShape.CHAT_CHOICES, content)

    logger.debug("Unrecognised completion shape: %s", type(raw).__name__)
    return CompletionText(ResponseShape.UNKNOWN, _dump(raw))
