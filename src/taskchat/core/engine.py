# src/taskchat/core/engine.py

"""
Per-user conversational task engine.

One engine instance wraps one user's task list and chat transcript. All public
operations hold the user's lock for their whole read-modify-write, so two
requests for the same user never interleave; different users never share
state or locks.

process_chat_message() always returns a success envelope: the completion call
is bounded by llm_timeout_seconds, and any call failure or unusable model
output is handled by the keyword rules in core/actions.py.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor
from typing import Any

from ..chat.history import ChatHistory, ChatRole, ChatTurn, now_ms
from ..tasks.task_models import TaskAction
from ..tasks.task_store import TaskStore
from .actions import ProposedAction, extract_action
from .ports import ChatMessage, CompletionClient

logger = logging.getLogger(__name__)


class ConversationalTaskEngine:
    def __init__(
        self,
        *,
        tasks: TaskStore,
        history: ChatHistory,
        llm: CompletionClient,
        settings: Any,
        lock: threading.RLock | None = None,
        executor: Executor | None = None,
    ) -> None:
        self.tasks = tasks
        self.history = history
        self._llm = llm
        self._settings = settings
        self._lock = lock or threading.RLock()
        self._executor = executor

    # ---- completion call ----

    def _call_model(self, messages: list[ChatMessage]) -> Any:
        s = self._settings
        temperature = float(getattr(s, "llm_temperature", 0.5))
        max_tokens = int(getattr(s, "llm_max_tokens", 512))
        timeout = float(getattr(s, "llm_timeout_seconds", 30.0))

        if self._executor is None or timeout <= 0:
            return self._llm.complete(messages, temperature=temperature, max_tokens=max_tokens)

        future = self._executor.submit(
            self._llm.complete, messages, temperature=temperature, max_tokens=max_tokens
        )
        try:
            return future.result(timeout=timeout)
        except TimeoutError:
            future.cancel()
            raise TimeoutError(f"Completion did not return within {timeout:.1f}s") from None

    # ---- tasks ----

    def list_tasks(self) -> list[dict[str, Any]]:
        with self._lock:
            return self.tasks.list_dicts()

    def mutate_tasks(self, action: TaskAction | str, payload: dict[str, Any] | None) -> list[dict[str, Any]]:
        with self._lock:
            return [t.to_dict() for t in self.tasks.apply(action, payload)]

    def list_or_mutate_tasks(
        self,
        action: TaskAction | str | None = None,
        payload: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """No action -> current list; otherwise apply it and return the new list."""
        if action is None:
            return self.list_tasks()
        return self.mutate_tasks(action, payload)

    # ---- chat ----

    def _apply_proposed(self, proposed: ProposedAction) -> None:
        if proposed.action is TaskAction.NONE or not proposed.task_data:
            return
        self.tasks.apply(proposed.action, proposed.task_data)

    def process_chat_message(self, message: str) -> dict[str, Any]:
        s = self._settings
        context_turns = int(getattr(s, "history_context_turns", 10))

        with self._lock:
            turns = self.history.load()
            current_tasks = self.tasks.list()

            turns.append(ChatTurn(role=ChatRole.USER, content=message, timestamp=now_ms()))
            context = [t.to_message() for t in turns[-context_turns:]] if context_turns > 0 else []

            proposed = extract_action(message, current_tasks, context, self._call_model)
            logger.info(
                "Chat action=%s source=%s has_task_data=%s",
                proposed.action,
                proposed.source,
                proposed.task_data is not None,
            )

            self._apply_proposed(proposed)

            turns.append(ChatTurn(role=ChatRole.ASSISTANT, content=proposed.reply, timestamp=now_ms()))
            self.history.save(turns)

            return {
                "reply": proposed.reply,
                "action": str(proposed.action),
                "tasks": self.tasks.list_dicts(),
            }

    # ---- history ----

    def get_history(self) -> list[dict[str, Any]]:
        with self._lock:
            return self.history.list_dicts()
