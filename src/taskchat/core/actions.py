# src/taskchat/core/actions.py

"""
Action extraction: one user message + current tasks -> ProposedAction.

Two strategies, tried in order:
- model: ask the completion client for a JSON object and parse it tolerantly
  (code fences stripped, first balanced {...} taken);
- rules: deterministic keyword matching over the raw message.

extract_action() never raises. A failed call, a timeout, or output with no
parseable object all end up in rule_based_action(), which only does string
work over already-loaded tasks.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from ..llm.response import read_completion
from ..tasks.task_models import Task, TaskAction, TaskPriority, TaskStatus
from .ports import ChatMessage

logger = logging.getLogger(__name__)

DEFAULT_REPLY = "I processed your request."

_FENCE_RE = re.compile(r"```(?:json)?\n?", re.IGNORECASE)
_LEAD_IN_RE = re.compile(
    r"add a task to |create a task to |add task |create task |add |create ",
    re.IGNORECASE,
)


@dataclass(slots=True)
class ProposedAction:
    action: TaskAction
    reply: str
    task_data: dict[str, Any] | None = None
    source: str = "model"  # "model" | "rules"


# ---- prompt ----


def format_tasks_context(tasks: Sequence[Task]) -> str:
    if not tasks:
        return "No tasks yet."
    lines = ["Current tasks:"]
    for i, t in enumerate(tasks, start=1):
        lines.append(f"{i}. [{t.status}] {t.title} ({t.priority} priority) id={t.id}")
    return "\n".join(lines)


def build_system_prompt(tasks: Sequence[Task]) -> str:
    return f"""
You are a helpful task management assistant.

{format_tasks_context(tasks)}

Respond ONLY with a valid JSON object in this EXACT format (no markdown, no code blocks):
{{
  "reply": "your natural language response to the user",
  "action": "add",
  "taskData": {{
    "title": "task title here",
    "description": "task description",
    "priority": "high",
    "status": "pending"
  }}
}}

OR for queries:
{{
  "reply": "your response about their tasks",
  "action": "none"
}}

OR for updates and deletes (use the id shown in the task list above):
{{
  "reply": "I've updated the task",
  "action": "update",
  "taskData": {{
    "id": "task_id_from_list",
    "status": "completed"
  }}
}}

Rules:
- ALWAYS respond with valid JSON only, no other text
- "action" is one of: add, update, delete, none
- For "add": extract title, description, priority (high/medium/low)
- For "update": include the task id and only the fields that change
- For "delete": include the task id
- For queries: action should be "none"
- Default priority is "medium"
- Be conversational in the "reply" field
""".strip()


# ---- model output parsing ----


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text or "").strip()


def _balanced_end(text: str, start: int) -> int:
    """Index one past the brace closing text[start], or -1 if it never closes."""
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i + 1
    return -1


def find_json_object(text: str) -> str | None:
    """First balanced {...} substring (nested braces included), or None."""
    start = text.find("{")
    while start != -1:
        end = _balanced_end(text, start)
        if end != -1:
            return text[start:end]
        start = text.find("{", start + 1)
    return None


def parse_model_reply(text: str) -> ProposedAction | None:
    """
    Turn raw model text into a ProposedAction, or None when it holds no usable
    JSON object. Missing reply/action are defaulted; unknown actions become none.
    """
    candidate = find_json_object(strip_code_fences(text))
    if candidate is None:
        logger.info("Model output has no JSON object; falling back to rules.")
        return None

    try:
        parsed = json.loads(candidate)
    except (ValueError, RecursionError) as e:
        logger.info("Model output is not valid JSON (%s); falling back to rules.", e)
        return None

    if not isinstance(parsed, dict):
        return None

    reply = parsed.get("reply")
    if not isinstance(reply, str) or not reply.strip():
        reply = DEFAULT_REPLY

    task_data = parsed.get("taskData")
    if not isinstance(task_data, dict):
        task_data = None

    return ProposedAction(
        action=TaskAction.from_raw(parsed.get("action")),
        reply=reply,
        task_data=task_data,
        source="model",
    )


# ---- keyword fallback ----


def _infer_priority(lower: str) -> TaskPriority:
    if "high" in lower:
        return TaskPriority.HIGH
    if "low" in lower:
        return TaskPriority.LOW
    return TaskPriority.MEDIUM


def rule_based_action(message: str, tasks: Sequence[Task]) -> ProposedAction:
    lower = (message or "").lower()

    if "add" in lower or "create" in lower:
        title = _LEAD_IN_RE.sub("", message, count=1).strip() or "New Task"
        priority = _infer_priority(lower)
        return ProposedAction(
            action=TaskAction.ADD,
            reply=f'I\'ve created a {priority} priority task: "{title}"',
            task_data={
                "title": title,
                "description": "",
                "priority": str(priority),
                "status": str(TaskStatus.PENDING),
            },
            source="rules",
        )

    if "complete" in lower or "done" in lower or "finish" in lower:
        if not tasks:
            return ProposedAction(
                action=TaskAction.NONE,
                reply="You don't have any tasks to complete.",
                source="rules",
            )
        # Always the first task in the collection, not a title match.
        target = tasks[0]
        return ProposedAction(
            action=TaskAction.UPDATE,
            reply=f'I\'ve marked "{target.title}" as complete!',
            task_data={"id": target.id, "status": str(TaskStatus.COMPLETED)},
            source="rules",
        )

    if "what" in lower or "show" in lower or "list" in lower:
        if not tasks:
            return ProposedAction(
                action=TaskAction.NONE,
                reply="You don't have any tasks yet. Try saying 'Add a task to...'",
                source="rules",
            )
        listing = ", ".join(
            f"{i}. {t.title} ({t.priority}, {t.status})" for i, t in enumerate(tasks, start=1)
        )
        return ProposedAction(
            action=TaskAction.NONE,
            reply=f"You have {len(tasks)} task(s): {listing}",
            source="rules",
        )

    return ProposedAction(
        action=TaskAction.NONE,
        reply=(
            "I can help you add, complete, or view tasks. "
            "Try: 'Add a task to buy groceries' or 'What are my tasks?'"
        ),
        source="rules",
    )


# ---- entry point ----


def extract_action(
    message: str,
    tasks: Sequence[Task],
    context: Sequence[ChatMessage],
    call_model: Callable[[list[ChatMessage]], Any],
) -> ProposedAction:
    """
    Ask the model first; on any failure use the keyword rules.

    context is the recent conversation (already including the current user
    message), oldest first.
    """
    messages: list[ChatMessage] = [
        {"role": "system", "content": build_system_prompt(tasks)},
        *({"role": m["role"], "content": m["content"]} for m in context),
    ]

    try:
        raw = call_model(messages)
    except Exception as e:
        logger.warning("Completion call failed (%s: %s); using keyword rules.", e.__class__.__name__, e)
        return rule_based_action(message, tasks)

    completion = read_completion(raw)
    logger.debug("Completion shape=%s text=%r", completion.shape, completion.text[:500])

    proposed = parse_model_reply(completion.text)
    if proposed is None:
        return rule_based_action(message, tasks)
    return proposed
