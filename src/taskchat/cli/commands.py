# src/taskchat/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..core.engine import ConversationalTaskEngine

CommandHandler = Callable[[ConversationalTaskEngine, list[str]], str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /tasks, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, engine: ConversationalTaskEngine, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return handler(engine, parts[1:])

    def help_text(self) -> str:
        lines = ["Available commands:"]
        for name in sorted(self._help):
            lines.append(f"/{name} - {self._help[name]}")
        lines.append("/exit - quit")
        return "\n".join(lines)


registry = CommandRegistry()


def _cmd_help(_engine: ConversationalTaskEngine, _args: list[str]) -> str:
    return registry.help_text()


def _cmd_tasks(engine: ConversationalTaskEngine, _args: list[str]) -> str:
    tasks = engine.list_tasks()
    if not tasks:
        return "No tasks yet."
    lines = [f"Tasks ({len(tasks)}):"]
    for i, t in enumerate(tasks, start=1):
        lines.append(f"{i}. [{t['status']}] {t['title']} ({t['priority']}) id={t['id']}")
    return "\n".join(lines)


def _cmd_history(engine: ConversationalTaskEngine, args: list[str]) -> str:
    turns = engine.get_history()
    if not turns:
        return "History is empty."

    limit = 10
    if args:
        try:
            limit = max(1, int(args[0]))
        except ValueError:
            return "Usage: /history [N]"

    lines = [f"Last {min(limit, len(turns))} of {len(turns)} turns:"]
    for t in turns[-limit:]:
        ts = datetime.fromtimestamp(t["timestamp"] / 1000).strftime("%H:%M:%S")
        lines.append(f"[{ts}] {t['role']}: {t['content']}")
    return "\n".join(lines)


registry.register("help", _cmd_help, "show this help", aliases=["h", "?"])
registry.register("tasks", _cmd_tasks, "list current tasks", aliases=["t"])
registry.register("history", _cmd_history, "show recent chat turns: /history [N]")
