# tests/test_commands.py

from __future__ import annotations

from taskchat.cli.commands import CommandRegistry, registry

from .fakes import FailingCompletionClient


def test_command_registry_routes_and_aliases(make_state) -> None:
    engine = make_state(FailingCompletionClient()).engine_for("u1")
    reg = CommandRegistry()
    seen: list[list[str]] = []

    def handler(_engine, args):
        seen.append(args)
        return "ok"

    reg.register("ping", handler, "ping", aliases=["p"])

    assert reg.handle(engine, "/ping a b") == "ok"
    assert reg.handle(engine, "/P") == "ok"
    assert seen == [["a", "b"], []]


def test_command_registry_unknown_and_non_command(make_state) -> None:
    engine = make_state(FailingCompletionClient()).engine_for("u1")
    reg = CommandRegistry()
    assert reg.handle(engine, "hello") is None
    assert "Unknown command" in (reg.handle(engine, "/nope") or "")


def test_builtin_tasks_and_history_commands(make_state) -> None:
    engine = make_state(FailingCompletionClient()).engine_for("u1")
    assert registry.handle(engine, "/tasks") == "No tasks yet."
    assert registry.handle(engine, "/history") == "History is empty."

    engine.process_chat_message("Add a task to buy milk")

    assert "buy milk" in (registry.handle(engine, "/tasks") or "")
    out = registry.handle(engine, "/history 1") or ""
    assert "Last 1 of 2 turns" in out
    assert "assistant:" in out
    assert "/tasks" in (registry.handle(engine, "/help") or "")
