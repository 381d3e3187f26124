# src/taskchat/cli/console.py

from __future__ import annotations

import logging
from datetime import datetime

from ..core.state import AppState
from .commands import registry as command_registry

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def run_console_loop(state: AppState, user_id: str) -> None:
    engine = state.engine_for(user_id)
    app_name = str(getattr(state.settings, "app_name", "taskchat"))

    logger.info("Console started for user=%s.", user_id)
    _print_ts("[CONSOLE] Type your messages. Use /help for commands. Use /exit to quit.\n")

    while True:
        try:
            user_input = input(">>> You: ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            break

        try:
            cmd_response = command_registry.handle(engine, user_input)
        except Exception:
            logger.exception("Command handler crashed.")
            cmd_response = "Internal error while handling a command."

        if cmd_response is not None:
            _print_ts(cmd_response)
            continue

        try:
            result = engine.process_chat_message(user_input)
        except Exception:
            logger.exception("Console chat handler crashed.")
            _print_ts("Internal error while generating a reply.")
            continue

        _print_ts(f"<<< {app_name}: {result['reply']}")
        if result["action"] != "none":
            _print_ts(f"[{result['action']}] {len(result['tasks'])} task(s) now.")
        print()

    logger.info("Console finished.")
