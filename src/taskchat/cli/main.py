# src/taskchat/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs one of:
- server: the HTTP API under uvicorn,
- chat: an interactive console for a single user key.
"""

from __future__ import annotations

import argparse
import logging

from ..config import get_settings
from ..logging_setup import setup_logging
from .bootstrap import create_initial_state

logger = logging.getLogger(__name__)


def _server(args: argparse.Namespace, state) -> int:
    import uvicorn

    from ..api.app import create_app

    app = create_app(state)
    logger.info("Serving on http://%s:%s", args.host, args.port)
    uvicorn.run(app, host=args.host, port=args.port, log_config=None)
    return 0


def _chat(args: argparse.Namespace, state) -> int:
    from .console import run_console_loop

    run_console_loop(state, args.user or state.settings.default_user_id)
    return 0


def build_parser(settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="taskchat", description="Conversational task list manager")
    subparsers = parser.add_subparsers(dest="command", required=True)

    server = subparsers.add_parser("server", help="Start the HTTP API")
    server.add_argument("--host", default=settings.http_host)
    server.add_argument("--port", default=settings.http_port, type=int)
    server.set_defaults(func=_server)

    chat = subparsers.add_parser("chat", help="Chat with your task list in the terminal")
    chat.add_argument("--user", default=None, help="User key (default: TASKCHAT_DEFAULT_USER_ID)")
    chat.set_defaults(func=_chat)

    return parser


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    args = build_parser(settings).parse_args(argv)

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s (%s)...", settings.app_name, args.command)
    state = create_initial_state(settings=settings)
    try:
        return args.func(args, state)
    finally:
        state.close()
        logger.info("Bye.")


if __name__ == "__main__":
    raise SystemExit(main())
