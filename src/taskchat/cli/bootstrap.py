# src/taskchat/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (completion client, storage).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import CompletionClient
from ..core.state import AppState
from ..llm.client import OpenAICompletionClient, friendly_llm_error_message
from ..llm.offline import OfflineCompletionClient
from ..storage.kv_store import SqliteKeyValueStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    llm_client: CompletionClient
    try:
        llm_client = OpenAICompletionClient(settings)
    except RuntimeError as e:
        # Local runs without an API key: keyword rules handle every message.
        logger.warning("%s Using offline completion client.", friendly_llm_error_message(e))
        llm_client = OfflineCompletionClient()

    return AppState(
        settings=settings,
        llm=llm_client,
        kv=SqliteKeyValueStore(settings.db_path),
    )
