# src/taskchat/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time (missing API key -> offline client).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

ENV_PREFIX = "TASKCHAT"

# Real environment variables always win over .env.
load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.replace(",", " ").split() if p.strip()]


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- LLM (OpenAI-compatible endpoint) ----
    openai_api_key: Optional[str]
    openai_base_url: str
    llm_models: List[str]
    extra_headers: Dict[str, str]
    llm_temperature: float
    llm_max_tokens: int
    llm_timeout_seconds: float
    llm_connect_timeout_seconds: float

    # ---- Chat history ----
    history_max_turns: int
    history_context_turns: int

    # ---- HTTP ----
    default_user_id: str
    http_host: str
    http_port: int
    cors_origins: List[str]

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    db_path: Path

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskchat") or "taskchat"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        openai_api_key = _first_env(_k("OPENAI_API_KEY"), "OPENAI_API_KEY", default=None)
        openai_base_url = _env(_k("OPENAI_BASE_URL"), "https://openrouter.ai/api/v1")

        extra_headers = {
            "HTTP-Referer": _env(_k("HTTP_REFERER"), "https://example.com"),
            "X-Title": _env(_k("APP_TITLE"), app_name),
        }

        llm_models = _env_list(
            _k("LLM_MODELS"),
            [
                "meta-llama/llama-3.3-70b-instruct",
                "qwen/qwen-2.5-72b-instruct",
            ],
        )

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskchat"))
        db_path = _env_path(_k("DB_PATH"), data_dir / "taskchat.sqlite3")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            openai_api_key=openai_api_key,
            openai_base_url=openai_base_url,
            llm_models=llm_models,
            extra_headers=extra_headers,
            llm_temperature=_env_float(_k("LLM_TEMPERATURE"), 0.5),
            llm_max_tokens=_env_int(_k("LLM_MAX_TOKENS"), 512),
            llm_timeout_seconds=_env_float(_k("LLM_TIMEOUT_SECONDS"), 30.0),
            llm_connect_timeout_seconds=_env_float(_k("LLM_CONNECT_TIMEOUT_SECONDS"), 5.0),
            history_max_turns=_env_int(_k("HISTORY_MAX_TURNS"), 50),
            history_context_turns=_env_int(_k("HISTORY_CONTEXT_TURNS"), 10),
            default_user_id=_env(_k("DEFAULT_USER_ID"), "demo-user") or "demo-user",
            http_host=_env(_k("HTTP_HOST"), "127.0.0.1"),
            http_port=_env_int(_k("HTTP_PORT"), 8000),
            cors_origins=_env_list(_k("CORS_ORIGINS"), ["*"]),
            data_dir=data_dir,
            db_path=db_path,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
