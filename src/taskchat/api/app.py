# src/taskchat/api/app.py

"""FastAPI HTTP layer: thin routing over per-user ConversationalTaskEngine."""

from __future__ import annotations

import logging
from typing import Any, Literal, Optional

from fastapi import FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..core.engine import ConversationalTaskEngine
from ..core.state import AppState

logger = logging.getLogger(__name__)

USER_HEADER = "X-User-Id"
ALLOWED_METHODS = ["GET", "POST", "OPTIONS"]
ALLOWED_HEADERS = ["Content-Type", USER_HEADER]


class TaskMutationRequest(BaseModel):
    """Body of POST /tasks. Extra task fields are passed through to the store."""

    model_config = ConfigDict(extra="allow")

    action: Literal["add", "update", "delete"]
    id: Optional[str | int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    updates: Optional[dict[str, Any]] = None


class ChatRequest(BaseModel):
    message: str = Field(..., description="The user's latest message")


class ChatResponse(BaseModel):
    reply: str
    action: str
    tasks: list[dict[str, Any]]


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(state: AppState) -> FastAPI:
    """Create and configure the FastAPI application around an AppState.

    Args:
        state: Composition root (settings, completion client, storage).

    Returns:
        Configured FastAPI app.
    """
    settings = state.settings
    default_user = str(getattr(settings, "default_user_id", "demo-user"))
    origins = list(getattr(settings, "cors_origins", ["*"]))

    app = FastAPI(
        title=str(getattr(settings, "app_name", "taskchat")),
        description="Task list manager with a conversational front-end",
        version="0.1.0",
    )
    app.state.taskchat = state

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_methods=ALLOWED_METHODS,
        allow_headers=ALLOWED_HEADERS,
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            return _error(404, "Not found")
        if exc.status_code == 405:
            return _error(405, "Method not allowed")
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        msg = first.get("msg", "Invalid request")
        return _error(400, f"{where}: {msg}" if where else msg)

    @app.exception_handler(Exception)
    async def internal_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(500, str(exc) or exc.__class__.__name__)

    def _engine(user_id: Optional[str]) -> ConversationalTaskEngine:
        key = (user_id or "").strip() or default_user
        return state.engine_for(key)

    @app.get("/tasks")
    def list_tasks(x_user_id: Optional[str] = Header(default=None, alias=USER_HEADER)) -> list[dict[str, Any]]:
        return _engine(x_user_id).list_or_mutate_tasks()

    @app.post("/tasks")
    def mutate_tasks(
        body: TaskMutationRequest,
        x_user_id: Optional[str] = Header(default=None, alias=USER_HEADER),
    ) -> list[dict[str, Any]]:
        payload = body.model_dump(exclude={"action"}, exclude_none=True)
        return _engine(x_user_id).list_or_mutate_tasks(body.action, payload)

    @app.post("/chat")
    def chat(
        body: ChatRequest,
        x_user_id: Optional[str] = Header(default=None, alias=USER_HEADER),
    ) -> ChatResponse:
        result = _engine(x_user_id).process_chat_message(body.message)
        return ChatResponse(**result)

    @app.get("/history")
    def history(x_user_id: Optional[str] = Header(default=None, alias=USER_HEADER)) -> list[dict[str, Any]]:
        return _engine(x_user_id).get_history()

    # CORSMiddleware only answers OPTIONS that carry Origin and
    # Access-Control-Request-Method; anything else lands on these routes.
    def preflight() -> Response:
        return Response(
            status_code=200,
            headers={
                "Access-Control-Allow-Origin": origins[0] if len(origins) == 1 else "*",
                "Access-Control-Allow-Methods": ", ".join(ALLOWED_METHODS),
                "Access-Control-Allow-Headers": ", ".join(ALLOWED_HEADERS),
            },
        )

    for path in ("/tasks", "/chat", "/history"):
        app.add_api_route(path, preflight, methods=["OPTIONS"], include_in_schema=False)

    return app
