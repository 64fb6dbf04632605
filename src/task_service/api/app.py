# src/task_service/api/app.py

"""
FastAPI application factory.

Error mapping (body is always {"error": "..."}):
- ValidationError, malformed request  -> 400
- NotFoundError, unknown route        -> 404
- StoreError, anything unexpected     -> 500, generic message; details go to the log only
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..core.errors import NotFoundError, StoreError, ValidationError
from ..core.state import AppState
from .routes import router

logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


def _error(status_code: int, message: str, details: list[dict[str, Any]] | None = None) -> JSONResponse:
    body: dict[str, Any] = {"error": message}
    if details:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)


def _describe_request_errors(exc: RequestValidationError) -> tuple[str, list[dict[str, Any]]]:
    details: list[dict[str, Any]] = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        details.append({"field": ".".join(loc) or None, "message": str(err.get("msg", ""))})
    if not details:
        return "Invalid request", details
    first = details[0]
    message = f"{first['field']}: {first['message']}" if first["field"] else first["message"]
    return message, details


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        logger.debug("Validation failed %s %s: %s", request.method, request.url.path, exc.message)
        return _error(400, exc.message)

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        message, details = _describe_request_errors(exc)
        logger.debug("Malformed request %s %s: %s", request.method, request.url.path, message)
        return _error(400, message, details)

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return _error(404, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(StoreError)
    async def _store_error(request: Request, exc: StoreError) -> JSONResponse:
        logger.error("Store failure on %s %s", request.method, request.url.path, exc_info=exc)
        return _error(500, UNEXPECTED_ERROR_MESSAGE)

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return _error(500, UNEXPECTED_ERROR_MESSAGE)


def create_app(state: AppState) -> FastAPI:
    """
    Build the HTTP app around an AppState.

    The state is composed by cli.bootstrap; the app only reads it.
    """
    app_name = str(getattr(state.settings, "app_name", "task-service"))
    app = FastAPI(
        title=app_name,
        description="CRUD API over tasks with filtering and pagination",
        version=API_VERSION,
    )
    app.state.app_state = state

    install_error_handlers(app)
    app.include_router(router)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "healthy", "service": app_name}

    return app
