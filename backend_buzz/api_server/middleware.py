"""
HTTP middleware and error mapping.

- Request logging with timing.
- BuzzError -> its status and {"success": false, "message", "code"}.
- Pydantic request validation -> 400 with the same envelope.
- Anything else -> logged, generic 500. No rollback is needed here: the store
  already restored its in-memory state when the transaction failed.
"""

from __future__ import annotations

import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from backend_buzz.buzz_logging import get_logger
from backend_buzz.core.exceptions import BuzzError, StorageError

logger = get_logger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    path = tuple(first.get("loc", ()))
    loc = ".".join(str(p) for p in path if p != "body")
    if first.get("type") in ("union_tag_invalid", "union_tag_not_found"):
        return "Invalid action"
    if first.get("type") == "literal_error" and path and path[-1] == "action":
        return "Invalid action"
    return f"{loc}: {first.get('msg')}" if loc else str(first.get("msg"))


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(BuzzError)
    async def _buzz_error(request: Request, exc: BuzzError) -> JSONResponse:
        if isinstance(exc, StorageError):
            logger.error("api_storage_error", path=request.url.path, error=exc.message)
            return JSONResponse(
                status_code=500,
                content={"success": False, "message": "Database error occurred", "code": exc.code},
            )
        logger.info("api_request_rejected", path=request.url.path, code=exc.code, status=exc.status_code)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def _invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        message = _validation_message(exc)
        logger.info("api_request_invalid", path=request.url.path, detail=message)
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": message, "code": "validation_error"},
        )

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("api_unhandled_error", path=request.url.path, error=str(exc))
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Internal server error", "code": "internal_error"},
        )


def install_request_logging(app: FastAPI) -> None:
    @app.middleware("http")
    async def _log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "api_request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return response
