from __future__ import annotations

import sqlite3

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .log import get_logger

logger = get_logger(__name__)


def error_response(status: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status)


REQUIRED_ERROR_TYPES = {"missing", "string_too_short"}


def describe_validation_errors(errors: list[dict]) -> str:
    if any(e.get("type") == "json_invalid" for e in errors):
        return "request body is not valid JSON"

    missing: list[str] = []
    invalid: list[str] = []
    for e in errors:
        loc = [str(p) for p in e.get("loc", ()) if p != "body"]
        name = loc[0] if loc else "body"
        bucket = missing if e.get("type") in REQUIRED_ERROR_TYPES else invalid
        if name not in missing and name not in invalid:
            bucket.append(name)

    parts = []
    if missing:
        parts.append(f"{', '.join(missing)} {'is' if len(missing) == 1 else 'are'} required")
    if invalid:
        parts.append(f"{', '.join(invalid)} {'is' if len(invalid) == 1 else 'are'} invalid")
    return "; ".join(parts) or "invalid request"


def make_exception_handlers():
    async def http_exc_handler(request: Request, exc: StarletteHTTPException):
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return error_response(exc.status_code, detail or "HTTP error")

    async def validation_exc_handler(request: Request, exc: RequestValidationError):
        message = describe_validation_errors(list(exc.errors()))
        logger.info("rejected %s %s: %s", request.method, request.url.path, message)
        return error_response(400, message)

    async def store_exc_handler(request: Request, exc: sqlite3.Error):
        logger.exception("store error on %s %s", request.method, request.url.path, exc_info=exc)
        return error_response(500, str(exc))

    return {
        StarletteHTTPException: http_exc_handler,
        RequestValidationError: validation_exc_handler,
        sqlite3.Error: store_exc_handler,
    }
