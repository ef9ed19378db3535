"""
Error response shaping.

Every error leaves the API as a flat {"error": "<message>"} body. Internal
details are logged server-side and never returned to the client.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.structured_logging import request_log_context

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


def error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def _field_name(loc: tuple) -> str:
    # Drop the "body"/"query" source prefix
    parts = [str(p) for p in loc[1:]] if len(loc) > 1 else [str(p) for p in loc]
    return ".".join(parts)


def _is_missing(err: dict) -> bool:
    if len(err.get("loc", ())) < 2:
        return False
    # Blank strings count as missing for required text fields
    value = err.get("input")
    return err.get("type") == "missing" or (
        err.get("type") == "string_too_short" and isinstance(value, str) and not value.strip()
    )


def format_validation_error(exc: RequestValidationError) -> str:
    """Collapse pydantic errors into one client-facing message."""
    errors = exc.errors()
    missing = [_field_name(tuple(err["loc"])) for err in errors if _is_missing(err)]
    if missing:
        return f"Required fields: {', '.join(missing)}"
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = _field_name(tuple(first.get("loc", ())))
    if first.get("type") in ("json_invalid", "model_attributes_type", "dict_type") or not field:
        return "Invalid request: malformed body"
    return f"Invalid request: {field}: {first.get('msg')}"


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 405:
        message = "Method not allowed"
    else:
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(400, format_validation_error(exc))


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """Convert uncaught exceptions into a masked 500 response."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception:
            logger.exception("Unhandled error", extra=request_log_context(request))
            return error_response(500, INTERNAL_ERROR_MESSAGE)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
