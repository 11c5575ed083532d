"""
api/errors.py -- The error classifier: the only place failures become HTTP responses.

Stores, identifier parsing, and the auth pipeline raise core.errors.BlogError
subclasses. classify() maps each ErrorKind to a status code and the shared
ErrorResponse envelope:

    malformed_identifier  400
    validation_failure    400   message names the field
    duplicate_key         400   message names the field
    invalid_token         400   malformed / unverifiable / expired token
    unauthenticated       401   missing or unresolvable subject

FastAPI's own RequestValidationError (wrong JSON type, missing required key)
is folded into validation_failure so clients see one 400 shape for every
field problem.

Anything else is unclassified. classify() returns None for it and the generic
handler answers 500 with a fixed message; the traceback goes to the log only.

Usage:
    app = FastAPI()
    register_error_handlers(app)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import ErrorResponse
from core.errors import BlogError, ErrorKind, ValidationFailure

logger = logging.getLogger("bloglist.api")

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.MALFORMED_IDENTIFIER: 400,
    ErrorKind.VALIDATION_FAILURE: 400,
    ErrorKind.DUPLICATE_KEY: 400,
    ErrorKind.INVALID_TOKEN: 400,
    ErrorKind.UNAUTHENTICATED: 401,
}


@dataclass(frozen=True)
class Classification:
    status: int
    body: ErrorResponse


def validation_failure_from(exc: RequestValidationError) -> ValidationFailure:
    """Turn the first pydantic error into a ValidationFailure naming its field."""
    errors = exc.errors()
    if not errors:
        return ValidationFailure("body", "request body is invalid")
    first = errors[0]
    if first.get("type") == "json_invalid":
        return ValidationFailure("body", "request body is not valid JSON")
    parts = [str(p) for p in first.get("loc", ()) if p != "body"]
    field = ".".join(parts) or "body"
    return ValidationFailure(field, f"{field}: {first.get('msg', 'invalid value')}")


def classify(exc: Exception) -> Optional[Classification]:
    """Return the response for a classified failure, or None if exc is unclassified."""
    if isinstance(exc, RequestValidationError):
        exc = validation_failure_from(exc)
    if not isinstance(exc, BlogError):
        return None
    return Classification(
        status=STATUS_BY_KIND[exc.kind],
        body=ErrorResponse(error=exc.message, code=exc.kind.value),
    )


def _error_json(status: int, error: str, code: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content=ErrorResponse(error=error, code=code).model_dump(),
        headers=headers,
    )


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def classified_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle BlogError and RequestValidationError through classify()."""
    result = classify(exc)
    if result is None:
        # Registered only for classified types; reaching here is a wiring bug.
        raise exc
    logger.info(
        "%s %s -> %d %s: %s",
        request.method,
        request.url.path,
        result.status,
        result.body.code,
        result.body.error,
    )
    return JSONResponse(status_code=result.status, content=result.body.model_dump())


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Framework HTTP errors (unknown route, wrong method) in the same envelope."""
    if exc.status_code == 404:
        return _error_json(404, "unknown endpoint", "not_found")
    return _error_json(exc.status_code, str(exc.detail), f"http_{exc.status_code}", getattr(exc, "headers", None))


def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with Retry-After when a rate limit is exceeded.

    Must stay synchronous: SlowAPIMiddleware calls this handler directly
    without awaiting it.
    """
    retry_after = int(getattr(exc, "retry_after", 60))
    return _error_json(429, "too many requests", "rate_limited", {"Retry-After": str(retry_after)})


async def unclassified_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unexpected errors.

    The exception is logged with its traceback, never written to the response
    body. The client receives only a generic message.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_json(500, "an unexpected error occurred", "internal_error")


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BlogError, classified_error_handler)
    app.add_exception_handler(RequestValidationError, classified_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, unclassified_error_handler)
