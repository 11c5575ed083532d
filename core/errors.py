"""
core/errors.py -- Failure taxonomy shared by the stores and the auth pipeline.

Failures are raised as typed exceptions at the point closest to their origin
(identifier parsing, store constraint checks, token verification) and carried
unchanged up to api/errors.py, the only place that turns them into HTTP
responses. Each subclass pins one ErrorKind; the classifier maps kinds to
status codes.

Anything that is not a BlogError is "unclassified" and goes to the generic
500 handler.

Layer rule: core/ is the kernel. No imports from api/, auth/, or posts/.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Machine-readable failure kinds. Values are sent to clients as `code`."""

    MALFORMED_IDENTIFIER = "malformed_identifier"
    VALIDATION_FAILURE = "validation_failure"
    DUPLICATE_KEY = "duplicate_key"
    INVALID_TOKEN = "invalid_token"
    UNAUTHENTICATED = "unauthenticated"


class BlogError(Exception):
    """Base class for every classified failure.

    message is client-facing: it must describe the violated rule and never
    contain internal diagnostics (SQL, tracebacks, secrets).
    """

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MalformedIdentifier(BlogError):
    """An identifier does not match the store's id format."""

    kind = ErrorKind.MALFORMED_IDENTIFIER

    def __init__(self, message: str = "malformatted id") -> None:
        super().__init__(message)


class ValidationFailure(BlogError):
    """A field constraint was violated. The message names the field."""

    kind = ErrorKind.VALIDATION_FAILURE

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class DuplicateKey(BlogError):
    """A uniqueness rule rejected the write."""

    kind = ErrorKind.DUPLICATE_KEY

    def __init__(self, field: str) -> None:
        super().__init__(f"expected `{field}` to be unique")
        self.field = field


class InvalidToken(BlogError):
    """The bearer token is malformed, tampered with, signed with another key, or expired."""

    kind = ErrorKind.INVALID_TOKEN

    def __init__(self, reason: str = "") -> None:
        message = "token missing or invalid"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.reason = reason


class Unauthenticated(BlogError):
    """The request did not establish an identity."""

    kind = ErrorKind.UNAUTHENTICATED

    def __init__(self, message: str = "token invalid") -> None:
        super().__init__(message)
