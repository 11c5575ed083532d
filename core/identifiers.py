"""
core/identifiers.py -- Opaque record identifiers.

Ids are 24 lowercase hex characters (96 random bits from secrets.token_hex),
assigned by the stores on insert. Anything else reaching a store is a
MalformedIdentifier, reported separately from "not found".
"""

import re
import secrets

from core.errors import MalformedIdentifier

_ID_RE = re.compile(r"[0-9a-f]{24}")


def new_id() -> str:
    return secrets.token_hex(12)


def is_valid_id(value: object) -> bool:
    return isinstance(value, str) and _ID_RE.fullmatch(value) is not None


def require_valid_id(value: object) -> str:
    """Return value unchanged, or raise MalformedIdentifier."""
    if not is_valid_id(value):
        raise MalformedIdentifier()
    return value
