"""
auth/pipeline.py -- Per-request bearer authentication as an ordered list of stages.

States:
    NO_TOKEN -> TOKEN_PRESENT -> DECODED -> IDENTITY_RESOLVED
    any stage may instead produce REJECTED

Each stage takes an AuthOutcome and returns the next one. run() applies the
stages in order and stops at the first outcome that is not meant to go on
(REJECTED, or NO_TOKEN -- absence is not an error at this layer; the route
dependency decides what absence means).

Rejection kinds:
    decode failure (malformed / bad signature / expired)  -> InvalidToken    (400)
    claims without a non-empty `sub`                      -> Unauthenticated (401)
    `sub` that names no account, or is not an id at all   -> Unauthenticated (401)

The last two share one message so a client cannot tell "bad id format" from
"no such account".

Layer rule: no imports from api/ or posts/. No FastAPI imports -- this module
works on the raw header value so it can be exercised without an app.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from auth.models import Account
from auth.store import AccountStore
from auth.tokens import DecodeFailure, TokenCodec
from core.errors import BlogError, InvalidToken, MalformedIdentifier, Unauthenticated

logger = logging.getLogger("bloglist.auth")

BEARER_PREFIX = "Bearer "


class AuthState(str, Enum):
    NO_TOKEN = "no_token"
    TOKEN_PRESENT = "token_present"
    DECODED = "decoded"
    IDENTITY_RESOLVED = "identity_resolved"
    REJECTED = "rejected"


@dataclass(frozen=True)
class AuthOutcome:
    """Where a request stands in the pipeline, plus whatever it has gathered so far."""

    state: AuthState
    token: Optional[str] = None
    claims: Optional[dict] = None
    account: Optional[Account] = None
    rejection: Optional[BlogError] = None

    @property
    def finished(self) -> bool:
        return self.state in (AuthState.NO_TOKEN, AuthState.REJECTED, AuthState.IDENTITY_RESOLVED)


def _reject(outcome: AuthOutcome, error: BlogError) -> AuthOutcome:
    return replace(outcome, state=AuthState.REJECTED, rejection=error)


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------


def extract_token(authorization: Optional[str]) -> AuthOutcome:
    """Stage 1: pull the token out of an `Authorization: Bearer <token>` header."""
    if authorization and authorization.startswith(BEARER_PREFIX):
        token = authorization[len(BEARER_PREFIX) :].strip()
        if token:
            return AuthOutcome(state=AuthState.TOKEN_PRESENT, token=token)
    return AuthOutcome(state=AuthState.NO_TOKEN)


def decode_token(outcome: AuthOutcome, codec: TokenCodec) -> AuthOutcome:
    """Stage 2: verify the signature and expiry."""
    result = codec.decode(outcome.token)
    if isinstance(result, DecodeFailure):
        logger.info("Rejected bearer token (%s)", result.kind.value)
        return _reject(outcome, InvalidToken(result.kind.value.replace("_", " ")))
    return replace(outcome, state=AuthState.DECODED, claims=result)


def validate_claims(outcome: AuthOutcome) -> AuthOutcome:
    """Stage 3: the claims must name a subject."""
    subject = outcome.claims.get("sub")
    if not isinstance(subject, str) or not subject:
        logger.info("Rejected bearer token without subject claim")
        return _reject(outcome, Unauthenticated())
    return outcome


def resolve_identity(outcome: AuthOutcome, accounts: AccountStore) -> AuthOutcome:
    """Stage 4: load the account the token was issued for."""
    try:
        account = accounts.find_by_id(outcome.claims["sub"])
    except MalformedIdentifier:
        account = None
    if account is None:
        logger.info("Rejected bearer token for unknown subject")
        return _reject(outcome, Unauthenticated())
    return replace(outcome, state=AuthState.IDENTITY_RESOLVED, account=account)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class AuthPipeline:
    """Runs the stages above against one header value.

    Usage:
        pipeline = AuthPipeline(codec, account_store)
        outcome = pipeline.run(request.headers.get("Authorization"))
    """

    def __init__(self, codec: TokenCodec, accounts: AccountStore) -> None:
        self.codec = codec
        self.accounts = accounts
        self.stages: tuple[Callable[[AuthOutcome], AuthOutcome], ...] = (
            lambda o: decode_token(o, self.codec),
            validate_claims,
            lambda o: resolve_identity(o, self.accounts),
        )

    def run(self, authorization: Optional[str]) -> AuthOutcome:
        outcome = extract_token(authorization)
        for stage in self.stages:
            if outcome.finished:
                break
            outcome = stage(outcome)
        return outcome
