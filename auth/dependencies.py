"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

require_account() runs the AuthPipeline (built at startup and stored on
app.state) against the Authorization header and either returns the acting
Account or raises the classified failure. api/errors.py turns the failure into
a response; nothing here shapes a response body.

Layer rule: no imports from api/ or posts/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Request

from auth.models import Account
from auth.pipeline import AuthPipeline, AuthState
from core.errors import Unauthenticated


def require_account(request: Request) -> Account:
    """Require a valid bearer token naming an existing account.

    Raises:
        Unauthenticated: no token, no subject, or unknown subject (401).
        InvalidToken:    malformed, tampered, or expired token (400).

    On success the account is also attached to request.state.account.

    Use as a FastAPI dependency:
        @router.post("/posts")
        def route(account: Account = Depends(require_account)): ...
    """
    pipeline: AuthPipeline = request.app.state.auth_pipeline
    outcome = pipeline.run(request.headers.get("Authorization"))
    if outcome.state is AuthState.NO_TOKEN:
        raise Unauthenticated("authentication required")
    if outcome.state is AuthState.REJECTED:
        raise outcome.rejection
    request.state.account = outcome.account
    return outcome.account
