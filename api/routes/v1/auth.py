"""
api/routes/v1/auth.py -- Password login: exchanges credentials for a bearer token.

Routes:
  POST /api/v1/login  -- username + password -> signed token

Security:
  Rate-limited to 10 requests/minute per IP (brute-force mitigation) by the
  Limiter passed to build_router(), which create_app() builds per app.
  authenticate() provides timing equalization -- use it, never inline
  get_by_username() + verify().
  Cache-Control: no-store on the response, which carries a credential.
"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter

from api.limiter import LOGIN_RATE_LIMIT
from api.models import LoginRequest, LoginResponse
from auth.passwords import PasswordHasher, authenticate
from auth.store import AccountStore
from auth.tokens import TokenCodec
from core.errors import Unauthenticated


def build_router(limiter: Limiter) -> APIRouter:
    """Return the login router with its rate limit bound to *limiter*."""
    # Auth policy: public -- the login endpoint must be reachable unauthenticated.
    router = APIRouter()

    # The router must register the rate-limited wrapper, so @router.post goes on top.
    @router.post("/login", response_model=LoginResponse)
    @limiter.limit(LOGIN_RATE_LIMIT)
    def login(request: Request, body: LoginRequest) -> JSONResponse:
        """Authenticate with username and password and return a bearer token.

        Wrong username and wrong password produce the same 401 so the response
        does not reveal which usernames exist.
        """
        accounts: AccountStore = request.app.state.accounts
        hasher: PasswordHasher = request.app.state.hasher
        codec: TokenCodec = request.app.state.token_codec

        account = authenticate(accounts, hasher, body.username, body.password)
        if account is None:
            raise Unauthenticated("invalid username or password")

        token = codec.issue(account.id, username=account.username)
        resp = JSONResponse(
            status_code=200,
            content=LoginResponse(
                token=token,
                token_type="bearer",  # noqa: S106 # nosec B106 -- OAuth token type, not a password
                expires_in=codec.expire_seconds,
                username=account.username,
                display_name=account.display_name,
            ).model_dump(),
        )
        resp.headers["Cache-Control"] = "no-store"
        return resp

    return router
