"""
api/main.py -- FastAPI application factory for the bloglist API.

Run with:      uvicorn asgi:app --reload

create_app(settings) receives the Settings object built once by the entry
point and hands it, by reference, to everything that needs configuration:
the password hasher, the token codec, and (in lifespan) the stores. Nothing
below reads configuration from the environment itself.

Middleware stack (outermost to innermost; Starlette wraps the last one
registered around the others):
  1. log_requests        -- one access-log line per request
  2. SlowAPIMiddleware   -- enforces per-route rate limits from app.state.limiter
  3. CORSMiddleware      -- adds CORS headers for allowed browser origins

Lifespan handles startup (stores, auth pipeline) and shutdown (engine
disposal) symmetrically.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi.middleware import SlowAPIMiddleware

from api.errors import register_error_handlers
from api.limiter import make_limiter
from api.models import HealthResponse
from api.routes.v1.accounts import router as accounts_router
from api.routes.v1.auth import build_router as build_auth_router
from api.routes.v1.posts import router as posts_router
from auth.passwords import PasswordHasher
from auth.pipeline import AuthPipeline
from auth.store import AccountStore
from auth.tokens import TokenCodec
from core.config import Settings
from posts.store import PostStore

VERSION = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("bloglist.api")


# ---------------------------------------------------------------------------
# Lifespan -- startup / shutdown
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the stores on startup and dispose of their engines on shutdown.

    Startup order matters:
      1. AccountStore first -- PostStore and the auth pipeline both use it.
      2. PostStore second.
      3. AuthPipeline last -- binds the codec to the account store.
    """
    settings: Settings = app.state.settings
    logger.info("Bloglist API starting up")
    app.state.accounts = AccountStore(app.state.hasher, settings.database_url)
    app.state.posts = PostStore(app.state.accounts, settings.database_url)
    app.state.auth_pipeline = AuthPipeline(app.state.token_codec, app.state.accounts)
    logger.info("Stores initialized (%d accounts, %d posts)", app.state.accounts.count(), app.state.posts.count())

    yield

    app.state.posts.close()
    app.state.accounts.close()
    logger.info("Bloglist API shutdown complete")


# ---------------------------------------------------------------------------
# Request logging middleware
#
# Method, path, status, and latency only. Bodies are never logged: account
# and login requests carry plaintext passwords.
# ---------------------------------------------------------------------------


async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def create_app(settings: Settings) -> FastAPI:
    """Build the ASGI app for the given configuration."""
    app = FastAPI(
        title="Bloglist API",
        description="Accounts and link posts with bearer-token authentication.",
        version=VERSION,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    app.state.token_codec = TokenCodec.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=3600,
    )
    app.add_middleware(SlowAPIMiddleware)
    app.middleware("http")(log_requests)

    # SlowAPI looks for app.state.limiter by convention. One per app, so
    # counters and the on/off switch are never shared between apps.
    limiter = make_limiter(settings)
    app.state.limiter = limiter

    register_error_handlers(app)

    app.include_router(accounts_router, prefix="/api/v1", tags=["Accounts"])
    app.include_router(build_auth_router(limiter), prefix="/api/v1", tags=["Auth"])
    app.include_router(posts_router, prefix="/api/v1", tags=["Posts"])

    # Defined here (not in a router) so it is always reachable. No rate
    # limit: health checks from load balancers must not be throttled.
    @app.get("/api/v1/health", tags=["Health"])
    async def health() -> HealthResponse:
        """Return API liveness and current version."""
        return HealthResponse(version=VERSION)

    return app
