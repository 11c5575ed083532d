"""
tests/conftest.py -- Shared test fixtures for the bloglist tests.

This module provides:
  - settings / app / client: a fresh app per test over its own database
  - hasher / account_store / post_store: stores for unit tests, no app
  - root_account / root_headers: a registered account and its bearer header

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread. The named URI format (file:name?mode=memory&cache=shared&uri=true)
shares one in-memory instance across all connections in the same process.
Each fixture appends a uuid to the name so no two tests share rows.

Settings are built explicitly (never via get_settings()) so the developer's
environment and .env cannot leak into the suite. bcrypt runs at 4 rounds
and rate limiting is off unless a test turns it on.
"""

from __future__ import annotations

import uuid
from collections.abc import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.main import create_app
from auth.passwords import PasswordHasher
from auth.store import AccountStore
from auth.tokens import TokenCodec
from core.config import Settings
from posts.store import PostStore

TEST_SECRET_KEY = "test-secret-key-for-the-bloglist-suite-0123456789"


def memory_db_url(name: str) -> str:
    return f"sqlite:///file:test_{name}_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"


# ---------------------------------------------------------------------------
# App fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return Settings(
        secret_key=TEST_SECRET_KEY,
        database_url=memory_db_url("api"),
        bcrypt_rounds=4,
        rate_limit_enabled=False,
    )


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """TestClient with the real lifespan, so app.state.accounts/posts exist inside the block."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def root_account(client: TestClient) -> dict:
    """Register root/sekret through the API and return the response body."""
    resp = client.post(
        "/api/v1/accounts",
        json={"username": "root", "display_name": "Superuser", "password": "sekret"},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
def root_headers(app: FastAPI, root_account: dict) -> dict:
    token = app.state.token_codec.issue(root_account["id"], username=root_account["username"])
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# Store fixtures (no app)
# ---------------------------------------------------------------------------


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def secret_key() -> str:
    return TEST_SECRET_KEY


@pytest.fixture
def codec(secret_key: str) -> TokenCodec:
    return TokenCodec(secret_key, expire_seconds=3600)


@pytest.fixture
def db_url() -> str:
    return memory_db_url("store")


@pytest.fixture
def account_store(hasher: PasswordHasher, db_url: str) -> Generator[AccountStore, None, None]:
    store = AccountStore(hasher, db_url)
    yield store
    store.close()


@pytest.fixture
def post_store(account_store: AccountStore, db_url: str) -> Generator[PostStore, None, None]:
    store = PostStore(account_store, db_url)
    yield store
    store.close()
