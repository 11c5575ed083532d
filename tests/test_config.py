"""
tests/test_config.py -- Tests for core/config.py.

Settings are built with _env_file=None and a scrubbed environment so a
developer's .env or shell does not leak into the assertions.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from auth.passwords import PasswordHasher
from auth.store import AccountStore
from core.config import Settings


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("DATABASE_URL", "SECRET_KEY", "DEBUG"):
        monkeypatch.delenv(name, raising=False)


class TestDatabaseUrl:
    def test_default_is_relative(self, clean_env, secret_key: str) -> None:
        settings = Settings(_env_file=None, secret_key=secret_key)
        assert settings.database_url == "sqlite:///bloglist.db"

    def test_default_lands_in_working_directory(self, clean_env, secret_key: str, tmp_path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        settings = Settings(_env_file=None, secret_key=secret_key)
        store = AccountStore(PasswordHasher(rounds=4), settings.database_url)
        try:
            assert (tmp_path / "bloglist.db").exists()
        finally:
            store.close()

    def test_env_overrides_default(self, clean_env, secret_key: str, monkeypatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "sqlite:///elsewhere.db")
        assert Settings(_env_file=None, secret_key=secret_key).database_url == "sqlite:///elsewhere.db"


class TestSecretKey:
    def test_missing_key_refused_outside_debug(self, clean_env) -> None:
        with pytest.raises(ValidationError, match="SECRET_KEY is required"):
            Settings(_env_file=None)

    def test_debug_generates_key(self, clean_env) -> None:
        settings = Settings(_env_file=None, debug=True)
        assert len(settings.secret_key) >= 32

    def test_short_key_rejected(self, clean_env) -> None:
        with pytest.raises(ValidationError, match="at least 32"):
            Settings(_env_file=None, secret_key="short")
