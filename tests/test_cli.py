"""
tests/test_cli.py -- Tests for the maintenance CLI in main.py.

main() loads Settings from the environment through get_settings(), so each
test points DATABASE_URL at a temporary SQLite file and clears the cache.
A file (not shared memory) is used because each main() call opens and
closes its own stores.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest

from auth.passwords import PasswordHasher
from auth.store import AccountStore
from core.config import get_settings
from main import main
from posts.store import PostStore


@pytest.fixture
def cli_db(tmp_path, monkeypatch, secret_key: str):
    db_url = f"sqlite:///{tmp_path / 'cli.db'}"
    monkeypatch.setenv("SECRET_KEY", secret_key)
    monkeypatch.setenv("DATABASE_URL", db_url)
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
    get_settings.cache_clear()
    yield db_url
    get_settings.cache_clear()


def _open(db_url: str) -> tuple[AccountStore, PostStore]:
    accounts = AccountStore(PasswordHasher(rounds=4), db_url)
    return accounts, PostStore(accounts, db_url)


class TestCreateAccount:
    def test_creates_account(self, cli_db: str, capsys) -> None:
        assert main(["create-account", "root", "--display-name", "Superuser", "--password", "sekret"]) == 0
        assert "Created account root" in capsys.readouterr().out
        accounts, posts = _open(cli_db)
        assert accounts.get_by_username("root").display_name == "Superuser"
        posts.close()
        accounts.close()

    def test_prompts_for_password(self, cli_db: str) -> None:
        with patch("main.getpass.getpass", return_value="sekret") as prompt:
            assert main(["create-account", "root"]) == 0
        prompt.assert_called_once()

    def test_duplicate_reports_error(self, cli_db: str, capsys) -> None:
        main(["create-account", "root", "--password", "sekret"])
        assert main(["create-account", "root", "--password", "sekret"]) == 1
        assert "[!] expected `username` to be unique" in capsys.readouterr().out


class TestReconcileCommand:
    def test_dry_run_then_repair(self, cli_db: str, capsys) -> None:
        accounts, posts = _open(cli_db)
        owner = accounts.create("root", "", "sekret")
        with patch.object(AccountStore, "append_post_id"):
            post = posts.create({"title": "t", "url": "u"}, owner_id=owner.id)
        posts.close()
        accounts.close()

        assert main(["reconcile", "--dry-run"]) == 0
        out = capsys.readouterr().out
        assert post.id in out
        assert "1 back-reference(s) missing" in out

        assert main(["reconcile"]) == 0
        assert "Restored 1 back-reference(s)" in capsys.readouterr().out

        accounts, posts = _open(cli_db)
        assert accounts.find_by_id(owner.id).post_ids == [post.id]
        posts.close()
        accounts.close()


class TestStatsCommand:
    def test_stats(self, cli_db: str, capsys) -> None:
        accounts, posts = _open(cli_db)
        owner = accounts.create("root", "", "sekret")
        posts.create({"title": "React patterns", "url": "u", "likes": 7}, owner_id=owner.id)
        posts.create({"title": "Type wars", "url": "u", "likes": 2}, owner_id=owner.id)
        posts.close()
        accounts.close()

        assert main(["stats"]) == 0
        out = capsys.readouterr().out
        assert "Posts:       2" in out
        assert "Total likes: 9" in out
        assert "React patterns (7 likes)" in out
