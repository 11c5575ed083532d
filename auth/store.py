"""
auth/store.py -- SQLAlchemy Core persistence layer for accounts.

Pattern: Repository + Data Mapper (same as posts/store.py).
AccountStore is the repository; _row_to_account is the mapper.
Route and pipeline code never touches SQL directly.

Constraints:
  username uniqueness is enforced by the UNIQUE index at write time, not by a
  look-before-insert. The IntegrityError from a duplicate insert becomes
  DuplicateKey("username"), so two concurrent registrations for the same name
  cannot both succeed.

  post_ids is a JSON array in a TEXT column. append_post_id() is a
  read-modify-write of that single row. The store only promises atomicity per
  single-row write, so concurrent appends for the same account can lose one
  of the ids. posts/reconcile.py repairs that after the fact.

Security:
  All queries use bound parameters. No f-strings in SQL.
  The plaintext password is hashed inside create() and not kept anywhere.

Layer rule: no imports from api/ or posts/.
"""

from __future__ import annotations

import json
import logging

from sqlalchemy import Column, MetaData, String, Table, Text, func, select
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError

from auth.models import Account
from auth.passwords import PasswordHasher
from core.database import make_engine, now_iso
from core.errors import DuplicateKey, ValidationFailure
from core.identifiers import new_id, require_valid_id

logger = logging.getLogger("bloglist.auth")

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 3
_MAX_PASSWORD_BYTES = 72  # bcrypt input limit

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_accounts = Table(
    "accounts",
    _metadata,
    Column("id", String(24), primary_key=True),
    Column("username", String(255), nullable=False, unique=True),
    Column("display_name", String(255), nullable=False, server_default=""),
    Column("password_hash", Text, nullable=False),
    Column("post_ids", Text, nullable=False, server_default="[]"),  # JSON array
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class AccountStore:
    """Repository for Account entities.

    Usage:
        store = AccountStore(PasswordHasher(rounds=10), "sqlite:///bloglist.db")
        account = store.create("root", "Superuser", "sekret")
        store.find_by_id(account.id)
        store.close()
    """

    def __init__(self, hasher: PasswordHasher, db_url: str) -> None:
        self.hasher = hasher
        self.engine: Engine = make_engine(db_url)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, username: str, display_name: str, password: str) -> Account:
        """Register a new account and return it.

        Raises:
            ValidationFailure: username or password shorter than 3 characters,
                               or a password bcrypt cannot accept.
            DuplicateKey:      the username is already taken.
        """
        if len(username) < MIN_USERNAME_LENGTH:
            raise ValidationFailure(
                "username", f"username must be at least {MIN_USERNAME_LENGTH} characters long"
            )
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationFailure(
                "password", f"password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )
        if len(password.encode("utf-8")) > _MAX_PASSWORD_BYTES:
            raise ValidationFailure("password", f"password must be at most {_MAX_PASSWORD_BYTES} bytes long")

        account = Account(
            id=new_id(),
            username=username,
            display_name=display_name,
            password_hash=self.hasher.hash(password),
            post_ids=[],
            created_at=now_iso(),
        )
        try:
            with self.engine.begin() as conn:
                conn.execute(
                    _accounts.insert().values(
                        id=account.id,
                        username=account.username,
                        display_name=account.display_name,
                        password_hash=account.password_hash,
                        post_ids="[]",
                        created_at=account.created_at,
                    )
                )
        except IntegrityError as exc:
            raise DuplicateKey("username") from exc
        logger.info("Account created id=%s", account.id)
        return account

    def append_post_id(self, account_id: str, post_id: str) -> None:
        """Append post_id to the account's post_ids back-reference.

        Two separate statements: load the current list, write the extended
        list. There is no compare-and-swap.
        """
        require_valid_id(account_id)
        with self.engine.connect() as conn:
            post_ids = self._load_post_ids(conn, account_id)
        if post_ids is None:
            logger.warning("Back-reference skipped: account id=%s not found", account_id)
            return
        post_ids.append(post_id)
        with self.engine.begin() as conn:
            conn.execute(
                _accounts.update().where(_accounts.c.id == account_id).values(post_ids=json.dumps(post_ids))
            )

    def _load_post_ids(self, conn: Connection, account_id: str) -> list[str] | None:
        raw = conn.execute(select(_accounts.c.post_ids).where(_accounts.c.id == account_id)).scalar()
        if raw is None:
            return None
        return json.loads(raw)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list(self) -> list[Account]:
        """Return all accounts in registration order."""
        with self.engine.connect() as conn:
            rows = conn.execute(_accounts.select().order_by(_accounts.c.created_at, _accounts.c.id)).fetchall()
        return [_row_to_account(r) for r in rows]

    def find_by_id(self, account_id: str) -> Account | None:
        """Look up an account by id. Raises MalformedIdentifier for a badly formed id."""
        require_valid_id(account_id)
        with self.engine.connect() as conn:
            row = conn.execute(_accounts.select().where(_accounts.c.id == account_id)).fetchone()
        return _row_to_account(row) if row is not None else None

    def get_by_username(self, username: str) -> Account | None:
        """Look up an account by exact username (case-sensitive)."""
        with self.engine.connect() as conn:
            row = conn.execute(_accounts.select().where(_accounts.c.username == username)).fetchone()
        return _row_to_account(row) if row is not None else None

    def count(self) -> int:
        with self.engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(_accounts)).scalar() or 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_account(row) -> Account:
    return Account(
        id=row.id,
        username=row.username,
        display_name=row.display_name,
        password_hash=row.password_hash,
        post_ids=json.loads(row.post_ids or "[]"),
        created_at=row.created_at,
    )
