"""
auth/passwords.py -- Credential hashing and password login.

Passwords: bcrypt used directly (no passlib wrapper). Bcrypt is the right
choice for low-entropy secrets because its cost factor makes brute force
expensive. The cost factor comes from Settings.bcrypt_rounds.

Timing equalization: authenticate() always runs bcrypt, against a dummy hash
when the username is unknown, so response time does not reveal whether a
username exists.

Layer rule: no imports from api/ or posts/.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import bcrypt

if TYPE_CHECKING:
    from auth.models import Account
    from auth.store import AccountStore

logger = logging.getLogger("bloglist.auth")


class PasswordHasher:
    """One-way salted password transform with a fixed cost factor.

    Usage:
        hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
        stored = hasher.hash("sekret")
        hasher.verify("sekret", stored)   # True
    """

    def __init__(self, rounds: int = 10) -> None:
        self.rounds = rounds
        self._dummy_hash: str | None = None

    def hash(self, plain: str) -> str:
        """Return a bcrypt hash of the given plaintext password.

        bcrypt only looks at the first 72 bytes (recent releases reject
        longer input outright). AccountStore.create enforces that limit
        before calling this.
        """
        return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain: str, hashed: str) -> bool:
        """Return True if the plaintext matches the hash. A malformed hash is a mismatch."""
        try:
            return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            return False

    @property
    def dummy_hash(self) -> str:
        # Computed on first use and then reused, so only the very first failed
        # login pays for generating it.
        if self._dummy_hash is None:
            self._dummy_hash = self.hash("bloglist_timing_dummy")
        return self._dummy_hash


def authenticate(store: AccountStore, hasher: PasswordHasher, username: str, password: str) -> Account | None:
    """Return the Account for a correct username/password pair, else None.

    Always runs bcrypt whether or not the account exists:
    - Unknown username: bcrypt runs against the dummy hash (same cost)
    - Wrong password: bcrypt runs against the real hash (same cost)
    """
    account = store.get_by_username(username)
    if account is None:
        # Equalize timing -- do NOT return before running bcrypt
        hasher.verify(password, hasher.dummy_hash)
        return None
    if not hasher.verify(password, account.password_hash):
        logger.info("Failed login for existing account id=%s", account.id)
        return None
    return account
