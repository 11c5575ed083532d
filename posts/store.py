"""
posts/store.py -- SQLAlchemy Core persistence layer for posts.

Pattern: Repository + Data Mapper. PostStore is the repository (one clean
interface for the Post entity); _row_to_post is the mapper. Route handlers
never touch SQL directly.

Field rules (shared by create and update):
  title, url -- required, non-empty strings
  author     -- optional string, passed through
  likes      -- non-negative integer, 0 when omitted on create

Ownership:
  owner_id comes from the authenticated identity, never from the request
  body, and must name an existing account when the post is created. After
  that it is never checked or changed. update() and delete() do not look at
  who is calling.

Back-reference:
  create() is two writes: insert the post row, then append its id to the
  owner's post_ids through AccountStore. They are not in one transaction. If
  the second write fails, the error is logged and re-raised and the post row
  stays. posts/reconcile.py restores the back-reference later.

Security: all queries use bound parameters. No f-strings in SQL.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, func, select
from sqlalchemy.engine import Engine

from auth.models import Account
from auth.store import AccountStore
from core.database import make_engine, now_iso
from core.errors import MalformedIdentifier, ValidationFailure
from core.identifiers import new_id, require_valid_id
from posts.models import OwnerProjection, Post

logger = logging.getLogger("bloglist.posts")

UPDATABLE_FIELDS = ("title", "author", "url", "likes")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_posts = Table(
    "posts",
    _metadata,
    Column("id", String(24), primary_key=True),
    Column("title", Text, nullable=False),
    Column("author", Text),
    Column("url", Text, nullable=False),
    Column("likes", Integer, nullable=False, server_default="0"),
    # No FOREIGN KEY: the owner is checked at creation only.
    Column("owner_id", String(24), nullable=False),
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# Field validators
# ---------------------------------------------------------------------------


def _required_text(field: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationFailure(field, f"{field} is required")
    return value


def _optional_text(field: str, value: Any) -> Optional[str]:
    if value is not None and not isinstance(value, str):
        raise ValidationFailure(field, f"{field} must be a string")
    return value


def _likes(value: Any) -> int:
    # bool is an int subclass; `true` is not a like count.
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationFailure("likes", "likes must be a non-negative integer")
    return value


_VALIDATORS = {
    "title": lambda v: _required_text("title", v),
    "url": lambda v: _required_text("url", v),
    "author": lambda v: _optional_text("author", v),
    "likes": _likes,
}


def validate_fields(fields: dict) -> dict:
    """Validate the updatable keys present in fields. Unknown keys are dropped."""
    return {name: _VALIDATORS[name](fields[name]) for name in UPDATABLE_FIELDS if name in fields}


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class PostStore:
    """Repository for Post entities.

    Usage:
        posts = PostStore(account_store, "sqlite:///bloglist.db")
        post = posts.create({"title": "Go To Statement", "url": "https://..."}, owner_id=account.id)
        posts.update(post.id, {"likes": 5})
        posts.delete(post.id)
        posts.close()
    """

    def __init__(self, accounts: AccountStore, db_url: str) -> None:
        self.accounts = accounts
        self.engine: Engine = make_engine(db_url)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, fields: dict, owner_id: str) -> Post:
        """Insert a post owned by owner_id and record it on the owner's post_ids.

        Raises:
            MalformedIdentifier: owner_id is not a well-formed id.
            ValidationFailure:   a field rule is violated, or the owner does not exist.
        """
        values = validate_fields(fields)
        for required in ("title", "url"):
            if required not in values:
                raise ValidationFailure(required, f"{required} is required")
        values.setdefault("likes", 0)

        require_valid_id(owner_id)
        if self.accounts.find_by_id(owner_id) is None:
            raise ValidationFailure("owner_id", "owner_id must reference an existing account")

        post = Post(
            id=new_id(),
            title=values["title"],
            url=values["url"],
            author=values.get("author"),
            likes=values["likes"],
            owner_id=owner_id,
            created_at=now_iso(),
        )
        with self.engine.begin() as conn:
            conn.execute(
                _posts.insert().values(
                    id=post.id,
                    title=post.title,
                    author=post.author,
                    url=post.url,
                    likes=post.likes,
                    owner_id=post.owner_id,
                    created_at=post.created_at,
                )
            )

        # Second, independent write. No rollback of the insert above.
        try:
            self.accounts.append_post_id(owner_id, post.id)
        except Exception:
            logger.exception("Post id=%s stored but back-reference on account id=%s failed", post.id, owner_id)
            raise
        logger.info("Post created id=%s owner=%s", post.id, owner_id)
        return post

    def update(self, post_id: str, partial: dict) -> Optional[Post]:
        """Replace the supplied title/author/url/likes on a post.

        Returns the updated Post, or None when no post has this id.
        owner_id is never touched.
        """
        require_valid_id(post_id)
        values = validate_fields(partial)
        with self.engine.begin() as conn:
            if values:
                result = conn.execute(_posts.update().where(_posts.c.id == post_id).values(**values))
                if result.rowcount == 0:
                    return None
            row = conn.execute(_posts.select().where(_posts.c.id == post_id)).fetchone()
        return _row_to_post(row) if row is not None else None

    def delete(self, post_id: str) -> None:
        """Remove a post. Deleting an id that does not exist is a no-op."""
        require_valid_id(post_id)
        with self.engine.begin() as conn:
            result = conn.execute(_posts.delete().where(_posts.c.id == post_id))
        if result.rowcount:
            logger.info("Post deleted id=%s", post_id)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list(self) -> list[Post]:
        """Return all posts in creation order, each with its owner projection."""
        with self.engine.connect() as conn:
            rows = conn.execute(_posts.select().order_by(_posts.c.created_at, _posts.c.id)).fetchall()
        posts = [_row_to_post(r) for r in rows]

        owners: dict[str, Optional[Account]] = {}
        for post in posts:
            if post.owner_id not in owners:
                owners[post.owner_id] = self._find_owner(post.owner_id)
            owner = owners[post.owner_id]
            if owner is not None:
                post.owner = OwnerProjection(id=owner.id, username=owner.username, display_name=owner.display_name)
        return posts

    def find_by_id(self, post_id: str) -> Optional[Post]:
        require_valid_id(post_id)
        with self.engine.connect() as conn:
            row = conn.execute(_posts.select().where(_posts.c.id == post_id)).fetchone()
        return _row_to_post(row) if row is not None else None

    def count(self) -> int:
        with self.engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(_posts)).scalar() or 0

    def _find_owner(self, owner_id: str) -> Optional[Account]:
        # Rows written by another tool could carry anything in owner_id;
        # list() shows those posts without an owner rather than failing.
        try:
            return self.accounts.find_by_id(owner_id)
        except MalformedIdentifier:
            return None

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_post(row) -> Post:
    return Post(
        id=row.id,
        title=row.title,
        author=row.author,
        url=row.url,
        likes=row.likes,
        owner_id=row.owner_id,
        created_at=row.created_at,
    )
