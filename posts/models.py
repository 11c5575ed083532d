"""
posts/models.py -- Domain dataclasses for posts.

These are pure data containers with zero logic. Validation and defaults live
in posts/store.py.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class OwnerProjection:
    """The public face of an Account as embedded in a post listing. Never carries the hash."""

    id: str
    username: str
    display_name: str


@dataclass
class Post:
    """A link post created by an account.

    owner_id is set once from the authenticated identity and never changed by
    an update. owner is only filled in by PostStore.list() and is None when
    the owning account no longer resolves.

    id is None before the record is written to the database.
    """

    title: str
    url: str
    owner_id: str
    author: Optional[str] = None
    likes: int = 0
    id: Optional[str] = None
    created_at: str = ""  # ISO 8601, set by store on insert
    owner: Optional[OwnerProjection] = None
