"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in posts/models.py -- dataclasses own domain shape; stores and routes do the
work.

Layer rule: no imports from api/ or posts/.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Account:
    """A registered user account.

    password_hash is the bcrypt output. It never leaves the store boundary in
    an API response -- api/models.py has no field for it.

    post_ids is a back-reference: the ordered ids of posts this account
    created. The Post row owns the relationship (Post.owner_id); this list is
    an index maintained by a separate write and may lag behind it (see
    posts/reconcile.py).
    """

    username: str
    display_name: str
    password_hash: str
    id: str | None = None
    post_ids: list[str] = field(default_factory=list)
    created_at: str = ""  # ISO 8601, set by store on insert
