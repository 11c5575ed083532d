"""
API request and response models for the bloglist REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are separate from the dataclasses in auth/models.py and
posts/models.py, which own the internal domain representation. Route
handlers map between the two.

Field rules (lengths, required title/url, non-negative likes) are enforced by
the stores, not here, and apply to every caller alike. These
models only pin down JSON types. likes is a StrictInt: `true`, `"5"` and `1.5`
are type errors rather than being coerced, and like any type mismatch
surface as a 400 ValidationFailure through api/errors.py.

No response model has a password_hash field.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from auth.models import Account
from posts.models import OwnerProjection, Post

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class AccountCreate(BaseModel):
    """Request body for POST /api/v1/accounts."""

    username: str = Field(max_length=255)
    display_name: str = Field(default="", max_length=255)
    password: str = Field(max_length=255)


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/login."""

    username: str = Field(max_length=255)
    password: str = Field(max_length=255)


class PostCreate(BaseModel):
    """Request body for POST /api/v1/posts.

    Everything is optional at this layer: a missing title or url is reported
    by PostStore with the field name, and a missing likes becomes 0 there.
    """

    title: Optional[str] = None
    author: Optional[str] = None
    url: Optional[str] = None
    likes: Optional[StrictInt] = None


class PostUpdate(BaseModel):
    """Request body for PUT /api/v1/posts/{id}. Only the keys sent are replaced."""

    title: Optional[str] = None
    author: Optional[str] = None
    url: Optional[str] = None
    likes: Optional[StrictInt] = None


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class AccountResponse(BaseModel):
    """Public view of an account."""

    model_config = ConfigDict(frozen=True)

    id: str
    username: str
    display_name: str
    post_ids: list[str]
    created_at: str

    @classmethod
    def from_account(cls, account: Account) -> "AccountResponse":
        return cls(
            id=account.id,
            username=account.username,
            display_name=account.display_name,
            post_ids=list(account.post_ids),
            created_at=account.created_at,
        )


class LoginResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str
    token_type: str = "bearer"
    expires_in: int
    username: str
    display_name: str


class OwnerResponse(BaseModel):
    """Owner projection embedded in post listings: id, username, display_name only."""

    model_config = ConfigDict(frozen=True)

    id: str
    username: str
    display_name: str

    @classmethod
    def from_projection(cls, owner: OwnerProjection) -> "OwnerResponse":
        return cls(id=owner.id, username=owner.username, display_name=owner.display_name)


class PostResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    author: Optional[str]
    url: str
    likes: int
    owner_id: str
    created_at: str
    owner: Optional[OwnerResponse] = None

    @classmethod
    def from_post(cls, post: Post) -> "PostResponse":
        """Build a PostResponse from a domain Post (Factory Method, colocated with the output model)."""
        return cls(
            id=post.id,
            title=post.title,
            author=post.author,
            url=post.url,
            likes=post.likes,
            owner_id=post.owner_id,
            created_at=post.created_at,
            owner=OwnerResponse.from_projection(post.owner) if post.owner is not None else None,
        )


class PostStatsResponse(BaseModel):
    """Response for GET /api/v1/posts/stats."""

    model_config = ConfigDict(frozen=True)

    count: int
    total_likes: int
    favourite: Optional[PostResponse] = None


class ErrorResponse(BaseModel):
    """Error envelope returned on every 4xx/5xx response.

    error -- human-readable message naming the violated rule
    code  -- machine-readable kind (core.errors.ErrorKind value, or http_<status>)
    """

    model_config = ConfigDict(frozen=True)

    error: str
    code: str


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
