"""
api/routes/v1/posts.py -- Post CRUD routes.

Routes (in registration order to avoid FastAPI path capture conflicts):
  GET    /posts         -- list posts with owner projection (public)
  GET    /posts/stats   -- like totals and favourite post (public)
  POST   /posts         -- create a post (requires identity)
  PUT    /posts/{id}    -- partial update (public)
  DELETE /posts/{id}    -- delete (public)

Ownership:
  POST takes the owner from the authenticated account, never from the body.
  PUT and DELETE perform no identity or ownership check: any caller holding
  a post id may change or remove that post. This is the existing API
  contract and is kept as is; see DESIGN.md before tightening it.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from api.models import PostCreate, PostResponse, PostStatsResponse, PostUpdate
from auth.dependencies import require_account
from auth.models import Account
from posts.stats import favourite_post, total_likes
from posts.store import PostStore

router = APIRouter()


@router.get("/posts", response_model=list[PostResponse])
def list_posts(request: Request) -> list[PostResponse]:
    posts: PostStore = request.app.state.posts
    return [PostResponse.from_post(p) for p in posts.list()]


@router.get("/posts/stats", response_model=PostStatsResponse)
def post_stats(request: Request) -> PostStatsResponse:
    """Total likes across all posts and the most-liked post (earliest wins ties)."""
    posts: PostStore = request.app.state.posts
    all_posts = posts.list()
    favourite = favourite_post(all_posts)
    return PostStatsResponse(
        count=len(all_posts),
        total_likes=total_likes(all_posts),
        favourite=PostResponse.from_post(favourite) if favourite is not None else None,
    )


@router.post("/posts", response_model=PostResponse, status_code=201)
def create_post(
    request: Request,
    body: PostCreate,
    account: Account = Depends(require_account),
) -> PostResponse:
    """Create a post owned by the authenticated account.

    likes sent as null is treated like an omitted likes (defaults to 0).
    """
    posts: PostStore = request.app.state.posts
    post = posts.create(body.model_dump(exclude_none=True), owner_id=account.id)
    return PostResponse.from_post(post)


@router.put("/posts/{post_id}", response_model=Optional[PostResponse])
def update_post(request: Request, post_id: str, body: PostUpdate) -> Optional[PostResponse]:
    """Replace the fields present in the body. Responds 200 with null for an unknown id."""
    posts: PostStore = request.app.state.posts
    updated = posts.update(post_id, body.model_dump(exclude_unset=True))
    return PostResponse.from_post(updated) if updated is not None else None


@router.delete("/posts/{post_id}", status_code=204)
def delete_post(request: Request, post_id: str) -> Response:
    """Delete a post. 204 whether or not it existed."""
    posts: PostStore = request.app.state.posts
    posts.delete(post_id)
    return Response(status_code=204)
