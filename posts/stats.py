"""
posts/stats.py -- Aggregates over a list of posts.

Pure functions, no I/O. Used by GET /api/v1/posts/stats and `main.py stats`.
"""

from typing import Iterable, Optional

from posts.models import Post


def total_likes(posts: Iterable[Post]) -> int:
    """Sum of likes across all posts. 0 for an empty list."""
    return sum(post.likes for post in posts)


def favourite_post(posts: Iterable[Post]) -> Optional[Post]:
    """The post with the most likes, or None for an empty list.

    Ties go to the earliest post in the input order.
    """
    favourite: Optional[Post] = None
    for post in posts:
        if favourite is None or post.likes > favourite.likes:
            favourite = post
    return favourite
