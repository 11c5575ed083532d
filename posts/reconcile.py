"""
posts/reconcile.py -- Repair pass for the Account.post_ids back-reference.

Post creation writes the post row and the owner's post_ids entry separately,
without a transaction. A failure between the two writes, or two creations by
the same owner racing on the read-modify-write of post_ids, leaves a post
that its owner's post_ids does not list. The post row is the source of truth
for ownership; this pass re-adds every missing id.

It never removes ids and never touches posts whose owner does not resolve.
Run it from the CLI:  python main.py reconcile
"""

import logging

from auth.store import AccountStore
from posts.store import PostStore

logger = logging.getLogger("bloglist.posts")


def find_missing_back_references(posts: PostStore, accounts: AccountStore) -> dict[str, list[str]]:
    """Return {account_id: [post ids missing from its post_ids]} in post creation order."""
    listed: dict[str, set[str]] = {}
    missing: dict[str, list[str]] = {}
    for post in posts.list():
        if post.owner is None:
            logger.warning("Post id=%s has no resolvable owner; skipped", post.id)
            continue
        if post.owner_id not in listed:
            owner = accounts.find_by_id(post.owner_id)
            listed[post.owner_id] = set(owner.post_ids) if owner is not None else set()
        if post.id not in listed[post.owner_id]:
            missing.setdefault(post.owner_id, []).append(post.id)
    return missing


def reconcile_back_references(posts: PostStore, accounts: AccountStore) -> int:
    """Append every missing post id to its owner's post_ids. Returns the number appended."""
    repaired = 0
    for account_id, post_ids in find_missing_back_references(posts, accounts).items():
        for post_id in post_ids:
            accounts.append_post_id(account_id, post_id)
            repaired += 1
        logger.info("Restored %d back-reference(s) on account id=%s", len(post_ids), account_id)
    return repaired
