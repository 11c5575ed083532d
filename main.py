#!/usr/bin/env python3
"""
Bloglist -- maintenance CLI for the account and post stores.

Usage:
  python main.py create-account root --display-name Superuser
  python main.py reconcile
  python main.py reconcile --dry-run
  python main.py stats

Environment variables:
  SECRET_KEY     Required unless DEBUG=true (see core/config.py).
  DATABASE_URL   SQLAlchemy URL of the store. Defaults to ./bloglist.db.
"""

import argparse
import getpass
import sys

from auth.passwords import PasswordHasher
from auth.store import AccountStore
from core.config import Settings, get_settings
from core.errors import BlogError
from posts.reconcile import find_missing_back_references, reconcile_back_references
from posts.stats import favourite_post, total_likes
from posts.store import PostStore


def _open_stores(settings: Settings) -> tuple[AccountStore, PostStore]:
    accounts = AccountStore(PasswordHasher(rounds=settings.bcrypt_rounds), settings.database_url)
    return accounts, PostStore(accounts, settings.database_url)


def cmd_create_account(args: argparse.Namespace, accounts: AccountStore, posts: PostStore) -> int:
    password = args.password or getpass.getpass("Password: ")
    try:
        account = accounts.create(args.username, args.display_name, password)
    except BlogError as e:
        print(f"  [!] {e.message}")
        return 1
    print(f"  Created account {account.username} (id {account.id})")
    return 0


def cmd_reconcile(args: argparse.Namespace, accounts: AccountStore, posts: PostStore) -> int:
    if args.dry_run:
        missing = find_missing_back_references(posts, accounts)
        total = sum(len(ids) for ids in missing.values())
        for account_id, post_ids in missing.items():
            print(f"  {account_id}: missing {', '.join(post_ids)}")
        print(f"  {total} back-reference(s) missing.")
        return 0
    repaired = reconcile_back_references(posts, accounts)
    print(f"  Restored {repaired} back-reference(s).")
    return 0


def cmd_stats(args: argparse.Namespace, accounts: AccountStore, posts: PostStore) -> int:
    all_posts = posts.list()
    print(f"  Accounts:    {accounts.count()}")
    print(f"  Posts:       {len(all_posts)}")
    print(f"  Total likes: {total_likes(all_posts)}")
    favourite = favourite_post(all_posts)
    if favourite is not None:
        print(f"  Favourite:   {favourite.title} ({favourite.likes} likes)")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="bloglist",
        description="Maintenance commands for the bloglist stores.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py create-account root --display-name Superuser
  python main.py reconcile --dry-run
  DATABASE_URL=sqlite:///prod.db python main.py stats
        """,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create-account", help="Register an account without going through the API")
    create.add_argument("username")
    create.add_argument("--display-name", default="", help="Free-text display name")
    create.add_argument("--password", help="Password (prompted for when omitted)")
    create.set_defaults(handler=cmd_create_account)

    reconcile = sub.add_parser("reconcile", help="Re-add post ids missing from their owners' post_ids")
    reconcile.add_argument("--dry-run", action="store_true", help="Only report what is missing")
    reconcile.set_defaults(handler=cmd_reconcile)

    stats = sub.add_parser("stats", help="Print account/post counts and like totals")
    stats.set_defaults(handler=cmd_stats)

    args = parser.parse_args(argv)

    accounts, posts = _open_stores(get_settings())
    try:
        return args.handler(args, accounts, posts)
    finally:
        posts.close()
        accounts.close()


if __name__ == "__main__":
    sys.exit(main())
