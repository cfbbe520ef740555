"""Operator management commands for the admin service.

Usage:
  python -m moments_admin.scripts.manage create-tables
  python -m moments_admin.scripts.manage drop-tables --yes
  python -m moments_admin.scripts.manage set-access-key --phone +15550100 --access-key ...
  python -m moments_admin.scripts.manage grant-admin --phone +15550100
  python -m moments_admin.scripts.manage issue-token --phone +15550100
  python -m moments_admin.scripts.manage redeem-invite --code ABCD2345EFGH

Commands that change state go through the same store and lifecycle engine as
the HTTP surface and are audited as system actions (null admin id).
"""
from __future__ import annotations

import argparse
import getpass
import logging
import sys
from collections.abc import Callable, Sequence

from sqlalchemy.orm import Session

from moments_admin.core import security
from moments_admin.core.errors import AdminError
from moments_admin.core.settings import settings
from moments_admin.db import SessionLocal, create_tables, drop_tables
from moments_admin.services.entity_store import EntityStore
from moments_admin.services.lifecycle import build_engine
from moments_admin.services.results import ActionResult, AdminContext

logger = logging.getLogger(__name__)

# Minimum operator access key length, matching the login form.
MIN_ACCESS_KEY_LENGTH = 8


def say(msg: str) -> None:
    print(f"[manage] {msg}")


def fail(msg: str) -> int:
    print(f"[manage][FAIL] {msg}", file=sys.stderr)
    return 1


def _report(result: ActionResult[object]) -> int:
    if result.error is not None:
        return fail(result.error.detail)
    for warning in result.warnings:
        print(f"[manage][WARN] {warning.detail}", file=sys.stderr)
    return 0


def cmd_create_tables(_args: argparse.Namespace, db: Session) -> int:
    create_tables(db.get_bind())
    say("created all tables")
    return 0


def cmd_drop_tables(args: argparse.Namespace, db: Session) -> int:
    if not args.yes:
        return fail("refusing to drop tables without --yes")
    drop_tables(db.get_bind())
    say("dropped all tables")
    return 0


def cmd_set_access_key(args: argparse.Namespace, db: Session) -> int:
    store = EntityStore(db)
    user = store.find_user_by_phone(args.phone)
    if isinstance(user, AdminError):
        return fail(f"{user.detail} for phone {args.phone}")
    access_key = args.access_key or getpass.getpass("Access key: ")
    if len(access_key) < MIN_ACCESS_KEY_LENGTH:
        return fail(f"access key must be at least {MIN_ACCESS_KEY_LENGTH} characters")
    outcome = store.set_access_key_hash(user.id, security.hash_key(access_key))
    if isinstance(outcome, AdminError):
        return fail(outcome.detail)
    say(f"access key updated for user {user.id}")
    return 0


def cmd_grant_admin(args: argparse.Namespace, db: Session) -> int:
    store = EntityStore(db)
    user = store.find_user_by_phone(args.phone)
    if isinstance(user, AdminError):
        return fail(f"{user.detail} for phone {args.phone}")
    if user.is_admin:
        say(f"user {user.id} is already an admin")
        return 0
    code = _report(build_engine(store).toggle_admin(AdminContext.system(), user.id))
    if code == 0:
        say(f"granted admin rights to user {user.id}")
    return code


def cmd_issue_token(args: argparse.Namespace, db: Session) -> int:
    store = EntityStore(db)
    user = store.find_user_by_phone(args.phone)
    if isinstance(user, AdminError):
        return fail(f"{user.detail} for phone {args.phone}")
    if not user.is_admin:
        return fail(f"user {user.id} is not an admin")
    token = security.create_session_token(user.id, args.minutes)
    print(token)
    return 0


def cmd_redeem_invite(args: argparse.Namespace, db: Session) -> int:
    store = EntityStore(db)
    result = build_engine(store).register_invite(AdminContext.system(), args.code.strip().upper())
    code = _report(result)
    if code == 0 and result.value is not None:
        say(f"waitlist entry {result.value.id} registered")
    return code


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage the Moments admin service")
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create-tables", help="Create all database tables")
    create.set_defaults(handler=cmd_create_tables)

    drop = sub.add_parser("drop-tables", help="Drop all database tables")
    drop.add_argument("--yes", action="store_true", help="Confirm the drop")
    drop.set_defaults(handler=cmd_drop_tables)

    access = sub.add_parser("set-access-key", help="Set an operator's access key")
    access.add_argument("--phone", required=True)
    access.add_argument(
        "--access-key",
        default=None,
        help="New access key (prompted for when omitted)",
    )
    access.set_defaults(handler=cmd_set_access_key)

    grant = sub.add_parser("grant-admin", help="Give an existing user admin rights")
    grant.add_argument("--phone", required=True)
    grant.set_defaults(handler=cmd_grant_admin)

    token = sub.add_parser("issue-token", help="Print a session token for an admin")
    token.add_argument("--phone", required=True)
    token.add_argument(
        "--minutes",
        type=int,
        default=None,
        help=f"Token lifetime (defaults to {settings.access_token_expire_minutes})",
    )
    token.set_defaults(handler=cmd_issue_token)

    redeem = sub.add_parser("redeem-invite", help="Mark an invited waitlist entry as registered")
    redeem.add_argument("--code", required=True)
    redeem.set_defaults(handler=cmd_redeem_invite)

    return parser


def main(
    argv: Sequence[str] | None = None,
    session_factory: Callable[[], Session] = SessionLocal,
) -> int:
    logging.basicConfig(level=settings.log_level.upper())
    args = build_parser().parse_args(argv)
    db = session_factory()
    try:
        return int(args.handler(args, db))
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
