#!/usr/bin/env python3
"""
manage.py

Purpose:
  Small maintenance commands for the member portal database.

Commands:
  create-user   Create a credentials user (email + password).
  purge-sessions
                Delete sessions whose expiry has passed.

Database:
  Uses the same configuration as the web app (DATABASE_URL, .env, .env.local).

Examples:
  python scripts/manage.py create-user ada@example.com --name "Ada Lovelace"
  python scripts/manage.py create-user ada@example.com --password s3cret --verified
  python scripts/manage.py purge-sessions

Exit codes:
  0 = success
  1 = handled application error (e.g. duplicate email)
"""

from __future__ import annotations

import argparse
import getpass
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from portal import models as _models  # noqa: E402,F401
from portal.crud.sessions import purge_expired_sessions  # noqa: E402
from portal.crud.users import create_user  # noqa: E402
from portal.db.migrate import run_migrations  # noqa: E402
from portal.db.session import Base, SessionLocal, engine  # noqa: E402
from portal.services.timecalc import utcnow  # noqa: E402


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Member portal maintenance commands.")
    sub = p.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create-user", help="Create a credentials user.")
    create.add_argument("email", help="Sign-in email address.")
    create.add_argument("--name", default=None, help="Display name.")
    create.add_argument("--image", default=None, help="Profile image URL.")
    create.add_argument("--password", default=None,
                        help="Password. Prompted for when omitted.")
    create.add_argument("--verified", action="store_true",
                        help="Mark the email as verified now (drives 'Member since').")

    sub.add_parser("purge-sessions", help="Delete expired sessions.")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    Base.metadata.create_all(bind=engine)
    run_migrations(engine)

    db = SessionLocal()
    try:
        if args.command == "create-user":
            password = args.password or getpass.getpass("Password: ")
            try:
                user = create_user(
                    db,
                    email=args.email,
                    password=password,
                    name=args.name,
                    image=args.image,
                    email_verified=utcnow() if args.verified else None,
                )
            except ValueError as exc:
                print(f"error: {exc}", file=sys.stderr)
                return 1
            print(json.dumps({"status": "created", "id": user.id, "email": user.email}))
        elif args.command == "purge-sessions":
            removed = purge_expired_sessions(db)
            print(json.dumps({"status": "purged", "removed": removed}))
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
