#!/usr/bin/env python3
"""
Onboarding -- operator command line.

Usage:
  python main.py init-db
  python main.py status
  python main.py register --company "Acme Corp" --email ops@acme.test
  python main.py serve --host 0.0.0.0 --port 3001

Configuration comes from the same environment / .env file as the API
(DATABASE_URL, SECRET_KEY, DEBUG, BCRYPT_ROUNDS, ...).
"""

import argparse
import getpass
import sys
from typing import Optional

from auth.errors import AuthError
from auth.service import AccountService
from auth.store import AccountStore
from core.config import get_settings


def _cmd_init_db(args: argparse.Namespace) -> int:
    # AccountStore creates missing tables on construction.
    store = AccountStore(get_settings().database_url)
    store.close()
    print("  Schema ready.")
    return 0


def _cmd_status(args: argparse.Namespace) -> int:
    store = AccountStore(get_settings().database_url)
    try:
        if not store.ping():
            print("  [!] Database is not reachable.")
            return 1
        companies, users = store.count_rows()
    finally:
        store.close()
    print(f"  Database OK: {companies} company(ies), {users} user(s).")
    return 0


def _cmd_register(args: argparse.Namespace) -> int:
    password: Optional[str] = args.password
    if password is None:
        password = getpass.getpass("Admin password: ")
        if password != getpass.getpass("Repeat password: "):
            print("  [!] Passwords do not match.")
            return 1

    settings = get_settings()
    store = AccountStore(settings.database_url)
    try:
        company_id = AccountService(store, settings).register(args.company, args.email, password)
    except AuthError as exc:
        print(f"  [!] {exc.message}")
        return 1
    finally:
        store.close()
    print(f"  Registered company id={company_id} with admin {args.email}.")
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="onboarding",
        description="Operator commands for the onboarding authentication backend.",
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    p = sub.add_parser("init-db", help="Create the companies and users tables if missing")
    p.set_defaults(func=_cmd_init_db)

    p = sub.add_parser("status", help="Check database connectivity and row counts")
    p.set_defaults(func=_cmd_status)

    p = sub.add_parser("register", help="Register a company with its first admin user")
    p.add_argument("--company", required=True, help="Company display name (must be unique)")
    p.add_argument("--email", required=True, help="Admin email (must be unique across companies)")
    p.add_argument(
        "--password",
        default=None,
        help="Admin password. Prompted for when omitted; avoid passing it on shared hosts.",
    )
    p.set_defaults(func=_cmd_register)

    p = sub.add_parser("serve", help="Run the API with uvicorn")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=3001)
    p.add_argument("--reload", action="store_true", help="Reload on code changes (development)")
    p.set_defaults(func=_cmd_serve)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "func", None):
        parser.print_help()
        return 0
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
