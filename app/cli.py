"""Administrator bootstrap commands (``tupark-admin``)."""

from __future__ import annotations

import argparse
import getpass
import logging

from app.config import load_config, setup_logging
from app.domain.exceptions import TuParkError
from app.services.application.auth_service import UserAuthManager
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler

logger = logging.getLogger(__name__)


def _read_password(args: argparse.Namespace) -> str:
    if args.password:
        return args.password
    password = getpass.getpass("Password: ")
    if password != getpass.getpass("Repeat password: "):
        raise SystemExit("Passwords do not match")
    return password


def _auth_manager(database_path: str | None) -> UserAuthManager:
    config = load_config()
    database = SQLiteDatabaseHandler(database_path or config.database_path, timeout=config.db_timeout_seconds)
    database.create_tables()
    return UserAuthManager(database)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tupark-admin", description="TUPark administrator tools")
    parser.add_argument("--database", help="SQLite database path (default: TUPARK_DATABASE_PATH)")
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create-user", help="Create an administrator account")
    create.add_argument("username")
    create.add_argument("--password", help="Password (prompted when omitted)")

    change = sub.add_parser("change-password", help="Set a new password for an administrator")
    change.add_argument("username")
    change.add_argument("--password", help="Password (prompted when omitted)")

    sub.add_parser("list-users", help="List administrator usernames")

    hash_cmd = sub.add_parser("hash-password", help="Print a bcrypt hash for a password")
    hash_cmd.add_argument("--password", help="Password (prompted when omitted)")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(debug=False, level="WARNING", log_dir="")

    if args.command == "hash-password":
        print(UserAuthManager(None).hash_password(_read_password(args)))
        return 0

    auth = _auth_manager(args.database)
    try:
        if args.command == "create-user":
            user_id = auth.register_user(args.username, _read_password(args))
            print(f"Created administrator {args.username!r} (id {user_id})")
        elif args.command == "change-password":
            if not auth.change_password(args.username, _read_password(args)):
                print(f"No administrator named {args.username!r}")
                return 2
            print(f"Password updated for {args.username!r}")
        elif args.command == "list-users":
            for username in auth.auth_repo.list_usernames():
                print(username)
    except TuParkError as exc:
        print(f"Error: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    import sys

    raise SystemExit(main(sys.argv[1:]))
