"""
Auth Repository
===============

Repository for administrator accounts. Keeps the user SQL in the
infrastructure layer so ``UserAuthManager`` only deals with hashing.

Lookups raise :class:`~app.domain.exceptions.StoreUnavailableError` when
SQLite fails, so a store outage is never mistaken for a wrong password.
"""
from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict, List, Optional

from app.domain.exceptions import ConflictError, StoreUnavailableError

logger = logging.getLogger(__name__)


class AuthRepository:
    """Repository for user-authentication database operations."""

    def __init__(self, backend: Any) -> None:
        """
        Args:
            backend: Database handler exposing a ``connection()`` context
                     manager (SQLiteDatabaseHandler).
        """
        self._backend = backend

    def create_user(self, username: str, password_hash: str) -> int:
        """Create an administrator account and return its id.

        Raises ConflictError when the username is taken.
        """
        try:
            with self._backend.connection() as db:
                cursor = db.execute(
                    "INSERT INTO Users (username, password_hash) VALUES (?, ?)",
                    (username.strip(), password_hash),
                )
                return int(cursor.lastrowid)
        except sqlite3.IntegrityError as e:
            raise ConflictError(f"User {username.strip()!r} already exists") from e
        except sqlite3.Error as e:
            logger.error("create_user failed: %s", e)
            raise StoreUnavailableError("User store is unavailable") from e

    def get_user_auth_by_username(self, username: str) -> Optional[Dict[str, Any]]:
        """Return ``{id, username, password_hash}`` or *None*."""
        try:
            with self._backend.connection() as db:
                row = db.execute(
                    "SELECT id, username, password_hash FROM Users WHERE username = ?",
                    (username.strip(),),
                ).fetchone()
        except sqlite3.Error as e:
            logger.error("get_user_auth_by_username failed: %s", e)
            raise StoreUnavailableError("User store is unavailable") from e
        if not row:
            return None
        return {"id": row[0], "username": row[1], "password_hash": row[2]}

    def update_password(self, user_id: int, password_hash: str) -> bool:
        """Update a user's password hash.  Returns *True* on success."""
        try:
            with self._backend.connection() as db:
                cursor = db.execute(
                    "UPDATE Users SET password_hash = ? WHERE id = ?",
                    (password_hash, user_id),
                )
                if cursor.rowcount != 1:
                    logger.warning("update_password failed: user %s not found", user_id)
                    return False
                return True
        except sqlite3.Error as e:
            logger.error("update_password failed: %s", e)
            raise StoreUnavailableError("User store is unavailable") from e

    def list_usernames(self) -> List[str]:
        try:
            with self._backend.connection() as db:
                return [row[0] for row in db.execute("SELECT username FROM Users ORDER BY username")]
        except sqlite3.Error as e:
            logger.error("list_usernames failed: %s", e)
            raise StoreUnavailableError("User store is unavailable") from e
