from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict, List, Optional

from app.domain.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


class ActivityOperations:
    """Database operations for ActivityLog table."""

    def insert_activity(self, username: str, action: str, details: str, ip_address: Optional[str]) -> int:
        try:
            with self.connection() as db:
                cur = db.execute(
                    "INSERT INTO ActivityLog (username, action, details, ip_address) VALUES (?, ?, ?, ?)",
                    (username, action, details, ip_address),
                )
                return int(cur.lastrowid)
        except sqlite3.Error as exc:
            logger.error("insert_activity failed: %s", exc)
            raise StoreUnavailableError("Activity log insert failed") from exc

    def prune_activities(self, keep: int) -> int:
        """Delete all but the newest *keep* rows (by ``activity_id``). Returns rows deleted."""
        try:
            with self.connection() as db:
                cur = db.execute(
                    """
                    DELETE FROM ActivityLog
                    WHERE activity_id NOT IN (
                        SELECT activity_id FROM ActivityLog ORDER BY activity_id DESC LIMIT ?
                    )
                    """,
                    (max(0, keep),),
                )
                return max(0, cur.rowcount)
        except sqlite3.Error as exc:
            logger.error("prune_activities failed: %s", exc)
            raise StoreUnavailableError("Activity log retention failed") from exc

    def get_recent_activities(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        query = (
            "SELECT activity_id, timestamp, username, action, details, ip_address "
            "FROM ActivityLog ORDER BY activity_id DESC"
        )
        params: List[Any] = []
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)
        try:
            db = self.get_db()
            return [dict(r) for r in db.execute(query, params).fetchall()]
        except sqlite3.Error as exc:
            logger.error("get_recent_activities failed: %s", exc)
            raise StoreUnavailableError("Activity log is unavailable") from exc

    def count_activities(self) -> int:
        try:
            db = self.get_db()
            return int(db.execute("SELECT COUNT(*) FROM ActivityLog").fetchone()[0])
        except sqlite3.Error as exc:
            logger.error("count_activities failed: %s", exc)
            raise StoreUnavailableError("Activity log is unavailable") from exc
