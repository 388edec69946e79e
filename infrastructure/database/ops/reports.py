from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict, List

from app.domain.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


class ReportOperations:
    """Database operations for ProblemReports table."""

    def insert_report(self, category: str, description: str, reporter_name: str, plate_number: str) -> int:
        try:
            with self.connection() as db:
                cur = db.execute(
                    """
                    INSERT INTO ProblemReports (category, description, reporter_name, plate_number)
                    VALUES (?, ?, ?, ?)
                    """,
                    (category, description, reporter_name, plate_number),
                )
                return int(cur.lastrowid)
        except sqlite3.Error as exc:
            logger.error("insert_report failed: %s", exc)
            raise StoreUnavailableError("Saving the report failed") from exc

    def get_reports(self) -> List[Dict[str, Any]]:
        try:
            db = self.get_db()
            cur = db.execute(
                """
                SELECT report_id, category, description, reporter_name, plate_number, report_date
                FROM ProblemReports
                ORDER BY report_date DESC, report_id DESC
                """
            )
            return [dict(r) for r in cur.fetchall()]
        except sqlite3.Error as exc:
            logger.error("get_reports failed: %s", exc)
            raise StoreUnavailableError("Problem reports are unavailable") from exc

    def delete_report(self, report_id: int) -> bool:
        try:
            with self.connection() as db:
                cur = db.execute("DELETE FROM ProblemReports WHERE report_id = ?", (report_id,))
                return cur.rowcount == 1
        except sqlite3.Error as exc:
            logger.error("delete_report failed: %s", exc)
            raise StoreUnavailableError("Deleting the report failed") from exc
