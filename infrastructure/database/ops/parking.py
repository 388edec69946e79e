from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict, List, Optional

from app.domain.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)

_SLOT_COLUMNS = "slot_number, status, plate_number, start_time, vehicle_type"


class ParkingOperations:
    """Database operations for ParkingSlots table."""

    def get_all_slots(self) -> List[Dict[str, Any]]:
        try:
            db = self.get_db()
            cur = db.execute(f"SELECT {_SLOT_COLUMNS} FROM ParkingSlots ORDER BY slot_number")
            return [dict(r) for r in cur.fetchall()]
        except sqlite3.Error as exc:
            logger.error("get_all_slots failed: %s", exc)
            raise StoreUnavailableError("Parking slots are unavailable") from exc

    def get_slot(self, slot_number: str) -> Optional[Dict[str, Any]]:
        try:
            db = self.get_db()
            row = db.execute(
                f"SELECT {_SLOT_COLUMNS} FROM ParkingSlots WHERE slot_number = ?",
                (slot_number,),
            ).fetchone()
            return dict(row) if row else None
        except sqlite3.Error as exc:
            logger.error("get_slot failed: %s", exc)
            raise StoreUnavailableError("Parking slots are unavailable") from exc

    def find_occupied_slot_by_plate(
        self, plate_number: str, exclude_slot: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        query = f"SELECT {_SLOT_COLUMNS} FROM ParkingSlots WHERE plate_number = ? AND status = 'occupied'"
        params: List[Any] = [plate_number]
        if exclude_slot is not None:
            query += " AND slot_number != ?"
            params.append(exclude_slot)
        try:
            db = self.get_db()
            row = db.execute(query + " ORDER BY slot_number LIMIT 1", params).fetchone()
            return dict(row) if row else None
        except sqlite3.Error as exc:
            logger.error("find_occupied_slot_by_plate failed: %s", exc)
            raise StoreUnavailableError("Parking slots are unavailable") from exc

    def update_slot(
        self,
        slot_number: str,
        status: str,
        plate_number: Optional[str],
        start_time: Optional[str],
        vehicle_type: Optional[str],
    ) -> bool:
        """Overwrite a slot's occupancy columns. Returns *False* when the slot does not exist."""
        try:
            with self.connection() as db:
                cur = db.execute(
                    """
                    UPDATE ParkingSlots
                    SET status = ?, plate_number = ?, start_time = ?, vehicle_type = ?
                    WHERE slot_number = ?
                    """,
                    (status, plate_number, start_time, vehicle_type, slot_number),
                )
                return cur.rowcount == 1
        except sqlite3.Error as exc:
            logger.error("update_slot failed: %s", exc)
            raise StoreUnavailableError("Parking slot update failed") from exc

    def seed_parking_slots(self, count: int) -> int:
        """Create ``P01``.. slots when the table is empty. Returns how many were created."""
        try:
            with self.connection() as db:
                existing = db.execute("SELECT COUNT(*) FROM ParkingSlots").fetchone()[0]
                if existing or count <= 0:
                    return 0
                width = max(2, len(str(count)))
                rows = [(f"P{i:0{width}d}", "available") for i in range(1, count + 1)]
                db.executemany("INSERT INTO ParkingSlots (slot_number, status) VALUES (?, ?)", rows)
            logger.info("Seeded ParkingSlots table with %d slots.", len(rows))
            return len(rows)
        except sqlite3.Error as exc:
            logger.error("seed_parking_slots failed: %s", exc)
            raise StoreUnavailableError("Parking slot seeding failed") from exc
