"""
Parking Facility
================
Parking slots and the problem reports visitors file against parked vehicles.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from app.enums import SlotStatus
from app.utils.time import coerce_datetime


@dataclass(frozen=True)
class ParkingSlot:
    slot_number: str
    status: SlotStatus
    plate_number: Optional[str] = None
    start_time: Optional[str] = None
    vehicle_type: Optional[str] = None

    @property
    def is_occupied(self) -> bool:
        return self.status is SlotStatus.OCCUPIED

    @property
    def parked_at(self) -> Optional[datetime]:
        """``start_time`` parsed as a UTC datetime, if it parses."""
        return coerce_datetime(self.start_time)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ParkingSlot":
        return cls(
            slot_number=row["slot_number"],
            status=SlotStatus(row["status"]),
            plate_number=row.get("plate_number"),
            start_time=row.get("start_time"),
            vehicle_type=row.get("vehicle_type"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'slot_number': self.slot_number,
            'status': self.status.value,
            'plate_number': self.plate_number,
            'start_time': self.start_time,
            'vehicle_type': self.vehicle_type,
        }


@dataclass(frozen=True)
class ProblemReport:
    """A visitor-submitted complaint about a parked vehicle."""
    report_id: int
    category: str
    description: str
    reporter_name: str
    plate_number: str
    report_date: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ProblemReport":
        return cls(
            report_id=int(row["report_id"]),
            category=row["category"],
            description=row["description"],
            reporter_name=row["reporter_name"],
            plate_number=row["plate_number"],
            report_date=coerce_datetime(row.get("report_date")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.report_id,
            'category': self.category,
            'description': self.description,
            'reporter_name': self.reporter_name,
            'plate_number': self.plate_number,
            'report_date': self.report_date.isoformat() if self.report_date else None,
        }
