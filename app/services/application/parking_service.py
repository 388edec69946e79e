"""
Parking Service
===============
Slot occupancy updates and occupancy statistics.

Occupying a slot validates the plate and vehicle type and refuses a plate
that is already parked in another slot.  Every change is audited.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict, List, Optional

from app.domain.parking import ParkingSlot
from app.domain.exceptions import ConflictError, NotFoundError, ValidationError
from app.enums import ActivityAction, SlotStatus, StatsRange, VehicleType
from app.services.application.activity_logger import ActivityLogger
from app.utils.time import iso_now
from infrastructure.database.repositories.parking import ParkingRepository

logger = logging.getLogger(__name__)

PLATE_PATTERN = re.compile(r"^[A-Z]{3}[- ]?\d{3,4}$")
MAX_PLATE_LENGTH = 15

INVALID_PLATE_MESSAGE = "Invalid Plate Number! Format must be LLL-DDD or LLL-DDDD (e.g., ABC-123)."
INVALID_VEHICLE_MESSAGE = "Invalid Vehicle Type selected."
PLATE_TOO_LONG_MESSAGE = "Plate number is too long."

WEEKDAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


class ParkingService:
    def __init__(self, repo: ParkingRepository, activity_logger: ActivityLogger) -> None:
        self._repo = repo
        self._activity = activity_logger

    def list_spots(self) -> List[ParkingSlot]:
        return self._repo.list_slots()

    def update_spot(
        self,
        slot_id: str,
        status: SlotStatus | str,
        plate_number: Optional[str] = None,
        park_time: Optional[str] = None,
        vehicle_type: Optional[str] = None,
        *,
        actor: str,
        source_address: Optional[str] = None,
    ) -> ParkingSlot:
        """Occupy or release *slot_id* and return the updated slot.

        Raises:
            ValidationError: bad status, plate or vehicle type
            NotFoundError: unknown slot
            ConflictError: the plate is already parked in another slot
        """
        try:
            status = SlotStatus(status)
        except ValueError as exc:
            raise ValidationError(f"Invalid status: {status!r}") from exc

        if self._repo.get(slot_id) is None:
            raise NotFoundError(f"Parking spot {slot_id} not found")

        if status is SlotStatus.OCCUPIED:
            plate = (plate_number or "").strip()
            if len(plate) > MAX_PLATE_LENGTH:
                raise ValidationError(PLATE_TOO_LONG_MESSAGE)
            if not PLATE_PATTERN.match(plate):
                raise ValidationError(INVALID_PLATE_MESSAGE)
            if vehicle_type not in {v.value for v in VehicleType}:
                raise ValidationError(INVALID_VEHICLE_MESSAGE)

            parked = self._repo.find_parked(plate, exclude_slot=slot_id)
            if parked is not None:
                raise ConflictError(f"Error: Vehicle {plate} is already parked at {parked.slot_number}!")

            start_time = park_time or iso_now(timespec="seconds")
            updated = self._repo.update(slot_id, status.value, plate, start_time, vehicle_type)
            action = ActivityAction.OCCUPY_SPOT
            details = f"Parked {plate} ({vehicle_type}) at {slot_id}"
        else:
            updated = self._repo.update(slot_id, status.value, None, None, None)
            action = ActivityAction.RELEASE_SPOT
            details = f"Released spot {slot_id}"

        if not updated:
            raise NotFoundError(f"Parking spot {slot_id} not found")

        self._activity.append(actor, action, details, source_address)
        logger.info("%s: %s", action.value, details)
        return self._repo.get(slot_id)

    def occupancy_stats(self, range_name: StatsRange | str = StatsRange.DAILY) -> Dict[str, Any]:
        """Aggregate the current slot table.

        The time series counts arrivals of the vehicles parked right now,
        bucketed by hour of day, weekday or day of month.
        """
        try:
            stats_range = StatsRange(range_name)
        except ValueError as exc:
            raise ValidationError(f"Invalid range: {range_name!r}. Use daily, weekly or monthly.") from exc

        slots = self._repo.list_slots()
        occupied = [s for s in slots if s.is_occupied]
        total = len(slots)

        by_vehicle_type = {v.value: 0 for v in VehicleType}
        for slot in occupied:
            key = slot.vehicle_type if slot.vehicle_type in by_vehicle_type else VehicleType.OTHERS.value
            by_vehicle_type[key] += 1

        labels, bucket_of = _buckets(stats_range)
        values = [0] * len(labels)
        for slot in occupied:
            parked_at = slot.parked_at
            if parked_at is not None:
                values[bucket_of(parked_at)] += 1

        peak_index = max(range(len(values)), key=values.__getitem__)
        slow_index = min(range(len(values)), key=values.__getitem__)

        return {
            "range": stats_range.value,
            "total": total,
            "occupied": len(occupied),
            "available": total - len(occupied),
            "occupancy_rate": round(len(occupied) / total * 100, 1) if total else 0.0,
            "by_vehicle_type": by_vehicle_type,
            "labels": labels,
            "values": values,
            "peak": labels[peak_index],
            "slow": labels[slow_index],
            "average": round(sum(values) / len(values), 1),
        }


def _buckets(stats_range: StatsRange) -> tuple[List[str], Callable]:
    if stats_range is StatsRange.DAILY:
        return [f"{h:02d}:00" for h in range(24)], lambda dt: dt.hour
    if stats_range is StatsRange.WEEKLY:
        return list(WEEKDAY_LABELS), lambda dt: dt.weekday()
    return [str(d) for d in range(1, 32)], lambda dt: dt.day - 1
