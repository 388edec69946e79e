from __future__ import annotations

from dataclasses import dataclass

from app.domain.parking import ParkingSlot
from infrastructure.database.ops.parking import ParkingOperations


@dataclass(frozen=True)
class ParkingRepository:
    _backend: ParkingOperations

    def list_slots(self) -> list[ParkingSlot]:
        return [ParkingSlot.from_row(row) for row in self._backend.get_all_slots()]

    def get(self, slot_number: str) -> ParkingSlot | None:
        row = self._backend.get_slot(slot_number)
        return ParkingSlot.from_row(row) if row else None

    def find_parked(self, plate_number: str, *, exclude_slot: str | None = None) -> ParkingSlot | None:
        row = self._backend.find_occupied_slot_by_plate(plate_number, exclude_slot)
        return ParkingSlot.from_row(row) if row else None

    def update(
        self,
        slot_number: str,
        status: str,
        plate_number: str | None,
        start_time: str | None,
        vehicle_type: str | None,
    ) -> bool:
        return self._backend.update_slot(slot_number, status, plate_number, start_time, vehicle_type)

    def seed(self, count: int) -> int:
        return self._backend.seed_parking_slots(count)
