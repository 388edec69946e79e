"""Repository facades exposing typed accessors over low-level mixins."""

from infrastructure.database.repositories.activity_log import ActivityRepository
from infrastructure.database.repositories.auth import AuthRepository
from infrastructure.database.repositories.parking import ParkingRepository
from infrastructure.database.repositories.reports import ReportRepository

__all__ = [
    "ActivityRepository",
    "AuthRepository",
    "ParkingRepository",
    "ReportRepository",
]
