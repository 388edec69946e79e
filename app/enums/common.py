"""
Common Enumerations
====================

Application-wide enums shared by the services, repositories and blueprints.
"""

from enum import Enum


class ActivityAction(str, Enum):
    """
    Audit trail actions.
    Used by: activity_logger, login_service, parking_service, report_service
    """
    LOGIN = "LOGIN"
    LOGIN_FAILED = "LOGIN_FAILED"
    LOGIN_BLOCKED = "LOGIN_BLOCKED"
    LOGOUT = "LOGOUT"
    SESSION_TIMEOUT = "SESSION_TIMEOUT"
    OCCUPY_SPOT = "OCCUPY_SPOT"
    RELEASE_SPOT = "RELEASE_SPOT"
    DELETE_REPORT = "DELETE_REPORT"
    LOGIN_OAUTH = "LOGIN_OAUTH"

    def __str__(self) -> str:
        return self.value


class SlotStatus(str, Enum):
    """Occupancy state of a parking slot."""
    OCCUPIED = "occupied"
    AVAILABLE = "available"

    def __str__(self) -> str:
        return self.value


class VehicleType(str, Enum):
    """
    Vehicle categories accepted when occupying a slot.
    Used by: parking_service, occupancy statistics
    """
    CAR = "Car"
    MOTORCYCLE = "Motorcycle"
    VAN = "Van"
    OTHERS = "Others"

    def __str__(self) -> str:
        return self.value


class StatsRange(str, Enum):
    """Bucketing range for the occupancy statistics time series."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    def __str__(self) -> str:
        return self.value
