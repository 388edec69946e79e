"""
Enums Module
============

This module provides enumeration types for the TUPark application.
Enums ensure type safety and consistency across the codebase.
"""

from app.enums.common import (
    ActivityAction,
    SlotStatus,
    StatsRange,
    VehicleType,
)

__all__ = [
    "ActivityAction",
    "SlotStatus",
    "StatsRange",
    "VehicleType",
]
