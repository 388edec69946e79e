"""
Domain Value Objects Package
=============================
Contains immutable value objects for the parking facility and its audit trail.
"""

from .audit import UNKNOWN_ACTOR, AuditEntry
from .parking import ParkingSlot, ProblemReport

__all__ = [
    "UNKNOWN_ACTOR",
    "AuditEntry",
    "ParkingSlot",
    "ProblemReport",
]
