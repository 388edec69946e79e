"""
Audit Trail Entries
===================
Immutable records of administrator and visitor activity.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from app.utils.time import coerce_datetime

UNKNOWN_ACTOR = "Unknown"


@dataclass(frozen=True)
class AuditEntry:
    """A single row of the activity log, as stored."""
    entry_id: int
    actor: str
    action: str
    details: str
    source_address: Optional[str]
    timestamp: Optional[datetime]

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "AuditEntry":
        return cls(
            entry_id=int(row["activity_id"]),
            actor=row["username"],
            action=row["action"],
            details=row.get("details") or "",
            source_address=row.get("ip_address"),
            timestamp=coerce_datetime(row.get("timestamp")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'id': self.entry_id,
            'username': self.actor,
            'action': self.action,
            'details': self.details,
            'ip_address': self.source_address,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
        }
