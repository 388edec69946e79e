from __future__ import annotations

from dataclasses import dataclass

from app.domain.audit import AuditEntry
from infrastructure.database.ops.activity_log import ActivityOperations


@dataclass(frozen=True)
class ActivityRepository:
    _backend: ActivityOperations

    def insert(self, actor: str, action: str, details: str, source_address: str | None) -> int:
        return self._backend.insert_activity(actor, action, details, source_address)

    def prune(self, keep: int) -> int:
        return self._backend.prune_activities(keep)

    def recent(self, limit: int | None = None) -> list[AuditEntry]:
        return [AuditEntry.from_row(row) for row in self._backend.get_recent_activities(limit)]

    def count(self) -> int:
        return self._backend.count_activities()
