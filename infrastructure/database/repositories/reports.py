from __future__ import annotations

from dataclasses import dataclass

from app.domain.parking import ProblemReport
from infrastructure.database.ops.reports import ReportOperations


@dataclass(frozen=True)
class ReportRepository:
    _backend: ReportOperations

    def create(self, category: str, description: str, reporter_name: str, plate_number: str) -> int:
        return self._backend.insert_report(category, description, reporter_name, plate_number)

    def list_all(self) -> list[ProblemReport]:
        return [ProblemReport.from_row(row) for row in self._backend.get_reports()]

    def delete(self, report_id: int) -> bool:
        return self._backend.delete_report(report_id)
