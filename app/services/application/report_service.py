"""Problem reports filed by visitors against vehicles parked in the facility."""

from __future__ import annotations

import logging
from typing import List, Optional

from app.domain.exceptions import NotFoundError, ValidationError
from app.domain.parking import ProblemReport
from app.enums import ActivityAction
from app.services.application.activity_logger import ActivityLogger
from infrastructure.database.repositories.parking import ParkingRepository
from infrastructure.database.repositories.reports import ReportRepository

logger = logging.getLogger(__name__)


class ReportService:
    def __init__(
        self,
        repo: ReportRepository,
        parking_repo: ParkingRepository,
        activity_logger: ActivityLogger,
    ) -> None:
        self._repo = repo
        self._parking = parking_repo
        self._activity = activity_logger

    def submit_report(
        self,
        category: Optional[str],
        description: Optional[str],
        name: Optional[str],
        plate: Optional[str],
    ) -> int:
        """Store a report and return its id.

        The plate must belong to a vehicle that is parked right now.
        """
        fields = [(value or "").strip() for value in (category, description, name, plate)]
        if not all(fields):
            raise ValidationError("All fields are required.")
        category, description, name, plate = fields

        if self._parking.find_parked(plate) is None:
            raise ValidationError(f"Report Failed: Vehicle {plate} is not currently parked in our facility.")

        report_id = self._repo.create(category, description, name, plate)
        logger.info("Problem report %s filed against %s", report_id, plate)
        return report_id

    def list_reports(self) -> List[ProblemReport]:
        return self._repo.list_all()

    def delete_report(self, report_id: int, *, actor: str, source_address: Optional[str] = None) -> None:
        if not self._repo.delete(report_id):
            raise NotFoundError(f"Report {report_id} not found")
        self._activity.append(actor, ActivityAction.DELETE_REPORT, f"Deleted report ID: {report_id}", source_address)
