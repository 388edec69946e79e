"""Problem Report API
=====================

Routes:
    POST   /api/submit-report         Public: file a report against a parked vehicle
    GET    /api/admin/reports         Admin: list reports, newest first
    DELETE /api/admin/reports/<id>    Admin: delete a report
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response

from app.blueprints.api._common import client_address, get_container, parse_body, success
from app.schemas.parking import ReportSubmitRequest
from app.security.auth import api_login_required, current_username
from app.utils.http import safe_route

logger = logging.getLogger(__name__)

reports_api = Blueprint("reports_api", __name__)


@reports_api.post("/submit-report")
@safe_route("Failed to submit report")
def submit_report() -> Response:
    body = parse_body(ReportSubmitRequest)
    report_id = get_container().report_service.submit_report(body.category, body.description, body.name, body.plate)
    return success({"report_id": report_id}, status=201, message="Report submitted")


@reports_api.get("/admin/reports")
@api_login_required
@safe_route("Failed to load reports")
def list_reports() -> Response:
    reports = get_container().report_service.list_reports()
    return success([report.to_dict() for report in reports])


@reports_api.delete("/admin/reports/<int:report_id>")
@api_login_required
@safe_route("Failed to delete report")
def delete_report(report_id: int) -> Response:
    get_container().report_service.delete_report(
        report_id,
        actor=current_username() or "Admin",
        source_address=client_address(),
    )
    return success({"report_id": report_id}, message="Report deleted")
