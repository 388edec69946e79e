import pytest

from app.domain.exceptions import NotFoundError, ValidationError
from app.services.application.report_service import ReportService


@pytest.fixture()
def service(report_repo, parking_repo, activity_logger):
    parking_repo.update("P03", "occupied", "ABC-123", "2026-05-04T08:00:00+00:00", "Car")
    return ReportService(report_repo, parking_repo, activity_logger)


def test_submit_report_for_parked_vehicle(service):
    report_id = service.submit_report("Blocking", "  Parked across two slots ", "Jane", "ABC-123")

    reports = service.list_reports()
    assert [r.report_id for r in reports] == [report_id]
    assert reports[0].description == "Parked across two slots"
    assert reports[0].plate_number == "ABC-123"
    assert reports[0].report_date is not None


@pytest.mark.parametrize(
    "fields",
    [
        ("", "desc", "Jane", "ABC-123"),
        ("Noise", "   ", "Jane", "ABC-123"),
        ("Noise", "desc", None, "ABC-123"),
        ("Noise", "desc", "Jane", ""),
    ],
)
def test_all_fields_are_required(service, fields):
    with pytest.raises(ValidationError, match="All fields are required."):
        service.submit_report(*fields)


def test_vehicle_must_be_parked(service):
    with pytest.raises(ValidationError) as exc_info:
        service.submit_report("Noise", "Alarm going off", "Jane", "ZZZ-999")
    assert str(exc_info.value) == "Report Failed: Vehicle ZZZ-999 is not currently parked in our facility."


def test_reports_are_listed_newest_first(service):
    first = service.submit_report("Noise", "Alarm", "Jane", "ABC-123")
    second = service.submit_report("Leak", "Oil on floor", "John", "ABC-123")

    assert [r.report_id for r in service.list_reports()] == [second, first]


def test_delete_report_is_audited(service, activity_logger):
    report_id = service.submit_report("Noise", "Alarm", "Jane", "ABC-123")

    service.delete_report(report_id, actor="admin", source_address="1.2.3.4")

    assert service.list_reports() == []
    entry = activity_logger.list_recent()[0]
    assert entry.action == "DELETE_REPORT"
    assert entry.details == f"Deleted report ID: {report_id}"


def test_delete_missing_report(service, activity_logger):
    with pytest.raises(NotFoundError, match="Report 42 not found"):
        service.delete_report(42, actor="admin")
    assert activity_logger.list_recent() == []
