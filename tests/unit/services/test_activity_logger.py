import json
import logging
from unittest.mock import Mock

import pytest

from app.domain.exceptions import StoreUnavailableError, ValidationError
from app.enums import ActivityAction
from app.services.application.activity_logger import ActivityLogger
from infrastructure.logging.audit import AuditFallbackLogger


def test_retention_keeps_only_newest_entries(activity_repo):
    service = ActivityLogger(activity_repo, max_entries=100, async_writes=False)

    for i in range(1, 106):
        service.append("admin", ActivityAction.LOGIN, f"entry {i}", "1.2.3.4")

    entries = service.list_recent()
    assert len(entries) == 100
    assert entries[0].details == "entry 105"
    assert entries[-1].details == "entry 6"
    details = {e.details for e in entries}
    assert not details & {f"entry {i}" for i in range(1, 6)}
    ids = [e.entry_id for e in entries]
    assert ids == sorted(ids, reverse=True)


def test_enforce_retention_is_idempotent(activity_repo):
    service = ActivityLogger(activity_repo, max_entries=3, async_writes=False)
    for i in range(3):
        activity_repo.insert("admin", "LOGIN", f"raw {i}", None)
    for i in range(2):
        activity_repo.insert("admin", "LOGOUT", f"raw extra {i}", None)

    assert service.enforce_retention() == 2
    assert service.enforce_retention() == 0
    assert activity_repo.count() == 3


def test_list_recent_honours_limit(activity_logger):
    for i in range(5):
        activity_logger.append("admin", "LOGIN", f"entry {i}", "1.2.3.4")

    entries = activity_logger.list_recent(2)
    assert [e.details for e in entries] == ["entry 4", "entry 3"]


def test_blank_actor_is_recorded_as_unknown(activity_logger):
    activity_logger.append("   ", ActivityAction.LOGIN_FAILED, "Failed login attempt", "1.2.3.4")
    activity_logger.append(None, ActivityAction.LOGIN_FAILED, "Failed login attempt", "1.2.3.4")

    assert [e.actor for e in activity_logger.list_recent()] == ["Unknown", "Unknown"]


def test_action_strings_are_accepted_case_insensitively(activity_logger):
    activity_logger.append("admin", "logout", "Admin logged out", "1.2.3.4")
    assert activity_logger.list_recent()[0].action == "LOGOUT"


def test_unknown_action_is_rejected(activity_logger):
    with pytest.raises(ValidationError):
        activity_logger.append("admin", "SELF_DESTRUCT", "", "1.2.3.4")


def test_entry_serializes_with_public_field_names(activity_logger):
    activity_logger.append("admin", ActivityAction.OCCUPY_SPOT, "Parked ABC-123 (Car) at P01", "10.0.0.5")

    payload = activity_logger.list_recent()[0].to_dict()
    assert payload["username"] == "admin"
    assert payload["action"] == "OCCUPY_SPOT"
    assert payload["details"] == "Parked ABC-123 (Car) at P01"
    assert payload["ip_address"] == "10.0.0.5"
    assert payload["timestamp"] is not None
    assert isinstance(payload["id"], int)


def test_async_appends_land_after_flush(activity_repo):
    service = ActivityLogger(activity_repo, max_entries=100, async_writes=True)
    try:
        for i in range(20):
            service.append("admin", ActivityAction.LOGIN, f"entry {i}", "1.2.3.4")
        assert service.flush(timeout=5) is True
        entries = service.list_recent()
        assert len(entries) == 20
        assert entries[0].details == "entry 19"
    finally:
        service.shutdown()


def test_wait_for_completion_preserves_order(activity_repo):
    service = ActivityLogger(activity_repo, max_entries=100, async_writes=True)
    try:
        for i in range(5):
            service.append("admin", ActivityAction.LOGIN, f"queued {i}", "1.2.3.4")
        service.append("admin", ActivityAction.LOGIN_OAUTH, "direct", "1.2.3.4", wait_for_completion=True)

        entries = service.list_recent()
        assert len(entries) == 6
        assert entries[0].details == "direct"
    finally:
        service.shutdown()


def test_appends_after_shutdown_are_written_inline(activity_repo):
    service = ActivityLogger(activity_repo, max_entries=100, async_writes=True)
    service.shutdown()
    service.shutdown()

    service.append("admin", ActivityAction.LOGOUT, "late", "1.2.3.4")

    assert service.list_recent()[0].details == "late"
    assert service.flush() is True


def test_store_failure_is_swallowed_and_sent_to_fallback(caplog):
    repo = Mock()
    repo.insert.side_effect = StoreUnavailableError("disk full")
    fallback = Mock()
    service = ActivityLogger(repo, async_writes=False, fallback=fallback)

    with caplog.at_level(logging.ERROR, logger="tupark.audit"):
        service.append("admin", ActivityAction.LOGIN, "Admin logged in successfully", "1.2.3.4")

    fallback.record_lost_entry.assert_called_once_with(
        "admin", "LOGIN", "Admin logged in successfully", "1.2.3.4", reason="disk full"
    )
    repo.prune.assert_not_called()
    assert any("not persisted" in record.getMessage() for record in caplog.records)


def test_retention_failure_does_not_lose_the_entry():
    repo = Mock()
    repo.insert.return_value = 1
    repo.prune.side_effect = StoreUnavailableError("locked")
    fallback = Mock()
    service = ActivityLogger(repo, async_writes=False, fallback=fallback)

    service.append("admin", ActivityAction.LOGOUT, "Admin logged out", "1.2.3.4")

    repo.insert.assert_called_once_with("admin", "LOGOUT", "Admin logged out", "1.2.3.4")
    fallback.record_lost_entry.assert_not_called()


def test_fallback_file_receives_json_line(tmp_path):
    repo = Mock()
    repo.insert.side_effect = StoreUnavailableError("database is locked")
    fallback = AuditFallbackLogger(str(tmp_path / "fallback" / "audit.log"), logger_name="tupark.audit.fallback.test")
    service = ActivityLogger(repo, async_writes=False, fallback=fallback)

    service.append("admin", ActivityAction.DELETE_REPORT, "Deleted report ID: 4", "1.2.3.4")
    fallback.close()

    lines = (tmp_path / "fallback" / "audit.log").read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    record = json.loads(lines[0].split(" | ", 2)[2])
    assert record["action"] == "DELETE_REPORT"
    assert record["outcome"] == "not_persisted"
    assert record["reason"] == "database is locked"


def test_list_recent_surfaces_store_failure():
    repo = Mock()
    repo.recent.side_effect = StoreUnavailableError("gone")
    service = ActivityLogger(repo, async_writes=False)

    with pytest.raises(StoreUnavailableError):
        service.list_recent()
