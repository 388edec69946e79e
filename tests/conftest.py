"""
Shared test fixtures for the TUPark backend test suite.

Provides:
- File-backed SQLite database with all tables created and slots seeded
- Repository instances wired to the test database
- A controllable clock for lockout tests
- A Flask app built through ``create_app`` plus admin/anonymous clients

Usage:
    def test_example(parking_repo):
        assert parking_repo.get("P01") is not None
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from app.services.application.activity_logger import ActivityLogger  # noqa: E402
from app.services.application.auth_service import UserAuthManager  # noqa: E402
from infrastructure.database.repositories import (  # noqa: E402
    ActivityRepository,
    AuthRepository,
    ParkingRepository,
    ReportRepository,
)
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler  # noqa: E402

# ---------------------------------------------------------------------------
# Logging: keep test output quiet
# ---------------------------------------------------------------------------
logging.getLogger("infrastructure").setLevel(logging.WARNING)
logging.getLogger("app").setLevel(logging.WARNING)

SLOT_COUNT = 6
ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "correct-horse"


class FakeClock:
    """Monotonic clock stand-in; call ``advance`` to move time forward."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ========================== Database Fixtures ==============================


@pytest.fixture()
def db_handler(tmp_path):
    """SQLite database in a temp file with all tables created.

    A file is used rather than ``:memory:`` because the audit writer runs
    on its own thread and therefore its own connection.
    """
    handler = SQLiteDatabaseHandler(str(tmp_path / "tupark_test.db"))
    handler.create_tables()
    handler.seed_parking_slots(SLOT_COUNT)
    yield handler
    handler.close_db()


# ========================== Repository Fixtures ============================


@pytest.fixture()
def activity_repo(db_handler):
    return ActivityRepository(db_handler)


@pytest.fixture()
def auth_repo(db_handler):
    return AuthRepository(db_handler)


@pytest.fixture()
def parking_repo(db_handler):
    return ParkingRepository(db_handler)


@pytest.fixture()
def report_repo(db_handler):
    return ReportRepository(db_handler)


# ========================== Service Fixtures ===============================


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def activity_logger(activity_repo):
    """Synchronous ActivityLogger so assertions can read the table immediately."""
    service = ActivityLogger(activity_repo, max_entries=100, async_writes=False)
    yield service
    service.shutdown()


@pytest.fixture()
def auth_manager(db_handler, auth_repo):
    """UserAuthManager with cheap bcrypt rounds."""
    return UserAuthManager(db_handler, auth_repo=auth_repo, bcrypt_rounds=4)


# ========================== Flask Fixtures =================================


@pytest.fixture()
def app(tmp_path, monkeypatch):
    from app import create_app

    monkeypatch.setenv("TUPARK_SECRET_KEY", "test-secret")
    flask_app = create_app(
        {
            "database_path": str(tmp_path / "tupark_app.db"),
            "audit_fallback_log_path": str(tmp_path / "audit_fallback.log"),
            "log_dir": "",
            "testing": True,
            "audit_async_writes": False,
            "parking_slot_count": SLOT_COUNT,
        }
    )
    container = flask_app.config["CONTAINER"]
    container.auth_manager.bcrypt_rounds = 4
    container.auth_manager.register_user(ADMIN_USERNAME, ADMIN_PASSWORD)
    try:
        yield flask_app
    finally:
        container.shutdown()


@pytest.fixture()
def container(app):
    return app.config["CONTAINER"]


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def admin_client(app):
    test_client = app.test_client()
    _set_user_session(test_client, ADMIN_USERNAME)
    return test_client


def _set_user_session(client, username: str) -> None:
    with client.session_transaction() as sess:
        sess["user"] = username
        sess.permanent = True
