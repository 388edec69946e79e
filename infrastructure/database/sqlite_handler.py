import logging
import shutil
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from flask import Flask

from app.enums import ActivityAction, SlotStatus
from infrastructure.database.ops.activity_log import ActivityOperations
from infrastructure.database.ops.parking import ParkingOperations
from infrastructure.database.ops.reports import ReportOperations

logger = logging.getLogger(__name__)


def _sql_choices(values) -> str:
    return ", ".join(f"'{v.value}'" for v in values)


class SQLiteDatabaseHandler(
    ParkingOperations,
    ReportOperations,
    ActivityOperations,
):
    """Thread-safe SQLite handler decoupled from Flask globals.

    Every thread gets its own connection; the audit writer thread and the
    request threads therefore never share one.  Use a file path rather than
    ``:memory:`` whenever more than one thread touches the database.
    """

    def __init__(self, database_path: str, timeout: float = 5.0) -> None:
        self._database_path = database_path
        self._timeout = timeout
        self._local = threading.local()

        # Ensure the directory for the database file exists
        db_path = Path(database_path)
        if database_path != ":memory:" and not db_path.parent.exists():
            db_path.parent.mkdir(parents=True, exist_ok=True)
            logger.info("Created database directory: %s", db_path.parent)

    @property
    def database_path(self) -> str:
        return self._database_path

    # --- Lifecycle ------------------------------------------------------------
    def init_app(self, app: Flask | None = None, *, parking_slot_count: int = 0) -> None:
        if app is not None:
            app.teardown_appcontext(self.close_db)
        self.create_tables()
        if parking_slot_count:
            self.seed_parking_slots(parking_slot_count)

    def get_db(self) -> sqlite3.Connection:
        connection: Optional[sqlite3.Connection] = getattr(self._local, "connection", None)
        if connection is None:
            try:
                connection = self._open_connection()
            except sqlite3.DatabaseError as exc:
                if self._is_corruption_error(exc):
                    logger.error("Database appears corrupt (%s). Recreating a fresh database.", exc)
                    self._quarantine_corrupt_db()
                    connection = self._open_connection()
                else:
                    raise
            self._local.connection = connection
        return connection

    def _open_connection(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._database_path, timeout=self._timeout, check_same_thread=False)
        try:
            connection.row_factory = sqlite3.Row
            self._configure_connection(connection)
            return connection
        except Exception:
            connection.close()
            raise

    def _is_corruption_error(self, exc: sqlite3.Error) -> bool:
        message = str(exc).lower()
        return (
            "database disk image is malformed" in message
            or "file is not a database" in message
            or "file is encrypted or is not a database" in message
        )

    def _quarantine_corrupt_db(self) -> Optional[Path]:
        db_path = Path(self._database_path)
        if not db_path.exists():
            return None

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        quarantine_dir = db_path.parent / "corrupt"
        quarantine_dir.mkdir(parents=True, exist_ok=True)

        suffix = db_path.suffix or ".db"
        quarantined = quarantine_dir / f"{db_path.stem}_corrupt_{timestamp}{suffix}"
        try:
            shutil.move(str(db_path), str(quarantined))
            for sidecar_suffix in ("-wal", "-shm"):
                sidecar = Path(f"{db_path}{sidecar_suffix}")
                if sidecar.exists():
                    shutil.move(str(sidecar), str(quarantine_dir / f"{sidecar.name}_{timestamp}"))
            logger.warning("Quarantined corrupt database to %s", quarantined)
            return quarantined
        except OSError as exc:
            logger.error("Failed to quarantine corrupt database %s: %s", db_path, exc)
            return None

    def _configure_connection(self, connection: sqlite3.Connection) -> None:
        """Configure SQLite connection.

        - WAL mode: concurrent readers alongside the audit writer
        - NORMAL synchronous: still safe with WAL
        - busy_timeout: bounded wait when another thread holds the write lock
        """
        connection.execute("PRAGMA journal_mode=WAL")
        connection.execute("PRAGMA synchronous=NORMAL")
        connection.execute(f"PRAGMA busy_timeout={int(self._timeout * 1000)}")
        connection.execute("PRAGMA temp_store=MEMORY")
        connection.commit()

    def close_db(self, _e: Optional[BaseException] = None) -> None:
        connection: Optional[sqlite3.Connection] = getattr(self._local, "connection", None)
        if connection is not None:
            connection.close()
            delattr(self._local, "connection")

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        conn = self.get_db()
        try:
            yield conn
        finally:
            conn.commit()

    # --- Schema ----------------------------------------------------------------
    def create_tables(self) -> None:
        """Creates the necessary tables in the database if they do not already exist."""
        with self.connection() as db:
            db.execute(
                """
                CREATE TABLE IF NOT EXISTS Users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    username TEXT UNIQUE NOT NULL,
                    password_hash TEXT NOT NULL
                )
                """
            )
            db.execute(
                f"""
                CREATE TABLE IF NOT EXISTS ParkingSlots (
                    slot_number TEXT PRIMARY KEY,
                    status TEXT NOT NULL DEFAULT 'available'
                        CHECK(status IN ({_sql_choices(SlotStatus)})),
                    plate_number TEXT,
                    start_time TEXT,
                    vehicle_type TEXT
                )
                """
            )
            db.execute(
                """
                CREATE TABLE IF NOT EXISTS ProblemReports (
                    report_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    category TEXT NOT NULL,
                    description TEXT NOT NULL,
                    reporter_name TEXT NOT NULL,
                    plate_number TEXT NOT NULL,
                    report_date DATETIME DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            # Activity Logging System
            db.execute(
                f"""
                CREATE TABLE IF NOT EXISTS ActivityLog (
                    activity_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    timestamp DATETIME DEFAULT CURRENT_TIMESTAMP,
                    username TEXT NOT NULL,
                    action TEXT NOT NULL CHECK(action IN ({_sql_choices(ActivityAction)})),
                    details TEXT,
                    ip_address TEXT
                )
                """
            )
            db.execute("CREATE INDEX IF NOT EXISTS idx_parking_plate ON ParkingSlots(plate_number)")
            db.execute("CREATE INDEX IF NOT EXISTS idx_reports_date ON ProblemReports(report_date DESC)")
