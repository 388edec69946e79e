from __future__ import annotations

import logging
from dataclasses import dataclass, field

from app.config import AppConfig
from app.security.login_limiter import LoginGuard
from app.services.application.activity_logger import ActivityLogger
from app.services.application.auth_service import UserAuthManager
from app.services.application.login_service import LoginService
from app.services.application.parking_service import ParkingService
from app.services.application.report_service import ReportService
from app.services.container_builder import ContainerBuilder
from infrastructure.database.repositories import (
    ActivityRepository,
    AuthRepository,
    ParkingRepository,
    ReportRepository,
)
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler
from infrastructure.logging.audit import AuditFallbackLogger

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Aggregate and manage core backend services."""

    config: AppConfig
    database: SQLiteDatabaseHandler
    activity_repo: ActivityRepository
    auth_repo: AuthRepository
    parking_repo: ParkingRepository
    report_repo: ReportRepository
    audit_fallback: AuditFallbackLogger
    activity_logger: ActivityLogger
    login_guard: LoginGuard
    auth_manager: UserAuthManager
    login_service: LoginService
    parking_service: ParkingService
    report_service: ReportService
    _shutdown_complete: bool = field(default=False, init=False, repr=False)

    @classmethod
    def build(cls, config: AppConfig) -> "ServiceContainer":
        """Construct the service container with all dependencies."""
        logger.info("Building ServiceContainer using ContainerBuilder...")
        container = cls(**ContainerBuilder(config).build())
        logger.info("ServiceContainer built successfully.")
        return container

    def shutdown(self) -> None:
        """Drain the audit writer and release the database connection."""
        if self._shutdown_complete:
            return
        self._shutdown_complete = True

        try:
            self.activity_logger.shutdown()
        except Exception as e:
            logger.warning("Failed to stop activity logger: %s", e)

        self.database.close_db()
        self.audit_fallback.close()
        logger.info("ServiceContainer shutdown complete.")
