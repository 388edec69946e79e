"""
Container Builder
=================
Builds the service container in stages: infrastructure (database,
repositories, audit trail), security (login guard) and application
services.  Each stage returns a small dataclass of its components.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Any

from app.config import AppConfig
from app.security.login_limiter import InMemoryAttemptStore, LoginGuard
from app.services.application.activity_logger import ActivityLogger
from app.services.application.auth_service import UserAuthManager
from app.services.application.login_service import LoginService
from app.services.application.parking_service import ParkingService
from app.services.application.report_service import ReportService
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
class InfrastructureComponents:
    database: SQLiteDatabaseHandler
    activity_repo: ActivityRepository
    auth_repo: AuthRepository
    parking_repo: ParkingRepository
    report_repo: ReportRepository
    audit_fallback: AuditFallbackLogger
    activity_logger: ActivityLogger


@dataclass
class SecurityComponents:
    login_guard: LoginGuard
    auth_manager: UserAuthManager


@dataclass
class ApplicationComponents:
    login_service: LoginService
    parking_service: ParkingService
    report_service: ReportService


class ContainerBuilder:
    """
    Builder for constructing the service container.

    Each method constructs one subsystem; :meth:`build` wires them together.
    """

    def __init__(self, config: AppConfig):
        """Initialize builder with configuration."""
        self.config = config

    def build_infrastructure(self) -> InfrastructureComponents:
        """Build infrastructure layer (database, repositories, audit trail)."""
        logger.info("Building infrastructure components...")

        database = SQLiteDatabaseHandler(self.config.database_path, timeout=self.config.db_timeout_seconds)
        database.init_app(None, parking_slot_count=self.config.parking_slot_count)

        activity_repo = ActivityRepository(database)
        audit_fallback = AuditFallbackLogger(self.config.audit_fallback_log_path)
        activity_logger = ActivityLogger(
            activity_repo,
            max_entries=self.config.audit_max_entries,
            async_writes=self.config.audit_async_writes,
            fallback=audit_fallback,
        )

        logger.info("Infrastructure components initialized")
        return InfrastructureComponents(
            database=database,
            activity_repo=activity_repo,
            auth_repo=AuthRepository(database),
            parking_repo=ParkingRepository(database),
            report_repo=ReportRepository(database),
            audit_fallback=audit_fallback,
            activity_logger=activity_logger,
        )

    def build_security_components(self, infra: InfrastructureComponents) -> SecurityComponents:
        guard = LoginGuard(
            max_attempts=self.config.login_max_attempts,
            lockout_seconds=self.config.login_lockout_minutes * 60,
            store=InMemoryAttemptStore(self.config.login_tracker_max_entries),
        )
        auth_manager = UserAuthManager(infra.database, auth_repo=infra.auth_repo)
        return SecurityComponents(login_guard=guard, auth_manager=auth_manager)

    def build_application_components(
        self,
        infra: InfrastructureComponents,
        security: SecurityComponents,
    ) -> ApplicationComponents:
        return ApplicationComponents(
            login_service=LoginService(security.login_guard, security.auth_manager, infra.activity_logger),
            parking_service=ParkingService(infra.parking_repo, infra.activity_logger),
            report_service=ReportService(infra.report_repo, infra.parking_repo, infra.activity_logger),
        )

    def build(self) -> dict[str, Any]:
        """Build every subsystem and return keyword arguments for ServiceContainer."""
        infra = self.build_infrastructure()
        security = self.build_security_components(infra)
        application = self.build_application_components(infra, security)

        components: dict[str, Any] = {"config": self.config}
        for group in (infra, security, application):
            components.update({f.name: getattr(group, f.name) for f in fields(group)})
        return components


__all__ = ["ContainerBuilder"]
