"""
Login Service
=============
Admin login flow: admission check, credential verification, attempt
accounting and the matching audit entries.

The client IP is the lockout identity; the submitted username is only used
as the audit actor.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from app.domain.audit import UNKNOWN_ACTOR
from app.enums import ActivityAction
from app.security.login_limiter import LoginGuard
from app.services.application.activity_logger import ActivityLogger
from app.services.application.auth_service import UserAuthManager
from app.utils.time import split_minutes_seconds

logger = logging.getLogger(__name__)


def locked_message(retry_after_seconds: int) -> str:
    minutes, seconds = split_minutes_seconds(retry_after_seconds)
    return f"Account Locked. Too many failed attempts. Try again in {minutes}m {seconds}s."


def invalid_account_message(remaining: int) -> str:
    return f"Invalid Account. {remaining} attempts remaining."


def blocked_message(lockout_minutes: int) -> str:
    return f"Too many failed attempts. You are BLOCKED for {lockout_minutes} minutes."


@dataclass(frozen=True)
class LoginOutcome:
    """What the login endpoint should tell the client."""

    success: bool
    message: str
    http_status: int = 200
    username: str | None = None
    retry_after_seconds: int | None = None
    remaining_attempts: int | None = None


class LoginService:
    def __init__(
        self,
        guard: LoginGuard,
        auth_manager: UserAuthManager,
        activity_logger: ActivityLogger,
    ) -> None:
        self._guard = guard
        self._auth = auth_manager
        self._activity = activity_logger

    @property
    def guard(self) -> LoginGuard:
        return self._guard

    def attempt(self, username: str | None, password: str | None, source_address: str) -> LoginOutcome:
        """Run one login attempt from *source_address*.

        Raises InvalidIdentityError when *source_address* is empty.
        """
        actor = (username or "").strip() or UNKNOWN_ACTOR

        admission = self._guard.check_admission(source_address)
        if not admission.admitted:
            self._activity.append(actor, ActivityAction.LOGIN_BLOCKED, "Blocked login attempt", source_address)
            return LoginOutcome(
                success=False,
                message=locked_message(admission.retry_after_seconds),
                http_status=429,
                retry_after_seconds=admission.retry_after_seconds,
            )

        if self._auth.authenticate_user((username or "").strip(), password or ""):
            self._guard.record_success(source_address)
            self._activity.append(actor, ActivityAction.LOGIN, "Admin logged in successfully", source_address)
            return LoginOutcome(success=True, message="Login successful", username=actor)

        self._activity.append(actor, ActivityAction.LOGIN_FAILED, "Failed login attempt", source_address)
        result = self._guard.record_failure(source_address)
        if result.locked:
            return LoginOutcome(
                success=False,
                message=blocked_message(self._guard.lockout_minutes),
                http_status=429,
                retry_after_seconds=self._guard.lockout_seconds,
                remaining_attempts=0,
            )
        return LoginOutcome(
            success=False,
            message=invalid_account_message(result.remaining),
            http_status=401,
            remaining_attempts=result.remaining,
        )

    def logout(self, username: str | None, source_address: str | None) -> None:
        if username:
            self._activity.append(username, ActivityAction.LOGOUT, "Admin logged out", source_address)

    def session_timeout(self, username: str | None, source_address: str | None) -> None:
        if username:
            self._activity.append(
                username,
                ActivityAction.SESSION_TIMEOUT,
                "System auto-logout due to inactivity",
                source_address,
            )

    def record_federated_login(self, username: str, provider: str, source_address: str | None) -> None:
        """Audit a login completed by an external identity provider.

        Blocks until the entry is stored, since the caller redirects right after.
        """
        self._activity.append(
            username,
            ActivityAction.LOGIN_OAUTH,
            f"Admin logged in via {provider}",
            source_address,
            wait_for_completion=True,
        )
