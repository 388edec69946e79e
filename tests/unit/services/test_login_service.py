from unittest.mock import Mock, call

import pytest

from app.domain.exceptions import InvalidIdentityError, StoreUnavailableError
from app.enums import ActivityAction
from app.security.login_limiter import LoginGuard
from app.services.application.login_service import (
    LoginService,
    blocked_message,
    invalid_account_message,
    locked_message,
)

IP = "1.2.3.4"


@pytest.fixture()
def auth_manager():
    manager = Mock()
    manager.authenticate_user.return_value = False
    return manager


@pytest.fixture()
def audit():
    return Mock()


@pytest.fixture()
def service(clock, auth_manager, audit):
    guard = LoginGuard(max_attempts=3, lockout_seconds=300, clock=clock)
    return LoginService(guard, auth_manager, audit)


def test_messages():
    assert invalid_account_message(2) == "Invalid Account. 2 attempts remaining."
    assert blocked_message(5) == "Too many failed attempts. You are BLOCKED for 5 minutes."
    assert locked_message(61) == "Account Locked. Too many failed attempts. Try again in 1m 1s."


def test_successful_login(service, auth_manager, audit):
    auth_manager.authenticate_user.return_value = True

    outcome = service.attempt(" admin ", "secret-pass", IP)

    assert outcome.success is True
    assert outcome.http_status == 200
    assert outcome.username == "admin"
    assert outcome.message == "Login successful"
    auth_manager.authenticate_user.assert_called_once_with("admin", "secret-pass")
    audit.append.assert_called_once_with("admin", ActivityAction.LOGIN, "Admin logged in successfully", IP)


def test_failures_count_down_then_block(service, audit):
    first = service.attempt("admin", "wrong", IP)
    second = service.attempt("admin", "wrong", IP)
    third = service.attempt("admin", "wrong", IP)

    assert (first.http_status, first.message) == (401, "Invalid Account. 2 attempts remaining.")
    assert first.remaining_attempts == 2
    assert second.message == "Invalid Account. 1 attempts remaining."
    assert third.http_status == 429
    assert third.message == "Too many failed attempts. You are BLOCKED for 5 minutes."
    assert third.retry_after_seconds == 300
    assert third.remaining_attempts == 0
    assert audit.append.call_args_list == [
        call("admin", ActivityAction.LOGIN_FAILED, "Failed login attempt", IP),
    ] * 3


def test_locked_identity_is_refused_without_checking_credentials(service, auth_manager, audit, clock):
    for _ in range(3):
        service.attempt("admin", "wrong", IP)
    auth_manager.authenticate_user.reset_mock()
    audit.append.reset_mock()
    auth_manager.authenticate_user.return_value = True

    clock.advance(1)
    outcome = service.attempt("admin", "right-password", IP)

    assert outcome.success is False
    assert outcome.http_status == 429
    assert outcome.retry_after_seconds == 299
    assert outcome.message == "Account Locked. Too many failed attempts. Try again in 4m 59s."
    auth_manager.authenticate_user.assert_not_called()
    audit.append.assert_called_once_with("admin", ActivityAction.LOGIN_BLOCKED, "Blocked login attempt", IP)


def test_success_resets_the_counter(service, auth_manager):
    service.attempt("admin", "wrong", IP)
    service.attempt("admin", "wrong", IP)
    auth_manager.authenticate_user.return_value = True
    service.attempt("admin", "right-password", IP)
    auth_manager.authenticate_user.return_value = False

    outcome = service.attempt("admin", "wrong", IP)

    assert outcome.message == "Invalid Account. 2 attempts remaining."


def test_lockout_is_per_source_address(service):
    for _ in range(3):
        service.attempt("admin", "wrong", IP)

    outcome = service.attempt("admin", "wrong", "5.6.7.8")

    assert outcome.http_status == 401
    assert outcome.remaining_attempts == 2


def test_missing_username_is_audited_as_unknown(service, audit):
    service.attempt(None, None, IP)
    audit.append.assert_called_once_with("Unknown", ActivityAction.LOGIN_FAILED, "Failed login attempt", IP)


def test_store_outage_does_not_count_as_failure(service, auth_manager, audit):
    auth_manager.authenticate_user.side_effect = StoreUnavailableError("User store is unavailable")

    with pytest.raises(StoreUnavailableError):
        service.attempt("admin", "whatever", IP)

    assert service.guard.state_for(IP) is None
    audit.append.assert_not_called()


def test_empty_source_address_is_rejected(service):
    with pytest.raises(InvalidIdentityError):
        service.attempt("admin", "wrong", "")


def test_logout_and_timeout_audit_only_with_a_user(service, audit):
    service.logout(None, IP)
    service.session_timeout(None, IP)
    audit.append.assert_not_called()

    service.logout("admin", IP)
    service.session_timeout("admin", IP)

    assert audit.append.call_args_list == [
        call("admin", ActivityAction.LOGOUT, "Admin logged out", IP),
        call("admin", ActivityAction.SESSION_TIMEOUT, "System auto-logout due to inactivity", IP),
    ]


def test_federated_login_waits_for_the_audit_write(service, audit):
    service.record_federated_login("admin", "Google", IP)

    audit.append.assert_called_once_with(
        "admin",
        ActivityAction.LOGIN_OAUTH,
        "Admin logged in via Google",
        IP,
        wait_for_completion=True,
    )
