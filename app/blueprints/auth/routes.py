from __future__ import annotations

import logging

from flask import Blueprint

from app.blueprints.api._common import client_address, fail, get_container, parse_body, success
from app.schemas.auth import LoginRequest
from app.security.auth import end_admin_session, start_admin_session
from app.utils.http import safe_route

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)


@auth_bp.post("/login")
@safe_route("Login failed")
def login():
    body = parse_body(LoginRequest)
    outcome = get_container().login_service.attempt(body.admin_id, body.password, client_address())

    if outcome.success:
        # Regenerate the session to prevent session fixation
        start_admin_session(outcome.username)
        return success({"username": outcome.username}, message=outcome.message)

    details: dict = {"code": "LOGIN_BLOCKED" if outcome.http_status == 429 else "INVALID_CREDENTIALS"}
    if outcome.remaining_attempts is not None:
        details["remaining_attempts"] = outcome.remaining_attempts
    if outcome.retry_after_seconds is not None:
        details["retry_after_seconds"] = outcome.retry_after_seconds

    response = fail(outcome.message, outcome.http_status, details=details)
    if outcome.retry_after_seconds is not None:
        response.headers["Retry-After"] = str(outcome.retry_after_seconds)
    return response


@auth_bp.get("/logout")
@safe_route("Logout failed")
def logout():
    username = end_admin_session()
    get_container().login_service.logout(username, client_address())
    return success({"logged_out": bool(username)}, message="Logged out")
