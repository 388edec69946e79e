"""Activity & Session API
=========================

Routes:
    GET  /api/logs             Admin: audit trail, most recent first
    POST /api/session-timeout  Client-side idle timer expired; end the session
"""

from __future__ import annotations

from flask import Blueprint, Response

from app.blueprints.api._common import client_address, get_container, success
from app.security.auth import api_login_required, end_admin_session
from app.utils.http import safe_route

activity_api = Blueprint("activity_api", __name__)


@activity_api.get("/logs")
@api_login_required
@safe_route("Failed to load activity log")
def list_logs() -> Response:
    entries = get_container().activity_logger.list_recent()
    return success([entry.to_dict() for entry in entries])


@activity_api.post("/session-timeout")
@safe_route("Failed to end session")
def session_timeout() -> Response:
    username = end_admin_session()
    get_container().login_service.session_timeout(username, client_address())
    return success({"logged_out": bool(username)})
