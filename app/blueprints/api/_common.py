"""
Blueprint Common Utilities
==========================

Shared helper functions for all API blueprints.

Usage:
    from app.blueprints.api._common import (
        get_container, get_json, parse_body, success, fail, client_address,
    )
"""
from __future__ import annotations

import logging
from typing import Type, TypeVar

from flask import current_app, request
from pydantic import BaseModel

from app.utils.http import error_response, success_response

logger = logging.getLogger("api._common")

M = TypeVar("M", bound=BaseModel)

# ============================================================================
# CONTAINER ACCESS
# ============================================================================


def get_container():
    """
    Get the service container from Flask app config.

    Returns:
        ServiceContainer: The application service container

    Raises:
        RuntimeError: If container is not configured
    """
    container = current_app.config.get("CONTAINER")
    if not container:
        raise RuntimeError("ServiceContainer not found in app config")
    return container


# ============================================================================
# REQUEST HELPERS
# ============================================================================


def get_json() -> dict:
    """
    Get the request body as a dict.

    JSON bodies are preferred; HTML form posts are accepted as well.
    """
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        return payload
    if request.form:
        return request.form.to_dict()
    return {}


def parse_body(model: Type[M]) -> M:
    """Validate the request body against *model*.

    Raises pydantic.ValidationError, which ``safe_route`` renders as a 400.
    """
    return model.model_validate(get_json())


def client_address() -> str:
    """Address of the caller (already rewritten by ProxyFix when configured)."""
    return request.remote_addr or "unknown"


# ============================================================================
# RESPONSE HELPERS
# ============================================================================


def success(data: dict | list | None = None, status: int = 200, *, message: str | None = None):
    """
    Standard success response wrapper.

    Returns:
        Flask Response with format: {"ok": true, "data": ..., "error": null}
    """
    return success_response(data, status, message=message)


def fail(message: str, status: int = 400, *, details: dict | None = None):
    """
    Standard error response wrapper.

    Returns:
        Flask Response with format: {"ok": false, "data": null, "error": {...}}
    """
    return error_response(message, status, details=details)
