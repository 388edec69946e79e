from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify

from app.domain.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)

status_bp = Blueprint("status", __name__)


@status_bp.get("/")
def status():
    """Liveness probe."""
    return jsonify({"status": "ok"}), 200


@status_bp.get("/ready")
def ready():
    """Readiness probe: the database answers a trivial query."""
    container = current_app.config["CONTAINER"]
    try:
        container.activity_repo.count()
    except StoreUnavailableError as exc:
        logger.warning("Readiness check failed: %s", exc)
        return jsonify({"status": "unavailable"}), 503
    return jsonify({"status": "ok", "database": "ok"}), 200
