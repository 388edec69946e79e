from __future__ import annotations

import atexit
import logging
import threading
from datetime import timedelta
from typing import Any

from flask import Flask, request
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from app.blueprints.api.activity import activity_api
from app.blueprints.api.parking import parking_api
from app.blueprints.api.reports import reports_api
from app.blueprints.auth.routes import auth_bp
from app.blueprints.status.routes import status_bp
from app.config import AppConfig, load_config, setup_logging
from app.domain.exceptions import ConfigurationError
from app.middleware.rate_limiting import init_rate_limiting

logger = logging.getLogger(__name__)


def _apply_overrides(config: AppConfig, overrides: dict[str, Any]) -> None:
    known = AppConfig.field_names()
    for key, value in overrides.items():
        attr = key if key in known else key.lower()
        if attr not in known:
            raise ConfigurationError(f"Unknown configuration key: {key}")
        setattr(config, attr, value)
    # Re-run validation on the overridden values
    config.__post_init__()


def create_app(config_overrides: dict[str, Any] | None = None) -> Flask:
    config = load_config()
    if config_overrides:
        _apply_overrides(config, config_overrides)

    # Configure logging early so container startup is visible in the terminal and tupark.log.
    setup_logging(debug=config.DEBUG, level=config.log_level, log_dir=config.log_dir)

    flask_app = Flask(__name__)
    flask_app.config.update(config.as_flask_config())

    # Rolling idle timeout: permanent sessions, refreshed on every request
    flask_app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(minutes=config.session_timeout_minutes)
    flask_app.config["SESSION_REFRESH_EACH_REQUEST"] = True
    flask_app.config["SESSION_COOKIE_HTTPONLY"] = True
    flask_app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
    flask_app.config["SESSION_COOKIE_SECURE"] = config.environment == "production"
    flask_app.config["MAX_CONTENT_LENGTH"] = 1024 * 1024

    if config.trusted_proxy_count > 0:
        n = config.trusted_proxy_count
        flask_app.wsgi_app = ProxyFix(flask_app.wsgi_app, x_for=n, x_proto=n, x_host=n)  # type: ignore[assignment]
        logger.info("Trusting X-Forwarded-* from %d proxy hop(s)", n)

    from app.services.container import ServiceContainer

    container = ServiceContainer.build(config)
    flask_app.config["CONTAINER"] = container

    # ── Graceful shutdown ───────────────────────────────────────────
    _shutdown_lock = threading.Lock()

    def _graceful_shutdown(reason: str = "unknown") -> None:
        with _shutdown_lock:
            if container._shutdown_complete:
                return
            logging.info("Graceful shutdown initiated (%s)", reason)
            try:
                container.shutdown()
            except Exception as exc:
                logging.warning("Error during graceful shutdown: %s", exc)

    atexit.register(_graceful_shutdown, "atexit")
    flask_app.extensions["tupark_shutdown"] = _graceful_shutdown

    # Request rate limiting (IP-based, in-memory; skipped in testing mode)
    init_rate_limiting(
        flask_app,
        enabled=config.rate_limit_enabled,
        max_requests=config.rate_limit_max_requests,
        window_seconds=config.rate_limit_window_seconds,
    )

    # Global JSON error handler: catches any unhandled exception on API
    # routes and returns a generic message instead of leaking stack traces.
    # Domain exceptions carry their own ``http_status``.
    @flask_app.errorhandler(Exception)
    def _handle_unhandled(exc):
        from app.domain.exceptions import TuParkError
        from app.utils.http import error_response, safe_error

        if isinstance(exc, HTTPException):
            status = int(exc.code or 500)
            if status >= 500:
                return safe_error(exc, status, context="http-exception")
            return error_response(exc.description or "Request failed", status)

        if isinstance(exc, TuParkError):
            status = exc.http_status
            if status >= 500:
                return safe_error(exc, status, context=type(exc).__name__)
            # 4xx: the message was written for the caller
            return error_response(str(exc) or "Request failed", status)

        return safe_error(exc, 500, context=f"unhandled {request.method} {request.path}")

    @flask_app.errorhandler(413)
    def _handle_too_large(_exc):
        from app.utils.http import error_response

        return error_response("Request payload too large", 413)

    flask_app.register_blueprint(auth_bp, url_prefix="/auth")
    flask_app.register_blueprint(parking_api, url_prefix="/api")
    flask_app.register_blueprint(reports_api, url_prefix="/api")
    flask_app.register_blueprint(activity_api, url_prefix="/api")
    flask_app.register_blueprint(status_bp, url_prefix="/status")

    for bp_name in flask_app.blueprints:
        logger.debug("Registered blueprint: %s", bp_name)

    logger.info("TUPark application initialized successfully.")
    return flask_app


__all__ = ["create_app"]
