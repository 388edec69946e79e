"""
Rate Limiting Middleware
========================

In-memory, per-client-address request limiter applied to every request.
Uses a sliding window; no external store.

Usage:
    from app.middleware.rate_limiting import init_rate_limiting

    init_rate_limiting(app, enabled=True, max_requests=500, window_seconds=60)

The client address is ``request.remote_addr``.  Put the app behind
Werkzeug's ``ProxyFix`` when a reverse proxy sets ``X-Forwarded-For``.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable

from flask import Flask, Response, current_app, g, request

from app.utils.http import error_response

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."


@dataclass
class RateLimitConfig:
    """Configuration for rate limiting."""

    enabled: bool = True
    default_limit: int = 500  # requests per window
    default_window: int = 60  # seconds
    cleanup_interval: int = 300  # clean old entries every 5 minutes
    exempt_paths: list[str] = field(default_factory=lambda: ["/status/", "/static/"])
    exempt_methods: list[str] = field(default_factory=lambda: ["OPTIONS"])


class RateLimiter:
    """
    Simple in-memory rate limiter.

    Uses a sliding window algorithm to track requests per client IP.
    Thread-safe with periodic cleanup of idle clients.
    """

    def __init__(self, config: RateLimitConfig | None = None, clock: Callable[[], float] = time.monotonic):
        self.config = config or RateLimitConfig()
        self._clock = clock
        self._requests: dict[str, list[float]] = defaultdict(list)
        self._lock = threading.RLock()
        self._last_cleanup = clock()

    def init_app(self, app: Flask) -> None:
        """Register the before/after request hooks on *app*."""

        @app.before_request
        def check_rate_limit():
            if not self.config.enabled or current_app.testing:
                return None

            path = request.path
            if any(path.startswith(exempt) for exempt in self.config.exempt_paths):
                return None
            if request.method in self.config.exempt_methods:
                return None

            client_key = request.remote_addr or "unknown"
            allowed, remaining, reset_time = self.is_allowed(
                client_key, max_requests=self.config.default_limit, window_seconds=self.config.default_window
            )

            # Store info for response headers
            g.rate_limit_remaining = remaining
            g.rate_limit_reset = reset_time
            g.rate_limit_limit = self.config.default_limit

            if not allowed:
                logger.warning("Rate limit exceeded for %s", client_key)
                return self._rate_limit_response(reset_time)

            return None

        @app.after_request
        def add_rate_limit_headers(response: Response) -> Response:
            if hasattr(g, "rate_limit_remaining"):
                response.headers["X-RateLimit-Limit"] = str(g.rate_limit_limit)
                response.headers["X-RateLimit-Remaining"] = str(g.rate_limit_remaining)
            return response

        app.extensions["rate_limiter"] = self
        logger.info(
            "Rate limiter initialized: %s requests per %s seconds",
            self.config.default_limit,
            self.config.default_window,
        )

    def is_allowed(self, key: str, max_requests: int = 500, window_seconds: int = 60) -> tuple[bool, int, float]:
        """
        Check if request is allowed within rate limit.

        Args:
            key: Client identifier (typically IP address)
            max_requests: Maximum requests allowed in window
            window_seconds: Time window in seconds

        Returns:
            Tuple of (allowed: bool, remaining: int, reset_time: float)
        """
        now = self._clock()
        window_start = now - window_seconds

        with self._lock:
            if now - self._last_cleanup > self.config.cleanup_interval:
                self._cleanup_old_entries(window_start)
                self._last_cleanup = now

            requests = self._requests[key]
            requests[:] = [ts for ts in requests if ts > window_start]

            current_count = len(requests)
            reset_time = (requests[0] if requests else now) + window_seconds

            if current_count >= max_requests:
                return (False, 0, reset_time)

            requests.append(now)
            return (True, max(0, max_requests - current_count - 1), reset_time)

    def _cleanup_old_entries(self, window_start: float) -> None:
        """Remove old entries to prevent memory growth."""
        keys_to_remove = []

        for key, timestamps in self._requests.items():
            timestamps[:] = [ts for ts in timestamps if ts > window_start]
            if not timestamps:
                keys_to_remove.append(key)

        for key in keys_to_remove:
            del self._requests[key]

        if keys_to_remove:
            logger.debug("Rate limiter cleanup: removed %s stale entries", len(keys_to_remove))

    def _rate_limit_response(self, reset_time: float) -> Response:
        """Generate rate limit exceeded response with standard envelope."""
        retry_after = max(1, int(reset_time - self._clock()))
        response = error_response(
            RATE_LIMIT_MESSAGE,
            status=429,
            details={
                "code": "RATE_LIMIT_EXCEEDED",
                "retry_after_seconds": retry_after,
            },
        )
        response.headers["Retry-After"] = str(retry_after)
        return response

    def get_stats(self) -> dict[str, Any]:
        """Get rate limiter statistics."""
        with self._lock:
            active_clients = len(self._requests)
            total_tracked = sum(len(ts) for ts in self._requests.values())

        return {
            "enabled": self.config.enabled,
            "active_clients": active_clients,
            "total_tracked_requests": total_tracked,
            "default_limit": self.config.default_limit,
            "default_window_seconds": self.config.default_window,
        }


def init_rate_limiting(
    app: Flask,
    enabled: bool = True,
    *,
    max_requests: int = 500,
    window_seconds: int = 60,
) -> RateLimiter:
    """
    Initialize rate limiting for the Flask app.

    Args:
        app: Flask application
        enabled: Whether rate limiting is enabled
        max_requests: Requests allowed per client per window
        window_seconds: Sliding window length

    Returns:
        Configured RateLimiter instance
    """
    limiter = RateLimiter(
        RateLimitConfig(enabled=enabled, default_limit=max_requests, default_window=window_seconds)
    )
    limiter.init_app(app)
    return limiter
