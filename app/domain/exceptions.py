"""Centralized exception hierarchy for TUPark.

All domain and service exceptions inherit from :class:`TuParkError` so that
callers can catch a single base class when they need a broad safety net, yet
still match on specific subclasses where narrower handling is appropriate.

Blueprint-level error handling (see ``app/utils/http.safe_route``) maps these
to the correct HTTP status codes automatically.

Hierarchy
---------
::

    TuParkError (base: maps to 500)
    ├── ValidationError              (400: bad input from caller)
    │   └── InvalidIdentityError     (400: empty lockout identity)
    ├── AuthenticationError          (401: no admin session)
    ├── NotFoundError                (404: entity does not exist)
    ├── ConflictError                (409: duplicate / state conflict)
    ├── ServiceError                 (500: business-logic failure)
    │   └── RepositoryError          (500: database / persistence)
    │       └── StoreUnavailableError (503: store cannot be reached)
    └── ConfigurationError           (500: missing / invalid config)

Admission denial by the login guard is *not* an exception; it is an
ordinary :class:`~app.security.login_limiter.Admission` result.
"""

from __future__ import annotations


class TuParkError(Exception):
    """Base exception for all TUPark application errors.

    Parameters
    ----------
    message:
        Human-readable description (logged server-side, **not** leaked to
        the HTTP client for 5xx errors).
    detail:
        Optional machine-readable context dict attached to the error for
        structured logging.
    """

    http_status: int = 500

    def __init__(self, message: str = "", *, detail: dict | None = None) -> None:
        super().__init__(message)
        self.detail = detail or {}


# ── Client errors (4xx) ──────────────────────────────────────────────


class ValidationError(TuParkError):
    """Caller supplied invalid or incomplete input (HTTP 400)."""

    http_status: int = 400


class InvalidIdentityError(ValidationError):
    """An empty or blank identity was handed to the login guard."""


class AuthenticationError(TuParkError):
    """The endpoint requires an authenticated admin session (HTTP 401)."""

    http_status: int = 401


class NotFoundError(TuParkError):
    """Requested entity does not exist (HTTP 404)."""

    http_status: int = 404


class ConflictError(TuParkError):
    """Operation conflicts with existing state (HTTP 409)."""

    http_status: int = 409


# ── Server errors (5xx) ──────────────────────────────────────────────


class ServiceError(TuParkError):
    """Business-logic failure in a service method (HTTP 500)."""

    http_status: int = 500


class RepositoryError(ServiceError):
    """Database / persistence layer failure (HTTP 500)."""

    http_status: int = 500


class StoreUnavailableError(RepositoryError):
    """The persistent store rejected or could not serve a call (HTTP 503)."""

    http_status: int = 503


class ConfigurationError(TuParkError):
    """Missing or invalid application configuration (HTTP 500)."""

    http_status: int = 500
