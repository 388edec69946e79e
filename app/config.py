"""
Configuration for TUPark
========================
Main application runtime settings, loaded from ``TUPARK_*`` environment
variables.  Sets up the logging configuration as well.
"""

import os
from contextlib import suppress
from dataclasses import dataclass, field, fields
from typing import Any

_DEFAULT_SECRET_KEY = "TUParkDevSecretKey"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer.") from None


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be a number.") from None


@dataclass
class AppConfig:
    """Runtime configuration loaded from environment variables."""

    environment: str = field(default_factory=lambda: os.getenv("TUPARK_ENV", "development"))
    secret_key: str = field(default_factory=lambda: os.getenv("TUPARK_SECRET_KEY", _DEFAULT_SECRET_KEY))
    database_path: str = field(default_factory=lambda: os.getenv("TUPARK_DATABASE_PATH", "database/tupark.db"))
    db_timeout_seconds: float = field(default_factory=lambda: _env_float("TUPARK_DB_TIMEOUT_SECONDS", 5.0))
    DEBUG: bool = field(default_factory=lambda: _env_bool("TUPARK_DEBUG", False))
    testing: bool = False

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("TUPARK_LOG_LEVEL", ""))
    log_dir: str = field(default_factory=lambda: os.getenv("TUPARK_LOG_DIR", "logs"))
    audit_fallback_log_path: str = field(
        default_factory=lambda: os.getenv("TUPARK_AUDIT_FALLBACK_LOG_PATH", "logs/audit_fallback.log")
    )

    # Session Configuration (rolling idle timeout)
    session_timeout_minutes: int = field(default_factory=lambda: _env_int("TUPARK_SESSION_TIMEOUT_MINUTES", 15))

    # Login brute-force protection
    login_max_attempts: int = field(default_factory=lambda: _env_int("TUPARK_LOGIN_MAX_ATTEMPTS", 3))
    login_lockout_minutes: int = field(default_factory=lambda: _env_int("TUPARK_LOGIN_LOCKOUT_MINUTES", 5))
    login_tracker_max_entries: int = field(
        default_factory=lambda: _env_int("TUPARK_LOGIN_TRACKER_MAX_ENTRIES", 10_000)
    )

    # Audit trail
    audit_max_entries: int = field(default_factory=lambda: _env_int("TUPARK_AUDIT_MAX_ENTRIES", 100))
    audit_async_writes: bool = field(default_factory=lambda: _env_bool("TUPARK_AUDIT_ASYNC_WRITES", True))

    # Request rate limiting
    rate_limit_enabled: bool = field(default_factory=lambda: _env_bool("TUPARK_RATE_LIMIT_ENABLED", True))
    rate_limit_max_requests: int = field(default_factory=lambda: _env_int("TUPARK_RATE_LIMIT_MAX_REQUESTS", 500))
    rate_limit_window_seconds: int = field(
        default_factory=lambda: _env_int("TUPARK_RATE_LIMIT_WINDOW_SECONDS", 60)
    )

    # Number of reverse proxies whose X-Forwarded-For is trusted (0 = none)
    trusted_proxy_count: int = field(default_factory=lambda: _env_int("TUPARK_TRUSTED_PROXY_COUNT", 0))

    parking_slot_count: int = field(default_factory=lambda: _env_int("TUPARK_PARKING_SLOT_COUNT", 20))

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        # SECURITY: Fail fast if using default secret key in production
        if self.environment == "production" and self.secret_key == _DEFAULT_SECRET_KEY:
            raise RuntimeError(
                "SECURITY ERROR: Cannot use default secret key in production!\n"
                "Set TUPARK_SECRET_KEY environment variable to a secure random value.\n"
                'Generate one with: python -c "import secrets; print(secrets.token_hex(32))"'
            )
        if self.login_max_attempts < 1:
            raise ValueError("login_max_attempts must be at least 1")
        if self.login_lockout_minutes < 1:
            raise ValueError("login_lockout_minutes must be at least 1")
        if self.audit_max_entries < 1:
            raise ValueError("audit_max_entries must be at least 1")

    @classmethod
    def field_names(cls) -> set[str]:
        return {f.name for f in fields(cls)}

    def as_flask_config(self) -> dict[str, Any]:
        """Render configuration values for Flask application."""
        if not self.secret_key:
            raise RuntimeError(
                "Missing TUPARK_SECRET_KEY environment variable. "
                "Production systems must set an explicit secret key."
            )

        return {
            "ENV": self.environment,
            "SECRET_KEY": self.secret_key,
            "DATABASE_PATH": self.database_path,
            "AUDIT_FALLBACK_LOG_PATH": self.audit_fallback_log_path,
            "DEBUG": self.DEBUG,
            "TESTING": self.testing,
            "SESSION_TIMEOUT_MINUTES": self.session_timeout_minutes,
        }


def setup_logging(debug: bool = False, *, level: str = "", log_dir: str = "logs") -> None:
    """Setup logging configuration.

    Installs a console handler and, when *log_dir* is set, a rotating file
    handler on the root logger.  Safe to call repeatedly.
    """
    import logging
    import sys
    from logging.handlers import RotatingFileHandler

    log_level = logging.DEBUG if debug else logging.INFO
    if level:
        log_level = logging.getLevelName(level.upper())
        if not isinstance(log_level, int):
            raise ValueError(f"Unknown log level: {level}")

    # Root logger
    root = logging.getLogger()
    root.setLevel(log_level)

    # Keep existing handlers but avoid adding duplicates when create_app is called multiple times
    has_console = any(getattr(h, "name", "") == "tupark_console" for h in root.handlers)
    has_file = any(getattr(h, "name", "") == "tupark_file" for h in root.handlers)
    added_handler = False

    stream = sys.stdout
    with suppress(AttributeError, ValueError):
        stream.reconfigure(encoding="utf-8", errors="replace")
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    if not has_console:
        console_handler = logging.StreamHandler(stream=stream)
        console_handler.name = "tupark_console"
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)
        added_handler = True

    if log_dir and not has_file:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, "tupark.log"),
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.name = "tupark_file"
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        added_handler = True

    # Ensure handler levels follow the desired log level
    for handler in root.handlers:
        if getattr(handler, "name", "") in {"tupark_console", "tupark_file"}:
            handler.setLevel(log_level)

    if added_handler:
        root.info("Logging initialized at level: %s", logging.getLevelName(log_level))

    if _env_bool("TUPARK_SILENCE_WERKZEUG", True):
        logging.getLogger("werkzeug").setLevel(logging.WARNING)


def load_config() -> AppConfig:
    """Helper for callers to load and validate configuration."""
    return AppConfig()
