import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional


class AuditFallbackLogger:
    """Append-only JSON-lines file for audit entries the database refused.

    Each record is one line carrying the lost entry plus the failure reason,
    so an operator can replay it later.
    """

    def __init__(self, log_path: str, level: str = "INFO", logger_name: str = "tupark.audit.fallback") -> None:
        self.log_path = Path(log_path)
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

        self.logger = logging.getLogger(logger_name)
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        self.logger.propagate = False

        # Check if handler already exists to avoid duplicate handlers
        if not any(
            isinstance(handler, RotatingFileHandler) and Path(handler.baseFilename) == self.log_path.resolve()
            for handler in self.logger.handlers
        ):
            handler = RotatingFileHandler(
                filename=str(self.log_path),
                maxBytes=10 * 1024 * 1024,  # 10 MB
                backupCount=30,
                encoding="utf-8",
                delay=True,
            )
            handler.setFormatter(
                logging.Formatter(
                    fmt="%(asctime)sZ | %(levelname)s | %(message)s",
                    datefmt="%Y-%m-%dT%H:%M:%S",
                )
            )
            self.logger.addHandler(handler)

    def record_lost_entry(
        self,
        actor: str,
        action: str,
        details: str,
        source_address: Optional[str],
        *,
        reason: str,
        **metadata: Any,
    ) -> None:
        payload: Dict[str, Any] = {
            "actor": actor,
            "action": action,
            "details": details,
            "source_address": source_address,
            "outcome": "not_persisted",
            "reason": reason,
        }
        if metadata:
            payload["meta"] = metadata

        self.logger.error(json.dumps(payload, default=str))

    def close(self) -> None:
        for handler in list(self.logger.handlers):
            if isinstance(handler, RotatingFileHandler):
                handler.close()
                self.logger.removeHandler(handler)
