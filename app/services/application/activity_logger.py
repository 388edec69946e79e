"""Activity logging service: the append-only audit trail.

Entries are written to the ``ActivityLog`` table by a single background
writer so request threads never wait on SQLite.  After every successful
insert the table is pruned back to the newest ``max_entries`` rows.

Store failures never reach callers.  They are reported on the
``tupark.audit`` logger and the lost entry is written to the fallback
JSON-lines file so an operator can recover it.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError

from app.domain.audit import UNKNOWN_ACTOR, AuditEntry
from app.domain.exceptions import ValidationError
from app.enums import ActivityAction
from infrastructure.database.repositories.activity_log import ActivityRepository
from infrastructure.logging.audit import AuditFallbackLogger

logger = logging.getLogger(__name__)

# Operator channel for audit persistence problems
audit_logger = logging.getLogger("tupark.audit")

DEFAULT_MAX_ENTRIES = 100


class ActivityLogger:
    """Service for recording administrator and visitor activity."""

    def __init__(
        self,
        repo: ActivityRepository,
        *,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        async_writes: bool = True,
        fallback: AuditFallbackLogger | None = None,
    ):
        """Initialize the activity logger.

        Args:
            repo: ActivityRepository instance
            max_entries: Number of newest entries kept by the retention pass
            async_writes: Queue appends on the background writer (False writes inline)
            fallback: Where entries that could not be persisted are written
        """
        self._repo = repo
        self._max_entries = max(1, max_entries)
        self._fallback = fallback
        self._lock = threading.Lock()
        self._closed = False
        self._executor: ThreadPoolExecutor | None = (
            ThreadPoolExecutor(max_workers=1, thread_name_prefix="AuditWriter") if async_writes else None
        )

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def append(
        self,
        actor: str | None,
        action: ActivityAction | str,
        details: str | None,
        source_address: str | None,
        *,
        wait_for_completion: bool = False,
    ) -> None:
        """Record an activity.

        Returns as soon as the entry is queued.  With ``wait_for_completion``
        the pending queue is drained and the entry is written on the calling
        thread before returning; use it before redirecting away from the app.
        """
        entry = (
            (actor or "").strip() or UNKNOWN_ACTOR,
            _coerce_action(action).value,
            details or "",
            source_address,
        )
        if wait_for_completion:
            self.flush()
            self._write(*entry)
            return
        if not self._submit(entry):
            self._write(*entry)

    def enforce_retention(self) -> int:
        """Delete everything but the newest ``max_entries`` rows. Returns rows deleted."""
        deleted = self._repo.prune(self._max_entries)
        if deleted:
            logger.debug("Audit retention removed %d entries", deleted)
        return deleted

    def list_recent(self, limit: int | None = None) -> list[AuditEntry]:
        """Return stored entries, most recent first.

        Raises StoreUnavailableError when the store cannot be read.
        """
        return self._repo.recent(limit)

    def flush(self, timeout: float | None = None) -> bool:
        """Block until every queued append has been processed.

        Returns False if *timeout* expired first.
        """
        with self._lock:
            if self._executor is None or self._closed:
                return True
            marker = self._executor.submit(lambda: None)
        try:
            marker.result(timeout=timeout)
        except FuturesTimeoutError:
            logger.warning("Audit writer did not drain within %ss", timeout)
            return False
        return True

    def shutdown(self) -> None:
        """Drain the queue and stop the writer. Later appends are written inline."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            executor = self._executor
        if executor is not None:
            executor.shutdown(wait=True)
        logger.info("Activity logger stopped")

    # ------------------------------------------------------------------ internals

    def _submit(self, entry: tuple) -> bool:
        with self._lock:
            if self._executor is None or self._closed:
                return False
            self._executor.submit(self._write, *entry)
            return True

    def _write(self, actor: str, action: str, details: str, source_address: str | None) -> None:
        try:
            self._repo.insert(actor, action, details, source_address)
        except Exception as exc:
            audit_logger.error(
                "Audit entry not persisted (%s by %s from %s): %s", action, actor, source_address, exc
            )
            if self._fallback is not None:
                self._fallback.record_lost_entry(actor, action, details, source_address, reason=str(exc))
            return

        try:
            self.enforce_retention()
        except Exception as exc:
            # Entry is stored; the next append prunes again
            audit_logger.error("Audit retention pass failed: %s", exc)


def _coerce_action(action: ActivityAction | str) -> ActivityAction:
    if isinstance(action, ActivityAction):
        return action
    try:
        return ActivityAction(str(action).upper())
    except ValueError as exc:
        raise ValidationError(f"Unknown activity action: {action!r}") from exc
