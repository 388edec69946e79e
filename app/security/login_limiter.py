"""
Login Guard: brute-force & account-lockout protection
=====================================================

Tracks failed login attempts per source identity (the client IP) and locks
the identity out once ``max_attempts`` consecutive failures accumulate.

A successful login removes every trace of the identity.

Policy notes
------------
* **Re-lock after cool-down.**  When a lock expires on its own the failure
  count is *not* reset.  ``check_admission`` admits again, and the very next
  failure re-locks immediately.  Only a successful login clears the count.
* **Pure admission check.**  ``check_admission`` never mutates state; an
  expired lock is simply ignored.
* **Bounded memory.**  State lives in an :class:`AttemptStore`.  The default
  :class:`InMemoryAttemptStore` keeps at most ``max_entries`` identities and
  evicts the least recently touched unlocked identity when full.  Eviction
  resets that identity.
* **Single process.**  One ``threading.Lock`` serialises every
  read-modify-write so concurrent failures are never under-counted.
"""

from __future__ import annotations

import logging
import math
import time
from collections import OrderedDict
from dataclasses import dataclass, replace
from threading import Lock
from typing import Callable, Protocol

from app.domain.exceptions import InvalidIdentityError

logger = logging.getLogger(__name__)

Clock = Callable[[], float]

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_LOCKOUT_SECONDS = 300
DEFAULT_MAX_TRACKED = 10_000

# ---------------------------------------------------------------------------
# Data
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class AttemptState:
    """Consecutive failures for a single identity."""

    failure_count: int = 0
    locked_until: float | None = None

    def is_locked(self, now: float) -> bool:
        return self.locked_until is not None and now < self.locked_until


@dataclass(frozen=True, slots=True)
class Admission:
    """Result of :meth:`LoginGuard.check_admission`."""

    admitted: bool
    retry_after_seconds: int = 0


@dataclass(frozen=True, slots=True)
class FailureResult:
    """Result of :meth:`LoginGuard.record_failure`."""

    count: int
    locked: bool
    remaining: int
    locked_until: float | None = None


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


class AttemptStore(Protocol):
    """Storage backend for per-identity attempt state.

    Implementations need not be thread-safe; :class:`LoginGuard` holds its
    own lock around every call.
    """

    def get(self, identity: str) -> AttemptState | None: ...

    def put(self, identity: str, state: AttemptState, now: float) -> None: ...

    def delete(self, identity: str) -> None: ...

    def clear(self) -> None: ...

    def __len__(self) -> int: ...


class InMemoryAttemptStore:
    """Bounded LRU map of identity -> :class:`AttemptState`.

    Writes count as a touch; reads do not.  When full, the least recently
    touched identity that is not currently locked is evicted.  If every
    tracked identity is locked the oldest one goes.
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_TRACKED) -> None:
        self._max_entries = max(1, max_entries)
        self._entries: OrderedDict[str, AttemptState] = OrderedDict()

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def get(self, identity: str) -> AttemptState | None:
        state = self._entries.get(identity)
        return replace(state) if state is not None else None

    def put(self, identity: str, state: AttemptState, now: float) -> None:
        if identity in self._entries:
            self._entries.move_to_end(identity)
        elif len(self._entries) >= self._max_entries:
            self._evict_one(now)
        self._entries[identity] = replace(state)

    def delete(self, identity: str) -> None:
        self._entries.pop(identity, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, identity: object) -> bool:
        return identity in self._entries

    def _evict_one(self, now: float) -> None:
        for identity, state in self._entries.items():
            if not state.is_locked(now):
                del self._entries[identity]
                logger.debug("Attempt store full; evicted %s", identity)
                return
        identity, _ = self._entries.popitem(last=False)
        logger.warning("Attempt store full of locked identities; evicted %s", identity)


# ---------------------------------------------------------------------------
# Guard
# ---------------------------------------------------------------------------


class LoginGuard:
    """Thread-safe login attempt counter and lockout timer."""

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        lockout_seconds: int = DEFAULT_LOCKOUT_SECONDS,
        *,
        store: AttemptStore | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self._max_attempts = max(1, max_attempts)
        self._lockout_seconds = max(1, lockout_seconds)
        self._store: AttemptStore = store if store is not None else InMemoryAttemptStore()
        self._clock = clock
        self._lock = Lock()

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    @property
    def lockout_seconds(self) -> int:
        return self._lockout_seconds

    @property
    def lockout_minutes(self) -> int:
        return max(1, self._lockout_seconds // 60)

    # -- public API --------------------------------------------------------

    def check_admission(self, identity: str, now: float | None = None) -> Admission:
        """Return whether *identity* may attempt a login right now.

        When denied, ``retry_after_seconds`` is the remaining lock time
        rounded up to whole seconds.
        """
        identity = _require_identity(identity)
        now = self._now(now)
        with self._lock:
            state = self._store.get(identity)
        if state is None or not state.is_locked(now):
            return Admission(admitted=True)
        retry_after = max(1, math.ceil(state.locked_until - now))
        return Admission(admitted=False, retry_after_seconds=retry_after)

    def record_success(self, identity: str) -> None:
        """Forget *identity* entirely after a successful login."""
        identity = _require_identity(identity)
        with self._lock:
            self._store.delete(identity)

    def record_failure(self, identity: str, now: float | None = None) -> FailureResult:
        """Count a failed attempt for *identity*, locking it at the threshold."""
        identity = _require_identity(identity)
        now = self._now(now)
        with self._lock:
            state = self._store.get(identity) or AttemptState()
            state.failure_count += 1
            if state.failure_count >= self._max_attempts:
                state.locked_until = now + self._lockout_seconds
                self._store.put(identity, state, now)
                locked = True
            else:
                self._store.put(identity, state, now)
                locked = False

        if locked:
            logger.warning(
                "Login guard: %s locked out for %ds after %d failures",
                identity,
                self._lockout_seconds,
                state.failure_count,
            )
            return FailureResult(
                count=state.failure_count,
                locked=True,
                remaining=0,
                locked_until=state.locked_until,
            )
        return FailureResult(
            count=state.failure_count,
            locked=False,
            remaining=self._max_attempts - state.failure_count,
        )

    def state_for(self, identity: str) -> AttemptState | None:
        """Return a copy of the tracked state for *identity*, if any."""
        identity = _require_identity(identity)
        with self._lock:
            return self._store.get(identity)

    def reset(self) -> None:
        """Clear all tracked identities (useful for tests)."""
        with self._lock:
            self._store.clear()

    def _now(self, now: float | None) -> float:
        return self._clock() if now is None else now


def _require_identity(identity: str) -> str:
    if not isinstance(identity, str) or not identity.strip():
        raise InvalidIdentityError("Login guard identity must be a non-empty string")
    return identity
