"""
Temporal optimization ramp for the advanced calculator.

Simulates calibration improving with use: the factor climbs linearly from
1.0 on the first day to ~1.15 after RAMP_DAYS and stays there.

    factor = 1 + min(days_elapsed, 7) * 0.02143
    days_elapsed = floor((now - first_use) / 1 day)

State is per session. Each OptimizationContext owns one first-use
timestamp (in a durable store) plus an in-memory cached factor that is
recomputed at most once per hour. OptimizationRegistry hands out one context
per session id; there is no process-wide context.

A broken durable store never fails a calculation: read errors count as
"first use is now" (factor 1.0), a corrupt entry is overwritten with the
current time, write/delete errors are logged and ignored.
"""

import logging
import math
import threading
import time
from typing import Any, Callable, Optional

from utils.cache import delete_cache, read_cache, write_cache
from utils.sensitivity_weights import (
    RAMP_CACHE_TTL_S,
    RAMP_DAILY_STEP,
    RAMP_DAYS,
    SECONDS_PER_DAY,
)

logger = logging.getLogger(__name__)

STORE_ERRORS = (OSError, ValueError, TypeError, LookupError)


def ramp_factor(days_elapsed: float) -> float:
    """Multiplier for a given number of whole days since first use."""
    days = min(max(0, days_elapsed), RAMP_DAYS)
    return 1 + days * RAMP_DAILY_STEP


# ---------------------------------------------------------------------------
# Durable timestamp stores
# ---------------------------------------------------------------------------

class MemoryTimestampStore:
    """Dict-backed store. Handy for tests and single-process use."""

    def __init__(self) -> None:
        self._values: dict[str, float] = {}

    def get(self, key: str) -> Optional[float]:
        return self._values.get(key)

    def set(self, key: str, value: float) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)


class FileTimestampStore:
    """JSON-on-disk store, one file per key under the cache directory."""

    SUBDIR = "optimization"

    def get(self, key: str) -> Optional[float]:
        cached = read_cache(self.SUBDIR, session=key)
        if cached is None:
            return None
        return float(cached["first_use_at"])

    def set(self, key: str, value: float) -> None:
        write_cache(self.SUBDIR, {"session": key, "first_use_at": value}, session=key)

    def delete(self, key: str) -> None:
        delete_cache(self.SUBDIR, session=key)


# ---------------------------------------------------------------------------
# Per-session context
# ---------------------------------------------------------------------------

class OptimizationContext:
    """
    Ramp state for one user/session.

    Args:
        store: object with get/set/delete for a float timestamp by key
        key: opaque session identifier used as the store key
        clock: returns the current time in seconds (injectable for tests)
    """

    def __init__(
        self,
        store: Any,
        key: str,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.key = key
        self.clock = clock
        self.timestamp: Optional[float] = None
        self.cached_factor: Optional[float] = None
        self.last_computed_at: Optional[float] = None

    def factor(self) -> float:
        """Cached factor if computed within the last hour, otherwise recompute."""
        now = self.clock()
        if self.cached_factor is not None and not self.is_stale(now):
            return self.cached_factor
        return self.refresh()

    def refresh(self) -> float:
        now = self.clock()
        return self._compute(now, self._first_use(now))

    def _compute(self, now: float, first_use: float) -> float:
        self.timestamp = first_use
        days = self.days_elapsed(now)
        self.cached_factor = ramp_factor(days)
        self.last_computed_at = now
        logger.debug(f"Ramp for session {self.key}: day {days}, factor {self.cached_factor:.5f}")
        return self.cached_factor

    def reset(self) -> None:
        """Forget the cached factor and the durable first-use timestamp."""
        self.timestamp = None
        self.cached_factor = None
        self.last_computed_at = None
        try:
            self.store.delete(self.key)
        except STORE_ERRORS as e:
            logger.warning(f"Could not clear optimization timestamp for {self.key}: {e}")

    def days_elapsed(self, now: Optional[float] = None) -> int:
        if self.timestamp is None:
            return 0
        now = self.clock() if now is None else now
        return max(0, math.floor((now - self.timestamp) / SECONDS_PER_DAY))

    def is_stale(self, now: float) -> bool:
        """True when the cached factor has expired (or was never computed)."""
        return self.last_computed_at is None or now - self.last_computed_at >= RAMP_CACHE_TTL_S

    def status(self) -> dict[str, Any]:
        """
        Current ramp position, read fresh from the store.

        A session with no stored first-use time reports day 0 and is not
        written to the store; only a calculation starts the ramp.
        """
        now = self.clock()
        stored = self._read(now)
        if stored is None:
            if self.timestamp is None:
                return {
                    "session_id": self.key,
                    "first_use_at": None,
                    "days_elapsed": 0,
                    "factor": ramp_factor(0),
                    "ramp_complete": False,
                }
            self._write(now)
            stored = now
        factor = self._compute(now, stored)
        days = self.days_elapsed(now)
        return {
            "session_id": self.key,
            "first_use_at": self.timestamp,
            "days_elapsed": days,
            "factor": factor,
            "ramp_complete": days >= RAMP_DAYS,
        }

    def _read(self, now: float) -> Optional[float]:
        """Stored first-use time, or None when absent or unreadable. A corrupt entry is rewritten as *now*."""
        try:
            stored = self.store.get(self.key)
        except OSError as e:
            logger.warning(f"Optimization store unavailable for {self.key}: {e}. Treating as first use.")
            return None
        except (ValueError, TypeError, LookupError) as e:
            logger.warning(f"Corrupt optimization timestamp for {self.key}: {e}. Starting over.")
            self._write(now)
            return now

        if stored is not None and math.isfinite(stored):
            return stored
        return None

    def _write(self, value: float) -> None:
        try:
            self.store.set(self.key, value)
        except STORE_ERRORS as e:
            logger.warning(f"Could not persist first-use time for {self.key}: {e}")

    def _first_use(self, now: float) -> float:
        stored = self._read(now)
        if stored is not None:
            return stored
        self._write(now)
        return now


class OptimizationRegistry:
    """
    Hands out one OptimizationContext per session id.

    Only contexts used within the last hour are kept in memory; older ones
    are dropped on the next lookup and rebuilt from the durable store when
    their session comes back.
    """

    def __init__(
        self,
        store: Any = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store if store is not None else FileTimestampStore()
        self.clock = clock
        self._contexts: dict[str, OptimizationContext] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._contexts)

    def get(self, session_id: str) -> OptimizationContext:
        with self._lock:
            self._evict_stale(self.clock(), keep=session_id)
            context = self._contexts.get(session_id)
            if context is None:
                context = OptimizationContext(self.store, session_id, clock=self.clock)
                self._contexts[session_id] = context
            return context

    def reset(self, session_id: str) -> None:
        self.get(session_id).reset()

    def _evict_stale(self, now: float, keep: str) -> None:
        stale = [
            key for key, context in self._contexts.items()
            if key != keep and context.is_stale(now)
        ]
        for key in stale:
            del self._contexts[key]
        if stale:
            logger.debug(f"Dropped {len(stale)} idle optimization contexts")
