"""
Unit tests for the per-session optimization ramp.

Clocks are injected, so nothing here sleeps or depends on wall time.
"""

import sys
import threading
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from utils import cache
from utils.optimization import (
    FileTimestampStore,
    MemoryTimestampStore,
    OptimizationContext,
    OptimizationRegistry,
    ramp_factor,
)

DAY = 86400
T0 = 1_700_000_000.0


class FakeClock:
    def __init__(self, now: float = T0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class BrokenStore:
    """Every operation fails the way an unavailable disk would."""

    def get(self, key):
        raise OSError("store offline")

    def set(self, key, value):
        raise OSError("store offline")

    def delete(self, key):
        raise OSError("store offline")


@pytest.fixture
def cache_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(cache, "CACHE_DIR", tmp_path)
    return tmp_path


# -----------------------------------------------------------------------
# Ramp curve
# -----------------------------------------------------------------------

class TestRampFactor:
    def test_endpoints(self):
        assert ramp_factor(0) == 1.0
        assert ramp_factor(7) == pytest.approx(1.15, abs=1e-3)

    def test_monotonic_then_flat(self):
        values = [ramp_factor(d) for d in range(0, 15)]
        assert all(a <= b for a, b in zip(values, values[1:]))
        assert values[7:] == [values[7]] * len(values[7:])

    def test_negative_days_clamped(self):
        assert ramp_factor(-3) == 1.0


# -----------------------------------------------------------------------
# Context behaviour
# -----------------------------------------------------------------------

class TestOptimizationContext:
    def test_fresh_session_starts_at_one(self):
        store = MemoryTimestampStore()
        context = OptimizationContext(store, "s1", clock=FakeClock())
        assert context.factor() == 1.0
        assert store.get("s1") == T0

    def test_existing_timestamp_drives_days(self):
        store = MemoryTimestampStore()
        store.set("s1", T0 - 3 * DAY - 5)
        context = OptimizationContext(store, "s1", clock=FakeClock())
        assert context.factor() == pytest.approx(ramp_factor(3))
        assert context.days_elapsed() == 3

    def test_partial_day_is_floored(self):
        store = MemoryTimestampStore()
        store.set("s1", T0 - 0.9 * DAY)
        context = OptimizationContext(store, "s1", clock=FakeClock())
        assert context.factor() == 1.0

    def test_cached_for_an_hour(self):
        clock = FakeClock()
        store = MemoryTimestampStore()
        store.set("s1", T0 - 2 * DAY)
        context = OptimizationContext(store, "s1", clock=clock)
        assert context.factor() == pytest.approx(ramp_factor(2))

        # Durable value changes underneath; cache still wins within the hour
        store.set("s1", T0 - 5 * DAY)
        clock.advance(1800)
        assert context.factor() == pytest.approx(ramp_factor(2))

        clock.advance(1800)  # exactly one hour since last computation
        assert context.factor() == pytest.approx(ramp_factor(5))

    def test_ramp_plateaus(self):
        clock = FakeClock()
        context = OptimizationContext(MemoryTimestampStore(), "s1", clock=clock)
        context.factor()
        clock.advance(30 * DAY)
        assert context.factor() == pytest.approx(ramp_factor(7))
        assert context.status()["ramp_complete"] is True

    def test_reset_restarts_ramp(self):
        clock = FakeClock()
        store = MemoryTimestampStore()
        store.set("s1", T0 - 10 * DAY)
        context = OptimizationContext(store, "s1", clock=clock)
        assert context.factor() > 1.0

        context.reset()
        assert context.cached_factor is None
        assert store.get("s1") is None
        assert context.factor() == 1.0
        assert store.get("s1") == T0

    def test_broken_store_falls_back_to_first_use(self):
        context = OptimizationContext(BrokenStore(), "s1", clock=FakeClock())
        assert context.factor() == 1.0
        context.reset()  # must not raise
        assert context.refresh() == 1.0

    def test_status_of_unknown_session_is_not_persisted(self):
        store = MemoryTimestampStore()
        context = OptimizationContext(store, "s1", clock=FakeClock())
        assert context.status() == {
            "session_id": "s1",
            "first_use_at": None,
            "days_elapsed": 0,
            "factor": 1.0,
            "ramp_complete": False,
        }
        assert store.get("s1") is None

    def test_status_shape(self):
        context = OptimizationContext(MemoryTimestampStore(), "s1", clock=FakeClock())
        context.factor()
        status = context.status()
        assert status == {
            "session_id": "s1",
            "first_use_at": T0,
            "days_elapsed": 0,
            "factor": 1.0,
            "ramp_complete": False,
        }

    def test_status_days_match_factor_across_day_boundary(self):
        clock = FakeClock()
        store = MemoryTimestampStore()
        store.set("s1", T0 - 3 * DAY + 600)  # third full day ends in 10 minutes
        context = OptimizationContext(store, "s1", clock=clock)
        assert context.factor() == pytest.approx(ramp_factor(2))

        clock.advance(1200)  # cached factor still fresh, but a new day began
        status = context.status()
        assert status["days_elapsed"] == 3
        assert status["factor"] == pytest.approx(ramp_factor(3))


# -----------------------------------------------------------------------
# File-backed store
# -----------------------------------------------------------------------

class TestFileTimestampStore:
    def test_survives_new_context(self, cache_dir):
        clock = FakeClock()
        store = FileTimestampStore()
        OptimizationContext(store, "s1", clock=clock).factor()

        clock.advance(4 * DAY)
        later = OptimizationContext(FileTimestampStore(), "s1", clock=clock)
        assert later.factor() == pytest.approx(ramp_factor(4))

    def test_delete_missing_is_noop(self, cache_dir):
        FileTimestampStore().delete("never-written")
        assert FileTimestampStore().get("never-written") is None

    def test_corrupt_file_treated_as_first_use(self, cache_dir):
        path = cache._cache_path(FileTimestampStore.SUBDIR, session="s1")
        path.write_text("{not json", encoding="utf-8")

        context = OptimizationContext(FileTimestampStore(), "s1", clock=FakeClock())
        assert context.factor() == 1.0

    def test_corrupt_file_is_rewritten_and_ramp_resumes(self, cache_dir):
        path = cache._cache_path(FileTimestampStore.SUBDIR, session="s1")
        path.write_text("{not json", encoding="utf-8")

        clock = FakeClock()
        context = OptimizationContext(FileTimestampStore(), "s1", clock=clock)
        factors = []
        for _ in range(4):
            factors.append(context.refresh())
            clock.advance(DAY)

        assert FileTimestampStore().get("s1") == T0
        assert factors == pytest.approx([ramp_factor(d) for d in range(4)])


# -----------------------------------------------------------------------
# Registry
# -----------------------------------------------------------------------

class TestRegistry:
    def test_one_context_per_session(self):
        registry = OptimizationRegistry(MemoryTimestampStore(), clock=FakeClock())
        assert registry.get("a") is registry.get("a")
        assert registry.get("a") is not registry.get("b")

    def test_sessions_are_isolated(self):
        clock = FakeClock()
        registry = OptimizationRegistry(MemoryTimestampStore(), clock=clock)
        registry.get("veteran").factor()

        clock.advance(6 * DAY + 2 * 3600)
        assert registry.get("newcomer").factor() == 1.0
        assert registry.get("veteran").factor() == pytest.approx(ramp_factor(6))

        registry.reset("veteran")
        assert registry.get("veteran").factor() == 1.0
        assert registry.get("newcomer").factor() == 1.0

    def test_idle_contexts_are_dropped(self):
        clock = FakeClock()
        store = MemoryTimestampStore()
        registry = OptimizationRegistry(store, clock=clock)
        for i in range(500):
            registry.get(f"s{i}").factor()
            clock.advance(60)

        # Only sessions computed within the last hour stay in memory
        assert len(registry) <= 61
        # Their durable timestamps are untouched
        assert store.get("s0") == T0

    def test_dropped_context_is_rebuilt_from_store(self):
        clock = FakeClock()
        registry = OptimizationRegistry(MemoryTimestampStore(), clock=clock)
        registry.get("veteran").factor()

        clock.advance(3 * DAY)
        registry.get("other")
        assert len(registry) == 1
        assert registry.get("veteran").factor() == pytest.approx(ramp_factor(3))

    def test_status_lookups_do_not_accumulate(self):
        store = MemoryTimestampStore()
        registry = OptimizationRegistry(store, clock=FakeClock())
        for i in range(1000):
            registry.get(f"visitor-{i}").status()

        assert len(registry) == 1
        assert store.get("visitor-0") is None

    def test_concurrent_first_lookups_share_one_context(self):
        registry = OptimizationRegistry(MemoryTimestampStore(), clock=FakeClock())
        seen = []

        def lookup():
            seen.append(registry.get("shared"))

        threads = [threading.Thread(target=lookup) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len({id(context) for context in seen}) == 1
