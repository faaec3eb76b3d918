"""Tests del EvictionSweeper (retención 24h y datos corruptos)."""

import time
from datetime import datetime, timedelta, timezone

import pytest

from collector_api.snapshots import EvictionSweeper


NOW = datetime(2024, 1, 3, 0, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def sweeper(store) -> EvictionSweeper:
    return EvictionSweeper(store, retention=timedelta(hours=24), interval_seconds=60)


class TestSweep:
    def test_expired_entry_removed(self, store, sweeper, make_snapshot):
        """Escenario: h1 con ts 48h antes de 'now' se elimina."""
        store.upsert(make_snapshot(instance_id="h1", images_size_gb=12.5, timestamp="2024-01-01T00:00:00Z"))

        listed = store.list()
        assert len(listed) == 1
        assert listed[0].images_size_gb == 12.5

        evicted = sweeper.sweep(now=NOW)

        assert evicted == ["h1"]
        assert store.list() == []

    def test_entry_within_window_survives_unchanged(self, store, sweeper, make_snapshot):
        fresh = make_snapshot(instance_id="fresh", timestamp="2024-01-02T12:00:00Z")
        store.upsert(fresh)

        assert sweeper.sweep(now=NOW) == []
        assert store.get("fresh") is fresh

    def test_exactly_at_retention_boundary_survives(self, store, sweeper, make_snapshot):
        store.upsert(make_snapshot(instance_id="edge", timestamp="2024-01-02T00:00:00Z"))

        assert sweeper.sweep(now=NOW) == []

    def test_corrupt_timestamp_removed_regardless_of_age(self, store, sweeper, make_snapshot):
        store.upsert(make_snapshot(instance_id="corrupt", timestamp="not-a-timestamp"))
        store.upsert(make_snapshot(instance_id="ok", timestamp="2024-01-02T23:00:00Z"))

        evicted = sweeper.sweep(now=NOW)

        assert evicted == ["corrupt"]
        assert "ok" in store

    def test_stats_updated(self, store, sweeper, make_snapshot):
        store.upsert(make_snapshot(instance_id="old", timestamp="2023-12-01T00:00:00Z"))
        store.upsert(make_snapshot(instance_id="bad", timestamp="???"))

        sweeper.sweep(now=NOW)
        stats = sweeper.get_stats()

        assert stats["sweeps"] == 1
        assert stats["total_expired"] == 1
        assert stats["total_corrupt"] == 1
        assert stats["running"] is False


class TestSweeperThread:
    def test_start_and_stop(self, store):
        sweeper = EvictionSweeper(store, interval_seconds=60)

        sweeper.start()
        assert sweeper.is_running is True

        started = time.perf_counter()
        sweeper.stop()
        # stop() despierta al thread sin esperar el intervalo completo
        assert time.perf_counter() - started < 2.0
        assert sweeper.is_running is False

    def test_periodic_sweep_evicts(self, store, make_snapshot):
        store.upsert(make_snapshot(instance_id="bad", timestamp="garbage"))
        sweeper = EvictionSweeper(store, interval_seconds=0.01)

        sweeper.start()
        try:
            deadline = time.time() + 2.0
            while "bad" in store and time.time() < deadline:
                time.sleep(0.01)
        finally:
            sweeper.stop()

        assert "bad" not in store

    def test_loop_survives_failing_sweep(self, store, monkeypatch):
        sweeper = EvictionSweeper(store, interval_seconds=0.01)
        calls = []

        def failing_sweep(now=None):
            calls.append(now)
            raise RuntimeError("boom")

        monkeypatch.setattr(sweeper, "sweep", failing_sweep)

        sweeper.start()
        try:
            deadline = time.time() + 2.0
            while len(calls) < 3 and time.time() < deadline:
                time.sleep(0.01)
            assert sweeper.is_running is True
        finally:
            sweeper.stop()

        assert len(calls) >= 3
        assert sweeper.get_stats()["total_errors"] >= 3
