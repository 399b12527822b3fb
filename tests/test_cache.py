"""Tests for DiscoveryCache — TTL, invalidation, empty results."""

import asyncio

import pytest

from inference_router import DiscoveryCache

from conftest import FakeProber, descriptor


@pytest.fixture
def cache(prober, clock):
    return DiscoveryCache(prober, ttl=30.0, clock=clock)


# ─────────────────────────────────────────────────────────────────────
# TTL
# ─────────────────────────────────────────────────────────────────────


class TestTtl:
    @pytest.mark.asyncio
    async def test_second_read_within_ttl_does_not_probe(self, cache, prober, clock):
        first = await cache.get_snapshot()
        clock.advance(29.9)
        second = await cache.get_snapshot()

        assert prober.calls == 1
        assert second is first
        assert len(second) == 2

    @pytest.mark.asyncio
    async def test_read_after_ttl_probes_again(self, cache, prober, clock):
        await cache.get_snapshot()
        clock.advance(30.0)
        await cache.get_snapshot()

        assert prober.calls == 2

    @pytest.mark.asyncio
    async def test_snapshot_records_creation_time(self, cache, clock):
        snapshot = await cache.get_snapshot()
        assert snapshot.created_at == clock.now

    @pytest.mark.asyncio
    async def test_new_snapshot_replaces_old_whole(self, cache, prober, clock):
        first = await cache.get_snapshot()
        prober.servers = [descriptor(5010, "llama")]
        clock.advance(31)
        second = await cache.get_snapshot()

        assert [s.port for s in first.servers] == [5005, 5006]
        assert [s.port for s in second.servers] == [5010]
        assert cache.snapshot is second


# ─────────────────────────────────────────────────────────────────────
# Invalidation
# ─────────────────────────────────────────────────────────────────────


class TestInvalidate:
    @pytest.mark.asyncio
    async def test_invalidate_forces_probe(self, cache, prober):
        await cache.get_snapshot()
        cache.invalidate()

        assert len(cache.snapshot) == 0
        await cache.get_snapshot()
        assert prober.calls == 2


# ─────────────────────────────────────────────────────────────────────
# Empty results
# ─────────────────────────────────────────────────────────────────────


class TestEmptyResults:
    @pytest.mark.asyncio
    async def test_empty_result_is_not_served_from_cache(self, clock):
        prober = FakeProber([])
        cache = DiscoveryCache(prober, ttl=30.0, clock=clock)

        assert len(await cache.get_snapshot()) == 0
        assert len(await cache.get_snapshot()) == 0
        assert prober.calls == 2

    @pytest.mark.asyncio
    async def test_concurrent_stale_reads_may_probe_twice(self, cache, prober):
        snapshots = await asyncio.gather(cache.get_snapshot(), cache.get_snapshot())

        assert 1 <= prober.calls <= 2
        assert all(len(s) == 2 for s in snapshots)
