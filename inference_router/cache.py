"""DiscoveryCache — time-limited holder for the latest discovery snapshot."""

import logging
import time
from typing import Callable, Protocol

from inference_router.models import DiscoverySnapshot, ServerDescriptor

logger = logging.getLogger(__name__)


class Prober(Protocol):
    async def probe(self) -> list[ServerDescriptor]: ...


class DiscoveryCache:
    """Serves the last snapshot while it is fresh, re-probes otherwise.

    A snapshot is fresh when it is younger than ``ttl`` seconds and lists at
    least one server; an empty snapshot is never served from cache. The
    snapshot is swapped by a single attribute assignment, so concurrent
    readers see either the old or the new one. Two callers that both find
    the cache stale will both probe; the last one to finish wins.
    """

    def __init__(
        self,
        prober: Prober,
        ttl: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.prober = prober
        self.ttl = ttl
        self._clock = clock
        self._snapshot = DiscoverySnapshot()

    @property
    def snapshot(self) -> DiscoverySnapshot:
        """The cached snapshot, without any freshness check."""
        return self._snapshot

    def is_fresh(self) -> bool:
        snapshot = self._snapshot
        return bool(snapshot.servers) and self._clock() - snapshot.created_at < self.ttl

    async def get_snapshot(self) -> DiscoverySnapshot:
        if self.is_fresh():
            return self._snapshot

        started_at = self._clock()
        servers = await self.prober.probe()
        snapshot = DiscoverySnapshot(servers=tuple(servers), created_at=started_at)
        self._snapshot = snapshot
        return snapshot

    def invalidate(self) -> None:
        """Drop the cached snapshot so the next read probes again."""
        logger.info("Inference server cache invalidated")
        self._snapshot = DiscoverySnapshot()
