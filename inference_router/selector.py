"""HostSelector — decides which inference backend serves a request.

In dynamic mode backends are found by probing local ports (through the
discovery cache) and matching the model id. In static mode they come from
the host catalog and are picked at random.
"""

import logging
import random
from typing import Any, Optional

from inference_router.cache import DiscoveryCache
from inference_router.catalog import AccessPolicy, CatalogAccessPolicy, HostCatalog
from inference_router.config import RouterSettings
from inference_router.errors import NoHostsFound, SourceNotFound, SourceSetNotFound
from inference_router.matcher import ModelMatcher
from inference_router.models import DiscoverySnapshot
from inference_router.prober import DiscoveryProber

logger = logging.getLogger(__name__)


def _unique(hosts: list[str]) -> list[str]:
    return list(dict.fromkeys(hosts))


class HostSelector:
    """Single-shot host decisions; no state beyond the discovery cache."""

    def __init__(
        self,
        catalog: HostCatalog,
        access_policy: AccessPolicy,
        cache: DiscoveryCache,
        matcher: Optional[ModelMatcher] = None,
        dynamic: bool = False,
        default_host: str = "http://127.0.0.1:5002",
        rng: Optional[random.Random] = None,
    ):
        self.catalog = catalog
        self.access_policy = access_policy
        self.cache = cache
        self.matcher = matcher or ModelMatcher()
        self.dynamic = dynamic
        self.default_host = default_host
        self.rng = rng or random.Random()

    @classmethod
    def from_settings(
        cls,
        settings: RouterSettings,
        catalog: HostCatalog,
        access_policy: Optional[AccessPolicy] = None,
        cache: Optional[DiscoveryCache] = None,
    ) -> "HostSelector":
        """Build the production object graph from configuration."""
        if access_policy is None:
            access_policy = CatalogAccessPolicy(catalog)
        if cache is None:
            cache = DiscoveryCache(
                DiscoveryProber.from_settings(settings), ttl=settings.discovery_cache_ttl
            )
        return cls(
            catalog=catalog,
            access_policy=access_policy,
            cache=cache,
            matcher=ModelMatcher(settings.match_min_shared_tokens),
            dynamic=settings.use_localhost_inference,
            default_host=settings.default_inference_host,
            rng=random.Random(settings.random_seed),
        )

    # ─────────────────────────────────────────────────────────────────
    # Dynamic discovery
    # ─────────────────────────────────────────────────────────────────

    async def resolve_dynamic_host(self, model_id: Optional[str] = None) -> str:
        """Best discovered host for ``model_id``, else the default host."""
        if not model_id:
            return self.default_host

        snapshot = await self.cache.get_snapshot()
        return self.matcher.match(model_id, snapshot) or self.default_host

    async def discovered_servers(self, refresh: bool = False) -> DiscoverySnapshot:
        if refresh:
            self.cache.invalidate()
        return await self.cache.get_snapshot()

    # ─────────────────────────────────────────────────────────────────
    # Random picks
    # ─────────────────────────────────────────────────────────────────

    def _pick_one(self, hosts: list[str]) -> str:
        return hosts[self.rng.randrange(len(hosts))]

    def _pick_two(self, hosts: list[str]) -> tuple[str, str]:
        """Two distinct hosts when possible, else the only host twice."""
        hosts = _unique(hosts)
        if not hosts:
            raise NoHostsFound()
        if len(hosts) < 2:
            return hosts[0], hosts[0]

        first = self.rng.randrange(len(hosts))
        second = self.rng.randrange(len(hosts))
        while second == first:
            second = self.rng.randrange(len(hosts))
        return hosts[first], hosts[second]

    # ─────────────────────────────────────────────────────────────────
    # Single host
    # ─────────────────────────────────────────────────────────────────

    async def get_host_for_model(self, model_id: str) -> str:
        """One host for the model. Static mode is deterministic: first unique host.

        Raises NoHostsFound when the catalog has nothing for the model.
        """
        if self.dynamic:
            return await self.resolve_dynamic_host(model_id)

        hosts = _unique(await self.catalog.hosts_for_model(model_id))
        if not hosts:
            raise NoHostsFound()
        return hosts[0]

    async def get_host_for_source_set(
        self, model_id: str, set_name: str, user: Optional[Any] = None
    ) -> Optional[str]:
        """One random host of the source set.

        Returns None when access is denied or the set has no hosts; callers
        cannot tell those cases apart.
        """
        if not await self.access_policy.can_access(model_id, set_name, user):
            logger.info(f"Access to {model_id}/{set_name} denied or set missing")
            return None

        if self.dynamic:
            return await self.resolve_dynamic_host(model_id)

        hosts = await self.catalog.hosts_for_source_set(model_id, set_name)
        if not hosts:
            return None
        return self._pick_one(hosts)

    async def get_host_for_source(
        self, model_id: str, source_id: str, user: Optional[Any] = None
    ) -> str:
        """One random host of a single source.

        Raises SourceNotFound for an unknown, foreign or inaccessible source,
        NoHostsFound when the source has no hosts.
        """
        if self.dynamic:
            return await self.resolve_dynamic_host(model_id)

        source = await self.catalog.get_source(source_id)
        if source is None or source.model_id != model_id:
            raise SourceNotFound()
        if not await self.access_policy.can_access(model_id, source.set_name, user):
            raise SourceNotFound()
        if not source.host_urls:
            raise NoHostsFound()
        return self._pick_one(source.host_urls)

    # ─────────────────────────────────────────────────────────────────
    # Two hosts (comparison / load split)
    # ─────────────────────────────────────────────────────────────────

    async def get_two_hosts_for_model(self, model_id: str) -> tuple[str, str]:
        """Two hosts for the model, distinct when the catalog has two or more.

        Dynamic mode returns the discovered host twice.
        """
        if self.dynamic:
            host = await self.resolve_dynamic_host(model_id)
            return host, host

        return self._pick_two(await self.catalog.hosts_for_model(model_id))

    async def get_two_hosts_for_source_set(
        self, model_id: str, set_name: str, user: Optional[Any] = None
    ) -> tuple[str, str]:
        """Two hosts of the source set.

        Raises SourceSetNotFound when access is denied, NoHostsFound when the
        set has no hosts.
        """
        if not await self.access_policy.can_access(model_id, set_name, user):
            raise SourceSetNotFound()

        if self.dynamic:
            host = await self.resolve_dynamic_host(model_id)
            return host, host

        return self._pick_two(await self.catalog.hosts_for_source_set(model_id, set_name))
