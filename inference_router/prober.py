"""DiscoveryProber — finds live model servers on a range of local ports.

Every port gets one ``GET /health`` at the same time, each bounded by its own
deadline covering the whole exchange, not just each network read. Ports
that fail in any way are left out of the result.
"""

import asyncio
import logging
from typing import Iterable, Optional

import httpx

from inference_router.config import RESERVED_PORTS, RouterSettings
from inference_router.models import HealthResponse, ServerDescriptor, canonical_host_url

logger = logging.getLogger(__name__)


class DiscoveryProber:
    """Health-probes a fixed set of ports on one host.

    Reserved ports are dropped from the scan range whatever the caller asks
    for. Results come back in completion order, not port order.
    """

    def __init__(
        self,
        ports: Iterable[int],
        base_url: str = "http://127.0.0.1",
        timeout: float = 2.0,
    ):
        self.ports: list[int] = [p for p in dict.fromkeys(ports) if p not in RESERVED_PORTS]
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: RouterSettings) -> "DiscoveryProber":
        return cls(
            ports=settings.discovery_ports,
            base_url=settings.inference_base_url,
            timeout=settings.discovery_timeout,
        )

    def candidate_url(self, port: int) -> str:
        return canonical_host_url(f"{self.base_url}:{port}")

    async def probe(self) -> list[ServerDescriptor]:
        """Probe every port once and return the servers that answered."""
        servers: list[ServerDescriptor] = []

        async def collect(client: httpx.AsyncClient, port: int) -> None:
            descriptor = await self._probe_port(client, port)
            if descriptor is not None:
                servers.append(descriptor)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            tasks = [collect(client, port) for port in self.ports]
            await asyncio.gather(*tasks, return_exceptions=True)

        logger.info(
            f"Discovered {len(servers)} inference servers: "
            f"{[f'{s.model_id}@{s.port}' for s in servers]}"
        )
        return servers

    async def _probe_port(
        self, client: httpx.AsyncClient, port: int
    ) -> Optional[ServerDescriptor]:
        """Probe a single port. Returns None when nothing healthy answers."""
        url = self.candidate_url(port)
        try:
            health = await asyncio.wait_for(self._fetch_health(client, url), self.timeout)
        except Exception as e:
            logger.debug(f"No inference server on port {port}: {e!r}")
            return None

        return ServerDescriptor(
            port=port,
            model_id=health.resolved_model_id,
            base_url=url,
            healthy=True,
        )

    async def _fetch_health(self, client: httpx.AsyncClient, url: str) -> HealthResponse:
        response = await client.get(f"{url}/health")
        response.raise_for_status()
        return HealthResponse.model_validate(response.json())
