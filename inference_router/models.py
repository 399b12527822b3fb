"""Data types shared by the discovery, matching and selection layers."""

from typing import Optional

import httpx
from pydantic import BaseModel, ConfigDict

from inference_router.errors import InvalidHostUrl

UNKNOWN_MODEL = "unknown"

_DEFAULT_PORTS = {"http": 80, "https": 443}


def canonical_host_url(url: str) -> str:
    """Reduce a host URL to ``scheme://host:port``.

    A trailing slash is dropped and the scheme's default port is filled in.
    Anything beyond the origin (path, query, fragment) is rejected.
    """
    try:
        parsed = httpx.URL(url.strip())
    except httpx.InvalidURL as e:
        raise InvalidHostUrl(f"Invalid host URL {url!r}: {e}") from e

    if not parsed.scheme or not parsed.host:
        raise InvalidHostUrl(f"Host URL {url!r} needs a scheme and a host")
    if parsed.path not in ("", "/") or parsed.query or parsed.fragment:
        raise InvalidHostUrl(f"Host URL {url!r} must not carry a path")

    port = parsed.port or _DEFAULT_PORTS.get(parsed.scheme)
    if port is None:
        raise InvalidHostUrl(f"Host URL {url!r} has no port")
    host = f"[{parsed.host}]" if ":" in parsed.host else parsed.host
    return f"{parsed.scheme}://{host}:{port}"


class HealthResponse(BaseModel):
    """Body returned by a model server's ``GET /health``.

    Servers disagree on what they call the served model, so several keys are
    accepted. The first non-empty one wins, in declaration order.
    """

    model_config = ConfigDict(extra="ignore", protected_namespaces=())

    model_id: Optional[str] = None
    model: Optional[str] = None
    model_name: Optional[str] = None

    @property
    def resolved_model_id(self) -> str:
        for candidate in (self.model_id, self.model, self.model_name):
            if candidate:
                return candidate
        return UNKNOWN_MODEL


class ServerDescriptor(BaseModel):
    """One live backend observed during a probe cycle."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    port: int
    model_id: str
    base_url: str
    healthy: bool = True


class DiscoverySnapshot(BaseModel):
    """Result of one discovery cycle. Replaced whole, never edited."""

    model_config = ConfigDict(frozen=True)

    servers: tuple[ServerDescriptor, ...] = ()
    created_at: float = 0.0

    @property
    def healthy_servers(self) -> list[ServerDescriptor]:
        return [s for s in self.servers if s.healthy]

    def __len__(self) -> int:
        return len(self.servers)
