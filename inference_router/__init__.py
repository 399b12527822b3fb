"""inference-router — discovery and selection of inference backends.

Public API:
    HostSelector      — picks one or two backend URLs for a model
    DiscoveryProber   — health-probes local ports for live model servers
    DiscoveryCache    — TTL cache over the latest discovery snapshot
    ModelMatcher      — layered model-id matching against discovered servers
    SqlHostCatalog    — SQLAlchemy-backed catalog of registered hosts
    RouterSettings    — environment configuration
"""

from inference_router.cache import DiscoveryCache
from inference_router.catalog import AccessPolicy, CatalogAccessPolicy, HostCatalog, SourceRecord, SqlHostCatalog
from inference_router.config import RESERVED_PORTS, RouterSettings, get_settings
from inference_router.errors import (
    InvalidHostUrl,
    NoHostsFound,
    RoutingError,
    SourceNotFound,
    SourceSetNotFound,
)
from inference_router.matcher import ModelMatcher, normalize_model_name, tokenize_model_name
from inference_router.models import DiscoverySnapshot, HealthResponse, ServerDescriptor, canonical_host_url
from inference_router.prober import DiscoveryProber
from inference_router.selector import HostSelector

__all__ = [
    "HostSelector",
    "DiscoveryProber",
    "DiscoveryCache",
    "ModelMatcher",
    "normalize_model_name",
    "tokenize_model_name",
    "HostCatalog",
    "AccessPolicy",
    "SqlHostCatalog",
    "CatalogAccessPolicy",
    "SourceRecord",
    "RouterSettings",
    "get_settings",
    "RESERVED_PORTS",
    "ServerDescriptor",
    "DiscoverySnapshot",
    "HealthResponse",
    "canonical_host_url",
    "RoutingError",
    "NoHostsFound",
    "SourceNotFound",
    "SourceSetNotFound",
    "InvalidHostUrl",
]
