"""ModelMatcher — pick the discovered server that best serves a model id.

Model ids reach the router spelled differently depending on where they came
from: typed by a user, read from the catalog, or self-reported by the
backend. Matching is therefore layered, strictest first:

1. exact string equality;
2. equality after ``normalize_model_name``;
3. same core token and at least ``min_shared_tokens`` tokens in common;
4. the first healthy server, whatever it serves.

Only a snapshot with no healthy server yields no match.
"""

import logging
import re
from typing import Iterable, Optional

from inference_router.models import DiscoverySnapshot, ServerDescriptor

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_SEPARATORS = re.compile(r"[-_]+")

# Longest first: "instruction" must not be half-rewritten by "instruct".
_REWRITES = (
    ("small", ""),
    ("large", ""),
    ("instruction", "it"),
    ("instruct", "it"),
)


def normalize_model_name(model_name: str) -> str:
    """Lowercase, keep only [a-z0-9], drop size words, shorten instruct to it.

    Rewrites repeat until nothing changes, which keeps the function
    idempotent even when removing one word exposes another.
    """
    result = _NON_ALNUM.sub("", model_name.lower())
    while True:
        previous = result
        for old, new in _REWRITES:
            result = result.replace(old, new)
        if result == previous:
            return result


def tokenize_model_name(model_name: str) -> list[str]:
    """Split on ``-``/``_`` first, then normalize each piece.

    ``"gemma-2-2b-it"`` becomes ``["gemma", "2", "2b", "it"]``. Pieces that
    normalize to nothing (``"large"`` alone, say) are dropped.
    """
    tokens = (normalize_model_name(part) for part in _SEPARATORS.split(model_name))
    return [t for t in tokens if t]


def shares_core_tokens(served: str, requested: str, min_shared_tokens: int = 2) -> bool:
    served_tokens = tokenize_model_name(served)
    requested_tokens = tokenize_model_name(requested)
    if not served_tokens or not requested_tokens:
        return False
    if served_tokens[0] != requested_tokens[0]:
        return False
    common = [t for t in served_tokens if t in requested_tokens]
    return len(common) >= min_shared_tokens


class ModelMatcher:
    """Layered model-id matching over a discovery snapshot."""

    def __init__(self, min_shared_tokens: int = 2):
        self.min_shared_tokens = min_shared_tokens

    def find(
        self, requested: str, servers: Iterable[ServerDescriptor]
    ) -> Optional[ServerDescriptor]:
        """Return the best healthy server for ``requested``, or None."""
        healthy = [s for s in servers if s.healthy]
        if not healthy:
            return None

        for server in healthy:
            if server.model_id == requested:
                return server

        normalized = normalize_model_name(requested)
        for server in healthy:
            if normalize_model_name(server.model_id) == normalized:
                return server

        for server in healthy:
            if shares_core_tokens(server.model_id, requested, self.min_shared_tokens):
                return server

        return None

    def match(self, requested: str, snapshot: DiscoverySnapshot) -> Optional[str]:
        """Base URL of the server to use for ``requested``.

        Falls back to the first healthy server when nothing matches by name.
        """
        server = self.find(requested, snapshot.servers)
        if server is not None:
            logger.info(
                f"Found matching server for {requested}: {server.model_id}@{server.port}"
            )
            return server.base_url

        healthy = snapshot.healthy_servers
        if healthy:
            fallback = healthy[0]
            logger.info(
                f"Using fallback server for {requested}: {fallback.model_id}@{fallback.port}"
            )
            return fallback.base_url

        logger.warning(f"No inference servers found for model {requested}")
        return None
