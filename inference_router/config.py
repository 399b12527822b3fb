"""RouterSettings — process configuration for inference routing."""

from functools import lru_cache
from typing import Annotated, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# Held by other subsystems; never probed.
RESERVED_PORTS = frozenset({5003, 5004})

DEFAULT_DISCOVERY_PORTS = [5002] + list(range(5005, 5021))


class RouterSettings(BaseSettings):
    """Configuration loaded from environment variables.

    ``use_localhost_inference`` selects dynamic discovery over the static
    host catalog. Settings are frozen, so the routing mode cannot change
    after start-up.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Routing mode
    use_localhost_inference: bool = False
    is_docker_compose: bool = False

    # Static fallback host
    inference_port: int = 5002

    # Discovery
    discovery_ports: Annotated[list[int], NoDecode] = DEFAULT_DISCOVERY_PORTS
    discovery_timeout: float = 2.0
    discovery_cache_ttl: float = 30.0

    # Matching / selection
    match_min_shared_tokens: int = 2
    random_seed: Optional[int] = None

    # Host catalog
    database_url: str = "sqlite+aiosqlite:///./inference_hosts.db"

    # Logging
    log_level: str = "INFO"

    @field_validator("discovery_ports", mode="before")
    @classmethod
    def parse_ports(cls, v):
        """Accept a JSON list or a comma-separated string."""
        if isinstance(v, str):
            import json
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [int(p) for p in v.split(",") if p.strip()]
        return v

    @property
    def inference_base_url(self) -> str:
        return "http://inference" if self.is_docker_compose else "http://127.0.0.1"

    @property
    def default_inference_host(self) -> str:
        return f"{self.inference_base_url}:{self.inference_port}"


@lru_cache
def get_settings() -> RouterSettings:
    """Get cached settings instance."""
    return RouterSettings()
