"""Admin HTTP surface for inspecting and refreshing discovered servers.

    GET  /api/admin/inference-servers                       current discovery result
    POST /api/admin/inference-servers {"action": "refresh"} drop the cache and re-probe
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from inference_router.cache import DiscoveryCache
from inference_router.config import RouterSettings, get_settings
from inference_router.prober import DiscoveryProber

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/inference-servers", tags=["admin"])


class DiscoveryAction(BaseModel):
    action: Optional[str] = None


def _cache(request: Request) -> DiscoveryCache:
    return request.app.state.discovery_cache


@router.get("")
async def list_inference_servers(request: Request):
    try:
        snapshot = await _cache(request).get_snapshot()
        servers = [s.model_dump() for s in snapshot.servers]
        return {
            "success": True,
            "servers": servers,
            "total": len(servers),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    except Exception:
        logger.exception("Error discovering inference servers")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to discover inference servers"},
        )


@router.post("")
async def refresh_inference_servers(body: DiscoveryAction, request: Request):
    if body.action != "refresh":
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid action. Supported actions: refresh"},
        )

    try:
        cache = _cache(request)
        cache.invalidate()
        snapshot = await cache.get_snapshot()
        servers = [s.model_dump() for s in snapshot.servers]
        return {
            "success": True,
            "message": "Inference server cache refreshed",
            "servers": servers,
            "total": len(servers),
        }
    except Exception:
        logger.exception("Error refreshing inference servers")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to refresh inference servers"},
        )


def create_app(
    settings: Optional[RouterSettings] = None,
    cache: Optional[DiscoveryCache] = None,
) -> FastAPI:
    """Create the admin application around a discovery cache."""
    settings = settings or get_settings()

    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
    for logger_name in ["httpx", "httpcore"]:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    if cache is None:
        cache = DiscoveryCache(
            DiscoveryProber.from_settings(settings), ttl=settings.discovery_cache_ttl
        )

    app = FastAPI(title="inference-router admin")
    app.state.discovery_cache = cache
    app.include_router(router)
    return app


def main():
    """Run the admin application using uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=8000, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
