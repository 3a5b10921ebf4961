"""
PURPOSE: System routes for the relay: liveness and version information.

These endpoints never call Bybit; use the "verify" webhook event for an
exchange reachability probe.
"""

from fastapi import APIRouter, Depends, Request

from bybit_relay.api.routes_webhook import get_settings
from bybit_relay.config.settings import Settings
from bybit_relay.core.rate_limit import READ_LIMIT, limiter
from bybit_relay.utils.time_utils import utc_iso_now
from bybit_relay.version import get_version

router = APIRouter(tags=["system"])


@router.get("/health")
@limiter.limit(READ_LIMIT)
async def health_check(request: Request, cfg: Settings = Depends(get_settings)) -> dict:
    """Liveness check with configuration status (never exposes secret values)."""
    missing = cfg.get_missing_secrets()
    return {
        "status": "ok" if not missing else "degraded",
        "missing_settings": missing,
        "bybit_base_url": cfg.BYBIT_BASE_URL,
        "timestamp": utc_iso_now(),
    }


@router.get("/version")
@limiter.limit(READ_LIMIT)
async def get_system_version(request: Request) -> dict:
    """Return version.json contents."""
    return get_version()
