"""
Health monitoring API endpoints.

Exposes the market cache state so operators can see which keys are
fresh without triggering upstream fetches.
"""
from fastapi import APIRouter

from yieldwatch.services.market_data import get_market_data_service

router = APIRouter()


@router.get("/cache")
async def get_cache_health():
    """Size, freshness window and per-key age of the market cache."""
    cache = get_market_data_service().cache
    entries = cache.snapshot()
    return {
        "entries": len(entries),
        "fresh": sum(1 for e in entries if e["fresh"]),
        "ttl_seconds": cache.ttl_seconds,
        "keys": entries,
    }
