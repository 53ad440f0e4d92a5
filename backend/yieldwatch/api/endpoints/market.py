"""
Market data API endpoint
Returns sovereign yield tenors or the 5Y CDS spread for one country.

Query params:
  type=yield|cds          (default: yield)
  country=US|DE|GB|JP|CA  (default: US)
  h=today|1w|1m           (default: today)
  debug=1                 (optional provider diagnostics; empty, 0, false, no, off disable)

Empty values fall back to the defaults.
"""

from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from loguru import logger

from yieldwatch.services.data_providers import UnsupportedRequestError
from yieldwatch.services.market_data import get_market_data_service

router = APIRouter()

NO_CACHE_HEADERS = {"Cache-Control": "no-cache, no-store, must-revalidate"}

FALSE_FLAGS = {"", "0", "false", "no", "off"}


def _flag(value: Optional[str]) -> bool:
    """Any non-empty value except an explicit false spelling turns the flag on."""
    return (value or "").strip().lower() not in FALSE_FLAGS


@router.get("")
async def get_market(
    type: Optional[str] = Query("yield", description="yield or cds"),
    country: Optional[str] = Query("US", description="US, DE, GB, JP or CA"),
    h: Optional[str] = Query("today", description="Horizon: today, 1w or 1m"),
    debug: Optional[str] = Query(None, description="Include provider diagnostics when set"),
):
    """
    Get a yield curve or 5Y CDS spread.

    The response is always well-formed for supported inputs; ``src`` tells
    whether it came from a live source, the cache, or demo values.
    """
    service = get_market_data_service()
    try:
        result = await service.get_market_data(
            type or "yield", country or "US", h or "today", debug=_flag(debug),
        )
    except UnsupportedRequestError as e:
        logger.info(f"Rejected market request: {e}")
        return JSONResponse(status_code=400, content={"error": str(e)}, headers=NO_CACHE_HEADERS)

    return JSONResponse(content=result, headers=NO_CACHE_HEADERS)
