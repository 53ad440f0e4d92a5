"""
Market Data Service - answers yield curve and CDS queries.

Control flow per request:
    cache lookup -> (miss) provider chain -> horizon selection
    -> demo fallback (chain exhausted) -> cache store -> response assembly

Upstream instability never fails a request: the worst case is a
demo-tagged payload. Only unsupported input raises.
"""

from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
from loguru import logger

from yieldwatch.services.cache import MarketCache, get_market_cache
from yieldwatch.services.data_providers import (
    ChainExhausted,
    DataType,
    DocumentFetcher,
    Horizon,
    Provenance,
    ProviderChain,
    ProviderResult,
    SUPPORTED_COUNTRIES,
    UnsupportedRequestError,
    demo_payload,
    get_document_fetcher,
)


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


def validate_request(
    data_type: Union[DataType, str],
    country: str,
    horizon: Union[Horizon, str] = Horizon.TODAY,
) -> Tuple[DataType, str, Horizon]:
    """
    Normalise and check a request.

    Raises:
        UnsupportedRequestError: type, country or horizon outside the supported set
    """
    try:
        data_type = DataType(str(getattr(data_type, "value", data_type)).lower())
    except ValueError:
        raise UnsupportedRequestError(f'Unsupported type "{data_type}"')

    country = str(country or "").upper()
    if country not in SUPPORTED_COUNTRIES:
        raise UnsupportedRequestError(f'Unsupported country "{country}"')

    try:
        horizon = Horizon(str(getattr(horizon, "value", horizon)).lower())
    except ValueError:
        raise UnsupportedRequestError(f'Unsupported horizon "{horizon}"')

    return data_type, country, horizon


# =============================================================================
# RESPONSE ASSEMBLY
# =============================================================================

def build_record(data_type: DataType, country: str, as_of: date, payload: Any) -> Dict[str, Any]:
    """Canonical record without provenance; this is what the cache stores."""
    record: Dict[str, Any] = {"asOf": as_of.isoformat(), "country": country}
    if data_type == DataType.YIELD:
        record["tenors"] = dict(payload)
    else:
        record["cds5y_bps"] = payload
    return record


def assemble_response(
    record: Dict[str, Any],
    provenance: Provenance,
    debug: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Final response: record plus the provenance of this exact call."""
    response = {**record, "src": provenance.value}
    if debug is not None:
        response["debug"] = debug
    return response


# =============================================================================
# SERVICE
# =============================================================================

class MarketDataService:
    """
    Entry point for "get data for type + country + horizon".

    Collaborators are injected so tests can swap the fetcher, the cache
    or the whole chain for fakes.
    """

    def __init__(
        self,
        fetcher: Optional[DocumentFetcher] = None,
        cache: Optional[MarketCache] = None,
        chain: Optional[ProviderChain] = None,
        today: Callable[[], date] = _utc_today,
    ):
        self._fetcher = fetcher or get_document_fetcher()
        self._cache = cache if cache is not None else get_market_cache()
        self._chain = chain or ProviderChain(self._fetcher, today=today)
        self._today = today

    @property
    def cache(self) -> MarketCache:
        return self._cache

    async def close(self):
        """Close the underlying fetcher session"""
        await self._fetcher.close()

    async def get_market_data(
        self,
        data_type: Union[DataType, str],
        country: str,
        horizon: Union[Horizon, str] = Horizon.TODAY,
        debug: bool = False,
    ) -> Dict[str, Any]:
        """
        Resolve one request.

        Returns:
            yield: {"asOf", "country", "tenors": {...}, "src"}
            cds:   {"asOf", "country", "cds5y_bps", "src"}
            plus "debug" when requested

        Raises:
            UnsupportedRequestError: malformed input only
        """
        data_type, country, horizon = validate_request(data_type, country, horizon)
        key = (data_type.value, country, horizon.value)
        debug_info = self._new_debug(data_type, country, horizon) if debug else None

        cached = self._cache.get(key)
        if cached is not None:
            if debug_info is not None:
                debug_info["notes"].append("served from cache")
            return assemble_response(cached.payload, Provenance.CACHE, debug_info)

        record, provenance, attempts = await self._resolve(data_type, country, horizon, debug_info)

        if provenance == Provenance.LIVE:
            self._cache.put(key, record)

        if debug_info is not None:
            debug_info["providers"] = [a.to_dict() for a in attempts]
            if attempts:
                debug_info["url"] = attempts[-1].url

        return assemble_response(record, provenance, debug_info)

    async def _resolve(
        self,
        data_type: DataType,
        country: str,
        horizon: Horizon,
        debug_info: Optional[Dict[str, Any]],
    ) -> Tuple[Dict[str, Any], Provenance, List[ProviderResult]]:
        try:
            result, attempts = await self._chain.resolve(data_type, country, horizon)
            as_of = result.as_of or self._today()
            return build_record(data_type, country, as_of, result.payload), Provenance.LIVE, attempts

        except ChainExhausted as e:
            logger.warning(f"MarketData: {e}; serving demo values")
            attempts = e.attempts
            note = f"{data_type.value} chain exhausted; fallback to demo"

        except Exception as e:
            logger.exception(f"MarketData: unexpected error resolving {data_type.value}/{country}: {e}")
            attempts = []
            note = f"Error: {e}"

        if debug_info is not None:
            debug_info["notes"].append(note)
        record = build_record(data_type, country, self._today(), demo_payload(data_type, country))
        return record, Provenance.DEMO, attempts

    def _new_debug(self, data_type: DataType, country: str, horizon: Horizon) -> Dict[str, Any]:
        return {
            "type": data_type.value,
            "country": country,
            "h": horizon.value,
            "url": None,
            "notes": [],
            "providers": [],
        }


# Singleton instance
_market_data_service: Optional[MarketDataService] = None


def get_market_data_service() -> MarketDataService:
    """Get singleton market data service instance."""
    global _market_data_service
    if _market_data_service is None:
        _market_data_service = MarketDataService()
    return _market_data_service
