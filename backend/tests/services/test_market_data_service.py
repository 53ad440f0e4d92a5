"""
Tests for MarketDataService: cache, chain and demo fallback wired together.

All upstream traffic goes through FakeFetcher; no live network calls.
"""
import pytest
from datetime import date
from unittest.mock import AsyncMock, MagicMock

from yieldwatch.services.cache import MarketCache
from yieldwatch.services.data_providers import (
    SUPPORTED_COUNTRIES,
    TENOR_CODES,
    UnsupportedRequestError,
    demo_payload,
)
from yieldwatch.services.market_data import MarketDataService, validate_request

from tests.services.helpers import (
    FULL_CURVE,
    FakeFetcher,
    WGB_CDS_PAGE_HTML,
    dated_rows,
    fred_csv,
)


TODAY = date(2026, 10, 16)


class _Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return _Clock()


def _service(fetcher, clock, **kwargs):
    cache = MarketCache(ttl_seconds=900, clock=clock)
    return MarketDataService(fetcher=fetcher, cache=cache, today=lambda: TODAY, **kwargs)


@pytest.fixture
def live_fetcher():
    return FakeFetcher([
        ("fredgraph.csv", fred_csv(dated_rows(TODAY, [0]))),
        ("cds-historical-data/united-states", WGB_CDS_PAGE_HTML),
    ])


# =============================================================================
# VALIDATION
# =============================================================================

class TestValidateRequest:

    def test_normalises_case(self):
        data_type, country, horizon = validate_request("YIELD", "de", "1W")
        assert (data_type.value, country, horizon.value) == ("yield", "DE", "1w")

    @pytest.mark.parametrize("args,message", [
        (("fx", "US", "today"), 'Unsupported type "fx"'),
        (("yield", "FR", "today"), 'Unsupported country "FR"'),
        (("yield", "", "today"), 'Unsupported country ""'),
        (("cds", "US", "1y"), 'Unsupported horizon "1y"'),
    ])
    def test_rejects_unsupported_input(self, args, message):
        with pytest.raises(UnsupportedRequestError, match=message):
            validate_request(*args)

    @pytest.mark.asyncio
    async def test_service_rejects_before_any_fetch(self, clock):
        fetcher = FakeFetcher()
        with pytest.raises(UnsupportedRequestError):
            await _service(fetcher, clock).get_market_data("yield", "XX")
        assert fetcher.calls == []


# =============================================================================
# LIVE AND CACHE
# =============================================================================

class TestLiveAndCache:

    @pytest.mark.asyncio
    async def test_live_yield(self, live_fetcher, clock):
        result = await _service(live_fetcher, clock).get_market_data("yield", "US")

        assert result == {
            "asOf": "2026-10-16",
            "country": "US",
            "tenors": FULL_CURVE,
            "src": "live",
        }

    @pytest.mark.asyncio
    async def test_live_cds(self, live_fetcher, clock):
        result = await _service(live_fetcher, clock).get_market_data("cds", "US")

        assert result["cds5y_bps"] == pytest.approx(41.75)
        assert result["src"] == "live"
        assert "tenors" not in result

    @pytest.mark.asyncio
    async def test_second_call_within_ttl_is_served_from_cache(self, live_fetcher, clock):
        service = _service(live_fetcher, clock)

        first = await service.get_market_data("yield", "US")
        clock.now += 600
        second = await service.get_market_data("yield", "US")

        assert len(live_fetcher.calls) == 1
        assert second["src"] == "cache"
        assert {k: v for k, v in second.items() if k != "src"} == \
            {k: v for k, v in first.items() if k != "src"}

    @pytest.mark.asyncio
    async def test_stale_entry_is_refetched(self, live_fetcher, clock):
        service = _service(live_fetcher, clock)

        await service.get_market_data("yield", "US")
        clock.now += 900
        again = await service.get_market_data("yield", "US")

        assert again["src"] == "live"
        assert len(live_fetcher.calls) == 2

    @pytest.mark.asyncio
    async def test_horizons_are_cached_separately(self, live_fetcher, clock):
        service = _service(live_fetcher, clock)

        await service.get_market_data("yield", "US", "today")
        await service.get_market_data("yield", "US", "1w")

        assert len(live_fetcher.calls) == 2


# =============================================================================
# DEMO FALLBACK
# =============================================================================

class TestDemoFallback:

    @pytest.mark.asyncio
    async def test_exhausted_chain_serves_exact_demo_values(self, clock):
        fetcher = FakeFetcher([("", "<html>Access denied</html>")])

        result = await _service(fetcher, clock).get_market_data("yield", "DE")

        assert result["src"] == "demo"
        assert result["tenors"] == demo_payload("yield", "DE")
        assert result["asOf"] == TODAY.isoformat()

    @pytest.mark.asyncio
    async def test_unexpected_error_serves_demo(self, clock):
        chain = MagicMock()
        chain.resolve = AsyncMock(side_effect=RuntimeError("boom"))
        service = _service(FakeFetcher(), clock, chain=chain)

        result = await service.get_market_data("cds", "JP", debug=True)

        assert result["src"] == "demo"
        assert result["cds5y_bps"] == demo_payload("cds", "JP")
        assert "Error: boom" in result["debug"]["notes"]

    @pytest.mark.asyncio
    async def test_demo_results_are_not_cached(self, clock):
        fetcher = FakeFetcher()
        service = _service(fetcher, clock)

        await service.get_market_data("cds", "CA")
        second = await service.get_market_data("cds", "CA")

        assert second["src"] == "demo"
        assert second["cds5y_bps"] == demo_payload("cds", "CA")
        assert len(service.cache) == 0

    @pytest.mark.asyncio
    async def test_recovered_source_is_used_after_a_demo_answer(self, clock):
        fetcher = FakeFetcher()
        service = _service(fetcher, clock)

        first = await service.get_market_data("cds", "US")
        fetcher.routes.append(("cds-historical-data/united-states", WGB_CDS_PAGE_HTML))
        clock.now += 60
        second = await service.get_market_data("cds", "US")

        assert first["src"] == "demo"
        assert second["src"] == "live"
        assert second["cds5y_bps"] == pytest.approx(41.75)

    @pytest.mark.asyncio
    async def test_every_supported_request_is_well_formed_offline(self, clock):
        service = _service(FakeFetcher(), clock)

        for data_type in ("yield", "cds"):
            for country in SUPPORTED_COUNTRIES:
                for horizon in ("today", "1w", "1m"):
                    result = await service.get_market_data(data_type, country, horizon)

                    assert result["country"] == country
                    assert date.fromisoformat(result["asOf"]) == TODAY
                    assert result["src"] in ("live", "cache", "demo")
                    if data_type == "yield":
                        assert set(result["tenors"]) == set(TENOR_CODES)
                    else:
                        assert result["cds5y_bps"] > 0


# =============================================================================
# DEBUG
# =============================================================================

class TestDebug:

    @pytest.mark.asyncio
    async def test_debug_lists_attempts_in_order(self, clock):
        fetcher = FakeFetcher([("cds-historical-data/germany", WGB_CDS_PAGE_HTML)])

        result = await _service(fetcher, clock).get_market_data("cds", "DE", debug=True)
        debug = result["debug"]

        assert debug["type"] == "cds"
        assert debug["country"] == "DE"
        assert debug["h"] == "today"
        assert debug["url"] == "https://www.worldgovernmentbonds.com/cds-historical-data/germany/"
        assert [p["name"] for p in debug["providers"]] == ["wgb_cds"]
        assert debug["providers"][0]["ok"] is True

    @pytest.mark.asyncio
    async def test_debug_on_exhausted_chain(self, clock):
        result = await _service(FakeFetcher(), clock).get_market_data("yield", "JP", debug=True)
        debug = result["debug"]

        assert [p["name"] for p in debug["providers"]] == ["mof", "wgb"]
        assert not any(p["ok"] for p in debug["providers"])
        assert "yield chain exhausted; fallback to demo" in debug["notes"]

    @pytest.mark.asyncio
    async def test_debug_on_cache_hit(self, live_fetcher, clock):
        service = _service(live_fetcher, clock)
        await service.get_market_data("yield", "US")

        result = await service.get_market_data("yield", "US", debug=True)

        assert result["debug"]["notes"] == ["served from cache"]
        assert result["debug"]["providers"] == []

    @pytest.mark.asyncio
    async def test_no_debug_key_by_default(self, live_fetcher, clock):
        result = await _service(live_fetcher, clock).get_market_data("yield", "US")
        assert "debug" not in result

    @pytest.mark.asyncio
    async def test_close_closes_fetcher(self, clock):
        fetcher = FakeFetcher()
        await _service(fetcher, clock).close()
        assert fetcher.closed
