"""
Provider chain runner.

For one (type, country, horizon) the chain tries each ProviderSpec in
order: fetch, extract, then apply the trust predicate. The first trusted
result wins. Results are never merged across providers: two partial
curves from different sources may differ in as-of date or convention.

A provider that fails to fetch, times out, or extracts too little is
skipped. When none is left the chain raises ChainExhausted and the
caller substitutes the demo fallback.
"""

import asyncio
from datetime import date, datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple, Union
from loguru import logger

from yieldwatch.config import get_settings
from .extractors import ParsedDocument, extract_cds_5y, extract_tenors, parse_csv_series
from .horizon import select_observation
from .interfaces import (
    ChainExhausted,
    DataType,
    DocumentFetcher,
    Horizon,
    ProviderResult,
    TENOR_CODES,
    TransportError,
    empty_tenors,
)
from .providers import COUNTRIES, PROVIDER_CHAINS, SERIES, ProviderSpec


# =============================================================================
# TRUST PREDICATES
# =============================================================================

def count_tenors(tenors: Dict[str, Optional[float]]) -> int:
    return sum(1 for code in TENOR_CODES if tenors.get(code) is not None)


def trust_yield(tenors: Dict[str, Optional[float]], min_tenors: int) -> bool:
    """Accept a curve only with at least ``min_tenors`` (never fewer than 4) values."""
    return count_tenors(tenors) >= max(4, min_tenors)


def trust_cds(value: Optional[float]) -> bool:
    return value is not None


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


# =============================================================================
# CHAIN
# =============================================================================

class ProviderChain:
    """
    Generic "try next" loop over declarative provider chains.

    Args:
        fetcher: DocumentFetcher used for every provider
        chains: (type, country) -> ordered ProviderSpec list
        min_tenors: yield trust threshold
        time_budget: seconds one provider may take before it is abandoned
        today: clock for snapshot dates and URL templates
    """

    def __init__(
        self,
        fetcher: DocumentFetcher,
        chains: Optional[Dict[Tuple[DataType, str], List[ProviderSpec]]] = None,
        min_tenors: Optional[int] = None,
        time_budget: Optional[float] = None,
        window: Optional[int] = None,
        today: Callable[[], date] = _utc_today,
    ):
        settings = get_settings()
        self._fetcher = fetcher
        self._chains = chains if chains is not None else PROVIDER_CHAINS
        self.min_tenors = max(4, min_tenors if min_tenors is not None else settings.YIELD_MIN_TENORS)
        self.time_budget = time_budget if time_budget is not None else settings.PROVIDER_TIME_BUDGET_SECONDS
        self.window = window if window is not None else settings.EXTRACT_WINDOW_CHARS
        self._today = today

    def providers_for(self, data_type: DataType, country: str) -> List[ProviderSpec]:
        return list(self._chains.get((DataType(data_type), country), []))

    async def resolve(
        self,
        data_type: Union[DataType, str],
        country: str,
        horizon: Union[Horizon, str] = Horizon.TODAY,
    ) -> Tuple[ProviderResult, List[ProviderResult]]:
        """
        Run the chain until one provider is trusted.

        Returns:
            (winning result, every attempt in order including the winner)

        Raises:
            ChainExhausted: no provider produced a trusted result
        """
        data_type = DataType(data_type)
        horizon = Horizon(horizon)
        attempts: List[ProviderResult] = []

        for spec in self.providers_for(data_type, country):
            result = await self.run_provider(spec, country, horizon)
            attempts.append(result)
            if result.ok:
                logger.info(
                    f"ProviderChain: {data_type.value}/{country}/{horizon.value} served by {spec.name}"
                )
                return result, attempts
            logger.warning(
                f"ProviderChain: {spec.name} rejected for {data_type.value}/{country}: "
                f"{'; '.join(result.diagnostics[-3:])}"
            )

        raise ChainExhausted(
            f"All {len(attempts)} provider(s) failed for {data_type.value}/{country}",
            attempts=attempts,
        )

    async def run_provider(self, spec: ProviderSpec, country: str, horizon: Horizon) -> ProviderResult:
        """One provider step: fetch, extract, trust. Fetch failures become results."""
        today = self._today()
        url = spec.build_url(COUNTRIES[country], today)
        result = ProviderResult(provider=spec.name, ok=False, url=url)

        try:
            raw = await asyncio.wait_for(
                self._fetcher.fetch(url, spec.headers()),
                timeout=self.time_budget,
            )
        except asyncio.TimeoutError:
            result.diagnostics.append(f"abandoned after {self.time_budget}s budget")
            return result
        except TransportError as e:
            result.diagnostics.append(f"transport: {e}")
            return result
        except Exception as e:
            logger.warning(f"ProviderChain: {spec.name} fetch failed unexpectedly: {e}")
            result.diagnostics.append(f"fetch error: {type(e).__name__}: {e}")
            return result

        if spec.kind == SERIES:
            self._extract_series(spec, raw, horizon, result)
        else:
            self._extract_snapshot(spec, raw, result)
            result.as_of = today

        if spec.data_type == DataType.YIELD:
            threshold = max(self.min_tenors, spec.min_tenors or 0)
            found = count_tenors(result.payload or {})
            result.ok = trust_yield(result.payload or {}, threshold)
            result.diagnostics.append(f"found {found}/{len(TENOR_CODES)} tenors (need {threshold})")
        else:
            result.ok = trust_cds(result.payload)
            if not result.ok:
                result.diagnostics.append("5Y spread not found")
        return result

    def _extract_snapshot(self, spec: ProviderSpec, raw: str, result: ProviderResult) -> None:
        document = ParsedDocument(raw)
        if spec.data_type == DataType.YIELD:
            tenors, notes = extract_tenors(
                document, spec.strategies, spec.labels,
                window=self.window, column_aliases=spec.column_aliases,
            )
            result.payload = tenors
        else:
            value, notes = extract_cds_5y(
                document, spec.strategies, spec.labels.get("5Y"),
                window=self.window, column_aliases=spec.column_aliases,
            )
            result.payload = value
        result.diagnostics.extend(notes)

    def _extract_series(self, spec: ProviderSpec, raw: str, horizon: Horizon, result: ProviderResult) -> None:
        unit = "pct" if spec.data_type == DataType.YIELD else "bps"
        series = parse_csv_series(raw, spec.labels, unit=unit)
        point = select_observation(series, horizon)
        if point is None:
            result.diagnostics.append("series: no usable rows")
            result.payload = empty_tenors() if unit == "pct" else None
            return

        result.diagnostics.append(
            f"series: {len(series)} rows, {horizon.value} -> {point.t.isoformat()}"
        )
        result.as_of = point.t
        if spec.data_type == DataType.YIELD:
            result.payload = {code: point.v.get(code) for code in TENOR_CODES}
        else:
            result.payload = point.v.get("5Y")
