"""
Fakes and document builders for market data tests.

All fakes stand in at the DocumentFetcher seam, so no test touches the
network.
"""
import asyncio
from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence, Tuple, Union

from yieldwatch.services.data_providers import TransportError
from yieldwatch.services.data_providers.providers import FRED_LABELS


Response = Union[str, Exception, float]


class FakeFetcher:
    """
    DocumentFetcher fake routed by URL fragment.

    A route response may be a document string, an exception to raise, or
    a float: seconds to hang before returning nothing (for timeouts).
    Unrouted URLs answer 404.
    """

    def __init__(self, routes: Sequence[Tuple[str, Response]] = ()):
        self.routes: List[Tuple[str, Response]] = list(routes)
        self.calls: List[str] = []
        self.headers: List[Optional[Dict[str, str]]] = []
        self.closed = False

    async def fetch(self, url: str, headers: Optional[Dict[str, str]] = None) -> str:
        self.calls.append(url)
        self.headers.append(headers)
        for fragment, response in self.routes:
            if fragment not in url:
                continue
            if isinstance(response, Exception):
                raise response
            if isinstance(response, float):
                await asyncio.sleep(response)
                return ""
            return response
        raise TransportError(f"HTTP 404 for {url}", status=404, url=url)

    async def close(self) -> None:
        self.closed = True


FULL_CURVE = {
    "1M": 5.31, "3M": 5.27, "6M": 5.18, "1Y": 5.02, "2Y": 4.71, "3Y": 4.52,
    "5Y": 4.33, "7Y": 4.30, "10Y": 4.28, "20Y": 4.55, "30Y": 4.44,
}


def json_snippet(values: Dict[str, float]) -> str:
    """Inline `"10Y": "4.55%"` pairs, the shape quoted in page scripts."""
    return "{" + ", ".join(f'"{code}": "{value}%"' for code, value in values.items()) + "}"


def fred_csv(rows: Sequence[Tuple[date, Dict[str, Optional[float]]]]) -> str:
    """FRED graph CSV with one column per tenor series."""
    codes = list(FRED_LABELS)
    lines = ["observation_date," + ",".join(FRED_LABELS[c][0] for c in codes)]
    for observed, values in rows:
        cells = ["" if values.get(c) is None else f"{values[c]:.2f}" for c in codes]
        lines.append(observed.isoformat() + "," + ",".join(cells))
    return "\n".join(lines) + "\n"


def shifted_curve(offset: float) -> Dict[str, float]:
    return {code: round(value + offset, 2) for code, value in FULL_CURVE.items()}


def dated_rows(latest: date, ages: Sequence[int]) -> List[Tuple[date, Dict[str, float]]]:
    """One full curve per age (days before ``latest``), oldest first, each shifted by 0.1."""
    ordered = sorted(ages, reverse=True)
    return [
        (latest - timedelta(days=age), shifted_curve(0.1 * i))
        for i, age in enumerate(ordered)
    ]


WGB_CDS_PAGE_HTML = """
<html><body>
<h1>United States 5 Years CDS - Historical Data</h1>
<div class="result">
  <span>5 Years CDS</span>
  <span class="value">41.75 bps</span>
</div>
</body></html>
"""

WGB_CDS_OVERVIEW_HTML = """
<html><body>
<table>
  <tr><th>Country</th><th>Rating</th><th>10Y Yield</th><th>5Y CDS</th></tr>
  <tr><td>Germany</td><td>AAA</td><td>2.55%</td><td>11.90</td></tr>
  <tr><td>Japan</td><td>A+</td><td>0.95%</td><td>21.30</td></tr>
  <tr><td>United States</td><td>AA+</td><td>4.28%</td><td>42.10</td></tr>
</table>
</body></html>
"""
