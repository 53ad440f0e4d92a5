"""
Provider descriptors per (data type, country).

Chains are configuration, not control flow: each entry names where to
fetch, how to extract and how many tenors it must deliver. The chain
runner walks the list in order and the first trusted result wins.

Yield sources:
- fred:      FRED graph CSV (US Treasury constant maturity, time series)
- treasury:  US Treasury daily par yield curve CSV (time series, newest first)
- boc:       Bank of Canada Valet CSV (time series behind a preamble)
- mof:       Japan Ministry of Finance JGB CSV (time series)
- wgb:       worldgovernmentbonds.com country page (HTML snapshot)
- cnbc:      CNBC quote service JSON (snapshot, one symbol per tenor)

CDS sources:
- wgb_cds:          worldgovernmentbonds.com CDS page (HTML snapshot)
- wgb_cds_overview: worldgovernmentbonds.com sovereign CDS table (HTML snapshot)
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple

from .extractors import (
    CDS_5Y_ALIASES,
    CDS_COLUMN_ALIASES,
    DEFAULT_STRATEGIES,
    TENOR_ALIASES,
    YIELD_COLUMN_ALIASES,
)
from .interfaces import DataType, SUPPORTED_COUNTRIES, TENOR_CODES


SNAPSHOT = "snapshot"
SERIES = "series"

# Days of history requested from series sources (covers the 1m horizon)
SERIES_LOOKBACK_DAYS = 60

CSV_ACCEPT = "text/csv,text/plain;q=0.9,*/*;q=0.8"
JSON_ACCEPT = "application/json,text/plain;q=0.9,*/*;q=0.8"


@dataclass(frozen=True)
class Country:
    code: str
    slug: str
    name: str
    cnbc_symbol: str  # Tenor placeholder: "{tenor}"


COUNTRIES: Dict[str, Country] = {
    "US": Country("US", "united-states", "United States", "US{tenor}"),
    "DE": Country("DE", "germany", "Germany", "DE{tenor}-DE"),
    "GB": Country("GB", "united-kingdom", "United Kingdom", "GB{tenor}-GB"),
    "JP": Country("JP", "japan", "Japan", "JP{tenor}-JP"),
    "CA": Country("CA", "canada", "Canada", "CA{tenor}-CA"),
}


@dataclass(frozen=True)
class ProviderSpec:
    """
    Declarative description of one provider step.

    ``labels`` maps tenor codes to label spellings (yield) or holds the
    single key "5Y" (cds). ``min_tenors`` can only raise the configured
    trust threshold, never lower it.
    """
    name: str
    data_type: DataType
    url_template: str
    kind: str = SNAPSHOT
    strategies: Tuple[str, ...] = DEFAULT_STRATEGIES
    labels: Dict[str, List[str]] = field(default_factory=dict)
    column_aliases: Optional[Tuple[str, ...]] = None
    label_separator: str = ","
    accept: Optional[str] = None
    min_tenors: Optional[int] = None

    def build_url(self, country: Country, today: date) -> str:
        series_ids = self.label_separator.join(
            self.labels[code][0] for code in TENOR_CODES if self.labels.get(code)
        )
        return self.url_template.format(
            slug=country.slug,
            code=country.code,
            year=today.year,
            start=(today - timedelta(days=SERIES_LOOKBACK_DAYS)).isoformat(),
            series_ids=series_ids,
        )

    def headers(self) -> Dict[str, str]:
        return {"Accept": self.accept} if self.accept else {}


# =============================================================================
# YIELD SOURCES
# =============================================================================

FRED_LABELS = {
    "1M": ["DGS1MO"], "3M": ["DGS3MO"], "6M": ["DGS6MO"], "1Y": ["DGS1"],
    "2Y": ["DGS2"], "3Y": ["DGS3"], "5Y": ["DGS5"], "7Y": ["DGS7"],
    "10Y": ["DGS10"], "20Y": ["DGS20"], "30Y": ["DGS30"],
}

BOC_LABELS = {
    "1M": ["TB.CDN.30D.MID"], "3M": ["TB.CDN.90D.MID"], "6M": ["TB.CDN.180D.MID"],
    "1Y": ["TB.CDN.1Y.MID"], "2Y": ["BD.CDN.2YR.DQ.YLD"], "3Y": ["BD.CDN.3YR.DQ.YLD"],
    "5Y": ["BD.CDN.5YR.DQ.YLD"], "7Y": ["BD.CDN.7YR.DQ.YLD"], "10Y": ["BD.CDN.10YR.DQ.YLD"],
    "30Y": ["BD.CDN.LONG.DQ.YLD"],
}

FRED_CSV = ProviderSpec(
    name="fred",
    data_type=DataType.YIELD,
    url_template="https://fred.stlouisfed.org/graph/fredgraph.csv?id={series_ids}&cosd={start}",
    kind=SERIES,
    labels=FRED_LABELS,
    accept=CSV_ACCEPT,
)

TREASURY_CSV = ProviderSpec(
    name="treasury",
    data_type=DataType.YIELD,
    url_template=(
        "https://home.treasury.gov/resource-center/data-chart-center/interest-rates/"
        "daily-treasury-rates.csv/{year}/all?type=daily_treasury_yield_curve"
        "&field_tdr_date_value={year}&page&_format=csv"
    ),
    kind=SERIES,
    labels=TENOR_ALIASES,
    accept=CSV_ACCEPT,
)

BOC_VALET_CSV = ProviderSpec(
    name="boc",
    data_type=DataType.YIELD,
    url_template="https://www.bankofcanada.ca/valet/observations/{series_ids}/csv?start_date={start}",
    kind=SERIES,
    labels=BOC_LABELS,
    accept=CSV_ACCEPT,
)

MOF_JGB_CSV = ProviderSpec(
    name="mof",
    data_type=DataType.YIELD,
    url_template="https://www.mof.go.jp/english/policy/jgbs/reference/interest_rate/jgbcme.csv",
    kind=SERIES,
    labels=TENOR_ALIASES,
    accept=CSV_ACCEPT,
)

WGB_COUNTRY_PAGE = ProviderSpec(
    name="wgb",
    data_type=DataType.YIELD,
    url_template="https://www.worldgovernmentbonds.com/country/{slug}/",
    labels=TENOR_ALIASES,
    column_aliases=tuple(YIELD_COLUMN_ALIASES),
)


def cnbc_quotes(country: Country) -> ProviderSpec:
    """CNBC quote service; labels are the country's bond symbols."""
    labels = {code: [country.cnbc_symbol.format(tenor=code)] for code in TENOR_CODES}
    return ProviderSpec(
        name="cnbc",
        data_type=DataType.YIELD,
        url_template=(
            "https://quote.cnbc.com/quote-html-webservice/restQuote/symbolType/symbol"
            "?symbols={series_ids}&requestMethod=itv&noform=1&partnerId=2&fund=1&exthrs=1&output=json"
        ),
        strategies=("json_records", "proximity"),
        labels=labels,
        label_separator="|",
        accept=JSON_ACCEPT,
    )


# =============================================================================
# CDS SOURCES
# =============================================================================

WGB_CDS_PAGE = ProviderSpec(
    name="wgb_cds",
    data_type=DataType.CDS,
    url_template="https://www.worldgovernmentbonds.com/cds-historical-data/{slug}/",
    labels={"5Y": CDS_5Y_ALIASES},
)


def wgb_cds_overview(country: Country) -> ProviderSpec:
    """Sovereign CDS table; the row is found by country name."""
    return ProviderSpec(
        name="wgb_cds_overview",
        data_type=DataType.CDS,
        url_template="https://www.worldgovernmentbonds.com/sovereign-cds/",
        strategies=("table_row",),
        labels={"5Y": [country.name]},
        column_aliases=tuple(CDS_COLUMN_ALIASES),
    )


# =============================================================================
# CHAINS
# =============================================================================

def build_provider_chains() -> Dict[Tuple[DataType, str], List[ProviderSpec]]:
    """Ordered provider list for every supported (type, country)."""
    chains = {
        (DataType.YIELD, "US"): [FRED_CSV, TREASURY_CSV, WGB_COUNTRY_PAGE],
        (DataType.YIELD, "DE"): [WGB_COUNTRY_PAGE, cnbc_quotes(COUNTRIES["DE"])],
        (DataType.YIELD, "GB"): [WGB_COUNTRY_PAGE, cnbc_quotes(COUNTRIES["GB"])],
        (DataType.YIELD, "JP"): [MOF_JGB_CSV, WGB_COUNTRY_PAGE],
        (DataType.YIELD, "CA"): [BOC_VALET_CSV, WGB_COUNTRY_PAGE],
    }
    for code in SUPPORTED_COUNTRIES:
        chains[(DataType.CDS, code)] = [WGB_CDS_PAGE, wgb_cds_overview(COUNTRIES[code])]
    return chains


PROVIDER_CHAINS = build_provider_chains()
