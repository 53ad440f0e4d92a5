"""
Data providers for sovereign yield curves and CDS spreads.

All providers:
1. Are async
2. Report extraction misses as data, never as exceptions
3. Raise typed exceptions for transport problems
4. Support mocking for tests

Structure:
- interfaces/: error taxonomy, request vocabulary, DocumentFetcher protocol
- fetcher.py: aiohttp DocumentFetcher with browser-like headers
- extractors.py: tolerant value extraction from HTML, script, JSON and CSV
- horizon.py: horizon selection over fetched time series
- providers.py: declarative provider chains per (type, country)
- chain.py: chain runner and trust predicates
- demo.py: deterministic offline fallback values
"""

from .interfaces import (
    # Exceptions
    ProviderError,
    TransportError,
    ProviderTimeoutError,
    ChainExhausted,
    UnsupportedRequestError,
    # Vocabulary
    DataType,
    Horizon,
    Provenance,
    TENOR_CODES,
    SUPPORTED_COUNTRIES,
    # Data types
    SeriesPoint,
    ProviderResult,
    # Protocols
    DocumentFetcher,
)

from .fetcher import (
    HttpDocumentFetcher,
    get_document_fetcher,
    browser_headers,
)

from .extractors import (
    TENOR_ALIASES,
    extract_value,
    extract_tenors,
    extract_cds_5y,
    parse_csv_series,
)

from .horizon import select_observation

from .providers import (
    COUNTRIES,
    PROVIDER_CHAINS,
    ProviderSpec,
)

from .chain import (
    ProviderChain,
    trust_yield,
    trust_cds,
)

from .demo import demo_payload

__all__ = [
    # Exceptions
    "ProviderError",
    "TransportError",
    "ProviderTimeoutError",
    "ChainExhausted",
    "UnsupportedRequestError",
    # Vocabulary
    "DataType",
    "Horizon",
    "Provenance",
    "TENOR_CODES",
    "SUPPORTED_COUNTRIES",
    # Data types
    "SeriesPoint",
    "ProviderResult",
    "DocumentFetcher",
    # Fetcher
    "HttpDocumentFetcher",
    "get_document_fetcher",
    "browser_headers",
    # Extractors
    "TENOR_ALIASES",
    "extract_value",
    "extract_tenors",
    "extract_cds_5y",
    "parse_csv_series",
    # Horizon
    "select_observation",
    # Chains
    "COUNTRIES",
    "PROVIDER_CHAINS",
    "ProviderSpec",
    "ProviderChain",
    "trust_yield",
    "trust_cds",
    # Demo
    "demo_payload",
]
