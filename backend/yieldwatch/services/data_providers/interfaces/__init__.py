"""
Data provider interfaces.

All providers must:
1. Be async
2. Report extraction misses as data (ProviderResult), never as exceptions
3. Raise typed exceptions for transport problems
4. Support mocking for tests
"""

from .base import (
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
    HORIZON_MIN_AGE_DAYS,
    TENOR_CODES,
    SUPPORTED_COUNTRIES,
    empty_tenors,
    # Data types
    SeriesPoint,
    ProviderResult,
)

from .fetcher import DocumentFetcher

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
    "HORIZON_MIN_AGE_DAYS",
    "TENOR_CODES",
    "SUPPORTED_COUNTRIES",
    "empty_tenors",
    # Data types
    "SeriesPoint",
    "ProviderResult",
    # Protocols
    "DocumentFetcher",
]
