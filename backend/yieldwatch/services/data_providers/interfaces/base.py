"""
Base types, exceptions, and enumerations for market data providers.

All providers must:
1. Be async
2. Report extraction misses as data (ProviderResult), never as exceptions
3. Raise typed exceptions for transport problems
4. Support mocking for tests
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional, List, Dict, Any
from enum import Enum


# =============================================================================
# EXCEPTIONS
# =============================================================================

class ProviderError(Exception):
    """Base exception for all provider errors."""
    pass


class TransportError(ProviderError):
    """Fetch failed or upstream answered with a non-success status."""

    def __init__(self, message: str, status: Optional[int] = None, url: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.url = url


class ProviderTimeoutError(TransportError):
    """Request timeout or provider time budget exceeded."""
    pass


class ChainExhausted(ProviderError):
    """Every provider in a chain failed or was rejected."""

    def __init__(self, message: str, attempts: Optional[List["ProviderResult"]] = None):
        super().__init__(message)
        self.attempts = attempts or []


class UnsupportedRequestError(ValueError):
    """Request names a type, country or horizon outside the supported set."""
    pass


# =============================================================================
# REQUEST VOCABULARY
# =============================================================================

class DataType(str, Enum):
    """Supported query types."""
    YIELD = "yield"
    CDS = "cds"


class Horizon(str, Enum):
    """How far back to look for the observation."""
    TODAY = "today"
    ONE_WEEK = "1w"
    ONE_MONTH = "1m"

    @property
    def min_age_days(self) -> int:
        return HORIZON_MIN_AGE_DAYS[self]


class Provenance(str, Enum):
    """How a payload was obtained in a given call."""
    LIVE = "live"
    CACHE = "cache"
    DEMO = "demo"


HORIZON_MIN_AGE_DAYS = {
    Horizon.TODAY: 0,
    Horizon.ONE_WEEK: 7,
    Horizon.ONE_MONTH: 30,
}

# Closed tenor enumeration, in curve order
TENOR_CODES = ("1M", "3M", "6M", "1Y", "2Y", "3Y", "5Y", "7Y", "10Y", "20Y", "30Y")

SUPPORTED_COUNTRIES = ("US", "DE", "GB", "JP", "CA")


def empty_tenors() -> Dict[str, Optional[float]]:
    """Full tenor mapping with every value missing."""
    return {code: None for code in TENOR_CODES}


# =============================================================================
# TIME SERIES TYPES
# =============================================================================

@dataclass
class SeriesPoint:
    """A single observation in a time series.

    ``v`` is a tenor mapping for curve series and a float for scalar series.
    """
    t: date
    v: Any


# =============================================================================
# PROVIDER RESULT
# =============================================================================

@dataclass
class ProviderResult:
    """
    Transient outcome of one provider step.

    Never persisted; the chain inspects ``ok`` to decide whether to move on.
    ``payload`` is the tenor mapping (yield) or the 5Y spread (cds).
    """
    provider: str
    ok: bool
    payload: Any = None
    as_of: Optional[date] = None
    url: Optional[str] = None
    diagnostics: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.provider,
            "url": self.url,
            "ok": self.ok,
            "diagnostics": list(self.diagnostics),
        }
