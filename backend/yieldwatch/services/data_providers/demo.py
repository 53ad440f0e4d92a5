"""
Demo fallback values.

Fixed, deterministic and offline: used only when every live provider
failed, so a caller always receives a well-formed payload. Results built
from these values are always tagged as demo.
"""

from typing import Dict, Optional, Union

from .interfaces import DataType, TENOR_CODES


DEMO_YIELD_CURVES: Dict[str, Dict[str, float]] = {
    "US": {"1M": 5.35, "3M": 5.25, "6M": 5.15, "1Y": 5.05, "2Y": 4.90, "3Y": 4.80,
           "5Y": 4.70, "7Y": 4.60, "10Y": 4.55, "20Y": 4.50, "30Y": 4.45},
    "DE": {"1M": 3.70, "3M": 3.65, "6M": 3.55, "1Y": 3.40, "2Y": 2.95, "3Y": 2.75,
           "5Y": 2.55, "7Y": 2.50, "10Y": 2.55, "20Y": 2.75, "30Y": 2.80},
    "GB": {"1M": 5.20, "3M": 5.20, "6M": 5.10, "1Y": 4.90, "2Y": 4.55, "3Y": 4.35,
           "5Y": 4.20, "7Y": 4.20, "10Y": 4.25, "20Y": 4.60, "30Y": 4.65},
    "JP": {"1M": -0.05, "3M": 0.00, "6M": 0.05, "1Y": 0.05, "2Y": 0.20, "3Y": 0.25,
           "5Y": 0.40, "7Y": 0.60, "10Y": 0.90, "20Y": 1.55, "30Y": 1.85},
    "CA": {"1M": 5.00, "3M": 4.95, "6M": 4.85, "1Y": 4.70, "2Y": 4.30, "3Y": 4.05,
           "5Y": 3.75, "7Y": 3.65, "10Y": 3.60, "20Y": 3.55, "30Y": 3.45},
}

DEMO_CDS_5Y_BPS: Dict[str, float] = {
    "US": 40.0,
    "DE": 12.0,
    "GB": 25.0,
    "JP": 20.0,
    "CA": 30.0,
}

# Used for a country without its own demo entry
DEFAULT_DEMO_COUNTRY = "US"


def demo_tenors(country: str) -> Dict[str, Optional[float]]:
    curve = DEMO_YIELD_CURVES.get(country, DEMO_YIELD_CURVES[DEFAULT_DEMO_COUNTRY])
    return {code: curve.get(code) for code in TENOR_CODES}


def demo_cds_5y(country: str) -> float:
    return DEMO_CDS_5Y_BPS.get(country, DEMO_CDS_5Y_BPS[DEFAULT_DEMO_COUNTRY])


def demo_payload(data_type: Union[DataType, str], country: str) -> Union[Dict[str, Optional[float]], float]:
    """Demo payload for (type, country): a tenor mapping or a 5Y spread."""
    if DataType(data_type) == DataType.YIELD:
        return demo_tenors(country)
    return demo_cds_5y(country)
