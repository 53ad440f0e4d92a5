"""
Tolerant extractors for yield and CDS values.

Upstream pages change wording and layout without notice, so nothing here
validates a schema. Each strategy is a best-effort pattern search that
returns a number or None; malformed input is a miss, never an exception.

Strategies (default priority order):
- proximity:      first number+unit within a window around the label
- table_row:      sibling cells of the table row holding the label
- script_literal: inline pairs such as ["10Y", 4.55] or '10Y': '4.55%'
- json_records:   JSON objects whose symbol/name field is the label
"""

import csv
import json
import re
from datetime import date, datetime
from functools import cached_property, lru_cache
from io import StringIO
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from bs4 import BeautifulSoup
from loguru import logger

from .interfaces import SeriesPoint, TENOR_CODES


# Label aliases per tenor to survive site wording/layout changes
TENOR_ALIASES: Dict[str, List[str]] = {
    "1M": ["1M", "1 Mo", "1 Month", "1-Month", "1 Monat"],
    "3M": ["3M", "3 Mo", "3 Months", "3-Month", "3 Monate"],
    "6M": ["6M", "6 Mo", "6 Months", "6-Month", "6 Monate"],
    "1Y": ["1Y", "1 Yr", "1 Year", "1-Year", "1 Jahr"],
    "2Y": ["2Y", "2 Yr", "2 Years", "2-Year", "2 Jahre"],
    "3Y": ["3Y", "3 Yr", "3 Years", "3-Year", "3 Jahre"],
    "5Y": ["5Y", "5 Yr", "5 Years", "5-Year", "5 Jahre"],
    "7Y": ["7Y", "7 Yr", "7 Years", "7-Year", "7 Jahre"],
    "10Y": ["10Y", "10 Yr", "10 Years", "10-Year", "10 Jahre"],
    "20Y": ["20Y", "20 Yr", "20 Years", "20-Year", "20 Jahre"],
    "30Y": ["30Y", "30 Yr", "30 Years", "30-Year", "30 Jahre"],
}

CDS_5Y_ALIASES = ["5 Years", "5 Year", "5Y", "5-Year", "5 Yr", "5 Jahre"]

# Header spellings for the column that holds the value
YIELD_COLUMN_ALIASES = ["Yield", "Last", "Rendite"]
CDS_COLUMN_ALIASES = ["5Y CDS", "CDS 5Y", "CDS 5 Years", "5 Years CDS", "5 Years", "5Y"]

UNIT_PATTERNS = {
    "pct": r"\s*%",
    "bps": r"\s*bps?\b",
}

# Plausibility bounds per unit; anything outside is a mis-read
VALUE_BOUNDS = {
    "pct": (-5.0, 40.0),
    "bps": (0.0, 10000.0),
}

DEFAULT_STRATEGIES = ("proximity", "table_row", "script_literal")

MAX_LABEL_OCCURRENCES = 5

DATE_COLUMN_NAMES = ("date", "observation_date", "datum")
DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%Y/%m/%d", "%d.%m.%Y")
MISSING_MARKERS = {"", ".", "-", "nd", "n/a", "na", "null", "#n/a"}

_NUMBER = r"(?<![\d.,])([-+]?\d+(?:[.,]\d+)?)"
_WHITESPACE = re.compile(r"\s+")


# =============================================================================
# PRIMITIVES
# =============================================================================

def parse_number(text: Any) -> Optional[float]:
    """Parse a rate or spread accepting '.' or ',' as decimal separator."""
    if text is None:
        return None
    if isinstance(text, (int, float)) and not isinstance(text, bool):
        return float(text)
    cleaned = str(text).strip().replace("\u2212", "-").rstrip("%").strip()
    match = re.fullmatch(r"[-+]?\d+(?:[.,]\d+)?", cleaned)
    if not match:
        return None
    return float(cleaned.replace(",", "."))


def within_bounds(value: Optional[float], unit: str) -> bool:
    if value is None:
        return False
    low, high = VALUE_BOUNDS.get(unit, (float("-inf"), float("inf")))
    return low <= value <= high


@lru_cache(maxsize=None)
def label_pattern(alias: str) -> "re.Pattern[str]":
    """
    Case-insensitive pattern for one label spelling.

    The label must not sit inside a longer alphanumeric token, so '1Y'
    never matches inside '11Y'. Inner spaces match any whitespace or dash run.
    """
    body = r"[\s\-]+".join(re.escape(part) for part in alias.split())
    return re.compile(rf"(?<![A-Za-z0-9]){body}(?![A-Za-z0-9])", re.IGNORECASE)


def _value_with_unit(unit: str) -> "re.Pattern[str]":
    return re.compile(_NUMBER + UNIT_PATTERNS[unit], re.IGNORECASE)


class ParsedDocument:
    """Raw document with lazily built views shared across strategies."""

    def __init__(self, raw: str):
        self.raw = raw or ""

    @cached_property
    def text(self) -> str:
        return _WHITESPACE.sub(" ", self.raw)

    @cached_property
    def soup(self) -> Optional[BeautifulSoup]:
        try:
            return BeautifulSoup(self.raw, "html.parser")
        except Exception as e:
            logger.debug(f"Extractor: HTML parse failed, table strategy disabled: {e}")
            return None


def as_document(document: Union[str, ParsedDocument]) -> ParsedDocument:
    if isinstance(document, ParsedDocument):
        return document
    return ParsedDocument(document)


# =============================================================================
# STRATEGIES
# =============================================================================

def find_near_label(
    document: Union[str, ParsedDocument],
    aliases: Sequence[str],
    unit: str = "pct",
    window: int = 320,
    **_: Any,
) -> Optional[float]:
    """
    Structural proximity: first number+unit near any label occurrence.

    Looks forward from the label first, then backward (closest value wins).
    """
    doc = as_document(document)
    hay = doc.text
    value_re = _value_with_unit(unit)

    for alias in aliases:
        for count, match in enumerate(label_pattern(alias).finditer(hay)):
            if count >= MAX_LABEL_OCCURRENCES:
                break
            forward = hay[match.end():match.end() + window]
            for found in value_re.finditer(forward):
                value = parse_number(found.group(1))
                if within_bounds(value, unit):
                    return value
            backward = hay[max(0, match.start() - window):match.start()]
            for found in reversed(list(value_re.finditer(backward))):
                value = parse_number(found.group(1))
                if within_bounds(value, unit):
                    return value
    return None


def _cell_text(cell) -> str:
    return _WHITESPACE.sub(" ", cell.get_text(" ", strip=True))


def _header_cells(table) -> List[str]:
    thead = table.find("thead")
    rows = thead.find_all("tr") if thead else []
    if rows:
        return [_cell_text(c) for c in rows[-1].find_all(["th", "td"])]
    for row in table.find_all("tr"):
        cells = row.find_all(["th", "td"])
        if cells and all(c.name == "th" for c in cells):
            return [_cell_text(c) for c in cells]
    return []


def _matches_any(text: str, aliases: Sequence[str]) -> bool:
    return any(label_pattern(alias).search(text) for alias in aliases)


def find_in_table_row(
    document: Union[str, ParsedDocument],
    aliases: Sequence[str],
    unit: str = "pct",
    column_aliases: Optional[Sequence[str]] = None,
    diagnostics: Optional[List[str]] = None,
    **_: Any,
) -> Optional[float]:
    """
    Table/row adjacency: read the value from the row whose cell holds the label.

    When the table has a header row naming the value column, that column
    is read (a bare number is accepted there since the header carries the
    unit). Otherwise the first number+unit sibling cell is used and the
    positional fallback is recorded in ``diagnostics``.
    """
    soup = as_document(document).soup
    if soup is None:
        return None
    value_re = _value_with_unit(unit)

    for row in soup.find_all("tr"):
        cells = row.find_all(["td", "th"])
        texts = [_cell_text(c) for c in cells]
        label_index = next((i for i, t in enumerate(texts) if _matches_any(t, aliases)), None)
        if label_index is None:
            continue

        table = row.find_parent("table")
        if column_aliases and table is not None:
            header = _header_cells(table)
            column = next(
                (j for j, h in enumerate(header)
                 if j != label_index and _matches_any(h, column_aliases)),
                None,
            )
            if column is not None and column < len(texts) and texts != header:
                cell = texts[column]
                found = value_re.search(cell)
                value = parse_number(found.group(1)) if found else parse_number(cell)
                if within_bounds(value, unit):
                    return value

        siblings = texts[label_index + 1:] + texts[:label_index]
        for text in siblings:
            found = value_re.search(text)
            if not found:
                continue
            value = parse_number(found.group(1))
            if within_bounds(value, unit):
                if column_aliases and diagnostics is not None:
                    diagnostics.append(f"{aliases[0]}: no matching header column, used first {unit} cell")
                return value
    return None


def find_in_script_literal(
    document: Union[str, ParsedDocument],
    aliases: Sequence[str],
    unit: str = "pct",
    **_: Any,
) -> Optional[float]:
    """Embedded data literal: ["10Y", 4.55], '10Y': '4.55%', "10Y" = 4,55."""
    raw = as_document(document).raw
    for alias in aliases:
        pattern = re.compile(
            rf"""["']{re.escape(alias)}["']\s*[:=,]\s*["']?([-+]?\d+(?:[.,]\d+)?)\s*(?:%|bps?)?["']?""",
            re.IGNORECASE,
        )
        for found in pattern.finditer(raw):
            value = parse_number(found.group(1))
            if within_bounds(value, unit):
                return value
    return None


_JSON_LABEL_KEYS = ("symbol", "name", "label", "shortName")
_JSON_VALUE_KEYS = ("last", "value", "yield", "close")


def _walk_json(node: Any) -> Iterable[Dict[str, Any]]:
    if isinstance(node, dict):
        yield node
        for child in node.values():
            yield from _walk_json(child)
    elif isinstance(node, list):
        for child in node:
            yield from _walk_json(child)


def find_in_json_records(
    document: Union[str, ParsedDocument],
    aliases: Sequence[str],
    unit: str = "pct",
    **_: Any,
) -> Optional[float]:
    """JSON records keyed by a symbol/name field, e.g. quote service payloads."""
    doc = as_document(document)
    try:
        data = json.loads(doc.raw)
        records = list(_walk_json(data))
    except (ValueError, RecursionError):
        return None

    wanted = {alias.lower() for alias in aliases}
    for record in records:
        labels = {str(record.get(k, "")).lower() for k in _JSON_LABEL_KEYS}
        if not labels & wanted:
            continue
        for key in _JSON_VALUE_KEYS:
            value = parse_number(record.get(key))
            if within_bounds(value, unit):
                return value
    return None


STRATEGIES: Dict[str, Callable[..., Optional[float]]] = {
    "proximity": find_near_label,
    "table_row": find_in_table_row,
    "script_literal": find_in_script_literal,
    "json_records": find_in_json_records,
}


# =============================================================================
# ENTRY POINTS
# =============================================================================

def extract_value(
    document: Union[str, ParsedDocument],
    aliases: Sequence[str],
    strategy: str,
    unit: str = "pct",
    **options: Any,
) -> Optional[float]:
    """Run one strategy for one label; None means 'not found'."""
    func = STRATEGIES.get(strategy)
    if func is None:
        raise KeyError(f"Unknown extraction strategy '{strategy}'")
    return func(document, aliases, unit=unit, **options)


def extract_first(
    document: Union[str, ParsedDocument],
    aliases: Sequence[str],
    strategies: Sequence[str] = DEFAULT_STRATEGIES,
    unit: str = "pct",
    **options: Any,
) -> Tuple[Optional[float], Optional[str]]:
    """Try strategies in priority order; returns (value, strategy that hit)."""
    doc = as_document(document)
    for strategy in strategies:
        value = extract_value(doc, aliases, strategy, unit=unit, **options)
        if value is not None:
            return value, strategy
    return None, None


def extract_tenors(
    document: Union[str, ParsedDocument],
    strategies: Sequence[str] = DEFAULT_STRATEGIES,
    labels: Optional[Dict[str, List[str]]] = None,
    window: int = 320,
    column_aliases: Optional[Sequence[str]] = None,
) -> Tuple[Dict[str, Optional[float]], List[str]]:
    """
    Extract every tenor from one document.

    Returns the full tenor mapping (missing tenors as None) and notes on
    which strategy produced each value.
    """
    doc = as_document(document)
    labels = labels or TENOR_ALIASES
    tenors: Dict[str, Optional[float]] = {}
    notes: List[str] = []

    for code in TENOR_CODES:
        aliases = labels.get(code)
        if not aliases:
            tenors[code] = None
            continue
        value, strategy = extract_first(
            doc, aliases, strategies, unit="pct",
            window=window, column_aliases=column_aliases, diagnostics=notes,
        )
        tenors[code] = value
        if strategy:
            notes.append(f"{code}: {strategy}")

    return tenors, notes


def extract_cds_5y(
    document: Union[str, ParsedDocument],
    strategies: Sequence[str] = DEFAULT_STRATEGIES,
    labels: Optional[Sequence[str]] = None,
    window: int = 320,
    column_aliases: Optional[Sequence[str]] = None,
) -> Tuple[Optional[float], List[str]]:
    """Extract the 5-year CDS spread in basis points."""
    notes: List[str] = []
    value, strategy = extract_first(
        document, labels or CDS_5Y_ALIASES, strategies, unit="bps",
        window=window, column_aliases=column_aliases, diagnostics=notes,
    )
    if strategy:
        notes.append(f"5Y: {strategy}")
    return value, notes


# =============================================================================
# CSV TIME SERIES
# =============================================================================

def parse_date(text: str) -> Optional[date]:
    cleaned = (text or "").strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue
    return None


def _column_tenor(header: str, labels: Dict[str, List[str]]) -> Optional[str]:
    cleaned = header.strip()
    for code, aliases in labels.items():
        for alias in aliases:
            if label_pattern(alias).fullmatch(cleaned):
                return code
    return None


def parse_csv_series(
    document: str,
    labels: Optional[Dict[str, List[str]]] = None,
    unit: str = "pct",
) -> List[SeriesPoint]:
    """
    Parse a CSV time series into tenor observations, oldest first.

    The header row is located by its date column, so preamble sections
    (titles, terms, series descriptions) are skipped. Rows without a
    parseable date or without any usable value are dropped.
    """
    labels = labels or TENOR_ALIASES
    try:
        rows = list(csv.reader(StringIO(document or "")))
    except csv.Error as e:
        logger.debug(f"Extractor: unreadable CSV: {e}")
        return []

    header_index = None
    date_column = None
    for i, row in enumerate(rows):
        lowered = [cell.strip().lower() for cell in row]
        hit = next((j for j, cell in enumerate(lowered) if cell in DATE_COLUMN_NAMES), None)
        if hit is not None:
            header_index, date_column = i, hit
            break
    if header_index is None:
        return []

    columns: Dict[int, str] = {}
    for j, header in enumerate(rows[header_index]):
        code = _column_tenor(header, labels)
        if code and code not in columns.values():
            columns[j] = code
    if not columns:
        return []

    points: List[SeriesPoint] = []
    for row in rows[header_index + 1:]:
        if len(row) <= date_column:
            continue
        observed = parse_date(row[date_column])
        if observed is None:
            continue
        values: Dict[str, Optional[float]] = {}
        for j, code in columns.items():
            cell = row[j].strip() if j < len(row) else ""
            value = None if cell.lower() in MISSING_MARKERS else parse_number(cell)
            values[code] = value if within_bounds(value, unit) else None
        if any(v is not None for v in values.values()):
            points.append(SeriesPoint(t=observed, v=values))

    points.sort(key=lambda p: p.t)
    return points
