"""Helper utilities for text normalization and numeric cell parsing."""

from __future__ import annotations

import math
import re
import unicodedata
from decimal import Decimal, InvalidOperation

from boqrecon.models import Dimensions

_DIMENSION_PATTERN = re.compile(
    r"(?P<width>\d+(?:\.\d+)?)\s*[x×]\s*(?P<height>\d+(?:\.\d+)?)"
    r"(?:\s*(?P<unit>millimet(?:er|re)s?|centimet(?:er|re)s?|met(?:er|re)s?|mm|cm|m))?"
    r"(?![a-z\d])",
    re.IGNORECASE,
)
_LONG_UNITS = {"millimet": "mm", "centimet": "cm", "met": "m"}
_CURRENCY_NOISE = re.compile(r"(aed|usd|eur|€|\$|,|\s)", re.IGNORECASE)


def normalize_text(text: str | None) -> str:
    """Lowercase, NFKC-normalize and collapse whitespace."""
    if not text:
        return ""
    text = unicodedata.normalize("NFKC", str(text))
    return " ".join(text.lower().split())


def clean_cell(value: object) -> str:
    """Render a raw spreadsheet cell as stripped text ('' for blanks)."""
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def parse_decimal(value: object) -> Decimal:
    """Parse a numeric cell into Decimal.

    Blank cells are zero. Thousands separators and currency prefixes are
    ignored.

    Raises:
        ValueError: If the cell holds non-numeric text
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, bool):
        raise ValueError(f"not a number: {value!r}")
    if isinstance(value, (int, Decimal)):
        return Decimal(value)
    if isinstance(value, float):
        if math.isnan(value):
            return Decimal("0")
        if math.isinf(value):
            raise ValueError(f"not a finite number: {value!r}")
        return Decimal(str(value))

    text = _CURRENCY_NOISE.sub("", str(value))
    if not text:
        return Decimal("0")
    try:
        result = Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"not a number: {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"not a finite number: {value!r}")
    return result


def parse_dimensions(text: str | None) -> Dimensions | None:
    """Parse the first ``W x H [unit]`` group in text (unit defaults to mm)."""
    if not text:
        return None
    match = _DIMENSION_PATTERN.search(text)
    if not match:
        return None
    unit = (match.group("unit") or "mm").lower()
    for prefix, code in _LONG_UNITS.items():
        if unit.startswith(prefix):
            unit = code
            break
    return Dimensions(
        width=Decimal(match.group("width")),
        height=Decimal(match.group("height")),
        unit=unit,
    )
