"""Best-effort field matchers for BOQ item descriptions.

Each matcher takes the description text and returns an optional value. They
are independent: a matcher that finds nothing (or trips over odd input) never
prevents the others from running.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable

from boqrecon.canonical.normalize import parse_dimensions
from boqrecon.models import Dimensions

logger = logging.getLogger(__name__)

# A-201, S-05, A587-00-00-600
DRAWING_REFERENCE_PATTERN = re.compile(r"\b[A-Z]-?\d{2,3}(?:-\d{2}-\d{2}-\d{3})?\b")
# Simple discipline codes and compound TYPE-sheet-block-item codes
DRAWING_CODE_FORMAT = re.compile(r"^(?:[ASMFD]-\d{3}|[A-Z]+\d*-\d{2}-\d{2}-\d{3})$")

_LOCATION_PATTERN = re.compile(r"Location:\s*([^.;\n]+)", re.IGNORECASE)
_MATERIAL_PATTERN = re.compile(r"Material:\s*([^,;.\n]+)", re.IGNORECASE)
_BRAND_PATTERN = re.compile(r"Brand:\s*([^,;.\n]+)", re.IGNORECASE)
_EQUIVALENT_PATTERN = re.compile(r"\b([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)\s+or\s+(?:approved\s+)?equivalent")


def extract_drawing_references(text: str) -> list[str] | None:
    matches = DRAWING_REFERENCE_PATTERN.findall(text)
    if not matches:
        return None
    return list(dict.fromkeys(matches))


def extract_dimensions(text: str) -> Dimensions | None:
    return parse_dimensions(text)


def extract_locations(text: str) -> list[str] | None:
    match = _LOCATION_PATTERN.search(text)
    if not match:
        return None
    locations = [loc.strip() for loc in match.group(1).split(",") if loc.strip()]
    return locations or None


def extract_material(text: str) -> str | None:
    match = _MATERIAL_PATTERN.search(text)
    return match.group(1).strip() if match else None


def extract_brand(text: str) -> str | None:
    match = _BRAND_PATTERN.search(text)
    if match:
        return match.group(1).strip()
    match = _EQUIVALENT_PATTERN.search(text)
    return match.group(1).strip() if match else None


def is_valid_drawing_code(code: str) -> bool:
    """Check a drawing code against the discipline and compound formats."""
    return bool(DRAWING_CODE_FORMAT.match(code.strip().upper()))


Matcher = Callable[[str], Any]

# Applied in order; the key is the BOQLineItem field each one fills.
DESCRIPTION_MATCHERS: tuple[tuple[str, Matcher], ...] = (
    ("drawing_references", extract_drawing_references),
    ("dimensions", extract_dimensions),
    ("locations", extract_locations),
    ("material", extract_material),
    ("brand", extract_brand),
)


@dataclass
class DescriptionFields:
    """Sub-fields recovered from a free-text description."""

    drawing_references: list[str] = field(default_factory=list)
    dimensions: Dimensions | None = None
    locations: list[str] = field(default_factory=list)
    material: str | None = None
    brand: str | None = None


def parse_description(
    text: str | None,
    matchers: tuple[tuple[str, Matcher], ...] = DESCRIPTION_MATCHERS,
) -> DescriptionFields:
    """Run every matcher over the description and collect what they find."""
    fields = DescriptionFields()
    if not text:
        return fields

    for name, matcher in matchers:
        try:
            value = matcher(text)
        except (ValueError, ArithmeticError):
            logger.debug("Matcher %s failed on %r", name, text, exc_info=True)
            continue
        if value is not None:
            setattr(fields, name, value)

    return fields
