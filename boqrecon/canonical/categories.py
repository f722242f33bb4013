"""Worksheet → BOQ category mapping.

BOQ workbooks split scope into one worksheet per trade. The table below maps
known worksheet names to a display category and a short code used in line
identifiers. Unknown worksheets keep their own name.
"""

from __future__ import annotations

import re
from typing import NamedTuple

from boqrecon.canonical.normalize import normalize_text


class Category(NamedTuple):
    name: str
    code: str


SHEET_CATEGORIES: dict[str, Category] = {
    "preamble & general": Category("Project Setup & Management", "GEN-PRE"),
    "design & approvals": Category("Design & Approvals", "GEN-DES"),
    "doors": Category("Architectural Finishes - Doors", "ARC-DOR"),
    "floor & floor finishes": Category("Architectural Finishes - Flooring", "ARC-FLR"),
    "walls & wall finishes": Category("Architectural Finishes - Walls", "ARC-WAL"),
    "ceiling finishes": Category("Architectural Finishes - Ceilings", "ARC-CLG"),
    "electrical & lighting": Category("MEP Systems - Electrical", "MEP-ELE"),
    "fire fighting & fire alarm": Category("MEP Systems - Fire Safety", "MEP-FIR"),
    "hvac": Category("MEP Systems - HVAC", "MEP-HVA"),
    "plumbing & drainage": Category("MEP Systems - Plumbing", "MEP-PLU"),
    "data & voice": Category("MEP Systems - Communications", "MEP-COM"),
    "signage": Category("Specialist Works - Signage", "SPC-SGN"),
}


def category_for_sheet(sheet_name: str) -> Category:
    """Return the category for a worksheet, deriving a code when unmapped."""
    mapped = SHEET_CATEGORIES.get(normalize_text(sheet_name))
    if mapped is not None:
        return mapped
    return Category(sheet_name.strip() or "Uncategorised", _derive_code(sheet_name))


def _derive_code(sheet_name: str) -> str:
    words = re.findall(r"[A-Za-z0-9]+", sheet_name.upper())
    if not words:
        return "BOQ"
    return "-".join(word[:3] for word in words[:2])
