"""Unit-of-measure normalization for BOQ rows.

Raw unit cells are mapped to a canonical code through a fixed synonym table.
Unrecognised units pass through unchanged; callers decide whether to warn.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping

import yaml

logger = logging.getLogger(__name__)

AREA_UNIT = "m²"
COUNT_UNIT = "nos"

# Canonical codes produced by UnitNormalizer (original casing kept)
STANDARD_UNITS = ("nos", "m²", "m³", "m", "kg", "item", "LS", "set", "box", "roll", "pair")

DEFAULT_UNIT_SYNONYMS: dict[str, str] = {
    # Count
    "nos": COUNT_UNIT,
    "no": COUNT_UNIT,
    "no.": COUNT_UNIT,
    "nr": COUNT_UNIT,
    "number": COUNT_UNIT,
    "pcs": COUNT_UNIT,
    "pc": COUNT_UNIT,
    "piece": COUNT_UNIT,
    "pieces": COUNT_UNIT,
    "ea": COUNT_UNIT,
    "each": COUNT_UNIT,
    # Area
    "m²": AREA_UNIT,
    "m2": AREA_UNIT,
    "sqm": AREA_UNIT,
    "sq.m": AREA_UNIT,
    "sq.m.": AREA_UNIT,
    "sq m": AREA_UNIT,
    "square meter": AREA_UNIT,
    "square metre": AREA_UNIT,
    # Volume
    "m³": "m³",
    "m3": "m³",
    "cbm": "m³",
    "cu.m": "m³",
    "cu m": "m³",
    "cubic meter": "m³",
    "cubic metre": "m³",
    # Length
    "m": "m",
    "lm": "m",
    "rm": "m",
    "meter": "m",
    "metre": "m",
    "linear meter": "m",
    "running meter": "m",
    # Other
    "kg": "kg",
    "item": "item",
    "ls": "LS",
    "l.s": "LS",
    "l.s.": "LS",
    "lump sum": "LS",
    "set": "set",
    "sets": "set",
    "box": "box",
    "roll": "roll",
    "pair": "pair",
    "pairs": "pair",
}


class UnitNormalizer:
    """Lookup-table unit normalizer, built once and reused."""

    def __init__(self, synonyms: Mapping[str, str] | None = None) -> None:
        table = dict(DEFAULT_UNIT_SYNONYMS)
        if synonyms:
            table.update({_key(k): v for k, v in synonyms.items()})
        self._table = table

    def normalize(self, unit: str | None) -> tuple[str, bool]:
        """Return ``(canonical unit, recognised)`` for a raw unit cell."""
        if unit is None:
            return "", False
        raw = str(unit).strip()
        if not raw:
            return "", False
        canonical = self._table.get(_key(raw))
        if canonical is None:
            return raw, False
        return canonical, True

    def is_standard(self, unit: str) -> bool:
        return unit in STANDARD_UNITS or unit in self._table.values()


def _key(unit: str) -> str:
    return " ".join(unit.lower().split())


def load_unit_synonyms(path: Path) -> dict[str, str]:
    """Load extra unit synonyms from a YAML mapping.

    Expected shape::

        synonyms:
          sft: ft²
          "sq.ft": ft²

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file has no ``synonyms`` mapping
    """
    if not path.exists():
        raise FileNotFoundError(f"Unit synonyms file not found: {path}")

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict) or not isinstance(data.get("synonyms"), dict):
        raise ValueError(f"Invalid unit synonyms file {path}: missing 'synonyms' mapping")

    synonyms = {str(k): str(v) for k, v in data["synonyms"].items()}
    logger.info("Loaded %d unit synonyms from %s", len(synonyms), path)
    return synonyms


_default_normalizer: UnitNormalizer | None = None


def get_unit_normalizer() -> UnitNormalizer:
    """Return the process-wide normalizer (built-in table + configured YAML)."""
    global _default_normalizer
    if _default_normalizer is None:
        from boqrecon.config import get_config

        path = get_config().lookups.unit_synonyms_path
        _default_normalizer = UnitNormalizer(load_unit_synonyms(path) if path else None)
    return _default_normalizer


def reset_unit_normalizer() -> None:
    global _default_normalizer
    _default_normalizer = None
