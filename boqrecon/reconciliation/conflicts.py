"""Conflict Detector.

Cross-references BOQ line items against measured drawing spaces:

1. Resolve the item's declared area: ``m²`` → quantity; ``nos`` with a
   parsed size → quantity × size area. Any other unit has no comparable
   area and the item is skipped.
2. Match spaces by exact drawing reference.
3. Flag every (item, space) pair whose BOQ area lies outside
   ``[D × (1 − t), D × (1 + t)]``. The band is inclusive.

Comparisons run in Decimal so the band edges are exact. Output order follows
item order, then matched-space order; there is no deduplication.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from boqrecon.canonical.units import AREA_UNIT, COUNT_UNIT
from boqrecon.config import get_config
from boqrecon.models import BOQLineItem, Conflict, ConflictSeverity, DrawingSpace

logger = logging.getLogger(__name__)

_HUNDRED = Decimal("100")
_CENT = Decimal("0.01")


@dataclass(frozen=True)
class AreaComparison:
    """Tolerance check of one BOQ area against one drawing area."""

    boq_area: Decimal
    drawing_area: Decimal
    percent_difference: Decimal  # unrounded
    lower: Decimal
    upper: Decimal

    @property
    def is_within_tolerance(self) -> bool:
        return self.lower <= self.boq_area <= self.upper


def to_decimal(value: float | int | Decimal, places: int = 6) -> Decimal:
    """Convert a measured float to Decimal via its rounded decimal text."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    return Decimal(str(round(value, places)))


def compare_areas(
    boq_area: Decimal, drawing_area: Decimal, tolerance: Decimal
) -> AreaComparison:
    """Compare two areas against a fractional tolerance band.

    Raises:
        ValueError: If drawing_area is not positive
    """
    if drawing_area <= 0:
        raise ValueError(f"drawing area must be positive, got {drawing_area}")
    return AreaComparison(
        boq_area=boq_area,
        drawing_area=drawing_area,
        percent_difference=abs(boq_area - drawing_area) / drawing_area * _HUNDRED,
        lower=drawing_area * (1 - tolerance),
        upper=drawing_area * (1 + tolerance),
    )


def resolve_boq_area(item: BOQLineItem) -> Decimal | None:
    """Area (m²) a line item claims, or None when its unit has no area.

    Only ``m²`` items and ``nos`` items with a parsed size carry an area.
    """
    if item.unit == AREA_UNIT:
        return item.quantity
    if item.unit == COUNT_UNIT and item.dimensions is not None:
        return item.quantity * item.dimensions.area_m2
    return None


def conflict_id(line_id: str, space: DrawingSpace) -> str:
    """Stable key of one (item, space) pair across reconcile passes."""
    if space.analysis_id:
        return f"{line_id}@{space.analysis_id}:{space.drawing_reference}#{space.index}"
    return f"{line_id}@{space.drawing_reference}#{space.index}"


class ConflictDetector:
    """Detect BOQ vs drawing area mismatches."""

    def __init__(
        self,
        tolerance: Decimal | float | None = None,
        high_severity_percent: Decimal | float | None = None,
    ):
        cfg = get_config().reconciliation
        self.tolerance = Decimal(str(tolerance)) if tolerance is not None else cfg.tolerance
        self.high_severity_percent = (
            Decimal(str(high_severity_percent))
            if high_severity_percent is not None
            else cfg.high_severity_percent
        )
        if not Decimal("0") <= self.tolerance < Decimal("1"):
            raise ValueError(f"tolerance must be in [0, 1), got {self.tolerance}")

    def detect(
        self, items: Sequence[BOQLineItem], spaces: Sequence[DrawingSpace]
    ) -> list[Conflict]:
        """Return conflicts for every out-of-band (item, space) pair."""
        by_reference: dict[str, list[DrawingSpace]] = defaultdict(list)
        for space in spaces:
            by_reference[space.drawing_reference].append(space)

        conflicts: list[Conflict] = []
        for item in items:
            boq_area = resolve_boq_area(item)
            if boq_area is None:
                logger.debug("Item %s: unit %r has no area, skipping", item.line_id, item.unit)
                continue
            for reference in item.drawing_references:
                for space in by_reference.get(reference, ()):
                    conflict = self.compare(item, boq_area, space)
                    if conflict is not None:
                        conflicts.append(conflict)

        logger.info(
            "Conflict detection: %d items, %d spaces, %d conflicts",
            len(items),
            len(spaces),
            len(conflicts),
        )
        return conflicts

    def compare(
        self, item: BOQLineItem, boq_area: Decimal, space: DrawingSpace
    ) -> Conflict | None:
        """Compare one item/space pair; None when within tolerance."""
        drawing_area = to_decimal(space.area)
        if drawing_area <= 0:
            logger.debug("Space %s has no area, skipping comparison", space.name)
            return None

        comparison = compare_areas(boq_area, drawing_area, self.tolerance)
        if comparison.is_within_tolerance:
            return None

        severity = (
            ConflictSeverity.HIGH
            if comparison.percent_difference > self.high_severity_percent
            else ConflictSeverity.MEDIUM
        )
        return Conflict(
            conflict_id=conflict_id(item.line_id, space),
            line_id=item.line_id,
            drawing_reference=space.drawing_reference,
            analysis_id=space.analysis_id,
            space_name=space.name,
            space_index=space.index,
            boq_area=boq_area,
            drawing_area=drawing_area,
            percent_difference=comparison.percent_difference.quantize(
                _CENT, rounding=ROUND_HALF_UP
            ),
            severity=severity,
        )
