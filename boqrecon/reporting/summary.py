"""Summary statistics for BOQ extractions and drawing analyses."""

from __future__ import annotations

from collections import defaultdict
from decimal import Decimal
from typing import Any, Sequence

from boqrecon.models import BOQLineItem, DrawingAnalysis, ValidationStatus


def boq_summary(items: Sequence[BOQLineItem]) -> dict[str, Any]:
    """Totals per category plus gap/error counts."""
    by_category: dict[str, dict[str, Any]] = defaultdict(
        lambda: {"count": 0, "total": Decimal("0")}
    )
    for item in items:
        bucket = by_category[item.category]
        bucket["count"] += 1
        bucket["total"] += item.total_cost

    return {
        "total_items": len(items),
        "total_cost": sum((item.total_cost for item in items), Decimal("0")),
        "by_category": dict(by_category),
        "items_with_gaps": sum(
            1 for item in items if item.validation_status == ValidationStatus.GAP
        ),
        "items_with_errors": sum(
            1 for item in items if item.validation_status == ValidationStatus.ERROR
        ),
    }


def drawing_summary(analysis: DrawingAnalysis) -> dict[str, Any]:
    spaces = analysis.spaces
    if not spaces:
        return {
            "drawing_reference": analysis.drawing_reference,
            "total_spaces": 0,
            "total_area": 0.0,
            "average_space_area": 0.0,
            "largest_space": None,
            "smallest_space": None,
            "skipped": len(analysis.skipped),
        }

    largest = max(spaces, key=lambda s: s.area)
    smallest = min(spaces, key=lambda s: s.area)
    total = analysis.total_area
    return {
        "drawing_reference": analysis.drawing_reference,
        "total_spaces": len(spaces),
        "total_area": round(total, 2),
        "average_space_area": round(total / len(spaces), 2),
        "largest_space": {"name": largest.name, "area": round(largest.area, 2)},
        "smallest_space": {"name": smallest.name, "area": round(smallest.area, 2)},
        "skipped": len(analysis.skipped),
    }
