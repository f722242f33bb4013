"""Gap Analyzer.

Produces Gap models for missing or invalid fields on BOQ line items. Rules
are evaluated independently: every applicable rule fires, none short-circuit.
Populated optional fields are never second-guessed.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Sequence

from boqrecon.canonical.units import UnitNormalizer, get_unit_normalizer
from boqrecon.models import BOQLineItem, Gap, GapSeverity

_SEVERITY_RANK = {GapSeverity.HIGH: 0, GapSeverity.MEDIUM: 1, GapSeverity.LOW: 2}


@dataclass(frozen=True)
class GapSummary:
    """Counts reported back with a gap analysis pass."""

    total_items: int
    items_with_gaps: int
    high: int
    medium: int
    low: int

    @property
    def critical(self) -> int:
        return self.high + self.medium


class GapAnalyzer:
    """Stateless gap detection over a set of line items."""

    def __init__(self, unit_normalizer: UnitNormalizer | None = None):
        self.units = unit_normalizer or get_unit_normalizer()

    def analyze(self, items: Sequence[BOQLineItem]) -> list[Gap]:
        """Return gaps in item order, then rule order."""
        gaps: list[Gap] = []
        for item in items:
            gaps.extend(self.analyze_item(item))
        return gaps

    def analyze_item(self, item: BOQLineItem) -> list[Gap]:
        gaps: list[Gap] = []

        def gap(field: str, severity: GapSeverity, message: str, action: str) -> None:
            gaps.append(
                Gap(
                    line_id=item.line_id,
                    field=field,
                    severity=severity,
                    message=message,
                    suggested_action=action,
                )
            )

        if not (item.supplier and item.supplier.strip()):
            gap(
                "supplier",
                GapSeverity.MEDIUM,
                "Supplier not specified",
                "Select a supplier for this item",
            )

        if item.lead_time is None:
            gap(
                "lead_time",
                GapSeverity.HIGH,
                "Lead time not specified",
                "Enter the supplier lead time in days",
            )

        if not item.drawing_references:
            gap(
                "drawing_references",
                GapSeverity.HIGH,
                "No drawing reference",
                "Link the item to a drawing code such as A-201",
            )

        if item.quantity <= 0:
            gap(
                "quantity",
                GapSeverity.HIGH,
                "Invalid or missing quantity",
                "Enter a quantity greater than 0",
            )

        if item.unit_rate <= 0:
            gap(
                "unit_rate",
                GapSeverity.HIGH,
                "Invalid or missing unit rate",
                "Enter a unit rate greater than 0",
            )

        if item.unit and not self.units.is_standard(item.unit):
            gap(
                "unit",
                GapSeverity.LOW,
                f"Non-standard unit '{item.unit}'",
                "Use a standard unit (nos, m², m³, m, kg, item, LS, set, box, roll, pair)",
            )

        return gaps


def prioritize(gaps: Sequence[Gap]) -> list[Gap]:
    """Order gaps as completion prompts: HIGH, then MEDIUM, then LOW.

    The sort is stable, so item and rule order survive within a severity.
    """
    return sorted(gaps, key=lambda g: _SEVERITY_RANK[g.severity])


def summarize(items: Sequence[BOQLineItem], gaps: Sequence[Gap]) -> GapSummary:
    counts = Counter(g.severity for g in gaps)
    return GapSummary(
        total_items=len(items),
        items_with_gaps=len({g.line_id for g in gaps}),
        high=counts[GapSeverity.HIGH],
        medium=counts[GapSeverity.MEDIUM],
        low=counts[GapSeverity.LOW],
    )
