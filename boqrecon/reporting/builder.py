"""Tabular reports for reconciliation results.

Builds pandas DataFrames for line items, conflicts and gaps, and writes them
out as CSV files or a single Excel workbook.
"""

from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import Sequence

import pandas as pd

from boqrecon.models import BOQLineItem, Conflict, DrawingSpace, Gap, RowError

logger = logging.getLogger(__name__)

ITEM_COLUMNS = [
    "line_id",
    "sheet",
    "category",
    "description",
    "quantity",
    "unit",
    "unit_rate",
    "total_cost",
    "supplier",
    "lead_time",
    "drawing_references",
    "locations",
    "dimensions",
    "material",
    "brand",
    "validation_status",
    "issues",
    "revision",
]
CONFLICT_COLUMNS = [
    "conflict_id",
    "line_id",
    "drawing_reference",
    "analysis_id",
    "space_name",
    "boq_area",
    "drawing_area",
    "percent_difference",
    "severity",
    "status",
    "resolution",
    "resolution_note",
]
GAP_COLUMNS = ["line_id", "field", "severity", "message", "suggested_action"]
SPACE_COLUMNS = ["drawing_reference", "index", "name", "area", "length", "width", "layer", "source"]
ERROR_COLUMNS = ["sheet", "row_number", "line_number_cell", "message"]


def items_frame(items: Sequence[BOQLineItem]) -> pd.DataFrame:
    data = []
    for item in items:
        data.append(
            {
                "line_id": item.line_id,
                "sheet": item.sheet,
                "category": item.category,
                "description": item.description,
                "quantity": float(item.quantity),
                "unit": item.unit,
                "unit_rate": float(item.unit_rate),
                "total_cost": float(item.total_cost),
                "supplier": item.supplier,
                "lead_time": item.lead_time,
                "drawing_references": ", ".join(item.drawing_references),
                "locations": ", ".join(item.locations),
                "dimensions": str(item.dimensions) if item.dimensions else None,
                "material": item.material,
                "brand": item.brand,
                "validation_status": item.validation_status.value,
                "issues": "; ".join(item.issues),
                "revision": item.revision,
            }
        )
    return pd.DataFrame(data, columns=ITEM_COLUMNS)


def conflicts_frame(conflicts: Sequence[Conflict]) -> pd.DataFrame:
    data = []
    for c in conflicts:
        data.append(
            {
                "conflict_id": c.conflict_id,
                "line_id": c.line_id,
                "drawing_reference": c.drawing_reference,
                "analysis_id": c.analysis_id,
                "space_name": c.space_name,
                "boq_area": float(c.boq_area),
                "drawing_area": float(c.drawing_area),
                "percent_difference": float(c.percent_difference),
                "severity": c.severity.value,
                "status": c.status.value,
                "resolution": c.resolution.value if c.resolution else None,
                "resolution_note": c.resolution_note,
            }
        )
    return pd.DataFrame(data, columns=CONFLICT_COLUMNS)


def gaps_frame(gaps: Sequence[Gap]) -> pd.DataFrame:
    data = [
        {
            "line_id": g.line_id,
            "field": g.field,
            "severity": g.severity.value,
            "message": g.message,
            "suggested_action": g.suggested_action,
        }
        for g in gaps
    ]
    return pd.DataFrame(data, columns=GAP_COLUMNS)


def spaces_frame(spaces: Sequence[DrawingSpace]) -> pd.DataFrame:
    return pd.DataFrame([s.model_dump() for s in spaces], columns=SPACE_COLUMNS)


def errors_frame(errors: Sequence[RowError]) -> pd.DataFrame:
    return pd.DataFrame([e.model_dump() for e in errors], columns=ERROR_COLUMNS)


def export_csv(
    out_dir: Path,
    items: Sequence[BOQLineItem],
    conflicts: Sequence[Conflict],
    gaps: Sequence[Gap],
) -> list[Path]:
    """Write items.csv, conflicts.csv and gaps.csv into ``out_dir``."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for name, df in (
        ("items", items_frame(items)),
        ("conflicts", conflicts_frame(conflicts)),
        ("gaps", gaps_frame(gaps)),
    ):
        path = out_dir / f"{name}.csv"
        df.to_csv(path, index=False)
        written.append(path)

    logger.info("Wrote %d CSV reports to %s", len(written), out_dir)
    return written


def export_excel(
    items: Sequence[BOQLineItem],
    conflicts: Sequence[Conflict],
    gaps: Sequence[Gap],
    errors: Sequence[RowError] = (),
) -> BytesIO:
    """Generate a reconciliation workbook with one sheet per result set."""
    output = BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        items_frame(items).to_excel(writer, sheet_name="Line Items", index=False)
        conflicts_frame(conflicts).to_excel(writer, sheet_name="Conflicts", index=False)
        gaps_frame(gaps).to_excel(writer, sheet_name="Gaps", index=False)
        errors_frame(errors).to_excel(writer, sheet_name="Row Errors", index=False)

    output.seek(0)
    return output
