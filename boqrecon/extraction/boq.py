"""BOQ Extractor.

Turns raw worksheet rows into BOQLineItem records. Expected cell order per
row (missing trailing cells are treated as blank)::

    SL NO | Item Description | Qty | Unit | Unit Price | Amount | Remarks

Extraction never raises on bad data: rows with malformed numbers are reported
as RowError entries and the rest of the sheet is still processed.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Iterable, Mapping, Sequence

from boqrecon.canonical.categories import category_for_sheet
from boqrecon.canonical.normalize import clean_cell, parse_decimal
from boqrecon.canonical.units import UnitNormalizer, get_unit_normalizer
from boqrecon.config import get_config
from boqrecon.extraction.patterns import parse_description
from boqrecon.models import BOQExtractionResult, BOQLineItem, RowError, ValidationStatus

logger = logging.getLogger(__name__)

ROW_WIDTH = 7
LINE, DESCRIPTION, QUANTITY, UNIT, UNIT_PRICE, AMOUNT, REMARKS = range(ROW_WIDTH)

HEADER_KEYWORDS = frozenset(
    {
        "sl no",
        "slno",
        "sno",
        "s no",
        "sr no",
        "item no",
        "item description",
        "description of work",
    }
)


def validate_line_item(
    item: BOQLineItem, amount_tolerance: Decimal
) -> tuple[ValidationStatus, list[str]]:
    """Derive validation status and messages for a line item.

    ``error`` (amount does not equal quantity × rate) outranks ``gap``
    (missing quantity, rate or drawing reference), which outranks ``valid``.
    """
    issues: list[str] = []
    status = ValidationStatus.VALID

    if item.quantity <= 0:
        issues.append("Quantity must be greater than 0")
        status = ValidationStatus.GAP

    if item.unit_rate <= 0:
        issues.append("Unit rate must be greater than 0")
        status = ValidationStatus.GAP

    if not item.drawing_references:
        issues.append("At least one drawing reference is required")
        status = ValidationStatus.GAP

    expected = item.expected_total
    if abs(item.total_cost - expected) > amount_tolerance:
        issues.append(f"Amount mismatch: expected {expected}, got {item.total_cost}")
        status = ValidationStatus.ERROR

    return status, issues


class BOQExtractor:
    """Extract BOQ line items from worksheet rows."""

    def __init__(
        self,
        unit_normalizer: UnitNormalizer | None = None,
        amount_tolerance: Decimal | None = None,
    ):
        self.units = unit_normalizer or get_unit_normalizer()
        if amount_tolerance is None:
            amount_tolerance = get_config().reconciliation.amount_tolerance
        self.amount_tolerance = amount_tolerance

    def extract_workbook(
        self, sheets: Mapping[str, Iterable[Sequence[Any]]]
    ) -> BOQExtractionResult:
        """Extract every worksheet in order and concatenate the results."""
        result = BOQExtractionResult()
        for sheet_name, rows in sheets.items():
            result = result.merge(self.extract_sheet(rows, sheet_name))
        logger.info(
            "Extracted %d items (%d errors) from %d worksheets",
            len(result.items),
            len(result.errors),
            len(sheets),
        )
        return result

    def extract_sheet(
        self, rows: Iterable[Sequence[Any]], sheet_name: str = "BOQ"
    ) -> BOQExtractionResult:
        """Extract one worksheet.

        Args:
            rows: Raw rows, each holding up to seven cells
            sheet_name: Worksheet name, used for category mapping

        Returns:
            BOQExtractionResult with items in row order plus per-row errors
        """
        category = category_for_sheet(sheet_name)
        result = BOQExtractionResult()
        seen_ids: set[str] = set()

        for row_number, row in enumerate(rows, start=1):
            cells = _pad(row)

            if all(clean_cell(c) == "" for c in cells):
                continue
            if _is_header(cells):
                logger.debug("Skipping header row %d in %s", row_number, sheet_name)
                continue

            line_cell = clean_cell(cells[LINE]) or None
            description = clean_cell(cells[DESCRIPTION])
            if not description:
                # Section headings carry a number but no description
                logger.debug("Skipping row %d in %s: no description", row_number, sheet_name)
                continue

            try:
                quantity = _parse_amount(cells[QUANTITY], "quantity")
                unit_rate = _parse_amount(cells[UNIT_PRICE], "unit price")
                amount = _parse_amount(cells[AMOUNT], "amount")
                amount_blank = clean_cell(cells[AMOUNT]) == ""
            except ValueError as e:
                logger.warning("Row %d in %s rejected: %s", row_number, sheet_name, e)
                result.errors.append(
                    RowError(
                        sheet=sheet_name,
                        row_number=row_number,
                        line_number_cell=line_cell,
                        message=str(e),
                    )
                )
                continue

            unit, recognised = self.units.normalize(clean_cell(cells[UNIT]))
            line_id = f"{category.code}-{line_cell or row_number}"
            if line_id in seen_ids:
                line_id = f"{line_id}-r{row_number}"
                result.warnings.append(
                    f"{sheet_name} row {row_number}: duplicate line number {line_cell!r}, "
                    f"using {line_id}"
                )
            seen_ids.add(line_id)

            if not recognised:
                message = (
                    f"{sheet_name} row {row_number}: unrecognised unit {unit!r} kept as-is"
                    if unit
                    else f"{sheet_name} row {row_number}: unit is missing"
                )
                logger.warning(message)
                result.warnings.append(message)

            fields = parse_description(description)
            remarks = clean_cell(cells[REMARKS]) or None

            item = BOQLineItem(
                line_id=line_id,
                line_number=row_number,
                sheet=sheet_name,
                category=category.name,
                category_code=category.code,
                description=description,
                specification=description,
                quantity=quantity,
                unit=unit,
                unit_rate=unit_rate,
                total_cost=quantity * unit_rate if amount_blank else amount,
                drawing_references=fields.drawing_references,
                locations=fields.locations,
                dimensions=fields.dimensions,
                material=fields.material,
                brand=fields.brand,
                notes=remarks,
            )
            status, issues = validate_line_item(item, self.amount_tolerance)
            result.items.append(
                item.model_copy(update={"validation_status": status, "issues": issues})
            )

        return result


def _pad(row: Sequence[Any]) -> list[Any]:
    cells = list(row)[:ROW_WIDTH]
    return cells + [None] * (ROW_WIDTH - len(cells))


def _is_header(cells: Sequence[Any]) -> bool:
    for cell in cells[:2]:
        text = " ".join(clean_cell(cell).lower().replace(".", " ").split())
        if text in HEADER_KEYWORDS:
            return True
    return False


def _parse_amount(value: Any, label: str) -> Decimal:
    try:
        number = parse_decimal(value)
    except ValueError:
        raise ValueError(f"Non-numeric {label}: {clean_cell(value)!r}") from None
    if number < 0:
        raise ValueError(f"Negative {label}: {number}")
    return number
