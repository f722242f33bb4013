"""Conflict resolution and gap completion.

User decisions come back as plain values and are applied here to produce new
records. Nothing is edited in place: a resolved conflict and a revised line
item are fresh copies carrying the same identifiers.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Mapping

from pydantic import ValidationError

from boqrecon.canonical.units import get_unit_normalizer
from boqrecon.config import get_config
from boqrecon.extraction.boq import validate_line_item
from boqrecon.models import (
    BOQLineItem,
    Conflict,
    ConflictStatus,
    ResolutionAction,
)
from boqrecon.reconciliation.conflicts import resolve_boq_area

logger = logging.getLogger(__name__)

COMPLETABLE_FIELDS = frozenset(
    {
        "supplier",
        "lead_time",
        "drawing_references",
        "quantity",
        "unit_rate",
        "unit",
        "notes",
        "specification",
        "material",
        "brand",
    }
)

_TARGET_STATUS = {
    ResolutionAction.MANUAL_REVIEW: ConflictStatus.ACKNOWLEDGED,
    ResolutionAction.ACCEPT_BOQ: ConflictStatus.RESOLVED,
    ResolutionAction.ACCEPT_DRAWING: ConflictStatus.REVISED,
    ResolutionAction.SPLIT_DIFFERENCE: ConflictStatus.REVISED,
}


class ConflictTransitionError(ValueError):
    """Requested resolution is not allowed from the conflict's current state."""


class CompletionError(ValueError):
    """Gap-completion answers could not be applied to a line item."""


def revalidate(item: BOQLineItem, amount_tolerance: Decimal | None = None) -> BOQLineItem:
    """Return a copy with validation status and issues recomputed."""
    if amount_tolerance is None:
        amount_tolerance = get_config().reconciliation.amount_tolerance
    status, issues = validate_line_item(item, amount_tolerance)
    return item.model_copy(update={"validation_status": status, "issues": issues})


def resolve_conflict(
    conflict: Conflict,
    action: ResolutionAction | str,
    item: BOQLineItem | None = None,
    note: str | None = None,
) -> tuple[Conflict, BOQLineItem | None]:
    """Apply a user resolution to a conflict.

    ``accept_drawing`` and ``split_difference`` revise the line item so that
    its area becomes the drawing area or the mean of both; they need ``item``.

    Returns:
        Tuple of (updated Conflict, revised BOQLineItem or None)

    Raises:
        ConflictTransitionError: If the conflict is already closed
        ValueError: If the action needs an item that was not supplied or does
            not match the conflict
    """
    action = ResolutionAction(action)
    if not conflict.is_open:
        raise ConflictTransitionError(
            f"Conflict {conflict.conflict_id} is {conflict.status.value}; "
            f"cannot apply {action.value}"
        )

    revised: BOQLineItem | None = None
    if action in (ResolutionAction.ACCEPT_DRAWING, ResolutionAction.SPLIT_DIFFERENCE):
        if item is None or item.line_id != conflict.line_id:
            raise ValueError(f"{action.value} requires the line item {conflict.line_id}")
        if action == ResolutionAction.ACCEPT_DRAWING:
            target_area = conflict.drawing_area
        else:
            target_area = (conflict.boq_area + conflict.drawing_area) / 2
        revised = _revise_area(item, target_area)

    updated = conflict.model_copy(
        update={
            "status": _TARGET_STATUS[action],
            "resolution": action,
            "resolution_note": note,
        }
    )
    logger.info(
        "Conflict %s: %s -> %s", conflict.conflict_id, conflict.status.value, updated.status.value
    )
    return updated, revised


def _revise_area(item: BOQLineItem, target_area: Decimal) -> BOQLineItem:
    current = resolve_boq_area(item)
    if current is None or item.quantity <= 0:
        raise ValueError(f"Item {item.line_id} has no comparable area to revise")

    # Area per unit of quantity (1 for m², size area for nos)
    per_unit = current / item.quantity
    quantity = _trim((target_area / per_unit).quantize(Decimal("0.0001")))
    revised = item.model_copy(
        update={
            "quantity": quantity,
            "total_cost": quantity * item.unit_rate,
            "revision": item.revision + 1,
        }
    )
    return revalidate(revised)


def _trim(value: Decimal) -> Decimal:
    if value == value.to_integral_value():
        return value.quantize(Decimal("1"))
    return value.normalize()


def apply_completion(item: BOQLineItem, updates: Mapping[str, Any]) -> BOQLineItem:
    """Apply gap-completion answers and return the revised line item.

    Raises:
        CompletionError: On unknown fields or values that fail validation
    """
    unknown = set(updates) - COMPLETABLE_FIELDS
    if unknown:
        raise CompletionError(f"Fields cannot be completed: {', '.join(sorted(unknown))}")

    values = dict(updates)
    if "unit" in values and values["unit"] is not None:
        values["unit"] = get_unit_normalizer().normalize(str(values["unit"]))[0]
    if isinstance(values.get("drawing_references"), str):
        values["drawing_references"] = [
            ref for ref in values["drawing_references"].replace(";", ",").split(",") if ref.strip()
        ]

    data = item.model_dump()
    data.update(values)
    data["revision"] = item.revision + 1

    try:
        revised = BOQLineItem.model_validate(data)
    except ValidationError as e:
        raise CompletionError(f"Invalid completion for {item.line_id}: {e}") from e

    if "quantity" in values or "unit_rate" in values:
        revised = revised.model_copy(update={"total_cost": revised.quantity * revised.unit_rate})

    logger.info("Line %s completed: %s", item.line_id, ", ".join(sorted(values)))
    return revalidate(revised)
