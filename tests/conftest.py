"""Pytest configuration and fixtures for BOQRecon tests.

Provides common fixtures for testing.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import pytest

from boqrecon.canonical.units import reset_unit_normalizer
from boqrecon.config import reset_config
from boqrecon.models import (
    BOQLineItem,
    DrawingDocument,
    DrawingSpace,
    ValidationStatus,
)

BOQ_HEADER = ["SL NO", "Item Description", "Qty", "Unit", "Unit Price", "Amount", "Remarks"]


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch):
    """Isolate every test from the developer's environment."""
    for name in (
        "RECON_TOLERANCE",
        "HIGH_SEVERITY_PERCENT",
        "AMOUNT_TOLERANCE",
        "DRAWING_UNIT",
        "UNIT_SYNONYMS_PATH",
        "LOG_FORMAT",
        "JSON_LOGS",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    reset_config()
    reset_unit_normalizer()
    yield
    reset_config()
    reset_unit_normalizer()


def make_item(**overrides: Any) -> BOQLineItem:
    """A complete, valid flooring line item unless overridden."""
    data: dict[str, Any] = {
        "line_id": "ARC-FLR-1",
        "line_number": 1,
        "sheet": "Floor & Floor Finishes",
        "category": "Architectural Finishes - Flooring",
        "category_code": "ARC-FLR",
        "description": "Marble flooring. Ref A-201",
        "quantity": Decimal("155"),
        "unit": "m²",
        "unit_rate": Decimal("850"),
        "total_cost": Decimal("131750"),
        "supplier": "Stone Co",
        "lead_time": 30,
        "drawing_references": ["A-201"],
        "validation_status": ValidationStatus.VALID,
    }
    data.update(overrides)
    return BOQLineItem(**data)


def make_space(area: float, name: str = "Lobby", reference: str = "A-201", index: int = 0):
    return DrawingSpace(drawing_reference=reference, name=name, area=area, index=index)


@pytest.fixture
def flooring_item() -> BOQLineItem:
    """Scenario 1 line item: 155 m² of marble flooring on A-201."""
    return make_item()


@pytest.fixture
def boq_rows() -> list[list[Any]]:
    """A small flooring worksheet with a header row."""
    return [
        BOQ_HEADER,
        [
            1,
            "Marble flooring, Material: Calacatta, Location: Lobby, Reception. Ref A-201",
            155,
            "sqm",
            850,
            131750,
            None,
        ],
        [2, "Porcelain tiles 600x600 mm, Brand: Porcelanosa. Ref A-202", 245, "sq.m", 120, 29400, None],
        [3, "Skirting, Location: Corridor", 80, "rm", 45, 3600, "Provisional"],
    ]


@pytest.fixture
def drawing_document() -> DrawingDocument:
    """A-201 with a labelled lobby polygon (150.5 m²) in millimetres."""
    return DrawingDocument.model_validate(
        {
            "drawing_reference": "A-201",
            "title": "Ground floor plan",
            "unit": "mm",
            "entities": [
                {
                    "type": "polygon",
                    "vertices": [[0, 0], [17500, 0], [17500, 8600], [0, 8600]],
                    "label": "Lobby",
                    "layer": "A-AREA",
                },
                {"type": "text", "text": "Office 1", "position": [20000, 2000]},
                {
                    "type": "polygon",
                    "vertices": [[18000, 0], [23000, 0], [23000, 4000], [18000, 4000]],
                    "layer": "0",
                },
            ],
        }
    )


@pytest.fixture
def item_factory():
    """Build line items from the flooring defaults."""
    return make_item


@pytest.fixture
def space_factory():
    """Build drawing spaces on A-201."""
    return make_space
