"""BOQRecon Pydantic models for type-safe data validation.

Quantities and money are Decimal; measured drawing areas are float m².
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

_MM_PER_UNIT = {"mm": Decimal("1"), "cm": Decimal("10"), "m": Decimal("1000")}


class ValidationStatus(str, Enum):
    """Line item validation outcome."""

    VALID = "valid"
    CONFLICT = "conflict"
    GAP = "gap"
    ERROR = "error"


class ConflictSeverity(str, Enum):
    """Severity of a BOQ vs drawing area mismatch."""

    HIGH = "HIGH"  # more than 5% off the drawing
    MEDIUM = "MEDIUM"  # outside tolerance, within 5%


class ConflictStatus(str, Enum):
    """Conflict lifecycle states."""

    DETECTED = "detected"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"
    REVISED = "revised"


class ResolutionAction(str, Enum):
    """User decisions offered by the resolution screen."""

    ACCEPT_BOQ = "accept_boq"
    ACCEPT_DRAWING = "accept_drawing"
    MANUAL_REVIEW = "manual_review"
    SPLIT_DIFFERENCE = "split_difference"


class GapSeverity(str, Enum):
    """Gap priority levels."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class Dimensions(BaseModel):
    """A width x height pair parsed from text such as ``2100x2400 mm``."""

    model_config = ConfigDict(frozen=True)

    width: Decimal
    height: Decimal
    unit: Literal["mm", "cm", "m"] = "mm"

    @property
    def area_m2(self) -> Decimal:
        factor = _MM_PER_UNIT[self.unit] / Decimal("1000")
        return (self.width * factor) * (self.height * factor)

    @property
    def width_m(self) -> Decimal:
        return self.width * _MM_PER_UNIT[self.unit] / Decimal("1000")

    @property
    def height_m(self) -> Decimal:
        return self.height * _MM_PER_UNIT[self.unit] / Decimal("1000")

    def __str__(self) -> str:
        return f"{self.width:f}x{self.height:f} {self.unit}"


class BOQLineItem(BaseModel):
    """One priced scope item extracted from a BOQ worksheet row."""

    line_id: str
    line_number: int  # 1-based row ordinal within the worksheet
    sheet: str = ""
    category: str = ""
    category_code: str = ""

    description: str
    specification: str | None = None

    # Quantities
    quantity: Decimal = Field(default=Decimal("0"), ge=0)
    unit: str = ""  # normalized: "m²", "nos", "m", "LS", ...
    unit_rate: Decimal = Field(default=Decimal("0"), ge=0)
    total_cost: Decimal = Decimal("0")

    # Procurement
    supplier: str | None = None
    lead_time: int | None = Field(default=None, ge=0)  # days

    # Parsed from description
    drawing_references: list[str] = Field(default_factory=list)
    locations: list[str] = Field(default_factory=list)
    dimensions: Dimensions | None = None
    material: str | None = None
    brand: str | None = None

    notes: str | None = None
    validation_status: ValidationStatus = ValidationStatus.VALID
    issues: list[str] = Field(default_factory=list)
    revision: int = 0

    @field_validator("drawing_references")
    @classmethod
    def dedupe_references(cls, v: list[str]) -> list[str]:
        seen: dict[str, None] = {}
        for ref in v:
            ref = ref.strip().upper()
            if ref:
                seen.setdefault(ref, None)
        return list(seen)

    @property
    def expected_total(self) -> Decimal:
        return self.quantity * self.unit_rate

    @property
    def has_drawing_reference(self) -> bool:
        return len(self.drawing_references) > 0

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "line_id": "ARC-FLR-3",
                "line_number": 5,
                "sheet": "Floor & Floor Finishes",
                "category": "Architectural Finishes - Flooring",
                "category_code": "ARC-FLR",
                "description": "Marble flooring, Material: Calacatta, Location: Lobby. Ref A-201",
                "quantity": "155",
                "unit": "m²",
                "unit_rate": "850.00",
                "total_cost": "131750.00",
                "drawing_references": ["A-201"],
                "validation_status": "valid",
            }
        }
    )


class DrawingSpace(BaseModel):
    """A named, measured area found in a drawing. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    drawing_reference: str
    name: str
    area: float = Field(ge=0)  # m²
    length: float | None = None  # m
    width: float | None = None  # m
    layer: str | None = None
    source: Literal["polygon", "dimension"] = "polygon"
    index: int = 0
    analysis_id: str | None = None  # drawing upload the space was measured from


# ---------------------------------------------------------------------------
# Drawing input entities (already decoded from DXF/DWG by a collaborator)
# ---------------------------------------------------------------------------

Point = tuple[float, float]


class PolygonEntity(BaseModel):
    type: Literal["polygon"] = "polygon"
    vertices: list[Point]
    closed: bool = True
    layer: str | None = None
    label: str | None = None
    drawing_reference: str | None = None


class DimensionEntity(BaseModel):
    type: Literal["dimension"] = "dimension"
    text: str
    position: Point | None = None
    layer: str | None = None
    label: str | None = None
    drawing_reference: str | None = None


class TextEntity(BaseModel):
    """Free text placed on a drawing, typically a room label."""

    type: Literal["text"] = "text"
    text: str
    position: Point
    layer: str | None = None


DrawingEntity = Annotated[
    Union[PolygonEntity, DimensionEntity, TextEntity], Field(discriminator="type")
]


class DrawingDocument(BaseModel):
    """Entity list for one drawing sheet."""

    drawing_reference: str
    title: str | None = None
    unit: Literal["mm", "cm", "m"] | None = None  # None -> configured default
    entities: list[DrawingEntity] = Field(default_factory=list)


class DrawingAnalysis(BaseModel):
    """Result of one drawing-analysis pass."""

    drawing_reference: str
    title: str | None = None
    spaces: list[DrawingSpace] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)

    @property
    def total_area(self) -> float:
        return sum(space.area for space in self.spaces)


# ---------------------------------------------------------------------------
# Reconciliation results
# ---------------------------------------------------------------------------


class Conflict(BaseModel):
    """Area mismatch between one BOQ line item and one drawing space."""

    conflict_id: str
    line_id: str
    drawing_reference: str
    analysis_id: str | None = None
    space_name: str
    space_index: int
    boq_area: Decimal
    drawing_area: Decimal
    percent_difference: Decimal
    severity: ConflictSeverity
    status: ConflictStatus = ConflictStatus.DETECTED
    resolution: ResolutionAction | None = None
    resolution_note: str | None = None

    @property
    def is_open(self) -> bool:
        return self.status in (ConflictStatus.DETECTED, ConflictStatus.ACKNOWLEDGED)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "conflict_id": "ARC-FLR-1@ground-plan:A-201#0",
                "line_id": "ARC-FLR-1",
                "drawing_reference": "A-201",
                "analysis_id": "ground-plan",
                "space_name": "Lobby",
                "space_index": 0,
                "boq_area": "155",
                "drawing_area": "150.5",
                "percent_difference": "2.99",
                "severity": "MEDIUM",
                "status": "detected",
            }
        }
    )


class Gap(BaseModel):
    """A missing or invalid field on a BOQ line item."""

    model_config = ConfigDict(frozen=True)

    line_id: str
    field: str
    severity: GapSeverity
    message: str
    suggested_action: str


class RowError(BaseModel):
    """A BOQ row that could not be turned into a line item."""

    sheet: str
    row_number: int
    line_number_cell: str | None = None
    message: str


class BOQExtractionResult(BaseModel):
    """Items, per-row errors and warnings from one extraction run."""

    items: list[BOQLineItem] = Field(default_factory=list)
    errors: list[RowError] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def valid_items(self) -> list[BOQLineItem]:
        return [i for i in self.items if i.validation_status == ValidationStatus.VALID]

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def merge(self, other: BOQExtractionResult) -> BOQExtractionResult:
        return BOQExtractionResult(
            items=self.items + other.items,
            errors=self.errors + other.errors,
            warnings=self.warnings + other.warnings,
        )
