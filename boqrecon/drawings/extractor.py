"""Drawing Measurement Extractor.

Turns decoded drawing entities (closed polygons, dimension annotations, room
labels) into DrawingSpace records with areas in m².

Area sources:
1. Closed polygons, measured with the shoelace formula and scaled from the
   drawing's linear unit (mm² → m² divides by 1,000,000).
2. Dimension annotations such as ``"2100x2400 mm"`` that no polygon encloses.

A polygon that cannot be measured is skipped and logged; it never affects
the other spaces.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from boqrecon.canonical.normalize import parse_dimensions
from boqrecon.config import DrawingConfig, get_config
from boqrecon.drawings.geometry import (
    GeometryError,
    Point,
    bounding_box,
    centroid,
    distance,
    is_self_intersecting,
    point_in_polygon,
    polygon_area,
    ring,
)
from boqrecon.extraction.patterns import is_valid_drawing_code
from boqrecon.models import (
    DimensionEntity,
    DrawingAnalysis,
    DrawingDocument,
    DrawingSpace,
    PolygonEntity,
    TextEntity,
)

logger = logging.getLogger(__name__)

METRES_PER_UNIT = {"mm": 0.001, "cm": 0.01, "m": 1.0}


@dataclass(slots=True)
class _Measured:
    """A polygon that passed the geometry checks, before naming."""

    entity: PolygonEntity
    vertices: list[Point]
    area: float
    length: float
    width: float


class DrawingMeasurementExtractor:
    """Extract measured spaces from one drawing's entity list."""

    def __init__(self, config: DrawingConfig | None = None):
        self.config = config or get_config().drawing
        self._generic_layers = {layer.lower() for layer in self.config.generic_layers}

    def extract(
        self, document: DrawingDocument, analysis_id: str | None = None
    ) -> DrawingAnalysis:
        """Analyse a drawing document.

        Args:
            document: Decoded entity list for one sheet
            analysis_id: Upload the spaces belong to; keeps conflicts from two
                uploads of the same sheet code apart

        Returns:
            DrawingAnalysis with spaces ordered polygons first (entity order),
            then standalone dimension annotations, plus skip messages
        """
        unit = document.unit or self.config.default_unit
        scale = METRES_PER_UNIT[unit]
        sheet_code = document.drawing_reference.strip().upper()
        if not is_valid_drawing_code(sheet_code):
            logger.warning("Drawing reference %r does not follow a known code format", sheet_code)

        polygons: list[_Measured] = []
        dimensions: list[DimensionEntity] = []
        labels: list[TextEntity] = []
        skipped: list[str] = []

        for position, entity in enumerate(document.entities):
            if isinstance(entity, PolygonEntity):
                try:
                    polygons.append(self._measure(entity, scale))
                except GeometryError as e:
                    message = f"{sheet_code} entity {position}: {e}"
                    logger.warning("Skipping polygon: %s", message)
                    skipped.append(message)
            elif isinstance(entity, DimensionEntity):
                dimensions.append(entity)
            elif isinstance(entity, TextEntity):
                labels.append(entity)

        spaces: list[DrawingSpace] = []
        unnamed = 0

        # Annotations inside a polygon describe that polygon, not a new space
        polygon_dims: dict[int, tuple[float, float]] = {}
        standalone: list[DimensionEntity] = []
        for dim in dimensions:
            owner = None
            if dim.position is not None:
                owner = next(
                    (
                        i
                        for i, measured in enumerate(polygons)
                        if point_in_polygon(dim.position, measured.vertices)
                    ),
                    None,
                )
            if owner is None:
                standalone.append(dim)
                continue
            parsed = parse_dimensions(dim.text)
            if parsed is not None and owner not in polygon_dims:
                polygon_dims[owner] = (float(parsed.width_m), float(parsed.height_m))

        for i, measured in enumerate(polygons):
            name = self._polygon_name(measured, labels)
            if name is None:
                unnamed += 1
                name = f"Unnamed space {unnamed}"
            length, width = polygon_dims.get(i, (measured.length, measured.width))
            spaces.append(
                DrawingSpace(
                    drawing_reference=_reference(measured.entity.drawing_reference, sheet_code),
                    name=name,
                    area=measured.area,
                    length=length,
                    width=width,
                    layer=measured.entity.layer,
                    source="polygon",
                    index=len(spaces),
                    analysis_id=analysis_id,
                )
            )

        for dim in standalone:
            parsed = parse_dimensions(dim.text)
            if parsed is None:
                message = f"{sheet_code}: unparseable dimension text {dim.text!r}"
                logger.warning(message)
                skipped.append(message)
                continue
            name = (dim.label or "").strip() or self._layer_name(dim.layer)
            if name is None:
                unnamed += 1
                name = f"Unnamed space {unnamed}"
            spaces.append(
                DrawingSpace(
                    drawing_reference=_reference(dim.drawing_reference, sheet_code),
                    name=name,
                    area=float(parsed.area_m2),
                    length=float(parsed.width_m),
                    width=float(parsed.height_m),
                    layer=dim.layer,
                    source="dimension",
                    index=len(spaces),
                    analysis_id=analysis_id,
                )
            )

        logger.info(
            "Drawing %s: %d spaces, %d skipped", sheet_code, len(spaces), len(skipped)
        )
        return DrawingAnalysis(
            drawing_reference=sheet_code,
            title=document.title,
            spaces=spaces,
            skipped=skipped,
        )

    def _measure(self, entity: PolygonEntity, scale: float) -> _Measured:
        if not entity.closed:
            raise GeometryError("polyline is not closed")
        vertices = ring(entity.vertices)
        if len(vertices) < 3:
            raise GeometryError(f"polygon has {len(vertices)} distinct vertices, need 3")
        if is_self_intersecting(vertices):
            raise GeometryError("polygon is self-intersecting")
        raw_area = polygon_area(vertices)
        if raw_area <= 0:
            raise GeometryError("polygon has zero area")
        length, width = bounding_box(vertices)
        return _Measured(entity, vertices, raw_area * scale * scale, length * scale, width * scale)

    def _polygon_name(self, measured: _Measured, labels: list[TextEntity]) -> str | None:
        label = (measured.entity.label or "").strip()
        if label:
            return label

        inside = [
            label
            for label in labels
            if label.text.strip() and point_in_polygon(label.position, measured.vertices)
        ]
        if inside:
            center = centroid(measured.vertices)
            nearest = min(inside, key=lambda label: distance(label.position, center))
            return nearest.text.strip()

        return self._layer_name(measured.entity.layer)

    def _layer_name(self, layer: str | None) -> str | None:
        if layer and layer.strip() and layer.strip().lower() not in self._generic_layers:
            return layer.strip()
        return None


def _reference(override: str | None, sheet_code: str) -> str:
    if override and override.strip():
        return override.strip().upper()
    return sheet_code

