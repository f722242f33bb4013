"""Planar polygon helpers for drawing measurement.

All functions work in raw drawing units; scaling to metres happens in the
extractor.
"""

from __future__ import annotations

import math
from typing import Sequence

Point = tuple[float, float]


class GeometryError(ValueError):
    """Polygon cannot be measured reliably."""


def ring(vertices: Sequence[Point]) -> list[Point]:
    """Return the vertex ring without consecutive duplicates or a closing repeat."""
    cleaned: list[Point] = []
    for x, y in vertices:
        point = (float(x), float(y))
        if cleaned and cleaned[-1] == point:
            continue
        cleaned.append(point)
    if len(cleaned) > 1 and cleaned[0] == cleaned[-1]:
        cleaned.pop()
    return cleaned


def polygon_area(vertices: Sequence[Point]) -> float:
    """Shoelace area of a simple polygon (orientation independent).

    ``0.5 * |sum(x_i * y_{i+1} - x_{i+1} * y_i)|`` over the closed ring.
    Fewer than three vertices give 0.0.
    """
    pts = ring(vertices)
    n = len(pts)
    if n < 3:
        return 0.0

    twice_area = 0.0
    for i in range(n):
        x1, y1 = pts[i]
        x2, y2 = pts[(i + 1) % n]
        twice_area += x1 * y2 - x2 * y1
    return abs(twice_area) / 2.0


def _orientation(p: Point, q: Point, r: Point) -> int:
    value = (q[1] - p[1]) * (r[0] - q[0]) - (q[0] - p[0]) * (r[1] - q[1])
    if math.isclose(value, 0.0, abs_tol=1e-12):
        return 0
    return 1 if value > 0 else 2


def _on_segment(p: Point, q: Point, r: Point) -> bool:
    return (
        min(p[0], r[0]) <= q[0] <= max(p[0], r[0])
        and min(p[1], r[1]) <= q[1] <= max(p[1], r[1])
    )


def segments_intersect(p1: Point, q1: Point, p2: Point, q2: Point) -> bool:
    o1 = _orientation(p1, q1, p2)
    o2 = _orientation(p1, q1, q2)
    o3 = _orientation(p2, q2, p1)
    o4 = _orientation(p2, q2, q1)

    if o1 != o2 and o3 != o4:
        return True
    if o1 == 0 and _on_segment(p1, p2, q1):
        return True
    if o2 == 0 and _on_segment(p1, q2, q1):
        return True
    if o3 == 0 and _on_segment(p2, p1, q2):
        return True
    if o4 == 0 and _on_segment(p2, q1, q2):
        return True
    return False


def is_self_intersecting(vertices: Sequence[Point]) -> bool:
    """True when any two non-adjacent edges of the ring touch or cross."""
    pts = ring(vertices)
    n = len(pts)
    if n < 4:
        return False

    edges = [(pts[i], pts[(i + 1) % n]) for i in range(n)]
    for i in range(n):
        for j in range(i + 1, n):
            # Adjacent edges share a vertex by construction
            if j == i + 1 or (i == 0 and j == n - 1):
                continue
            if segments_intersect(*edges[i], *edges[j]):
                return True
    return False


def centroid(vertices: Sequence[Point]) -> Point:
    """Vertex average; good enough for picking the nearest room label."""
    pts = ring(vertices)
    if not pts:
        raise GeometryError("cannot take the centroid of an empty polygon")
    return (
        sum(p[0] for p in pts) / len(pts),
        sum(p[1] for p in pts) / len(pts),
    )


def point_in_polygon(point: Point, vertices: Sequence[Point]) -> bool:
    """Ray-casting containment test (boundary points count as inside)."""
    pts = ring(vertices)
    n = len(pts)
    if n < 3:
        return False

    x, y = point
    inside = False
    for i in range(n):
        x1, y1 = pts[i]
        x2, y2 = pts[(i + 1) % n]
        if _orientation((x1, y1), (x, y), (x2, y2)) == 0 and _on_segment((x1, y1), (x, y), (x2, y2)):
            return True
        if (y1 > y) != (y2 > y):
            x_cross = x1 + (y - y1) * (x2 - x1) / (y2 - y1)
            if x < x_cross:
                inside = not inside
    return inside


def bounding_box(vertices: Sequence[Point]) -> tuple[float, float]:
    """Return ``(length, width)`` of the axis-aligned box, longest side first."""
    pts = ring(vertices)
    if not pts:
        raise GeometryError("cannot measure an empty polygon")
    dx = max(p[0] for p in pts) - min(p[0] for p in pts)
    dy = max(p[1] for p in pts) - min(p[1] for p in pts)
    return max(dx, dy), min(dx, dy)


def distance(a: Point, b: Point) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])
