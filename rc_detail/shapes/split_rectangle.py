"""
Two-colour split of an axis-aligned rectangle by a chord.

The rectangle lies in the XZ plane at center.y, X spanning `width` and Z
spanning `depth`; chord points are given in rectangle-local (x, z)
coordinates, origin at the rectangle centre. The infinite line through
the chord points is clipped to the rectangle and its two boundary points
are shared by both polygons, so the pieces always tile the rectangle.

Both pieces of a rectangle cut by a straight line are convex, which is
what makes the angular sort + fan triangulation below correct. Do not
reuse it for non-convex outlines.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from rc_detail.config import SPLIT_SIDE_EPS
from rc_detail.errors import InvalidParameterError, require_positive
from rc_detail.geometry.buffer import GeometryBuffer, merge_buffers, validate_color
from rc_detail.geometry.vectors import VecLike, as_vec2, as_vec3
from rc_detail.logging_config import timed

logger = logging.getLogger(__name__)

DEFAULT_COLOR_A = (0.5, 0.5, 0.5, 1.0)
DEFAULT_COLOR_B = (1.0, 0.5, 0.0, 1.0)


def polygon_area(outline: NDArray[np.float64]) -> float:
    """Unsigned shoelace area of a 2D outline (Kx2)."""
    x = outline[:, 0]
    y = outline[:, 1]
    return float(abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))) / 2.0)


@dataclass(frozen=True, eq=False)
class SplitPolygonPart:
    """One convex piece.

    Attributes:
        outline: Kx2 local (x, z) vertices, sorted counter-clockwise in (x, z)
        buffer: Fan-triangulated mesh facing +Y, per-vertex RGBA
        color: RGBA color of the piece
    """
    outline: NDArray[np.float64]
    buffer: GeometryBuffer
    color: Tuple[float, float, float, float]

    @property
    def area(self) -> float:
        return polygon_area(self.outline)


@dataclass(frozen=True, eq=False)
class SplitRectangle:
    """Result of split_rectangle.

    Attributes:
        width, depth: Rectangle extents along X and Z
        center: World centre of the rectangle
        chord_start, chord_end: Where the dividing line crosses the boundary (local x, z)
        polygon_a: Piece on the negative side of p1 -> p2
        polygon_b: Piece on the positive side
    """
    width: float
    depth: float
    center: NDArray[np.float64]
    chord_start: NDArray[np.float64]
    chord_end: NDArray[np.float64]
    polygon_a: SplitPolygonPart
    polygon_b: SplitPolygonPart

    def merged(self) -> GeometryBuffer:
        """Both pieces in one buffer with per-vertex colors."""
        return merge_buffers([self.polygon_a.buffer, self.polygon_b.buffer])


def clip_line_to_rectangle(
    p1: NDArray[np.float64],
    p2: NDArray[np.float64],
    half_width: float,
    half_depth: float,
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Clip the infinite line through p1, p2 to the rectangle (Liang-Barsky).

    Raises:
        InvalidParameterError: if the line misses the rectangle
    """
    d = p2 - p1
    t_min, t_max = -np.inf, np.inf
    for p, q in (
        (-d[0], p1[0] + half_width),
        (d[0], half_width - p1[0]),
        (-d[1], p1[1] + half_depth),
        (d[1], half_depth - p1[1]),
    ):
        if p == 0.0:
            if q < 0.0:
                raise InvalidParameterError("Chord line does not intersect the rectangle")
            continue
        r = q / p
        if p < 0.0:
            t_min = max(t_min, r)
        else:
            t_max = min(t_max, r)

    if t_min > t_max:
        raise InvalidParameterError("Chord line does not intersect the rectangle")
    return p1 + t_min * d, p1 + t_max * d


def _dedupe(points: List[NDArray[np.float64]], tol: float) -> NDArray[np.float64]:
    unique: List[NDArray[np.float64]] = []
    for p in points:
        if all(np.linalg.norm(p - q) > tol for q in unique):
            unique.append(p)
    return np.array(unique)


def _sort_by_angle(points: NDArray[np.float64]) -> NDArray[np.float64]:
    centroid = points.mean(axis=0)
    angles = np.arctan2(points[:, 1] - centroid[1], points[:, 0] - centroid[0])
    return points[np.argsort(angles, kind='stable')]


def _fan_buffer(
    outline: NDArray[np.float64],
    center: NDArray[np.float64],
    color: NDArray[np.float32],
) -> GeometryBuffer:
    positions = np.column_stack([
        outline[:, 0] + center[0],
        np.full(len(outline), center[1]),
        outline[:, 1] + center[2],
    ])
    # Outline is CCW in (x, z), i.e. clockwise seen from +Y: reverse the fan.
    i = np.arange(1, len(outline) - 1)
    faces = np.column_stack([np.zeros_like(i), i + 1, i])
    return GeometryBuffer(
        positions=positions,
        indices=faces,
        colors=np.tile(color, len(outline)),
    )


@timed()
def split_rectangle(
    width: float,
    depth: float,
    chord_p1: VecLike,
    chord_p2: VecLike,
    color_a: Sequence[float] = DEFAULT_COLOR_A,
    color_b: Sequence[float] = DEFAULT_COLOR_B,
    center: VecLike = (0.0, 0.0, 0.0),
) -> SplitRectangle:
    """Split a width x depth rectangle into two coloured convex polygons.

    Corners are classified by their signed distance to the line p1 -> p2:
    below -eps go to polygon A, above +eps to polygon B, within eps to
    both (eps = SPLIT_SIDE_EPS·max(width, depth)).

    Args:
        width: Extent along X
        depth: Extent along Z
        chord_p1, chord_p2: Local (x, z) points within the rectangle
        color_a, color_b: RGB(A) colors in [0, 1]
        center: World centre; the rectangle lies at y = center.y

    Raises:
        InvalidParameterError: bad sizes/colors, points outside the
            rectangle, p1 == p2, or a line that leaves one side empty
    """
    width = require_positive("width", width)
    depth = require_positive("depth", depth)
    p1 = as_vec2(chord_p1, "chord_p1")
    p2 = as_vec2(chord_p2, "chord_p2")
    rgba_a = validate_color(color_a, "color_a")
    rgba_b = validate_color(color_b, "color_b")
    center = as_vec3(center, "center")

    eps = SPLIT_SIDE_EPS * max(width, depth)
    half_width = width / 2.0
    half_depth = depth / 2.0
    for name, p in (("chord_p1", p1), ("chord_p2", p2)):
        if abs(p[0]) > half_width + eps or abs(p[1]) > half_depth + eps:
            raise InvalidParameterError(
                f"{name}={p.tolist()} lies outside the rectangle "
                f"[{-half_width}, {half_width}] x [{-half_depth}, {half_depth}]"
            )

    direction = p2 - p1
    chord_length = float(np.linalg.norm(direction))
    if chord_length <= eps:
        raise InvalidParameterError(f"Chord points coincide: {p1.tolist()}")

    start, end = clip_line_to_rectangle(p1, p2, half_width, half_depth)
    if np.linalg.norm(end - start) <= eps:
        raise InvalidParameterError("Chord line only touches the rectangle at a corner")

    corners = np.array([
        [-half_width, -half_depth],
        [half_width, -half_depth],
        [half_width, half_depth],
        [-half_width, half_depth],
    ])
    offsets = corners - p1
    sides = (direction[0] * offsets[:, 1] - direction[1] * offsets[:, 0]) / chord_length

    parts = []
    for label, in_part, rgba in (
        ("A", sides <= eps, rgba_a),
        ("B", sides >= -eps, rgba_b),
    ):
        outline = _dedupe([start, end] + list(corners[in_part]), eps)
        if len(outline) >= 3:
            outline = _sort_by_angle(outline)
        if len(outline) < 3 or polygon_area(outline) <= eps * max(width, depth):
            raise InvalidParameterError(
                f"Chord {p1.tolist()} -> {p2.tolist()} leaves polygon {label} empty"
            )
        parts.append(SplitPolygonPart(
            outline=outline,
            buffer=_fan_buffer(outline, center, rgba),
            color=tuple(float(c) for c in rgba),
        ))

    result = SplitRectangle(
        width=width,
        depth=depth,
        center=center,
        chord_start=start,
        chord_end=end,
        polygon_a=parts[0],
        polygon_b=parts[1],
    )

    logger.debug("Rectangle split", extra={
        'vertices_a': len(parts[0].outline),
        'vertices_b': len(parts[1].outline),
        'area_a': parts[0].area,
        'area_b': parts[1].area,
    })
    return result
