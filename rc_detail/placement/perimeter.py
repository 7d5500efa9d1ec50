"""
Fastener placement along circular and rectangular perimeters.

All functions are pure: they return a fresh, ordered list of
PerimeterPoint in the XZ plane at y = height_y. The index is the
placement order and is used by callers for naming only.

Walk orders (kept distinct on purpose, callers name posts by index):

- rectangular_perimeter: bottom -> right -> top -> left, centred at the
  origin. The bottom edge carries both corners; every later edge skips
  the corner it shares with the previous one (the left edge skips both).
- cuboid_perimeter: left -> top -> right -> bottom around (center_x,
  center_z). The left edge carries both corners.

On an edge with n > 1 points the spacing is (edge_length - 2·offset)/(n-1).
A count of 1 on an axis places that axis at the midpoint of the shape,
so the perimeter degenerates to one line of points along the other axis
(one centre point when both counts are 1).
"""

import logging
from dataclasses import dataclass
from typing import List

import numpy as np
from numpy.typing import NDArray

from rc_detail.errors import (
    require_count,
    require_finite,
    require_less_than,
    require_non_negative,
    require_positive,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class PerimeterPoint:
    """One placement position.

    Attributes:
        position: 3D point (x, height_y, z)
        index: 0-based placement order
    """
    position: NDArray[np.float64]
    index: int

    def __repr__(self) -> str:
        x, y, z = self.position
        return f"PerimeterPoint(index={self.index}, position=({x:.4f}, {y:.4f}, {z:.4f}))"


def _points(xz: List[tuple], height_y: float) -> List[PerimeterPoint]:
    return [
        PerimeterPoint(position=np.array([x, height_y, z], dtype=np.float64), index=i)
        for i, (x, z) in enumerate(xz)
    ]


def _edge_coordinates(center: float, half_span: float, offset: float, count: int) -> NDArray[np.float64]:
    """Coordinates of `count` points along one edge direction, first to last."""
    if count == 1:
        return np.array([center])
    spacing = (2.0 * half_span - 2.0 * offset) / (count - 1)
    return center - half_span + offset + np.arange(count) * spacing


def _check_offset(offset: float, *half_spans: float) -> float:
    offset = require_non_negative("offset", offset)
    limit = min(half_spans)
    return require_less_than("offset", offset, limit, "half of the smallest dimension")


# ---------------------------------------------------------------------------
# Circle
# ---------------------------------------------------------------------------

def circular_perimeter(
    radius: float,
    inward_offset: float,
    count: int,
    height_y: float = 0.0,
) -> List[PerimeterPoint]:
    """`count` points on a circle of radius (radius - inward_offset).

    Point i sits at angle 2π·i/count, measured from +X towards +Z.

    Raises:
        InvalidParameterError: radius <= 0, offset outside [0, radius), count < 1
    """
    radius = require_positive("radius", radius)
    inward_offset = require_non_negative("inward_offset", inward_offset)
    require_less_than("inward_offset", inward_offset, radius, "radius")
    count = require_count("count", count)
    height_y = require_finite("height_y", height_y)

    r = radius - inward_offset
    theta = 2.0 * np.pi * np.arange(count) / count
    points = _points(list(zip(r * np.cos(theta), r * np.sin(theta))), height_y)
    logger.debug("Circular perimeter placed", extra={'count': count, 'radius': r})
    return points


# ---------------------------------------------------------------------------
# Rectangle (column cross-section, centred at the origin)
# ---------------------------------------------------------------------------

def rectangular_perimeter_count(count_x: int, count_z: int) -> int:
    """Number of points rectangular_perimeter returns for the given counts."""
    count_x = require_count("count_x", count_x)
    count_z = require_count("count_z", count_z)
    if count_x == 1:
        return count_z
    if count_z == 1:
        return count_x
    return 2 * count_x + 2 * count_z - 4


def rectangular_perimeter(
    width: float,
    depth: float,
    count_x: int,
    count_z: int,
    edge_offset: float,
    height_y: float = 0.0,
) -> List[PerimeterPoint]:
    """Points around a width x depth rectangle centred at the origin.

    Args:
        width: Extent along X
        depth: Extent along Z
        count_x: Points on the bottom and top edges (corners included)
        count_z: Points on the right and left edges (corners included)
        edge_offset: Inset of the point rows from the rectangle edges
        height_y: Y of every point

    Raises:
        InvalidParameterError: for non-positive sizes, counts < 1 or an
            offset not below half of width and depth
    """
    width = require_positive("width", width)
    depth = require_positive("depth", depth)
    count_x = require_count("count_x", count_x)
    count_z = require_count("count_z", count_z)
    edge_offset = _check_offset(edge_offset, width / 2.0, depth / 2.0)
    height_y = require_finite("height_y", height_y)

    xs = _edge_coordinates(0.0, width / 2.0, edge_offset, count_x)
    zs = _edge_coordinates(0.0, depth / 2.0, edge_offset, count_z)

    if count_x == 1:
        xz = [(xs[0], z) for z in zs]
    elif count_z == 1:
        xz = [(x, zs[0]) for x in xs]
    else:
        left_x, right_x = xs[0], xs[-1]
        bottom_z, top_z = zs[0], zs[-1]
        xz = [(x, bottom_z) for x in xs]
        xz += [(right_x, z) for z in zs[1:]]
        xz += [(x, top_z) for x in xs[-2::-1]]
        xz += [(left_x, z) for z in zs[-2:0:-1]]

    points = _points(xz, height_y)
    logger.debug("Rectangular perimeter placed", extra={
        'count_x': count_x, 'count_z': count_z, 'count': len(points),
    })
    return points


# ---------------------------------------------------------------------------
# Cuboid (slab / complex column segment, arbitrary centre)
# ---------------------------------------------------------------------------

def cuboid_perimeter_count(count_left_edge: int, count_top_edge: int) -> int:
    """Number of points cuboid_perimeter returns for the given counts."""
    count_left_edge = require_count("count_left_edge", count_left_edge)
    count_top_edge = require_count("count_top_edge", count_top_edge)
    if count_top_edge == 1:
        return count_left_edge
    if count_left_edge == 1:
        return count_top_edge
    return 2 * count_left_edge + 2 * count_top_edge - 4


def cuboid_perimeter(
    center_x: float,
    center_z: float,
    size_x: float,
    size_z: float,
    count_left_edge: int,
    count_top_edge: int,
    offset: float,
    height_y: float = 0.0,
) -> List[PerimeterPoint]:
    """Points around a size_x x size_z rectangle centred at (center_x, center_z).

    Args:
        center_x, center_z: Rectangle centre
        size_x, size_z: Extents along X and Z
        count_left_edge: Points on the left/right edges (spaced along Z)
        count_top_edge: Points on the top/bottom edges (spaced along X)
        offset: Inset of the point rows from the rectangle edges
        height_y: Y of every point

    Raises:
        InvalidParameterError: as rectangular_perimeter
    """
    center_x = require_finite("center_x", center_x)
    center_z = require_finite("center_z", center_z)
    size_x = require_positive("size_x", size_x)
    size_z = require_positive("size_z", size_z)
    count_left_edge = require_count("count_left_edge", count_left_edge)
    count_top_edge = require_count("count_top_edge", count_top_edge)
    offset = _check_offset(offset, size_x / 2.0, size_z / 2.0)
    height_y = require_finite("height_y", height_y)

    xs = _edge_coordinates(center_x, size_x / 2.0, offset, count_top_edge)
    zs = _edge_coordinates(center_z, size_z / 2.0, offset, count_left_edge)

    if count_top_edge == 1:
        xz = [(xs[0], z) for z in zs]
    elif count_left_edge == 1:
        xz = [(x, zs[0]) for x in xs]
    else:
        left_x, right_x = xs[0], xs[-1]
        bottom_z, top_z = zs[0], zs[-1]
        xz = [(left_x, z) for z in zs]
        xz += [(x, top_z) for x in xs[1:]]
        xz += [(right_x, z) for z in zs[-2::-1]]
        xz += [(x, bottom_z) for x in xs[-2:0:-1]]

    points = _points(xz, height_y)
    logger.debug("Cuboid perimeter placed", extra={
        'count_left_edge': count_left_edge,
        'count_top_edge': count_top_edge,
        'count': len(points),
    })
    return points
