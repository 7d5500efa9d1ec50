"""
Cylinder, cone and tube primitives.

These stand in for the renderer's own mesh builders so annotations can
be produced (and tested) as plain GeometryBuffers. Cylinders and cones
are built along +Y, centred at the origin, and posed with orient_up_to.

Ring convention: point j of a ring at height y is
(r·cos θj, y, r·sin θj) with θj = 2πj/segments. Caps get their own ring
vertices so side normals stay radial.
"""

import logging
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from rc_detail.config import EPS_LENGTH
from rc_detail.errors import DegenerateGeometryError, InvalidParameterError, require_count, require_positive
from rc_detail.geometry.buffer import GeometryBuffer
from rc_detail.geometry.vectors import VecLike, any_perpendicular, as_vec3, midpoint, normalize
from rc_detail.orientation.rotation import Rotation3D, orient_up_to

logger = logging.getLogger(__name__)

MIN_SEGMENTS = 3


def _ring(radius: float, y: float, segments: int) -> NDArray[np.float64]:
    theta = 2.0 * np.pi * np.arange(segments) / segments
    return np.column_stack([
        radius * np.cos(theta),
        np.full(segments, y),
        radius * np.sin(theta),
    ])


def _cap_fan(center_index: int, ring_start: int, segments: int, reverse_ring: bool) -> NDArray[np.int64]:
    i = np.arange(segments)
    a = ring_start + i
    b = ring_start + (i + 1) % segments
    c = np.full(segments, center_index)
    if reverse_ring:
        return np.column_stack([c, b, a])
    return np.column_stack([c, a, b])


def make_cylinder(
    radius: float,
    height: float,
    segments: int = 16,
    capped: bool = True,
) -> GeometryBuffer:
    """Cylinder along +Y, centred at the origin, wound outward.

    Raises:
        InvalidParameterError: for non-positive sizes or segments < 3
    """
    radius = require_positive("radius", radius)
    height = require_positive("height", height)
    segments = require_count("segments", segments, MIN_SEGMENTS)

    half = height / 2.0
    bottom = _ring(radius, -half, segments)
    top = _ring(radius, half, segments)
    parts = [bottom, top]

    i = np.arange(segments)
    b0 = i
    b1 = (i + 1) % segments
    t0 = segments + i
    t1 = segments + (i + 1) % segments
    faces = [
        np.column_stack([b0, t0, b1]),
        np.column_stack([b1, t0, t1]),
    ]

    if capped:
        base = 2 * segments
        parts += [top, [[0.0, half, 0.0]], bottom, [[0.0, -half, 0.0]]]
        faces.append(_cap_fan(base + segments, base, segments, reverse_ring=True))
        base += segments + 1
        faces.append(_cap_fan(base + segments, base, segments, reverse_ring=False))

    return GeometryBuffer(positions=np.vstack(parts), indices=np.vstack(faces))


def make_cone(radius: float, height: float, segments: int = 16) -> GeometryBuffer:
    """Capped cone along +Y: base circle at -height/2, apex at +height/2."""
    radius = require_positive("radius", radius)
    height = require_positive("height", height)
    segments = require_count("segments", segments, MIN_SEGMENTS)

    half = height / 2.0
    side_ring = _ring(radius, -half, segments)
    apex = segments
    base_ring_start = segments + 1
    base_center = base_ring_start + segments

    i = np.arange(segments)
    side = np.column_stack([i, np.full(segments, apex), (i + 1) % segments])
    cap = _cap_fan(base_center, base_ring_start, segments, reverse_ring=False)

    positions = np.vstack([side_ring, [[0.0, half, 0.0]], side_ring, [[0.0, -half, 0.0]]])
    return GeometryBuffer(positions=positions, indices=np.vstack([side, cap]))


def _path_tangents(points: NDArray[np.float64]) -> NDArray[np.float64]:
    steps = np.diff(points, axis=0)
    step_lengths = np.linalg.norm(steps, axis=1)
    if np.any(step_lengths < EPS_LENGTH):
        k = int(np.argmax(step_lengths < EPS_LENGTH))
        raise DegenerateGeometryError(f"Tube path has a zero-length step at point {k}")
    tangents = np.empty_like(points)
    tangents[0] = points[1] - points[0]
    tangents[-1] = points[-1] - points[-2]
    tangents[1:-1] = points[2:] - points[:-2]
    return np.array([normalize(t, "path tangent") for t in tangents])


def make_tube(
    path: Sequence[VecLike],
    radius: float,
    tessellation: int = 16,
    capped: bool = True,
) -> GeometryBuffer:
    """Tube of constant radius following a polyline.

    Ring frames are parallel-transported from the first tangent, so the
    tube does not twist. Ring point j at path point k is
    p_k + r·(cos φj·N_k + sin φj·B_k) with B = T x N.

    Raises:
        InvalidParameterError: for fewer than 2 points or bad sizes
        DegenerateGeometryError: for a zero-length step or a reversing path
    """
    radius = require_positive("radius", radius)
    tessellation = require_count("tessellation", tessellation, MIN_SEGMENTS)
    try:
        points = np.array(path, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise InvalidParameterError("path must be a sequence of 3D points") from exc
    if points.ndim != 2 or points.shape[1] != 3 or len(points) < 2:
        raise InvalidParameterError(f"path must be Kx3 with K >= 2, got shape {points.shape}")
    if not np.all(np.isfinite(points)):
        raise InvalidParameterError("path contains NaN or infinite values")

    tangents = _path_tangents(points)

    normals = np.empty_like(points)
    normals[0] = any_perpendicular(tangents[0])
    for k in range(1, len(points)):
        carried = Rotation3D.from_two_vectors(tangents[k - 1], tangents[k]).apply(normals[k - 1])
        carried -= np.dot(carried, tangents[k]) * tangents[k]
        normals[k] = normalize(carried, "tube frame normal")
    binormals = np.cross(tangents, normals)

    phi = 2.0 * np.pi * np.arange(tessellation) / tessellation
    cos_phi = np.cos(phi)[np.newaxis, :, np.newaxis]
    sin_phi = np.sin(phi)[np.newaxis, :, np.newaxis]
    rings = (
        points[:, np.newaxis, :]
        + radius * (cos_phi * normals[:, np.newaxis, :] + sin_phi * binormals[:, np.newaxis, :])
    )
    n_rings = len(points)
    positions = [rings.reshape(-1, 3)]

    k = np.arange(n_rings - 1)[:, np.newaxis]
    j = np.arange(tessellation)[np.newaxis, :]
    a = k * tessellation + j
    b = k * tessellation + (j + 1) % tessellation
    c = a + tessellation
    d = b + tessellation
    faces = [
        np.column_stack([a.ravel(), b.ravel(), c.ravel()]),
        np.column_stack([b.ravel(), d.ravel(), c.ravel()]),
    ]

    if capped:
        base = n_rings * tessellation
        positions += [rings[0], points[:1]]
        faces.append(_cap_fan(base + tessellation, base, tessellation, reverse_ring=True))
        base += tessellation + 1
        positions += [rings[-1], points[-1:]]
        faces.append(_cap_fan(base + tessellation, base, tessellation, reverse_ring=False))

    return GeometryBuffer(positions=np.vstack(positions), indices=np.vstack(faces))


def segment_cylinder(
    start: VecLike,
    end: VecLike,
    radius: float,
    segments: int = 16,
) -> GeometryBuffer:
    """Capped cylinder spanning start -> end (length = distance).

    Raises:
        DegenerateGeometryError: if start and end coincide
    """
    start = as_vec3(start, "start")
    end = as_vec3(end, "end")
    direction = end - start
    length = float(np.linalg.norm(direction))
    if length < EPS_LENGTH:
        raise DegenerateGeometryError(f"Segment {start.tolist()} -> {end.tolist()} has zero length")
    cylinder = make_cylinder(radius, length, segments)
    return cylinder.transformed(orient_up_to(direction), midpoint(start, end))


def oriented_cone(
    position: VecLike,
    direction: VecLike,
    height: float,
    diameter: float,
    segments: int = 16,
) -> GeometryBuffer:
    """Cone centred at `position` with its apex pointing along `direction`."""
    position = as_vec3(position, "position")
    cone = make_cone(require_positive("diameter", diameter) / 2.0, height, segments)
    return cone.transformed(orient_up_to(direction), position)
