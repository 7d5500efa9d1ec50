"""Geometry core: vectors, GeometryBuffer, primitives, statistics, validation."""

from rc_detail.geometry.vectors import (
    X_AXIS,
    Y_AXIS,
    Z_AXIS,
    any_perpendicular,
    as_vec2,
    as_vec3,
    distance,
    lerp,
    midpoint,
    normalize,
    perpendicular_pair,
)
from rc_detail.geometry.buffer import GeometryBuffer, compute_vertex_normals, merge_buffers

__all__ = [
    'X_AXIS',
    'Y_AXIS',
    'Z_AXIS',
    'any_perpendicular',
    'as_vec2',
    'as_vec3',
    'distance',
    'lerp',
    'midpoint',
    'normalize',
    'perpendicular_pair',
    'GeometryBuffer',
    'compute_vertex_normals',
    'merge_buffers',
]
