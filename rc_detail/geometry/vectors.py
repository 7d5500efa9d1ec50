"""
3D vector helpers shared by every builder.

Inputs arrive as plain sequences (tuples, lists, numpy arrays); each
helper returns fresh float64 numpy arrays so callers can never alias
a builder's output.
"""

from typing import Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from rc_detail.config import EPS_LENGTH
from rc_detail.errors import DegenerateGeometryError, InvalidParameterError

Vec3 = NDArray[np.float64]
VecLike = Union[Sequence[float], NDArray[np.float64]]

X_AXIS = np.array([1.0, 0.0, 0.0])
Y_AXIS = np.array([0.0, 1.0, 0.0])
Z_AXIS = np.array([0.0, 0.0, 1.0])


def _as_vector(value: VecLike, size: int, name: str) -> NDArray[np.float64]:
    try:
        arr = np.array(value, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise InvalidParameterError(f"{name} must be a {size}D vector, got {value!r}") from exc
    if arr.shape != (size,):
        raise InvalidParameterError(
            f"{name} must be a {size}D vector, got shape {arr.shape}"
        )
    if not np.all(np.isfinite(arr)):
        raise InvalidParameterError(f"{name} must be finite, got {arr.tolist()}")
    return arr


def as_vec3(value: VecLike, name: str = "vector") -> Vec3:
    """Validate and copy a 3D point/vector."""
    return _as_vector(value, 3, name)


def as_vec2(value: VecLike, name: str = "point") -> NDArray[np.float64]:
    """Validate and copy a 2D point."""
    return _as_vector(value, 2, name)


def normalize(v: VecLike, name: str = "direction") -> Vec3:
    """Return the unit vector of `v`.

    Raises:
        DegenerateGeometryError: if |v| is below EPS_LENGTH
    """
    arr = as_vec3(v, name)
    norm = np.linalg.norm(arr)
    if norm < EPS_LENGTH:
        raise DegenerateGeometryError(f"{name} has zero length: {arr.tolist()}")
    return arr / norm


def distance(a: VecLike, b: VecLike) -> float:
    """Euclidean distance between two points."""
    return float(np.linalg.norm(np.asarray(b, dtype=np.float64) - np.asarray(a, dtype=np.float64)))


def lerp(a: VecLike, b: VecLike, t: float) -> Vec3:
    """Linear interpolation a + (b - a)·t."""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    return a + (b - a) * t


def midpoint(a: VecLike, b: VecLike) -> Vec3:
    return lerp(a, b, 0.5)


def any_perpendicular(v: VecLike) -> Vec3:
    """Unit vector perpendicular to `v` (which must be non-zero).

    Crosses with the world axis least aligned with `v`, so the result
    is well conditioned for any input direction.
    """
    n = normalize(v)
    helper = X_AXIS if abs(n[0]) < 0.9 else Y_AXIS
    perp = np.cross(n, helper)
    return perp / np.linalg.norm(perp)


def perpendicular_pair(direction: VecLike) -> Tuple[Vec3, Vec3]:
    """Two unit vectors spanning the plane perpendicular to `direction`.

    perp1 = direction × X (or × Y when direction is close to X),
    perp2 = direction × perp1. Used to lay out a torsion arc around a
    moment vector.
    """
    d = normalize(direction)
    helper = X_AXIS if abs(d[0]) < 0.9 else Y_AXIS
    perp1 = np.cross(d, helper)
    perp1 /= np.linalg.norm(perp1)
    perp2 = np.cross(d, perp1)
    perp2 /= np.linalg.norm(perp2)
    return perp1, perp2
