"""
Rotations for posing generated primitives.

Cylinders, cones, tubes and posts are generated along REFERENCE_UP (+Y,
the renderer's cylinder axis) and turned onto their target direction by
orient_up_to(), which is the shortest-arc rotation of
Rotation3D.from_two_vectors(). Wave-panel frames use the same
constructor starting from +Z.
"""

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np
from numpy.typing import NDArray

from rc_detail.config import EPS_LENGTH, PARALLEL_DOT
from rc_detail.errors import DegenerateGeometryError, InvalidParameterError
from rc_detail.geometry.vectors import X_AXIS, Y_AXIS, Z_AXIS, VecLike, any_perpendicular, as_vec3

logger = logging.getLogger(__name__)

REFERENCE_UP = Y_AXIS


def _cross_matrix(k: NDArray[np.float64]) -> NDArray[np.float64]:
    return np.array([
        [0.0, -k[2], k[1]],
        [k[2], 0.0, -k[0]],
        [-k[1], k[0], 0.0],
    ])


@dataclass
class Rotation3D:
    """Proper rotation stored as a 3x3 matrix acting on column vectors."""
    matrix: NDArray[np.float64]

    def __post_init__(self):
        self.matrix = np.asarray(self.matrix, dtype=np.float64)
        if self.matrix.shape != (3, 3):
            raise InvalidParameterError(f"Rotation matrix must be 3x3, got {self.matrix.shape}")

    @classmethod
    def identity(cls) -> 'Rotation3D':
        return cls(np.eye(3))

    @classmethod
    def from_axis_angle(cls, axis: VecLike, angle_rad: float) -> 'Rotation3D':
        """Counter-clockwise turn of `angle_rad` looking down `axis`.

        R = I + sin(a)·K + (1 - cos(a))·K², K the cross-product matrix
        of the unit axis.

        Raises:
            DegenerateGeometryError: for a zero-length axis
        """
        axis = as_vec3(axis, "axis")
        length = np.linalg.norm(axis)
        if length < EPS_LENGTH:
            raise DegenerateGeometryError("Rotation axis has zero length")
        k = _cross_matrix(axis / length)
        return cls(np.eye(3) + np.sin(angle_rad) * k + (1.0 - np.cos(angle_rad)) * (k @ k))

    @classmethod
    def from_two_vectors(cls, vec_from: VecLike, vec_to: VecLike) -> 'Rotation3D':
        """Shortest-arc rotation taking the direction of `vec_from` onto `vec_to`.

        Parallel inputs give the identity. Antiparallel inputs give a half
        turn about some axis perpendicular to `vec_from`.

        Raises:
            DegenerateGeometryError: if either vector has zero length
        """
        a = as_vec3(vec_from, "vec_from")
        b = as_vec3(vec_to, "vec_to")
        len_a, len_b = np.linalg.norm(a), np.linalg.norm(b)
        if min(len_a, len_b) < EPS_LENGTH:
            raise DegenerateGeometryError(
                f"Cannot orient between {a.tolist()} and {b.tolist()}: zero-length direction"
            )
        a, b = a / len_a, b / len_b

        cos_angle = float(a @ b)
        if cos_angle > PARALLEL_DOT:
            return cls.identity()
        if cos_angle < -PARALLEL_DOT:
            return cls.from_axis_angle(any_perpendicular(a), np.pi)
        axis = np.cross(a, b)
        return cls.from_axis_angle(axis, np.arctan2(np.linalg.norm(axis), cos_angle))

    @classmethod
    def around_x(cls, angle_rad: float) -> 'Rotation3D':
        return cls.from_axis_angle(X_AXIS, angle_rad)

    @classmethod
    def around_y(cls, angle_rad: float) -> 'Rotation3D':
        return cls.from_axis_angle(Y_AXIS, angle_rad)

    @classmethod
    def around_z(cls, angle_rad: float) -> 'Rotation3D':
        return cls.from_axis_angle(Z_AXIS, angle_rad)

    def apply(self, points: VecLike) -> NDArray[np.float64]:
        """Rotate one 3-vector or the rows of an Nx3 array."""
        points = np.asarray(points, dtype=np.float64)
        return points @ self.matrix.T

    def compose(self, other: 'Rotation3D') -> 'Rotation3D':
        """`other` first, then `self`."""
        return Rotation3D(self.matrix @ other.matrix)

    __matmul__ = compose

    def inverse(self) -> 'Rotation3D':
        return Rotation3D(self.matrix.T)

    def is_identity(self, tol: float = 1e-9) -> bool:
        return bool(np.allclose(self.matrix, np.eye(3), atol=tol))

    @property
    def axis_angle(self) -> Tuple[NDArray[np.float64], float]:
        """(unit axis, angle in [0, pi]); the identity reports (+X, 0)."""
        x, y, z, w = self.as_quaternion()
        sin_half = np.sqrt(x * x + y * y + z * z)
        if sin_half < 1e-12:
            return X_AXIS.copy(), 0.0
        return np.array([x, y, z]) / sin_half, float(2.0 * np.arctan2(sin_half, w))

    def as_quaternion(self) -> Tuple[float, float, float, float]:
        """Unit quaternion (x, y, z, w) with w >= 0, the renderer's rotationQuaternion order.

        Taken from the largest of the four diagonal combinations to keep
        the square root well away from zero.
        """
        m = self.matrix
        trace = np.trace(m)
        candidates = (trace, m[0, 0], m[1, 1], m[2, 2])
        pick = int(np.argmax(candidates))
        if pick == 0:
            s = 2.0 * np.sqrt(1.0 + trace)
            q = (m[2, 1] - m[1, 2], m[0, 2] - m[2, 0], m[1, 0] - m[0, 1], 0.25 * s * s)
        elif pick == 1:
            s = 2.0 * np.sqrt(1.0 + m[0, 0] - m[1, 1] - m[2, 2])
            q = (0.25 * s * s, m[0, 1] + m[1, 0], m[0, 2] + m[2, 0], m[2, 1] - m[1, 2])
        elif pick == 2:
            s = 2.0 * np.sqrt(1.0 + m[1, 1] - m[0, 0] - m[2, 2])
            q = (m[0, 1] + m[1, 0], 0.25 * s * s, m[1, 2] + m[2, 1], m[0, 2] - m[2, 0])
        else:
            s = 2.0 * np.sqrt(1.0 + m[2, 2] - m[0, 0] - m[1, 1])
            q = (m[0, 2] + m[2, 0], m[1, 2] + m[2, 1], 0.25 * s * s, m[1, 0] - m[0, 1])
        quat = np.array(q) / s
        if quat[3] < 0:
            quat = -quat
        return tuple(float(c) for c in quat)


def orient_up_to(direction: VecLike) -> Rotation3D:
    """Rotation taking REFERENCE_UP (+Y) onto `direction`.

    Raises:
        DegenerateGeometryError: for a zero-length direction
    """
    return Rotation3D.from_two_vectors(REFERENCE_UP, direction)
