"""
Axis-aligned panel frames for the six outward directions.

A wave panel is generated once in local (u, v, n) coordinates and mapped
to world space through the frame of its outward axis. The frame is not a
hand-written table: it is the reference basis (+X, +Y, +Z) rotated by the
shortest arc from +Z onto the outward normal.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Union

import numpy as np
from numpy.typing import NDArray

from rc_detail.errors import InvalidParameterError
from rc_detail.geometry.vectors import X_AXIS, Y_AXIS, Z_AXIS, VecLike, as_vec3
from rc_detail.orientation.rotation import Rotation3D

logger = logging.getLogger(__name__)


class OutwardAxis(Enum):
    """Outward normal of an axis-aligned panel."""
    POS_X = "+x"
    NEG_X = "-x"
    POS_Y = "+y"
    NEG_Y = "-y"
    POS_Z = "+z"
    NEG_Z = "-z"

    @classmethod
    def parse(cls, value: Union['OutwardAxis', str]) -> 'OutwardAxis':
        """Accept an OutwardAxis or a string such as "x", "+x", "-Z"."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise InvalidParameterError(f"outward_axis must be a string like '+x', got {value!r}")
        text = value.strip().lower()
        if len(text) == 1:
            text = "+" + text
        try:
            return cls(text)
        except ValueError:
            raise InvalidParameterError(
                f"outward_axis must be one of {[a.value for a in cls]}, got {value!r}"
            ) from None

    @property
    def vector(self) -> NDArray[np.float64]:
        sign = -1.0 if self.value[0] == "-" else 1.0
        base = {"x": X_AXIS, "y": Y_AXIS, "z": Z_AXIS}[self.value[1]]
        return sign * base


@dataclass(frozen=True)
class PanelFrame:
    """Right-handed orthonormal frame of a panel.

    Attributes:
        u: In-plane axis the wave runs along (panel width)
        v: Second in-plane axis (panel height)
        n: Outward normal (u x v)
    """
    u: NDArray[np.float64]
    v: NDArray[np.float64]
    n: NDArray[np.float64]

    @property
    def matrix(self) -> NDArray[np.float64]:
        """3x3 matrix with rows u, v, n."""
        return np.vstack([self.u, self.v, self.n])

    def to_world(
        self,
        local_uvn: NDArray[np.float64],
        origin: VecLike = (0.0, 0.0, 0.0),
    ) -> NDArray[np.float64]:
        """Map local (u, v, n) coordinates (single point or Nx3) to world."""
        local_uvn = np.asarray(local_uvn, dtype=np.float64)
        return as_vec3(origin, "origin") + local_uvn @ self.matrix


def _snap(v: NDArray[np.float64]) -> NDArray[np.float64]:
    # Rotations of exact axes leave ~1e-17 residue.
    return np.where(np.abs(v) < 1e-12, 0.0, v)


def panel_frame(axis: Union[OutwardAxis, str]) -> PanelFrame:
    """Frame whose n is the outward axis; u, v follow by the shortest arc from +Z.

    +z -> (u=+x, v=+y), -z -> (-x, +y), +x -> (-z, +y), -x -> (+z, +y),
    +y -> (+x, -z), -y -> (+x, +z).
    """
    axis = OutwardAxis.parse(axis)
    rotation = Rotation3D.from_two_vectors(Z_AXIS, axis.vector)
    return PanelFrame(
        u=_snap(rotation.apply(X_AXIS)),
        v=_snap(rotation.apply(Y_AXIS)),
        n=_snap(rotation.apply(Z_AXIS)),
    )
