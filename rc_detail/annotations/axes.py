"""Unit axis triad: a shaft, an arrowhead and an optional label per axis."""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from rc_detail.errors import require_positive
from rc_detail.geometry.buffer import GeometryBuffer, merge_buffers
from rc_detail.geometry.primitives import oriented_cone, segment_cylinder
from rc_detail.geometry.vectors import X_AXIS, Y_AXIS, Z_AXIS, VecLike, as_vec3, normalize
from rc_detail.annotations.labels import LabelAnchor
from rc_detail.project_config import AxisConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class AxisGlyph:
    """One axis of the triad."""
    name: str
    direction: NDArray[np.float64]
    shaft: GeometryBuffer
    arrow: GeometryBuffer
    label: Optional[LabelAnchor] = None

    def merged(self) -> GeometryBuffer:
        return merge_buffers([self.shaft, self.arrow])


def build_unit_axes(
    origin: VecLike = (0.0, 0.0, 0.0),
    x_direction: VecLike = X_AXIS,
    y_direction: VecLike = Y_AXIS,
    z_direction: VecLike = Z_AXIS,
    axis_length: Optional[float] = None,
    show_labels: bool = False,
    config: Optional[AxisConfig] = None,
) -> Tuple[AxisGlyph, AxisGlyph, AxisGlyph]:
    """X, Y and Z glyphs from `origin` along the given (normalized) directions.

    The arrowhead of each axis is centred at origin + dir·(length + arrow_size),
    arrow_size wide and 1.5·arrow_size long.
    """
    config = config or AxisConfig()
    origin = as_vec3(origin, "origin")
    length = require_positive("axis_length", config.axis_length if axis_length is None else axis_length)

    glyphs = []
    for name, raw in (("X", x_direction), ("Y", y_direction), ("Z", z_direction)):
        direction = normalize(raw, f"{name.lower()}_direction")
        arrow_position = origin + direction * (length + config.arrow_size)
        label = None
        if show_labels:
            label = LabelAnchor.at(
                arrow_position, (config.label_offset_x, config.label_offset_y), name
            )
        glyphs.append(AxisGlyph(
            name=name,
            direction=direction,
            shaft=segment_cylinder(
                origin, origin + direction * length, config.axis_radius, config.radial_segments
            ),
            arrow=oriented_cone(
                arrow_position,
                direction,
                height=config.arrow_size * 1.5,
                diameter=config.arrow_size,
                segments=config.radial_segments,
            ),
            label=label,
        ))

    logger.debug("Unit axes built", extra={'axis_length': length, 'labels': show_labels})
    return tuple(glyphs)
