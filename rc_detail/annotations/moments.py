"""
Bending moment and torsion moment diagrams.

Bending (linear) moment: a dotted line from `origin` along `direction`
plus an arrowhead at its end. The number of dots is
ceil(length / target_spacing) and the spacing is stretched to
length / dot_count, so the pattern always ends exactly at `length`.

Torsion moment: a tube following an arc in the plane (right, up)

    p(θ) = center + radius·(cos θ·right + sin θ·up)
    θ = start + dir·arc·t,  t in [0, 1],  start = -45°

plus an arrowhead placed 45° past the arc end in the direction of
rotation and aligned with the arc tangent there.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from rc_detail.config import DOT_COUNT_GUARD, MIN_ARC_STEP, PERPENDICULAR_TOLERANCE
from rc_detail.errors import InvalidParameterError, require_finite, require_positive
from rc_detail.geometry.buffer import GeometryBuffer, merge_buffers
from rc_detail.geometry.primitives import make_tube, oriented_cone, segment_cylinder
from rc_detail.geometry.vectors import VecLike, as_vec3, normalize, perpendicular_pair
from rc_detail.annotations.labels import LabelAnchor
from rc_detail.project_config import MomentConfig, TorsionConfig

logger = logging.getLogger(__name__)


class ArcDirection(Enum):
    """Sense of rotation of a torsion arc in its (right, up) plane."""
    FORWARD = 1
    BACKWARD = -1


# ---------------------------------------------------------------------------
# Bending moment
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class MomentDiagram:
    """Dotted line + arrow.

    Attributes:
        origin: Start of the dotted line
        length: Length of the dotted line
        direction: Unit direction of the line
        dot_count: Number of dashes
        dot_spacing: Actual spacing, length / dot_count
        arrow_at_end: Whether an arrowhead was built
        dots: One thin cylinder per dash
        arrow: Arrowhead cone at origin + direction·length, or None
        arrow_direction: Direction the arrowhead points (flipped for negative moments)
        label: Label anchored at the arrowhead, or None without text
    """
    origin: NDArray[np.float64]
    length: float
    direction: NDArray[np.float64]
    dot_count: int
    dot_spacing: float
    arrow_at_end: bool
    dots: Tuple[GeometryBuffer, ...]
    arrow: Optional[GeometryBuffer]
    arrow_direction: NDArray[np.float64]
    label: Optional[LabelAnchor]

    @property
    def end_point(self) -> NDArray[np.float64]:
        return self.origin + self.direction * self.length

    def buffers(self) -> List[GeometryBuffer]:
        parts = list(self.dots)
        if self.arrow is not None:
            parts.append(self.arrow)
        return parts

    def merged(self) -> GeometryBuffer:
        return merge_buffers(self.buffers())


def dot_layout(length: float, target_spacing: float) -> Tuple[int, float]:
    """(dot_count, actual_spacing) for a dotted line.

    The small guard keeps float noise (1.1 / 0.1 = 11.000000000000002)
    from adding a dot.
    """
    length = require_positive("length", length)
    target_spacing = require_positive("target_spacing", target_spacing)
    dot_count = max(1, math.ceil(length / target_spacing - DOT_COUNT_GUARD))
    return dot_count, length / dot_count


def build_moment_diagram(
    origin: VecLike,
    length: float,
    direction: VecLike,
    target_spacing: Optional[float] = None,
    arrow_at_end: bool = True,
    moment_value: Optional[float] = None,
    label_text: Optional[str] = None,
    config: Optional[MomentConfig] = None,
) -> MomentDiagram:
    """Build a bending moment diagram.

    Args:
        origin: Start of the dotted line
        length: Line length (> 0)
        direction: Line direction (normalized here)
        target_spacing: Desired dash spacing (MomentConfig.dot_spacing if None)
        arrow_at_end: Build the arrowhead
        moment_value: Signed moment; negative values flip the arrowhead
        label_text: Label text; defaults to the moment value
        config: Sizes and label offset (MomentConfig defaults)

    Raises:
        InvalidParameterError: non-positive length/spacing, non-finite input
        DegenerateGeometryError: zero-length direction
    """
    config = config or MomentConfig()
    origin = as_vec3(origin, "origin")
    direction = normalize(direction, "direction")
    spacing = config.dot_spacing if target_spacing is None else target_spacing
    dot_count, dot_spacing = dot_layout(length, spacing)
    length = float(length)
    if moment_value is not None:
        moment_value = require_finite("moment_value", moment_value)

    dots = tuple(
        segment_cylinder(
            origin + direction * (i * dot_spacing),
            origin + direction * ((i + 0.5) * dot_spacing),
            config.dot_radius,
            config.radial_segments,
        )
        for i in range(dot_count)
    )

    end_point = origin + direction * length
    arrow_direction = -direction if (moment_value is not None and moment_value < 0) else direction
    arrow = None
    if arrow_at_end:
        arrow = oriented_cone(
            end_point,
            arrow_direction,
            height=config.arrow_size,
            diameter=config.arrow_diameter,
            segments=config.radial_segments,
        )

    if label_text is None and moment_value is not None:
        label_text = f"{moment_value:g}"
    label = None
    if label_text:
        label = LabelAnchor.at(
            end_point, (config.label_offset_x, config.label_offset_y), label_text
        )

    logger.debug("Moment diagram built", extra={
        'dot_count': dot_count,
        'dot_spacing': dot_spacing,
        'arrow': arrow is not None,
    })

    return MomentDiagram(
        origin=origin,
        length=length,
        direction=direction,
        dot_count=dot_count,
        dot_spacing=dot_spacing,
        arrow_at_end=arrow_at_end,
        dots=dots,
        arrow=arrow,
        arrow_direction=arrow_direction,
        label=label,
    )


# ---------------------------------------------------------------------------
# Torsion moment
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class TorsionDiagram:
    """Arc tube + tangential arrow.

    Attributes:
        center: Arc centre
        plane_right, plane_up: Unit vectors spanning the arc plane
        radius: Arc radius
        arc_angle_deg: Swept angle
        direction: Sense of rotation
        path: (segments+1)x3 arc centreline
        arc: Tube along the path
        arrow_position: Arrowhead centre
        arrow_direction: Unit tangent the arrowhead points along
        arrow: Arrowhead cone
        label: Label anchored at the arrowhead
    """
    center: NDArray[np.float64]
    plane_right: NDArray[np.float64]
    plane_up: NDArray[np.float64]
    radius: float
    arc_angle_deg: float
    direction: ArcDirection
    path: NDArray[np.float64]
    arc: GeometryBuffer
    arrow_position: NDArray[np.float64]
    arrow_direction: NDArray[np.float64]
    arrow: GeometryBuffer
    label: LabelAnchor

    def buffers(self) -> List[GeometryBuffer]:
        return [self.arc, self.arrow]

    def merged(self) -> GeometryBuffer:
        return merge_buffers(self.buffers())


def _arc_point(center, right, up, radius, theta):
    return center + radius * (np.cos(theta) * right + np.sin(theta) * up)


def build_torsion_diagram(
    center: VecLike,
    plane_right: VecLike,
    plane_up: VecLike,
    radius: Optional[float] = None,
    arc_angle_deg: Optional[float] = None,
    direction: Union[ArcDirection, int] = ArcDirection.FORWARD,
    label_text: str = "T",
    config: Optional[TorsionConfig] = None,
) -> TorsionDiagram:
    """Build a torsion moment diagram.

    Args:
        center: Arc centre
        plane_right, plane_up: Plane vectors (normalized here; must be
            perpendicular within PERPENDICULAR_TOLERANCE)
        radius: Arc radius (TorsionConfig.arc_radius if None)
        arc_angle_deg: Swept angle in (0, 360] (TorsionConfig.arc_angle_deg if None)
        direction: FORWARD (+1) or BACKWARD (-1)
        label_text: Text of the label at the arrowhead
        config: Sizes, start angle, overshoot and label offset

    Raises:
        InvalidParameterError: skewed plane vectors, bad radius or angle
        DegenerateGeometryError: zero-length plane vector, or an arc
            (radius x angle) shorter than EPS_LENGTH
    """
    config = config or TorsionConfig()
    center = as_vec3(center, "center")
    right = normalize(plane_right, "plane_right")
    up = normalize(plane_up, "plane_up")
    skew = abs(float(np.dot(right, up)))
    if skew > PERPENDICULAR_TOLERANCE:
        raise InvalidParameterError(
            f"plane_right and plane_up must be perpendicular (|dot| = {skew:.3g})"
        )

    radius = require_positive("radius", config.arc_radius if radius is None else radius)
    arc_angle_deg = require_finite(
        "arc_angle_deg", config.arc_angle_deg if arc_angle_deg is None else arc_angle_deg
    )
    if not 0.0 < arc_angle_deg <= 360.0:
        raise InvalidParameterError(f"arc_angle_deg must be in (0, 360], got {arc_angle_deg}")
    try:
        direction = ArcDirection(direction)
    except ValueError:
        raise InvalidParameterError(f"direction must be FORWARD or BACKWARD, got {direction!r}") from None
    sign = direction.value

    start = math.radians(config.start_angle_deg)
    sweep = math.radians(arc_angle_deg)
    # Short sweeps get fewer samples so no step falls below MIN_ARC_STEP.
    segments = min(config.arc_segments, max(1, int(radius * sweep / MIN_ARC_STEP)))
    t = np.linspace(0.0, 1.0, segments + 1)
    theta = start + sign * sweep * t
    path = (
        center
        + radius * (np.cos(theta)[:, np.newaxis] * right + np.sin(theta)[:, np.newaxis] * up)
    )
    arc = make_tube(path, config.arc_thickness, config.tessellation, capped=True)

    theta_arrow = start + sign * sweep + sign * math.radians(config.overshoot_deg)
    arrow_position = _arc_point(center, right, up, radius, theta_arrow)
    arrow_direction = sign * (-math.sin(theta_arrow) * right + math.cos(theta_arrow) * up)
    arrow = oriented_cone(
        arrow_position,
        arrow_direction,
        height=config.arrow_size,
        diameter=config.arrow_diameter,
        segments=config.tessellation,
    )
    label = LabelAnchor.at(
        arrow_position, (config.label_offset_x, config.label_offset_y), label_text
    )

    logger.debug("Torsion diagram built", extra={
        'arc_angle_deg': arc_angle_deg,
        'direction': direction.name,
        'n_triangles': arc.triangle_count + arrow.triangle_count,
    })

    return TorsionDiagram(
        center=center,
        plane_right=right,
        plane_up=up,
        radius=radius,
        arc_angle_deg=arc_angle_deg,
        direction=direction,
        path=path,
        arc=arc,
        arrow_position=arrow_position,
        arrow_direction=arrow_direction,
        arrow=arrow,
        label=label,
    )


def build_torsion_about_axis(
    center: VecLike,
    axis: VecLike,
    **kwargs,
) -> TorsionDiagram:
    """Torsion diagram circling `axis`; the plane comes from perpendicular_pair(axis).

    Keyword arguments are passed to build_torsion_diagram.
    """
    right, up = perpendicular_pair(axis)
    return build_torsion_diagram(center, right, up, **kwargs)
