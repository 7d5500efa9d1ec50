"""
3D dimension annotations.

A dimension is drawn on a line offset from the measured feature:

    corner1 ............................ corner2      (real geometry)
       ^                                    ^
       | connector + arrowhead              |
       |                                    |
    arrow1 ============ label ========== arrow2        (dimension line)

Each arrowhead sits at its corner with its apex pointing along
unit(corner - arrow_pos), i.e. from the dimension line back onto the
feature. Each connector spans arrow_pos -> corner. An end whose
connector has zero length (arrow_pos == corner) gets neither.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from rc_detail.config import EPS_LENGTH
from rc_detail.errors import InvalidParameterError, require_finite
from rc_detail.geometry.buffer import GeometryBuffer, merge_buffers
from rc_detail.geometry.mesh_stats import BoundingBox
from rc_detail.geometry.primitives import oriented_cone, segment_cylinder
from rc_detail.geometry.vectors import VecLike, as_vec3, distance, midpoint
from rc_detail.annotations.labels import LabelAnchor, format_dimension_value
from rc_detail.project_config import DimensionConfig

logger = logging.getLogger(__name__)

# Screen offsets of the bounds labels (pixels).
BOUNDS_LABEL_OFFSETS = {
    'width': (0.0, 30.0),
    'depth': (-30.0, 0.0),
    'height': (-30.0, 0.0),
}


@dataclass(frozen=True, eq=False)
class DimensionAnnotation:
    """Geometry and label of one dimension.

    Attributes:
        measured_length: |arrow2_pos - arrow1_pos|
        measured_value: Value shown in the label (defaults to measured_length)
        line_start, line_end: Ends of the dimension line
        arrow1_pos, arrow2_pos: Measured endpoints on the dimension line
        corner1, corner2: Real feature points being measured
        label_text: Formatted value, e.g. "0.60m"
        label_screen_offset: Pixel offset of the label
        line: Dimension line cylinder
        arrowheads: Cone per end, None where the connector is skipped
        connectors: Cylinder per end, None where it has zero length
        connector_lengths: distance(arrowN_pos, cornerN) per end
        label: Label anchored at the middle of the line
    """
    measured_length: float
    measured_value: float
    line_start: NDArray[np.float64]
    line_end: NDArray[np.float64]
    arrow1_pos: NDArray[np.float64]
    arrow2_pos: NDArray[np.float64]
    corner1: NDArray[np.float64]
    corner2: NDArray[np.float64]
    label_text: str
    label_screen_offset: Tuple[float, float]
    line: GeometryBuffer
    arrowheads: Tuple[Optional[GeometryBuffer], Optional[GeometryBuffer]]
    connectors: Tuple[Optional[GeometryBuffer], Optional[GeometryBuffer]]
    connector_lengths: Tuple[float, float]
    label: LabelAnchor

    def buffers(self) -> List[GeometryBuffer]:
        """All meshes: line, then arrowheads, then connectors (skipped ends omitted)."""
        parts = [self.line]
        parts += [b for b in self.arrowheads if b is not None]
        parts += [b for b in self.connectors if b is not None]
        return parts

    def merged(self) -> GeometryBuffer:
        return merge_buffers(self.buffers())


def _end_geometry(
    arrow_pos: NDArray[np.float64],
    corner: NDArray[np.float64],
    style: DimensionConfig,
) -> Tuple[Optional[GeometryBuffer], Optional[GeometryBuffer], float]:
    length = distance(arrow_pos, corner)
    if length < EPS_LENGTH:
        return None, None, length
    arrowhead = oriented_cone(
        corner,
        corner - arrow_pos,
        height=style.arrow_size,
        diameter=style.arrow_diameter,
        segments=style.radial_segments,
    )
    connector = segment_cylinder(
        arrow_pos, corner, style.connector_thickness / 2.0, style.radial_segments
    )
    return arrowhead, connector, length


def build_dimension(
    arrow1_pos: VecLike,
    arrow2_pos: VecLike,
    corner1: VecLike,
    corner2: VecLike,
    measured_value: Optional[float] = None,
    label_offset: Tuple[float, float] = (0.0, 0.0),
    style: Optional[DimensionConfig] = None,
) -> DimensionAnnotation:
    """Build a dimension line between arrow1_pos and arrow2_pos.

    Args:
        arrow1_pos, arrow2_pos: Ends of the (offset) dimension line
        corner1, corner2: Feature points the connectors reach
        measured_value: Value to print; the line length if omitted
        label_offset: Pixel offset of the label from the line midpoint
        style: Sizes and label format (DimensionConfig defaults)

    Raises:
        InvalidParameterError: if arrow1_pos == arrow2_pos or inputs are not finite
    """
    style = style or DimensionConfig()
    arrow1 = as_vec3(arrow1_pos, "arrow1_pos")
    arrow2 = as_vec3(arrow2_pos, "arrow2_pos")
    c1 = as_vec3(corner1, "corner1")
    c2 = as_vec3(corner2, "corner2")

    measured_length = distance(arrow1, arrow2)
    if measured_length < EPS_LENGTH:
        raise InvalidParameterError(
            f"Dimension endpoints coincide: {arrow1.tolist()}"
        )
    value = measured_length if measured_value is None else require_finite("measured_value", measured_value)
    text = format_dimension_value(value, style.decimals, style.unit_suffix)
    label = LabelAnchor.at(midpoint(arrow1, arrow2), label_offset, text)

    line = segment_cylinder(arrow1, arrow2, style.line_thickness / 2.0, style.radial_segments)
    head1, connector1, length1 = _end_geometry(arrow1, c1, style)
    head2, connector2, length2 = _end_geometry(arrow2, c2, style)

    annotation = DimensionAnnotation(
        measured_length=measured_length,
        measured_value=value,
        line_start=arrow1,
        line_end=arrow2,
        arrow1_pos=arrow1,
        arrow2_pos=arrow2,
        corner1=c1,
        corner2=c2,
        label_text=text,
        label_screen_offset=label.screen_offset,
        line=line,
        arrowheads=(head1, head2),
        connectors=(connector1, connector2),
        connector_lengths=(length1, length2),
        label=label,
    )

    logger.debug("Dimension built", extra={
        'label': text,
        'connector_lengths': (length1, length2),
    })
    return annotation


def _as_bounds(bounds: Union[BoundingBox, GeometryBuffer, Sequence[VecLike]]) -> BoundingBox:
    if isinstance(bounds, BoundingBox):
        return bounds
    if isinstance(bounds, GeometryBuffer):
        return bounds.bounding_box()
    try:
        lo, hi = bounds
    except (TypeError, ValueError):
        raise InvalidParameterError(
            "bounds must be a BoundingBox, a GeometryBuffer or a (min, max) pair"
        ) from None
    return BoundingBox(as_vec3(lo, "bounds min"), as_vec3(hi, "bounds max"))


def build_bounds_dimensions(
    bounds: Union[BoundingBox, GeometryBuffer, Sequence[VecLike]],
    offset: Optional[float] = None,
    dimensions: Sequence[str] = ('width', 'depth', 'height'),
    style: Optional[DimensionConfig] = None,
) -> Dict[str, DimensionAnnotation]:
    """Width/depth/height dimensions around an axis-aligned box.

    - width: along X, in front of the top face (z = min_z - offset)
    - depth: along Z, left of the top face (x = min_x - offset)
    - height: along Y, left of the min corner (x = min_x - offset)

    Raises:
        InvalidParameterError: for an unknown dimension name or a zero extent
    """
    style = style or DimensionConfig()
    box = _as_bounds(bounds)
    offset = require_finite("offset", style.bounds_offset if offset is None else offset)
    (x0, y0, z0), (x1, y1, z1) = box.min_point, box.max_point

    layouts = {
        'width': ((x0, y1, z0 - offset), (x1, y1, z0 - offset), (x0, y1, z0), (x1, y1, z0)),
        'depth': ((x0 - offset, y1, z0), (x0 - offset, y1, z1), (x0, y1, z0), (x0, y1, z1)),
        'height': ((x0 - offset, y0, z0), (x0 - offset, y1, z0), (x0, y0, z0), (x0, y1, z0)),
    }

    unknown = [name for name in dimensions if name not in layouts]
    if unknown:
        raise InvalidParameterError(
            f"Unknown dimension(s) {unknown}; expected a subset of {list(layouts)}"
        )

    return {
        name: build_dimension(
            *layouts[name],
            label_offset=BOUNDS_LABEL_OFFSETS[name],
            style=style,
        )
        for name in dimensions
    }
