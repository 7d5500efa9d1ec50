"""Annotation overlays: dimensions, moment/torsion diagrams, axis triads, labels."""

from rc_detail.annotations.labels import LabelAnchor, format_dimension_value
from rc_detail.annotations.dimension import (
    DimensionAnnotation,
    build_bounds_dimensions,
    build_dimension,
)
from rc_detail.annotations.moments import (
    ArcDirection,
    MomentDiagram,
    TorsionDiagram,
    build_moment_diagram,
    build_torsion_about_axis,
    build_torsion_diagram,
    dot_layout,
)
from rc_detail.annotations.axes import AxisGlyph, build_unit_axes

__all__ = [
    'LabelAnchor',
    'format_dimension_value',
    'DimensionAnnotation',
    'build_bounds_dimensions',
    'build_dimension',
    'ArcDirection',
    'MomentDiagram',
    'TorsionDiagram',
    'build_moment_diagram',
    'build_torsion_about_axis',
    'build_torsion_diagram',
    'dot_layout',
    'AxisGlyph',
    'build_unit_axes',
]
