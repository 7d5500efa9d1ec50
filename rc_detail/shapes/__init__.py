"""Mesh-producing shape builders: wave panels and split rectangles."""

from rc_detail.shapes.wave_panel import (
    WaveSurfaceSpec,
    build_end_cap_panels,
    build_wave_panel,
    wave_panel_triangle_count,
    wave_panel_vertex_count,
)
from rc_detail.shapes.split_rectangle import (
    SplitPolygonPart,
    SplitRectangle,
    polygon_area,
    split_rectangle,
)

__all__ = [
    'WaveSurfaceSpec',
    'build_end_cap_panels',
    'build_wave_panel',
    'wave_panel_triangle_count',
    'wave_panel_vertex_count',
    'SplitPolygonPart',
    'SplitRectangle',
    'polygon_area',
    'split_rectangle',
]
