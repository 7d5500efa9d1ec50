"""
rc_detail: procedural geometry for reinforced-concrete detail diagrams.

Turns structural parameters into GeometryBuffers (wave panels, posts,
split plates) and annotation overlays (dimensions, moment and torsion
diagrams). Rendering, materials and scene lifetime belong to the caller.
"""

from rc_detail.logging_config import (
    setup_logging,
    get_logger,
    log_timing,
    timed,
    LogContext,
)
from rc_detail.errors import DegenerateGeometryError, GeometryError, InvalidParameterError
from rc_detail.geometry import GeometryBuffer, merge_buffers
from rc_detail.orientation import OutwardAxis, Rotation3D, orient_up_to, panel_frame
from rc_detail.shapes import WaveSurfaceSpec, build_end_cap_panels, build_wave_panel, split_rectangle
from rc_detail.placement import (
    PerimeterPoint,
    build_posts,
    circular_perimeter,
    cuboid_perimeter,
    rectangular_perimeter,
)
from rc_detail.annotations import (
    ArcDirection,
    build_bounds_dimensions,
    build_dimension,
    build_moment_diagram,
    build_torsion_about_axis,
    build_torsion_diagram,
    build_unit_axes,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "log_timing",
    "timed",
    "LogContext",
    "DegenerateGeometryError",
    "GeometryError",
    "InvalidParameterError",
    "GeometryBuffer",
    "merge_buffers",
    "OutwardAxis",
    "Rotation3D",
    "orient_up_to",
    "panel_frame",
    "WaveSurfaceSpec",
    "build_end_cap_panels",
    "build_wave_panel",
    "split_rectangle",
    "PerimeterPoint",
    "build_posts",
    "circular_perimeter",
    "cuboid_perimeter",
    "rectangular_perimeter",
    "ArcDirection",
    "build_bounds_dimensions",
    "build_dimension",
    "build_moment_diagram",
    "build_torsion_about_axis",
    "build_torsion_diagram",
    "build_unit_axes",
]
