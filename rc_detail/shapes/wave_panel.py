"""
Corrugated (wave) panel shells.

A panel is a closed thin slab: an outer face displaced by a sine wave
along the outward normal, a flat inner face and four side walls. The
shell is generated once in panel-local (u, v, n) coordinates and mapped
to world space through panel_frame(outward_axis), so all six outward
directions share one code path.

Local layout (width W along u, height H along v, depth D along n):

    outer(iu, iv) = ((iu/divU - 0.5)·W, (iv/divV - 0.5)·H,
                     +D/2 + amplitude·sin(2π·frequency·iu/divU))
    inner(iu, iv) = ((iu/divU - 0.5)·W, (iv/divV - 0.5)·H, -D/2)

Vertex index of grid point (iu, iv) is iv·(divU+1) + iu; the inner grid
follows the outer one. Walls reuse the boundary vertices of both grids,
so the shell is closed and 2-manifold without welding.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from rc_detail import config as cfg
from rc_detail.errors import (
    InvalidParameterError,
    require_count,
    require_finite,
    require_less_than,
    require_non_negative,
    require_positive,
)
from rc_detail.geometry.buffer import GeometryBuffer
from rc_detail.geometry.vectors import VecLike, as_vec3
from rc_detail.logging_config import log_timing, timed
from rc_detail.orientation.frames import OutwardAxis, PanelFrame, panel_frame
from rc_detail.project_config import WaveConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WaveSurfaceSpec:
    """Parameters of one wave panel.

    Attributes:
        width: Extent along the panel's u axis (the wave runs along u)
        height: Extent along the panel's v axis
        depth: Shell thickness along the outward axis
        outward_axis: One of +x, -x, +y, -y, +z, -z (enum or string)
        amplitude: Sine amplitude of the outer face, 0 <= amplitude < depth
        frequency: Number of full waves across the width (not a physical frequency)
        subdivisions: (divU, divV) grid resolution, each >= 1
        center: Panel centre in world coordinates

    Raises:
        InvalidParameterError: on construction, for any invalid field
    """
    width: float
    height: float
    depth: float
    outward_axis: Union[OutwardAxis, str] = OutwardAxis.POS_Z
    amplitude: float = cfg.WAVE_AMPLITUDE
    frequency: float = cfg.WAVE_FREQUENCY
    subdivisions: Tuple[int, int] = (cfg.WAVE_DIV_U, cfg.WAVE_DIV_V)
    center: VecLike = (0.0, 0.0, 0.0)

    def __post_init__(self):
        width = require_positive("width", self.width)
        height = require_positive("height", self.height)
        depth = require_positive("depth", self.depth)
        amplitude = require_less_than(
            "amplitude", require_non_negative("amplitude", self.amplitude), depth, "depth"
        )
        frequency = require_non_negative("frequency", self.frequency)

        try:
            div_u, div_v = self.subdivisions
        except (TypeError, ValueError):
            raise InvalidParameterError(
                f"subdivisions must be a (divU, divV) pair, got {self.subdivisions!r}"
            ) from None
        div_u = require_count("subdivisions[0] (divU)", div_u)
        div_v = require_count("subdivisions[1] (divV)", div_v)

        object.__setattr__(self, 'width', width)
        object.__setattr__(self, 'height', height)
        object.__setattr__(self, 'depth', depth)
        object.__setattr__(self, 'amplitude', amplitude)
        object.__setattr__(self, 'frequency', frequency)
        object.__setattr__(self, 'subdivisions', (div_u, div_v))
        object.__setattr__(self, 'outward_axis', OutwardAxis.parse(self.outward_axis))
        object.__setattr__(self, 'center', tuple(as_vec3(self.center, "center").tolist()))

    @classmethod
    def from_config(
        cls,
        width: float,
        height: float,
        depth: float,
        outward_axis: Union[OutwardAxis, str],
        config: Optional[WaveConfig] = None,
        center: VecLike = (0.0, 0.0, 0.0),
    ) -> 'WaveSurfaceSpec':
        """Spec whose wave shape and resolution come from a WaveConfig."""
        config = config or WaveConfig()
        return cls(
            width=width,
            height=height,
            depth=depth,
            outward_axis=outward_axis,
            amplitude=config.amplitude,
            frequency=config.frequency,
            subdivisions=(config.div_u, config.div_v),
            center=center,
        )

    @property
    def frame(self) -> PanelFrame:
        return panel_frame(self.outward_axis)


def wave_panel_triangle_count(div_u: int, div_v: int) -> int:
    """Triangles in a closed panel: 2 faces of 2·divU·divV plus 4 walls of 2·div."""
    return 4 * div_u * div_v + 4 * div_u + 4 * div_v


def wave_panel_vertex_count(div_u: int, div_v: int) -> int:
    return 2 * (div_u + 1) * (div_v + 1)


# ---------------------------------------------------------------------------
# Topology (axis-agnostic, depends only on the grid resolution)
# ---------------------------------------------------------------------------

def _face_triangles(div_u: int, div_v: int, inner_offset: int) -> NDArray[np.int64]:
    ring = div_u + 1
    iu, iv = np.meshgrid(np.arange(div_u), np.arange(div_v))
    a = (iv * ring + iu).ravel()
    b = a + 1
    c = a + ring
    d = c + 1

    outer = np.concatenate([
        np.column_stack([a, b, c]),
        np.column_stack([b, d, c]),
    ])
    # Same quads, reversed, so the inner face points along -n.
    ai, bi, ci, di = a + inner_offset, b + inner_offset, c + inner_offset, d + inner_offset
    inner = np.concatenate([
        np.column_stack([ai, ci, bi]),
        np.column_stack([bi, ci, di]),
    ])
    return np.concatenate([outer, inner])


def _wall_triangles(div_u: int, div_v: int, inner_offset: int) -> NDArray[np.int64]:
    ring = div_u + 1

    # Walls along v (iu = 0 faces -u, iu = divU faces +u).
    iv = np.arange(div_v)
    o_a = iv * ring
    o_b = o_a + ring
    i_a, i_b = o_a + inner_offset, o_b + inner_offset
    left = np.concatenate([
        np.column_stack([o_a, o_b, i_a]),
        np.column_stack([i_a, o_b, i_b]),
    ])
    o_a = iv * ring + div_u
    o_b = o_a + ring
    i_a, i_b = o_a + inner_offset, o_b + inner_offset
    right = np.concatenate([
        np.column_stack([o_a, i_a, o_b]),
        np.column_stack([i_a, i_b, o_b]),
    ])

    # Walls along u (iv = 0 faces -v, iv = divV faces +v).
    iu = np.arange(div_u)
    o_a = iu
    o_b = o_a + 1
    i_a, i_b = o_a + inner_offset, o_b + inner_offset
    bottom = np.concatenate([
        np.column_stack([o_a, i_a, o_b]),
        np.column_stack([i_a, i_b, o_b]),
    ])
    o_a = div_v * ring + iu
    o_b = o_a + 1
    i_a, i_b = o_a + inner_offset, o_b + inner_offset
    top = np.concatenate([
        np.column_stack([o_a, o_b, i_a]),
        np.column_stack([i_a, o_b, i_b]),
    ])

    return np.concatenate([left, right, bottom, top])


def wave_panel_indices(div_u: int, div_v: int) -> NDArray[np.int64]:
    """Triangle list (Mx3) of a closed panel with the given resolution."""
    inner_offset = (div_u + 1) * (div_v + 1)
    return np.concatenate([
        _face_triangles(div_u, div_v, inner_offset),
        _wall_triangles(div_u, div_v, inner_offset),
    ])


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def _local_grids(spec: WaveSurfaceSpec) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    div_u, div_v = spec.subdivisions
    uu, vv = np.meshgrid(np.linspace(0.0, 1.0, div_u + 1), np.linspace(0.0, 1.0, div_v + 1))
    uu = uu.ravel()
    vv = vv.ravel()

    plane_u = (uu - 0.5) * spec.width
    plane_v = (vv - 0.5) * spec.height
    wave = spec.amplitude * np.sin(2.0 * np.pi * spec.frequency * uu)

    outer = np.column_stack([plane_u, plane_v, spec.depth / 2.0 + wave])
    inner = np.column_stack([plane_u, plane_v, np.full_like(uu, -spec.depth / 2.0)])
    uvs = np.column_stack([uu, vv])
    return np.vstack([outer, inner]), np.vstack([uvs, uvs])


@timed()
def build_wave_panel(spec: WaveSurfaceSpec) -> GeometryBuffer:
    """Build the closed wave shell described by `spec`.

    Args:
        spec: Validated panel parameters

    Returns:
        GeometryBuffer with 2·(divU+1)·(divV+1) vertices and
        wave_panel_triangle_count(divU, divV) outward-wound triangles
    """
    if not isinstance(spec, WaveSurfaceSpec):
        raise InvalidParameterError(f"spec must be a WaveSurfaceSpec, got {type(spec).__name__}")

    div_u, div_v = spec.subdivisions
    local, uvs = _local_grids(spec)
    positions = spec.frame.to_world(local, spec.center)

    buffer = GeometryBuffer(
        positions=positions,
        indices=wave_panel_indices(div_u, div_v),
        uvs=uvs,
    )

    logger.debug("Wave panel built", extra={
        'outward_axis': spec.outward_axis.value,
        'n_vertices': buffer.vertex_count,
        'n_triangles': buffer.triangle_count,
    })
    return buffer


def build_end_cap_panels(
    slab_width: float,
    slab_depth: float,
    thickness: float,
    block_depth: float,
    amplitude: Optional[float] = None,
    frequency: Optional[float] = None,
    subdivisions: Optional[Tuple[int, int]] = None,
    center: VecLike = (0.0, 0.0, 0.0),
    config: Optional[WaveConfig] = None,
) -> Dict[OutwardAxis, GeometryBuffer]:
    """Wave panels on the four vertical faces of a slab.

    The slab spans slab_width along X, thickness along Y and slab_depth
    along Z around `center`. Each panel's inner face lies on the slab
    face it covers and its outer (wavy) face points away from the slab.

    Returns:
        Mapping {+z, -z, -x, +x} -> panel buffer
    """
    config = config or WaveConfig()
    slab_width = require_positive("slab_width", slab_width)
    slab_depth = require_positive("slab_depth", slab_depth)
    thickness = require_positive("thickness", thickness)
    block_depth = require_positive("block_depth", block_depth)
    center = as_vec3(center, "center")
    amplitude = config.amplitude if amplitude is None else require_finite("amplitude", amplitude)
    frequency = config.frequency if frequency is None else frequency
    if subdivisions is None:
        subdivisions = (config.div_u, config.div_v)

    layout = {
        OutwardAxis.POS_Z: (slab_width, slab_depth),
        OutwardAxis.NEG_Z: (slab_width, slab_depth),
        OutwardAxis.NEG_X: (slab_depth, slab_width),
        OutwardAxis.POS_X: (slab_depth, slab_width),
    }

    # Validate every panel before building any of them.
    specs = {}
    for axis, (span, across) in layout.items():
        specs[axis] = WaveSurfaceSpec(
            width=span,
            height=thickness,
            depth=block_depth,
            outward_axis=axis,
            amplitude=amplitude,
            frequency=frequency,
            subdivisions=subdivisions,
            center=center + axis.vector * (across / 2.0 + block_depth / 2.0),
        )

    with log_timing(logger, "Building end cap panels", panels=len(specs)):
        return {axis: build_wave_panel(spec) for axis, spec in specs.items()}
