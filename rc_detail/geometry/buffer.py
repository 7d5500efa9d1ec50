"""
GeometryBuffer: the flat mesh representation every builder returns.

positions (3N), indices (3M), optional uvs (2N) and RGBA colors (4N) are
stored flat and read-only, the way a renderer uploads them. Normals are
always derived from positions and indices, never passed in.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from rc_detail.errors import InvalidParameterError
from rc_detail.geometry.mesh_stats import BoundingBox, calculate_bounding_box
from rc_detail.geometry.vectors import VecLike, as_vec3

logger = logging.getLogger(__name__)


def _readonly(arr: NDArray) -> NDArray:
    arr.setflags(write=False)
    return arr


def compute_vertex_normals(
    vertices: NDArray[np.float64],
    faces: NDArray[np.int64],
) -> NDArray[np.float64]:
    """Area-weighted vertex normals.

    Each triangle's (unnormalized) cross product is added to its three
    vertices, then every sum is normalized. A vertex whose sum is zero
    (unreferenced, or touched only by zero-area triangles) gets +Y.

    Args:
        vertices: Nx3 array of positions
        faces: Mx3 array of vertex indices (CCW = front)

    Returns:
        Nx3 array of unit normals
    """
    normals = np.zeros((len(vertices), 3), dtype=np.float64)
    if len(faces):
        v0 = vertices[faces[:, 0]]
        v1 = vertices[faces[:, 1]]
        v2 = vertices[faces[:, 2]]
        face_normals = np.cross(v1 - v0, v2 - v0)
        for corner in range(3):
            np.add.at(normals, faces[:, corner], face_normals)

    lengths = np.linalg.norm(normals, axis=1)
    degenerate = lengths < np.finfo(np.float64).tiny
    if np.any(degenerate):
        logger.warning(
            "Vertices without a defined normal set to +Y",
            extra={'n_degenerate': int(np.count_nonzero(degenerate))},
        )
        normals[degenerate] = (0.0, 1.0, 0.0)
        lengths[degenerate] = 1.0

    return normals / lengths[:, np.newaxis]


@dataclass(frozen=True, eq=False)
class GeometryBuffer:
    """Immutable triangle mesh.

    Attributes:
        positions: Flat float64 array, 3 per vertex
        indices: Flat uint32 array, 3 per triangle
        uvs: Optional flat float64 array, 2 per vertex
        colors: Optional flat float32 RGBA array, 4 per vertex
        normals: Flat float64 unit normals, 3 per vertex (derived)
    """
    positions: NDArray[np.float64]
    indices: NDArray[np.uint32]
    uvs: Optional[NDArray[np.float64]] = None
    colors: Optional[NDArray[np.float32]] = None
    normals: NDArray[np.float64] = field(init=False, repr=False)

    def __post_init__(self):
        positions = np.array(self.positions, dtype=np.float64).ravel()
        if positions.size % 3:
            raise InvalidParameterError(
                f"positions length must be a multiple of 3, got {positions.size}"
            )
        if not np.all(np.isfinite(positions)):
            raise InvalidParameterError("positions contain NaN or infinite values")
        n_vertices = positions.size // 3

        raw_indices = np.array(self.indices, dtype=np.int64).ravel()
        if raw_indices.size % 3:
            raise InvalidParameterError(
                f"indices length must be a multiple of 3, got {raw_indices.size}"
            )
        if raw_indices.size and (raw_indices.min() < 0 or raw_indices.max() >= n_vertices):
            raise InvalidParameterError(
                f"indices must lie in [0, {n_vertices}), got "
                f"[{int(raw_indices.min())}, {int(raw_indices.max())}]"
            )

        uvs = None
        if self.uvs is not None:
            uvs = np.array(self.uvs, dtype=np.float64).ravel()
            if uvs.size != 2 * n_vertices:
                raise InvalidParameterError(
                    f"uvs length must be {2 * n_vertices}, got {uvs.size}"
                )
            if not np.all(np.isfinite(uvs)):
                raise InvalidParameterError("uvs contain NaN or infinite values")

        colors = None
        if self.colors is not None:
            colors = np.array(self.colors, dtype=np.float32).ravel()
            if colors.size != 4 * n_vertices:
                raise InvalidParameterError(
                    f"colors length must be {4 * n_vertices} (RGBA), got {colors.size}"
                )
            if not np.all(np.isfinite(colors)):
                raise InvalidParameterError("colors contain NaN or infinite values")

        faces = raw_indices.reshape(-1, 3)
        normals = compute_vertex_normals(positions.reshape(-1, 3), faces).ravel()

        object.__setattr__(self, 'positions', _readonly(positions))
        object.__setattr__(self, 'indices', _readonly(raw_indices.astype(np.uint32)))
        object.__setattr__(self, 'uvs', None if uvs is None else _readonly(uvs))
        object.__setattr__(self, 'colors', None if colors is None else _readonly(colors))
        object.__setattr__(self, 'normals', _readonly(normals))

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def vertices(self) -> NDArray[np.float64]:
        """Nx3 view of positions."""
        return self.positions.reshape(-1, 3)

    @property
    def faces(self) -> NDArray[np.int64]:
        """Mx3 triangle indices as int64 (safe for numpy fancy indexing)."""
        return self.indices.reshape(-1, 3).astype(np.int64)

    @property
    def normal_vectors(self) -> NDArray[np.float64]:
        """Nx3 view of normals."""
        return self.normals.reshape(-1, 3)

    @property
    def vertex_count(self) -> int:
        return self.positions.size // 3

    @property
    def triangle_count(self) -> int:
        return self.indices.size // 3

    # ------------------------------------------------------------------
    # Derived buffers
    # ------------------------------------------------------------------

    def transformed(self, rotation=None, translation: VecLike = (0.0, 0.0, 0.0)) -> 'GeometryBuffer':
        """Return a copy rotated (Rotation3D, applied first) then translated."""
        verts = self.vertices
        if rotation is not None:
            verts = rotation.apply(verts)
        verts = verts + as_vec3(translation, "translation")
        return GeometryBuffer(
            positions=verts,
            indices=self.indices,
            uvs=self.uvs,
            colors=self.colors,
        )

    def with_colors(self, rgba: Sequence[float]) -> 'GeometryBuffer':
        """Return a copy with one RGB(A) color on every vertex."""
        color = validate_color(rgba, "rgba")
        return GeometryBuffer(
            positions=self.positions,
            indices=self.indices,
            uvs=self.uvs,
            colors=np.tile(color, self.vertex_count),
        )

    def bounding_box(self) -> BoundingBox:
        return calculate_bounding_box(self.vertices)


def validate_color(rgba: Sequence[float], name: str = "color") -> NDArray[np.float32]:
    """Validate an RGB or RGBA tuple in [0, 1]; RGB gets alpha 1."""
    try:
        color = np.array(rgba, dtype=np.float64).ravel()
    except (TypeError, ValueError) as exc:
        raise InvalidParameterError(f"{name} must be 3 or 4 floats, got {rgba!r}") from exc
    if color.size == 3:
        color = np.append(color, 1.0)
    if color.size != 4:
        raise InvalidParameterError(f"{name} must be 3 or 4 floats, got {rgba!r}")
    if not np.all(np.isfinite(color)) or np.any(color < 0.0) or np.any(color > 1.0):
        raise InvalidParameterError(f"{name} components must lie in [0, 1], got {rgba!r}")
    return color.astype(np.float32)


def merge_buffers(buffers: Sequence[GeometryBuffer]) -> GeometryBuffer:
    """Concatenate buffers into one, offsetting indices.

    UVs and colors survive only if every part carries them.

    Raises:
        InvalidParameterError: for an empty sequence
    """
    buffers = list(buffers)
    if not buffers:
        raise InvalidParameterError("merge_buffers needs at least one buffer")

    positions = []
    indices = []
    offset = 0
    for buf in buffers:
        positions.append(buf.positions)
        indices.append(buf.indices.astype(np.int64) + offset)
        offset += buf.vertex_count

    uvs = None
    if all(buf.uvs is not None for buf in buffers):
        uvs = np.concatenate([buf.uvs for buf in buffers])
    colors = None
    if all(buf.colors is not None for buf in buffers):
        colors = np.concatenate([buf.colors for buf in buffers])

    return GeometryBuffer(
        positions=np.concatenate(positions),
        indices=np.concatenate(indices),
        uvs=uvs,
        colors=colors,
    )
