"""
Measurements of generated meshes.

The bounding box feeds build_bounds_dimensions; the rest (areas, signed
volume, edge usage) is how tests and callers check that a builder
produced a closed, outward-wound shell: every edge used by exactly two
triangles, Euler characteristic 2 and positive volume.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Tuple

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from rc_detail.geometry.buffer import GeometryBuffer

logger = logging.getLogger(__name__)


@dataclass
class BoundingBox:
    """Axis-aligned box; width/height/depth are the X/Y/Z extents."""
    min_point: NDArray[np.float64]
    max_point: NDArray[np.float64]

    def __post_init__(self):
        self.min_point = np.asarray(self.min_point, dtype=np.float64)
        self.max_point = np.asarray(self.max_point, dtype=np.float64)

    @property
    def dimensions(self) -> NDArray[np.float64]:
        return self.max_point - self.min_point

    @property
    def width(self) -> float:
        """X extent."""
        return float(self.dimensions[0])

    @property
    def height(self) -> float:
        """Y extent."""
        return float(self.dimensions[1])

    @property
    def depth(self) -> float:
        """Z extent."""
        return float(self.dimensions[2])

    @property
    def center(self) -> NDArray[np.float64]:
        return 0.5 * (self.min_point + self.max_point)

    @property
    def diagonal(self) -> float:
        return float(np.linalg.norm(self.dimensions))

    def union(self, other: 'BoundingBox') -> 'BoundingBox':
        """Smallest box holding both boxes."""
        return BoundingBox(
            np.minimum(self.min_point, other.min_point),
            np.maximum(self.max_point, other.max_point),
        )


def calculate_bounding_box(vertices: NDArray[np.float64]) -> BoundingBox:
    """Box around an Nx3 array; a zero box at the origin when empty."""
    vertices = np.asarray(vertices, dtype=np.float64).reshape(-1, 3)
    if not len(vertices):
        return BoundingBox(np.zeros(3), np.zeros(3))
    return BoundingBox(vertices.min(axis=0), vertices.max(axis=0))


def _corners(vertices, faces):
    faces = np.asarray(faces, dtype=np.int64).reshape(-1, 3)
    tri = np.asarray(vertices, dtype=np.float64)[faces]
    return tri[:, 0], tri[:, 1], tri[:, 2]


def calculate_face_areas(
    vertices: NDArray[np.float64],
    faces: NDArray[np.int64]
) -> NDArray[np.float64]:
    """0.5·|(b - a) x (c - a)| per triangle."""
    if not len(faces):
        return np.empty(0, dtype=np.float64)
    a, b, c = _corners(vertices, faces)
    return 0.5 * np.linalg.norm(np.cross(b - a, c - a), axis=1)


def calculate_volume(
    vertices: NDArray[np.float64],
    faces: NDArray[np.int64]
) -> float:
    """Signed enclosed volume, sum(a · (b x c)) / 6.

    Positive for an outward-wound closed shell, negative when inverted.
    Meaningless for open meshes.
    """
    if not len(faces):
        return 0.0
    a, b, c = _corners(vertices, faces)
    return float(np.einsum('ij,ij->', a, np.cross(b, c)) / 6.0)


def edge_face_counts(faces: NDArray[np.int64]) -> Tuple[NDArray[np.int64], NDArray[np.int64]]:
    """Unique undirected edges (Ex2, lower index first) and their use counts."""
    faces = np.asarray(faces, dtype=np.int64).reshape(-1, 3)
    if not len(faces):
        return np.empty((0, 2), dtype=np.int64), np.empty(0, dtype=np.int64)
    edges = np.sort(faces[:, [0, 1, 1, 2, 2, 0]].reshape(-1, 2), axis=1)
    return np.unique(edges, axis=0, return_counts=True)


@dataclass
class MeshStatistics:
    """Counts and measures of one GeometryBuffer.

    Attributes:
        n_vertices, n_faces, n_edges: Element counts
        bbox: Axis-aligned bounding box
        surface_area: Total triangle area
        volume: Signed enclosed volume (closed meshes only)
        open_edges: Edges used by a single triangle
        is_watertight: Every edge is used by exactly two triangles
        euler_characteristic: V - E + F (2 for a closed genus-0 shell)
    """
    n_vertices: int
    n_faces: int
    n_edges: int
    bbox: BoundingBox
    surface_area: float
    volume: float
    open_edges: int
    is_watertight: bool
    euler_characteristic: int


def calculate_mesh_statistics(buffer: 'GeometryBuffer') -> MeshStatistics:
    """Measure a GeometryBuffer on its shared vertices (no welding).

    Example:
        >>> stats = calculate_mesh_statistics(build_wave_panel(spec))
        >>> stats.is_watertight, stats.volume > 0
        (True, True)
    """
    vertices, faces = buffer.vertices, buffer.faces
    edges, uses = edge_face_counts(faces)

    stats = MeshStatistics(
        n_vertices=len(vertices),
        n_faces=len(faces),
        n_edges=len(edges),
        bbox=calculate_bounding_box(vertices),
        surface_area=float(calculate_face_areas(vertices, faces).sum()),
        volume=calculate_volume(vertices, faces),
        open_edges=int(np.count_nonzero(uses == 1)),
        is_watertight=bool(len(faces) and np.all(uses == 2)),
        euler_characteristic=len(vertices) - len(edges) + len(faces),
    )

    logger.debug("Mesh statistics calculated", extra={
        'n_vertices': stats.n_vertices,
        'n_triangles': stats.n_faces,
        'volume': stats.volume,
        'open_edges': stats.open_edges,
    })
    return stats
