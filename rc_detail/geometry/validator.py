"""
Integrity checks for generated GeometryBuffers.

Performs:
- Unit-normal check
- Manifold validation (each edge shared by at most 2 faces)
- Boundary edge detection (open mesh)
- Winding consistency (each interior edge traversed once in each direction)
- Degenerate triangle detection (zero area)

Primitives carry separate cap rings, so coincident vertices are welded
first (weld_tolerance) when closedness of a composite is in question.
Findings are reported, never raised.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np
from numpy.typing import NDArray
from scipy.spatial import cKDTree as KDTree

from rc_detail.config import NORMAL_TOLERANCE
from rc_detail.geometry.buffer import GeometryBuffer
from rc_detail.geometry.mesh_stats import calculate_face_areas, edge_face_counts

logger = logging.getLogger(__name__)


class ValidationSeverity(Enum):
    """Severity level of validation issues."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class ValidationIssue:
    """A single finding."""
    code: str
    severity: ValidationSeverity
    message: str
    count: int = 1
    details: List[int] = field(default_factory=list)  # first offending face/vertex indices

    def __str__(self) -> str:
        if self.count > 1:
            return f"[{self.severity.value.upper()}] {self.code}: {self.message} ({self.count} occurrences)"
        return f"[{self.severity.value.upper()}] {self.code}: {self.message}"


@dataclass
class ValidationReport:
    """Validation result for one buffer."""
    is_valid: bool
    is_manifold: bool
    is_closed: bool
    is_consistently_wound: bool
    has_unit_normals: bool

    n_vertices: int
    n_faces: int
    n_welded_vertices: int
    n_boundary_edges: int
    n_non_manifold_edges: int
    n_degenerate_faces: int

    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.WARNING]

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.ERROR]

    def summary(self) -> str:
        lines = [
            "Geometry Validation Report",
            "=" * 40,
            f"Vertices: {self.n_vertices} ({self.n_welded_vertices} after welding)",
            f"Faces: {self.n_faces}",
            "",
            f"Manifold: {'Yes' if self.is_manifold else 'No'}",
            f"Closed: {'Yes' if self.is_closed else 'No'}",
            f"Consistent winding: {'Yes' if self.is_consistently_wound else 'No'}",
            f"Unit normals: {'Yes' if self.has_unit_normals else 'No'}",
            f"Degenerate faces: {self.n_degenerate_faces}",
            f"Boundary edges: {self.n_boundary_edges}",
        ]

        if self.issues:
            lines.append("")
            lines.append("Issues:")
            for issue in self.issues:
                lines.append(f"  - {issue}")

        lines.append("")
        lines.append(f"Overall: {'VALID' if self.is_valid else 'INVALID'}")

        return "\n".join(lines)


def weld_vertices(
    vertices: NDArray[np.float64],
    faces: NDArray[np.int64],
    tolerance: float,
) -> Tuple[NDArray[np.float64], NDArray[np.int64]]:
    """Merge vertices closer than `tolerance` (KDTree ball queries).

    Returns:
        (welded_vertices, remapped_faces); each welded vertex keeps the
        position of the first input vertex of its cluster.
    """
    vertices = np.asarray(vertices, dtype=np.float64).reshape(-1, 3)
    faces = np.asarray(faces, dtype=np.int64).reshape(-1, 3)
    if len(vertices) == 0:
        return vertices.copy(), faces.copy()

    tree = KDTree(vertices)
    vid = np.full(len(vertices), -1, dtype=np.int64)
    representatives = []
    for i in range(len(vertices)):
        if vid[i] >= 0:
            continue
        for j in tree.query_ball_point(vertices[i], tolerance):
            if vid[j] < 0:
                vid[j] = len(representatives)
        representatives.append(i)

    return vertices[representatives], vid[faces]


def _count_same_direction_edges(faces: NDArray[np.int64]) -> int:
    """Directed edges used twice in the same direction (flipped neighbour)."""
    if len(faces) == 0:
        return 0
    directed = np.vstack([faces[:, [i, (i + 1) % 3]] for i in range(3)])
    _, counts = np.unique(directed, axis=0, return_counts=True)
    return int(np.count_nonzero(counts > 1))


def validate_buffer(
    buffer: GeometryBuffer,
    weld_tolerance: Optional[float] = None,
    degenerate_area_threshold: float = 1e-14,
) -> ValidationReport:
    """Validate a GeometryBuffer.

    Args:
        buffer: Buffer to check
        weld_tolerance: If given, merge coincident vertices before the
            topology checks (needed for primitives with seams/cap rings)
        degenerate_area_threshold: Triangles below this area are flagged

    Returns:
        ValidationReport with all findings
    """
    vertices = buffer.vertices
    faces = buffer.faces
    n_vertices = len(vertices)
    n_faces = len(faces)
    issues: List[ValidationIssue] = []

    logger.debug("Validating buffer: %d vertices, %d faces", n_vertices, n_faces)

    # Normals
    normal_lengths = np.linalg.norm(buffer.normal_vectors, axis=1)
    bad_normals = np.where(np.abs(normal_lengths - 1.0) > NORMAL_TOLERANCE)[0]
    if len(bad_normals):
        issues.append(ValidationIssue(
            code="NON_UNIT_NORMALS",
            severity=ValidationSeverity.ERROR,
            message=f"{len(bad_normals)} normals are not unit length",
            count=len(bad_normals),
            details=bad_normals[:10].tolist(),
        ))

    # Topology
    topo_vertices, topo_faces = vertices, faces
    if weld_tolerance is not None:
        topo_vertices, topo_faces = weld_vertices(vertices, faces, weld_tolerance)

    _, edge_counts = edge_face_counts(topo_faces)
    n_boundary = int(np.count_nonzero(edge_counts == 1))
    n_non_manifold = int(np.count_nonzero(edge_counts > 2))
    n_flipped = _count_same_direction_edges(topo_faces)

    if n_boundary:
        issues.append(ValidationIssue(
            code="BOUNDARY_EDGES",
            severity=ValidationSeverity.WARNING,
            message=f"{n_boundary} boundary edges (not closed)",
            count=n_boundary,
        ))

    if n_non_manifold:
        issues.append(ValidationIssue(
            code="NON_MANIFOLD_EDGES",
            severity=ValidationSeverity.ERROR,
            message=f"{n_non_manifold} edges shared by more than 2 faces",
            count=n_non_manifold,
        ))

    if n_flipped:
        issues.append(ValidationIssue(
            code="INCONSISTENT_WINDING",
            severity=ValidationSeverity.ERROR,
            message=f"{n_flipped} edges traversed twice in the same direction",
            count=n_flipped,
        ))

    # Degenerate faces
    areas = calculate_face_areas(topo_vertices, topo_faces)
    degenerate = np.where(areas < degenerate_area_threshold)[0]
    if len(degenerate):
        issues.append(ValidationIssue(
            code="DEGENERATE_FACES",
            severity=ValidationSeverity.WARNING,
            message=f"{len(degenerate)} faces with zero area",
            count=len(degenerate),
            details=degenerate[:10].tolist(),
        ))

    for issue in issues:
        logger.warning("%s", issue)

    is_valid = not any(i.severity == ValidationSeverity.ERROR for i in issues)

    report = ValidationReport(
        is_valid=is_valid,
        is_manifold=n_non_manifold == 0,
        is_closed=n_faces > 0 and n_boundary == 0,
        is_consistently_wound=n_flipped == 0,
        has_unit_normals=len(bad_normals) == 0,
        n_vertices=n_vertices,
        n_faces=n_faces,
        n_welded_vertices=len(topo_vertices),
        n_boundary_edges=n_boundary,
        n_non_manifold_edges=n_non_manifold,
        n_degenerate_faces=len(degenerate),
        issues=issues,
    )

    logger.debug("Validation complete: %s", "VALID" if is_valid else "INVALID")
    return report
