"""
Pytest configuration and fixtures for the rc_detail geometry engine.

Provides:
- Small ready-made specs and buffers (unit quad, unit cube, wave panel)
- Logging isolation between tests
- Common assertion helpers for GeometryBuffers
"""

import logging
from typing import Tuple

import numpy as np
import pytest

from rc_detail.geometry.buffer import GeometryBuffer
from rc_detail.logging_config import PACKAGE_LOGGER
from rc_detail.shapes.wave_panel import WaveSurfaceSpec


# ============================================================================
# Pytest Configuration Hooks
# ============================================================================

@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Undo handler/level changes made by setup_logging() inside a test."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


# ============================================================================
# Geometry Fixtures - Simple Shapes for Unit Testing
# ============================================================================

@pytest.fixture
def unit_quad() -> GeometryBuffer:
    """Two triangles covering the unit square in the XZ plane, facing +Y."""
    return GeometryBuffer(
        positions=[
            0.0, 0.0, 0.0,
            1.0, 0.0, 0.0,
            1.0, 0.0, 1.0,
            0.0, 0.0, 1.0,
        ],
        indices=[0, 2, 1, 0, 3, 2],
    )


@pytest.fixture
def unit_cube() -> GeometryBuffer:
    """Closed cube [0, 1]^3 with shared vertices, wound outward."""
    vertices = np.array([
        [0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0],  # z = 0
        [0, 0, 1], [1, 0, 1], [1, 1, 1], [0, 1, 1],  # z = 1
    ], dtype=np.float64)
    faces = np.array([
        [0, 2, 1], [0, 3, 2],  # -z
        [4, 5, 6], [4, 6, 7],  # +z
        [0, 1, 5], [0, 5, 4],  # -y
        [3, 7, 6], [3, 6, 2],  # +y
        [0, 4, 7], [0, 7, 3],  # -x
        [1, 2, 6], [1, 6, 5],  # +x
    ])
    return GeometryBuffer(positions=vertices, indices=faces)


@pytest.fixture
def small_wave_spec() -> WaveSurfaceSpec:
    """0.6 x 0.6 panel, 0.5 deep, facing +z, coarse grid."""
    return WaveSurfaceSpec(
        width=0.6,
        height=0.6,
        depth=0.5,
        outward_axis="+z",
        amplitude=0.05,
        frequency=2.0,
        subdivisions=(8, 3),
    )


# ============================================================================
# Assertion Helpers
# ============================================================================

def assert_valid_buffer(buffer: GeometryBuffer) -> None:
    """Assert flat array sizes, index bounds and unit normals."""
    assert isinstance(buffer, GeometryBuffer)
    assert buffer.positions.ndim == 1
    assert buffer.positions.size % 3 == 0
    assert buffer.indices.size % 3 == 0
    assert buffer.indices.dtype == np.uint32
    assert buffer.normals.size == buffer.positions.size
    assert np.all(np.isfinite(buffer.positions))
    if buffer.triangle_count:
        assert int(buffer.indices.max()) < buffer.vertex_count
    lengths = np.linalg.norm(buffer.normal_vectors, axis=1)
    assert np.allclose(lengths, 1.0, atol=1e-9)


def assert_bbox_approx(buffer: GeometryBuffer, expected_min: Tuple[float, float, float],
                       expected_max: Tuple[float, float, float], tol: float = 1e-9) -> None:
    """Assert that the bounding box matches within `tol`."""
    vertices = buffer.vertices
    assert np.allclose(vertices.min(axis=0), expected_min, atol=tol), vertices.min(axis=0)
    assert np.allclose(vertices.max(axis=0), expected_max, atol=tol), vertices.max(axis=0)


def signed_area_normals(buffer: GeometryBuffer) -> np.ndarray:
    """Unnormalized face normals (v1 - v0) x (v2 - v0), one row per triangle."""
    v = buffer.vertices
    f = buffer.faces
    return np.cross(v[f[:, 1]] - v[f[:, 0]], v[f[:, 2]] - v[f[:, 0]])
