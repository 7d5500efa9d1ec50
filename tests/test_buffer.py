"""
Unit tests for rc_detail.geometry.buffer module.

Tests:
- GeometryBuffer validation and immutability
- Derived vertex normals
- transformed / with_colors / bounding_box
- merge_buffers
"""

import numpy as np
import pytest

from conftest import assert_valid_buffer

from rc_detail.errors import InvalidParameterError
from rc_detail.geometry.buffer import (
    GeometryBuffer,
    compute_vertex_normals,
    merge_buffers,
    validate_color,
)
from rc_detail.orientation.rotation import Rotation3D


class TestGeometryBufferValidation:
    """Tests for GeometryBuffer construction."""

    def test_flat_storage(self, unit_quad):
        """Test that arrays are stored flat with the documented dtypes."""
        assert_valid_buffer(unit_quad)
        assert unit_quad.positions.shape == (12,)
        assert unit_quad.indices.shape == (6,)
        assert unit_quad.vertex_count == 4
        assert unit_quad.triangle_count == 2

    def test_accepts_nx3_input(self, unit_cube):
        """Test that Nx3 / Mx3 inputs are flattened."""
        assert unit_cube.vertices.shape == (8, 3)
        assert unit_cube.faces.shape == (12, 3)
        assert unit_cube.faces.dtype == np.int64

    def test_read_only(self, unit_quad):
        """Test that stored arrays cannot be modified."""
        with pytest.raises(ValueError):
            unit_quad.positions[0] = 5.0
        with pytest.raises(ValueError):
            unit_quad.normals[0] = 5.0

    def test_input_not_aliased(self):
        """Test that the caller's array is copied."""
        positions = np.zeros(9)
        buffer = GeometryBuffer(positions=positions, indices=[0, 1, 2])
        positions[0] = 1.0
        assert buffer.positions[0] == 0.0

    @pytest.mark.parametrize("positions, indices, match", [
        ([0.0] * 8, [], "multiple of 3"),
        ([0.0] * 9, [0, 1], "multiple of 3"),
        ([0.0] * 9, [0, 1, 3], r"\[0, 3\)"),
        ([0.0] * 9, [0, 1, -1], r"\[0, 3\)"),
        ([0.0] * 8 + [np.nan], [0, 1, 2], "NaN"),
    ])
    def test_invalid_arrays(self, positions, indices, match):
        """Test size, bounds and finiteness checks."""
        with pytest.raises(InvalidParameterError, match=match):
            GeometryBuffer(positions=positions, indices=indices)

    def test_uv_and_color_sizes(self):
        """Test that uvs need 2 and colors 4 values per vertex."""
        with pytest.raises(InvalidParameterError, match="uvs"):
            GeometryBuffer(positions=np.zeros(9), indices=[0, 1, 2], uvs=np.zeros(4))
        with pytest.raises(InvalidParameterError, match="RGBA"):
            GeometryBuffer(positions=np.zeros(9), indices=[0, 1, 2], colors=np.zeros(9))

    def test_empty_buffer(self):
        """Test that a buffer without triangles is allowed."""
        buffer = GeometryBuffer(positions=[], indices=[])
        assert buffer.vertex_count == 0
        assert buffer.triangle_count == 0


class TestVertexNormals:
    """Tests for compute_vertex_normals."""

    def test_flat_quad_normals(self, unit_quad):
        """Test that a +Y facing quad has +Y normals everywhere."""
        assert np.allclose(unit_quad.normal_vectors, [0, 1, 0])

    def test_cube_corner_normals(self, unit_cube):
        """Test that cube corner normals point diagonally outward."""
        normals = unit_cube.normal_vectors
        centered = unit_cube.vertices - 0.5
        assert np.all(np.einsum('ij,ij->i', normals, centered) > 0)
        assert np.allclose(np.linalg.norm(normals, axis=1), 1.0)

    def test_area_weighting(self):
        """Test that the larger triangle dominates a shared vertex."""
        vertices = np.array([
            [0, 0, 0], [10, 0, 0], [0, 10, 0],  # big, +Z
            [0, 0, 1], [0, 1, 0],               # small, +X side
        ], dtype=float)
        faces = np.array([[0, 1, 2], [0, 4, 3]])
        normals = compute_vertex_normals(vertices, faces)
        assert normals[0, 2] > 0.99

    def test_unreferenced_vertex_gets_up(self, caplog):
        """Test that a vertex without triangles gets +Y and a warning."""
        buffer = GeometryBuffer(
            positions=[0, 0, 0, 1, 0, 0, 0, 0, 1, 5, 5, 5],
            indices=[0, 1, 2],
        )
        assert np.allclose(buffer.normal_vectors[3], [0, 1, 0])
        assert "without a defined normal" in caplog.text


class TestDerivedBuffers:
    """Tests for transformed, with_colors and bounding_box."""

    def test_translation(self, unit_quad):
        """Test translating a buffer."""
        moved = unit_quad.transformed(translation=(1, 2, 3))
        assert np.allclose(moved.vertices, unit_quad.vertices + [1, 2, 3])
        assert np.array_equal(moved.indices, unit_quad.indices)

    def test_rotation_rotates_normals(self, unit_quad):
        """Test that rotating the quad rotates its normals."""
        rotated = unit_quad.transformed(Rotation3D.around_x(np.pi / 2))
        assert np.allclose(rotated.normal_vectors, [0, 0, 1], atol=1e-10)

    def test_with_colors(self, unit_quad):
        """Test per-vertex RGBA from an RGB tuple."""
        colored = unit_quad.with_colors((1.0, 0.5, 0.0))
        assert colored.colors.dtype == np.float32
        assert np.allclose(colored.colors.reshape(-1, 4), [1.0, 0.5, 0.0, 1.0])

    def test_bounding_box(self, unit_cube):
        """Test bounding box of the unit cube."""
        bbox = unit_cube.bounding_box()
        assert np.allclose(bbox.min_point, 0)
        assert np.allclose(bbox.max_point, 1)

    @pytest.mark.parametrize("bad", [(1, 0), (0.5, 0.5, 1.5), (0, 0, 0, -1), "red"])
    def test_validate_color_rejects(self, bad):
        """Test color validation."""
        with pytest.raises(InvalidParameterError):
            validate_color(bad)


class TestMergeBuffers:
    """Tests for merge_buffers."""

    def test_offsets_indices(self, unit_quad, unit_cube):
        """Test that the second buffer's indices are shifted."""
        merged = merge_buffers([unit_quad, unit_cube])
        assert merged.vertex_count == 12
        assert merged.triangle_count == 14
        assert np.array_equal(merged.faces[2:], unit_cube.faces + 4)
        assert_valid_buffer(merged)

    def test_colors_kept_only_if_all_have_them(self, unit_quad, unit_cube):
        """Test attribute propagation."""
        red = unit_quad.with_colors((1, 0, 0))
        blue = unit_cube.with_colors((0, 0, 1))
        assert merge_buffers([red, blue]).colors.size == 4 * 12
        assert merge_buffers([red, unit_cube]).colors is None

    def test_empty_list_raises(self):
        """Test that merging nothing raises."""
        with pytest.raises(InvalidParameterError):
            merge_buffers([])
