"""
Unit tests for rc_detail.io.stl_export module.

Tests:
- In-memory conversion to numpy-stl meshes
- Writing binary and ASCII files and reading them back
- Error handling for unwritable paths
"""

import numpy as np
import pytest
from stl import mesh

from rc_detail.geometry.buffer import GeometryBuffer
from rc_detail.io.stl_export import STLExportError, save_stl, to_stl_mesh
from rc_detail.shapes.wave_panel import build_wave_panel


class TestToSTLMesh:
    """Tests for to_stl_mesh."""

    def test_triangles_copied(self, unit_cube):
        """Test one facet per triangle with matching corners."""
        stl_mesh = to_stl_mesh(unit_cube)

        assert len(stl_mesh.vectors) == unit_cube.triangle_count
        assert np.allclose(stl_mesh.vectors, unit_cube.vertices[unit_cube.faces])

    def test_normals_follow_winding(self, unit_quad):
        """Test that facet normals point +Y for the upward quad."""
        stl_mesh = to_stl_mesh(unit_quad)
        unit_normals = stl_mesh.normals / np.linalg.norm(stl_mesh.normals, axis=1, keepdims=True)
        assert np.allclose(unit_normals, [0, 1, 0])

    def test_empty_buffer(self):
        """Test that an empty buffer gives an empty mesh."""
        stl_mesh = to_stl_mesh(GeometryBuffer(positions=np.zeros((0, 3)), indices=np.zeros((0, 3), dtype=int)))
        assert len(stl_mesh.vectors) == 0


class TestSaveSTL:
    """Tests for save_stl."""

    @pytest.mark.parametrize("ascii", [False, True])
    def test_round_trip_file(self, tmp_path, small_wave_spec, ascii):
        """Test that a written panel reads back with the same facets."""
        buffer = build_wave_panel(small_wave_spec)
        path = save_stl(buffer, tmp_path / "panel.stl", ascii=ascii, name="panel")

        assert path.exists()
        loaded = mesh.Mesh.from_file(str(path))
        assert len(loaded.vectors) == buffer.triangle_count
        assert np.allclose(loaded.vectors, buffer.vertices[buffer.faces], atol=1e-5)

    def test_ascii_header(self, tmp_path, unit_cube):
        """Test that ASCII files start with the solid name."""
        path = save_stl(unit_cube, tmp_path / "cube.stl", ascii=True, name="cube")
        assert path.read_text().startswith("solid cube")

    def test_accepts_str_path(self, tmp_path, unit_quad):
        """Test str paths are converted to Path."""
        path = save_stl(unit_quad, str(tmp_path / "quad.stl"))
        assert path == tmp_path / "quad.stl"

    def test_missing_directory_raises(self, tmp_path, unit_quad):
        """Test that an unwritable location raises STLExportError."""
        with pytest.raises(STLExportError, match="Could not write"):
            save_stl(unit_quad, tmp_path / "missing_dir" / "quad.stl")
