"""
Unit tests for rc_detail.annotations.axes module.
"""

import numpy as np
import pytest

from conftest import assert_valid_buffer

from rc_detail.annotations.axes import build_unit_axes
from rc_detail.errors import DegenerateGeometryError, InvalidParameterError
from rc_detail.project_config import AxisConfig


class TestUnitAxes:
    """Tests for build_unit_axes."""

    def test_three_glyphs(self):
        """Test X, Y, Z glyphs along the world axes by default."""
        glyphs = build_unit_axes()

        assert [g.name for g in glyphs] == ["X", "Y", "Z"]
        assert np.allclose([g.direction for g in glyphs], np.eye(3))
        for glyph in glyphs:
            assert glyph.label is None
            assert_valid_buffer(glyph.merged())

    def test_shaft_extent(self):
        """Test that the shaft runs from the origin to origin + dir·length."""
        (x_axis, _, _) = build_unit_axes(origin=(1, 2, 3), axis_length=0.5)
        bbox = x_axis.shaft.bounding_box()

        assert bbox.min_point[0] == pytest.approx(1.0)
        assert bbox.max_point[0] == pytest.approx(1.5)

    def test_arrow_apex(self):
        """Test apex at origin + dir·(length + 1.75·arrow_size)."""
        config = AxisConfig(radial_segments=12)
        glyphs = build_unit_axes(origin=(0, 0, 0), config=config)

        for glyph in glyphs:
            apex = glyph.arrow.vertices[config.radial_segments]
            expected = glyph.direction * (config.axis_length + 1.75 * config.arrow_size)
            assert np.allclose(apex, expected)

    def test_arrow_width(self):
        """Test that the arrowhead is arrow_size wide and 1.5·arrow_size long."""
        config = AxisConfig()
        (_, y_axis, _) = build_unit_axes(config=config)
        bbox = y_axis.arrow.bounding_box()

        assert bbox.height == pytest.approx(1.5 * config.arrow_size)
        assert bbox.width == pytest.approx(config.arrow_size)

    def test_directions_normalized(self):
        """Test that custom directions are normalized."""
        glyphs = build_unit_axes(x_direction=(2, 0, 0), y_direction=(0, 0, 3), z_direction=(0, -4, 0))

        assert np.allclose(glyphs[1].direction, [0, 0, 1])
        assert np.allclose(glyphs[2].direction, [0, -1, 0])

    def test_labels(self):
        """Test labels at the arrowheads when requested."""
        config = AxisConfig()
        glyphs = build_unit_axes(origin=(0, 1, 0), show_labels=True, config=config)

        for glyph in glyphs:
            assert glyph.label.text == glyph.name
            expected = np.array([0, 1, 0]) + glyph.direction * (config.axis_length + config.arrow_size)
            assert np.allclose(glyph.label.world_position, expected)
            assert glyph.label.screen_offset == (20.0, 0.0)

    def test_zero_direction_raises(self):
        """Test that a zero axis direction raises."""
        with pytest.raises(DegenerateGeometryError):
            build_unit_axes(z_direction=(0, 0, 0))

    def test_non_positive_length_raises(self):
        """Test axis_length validation."""
        with pytest.raises(InvalidParameterError):
            build_unit_axes(axis_length=0.0)
