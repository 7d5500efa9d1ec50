"""
Unit tests for rc_detail.geometry.vectors and rc_detail.errors.

Tests:
- Input validation (as_vec3, as_vec2)
- normalize / distance / lerp
- Perpendicular helpers
- require_* validators
"""

import math

import numpy as np
import pytest

from rc_detail.errors import (
    DegenerateGeometryError,
    GeometryError,
    InvalidParameterError,
    require_count,
    require_finite,
    require_less_than,
    require_non_negative,
    require_positive,
)
from rc_detail.geometry.vectors import (
    any_perpendicular,
    as_vec2,
    as_vec3,
    distance,
    lerp,
    midpoint,
    normalize,
    perpendicular_pair,
)


class TestErrorHierarchy:
    """Tests for the error classes."""

    def test_value_error_compatible(self):
        """Test that geometry errors are ValueErrors."""
        assert issubclass(InvalidParameterError, GeometryError)
        assert issubclass(DegenerateGeometryError, GeometryError)
        assert issubclass(GeometryError, ValueError)


class TestRequireHelpers:
    """Tests for the require_* validators."""

    def test_require_finite(self):
        """Test finite numbers pass and are returned as float."""
        assert require_finite("x", 3) == 3.0
        assert isinstance(require_finite("x", 3), float)

    @pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf, "1.0", None, True])
    def test_require_finite_rejects(self, bad):
        """Test NaN, infinities, strings, None and bools are rejected."""
        with pytest.raises(InvalidParameterError):
            require_finite("x", bad)

    def test_require_positive(self):
        """Test zero and negatives are rejected."""
        assert require_positive("w", 0.1) == 0.1
        with pytest.raises(InvalidParameterError, match="w must be positive"):
            require_positive("w", 0.0)

    def test_require_non_negative(self):
        """Test zero passes, negatives fail."""
        assert require_non_negative("a", 0) == 0.0
        with pytest.raises(InvalidParameterError):
            require_non_negative("a", -1e-6)

    def test_require_less_than(self):
        """Test the strict upper bound."""
        assert require_less_than("offset", 0.2, 0.3, "half") == 0.2
        with pytest.raises(InvalidParameterError, match="offset=0.3"):
            require_less_than("offset", 0.3, 0.3, "half")

    def test_require_count(self):
        """Test integer counts and the minimum."""
        assert require_count("n", np.int64(4)) == 4
        with pytest.raises(InvalidParameterError):
            require_count("n", 0)
        with pytest.raises(InvalidParameterError):
            require_count("n", 2.0)
        with pytest.raises(InvalidParameterError):
            require_count("segments", 2, minimum=3)


class TestAsVec:
    """Tests for as_vec3 / as_vec2."""

    def test_copies_input(self):
        """Test that the result is a fresh float64 array."""
        source = np.array([1.0, 2.0, 3.0])
        result = as_vec3(source)
        result[0] = 99.0
        assert source[0] == 1.0
        assert result.dtype == np.float64

    def test_accepts_sequences(self):
        """Test tuple and list input."""
        assert np.allclose(as_vec3((1, 2, 3)), [1, 2, 3])
        assert np.allclose(as_vec2([0.5, -0.5]), [0.5, -0.5])

    @pytest.mark.parametrize("bad", [(1, 2), (1, 2, 3, 4), (1, np.nan, 0), "abc", None])
    def test_rejects_bad_vectors(self, bad):
        """Test wrong shapes and non-finite values."""
        with pytest.raises(InvalidParameterError):
            as_vec3(bad)


class TestVectorMath:
    """Tests for normalize, distance and interpolation."""

    def test_normalize(self):
        """Test unit length result."""
        assert np.allclose(normalize((3, 0, 4)), [0.6, 0.0, 0.8])

    def test_normalize_zero_raises(self):
        """Test that zero vectors raise DegenerateGeometryError."""
        with pytest.raises(DegenerateGeometryError, match="direction has zero length"):
            normalize((0, 0, 0))

    def test_distance(self):
        """Test Euclidean distance."""
        assert distance((0, 0, 0), (1, 2, 2)) == pytest.approx(3.0)

    def test_lerp_and_midpoint(self):
        """Test interpolation endpoints and middle."""
        a, b = (0, 0, 0), (2, 4, 6)
        assert np.allclose(lerp(a, b, 0.0), a)
        assert np.allclose(lerp(a, b, 1.0), b)
        assert np.allclose(midpoint(a, b), (1, 2, 3))


class TestPerpendiculars:
    """Tests for any_perpendicular and perpendicular_pair."""

    @pytest.mark.parametrize("direction", [
        (1, 0, 0), (0, 1, 0), (0, 0, 1), (-1, 0, 0), (1, 1, 1), (0.95, 0.1, 0.0),
    ])
    def test_any_perpendicular(self, direction):
        """Test unit length and orthogonality for many directions."""
        perp = any_perpendicular(direction)
        assert np.linalg.norm(perp) == pytest.approx(1.0)
        assert abs(np.dot(perp, normalize(direction))) < 1e-12

    @pytest.mark.parametrize("direction", [(0, 0, 1), (1, 0, 0), (0.3, -2.0, 0.7)])
    def test_perpendicular_pair_is_orthonormal(self, direction):
        """Test that (d, p1, p2) are mutually orthogonal unit vectors."""
        d = normalize(direction)
        p1, p2 = perpendicular_pair(direction)
        for v in (p1, p2):
            assert np.linalg.norm(v) == pytest.approx(1.0)
            assert abs(np.dot(v, d)) < 1e-12
        assert abs(np.dot(p1, p2)) < 1e-12
        # p2 = d x p1, so (p1, p2, d) is right-handed.
        assert np.allclose(np.cross(p1, p2), d, atol=1e-12)
