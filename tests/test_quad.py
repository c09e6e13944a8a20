"""Unit tests for quad intersection and box construction.

Tests cover:
- Quad construction and normal calculation
- Ray hitting quad from both sides (geometric normal is always reported)
- Ray missing quad (outside bounds, parallel)
- Axis-aligned boxes with outward faces
"""

import numpy as np
import pytest


class TestQuadBasics:
    """Tests for Quad dataclass and derived values."""

    def test_normal_follows_right_hand_rule(self):
        """Test that the normal is normalize(cross(u, v))."""
        from src.whitted.geometry.quad import Quad

        quad = Quad(Q=(0.0, 0.0, 0.0), u=(2.0, 0.0, 0.0), v=(0.0, 3.0, 0.0))

        assert np.allclose(quad.normal, [0.0, 0.0, 1.0])
        assert quad.area == pytest.approx(6.0)

    def test_degenerate_quad(self):
        """Test that parallel edges are rejected."""
        from src.whitted.geometry.quad import Quad

        with pytest.raises(ValueError):
            Quad(Q=(0.0, 0.0, 0.0), u=(1.0, 0.0, 0.0), v=(2.0, 0.0, 0.0))


class TestQuadIntersection:
    """Tests for ray-quad intersection."""

    def _unit_quad(self):
        from src.whitted.geometry.quad import Quad

        # Square at z = -2 spanning [-1, 1] in x and y, facing +z
        return Quad(Q=(-1.0, -1.0, -2.0), u=(2.0, 0.0, 0.0), v=(0.0, 2.0, 0.0))

    def test_hit_from_front(self):
        """Test a ray hitting the front face."""
        from src.whitted.core.ray import Ray
        from src.whitted.geometry.quad import hit_quad

        ray = Ray((0.5, 0.5, 0.0), (0.0, 0.0, -1.0))
        t, normal = hit_quad(ray, self._unit_quad(), 1e-4, 100.0)

        assert t == pytest.approx(2.0)
        assert np.allclose(normal, [0.0, 0.0, 1.0])

    def test_hit_from_back_reports_geometric_normal(self):
        """Test that a back-face hit still reports the quad's own normal."""
        from src.whitted.core.ray import Ray
        from src.whitted.geometry.quad import hit_quad

        t, normal = hit_quad(
            Ray((0.0, 0.0, -5.0), (0.0, 0.0, 1.0)), self._unit_quad(), 1e-4, 100.0
        )

        assert t == pytest.approx(3.0)
        assert np.allclose(normal, [0.0, 0.0, 1.0])

    def test_miss_outside_bounds(self):
        """Test a ray crossing the plane outside the parallelogram."""
        from src.whitted.core.ray import Ray
        from src.whitted.geometry.quad import hit_quad

        ray = Ray((1.5, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert hit_quad(ray, self._unit_quad(), 1e-4, 100.0) is None

    def test_miss_parallel(self):
        """Test a ray parallel to the quad plane."""
        from src.whitted.core.ray import Ray
        from src.whitted.geometry.quad import hit_quad

        ray = Ray((0.0, 0.0, -2.0), (1.0, 0.0, 0.0))

        assert hit_quad(ray, self._unit_quad(), 1e-4, 100.0) is None

    def test_respects_t_range(self):
        """Test that hits outside (t_min, t_max) are rejected."""
        from src.whitted.core.ray import Ray
        from src.whitted.geometry.quad import hit_quad

        ray = Ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert hit_quad(ray, self._unit_quad(), 1e-4, 1.5) is None
        assert hit_quad(ray, self._unit_quad(), 2.5, 100.0) is None

    def test_hit_on_edge(self):
        """Test that the quad boundary counts as inside."""
        from src.whitted.core.ray import Ray
        from src.whitted.geometry.quad import hit_quad

        ray = Ray((1.0, 1.0, 0.0), (0.0, 0.0, -1.0))

        assert hit_quad(ray, self._unit_quad(), 1e-4, 100.0) is not None


class TestBoxQuads:
    """Tests for axis-aligned boxes built from six quads."""

    def test_faces_point_outward(self):
        """Test that every face normal points away from the box center."""
        from src.whitted.geometry.quad import box_quads

        lo, hi = np.array([0.0, 0.0, 0.0]), np.array([1.0, 2.0, 3.0])
        center = (lo + hi) / 2.0
        faces = box_quads(lo, hi)

        assert len(faces) == 6
        for face in faces:
            face_center = face.Q + 0.5 * face.u + 0.5 * face.v
            assert np.dot(face.normal, face_center - center) > 0.0

    def test_ray_through_box_hits_entry_face(self):
        """Test that the nearest face along a ray is the entry face."""
        from src.whitted.core.ray import Ray
        from src.whitted.geometry.quad import box_quads

        faces = box_quads((-1.0, -1.0, -4.0), (1.0, 1.0, -2.0))
        ray = Ray((0.2, 0.1, 0.0), (0.0, 0.0, -1.0))

        hits = [face.hit(ray, 1e-4, 100.0) for face in faces]
        hits = [h for h in hits if h is not None]

        assert len(hits) == 2
        t, normal = min(hits, key=lambda h: h[0])
        assert t == pytest.approx(2.0)
        assert np.allclose(normal, [0.0, 0.0, 1.0])

    def test_invalid_extent(self):
        """Test that a flat box is rejected."""
        from src.whitted.geometry.quad import box_quads

        with pytest.raises(ValueError):
            box_quads((0.0, 0.0, 0.0), (1.0, 0.0, 1.0))
