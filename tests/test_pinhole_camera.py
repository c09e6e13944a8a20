"""Tests for the pinhole camera.

Tests cover:
- Orthonormal basis construction
- Ray generation through image coordinates
- Aspect ratio handling
- Dictionary serialization
"""

import math

import numpy as np
import pytest


class TestPinholeCamera:
    """Tests for camera setup and ray generation."""

    def test_default_camera_looks_down_negative_z(self):
        """Test that the image center ray follows the view direction."""
        from src.whitted.camera.pinhole import PinholeCamera

        camera = PinholeCamera()
        ray = camera.ray_through(0.5, 0.5)

        assert np.allclose(ray.origin, [0.0, 0.0, 0.0])
        assert np.allclose(ray.direction, [0.0, 0.0, -1.0])

    def test_basis_is_orthonormal(self):
        """Test that u, v, w form a right-handed orthonormal frame."""
        from src.whitted.camera.pinhole import PinholeCamera

        camera = PinholeCamera(lookfrom=(3.0, 2.0, 5.0), lookat=(0.0, 0.5, 0.0))
        basis = np.stack([camera.u, camera.v, camera.w])

        assert np.allclose(basis @ basis.T, np.eye(3))
        assert np.allclose(np.cross(camera.u, camera.v), camera.w)

    def test_vertical_field_of_view(self):
        """Test that the top edge ray is vfov / 2 above the view direction."""
        from src.whitted.camera.pinhole import PinholeCamera

        camera = PinholeCamera(vfov=90.0)
        ray = camera.ray_through(0.5, 1.0)

        angle = math.degrees(math.acos(-ray.direction[2]))
        assert angle == pytest.approx(45.0)
        assert ray.direction[1] > 0.0

    def test_aspect_ratio_widens_horizontal(self):
        """Test that the right edge spreads further for wider images."""
        from src.whitted.camera.pinhole import PinholeCamera

        square = PinholeCamera(vfov=60.0, aspect_ratio=1.0).ray_through(1.0, 0.5)
        wide = PinholeCamera(vfov=60.0, aspect_ratio=2.0).ray_through(1.0, 0.5)

        assert wide.direction[0] > square.direction[0] > 0.0
        assert PinholeCamera(aspect_ratio=2.0).get_aspect_ratio() == 2.0

    def test_image_corners(self):
        """Test that (0, 0) is bottom-left and (1, 1) is top-right."""
        from src.whitted.camera.pinhole import PinholeCamera

        camera = PinholeCamera()
        bottom_left = camera.ray_through(0.0, 0.0).direction
        top_right = camera.ray_through(1.0, 1.0).direction

        assert bottom_left[0] < 0.0 and bottom_left[1] < 0.0
        assert top_right[0] > 0.0 and top_right[1] > 0.0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"vfov": 0.0},
            {"vfov": 180.0},
            {"aspect_ratio": 0.0},
            {"lookfrom": (0.0, 0.0, 0.0), "lookat": (0.0, 0.0, 0.0)},
            {"lookat": (0.0, -1.0, 0.0)},
        ],
    )
    def test_invalid_parameters(self, kwargs):
        """Test that degenerate camera setups are rejected."""
        from src.whitted.camera.pinhole import PinholeCamera

        with pytest.raises(ValueError):
            PinholeCamera(**kwargs)

    def test_camera_info(self):
        """Test that the debugging info exposes the derived vectors."""
        from src.whitted.camera.pinhole import PinholeCamera

        info = PinholeCamera().get_camera_info()

        assert set(info) == {"origin", "u", "v", "w", "horizontal", "vertical", "lower_left"}
        assert info["w"] == pytest.approx((0.0, 0.0, 1.0))

    def test_dict_round_trip(self):
        """Test that to_dict and from_dict preserve the view parameters."""
        from src.whitted.camera.pinhole import PinholeCamera

        camera = PinholeCamera(
            lookfrom=(1.0, 2.0, 3.0), lookat=(0.0, 0.0, 0.0), vfov=35.0, aspect_ratio=1.5
        )
        restored = PinholeCamera.from_dict(camera.to_dict())

        assert restored.to_dict() == camera.to_dict()
        assert np.allclose(restored.lower_left, camera.lower_left)

    def test_from_dict_rejects_bad_vector(self):
        """Test that vectors must have three components."""
        from src.whitted.camera.pinhole import PinholeCamera

        with pytest.raises(ValueError):
            PinholeCamera.from_dict({"lookfrom": [0.0, 1.0]})
