"""Pinhole camera model for perspective projection ray generation.

This module implements a pinhole camera that generates primary rays for rendering.
The camera supports:
- Look-at positioning (lookfrom, lookat, vup)
- Vertical field of view
- Arbitrary aspect ratios

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

Example:
    >>> from src.whitted.camera.pinhole import PinholeCamera
    >>>
    >>> # Create camera looking at origin from z=3
    >>> camera = PinholeCamera(
    ...     lookfrom=(0.0, 0.0, 3.0),
    ...     lookat=(0.0, 0.0, 0.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=60.0,
    ...     aspect_ratio=16.0/9.0
    ... )
    >>> ray = camera.ray_through(0.5, 0.5)  # Ray through image center
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from src.whitted.core.ray import Ray, Vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration and derived viewport of a pinhole (perspective) camera.

    A pinhole camera produces perfect perspective projection with no
    depth of field effects. It is the simplest camera model for ray tracing.

    Attributes:
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees (typically 40-90).
        aspect_ratio: Width divided by height of the output image.
    """

    lookfrom: tuple[float, float, float] = (0.0, 0.0, 0.0)
    lookat: tuple[float, float, float] = (0.0, 0.0, -1.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = 60.0
    aspect_ratio: float = 1.0

    origin: Vec3 = field(init=False, repr=False)
    u: Vec3 = field(init=False, repr=False)
    v: Vec3 = field(init=False, repr=False)
    w: Vec3 = field(init=False, repr=False)
    horizontal: Vec3 = field(init=False, repr=False)
    vertical: Vec3 = field(init=False, repr=False)
    lower_left: Vec3 = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"Vertical field of view {self.vfov} is outside (0, 180).")
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"Aspect ratio {self.aspect_ratio} must be positive.")
        self.setup()

    def setup(self) -> None:
        """Compute the orthonormal basis and viewport from the view parameters.

        The viewport is a virtual image plane at unit distance from the camera.
        Ray directions are computed by interpolating across this viewport.
        Call again after changing any view parameter.
        """
        theta = math.radians(self.vfov)
        h = math.tan(theta / 2.0)

        # Viewport dimensions at unit distance
        viewport_height = 2.0 * h
        viewport_width = self.aspect_ratio * viewport_height

        lookfrom = np.array(self.lookfrom, dtype=np.float64)
        lookat = np.array(self.lookat, dtype=np.float64)
        vup = np.array(self.vup, dtype=np.float64)

        # w points from lookat toward lookfrom (backward)
        w = lookfrom - lookat
        norm_w = np.linalg.norm(w)
        if norm_w == 0.0:
            raise ValueError("Camera lookfrom and lookat must differ.")
        w = w / norm_w

        # u points right (perpendicular to w and vup)
        u = np.cross(vup, w)
        norm_u = np.linalg.norm(u)
        if norm_u == 0.0:
            raise ValueError("Camera vup must not be parallel to the view direction.")
        u = u / norm_u

        # v points up in the camera's frame
        v = np.cross(w, u)

        self.origin = lookfrom
        self.u, self.v, self.w = u, v, w
        self.horizontal = viewport_width * u
        self.vertical = viewport_height * v
        # Origin - w (move forward) - horizontal/2 (left) - vertical/2 (down)
        self.lower_left = lookfrom - w - self.horizontal / 2.0 - self.vertical / 2.0

    # =========================================================================
    # Ray Generation
    # =========================================================================

    def ray_through(self, x: float, y: float) -> Ray:
        """Generate a ray through normalized image coordinates (x, y).

        The coordinates are normalized:
        - x = 0: left edge of image, x = 1: right edge
        - y = 0: bottom edge of image, y = 1: top edge

        Args:
            x: Horizontal coordinate in [0, 1] (left to right).
            y: Vertical coordinate in [0, 1] (bottom to top).

        Returns:
            A Ray with origin at the camera position and unit direction
            toward the specified point on the image plane.
        """
        point_on_viewport = self.lower_left + x * self.horizontal + y * self.vertical
        return Ray(self.origin, point_on_viewport - self.origin)

    def get_aspect_ratio(self) -> float:
        return self.aspect_ratio

    def get_camera_info(self) -> dict[str, tuple[float, float, float]]:
        """Get current camera vectors for debugging.

        Returns:
            Dictionary with origin, u, v, w, horizontal, vertical, lower_left.
        """
        names = ("origin", "u", "v", "w", "horizontal", "vertical", "lower_left")
        info: dict[str, tuple[float, float, float]] = {}
        for name in names:
            vec = getattr(self, name)
            info[name] = (float(vec[0]), float(vec[1]), float(vec[2]))
        return info

    def to_dict(self) -> dict[str, Any]:
        return {
            "lookfrom": list(self.lookfrom),
            "lookat": list(self.lookat),
            "vup": list(self.vup),
            "vfov": self.vfov,
            "aspect_ratio": self.aspect_ratio,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PinholeCamera:
        """Create a camera from its dictionary form (missing keys take defaults)."""

        def _triple(key: str, default: tuple[float, float, float]) -> tuple[float, float, float]:
            values = data.get(key, default)
            if len(values) != 3:
                raise ValueError(f"Camera {key} must have 3 components, got {len(values)}")
            return (float(values[0]), float(values[1]), float(values[2]))

        return cls(
            lookfrom=_triple("lookfrom", (0.0, 0.0, 0.0)),
            lookat=_triple("lookat", (0.0, 0.0, -1.0)),
            vup=_triple("vup", (0.0, 1.0, 0.0)),
            vfov=float(data.get("vfov", 60.0)),
            aspect_ratio=float(data.get("aspect_ratio", 1.0)),
        )
