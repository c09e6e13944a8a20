"""Sphere primitive with robust ray-sphere intersection.

This module provides a Sphere dataclass and intersection function using the
robust quadratic formula from Ray Tracing Gems to avoid floating-point artifacts.

The robust quadratic formula avoids catastrophic cancellation when b^2 is
nearly equal to 4ac by using a reformulated calculation that maintains
numerical stability.

Normals are returned pointing outward from the center regardless of which
side the ray arrives from; the tracer flips them when a ray leaves the
medium it is inside.

Example:
    >>> from src.whitted.core.ray import Ray, vec3
    >>> from src.whitted.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=vec3(0, 0, -3), radius=1.0)
    >>> t, normal = hit_sphere(Ray(vec3(0, 0, 0), vec3(0, 0, -1)), sphere, 1e-4, 1e9)
    >>> t
    2.0
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from src.whitted.core.ray import Ray, Vec3, as_vec3, dot


@dataclass(frozen=True, eq=False)
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere.
        radius: The radius of the sphere (positive float).
    """

    center: Vec3
    radius: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", as_vec3(self.center))
        if self.radius <= 0.0:
            raise ValueError(f"Sphere radius = {self.radius} must be positive.")

    def hit(self, ray: Ray, t_min: float, t_max: float) -> tuple[float, Vec3] | None:
        return hit_sphere(ray, self, t_min, t_max)

    def outward_normal(self, point: Vec3) -> Vec3:
        """Unit normal at a point on the surface, pointing away from the center."""
        return (point - self.center) / self.radius


def _solve_quadratic_robust(h: float, a: float, c: float, sqrt_d: float) -> tuple[float, float]:
    """Solve quadratic equation using robust formula from Ray Tracing Gems.

    Solves a*t^2 + 2*h*t + c = 0 using a numerically stable method.

    Args:
        h: Half of the linear coefficient.
        a: Quadratic coefficient.
        c: Constant term.
        sqrt_d: Square root of discriminant (h^2 - a*c).

    Returns:
        Tuple of (t0, t1) where t0 <= t1.
    """
    # q = -(h + sign(h) * sqrt(discriminant))
    sign_h = -1.0 if h < 0.0 else 1.0
    q = -(h + sign_h * sqrt_d)

    if abs(q) < 1e-12:
        # Fall back to standard formula for edge cases
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        t0, t1 = t1, t0

    return t0, t1


def hit_sphere(
    ray: Ray,
    sphere: Sphere,
    t_min: float,
    t_max: float,
) -> tuple[float, Vec3] | None:
    """Test for ray-sphere intersection using robust quadratic formula.

    The ray-sphere intersection is found by solving:
        |origin + t * direction - center|^2 = radius^2

    Expanding and rearranging gives the quadratic equation:
        a*t^2 + 2*h*t + c = 0

    where:
        a = dot(direction, direction)
        h = dot(direction, oc)  (half of traditional b)
        c = dot(oc, oc) - radius^2
        oc = origin - center

    Args:
        ray: The ray to test.
        sphere: The sphere to test intersection against.
        t_min: Minimum t value to consider a valid hit (avoids self-intersection).
        t_max: Maximum t value to consider a valid hit.

    Returns:
        A (t, outward_normal) tuple for the nearest valid root, or None on a miss.
    """
    oc = ray.origin - sphere.center

    a = dot(ray.direction, ray.direction)
    h = dot(ray.direction, oc)
    c = dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = h * h - a * c
    if discriminant < 0.0:
        return None

    t0, t1 = _solve_quadratic_robust(h, a, c, math.sqrt(discriminant))

    # Nearest root inside (t_min, t_max); the far root covers rays starting inside
    for t in (t0, t1):
        if t_min < t < t_max:
            return t, sphere.outward_normal(ray.at(t))

    return None
