"""Quad primitive with ray-quad intersection.

A quad is defined by:
- Q: A corner point of the quad
- u: Edge vector from Q to adjacent corner
- v: Edge vector from Q to other adjacent corner

The quad spans the parallelogram from Q to Q+u+v. Its normal is
normalize(cross(u, v)), pointing in the direction given by the right-hand
rule; intersection always reports this geometric normal. Closed boxes built
with box_quads() orient every face outward, so they can bound refractive
volumes just like spheres.

Ray-quad intersection uses the parametric plane test:
1. Find where ray intersects the plane containing the quad
2. Check if the intersection point lies within the quad bounds

Example:
    >>> from src.whitted.core.ray import vec3
    >>> from src.whitted.geometry.quad import Quad
    >>> # Floor quad at y=0, spanning x=[0,1] and z=[0,1], normal facing +y
    >>> floor = Quad(Q=vec3(0, 0, 0), u=vec3(0, 0, 1), v=vec3(1, 0, 0))
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np

from src.whitted.core.ray import Ray, Vec3, as_vec3, cross, dot, length, vec3


@dataclass(frozen=True, eq=False)
class Quad:
    """A quad (parallelogram) defined by a corner point and two edge vectors.

    Attributes:
        Q: The corner point of the quad.
        u: Edge vector from Q to adjacent corner.
        v: Edge vector from Q to other adjacent corner.
    """

    Q: Vec3
    u: Vec3
    v: Vec3
    normal: Vec3 = field(init=False)
    _d: float = field(init=False, repr=False)
    _w_u: Vec3 = field(init=False, repr=False)
    _w_v: Vec3 = field(init=False, repr=False)

    def __post_init__(self) -> None:
        q, u, v = as_vec3(self.Q), as_vec3(self.u), as_vec3(self.v)
        n = cross(u, v)
        n_dot_n = dot(n, n)
        if n_dot_n <= 1e-20:
            raise ValueError("Quad edges must not be parallel or zero-length.")

        normal = n / np.sqrt(n_dot_n)
        object.__setattr__(self, "Q", q)
        object.__setattr__(self, "u", u)
        object.__setattr__(self, "v", v)
        object.__setattr__(self, "normal", normal)
        # Plane equation: dot(normal, P) = d
        object.__setattr__(self, "_d", dot(normal, q))
        # alpha = dot(w_u, P - Q), beta = dot(w_v, P - Q)
        object.__setattr__(self, "_w_u", cross(v, n) / n_dot_n)
        object.__setattr__(self, "_w_v", cross(n, u) / n_dot_n)

    @property
    def area(self) -> float:
        return length(cross(self.u, self.v))

    def hit(self, ray: Ray, t_min: float, t_max: float) -> tuple[float, Vec3] | None:
        return hit_quad(ray, self, t_min, t_max)


def hit_quad(
    ray: Ray,
    quad: Quad,
    t_min: float,
    t_max: float,
) -> tuple[float, Vec3] | None:
    """Test for ray-quad intersection.

    Uses parametric plane intersection followed by bounds checking:
    1. Compute where ray hits the plane containing the quad
    2. Express hit point in quad's local coordinates (alpha, beta)
    3. Check if 0 <= alpha <= 1 and 0 <= beta <= 1

    Args:
        ray: The ray to test.
        quad: The quad to test intersection against.
        t_min: Minimum t value to consider a valid hit (avoids self-intersection).
        t_max: Maximum t value to consider a valid hit.

    Returns:
        A (t, normal) tuple with the quad's geometric normal, or None on a miss.
    """
    denom = dot(quad.normal, ray.direction)

    # Ray parallel to the plane
    if abs(denom) < 1e-12:
        return None

    t = (quad._d - dot(quad.normal, ray.origin)) / denom
    if not t_min < t < t_max:
        return None

    p_minus_q = ray.at(t) - quad.Q
    alpha = dot(quad._w_u, p_minus_q)
    beta = dot(quad._w_v, p_minus_q)
    if not (0.0 <= alpha <= 1.0 and 0.0 <= beta <= 1.0):
        return None

    return t, quad.normal


def box_quads(
    min_corner: Sequence[float] | Vec3,
    max_corner: Sequence[float] | Vec3,
) -> list[Quad]:
    """Build the six faces of an axis-aligned box with outward normals.

    Args:
        min_corner: The minimum (x, y, z) corner.
        max_corner: The maximum (x, y, z) corner.

    Returns:
        Six quads: -x, +x, -y, +y, -z, +z faces.

    Raises:
        ValueError: If the box has zero or negative extent on any axis.
    """
    lo, hi = as_vec3(min_corner), as_vec3(max_corner)
    if np.any(hi <= lo):
        raise ValueError(f"Box extent must be positive: min={lo.tolist()} max={hi.tolist()}")

    dx = vec3(hi[0] - lo[0], 0.0, 0.0)
    dy = vec3(0.0, hi[1] - lo[1], 0.0)
    dz = vec3(0.0, 0.0, hi[2] - lo[2])

    return [
        Quad(Q=lo, u=dz, v=dy),  # -x: cross(z, y) = -x
        Quad(Q=hi, u=-dy, v=-dz),  # +x: cross(-y, -z) = +x
        Quad(Q=lo, u=dx, v=dz),  # -y: cross(x, z) = -y
        Quad(Q=hi, u=-dz, v=-dx),  # +y: cross(-z, -x) = +y
        Quad(Q=lo, u=dy, v=dx),  # -z: cross(y, x) = -z
        Quad(Q=hi, u=-dx, v=-dy),  # +z: cross(-x, -y) = +z
    ]
