"""Cone sampler for glossy reflection.

Generates unit directions distributed uniformly over the spherical cap of a
given half-angle around a center direction. The orthonormal frame around the
center is built once at construction; each call to generate() draws two
uniform numbers from the sampler's generator and is otherwise independent
of previous calls.

Example:
    >>> import numpy as np
    >>> from src.whitted.core.cone import ConeSampler
    >>> from src.whitted.core.ray import vec3
    >>> sampler = ConeSampler(vec3(0, 0, 1), 0.1, rng=np.random.default_rng(7))
    >>> direction = sampler.generate()
"""

from __future__ import annotations

import math
from collections.abc import Iterator

import numpy as np

from src.whitted.core.ray import Vec3, as_vec3, build_onb, normalize

# Half-angle (radians) of the glossy reflection cone
GLOSSY_CONE_HALF_ANGLE = 0.1


class ConeSampler:
    """Uniform direction sampler over a cone around a center direction.

    Attributes:
        center: The unit cone axis.
        half_angle: The cone half-angle in radians.
    """

    def __init__(
        self,
        center: Vec3,
        half_angle: float = GLOSSY_CONE_HALF_ANGLE,
        rng: np.random.Generator | None = None,
    ) -> None:
        if not 0.0 <= half_angle <= math.pi:
            raise ValueError(f"Cone half-angle {half_angle} is outside [0, pi].")

        self.center = normalize(as_vec3(center))
        if not np.any(self.center):
            raise ValueError("Cone center direction must be non-zero.")

        self.half_angle = half_angle
        self._cos_max = math.cos(half_angle)
        self._tangent, self._bitangent, _ = build_onb(self.center)
        self._rng = rng if rng is not None else np.random.default_rng()

    def generate(self) -> Vec3:
        """Draw one unit direction inside the cone."""
        u1, u2 = self._rng.random(2)

        # Uniform over the cap: cos(theta) uniform in [cos_max, 1]
        cos_theta = 1.0 - u1 * (1.0 - self._cos_max)
        sin_theta = math.sqrt(max(0.0, 1.0 - cos_theta * cos_theta))
        phi = 2.0 * math.pi * u2

        direction = (
            sin_theta * math.cos(phi) * self._tangent
            + sin_theta * math.sin(phi) * self._bitangent
            + cos_theta * self.center
        )
        return normalize(direction)

    def __iter__(self) -> Iterator[Vec3]:
        while True:
            yield self.generate()
