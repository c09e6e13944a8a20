"""Light sources used by local shading.

Two light types are supported:

- PointLight: positioned light with constant/linear/quadratic distance
  attenuation and an optional radius used for soft shadows.
- DirectionalLight: light arriving from a fixed direction with no falloff.

Shadow attenuation walks a shadow ray toward the light. Every surface in
between multiplies the light by its transmissivity kt, so opaque occluders
block it entirely and transparent ones tint it.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import numpy as np

from src.whitted.core.config import TraceConfig
from src.whitted.core.ray import (
    RAY_EPSILON,
    Ray,
    Vec3,
    as_vec3,
    is_zero,
    length,
    normalize,
    zeros,
)

if TYPE_CHECKING:
    from src.whitted.scene.scene import Scene

# Upper bound on transparent occluders crossed by one shadow ray
MAX_SHADOW_CROSSINGS = 64


def _transmission(scene: Scene, origin: Vec3, direction: Vec3, max_distance: float) -> Vec3:
    """Fraction of light passing from origin along direction for max_distance."""
    atten = np.ones(3, dtype=np.float64)
    remaining = max_distance

    for _ in range(MAX_SHADOW_CROSSINGS):
        ray = Ray(origin, direction)
        hit = scene.intersect(ray, t_max=remaining)
        if hit is None:
            return atten

        kt = hit.material.kt
        if is_zero(kt):
            return zeros()
        atten = atten * kt

        # Continue just past the occluder
        origin = ray.at(hit.t) + ray.direction * RAY_EPSILON
        remaining -= hit.t + RAY_EPSILON
        if remaining <= 0.0:
            return atten

    return atten


@dataclass(frozen=True, eq=False)
class PointLight:
    """Point light with quadratic distance falloff.

    Attributes:
        position: Light position in world space.
        color: Light color (RGB intensity).
        constant: Constant distance attenuation coefficient.
        linear: Linear distance attenuation coefficient.
        quadratic: Quadratic distance attenuation coefficient.
        radius: Radius of the emitting sphere for soft shadows (0 = hard).
    """

    position: Vec3
    color: Vec3
    constant: float = 1.0
    linear: float = 0.0
    quadratic: float = 0.0
    radius: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", as_vec3(self.position))
        object.__setattr__(self, "color", as_vec3(self.color))
        if min(self.constant, self.linear, self.quadratic) < 0.0:
            raise ValueError("Point light attenuation coefficients must be non-negative.")
        if self.radius < 0.0:
            raise ValueError(f"Point light radius = {self.radius} is negative.")

    def direction_from(self, point: Vec3) -> Vec3:
        return normalize(self.position - point)

    def distance_attenuation(self, point: Vec3, config: TraceConfig) -> float:
        """min(1, 1 / (c + l*d + q*d^2)) with the light's or the overriding terms."""
        if config.override_distance_attenuation:
            c, lin, q = config.distance_constant, config.distance_linear, config.distance_quadratic
        else:
            c, lin, q = self.constant, self.linear, self.quadratic

        d = length(self.position - point)
        denom = c + lin * d + q * d * d
        if denom <= 0.0:
            return 1.0
        return min(1.0, 1.0 / denom)

    def shadow_attenuation(
        self,
        scene: Scene,
        point: Vec3,
        config: TraceConfig,
        rng: np.random.Generator | None = None,
    ) -> Vec3:
        """Transmitted fraction of this light reaching point (RGB)."""
        if not config.shadows:
            return np.ones(3, dtype=np.float64)

        if not (config.soft_shadows and self.radius > 0.0):
            return self._shadow_toward(scene, point, self.position)

        rng = rng if rng is not None else np.random.default_rng()
        total = zeros()
        for _ in range(config.soft_shadow_samples):
            total = total + self._shadow_toward(scene, point, self._sample_surface(rng))
        return total / config.soft_shadow_samples

    def _sample_surface(self, rng: np.random.Generator) -> Vec3:
        """Uniform point inside the light's sphere."""
        u1, u2, u3 = rng.random(3)
        cos_theta = 1.0 - 2.0 * u1
        sin_theta = math.sqrt(max(0.0, 1.0 - cos_theta * cos_theta))
        phi = 2.0 * math.pi * u2
        r = self.radius * u3 ** (1.0 / 3.0)
        offset = np.array(
            (r * sin_theta * math.cos(phi), r * sin_theta * math.sin(phi), r * cos_theta)
        )
        return self.position + offset

    @staticmethod
    def _shadow_toward(scene: Scene, point: Vec3, target: Vec3) -> Vec3:
        to_target = target - point
        distance = length(to_target)
        if distance == 0.0:
            return np.ones(3, dtype=np.float64)
        return _transmission(scene, point, to_target / distance, distance)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "point",
            "position": self.position.tolist(),
            "color": self.color.tolist(),
            "attenuation": [self.constant, self.linear, self.quadratic],
            "radius": self.radius,
        }


@dataclass(frozen=True, eq=False)
class DirectionalLight:
    """Light arriving from infinitely far away along a fixed direction.

    Attributes:
        direction: Direction the light travels (from the light toward the scene).
        color: Light color (RGB intensity).
    """

    direction: Vec3
    color: Vec3

    def __post_init__(self) -> None:
        direction = normalize(as_vec3(self.direction))
        if is_zero(direction):
            raise ValueError("Directional light direction must be non-zero.")
        object.__setattr__(self, "direction", direction)
        object.__setattr__(self, "color", as_vec3(self.color))

    def direction_from(self, point: Vec3) -> Vec3:
        return -self.direction

    def distance_attenuation(self, point: Vec3, config: TraceConfig) -> float:
        return 1.0

    def shadow_attenuation(
        self,
        scene: Scene,
        point: Vec3,
        config: TraceConfig,
        rng: np.random.Generator | None = None,
    ) -> Vec3:
        if not config.shadows:
            return np.ones(3, dtype=np.float64)
        return _transmission(scene, point, -self.direction, math.inf)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "directional",
            "direction": self.direction.tolist(),
            "color": self.color.tolist(),
        }


Light = PointLight | DirectionalLight


def light_from_dict(data: dict[str, Any]) -> Light:
    """Create a light from its dictionary form.

    Raises:
        ValueError: If the light type is unknown or a value is invalid.
        KeyError: If a required key is missing.
    """
    light_type = str(data.get("type", "point")).lower()
    color: Sequence[float] = data.get("color", [1.0, 1.0, 1.0])
    if light_type == "point":
        c, lin, q = data.get("attenuation", [1.0, 0.0, 0.0])
        return PointLight(
            position=as_vec3(data["position"]),
            color=as_vec3(color),
            constant=float(c),
            linear=float(lin),
            quadratic=float(q),
            radius=float(data.get("radius", 0.0)),
        )
    if light_type == "directional":
        return DirectionalLight(direction=as_vec3(data["direction"]), color=as_vec3(color))
    raise ValueError(f"Unknown light type: {light_type}")
