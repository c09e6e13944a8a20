"""Phong-like material model with local shading.

A material carries the coefficients used by the local illumination model
(emissive, ambient, diffuse, specular, shininess) and the coefficients the
recursive tracer reads to spawn secondary rays (reflectivity kr,
transmissivity kt, refractive index).

The local shading at a hit point is:

    ke + ka * ambient
       + sum over lights of  atten * light_color * (kd * max(N.L, 0)
                                                    + ks * max(R.V, 0)^shininess)

where atten combines distance attenuation and shadow attenuation.

Materials are identified by a stable integer material_id. Two material
references denote the same medium exactly when their ids are equal, which
is what the material stack compares when deciding whether a ray is leaving
the object it is inside.

Example:
    >>> from src.whitted.materials.phong import Material
    >>> glass = Material(material_id=3, kt=(0.9, 0.9, 0.9), index=1.5)
    >>> glass.is_transmissive
    True
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import numpy as np

from src.whitted.core.config import DEFAULT_CONFIG, TraceConfig
from src.whitted.core.ray import RAY_EPSILON, Vec3, as_vec3, dot, is_zero, reflect, zeros

if TYPE_CHECKING:
    from src.whitted.core.ray import Ray
    from src.whitted.scene.intersection import Intersection
    from src.whitted.scene.scene import Scene

# Identity of the synthetic ambient medium (never assigned to scene materials)
AIR_MATERIAL_ID = -1

# Names of the per-channel coefficients
COLOR_FIELDS = ("ke", "ka", "ks", "kd", "kr", "kt")


def _color(value: Sequence[float] | Vec3 | None = None) -> Vec3:
    return zeros() if value is None else as_vec3(value)


@dataclass(frozen=True, eq=False)
class Material:
    """Surface and volume properties of a scene object.

    Attributes:
        material_id: Stable identity of the material within its scene.
        name: Optional human readable name.
        ke: Emissive color.
        ka: Ambient reflectance.
        ks: Specular reflectance.
        kd: Diffuse reflectance.
        kr: Reflectivity used for mirror/glossy reflection rays.
        kt: Transmissivity used for refraction and shadow rays.
        shininess: Phong specular exponent.
        index: Refractive index of the material's interior.
    """

    material_id: int
    name: str = ""
    ke: Vec3 = field(default_factory=zeros)
    ka: Vec3 = field(default_factory=zeros)
    ks: Vec3 = field(default_factory=zeros)
    kd: Vec3 = field(default_factory=zeros)
    kr: Vec3 = field(default_factory=zeros)
    kt: Vec3 = field(default_factory=zeros)
    shininess: float = 0.0
    index: float = 1.0

    def __post_init__(self) -> None:
        for name in COLOR_FIELDS:
            value = _color(getattr(self, name))
            if np.any(value < 0.0):
                raise ValueError(f"Material {name} = {value.tolist()} has a negative component.")
            object.__setattr__(self, name, value)

        # Secondary ray weights must never grow along a path
        for name in ("kr", "kt"):
            value = getattr(self, name)
            if np.any(value > 1.0):
                raise ValueError(f"Material {name} = {value.tolist()} is outside [0, 1].")

        if self.shininess < 0.0:
            raise ValueError(f"Shininess = {self.shininess} is negative.")
        if self.index <= 0.0:
            raise ValueError(f"Refractive index = {self.index} must be positive.")

    @property
    def is_reflective(self) -> bool:
        return not is_zero(self.kr)

    @property
    def is_transmissive(self) -> bool:
        return not is_zero(self.kt)

    def same_medium(self, other: Material) -> bool:
        """True when both references denote the same material identity."""
        return self.material_id == other.material_id

    def shade(
        self,
        scene: Scene,
        ray: Ray,
        isect: Intersection,
        config: TraceConfig = DEFAULT_CONFIG,
        rng: np.random.Generator | None = None,
    ) -> Vec3:
        """Compute the locally shaded color at an intersection.

        Args:
            scene: The scene providing lights, ambient light and occluders.
            ray: The ray that produced the intersection.
            isect: The intersection record. Its normal must face the side
                the ray arrived from.
            config: Shadow and attenuation settings for this pass.
            rng: Random generator for soft shadow sampling.

        Returns:
            The unclamped local radiance (RGB).
        """
        point = ray.at(isect.t)
        normal = isect.normal
        view = -ray.direction

        color = self.ke + self.ka * scene.ambient

        # Shadow rays start just above the surface
        shadow_origin = point + normal * RAY_EPSILON

        for light in scene.lights:
            to_light = light.direction_from(point)
            n_dot_l = dot(normal, to_light)
            if n_dot_l <= 0.0:
                continue

            atten = light.distance_attenuation(point, config) * light.shadow_attenuation(
                scene, shadow_origin, config, rng
            )
            if is_zero(atten):
                continue

            diffuse = self.kd * n_dot_l
            r_dot_v = dot(reflect(-to_light, normal), view)
            specular = self.ks * (r_dot_v**self.shininess) if r_dot_v > 0.0 else zeros()

            color = color + atten * light.color * (diffuse + specular)

        return color

    def to_dict(self) -> dict[str, Any]:
        """Export the material parameters (without its id) to a dictionary."""
        data: dict[str, Any] = {"name": self.name}
        for name in COLOR_FIELDS:
            data[name] = getattr(self, name).tolist()
        data["shininess"] = self.shininess
        data["index"] = self.index
        return data

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        return f"Material(id={self.material_id}{label}, index={self.index})"


AIR = Material(material_id=AIR_MATERIAL_ID, name="air", index=1.0)
