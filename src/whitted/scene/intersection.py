"""Intersection records and scene objects.

An Intersection is produced fresh for every nearest-hit query: the
parametric distance along the ray, the unit surface normal and a reference
to the surface material. Records are immutable; the tracer derives a
flipped copy when the ray is leaving the object it is inside.

A SceneObject pairs a geometric primitive (anything with a
``hit(ray, t_min, t_max)`` method returning ``(t, normal)`` or None) with
the material that covers it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from src.whitted.core.ray import Ray, Vec3, as_vec3
from src.whitted.materials.phong import Material


class Primitive(Protocol):
    """Geometry that can be intersected by a ray."""

    def hit(self, ray: Ray, t_min: float, t_max: float) -> tuple[float, Vec3] | None: ...


@dataclass(frozen=True, eq=False)
class Intersection:
    """Record of the nearest ray-surface intersection.

    Attributes:
        t: The parameter value along the ray where the hit occurred.
        normal: The unit surface normal at the hit point.
        material: The material of the surface that was hit.
    """

    t: float
    normal: Vec3
    material: Material

    def __post_init__(self) -> None:
        object.__setattr__(self, "normal", as_vec3(self.normal))

    def flipped(self) -> Intersection:
        """Copy of this record with the normal reversed."""
        return Intersection(t=self.t, normal=-self.normal, material=self.material)


@dataclass(frozen=True, eq=False)
class SceneObject:
    """A primitive with its material.

    Attributes:
        geometry: The primitive (Sphere, Quad, ...).
        material: The material covering the primitive.
    """

    geometry: Primitive
    material: Material

    def intersect(self, ray: Ray, t_min: float, t_max: float) -> Intersection | None:
        hit = self.geometry.hit(ray, t_min, t_max)
        if hit is None:
            return None
        t, normal = hit
        return Intersection(t=t, normal=normal, material=self.material)
