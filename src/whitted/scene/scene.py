"""Scene container answering nearest-hit queries.

The Scene owns the camera, the ambient light, the materials, the lights and
the list of objects. It provides the two capabilities the tracer consumes:
``intersect(ray)`` for the nearest hit and ``camera.ray_through(x, y)`` for
primary rays. Objects are tested linearly; scenes are read-only while a
render pass is running.

Example:
    >>> from src.whitted.scene.scene import Scene
    >>> from src.whitted.scene.lights import PointLight
    >>> scene = Scene()
    >>> red = scene.add_material(kd=(0.8, 0.1, 0.1))
    >>> glass = scene.add_material(kt=(0.9, 0.9, 0.9), index=1.5)
    >>> scene.add_sphere((0, 0, -3), 1.0, red)
    >>> scene.add_light(PointLight(position=(0, 5, 0), color=(1, 1, 1)))
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from src.whitted.camera.pinhole import PinholeCamera
from src.whitted.core.ray import T_MAX, T_MIN, Ray, Vec3, as_vec3, zeros
from src.whitted.geometry.quad import Quad, box_quads
from src.whitted.geometry.sphere import Sphere
from src.whitted.materials.phong import Material
from src.whitted.scene.intersection import Intersection, SceneObject
from src.whitted.scene.lights import Light

# Maximum number of materials per scene
MAX_MATERIALS = 1024


class Scene:
    """Geometry, materials, lights and camera of a renderable scene.

    Attributes:
        camera: The camera generating primary rays.
        ambient: Ambient light color (RGB).
        materials: Registered materials, indexed by material_id.
        objects: Primitives with their materials.
        lights: Light sources.
    """

    def __init__(
        self,
        camera: PinholeCamera | None = None,
        ambient: Sequence[float] | Vec3 | None = None,
    ) -> None:
        self.camera = camera if camera is not None else PinholeCamera()
        self.ambient = zeros() if ambient is None else as_vec3(ambient)
        self.materials: list[Material] = []
        self.objects: list[SceneObject] = []
        self.lights: list[Light] = []

    # =========================================================================
    # Material Management
    # =========================================================================

    def add_material(self, **params: Any) -> Material:
        """Register a new material and assign it the next material_id.

        Args:
            **params: Material fields (name, ke, ka, ks, kd, kr, kt,
                shininess, index).

        Returns:
            The registered Material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If a parameter is invalid.
        """
        material_id = len(self.materials)
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")
        params.pop("material_id", None)
        material = Material(material_id=material_id, **params)
        self.materials.append(material)
        return material

    def get_material(self, material_id: int) -> Material:
        """Look up a registered material.

        Raises:
            ValueError: If no material with that id exists in this scene.
        """
        if not 0 <= material_id < len(self.materials):
            raise ValueError(f"Invalid material_id: {material_id}")
        return self.materials[material_id]

    def _check_material(self, material: Material) -> None:
        registered = self.get_material(material.material_id)
        if registered is not material:
            raise ValueError(f"Material {material!r} is not registered in this scene")

    # =========================================================================
    # Object Management
    # =========================================================================

    def add_object(self, geometry: Any, material: Material) -> SceneObject:
        """Add any primitive with a hit(ray, t_min, t_max) method."""
        self._check_material(material)
        obj = SceneObject(geometry=geometry, material=material)
        self.objects.append(obj)
        return obj

    def add_sphere(
        self,
        center: Sequence[float] | Vec3,
        radius: float,
        material: Material,
    ) -> SceneObject:
        return self.add_object(Sphere(center=as_vec3(center), radius=radius), material)

    def add_quad(
        self,
        corner: Sequence[float] | Vec3,
        edge_u: Sequence[float] | Vec3,
        edge_v: Sequence[float] | Vec3,
        material: Material,
    ) -> SceneObject:
        quad = Quad(Q=as_vec3(corner), u=as_vec3(edge_u), v=as_vec3(edge_v))
        return self.add_object(quad, material)

    def add_box(
        self,
        min_corner: Sequence[float] | Vec3,
        max_corner: Sequence[float] | Vec3,
        material: Material,
    ) -> list[SceneObject]:
        """Add the six outward-facing faces of an axis-aligned box."""
        return [self.add_object(face, material) for face in box_quads(min_corner, max_corner)]

    def add_light(self, light: Light) -> Light:
        self.lights.append(light)
        return light

    def clear(self) -> None:
        """Remove all materials, objects and lights (camera and ambient are kept)."""
        self.materials.clear()
        self.objects.clear()
        self.lights.clear()

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def intersect(self, ray: Ray, t_min: float = T_MIN, t_max: float = T_MAX) -> Intersection | None:
        """Find the nearest intersection along a ray.

        Args:
            ray: The query ray.
            t_min: Minimum accepted parameter value.
            t_max: Maximum accepted parameter value.

        Returns:
            The nearest Intersection, or None when the ray escapes.
        """
        closest: Intersection | None = None
        closest_t = t_max
        for obj in self.objects:
            hit = obj.intersect(ray, t_min, closest_t)
            if hit is not None:
                closest = hit
                closest_t = hit.t
        return closest

    @property
    def is_empty(self) -> bool:
        """True when the scene contains no geometry."""
        return not self.objects

    def get_sphere_count(self) -> int:
        return sum(1 for obj in self.objects if isinstance(obj.geometry, Sphere))

    def get_quad_count(self) -> int:
        return sum(1 for obj in self.objects if isinstance(obj.geometry, Quad))

    def get_primitive_count(self) -> int:
        return len(self.objects)

    def __repr__(self) -> str:
        return (
            f"Scene(objects={len(self.objects)}, materials={len(self.materials)}, "
            f"lights={len(self.lights)})"
        )
