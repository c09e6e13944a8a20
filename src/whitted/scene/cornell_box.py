"""Cornell box demo scene for the Whitted tracer.

This module provides a factory function for a Cornell box set up to show off
recursive ray tracing rather than global illumination:

- 5 walls forming an open box (left, right, back, floor, ceiling), all
  facing inward
- Left wall: red diffuse, right wall: green diffuse
- Back, floor, ceiling: white diffuse
- 3 spheres: diffuse (white), mirror (kr), glass (kt, index 1.5)
- A point light below the ceiling with a radius for soft shadows

The box spans 0 to 555 in each dimension, with the camera positioned outside
looking in through the open front.

Example:
    >>> from src.whitted.scene.cornell_box import create_whitted_scene
    >>> scene = create_whitted_scene()
    >>> scene.get_quad_count(), scene.get_sphere_count()
    (5, 3)
"""

from __future__ import annotations

from dataclasses import dataclass

from src.whitted.camera.pinhole import PinholeCamera
from src.whitted.materials.phong import Material
from src.whitted.scene.lights import PointLight
from src.whitted.scene.scene import Scene

# =============================================================================
# Scene Parameters (for interactive preview)
# =============================================================================


@dataclass
class CornellBoxParams:
    """Parameters for configuring the demo scene.

    Attributes:
        light_intensity: Scale applied to the light color.
        light_color: RGB color of the point light.
        light_radius: Radius of the light used for soft shadows.
        left_wall_color: RGB diffuse color of the left wall (red).
        right_wall_color: RGB diffuse color of the right wall (green).
        back_wall_color: RGB diffuse color of the back wall, floor and ceiling.
        glass_index: Refractive index of the glass sphere.
        mirror_reflectivity: Reflectivity (all channels) of the mirror sphere.

    Example:
        >>> params = CornellBoxParams(light_color=(1.0, 0.9, 0.8), glass_index=1.33)
    """

    light_intensity: float = 1.0
    light_color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    light_radius: float = 40.0
    left_wall_color: tuple[float, float, float] = (0.65, 0.05, 0.05)
    right_wall_color: tuple[float, float, float] = (0.12, 0.45, 0.15)
    back_wall_color: tuple[float, float, float] = (0.73, 0.73, 0.73)
    glass_index: float = 1.5
    mirror_reflectivity: float = 0.9


# =============================================================================
# Scene Constants
# =============================================================================

# Classic Cornell box dimensions (approximately 555x555x555 units)
BOX_SIZE = 555.0

# Ambient light and the ambient reflectance given to every surface
AMBIENT_LIGHT = (0.1, 0.1, 0.1)
AMBIENT_REFLECTANCE = 0.5

SPHERE_RADIUS = 80.0


# =============================================================================
# Scene Factory
# =============================================================================


def _diffuse(scene: Scene, name: str, color: tuple[float, float, float]) -> Material:
    return scene.add_material(
        name=name,
        kd=color,
        ka=tuple(AMBIENT_REFLECTANCE * c for c in color),
    )


def create_whitted_scene(
    box_size: float = BOX_SIZE,
    params: CornellBoxParams | None = None,
) -> Scene:
    """Create the Cornell box demo scene.

    The coordinate system places the box origin at (0, 0, 0) with:
    - X-axis: left to right (0 to box_size)
    - Y-axis: floor to ceiling (0 to box_size)
    - Z-axis: front to back (0 to box_size), camera looks toward +Z

    Args:
        box_size: The size of the box in each dimension.
        params: Optional CornellBoxParams for customizing the light, walls
            and sphere materials. If None, uses default CornellBoxParams().

    Returns:
        The populated Scene, camera included.
    """
    if params is None:
        params = CornellBoxParams()

    camera = PinholeCamera(
        lookfrom=(box_size / 2.0, box_size / 2.0, -800.0),
        lookat=(box_size / 2.0, box_size / 2.0, box_size / 2.0),
        vup=(0.0, 1.0, 0.0),
        vfov=40.0,
        aspect_ratio=1.0,
    )
    scene = Scene(camera=camera, ambient=AMBIENT_LIGHT)

    # =========================================================================
    # Materials
    # =========================================================================

    red_mat = _diffuse(scene, "red wall", params.left_wall_color)
    green_mat = _diffuse(scene, "green wall", params.right_wall_color)
    white_mat = _diffuse(scene, "white wall", params.back_wall_color)

    diffuse_mat = scene.add_material(
        name="diffuse",
        kd=(0.73, 0.73, 0.73),
        ka=(0.3, 0.3, 0.3),
        ks=(0.2, 0.2, 0.2),
        shininess=16.0,
    )
    k = params.mirror_reflectivity
    mirror_mat = scene.add_material(
        name="mirror",
        kd=(0.05, 0.05, 0.05),
        ks=(0.8, 0.8, 0.8),
        shininess=64.0,
        kr=(k, k, k),
    )
    glass_mat = scene.add_material(
        name="glass",
        ks=(0.6, 0.6, 0.6),
        shininess=128.0,
        kr=(0.1, 0.1, 0.1),
        kt=(0.9, 0.9, 0.9),
        index=params.glass_index,
    )

    # =========================================================================
    # Walls (5 quads, normals facing into the box)
    # =========================================================================

    # Left wall - YZ plane at x=0, normal +x
    scene.add_quad((0.0, 0.0, 0.0), (0.0, box_size, 0.0), (0.0, 0.0, box_size), red_mat)

    # Right wall - YZ plane at x=box_size, normal -x
    scene.add_quad(
        (box_size, 0.0, box_size), (0.0, box_size, 0.0), (0.0, 0.0, -box_size), green_mat
    )

    # Back wall - XY plane at z=box_size, normal -z
    scene.add_quad((0.0, 0.0, box_size), (0.0, box_size, 0.0), (box_size, 0.0, 0.0), white_mat)

    # Floor - XZ plane at y=0, normal +y
    scene.add_quad((0.0, 0.0, 0.0), (0.0, 0.0, box_size), (box_size, 0.0, 0.0), white_mat)

    # Ceiling - XZ plane at y=box_size, normal -y
    scene.add_quad(
        (0.0, box_size, box_size), (0.0, 0.0, -box_size), (box_size, 0.0, 0.0), white_mat
    )

    # =========================================================================
    # Spheres
    # =========================================================================

    scene.add_sphere((box_size * 0.27, SPHERE_RADIUS, box_size * 0.35), SPHERE_RADIUS, diffuse_mat)
    scene.add_sphere((box_size * 0.73, SPHERE_RADIUS, box_size * 0.35), SPHERE_RADIUS, mirror_mat)
    scene.add_sphere((box_size * 0.5, SPHERE_RADIUS, box_size * 0.65), SPHERE_RADIUS, glass_mat)

    # =========================================================================
    # Light
    # =========================================================================

    color = tuple(params.light_intensity * c for c in params.light_color)
    scene.add_light(
        PointLight(
            position=(box_size / 2.0, box_size - 50.0, box_size / 2.0),
            color=color,
            radius=params.light_radius,
        )
    )

    return scene
