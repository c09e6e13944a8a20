"""Scene serialization: JSON scene files and dictionary round-trips.

A scene file is a JSON object with the following optional keys:

    {
        "camera": {"lookfrom": [...], "lookat": [...], "vup": [...],
                   "vfov": 60.0, "aspect_ratio": 1.0},
        "ambient": [r, g, b],
        "materials": [{"name": "glass", "kd": [...], "kt": [...],
                       "index": 1.5, ...}, ...],
        "spheres": [{"center": [...], "radius": 1.0, "material": 0}, ...],
        "quads": [{"corner": [...], "edge_u": [...], "edge_v": [...],
                   "material": 0}, ...],
        "boxes": [{"min": [...], "max": [...], "material": 0}, ...],
        "lights": [{"type": "point", "position": [...], "color": [...],
                    "attenuation": [c, l, q], "radius": 0.0},
                   {"type": "directional", "direction": [...],
                    "color": [...]}]
    }

Objects reference materials by their position in the "materials" list.

Any failure to read or interpret a file is raised as SceneLoadError. A file
that parses but contains no objects loads successfully as an empty scene;
callers tell the two outcomes apart by the exception versus Scene.is_empty.

Example:
    >>> from src.whitted.scene.loader import load_scene_file
    >>> scene = load_scene_file("scenes/glass.json")
    >>> scene.is_empty
    False
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from src.whitted.camera.pinhole import PinholeCamera
from src.whitted.core.ray import as_vec3
from src.whitted.errors import SceneLoadError
from src.whitted.geometry.quad import Quad
from src.whitted.geometry.sphere import Sphere
from src.whitted.scene.lights import light_from_dict
from src.whitted.scene.scene import Scene

logger = logging.getLogger(__name__)

MATERIAL_KEYS = frozenset({"name", "ke", "ka", "ks", "kd", "kr", "kt", "shininess", "index"})


def scene_from_dict(data: dict[str, Any], source: str | None = None) -> Scene:
    """Build a Scene from its dictionary form.

    Args:
        data: The scene description (see module docstring).
        source: Optional description of where the data came from, used in
            error messages.

    Returns:
        The constructed Scene.

    Raises:
        SceneLoadError: If the description is malformed.
    """
    if not isinstance(data, dict):
        raise SceneLoadError(f"Scene description must be an object, got {type(data).__name__}", source)

    try:
        camera = PinholeCamera.from_dict(data.get("camera", {}))
        scene = Scene(camera=camera, ambient=data.get("ambient"))

        for i, mat_config in enumerate(data.get("materials", [])):
            unknown = sorted(set(mat_config) - MATERIAL_KEYS)
            if unknown:
                raise ValueError(f"Material {i} has unknown keys: {', '.join(unknown)}")
            scene.add_material(**mat_config)

        for sphere_config in data.get("spheres", []):
            material = scene.get_material(int(sphere_config.get("material", 0)))
            scene.add_sphere(
                as_vec3(sphere_config["center"]), float(sphere_config["radius"]), material
            )

        for quad_config in data.get("quads", []):
            material = scene.get_material(int(quad_config.get("material", 0)))
            scene.add_quad(
                as_vec3(quad_config["corner"]),
                as_vec3(quad_config["edge_u"]),
                as_vec3(quad_config["edge_v"]),
                material,
            )

        for box_config in data.get("boxes", []):
            material = scene.get_material(int(box_config.get("material", 0)))
            scene.add_box(as_vec3(box_config["min"]), as_vec3(box_config["max"]), material)

        for light_config in data.get("lights", []):
            scene.add_light(light_from_dict(light_config))

    except KeyError as e:
        raise SceneLoadError(f"Missing required key {e}", source) from e
    except (TypeError, ValueError, RuntimeError) as e:
        raise SceneLoadError(str(e), source) from e

    return scene


def scene_to_dict(scene: Scene) -> dict[str, Any]:
    """Export a scene to a dictionary (for JSON serialization).

    Boxes are exported as their six individual quads.

    Raises:
        ValueError: If the scene contains a primitive type that cannot be serialized.
    """
    spheres: list[dict[str, Any]] = []
    quads: list[dict[str, Any]] = []
    for obj in scene.objects:
        geometry = obj.geometry
        if isinstance(geometry, Sphere):
            spheres.append(
                {
                    "center": geometry.center.tolist(),
                    "radius": geometry.radius,
                    "material": obj.material.material_id,
                }
            )
        elif isinstance(geometry, Quad):
            quads.append(
                {
                    "corner": geometry.Q.tolist(),
                    "edge_u": geometry.u.tolist(),
                    "edge_v": geometry.v.tolist(),
                    "material": obj.material.material_id,
                }
            )
        else:
            raise ValueError(f"Cannot serialize primitive {type(geometry).__name__}")

    return {
        "camera": scene.camera.to_dict(),
        "ambient": scene.ambient.tolist(),
        "materials": [m.to_dict() for m in scene.materials],
        "spheres": spheres,
        "quads": quads,
        "lights": [light.to_dict() for light in scene.lights],
    }


def load_scene_file(path: str | Path) -> Scene:
    """Read a JSON scene file.

    Args:
        path: Path to the scene file.

    Returns:
        The loaded Scene (possibly empty).

    Raises:
        SceneLoadError: If the file cannot be read, is not valid JSON, or
            does not describe a valid scene.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SceneLoadError(f"Cannot read scene file: {e.strerror or e}", str(path)) from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SceneLoadError(f"Invalid JSON at line {e.lineno}: {e.msg}", str(path)) from e

    scene = scene_from_dict(data, source=str(path))
    logger.debug(
        "Parsed %s: %d objects, %d materials, %d lights",
        path,
        len(scene.objects),
        len(scene.materials),
        len(scene.lights),
    )
    return scene


def save_scene_file(scene: Scene, path: str | Path) -> None:
    """Write a scene to a JSON file."""
    Path(path).write_text(json.dumps(scene_to_dict(scene), indent=2), encoding="utf-8")
