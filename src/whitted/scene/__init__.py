"""Scene module: the provider answering the tracer's queries.

Components:
    intersection: Intersection records and scene objects
    lights: Point and directional lights with shadow attenuation
    scene: Scene container with nearest-hit intersection
    loader: JSON scene files and dictionary (de)serialization
    cornell_box: Demo scene factory
"""

from .cornell_box import BOX_SIZE, CornellBoxParams, create_whitted_scene
from .intersection import Intersection, SceneObject
from .lights import DirectionalLight, Light, PointLight, light_from_dict
from .loader import load_scene_file, save_scene_file, scene_from_dict, scene_to_dict
from .scene import Scene

__all__ = [
    "Scene",
    "Intersection",
    "SceneObject",
    "Light",
    "PointLight",
    "DirectionalLight",
    "light_from_dict",
    "load_scene_file",
    "save_scene_file",
    "scene_from_dict",
    "scene_to_dict",
    "BOX_SIZE",
    "CornellBoxParams",
    "create_whitted_scene",
]
