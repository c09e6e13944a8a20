"""Pytest configuration for ray tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization (used by the interactive preview) which must happen
once per session, and small scenes whose shading can be computed by hand.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


class ForbiddenScene:
    """Scene stub that fails the test if it is ever queried."""

    def __init__(self):
        from src.whitted.camera.pinhole import PinholeCamera

        self.camera = PinholeCamera()
        self.ambient = None
        self.lights = []

    def intersect(self, ray, t_min=1e-4, t_max=float("inf")):
        raise AssertionError("scene.intersect() must not be called")


class CountingScene:
    """Scene wrapper counting intersection queries."""

    def __init__(self, scene):
        self._scene = scene
        self.camera = scene.camera
        self.ambient = scene.ambient
        self.lights = scene.lights
        self.queries = 0

    def intersect(self, ray, t_min=1e-4, t_max=float("inf")):
        self.queries += 1
        return self._scene.intersect(ray, t_min, t_max)


@pytest.fixture
def forbidden_scene():
    return ForbiddenScene()


@pytest.fixture
def counting_scene():
    return CountingScene


@pytest.fixture
def empty_scene():
    """Scene without any geometry (camera at the origin looking down -z)."""
    from src.whitted.scene.scene import Scene

    return Scene()


@pytest.fixture
def diffuse_sphere_scene():
    """One perfectly diffuse sphere lit by a point light at the camera.

    The primary ray through the image center hits the sphere at (0, 0, -2)
    with normal (0, 0, 1), pointing straight at the light 2 units away.
    """
    from src.whitted.scene.lights import PointLight
    from src.whitted.scene.scene import Scene

    scene = Scene()
    red = scene.add_material(name="diffuse", kd=(0.8, 0.4, 0.2))
    scene.add_sphere((0.0, 0.0, -3.0), 1.0, red)
    scene.add_light(PointLight(position=(0.0, 0.0, 0.0), color=(1.0, 1.0, 1.0)))
    return scene


@pytest.fixture
def glass_sphere_scene():
    """Clear glass sphere in front of an emissive back wall.

    The central ray enters the sphere at z = -2, leaves it at z = -4 and hits
    the wall at z = -10, whose emissive color (0.5, 0.5, 0.5) is the only
    light in the scene.
    """
    from src.whitted.scene.scene import Scene

    scene = Scene()
    glass = scene.add_material(name="glass", kt=(1.0, 1.0, 1.0), index=1.5)
    wall = scene.add_material(name="wall", ke=(0.5, 0.5, 0.5))
    scene.add_sphere((0.0, 0.0, -3.0), 1.0, glass)
    scene.add_quad((-50.0, -50.0, -10.0), (100.0, 0.0, 0.0), (0.0, 100.0, 0.0), wall)
    return scene


@pytest.fixture
def mirror_scene():
    """Mirror plane at z = -2 facing the camera, diffuse wall behind the camera.

    The wall at z = 5 is lit by a close point light with quadratic falloff,
    so its color varies with the hit point.
    """
    from src.whitted.scene.lights import PointLight
    from src.whitted.scene.scene import Scene

    scene = Scene()
    mirror = scene.add_material(name="mirror", kr=(0.8, 0.8, 0.8))
    wall = scene.add_material(name="wall", kd=(0.9, 0.6, 0.3))
    scene.add_quad((-50.0, -50.0, -2.0), (100.0, 0.0, 0.0), (0.0, 100.0, 0.0), mirror)
    # Facing -z, toward the mirror
    scene.add_quad((-50.0, -50.0, 5.0), (0.0, 100.0, 0.0), (100.0, 0.0, 0.0), wall)
    scene.add_light(
        PointLight(position=(0.3, 0.2, 4.0), color=(1.0, 1.0, 1.0), quadratic=4.0)
    )
    return scene


@pytest.fixture
def parallel_mirrors_scene():
    """Two perfect mirrors facing each other across the camera."""
    from src.whitted.scene.scene import Scene

    scene = Scene()
    mirror = scene.add_material(name="mirror", kr=(1.0, 1.0, 1.0))
    scene.add_quad((-5.0, -5.0, -2.0), (10.0, 0.0, 0.0), (0.0, 10.0, 0.0), mirror)
    scene.add_quad((-5.0, -5.0, 2.0), (0.0, 10.0, 0.0), (10.0, 0.0, 0.0), mirror)
    return scene


@pytest.fixture
def make_context():
    """Factory for a depth-0 trace context along a ray."""
    import numpy as np

    from src.whitted.core.config import TraceConfig
    from src.whitted.core.media import MaterialStack
    from src.whitted.core.ray import Ray
    from src.whitted.core.tracer import TraceContext

    def _make(scene, origin=(0.0, 0.0, 0.0), direction=(0.0, 0.0, -1.0), **overrides):
        fields = {
            "scene": scene,
            "ray": Ray(np.array(origin, dtype=float), np.array(direction, dtype=float)),
            "weight": np.ones(3),
            "depth": 0,
            "stack": MaterialStack.ambient(),
            "config": TraceConfig(),
            "rng": np.random.default_rng(0),
        }
        fields.update(overrides)
        return TraceContext(**fields)

    return _make
