"""Recursive (Whitted-style) ray tracer.

This package renders scenes by tracing a ray per pixel sample, shading the
nearest hit locally and recursively spawning reflection and refraction rays
until a depth or intensity cutoff is reached. Nested transparent volumes are
tracked with a per-path material stack.

Subpackages:
    core: Ray utilities, configuration, material stack, cone sampler,
        recursive tracer, frame buffer and parallel render scheduler
    geometry: Sphere and quad primitives with ray intersection
    materials: Phong-like material model and local shading
    scene: Scene container, intersection records, lights and scene loading
    camera: Pinhole camera for primary ray generation
    preview: PNG export, matplotlib preview and Taichi GGUI window
"""

__version__ = "0.1.0"
