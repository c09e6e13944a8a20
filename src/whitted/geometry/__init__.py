"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with ray-sphere intersection
    quad: Parallelogram primitive and axis-aligned box faces

Every primitive reports its geometric (outward) normal; the tracer flips it
when a ray leaves the object it is inside.
"""

from .quad import Quad, box_quads, hit_quad
from .sphere import Sphere, hit_sphere

__all__ = [
    "Sphere",
    "hit_sphere",
    "Quad",
    "hit_quad",
    "box_quads",
]
