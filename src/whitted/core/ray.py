"""Ray data structure and vector utilities for recursive ray tracing.

This module provides the immutable Ray dataclass and the small set of
vector helpers used throughout the tracer. Vectors and colors are NumPy
float64 arrays of shape (3,).

Example:
    >>> from src.whitted.core.ray import Ray, vec3
    >>> ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -2.0))
    >>> ray.direction
    array([ 0.,  0., -1.])
    >>> ray.at(5.0)  # Point 5 units along the ray
    array([ 0.,  0., -5.])
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

Vec3 = npt.NDArray[np.float64]

# Offset applied to secondary ray origins to avoid self-intersection
RAY_EPSILON = 1e-4

# Valid parametric range for scene intersection queries
T_MIN = 1e-4
T_MAX = float("inf")


def vec3(x: float = 0.0, y: float = 0.0, z: float = 0.0) -> Vec3:
    """Create a 3-component float64 vector."""
    return np.array((x, y, z), dtype=np.float64)


def as_vec3(value: Sequence[float] | Vec3) -> Vec3:
    """Convert a 3-sequence into a float64 vector.

    Args:
        value: Any sequence of three numbers (tuple, list or array).

    Returns:
        A new float64 array of shape (3,).

    Raises:
        ValueError: If the value does not have exactly three components.
    """
    arr = np.array(value, dtype=np.float64).reshape(-1)
    if arr.shape != (3,):
        raise ValueError(f"Expected 3 components, got {arr.shape[0]}")
    return arr


def zeros() -> Vec3:
    """Black / zero vector."""
    return np.zeros(3, dtype=np.float64)


# =============================================================================
# Vector Utility Functions
# =============================================================================


def length(v: Vec3) -> float:
    """Euclidean length of a vector."""
    return float(np.sqrt(np.dot(v, v)))


def length_squared(v: Vec3) -> float:
    """Squared length of a vector, avoiding the square root."""
    return float(np.dot(v, v))


def normalize(v: Vec3) -> Vec3:
    """Normalize a vector to unit length.

    Returns a zero vector for zero-length input instead of dividing by zero.
    """
    n = length(v)
    if n == 0.0:
        return zeros()
    return v / n


def dot(a: Vec3, b: Vec3) -> float:
    """Dot product a . b."""
    return float(np.dot(a, b))


def cross(a: Vec3, b: Vec3) -> Vec3:
    """Cross product a x b."""
    return np.cross(a, b)


def reflect(incident: Vec3, normal: Vec3) -> Vec3:
    """Reflect an incident vector about a normal.

    Args:
        incident: The incoming direction (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * dot(incident, normal) * normal


def mirror_direction(normal: Vec3, outgoing: Vec3) -> Vec3:
    """Mirror direction 2(N.V)N - V for the outgoing (negated incoming) vector V."""
    return normalize(2.0 * dot(normal, outgoing) * normal - outgoing)


def is_zero(v: Vec3) -> bool:
    """True when every component is exactly zero."""
    return not np.any(v)


def clamp01(color: Vec3) -> Vec3:
    """Clamp every channel to [0, 1]."""
    return np.clip(color, 0.0, 1.0)


def build_onb(axis: Vec3) -> tuple[Vec3, Vec3, Vec3]:
    """Build an orthonormal basis around a unit axis.

    Creates a local coordinate frame where the axis is the z-axis.

    Args:
        axis: The frame's z-axis (should be normalized).

    Returns:
        A tuple (tangent, bitangent, axis) forming an orthonormal basis.
    """
    # Choose a vector not parallel to the axis
    a = vec3(1.0, 0.0, 0.0)
    if abs(axis[0]) > 0.9:
        a = vec3(0.0, 1.0, 0.0)
    tangent = normalize(cross(a, axis))
    bitangent = cross(axis, tangent)
    return tangent, bitangent, axis


# =============================================================================
# Ray
# =============================================================================


@dataclass(frozen=True, eq=False)
class Ray:
    """A ray with an origin point and a unit direction.

    The direction is normalized on construction. Rays are immutable and
    owned by the call that creates them.

    Attributes:
        origin: The starting point of the ray.
        direction: The unit direction of the ray.
    """

    origin: Vec3
    direction: Vec3

    def __post_init__(self) -> None:
        object.__setattr__(self, "origin", as_vec3(self.origin))
        object.__setattr__(self, "direction", normalize(as_vec3(self.direction)))

    def at(self, t: float) -> Vec3:
        """Point along the ray at parameter t."""
        return self.origin + t * self.direction

    def __repr__(self) -> str:
        return f"Ray(origin={self.origin.tolist()}, direction={self.direction.tolist()})"
