"""Core tracing module.

Components:
    ray: Ray data structure and vector utilities
    config: Immutable trace configuration snapshot
    media: Persistent material stack for nested transparent volumes
    cone: Cone sampler for glossy reflection
    tracer: Recursive tracer (trace, reflection, refraction, Fresnel)
    framebuffer: Byte RGB output buffer
    scheduler: Parallel band rendering with cooperative cancellation
"""

from .config import DEFAULT_CONFIG, TraceConfig
from .ray import (
    RAY_EPSILON,
    T_MAX,
    T_MIN,
    Ray,
    Vec3,
    as_vec3,
    build_onb,
    clamp01,
    cross,
    dot,
    is_zero,
    length,
    length_squared,
    mirror_direction,
    normalize,
    reflect,
    vec3,
    zeros,
)

# Note: media, cone, tracer and scheduler are NOT imported here to avoid
# circular imports (they depend on materials and scene).
# Import directly from src.whitted.core.tracer or src.whitted.core.scheduler.

__all__ = [
    "Ray",
    "Vec3",
    "RAY_EPSILON",
    "T_MIN",
    "T_MAX",
    "vec3",
    "as_vec3",
    "zeros",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "mirror_direction",
    "is_zero",
    "clamp01",
    "build_onb",
    "TraceConfig",
    "DEFAULT_CONFIG",
]
