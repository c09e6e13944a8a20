"""Immutable trace configuration snapshot.

TraceConfig gathers every switch and slider that controls a render pass:
recursion depth, intensity cutoff, reflection/refraction/shadow toggles,
Fresnel blending, glossy and supersampling counts, worker count and the
distance attenuation override. A render pass captures one snapshot and
carries it through every recursive call, so changes made while a pass is
running only apply to the next pass.

Example:
    >>> from src.whitted.core.config import TraceConfig
    >>> config = TraceConfig(max_depth=5, fresnel=True)
    >>> faster = config.replace(threads=8)
    >>> faster.max_depth
    5
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any

# Ranges exposed by the interactive controls
MAX_DEPTH_LIMIT = 10
MIN_SIZE = 64
MAX_SIZE = 512
MAX_GLOSSY_SAMPLES = 100
MAX_THREADS = 8


@dataclass(frozen=True)
class TraceConfig:
    """Read-only configuration for a render pass.

    Attributes:
        max_depth: Maximum recursion depth for reflection/refraction rays.
        size: Output image width in pixels; height follows the camera aspect.
        shadows: Cast shadow rays during local shading.
        soft_shadows: Sample point lights with radius as spherical area lights.
        soft_shadow_samples: Shadow rays per light when soft shadows are on.
        reflection: Trace reflection rays.
        glossy_samples: Cone-jittered reflection rays per bounce (0 = mirror).
        fresnel: Weight reflection/refraction with the Fresnel coefficient.
        fresnel_ratio: Blend strength of the Fresnel weighting in [0, 1].
        refraction: Trace refraction rays.
        threads: Number of render workers (one horizontal band each).
        intensity_threshold: Per-channel weight at or below which a path is pruned.
        supersampling: N for an N x N jittered sub-pixel grid (0 = one sample).
        override_distance_attenuation: Use the distance_* terms below instead
            of each light's own attenuation coefficients.
        distance_constant: Constant distance attenuation term.
        distance_linear: Linear distance attenuation term.
        distance_quadratic: Quadratic distance attenuation term.
        seed: Seed for reproducible sampling, or None for fresh entropy.
    """

    max_depth: int = 3
    size: int = 150
    shadows: bool = True
    soft_shadows: bool = False
    soft_shadow_samples: int = 8
    reflection: bool = True
    glossy_samples: int = 0
    fresnel: bool = False
    fresnel_ratio: float = 1.0
    refraction: bool = True
    threads: int = 2
    intensity_threshold: float = 0.01
    supersampling: int = 0
    override_distance_attenuation: bool = False
    distance_constant: float = 0.25
    distance_linear: float = 0.05
    distance_quadratic: float = 0.01
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.max_depth < 0:
            raise ValueError(f"max_depth = {self.max_depth} must be non-negative.")
        if self.size < 1:
            raise ValueError(f"size = {self.size} must be positive.")
        if self.soft_shadow_samples < 1:
            raise ValueError(
                f"soft_shadow_samples = {self.soft_shadow_samples} must be at least 1."
            )
        if self.glossy_samples < 0:
            raise ValueError(f"glossy_samples = {self.glossy_samples} must be non-negative.")
        if not 0.0 <= self.fresnel_ratio <= 1.0:
            raise ValueError(f"fresnel_ratio = {self.fresnel_ratio} is outside [0, 1].")
        if self.threads < 1:
            raise ValueError(f"threads = {self.threads} must be at least 1.")
        if not 0.0 <= self.intensity_threshold <= 1.0:
            raise ValueError(
                f"intensity_threshold = {self.intensity_threshold} is outside [0, 1]."
            )
        if self.supersampling < 0:
            raise ValueError(f"supersampling = {self.supersampling} must be non-negative.")
        for name in ("distance_constant", "distance_linear", "distance_quadratic"):
            if getattr(self, name) < 0.0:
                raise ValueError(f"{name} = {getattr(self, name)} is negative.")

    def replace(self, **changes: Any) -> TraceConfig:
        """Return a copy with the given fields changed (validated again)."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Export the configuration to a plain dictionary."""
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TraceConfig:
        """Build a configuration from a dictionary.

        Missing keys take their default values.

        Raises:
            ValueError: If the dictionary contains unknown keys or invalid values.
        """
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**data)


DEFAULT_CONFIG = TraceConfig()
