"""Recursive Whitted-style ray tracer.

This module implements the shading engine: for each ray it finds the nearest
intersection, evaluates local shading and recursively spawns reflection and
refraction rays, combining them with the Fresnel weighting when enabled.

Recursion is bounded two ways:
    - Every branch refuses to recurse once the path depth reaches
      ``config.max_depth``.
    - A path whose accumulated weight is at or below
      ``config.intensity_threshold`` on every channel returns black without
      querying the scene.

Nested transparent volumes are tracked with a persistent MaterialStack
carried in the TraceContext. A hit on the material currently at the stack
front means the ray is leaving that object: the normal is flipped to face
the ray and the refracted ray pops the stack. Any other transmissive hit
pushes the hit material.

Example:
    >>> from src.whitted.core.tracer import RayTracer
    >>> from src.whitted.core.config import TraceConfig
    >>> from src.whitted.scene.cornell_box import create_whitted_scene
    >>>
    >>> tracer = RayTracer(TraceConfig(max_depth=4, fresnel=True))
    >>> tracer.set_scene(create_whitted_scene())
    >>> color = tracer.trace(tracer.scene, 0.5, 0.5)  # Image center
"""

from __future__ import annotations

import dataclasses
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np

from src.whitted.core.cone import GLOSSY_CONE_HALF_ANGLE, ConeSampler
from src.whitted.core.config import DEFAULT_CONFIG, TraceConfig
from src.whitted.core.framebuffer import FrameBuffer
from src.whitted.core.media import MaterialStack
from src.whitted.core.ray import (
    RAY_EPSILON,
    Ray,
    Vec3,
    clamp01,
    dot,
    mirror_direction,
    zeros,
)
from src.whitted.errors import SceneLoadError, SceneNotReadyError
from src.whitted.scene.intersection import Intersection
from src.whitted.scene.loader import load_scene_file
from src.whitted.scene.scene import Scene

if TYPE_CHECKING:
    from src.whitted.core.scheduler import CancellationToken

logger = logging.getLogger(__name__)

# Frame buffer width right after a scene is loaded (height follows the aspect)
DEFAULT_BUFFER_WIDTH = 256

# Background color for rays escaping the scene
BACKGROUND_COLOR = (0.0, 0.0, 0.0)


# =============================================================================
# Trace Context
# =============================================================================


@dataclass(frozen=True, eq=False)
class TraceContext:
    """State threaded through one recursive trace path.

    Attributes:
        scene: The scene being traced (read-only).
        ray: The current ray.
        weight: Accumulated per-channel attenuation, starts at (1, 1, 1).
        depth: Recursion depth, 0 for the primary ray.
        stack: The media the current ray segment is inside.
        config: The configuration snapshot of this render pass.
        rng: Random generator for glossy and soft shadow sampling.
    """

    scene: Scene
    ray: Ray
    weight: Vec3
    depth: int
    stack: MaterialStack
    config: TraceConfig
    rng: np.random.Generator

    def child(self, ray: Ray, weight: Vec3, stack: MaterialStack | None = None) -> TraceContext:
        """Context of a secondary ray one level deeper."""
        return dataclasses.replace(
            self,
            ray=ray,
            weight=weight,
            depth=self.depth + 1,
            stack=self.stack if stack is None else stack,
        )


# =============================================================================
# Fresnel
# =============================================================================


def fresnel_coefficient(ni: float, nt: float, cos_theta: float) -> float:
    """Reflected fraction at a dielectric boundary (Schlick's approximation).

    Args:
        ni: Refractive index on the incident side.
        nt: Refractive index on the transmitted side.
        cos_theta: Cosine of the angle between the normal (facing the
            incident side) and the outgoing direction.

    Returns:
        The Fresnel reflection coefficient in [0, 1]; exactly 1.0 under total
        internal reflection.
    """
    cos_theta = min(max(cos_theta, 0.0), 1.0)
    r0 = (ni - nt) / (ni + nt)
    r0 *= r0

    if ni <= nt:
        return r0 + (1.0 - r0) * (1.0 - cos_theta) ** 5

    nr = ni / nt
    root = 1.0 - nr * nr * (1.0 - cos_theta * cos_theta)
    if root < 0.0:
        # Total internal reflection
        return 1.0

    # Transmitted-side cosine from Snell's law
    cos_t = math.sqrt(root)
    return r0 + (1.0 - r0) * (1.0 - cos_t) ** 5


# =============================================================================
# Ray Tracer
# =============================================================================


class RayTracer:
    """Recursive ray tracer owning the current scene and frame buffer.

    The tracer is the entry point used by the render scheduler: it traces
    single samples (trace), pixels with optional supersampling (trace_pixel)
    and bands of rows (trace_lines) into its frame buffer.

    Attributes:
        config: Configuration snapshot used by the next render pass.
        scene: The loaded scene, or None.
        framebuffer: The byte RGB output buffer.
    """

    def __init__(self, config: TraceConfig | None = None, scene: Scene | None = None) -> None:
        self.config = config if config is not None else DEFAULT_CONFIG
        self.scene: Scene | None = None
        self.framebuffer = FrameBuffer(DEFAULT_BUFFER_WIDTH, DEFAULT_BUFFER_WIDTH)
        if scene is not None:
            self.set_scene(scene)

    # =========================================================================
    # Scene Management
    # =========================================================================

    @property
    def scene_loaded(self) -> bool:
        return self.scene is not None

    @property
    def aspect_ratio(self) -> float:
        """Camera aspect ratio of the loaded scene (1.0 without a scene)."""
        if self.scene is None:
            return 1.0
        return self.scene.camera.get_aspect_ratio()

    def set_scene(self, scene: Scene) -> None:
        """Install a scene and size the buffer to the default width."""
        self.scene = scene
        width = DEFAULT_BUFFER_WIDTH
        height = max(1, int(width / self.aspect_ratio + 0.5))
        self.framebuffer.resize(width, height)
        logger.info("Scene ready: %r, buffer %dx%d", scene, width, height)

    def load_scene(self, path: str | Path) -> Scene:
        """Load a JSON scene file and make it the current scene.

        Args:
            path: Path to the scene file.

        Returns:
            The loaded scene.

        Raises:
            SceneLoadError: If the file cannot be loaded. The previously
                loaded scene, if any, stays in place.
        """
        try:
            scene = load_scene_file(path)
        except SceneLoadError:
            logger.exception("Failed to load scene %s", path)
            raise

        if scene.is_empty:
            logger.warning("Scene %s contains no objects", path)
        self.set_scene(scene)
        return scene

    def configure(self, config: TraceConfig) -> None:
        """Replace the configuration used by subsequent traces."""
        self.config = config

    def trace_setup(self, width: int, height: int) -> None:
        """Prepare the frame buffer for a pass: resize if needed, then clear."""
        self.framebuffer.resize(width, height)

    def get_buffer(self) -> FrameBuffer:
        return self.framebuffer

    def _require_scene(self) -> Scene:
        if self.scene is None:
            raise SceneNotReadyError()
        return self.scene

    # =========================================================================
    # Recursive Tracing
    # =========================================================================

    def trace(
        self,
        scene: Scene | None,
        x: float,
        y: float,
        rng: np.random.Generator | None = None,
    ) -> Vec3:
        """Trace one primary ray through normalized image coordinates.

        Args:
            scene: The scene to trace.
            x: Horizontal image coordinate in [0, 1] (left to right).
            y: Vertical image coordinate in [0, 1] (bottom to top).
            rng: Random generator for sampling, seeded from the
                configuration when omitted.

        Returns:
            The radiance of the sample, clamped to [0, 1] per channel.

        Raises:
            SceneNotReadyError: If scene is None.
        """
        if scene is None:
            raise SceneNotReadyError()

        config = self.config
        if rng is None:
            rng = np.random.default_rng(config.seed)

        ctx = TraceContext(
            scene=scene,
            ray=scene.camera.ray_through(x, y),
            weight=np.ones(3, dtype=np.float64),
            depth=0,
            stack=MaterialStack.ambient(),
            config=config,
            rng=rng,
        )
        return clamp01(self.trace_ray(ctx))

    def trace_ray(self, ctx: TraceContext) -> Vec3:
        """Radiance arriving along ctx.ray (unclamped)."""
        config = ctx.config
        if np.all(ctx.weight <= config.intensity_threshold):
            return zeros()

        isect = ctx.scene.intersect(ctx.ray)
        if isect is None:
            return np.array(BACKGROUND_COLOR, dtype=np.float64)

        if self.is_leaving_object(ctx, isect):
            isect = isect.flipped()

        material = isect.material
        local = material.shade(ctx.scene, ctx.ray, isect, config, ctx.rng) * ctx.weight

        reflection = self.trace_reflection(ctx, isect) if config.reflection else zeros()
        refraction = self.trace_refraction(ctx, isect) if config.refraction else zeros()

        if config.fresnel and (ctx.stack.front.index != 1.0 or material.index != 1.0):
            coeff = self.get_fresnel_coeff(ctx, isect)
            ratio = config.fresnel_ratio
            reflection = ratio * coeff * reflection + (1.0 - ratio) * reflection
            refraction = ratio * (1.0 - coeff) * refraction + (1.0 - ratio) * refraction

        return local + reflection + refraction

    def trace_reflection(self, ctx: TraceContext, isect: Intersection) -> Vec3:
        """Mirror or glossy reflection contribution at a hit.

        The normal of isect must already face the incoming ray.
        """
        material = isect.material
        if not material.is_reflective or ctx.depth >= ctx.config.max_depth:
            return zeros()

        # Push the origin off the surface so the ray does not hit it again
        origin = ctx.ray.at(isect.t) + isect.normal * RAY_EPSILON
        center = mirror_direction(isect.normal, -ctx.ray.direction)
        weight = ctx.weight * material.kr

        samples = ctx.config.glossy_samples
        if samples == 0:
            return self.trace_ray(ctx.child(Ray(origin, center), weight))

        sampler = ConeSampler(center, GLOSSY_CONE_HALF_ANGLE, rng=ctx.rng)
        total = zeros()
        for _ in range(samples):
            total = total + self.trace_ray(ctx.child(Ray(origin, sampler.generate()), weight))
        return total / samples

    def trace_refraction(self, ctx: TraceContext, isect: Intersection) -> Vec3:
        """Refraction contribution at a hit (zero under total internal reflection).

        The normal of isect must already face the incoming ray.
        """
        material = isect.material
        if not material.is_transmissive or ctx.depth >= ctx.config.max_depth:
            return zeros()

        if self.is_leaving_object(ctx, isect):
            ni = material.index
            nt = ctx.stack.below_front.index
            stack = ctx.stack.pop()
        else:
            ni = ctx.stack.front.index
            nt = material.index
            stack = ctx.stack.push(material)

        nr = ni / nt
        cos_theta = dot(isect.normal, -ctx.ray.direction)

        # Push the origin through the surface
        origin = ctx.ray.at(isect.t) - isect.normal * RAY_EPSILON

        root = 1.0 - nr * nr * (1.0 - cos_theta * cos_theta)
        if root < 0.0:
            # Total internal reflection
            return zeros()

        coeff = nr * cos_theta - math.sqrt(root)
        direction = coeff * isect.normal + nr * ctx.ray.direction
        return self.trace_ray(ctx.child(Ray(origin, direction), ctx.weight * material.kt, stack))

    @staticmethod
    def is_leaving_object(ctx: TraceContext, isect: Intersection) -> bool:
        """True when the hit surface belongs to the medium the ray is inside."""
        return isect.material.same_medium(ctx.stack.front)

    def get_fresnel_coeff(self, ctx: TraceContext, isect: Intersection) -> float:
        """Fresnel coefficient for the boundary crossed at isect.

        Entering goes from the current medium's index to the hit material's.
        Leaving pairs the hit material with the stack front, which is the
        same medium, so the exit reflectance reduces to (1 - cos)^5 and never
        reaches total internal reflection. The refracted ray still bends
        toward the surrounding medium (see trace_refraction).
        """
        if self.is_leaving_object(ctx, isect):
            ni = isect.material.index
            nt = ctx.stack.front.index
        else:
            ni = ctx.stack.front.index
            nt = isect.material.index
        return fresnel_coefficient(ni, nt, dot(isect.normal, -ctx.ray.direction))

    # =========================================================================
    # Pixels and Bands
    # =========================================================================

    def sample_pixel(self, i: int, j: int, rng: np.random.Generator | None = None) -> Vec3:
        """Color of pixel (i, j), averaged over the supersampling grid.

        Raises:
            SceneNotReadyError: If no scene is loaded.
        """
        scene = self._require_scene()
        width = self.framebuffer.width
        height = self.framebuffer.height
        x = i / width
        y = j / height

        n = self.config.supersampling
        if n <= 0:
            return self.trace(scene, x, y, rng)

        if rng is None:
            rng = np.random.default_rng(self.config.seed)

        pixel_w = 1.0 / width
        pixel_h = 1.0 / height
        sub_w = pixel_w / n
        sub_h = pixel_h / n

        color = zeros()
        for row in range(n):
            base_y = y + (row / n - 0.5) * pixel_h
            for col in range(n):
                base_x = x + (col / n - 0.5) * pixel_w
                jitter_x, jitter_y = rng.random(2) - 0.5
                color = color + self.trace(
                    scene, base_x + jitter_x * sub_w, base_y + jitter_y * sub_h, rng
                )
        return color / (n * n)

    def trace_pixel(self, i: int, j: int, rng: np.random.Generator | None = None) -> bool:
        """Trace pixel (i, j) into the frame buffer.

        Returns:
            False (and writes nothing) when no scene is loaded, True otherwise.
        """
        if self.scene is None:
            return False
        self.framebuffer.set_pixel(i, j, self.sample_pixel(i, j, rng))
        return True

    def trace_lines(
        self,
        start: int,
        stop: int,
        token: CancellationToken | None = None,
        rng: np.random.Generator | None = None,
    ) -> bool:
        """Trace rows [start, stop) of the frame buffer.

        The cancellation token is checked before every pixel; recursion in
        progress always finishes.

        Args:
            start: First row to trace.
            stop: One past the last row (clamped to the buffer height).
            token: Optional cancellation token.
            rng: Random generator shared by all pixels of the band.

        Returns:
            True when every row was traced, False when no scene is loaded or
            the band was cancelled.
        """
        if self.scene is None:
            return False
        if rng is None:
            rng = np.random.default_rng(self.config.seed)

        stop = min(stop, self.framebuffer.height)
        width = self.framebuffer.width
        for j in range(start, stop):
            for i in range(width):
                if token is not None and token.cancelled:
                    return False
                self.trace_pixel(i, j, rng)
        return True
