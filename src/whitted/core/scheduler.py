"""Parallel band renderer with cooperative cancellation.

The scheduler splits the image rows into contiguous bands, one per worker,
with the last band absorbing the remainder. Each band is traced on a thread
of a ThreadPoolExecutor. Workers check the cancellation token before every
pixel, so a stop request takes effect within one pixel per band; a pixel
that is already being traced always finishes.

While the workers run, the controlling thread waits on the futures with a
bounded timeout and reports progress after every wait, which lets a UI
refresh its view of the frame buffer without busy-waiting.

Example:
    >>> from src.whitted.core.scheduler import CancellationToken, RenderScheduler
    >>> from src.whitted.core.tracer import RayTracer
    >>> from src.whitted.scene.cornell_box import create_whitted_scene
    >>>
    >>> tracer = RayTracer(scene=create_whitted_scene())
    >>> scheduler = RenderScheduler(tracer, on_progress=lambda done, total: None)
    >>> result = scheduler.render(CancellationToken())
    >>> result.cancelled
    False
"""

from __future__ import annotations

import concurrent.futures
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from src.whitted.errors import SceneNotReadyError

if TYPE_CHECKING:
    from src.whitted.core.tracer import RayTracer

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (rows_completed, total_rows)
ProgressCallback = Callable[[int, int], None]

# Seconds between progress callbacks while workers are running
DEFAULT_REFRESH_INTERVAL = 0.5


class CancellationToken:
    """Shared stop flag, set by the controller and read by the workers."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def partition_rows(height: int, workers: int) -> list[tuple[int, int]]:
    """Split rows [0, height) into contiguous bands.

    Args:
        height: Number of image rows.
        workers: Requested number of bands, clamped to [1, height].

    Returns:
        List of (start, stop) row ranges covering every row exactly once.
        The last band absorbs the remainder.
    """
    if height <= 0:
        return []
    workers = min(max(workers, 1), height)
    rows = height // workers

    bands = [(rows * i, rows * (i + 1)) for i in range(workers - 1)]
    bands.append((rows * (workers - 1), height))
    return bands


@dataclass(frozen=True)
class RenderResult:
    """Outcome of a render pass.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        rows_completed: Rows fully traced across all bands.
        cancelled: Whether the pass was stopped before finishing.
        elapsed: Wall-clock duration in seconds.
    """

    width: int
    height: int
    rows_completed: int
    cancelled: bool
    elapsed: float


class RenderScheduler:
    """Renders the tracer's scene into its frame buffer with a worker pool.

    Attributes:
        tracer: The ray tracer providing the scene, configuration and buffer.
        refresh_interval: Seconds between progress callbacks.
        on_progress: Optional progress callback (rows_completed, total_rows).
    """

    def __init__(
        self,
        tracer: RayTracer,
        refresh_interval: float = DEFAULT_REFRESH_INTERVAL,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        if refresh_interval <= 0.0:
            raise ValueError(f"refresh_interval = {refresh_interval} must be positive.")
        self.tracer = tracer
        self.refresh_interval = refresh_interval
        self.on_progress = on_progress

    def image_size(self) -> tuple[int, int]:
        """Output size for the current configuration: (size, size / aspect)."""
        width = self.tracer.config.size
        height = max(1, int(width / self.tracer.aspect_ratio + 0.5))
        return width, height

    def render(self, token: CancellationToken | None = None) -> RenderResult:
        """Render one full pass, blocking until done or cancelled.

        Args:
            token: Cancellation token shared with the controller. A fresh
                token is used when omitted.

        Returns:
            The RenderResult of the pass.

        Raises:
            SceneNotReadyError: If the tracer has no scene loaded.
        """
        tracer = self.tracer
        if not tracer.scene_loaded:
            raise SceneNotReadyError()
        if token is None:
            token = CancellationToken()

        config = tracer.config
        width, height = self.image_size()
        tracer.trace_setup(width, height)

        bands = partition_rows(height, config.threads)
        seeds = np.random.SeedSequence(config.seed).spawn(len(bands))
        rows_done = [0] * len(bands)

        def work(index: int, start: int, stop: int) -> None:
            rng = np.random.default_rng(seeds[index])
            for row in range(start, stop):
                if not tracer.trace_lines(row, row + 1, token, rng):
                    return
                rows_done[index] += 1

        logger.info(
            "Rendering %dx%d with %d band(s), depth %d", width, height, len(bands), config.max_depth
        )
        started = time.perf_counter()

        with concurrent.futures.ThreadPoolExecutor(
            max_workers=len(bands), thread_name_prefix="whitted-band"
        ) as executor:
            pending = {
                executor.submit(work, index, start, stop)
                for index, (start, stop) in enumerate(bands)
            }
            futures = set(pending)
            try:
                while pending:
                    done, pending = concurrent.futures.wait(
                        pending, timeout=self.refresh_interval
                    )
                    if any(future.exception() is not None for future in done):
                        # A failed band fails the pass; stop the others now
                        token.cancel()
                    self._report(sum(rows_done), height)
            except KeyboardInterrupt:
                # Stop the workers before the executor joins them
                token.cancel()
                raise

            # Surface worker exceptions in the controlling thread
            for future in futures:
                future.result()

        elapsed = time.perf_counter() - started
        completed = sum(rows_done)
        cancelled = token.cancelled and completed < height
        if cancelled:
            logger.info("Render cancelled after %d/%d rows (%.2fs)", completed, height, elapsed)
        else:
            logger.info("Render finished in %.2fs", elapsed)

        return RenderResult(
            width=width,
            height=height,
            rows_completed=completed,
            cancelled=cancelled,
            elapsed=elapsed,
        )

    def _report(self, rows_completed: int, total_rows: int) -> None:
        if self.on_progress is not None:
            self.on_progress(rows_completed, total_rows)
