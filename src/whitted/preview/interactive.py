"""Interactive trace window using Taichi GGUI.

The window shows the tracer's frame buffer and a control panel mirroring the
trace settings: recursion depth, image size, shadow, reflection, refraction
and Fresnel toggles, glossy and supersampling counts, worker threads,
intensity threshold and the distance attenuation override. Render starts a
pass on a background thread; Stop cancels it through the pass's
cancellation token. The frame buffer is redrawn every frame, so partial
results appear while the workers fill in their bands. Scene files passed as
scene_paths get a Load button each; loading waits for any running pass to
stop first.

Example:
    >>> from src.whitted.core.tracer import RayTracer
    >>> from src.whitted.preview.interactive import InteractivePreview
    >>> from src.whitted.scene.cornell_box import create_whitted_scene
    >>>
    >>> tracer = RayTracer(scene=create_whitted_scene())
    >>> preview = InteractivePreview(tracer)
    >>> preview.run()  # Blocks until the window is closed
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import numpy as np
import taichi as ti

from src.whitted.core.config import (
    MAX_DEPTH_LIMIT,
    MAX_GLOSSY_SAMPLES,
    MAX_SIZE,
    MAX_THREADS,
    MIN_SIZE,
    TraceConfig,
)
from src.whitted.core.scheduler import CancellationToken, RenderResult, RenderScheduler
from src.whitted.errors import SceneLoadError, TracerError

if TYPE_CHECKING:
    import numpy.typing as npt

    from src.whitted.core.tracer import RayTracer

logger = logging.getLogger(__name__)

# Largest supersampling grid offered by the control panel
MAX_SUPERSAMPLING = 5


class InteractivePreview:
    """Taichi GGUI front end for a RayTracer.

    Attributes:
        tracer: The ray tracer whose frame buffer is displayed.
        window_size: Side length of the (square) window in pixels.
        display_image: Taichi field holding the displayed image, shape (width, height).
    """

    def __init__(
        self,
        tracer: RayTracer,
        *,
        window_size: int = 768,
        title: str = "Whitted Ray Tracer",
        refresh_interval: float = 0.1,
        scene_paths: Sequence[str | Path] = (),
    ) -> None:
        """Create the preview (the window opens on first use).

        Args:
            tracer: The ray tracer to drive.
            window_size: Side length of the window in pixels.
            title: Window title.
            refresh_interval: Seconds between scheduler progress callbacks.
            scene_paths: Scene files offered in the Scenes panel.
        """
        self.tracer = tracer
        self.window_size = window_size
        self._title = title
        self._refresh_interval = refresh_interval
        self.scene_paths = [Path(p) for p in scene_paths]

        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None

        self.display_image: ti.MatrixField | None = None
        self._image_shape: tuple[int, int] = (0, 0)

        # Control panel state, applied to the tracer when Render is pressed
        self._settings: dict[str, Any] = tracer.config.to_dict()

        self._token: CancellationToken | None = None
        self._render_thread: threading.Thread | None = None
        self._progress: tuple[int, int] = (0, 0)
        self._last_result: RenderResult | None = None
        self._status = "Ready" if tracer.scene_loaded else "No scene loaded"

    # =========================================================================
    # Window
    # =========================================================================

    def _initialize_window(self) -> None:
        if self._window is not None:
            return
        self._window = ti.ui.Window(
            name=self._title,
            res=(self.window_size, self.window_size),
            vsync=True,
        )
        self._canvas = self._window.get_canvas()

    @property
    def window(self) -> ti.ui.Window:
        """Get the Taichi GGUI window, initializing if needed."""
        self._initialize_window()
        assert self._window is not None
        return self._window

    @property
    def canvas(self) -> ti.ui.Canvas:
        self._initialize_window()
        assert self._canvas is not None
        return self._canvas

    def update_image(self, image: npt.NDArray[np.float32]) -> None:
        """Update the display image from a (height, width, 3) top-down array.

        The display field is reallocated when the image size changes.

        Raises:
            ValueError: If the array is not of shape (height, width, 3).
        """
        if image.ndim != 3 or image.shape[2] != 3:
            raise ValueError(f"Image shape {image.shape} is not (height, width, 3)")

        height, width = image.shape[:2]
        if self.display_image is None or self._image_shape != (width, height):
            self.display_image = ti.Vector.field(3, dtype=ti.f32, shape=(width, height))
            self._image_shape = (width, height)

        # Taichi fields are indexed (x, y) with y = 0 at the bottom
        image_transposed = np.ascontiguousarray(
            np.transpose(np.flipud(image), (1, 0, 2)).astype(np.float32)
        )
        self.display_image.from_numpy(image_transposed)

    def update_from_framebuffer(self) -> None:
        """Copy the tracer's frame buffer into the display image."""
        framebuffer = self.tracer.framebuffer
        if framebuffer.width == 0 or framebuffer.height == 0:
            return
        self.update_image(framebuffer.to_image())

    def is_running(self) -> bool:
        return self.window.running

    def show_frame(self) -> None:
        """Draw the current display image and the control panel, then present."""
        if self.display_image is not None:
            self.canvas.set_image(self.display_image)
        self._draw_gui_panel()
        self.window.show()

    def run(self) -> None:
        """Run the window event loop until the window is closed.

        Closing the window cancels a running pass and waits for it.
        """
        self._initialize_window()
        try:
            while self.is_running():
                self.update_from_framebuffer()
                self.show_frame()
        finally:
            self.stop_render(wait=True)

    def close(self) -> None:
        if self._window is not None:
            self._window.running = False

    @staticmethod
    def is_display_available() -> bool:
        """Check if a display is available for GUI rendering.

        Returns:
            True if a display is available, False for headless environments.
        """
        display = os.environ.get("DISPLAY")
        wayland = os.environ.get("WAYLAND_DISPLAY")

        if os.name == "nt":
            return True

        # On macOS, display is always available if not in SSH
        if os.uname().sysname == "Darwin":
            return not (os.environ.get("SSH_CONNECTION") and not display)

        return bool(display or wayland)

    # =========================================================================
    # Render Control
    # =========================================================================

    @property
    def is_rendering(self) -> bool:
        return self._render_thread is not None and self._render_thread.is_alive()

    @property
    def progress(self) -> tuple[int, int]:
        """(rows_completed, total_rows) of the current or last pass."""
        return self._progress

    @property
    def status(self) -> str:
        """Status line shown under the Render controls."""
        return self._status

    def current_config(self) -> TraceConfig:
        """The configuration described by the control panel.

        Raises:
            ValueError: If a control holds an invalid value.
        """
        return TraceConfig.from_dict(self._settings)

    def start_render(self) -> bool:
        """Start a render pass on a background thread.

        A pass that is still running is cancelled and joined first, so scene
        access never overlaps between passes.

        Returns:
            False when no scene is loaded or the settings are invalid.
        """
        if not self.tracer.scene_loaded:
            self._status = "No scene loaded"
            return False

        try:
            config = self.current_config()
        except ValueError as e:
            self._status = f"Invalid settings: {e}"
            logger.warning("Invalid trace settings: %s", e)
            return False

        self.stop_render(wait=True)
        self.tracer.configure(config)

        token = CancellationToken()
        scheduler = RenderScheduler(
            self.tracer,
            refresh_interval=self._refresh_interval,
            on_progress=self._on_progress,
        )

        def work() -> None:
            try:
                self._last_result = scheduler.render(token)
            except TracerError as e:
                self._status = str(e)
                logger.error("Render failed: %s", e)
                return
            result = self._last_result
            state = "Stopped" if result.cancelled else "Done"
            self._status = f"{state} in {result.elapsed:.2f}s"

        self._token = token
        self._progress = (0, 0)
        self._status = "Rendering"
        self._render_thread = threading.Thread(target=work, name="whitted-render", daemon=True)
        self._render_thread.start()
        return True

    def stop_render(self, wait: bool = False) -> None:
        """Cancel the running pass, optionally waiting for it to finish."""
        if self._token is not None:
            self._token.cancel()
        if wait and self._render_thread is not None:
            self._render_thread.join()
            self._render_thread = None

    def load_scene(self, path: str | Path) -> bool:
        """Stop any running pass, then load a scene file into the tracer.

        Returns:
            False when the file fails to load; the previous scene is kept.
        """
        self.stop_render(wait=True)
        try:
            self.tracer.load_scene(path)
        except SceneLoadError as e:
            self._status = f"Load failed: {e}"
            return False

        self._progress = (0, 0)
        self._last_result = None
        self._status = f"Loaded {Path(path).name}"
        return True

    def _on_progress(self, rows_completed: int, total_rows: int) -> None:
        self._progress = (rows_completed, total_rows)

    # =========================================================================
    # Control Panel
    # =========================================================================

    def _draw_gui_panel(self) -> None:
        """Draw the trace controls, the Render/Stop buttons and the status line."""
        s = self._settings
        with self.window.GUI.sub_window("Trace Controls", 0.01, 0.01, 0.34, 0.70) as gui:
            s["max_depth"] = gui.slider_int("Depth", s["max_depth"], 0, MAX_DEPTH_LIMIT)
            s["size"] = gui.slider_int("Size", s["size"], MIN_SIZE, MAX_SIZE)
            s["shadows"] = gui.checkbox("Shadows", s["shadows"])
            s["soft_shadows"] = gui.checkbox("Soft shadows", s["soft_shadows"])
            s["reflection"] = gui.checkbox("Reflection", s["reflection"])
            s["glossy_samples"] = gui.slider_int(
                "Glossy samples", s["glossy_samples"], 0, MAX_GLOSSY_SAMPLES
            )
            s["fresnel"] = gui.checkbox("Fresnel", s["fresnel"])
            s["fresnel_ratio"] = gui.slider_float("Fresnel ratio", s["fresnel_ratio"], 0.0, 1.0)
            s["refraction"] = gui.checkbox("Refraction", s["refraction"])
            s["threads"] = gui.slider_int("Threads", s["threads"], 1, MAX_THREADS)
            s["intensity_threshold"] = gui.slider_float(
                "Threshold", s["intensity_threshold"], 0.0, 1.0
            )
            s["supersampling"] = gui.slider_int(
                "Supersampling", s["supersampling"], 0, MAX_SUPERSAMPLING
            )
            s["override_distance_attenuation"] = gui.checkbox(
                "Override attenuation", s["override_distance_attenuation"]
            )
            s["distance_constant"] = gui.slider_float(
                "Constant", s["distance_constant"], 0.0, 1.0
            )
            s["distance_linear"] = gui.slider_float("Linear", s["distance_linear"], 0.0, 1.0)
            s["distance_quadratic"] = gui.slider_float(
                "Quadratic", s["distance_quadratic"], 0.0, 1.0
            )

        with self.window.GUI.sub_window("Render", 0.01, 0.72, 0.34, 0.26) as gui:
            if gui.button("Render"):
                self.start_render()
            if gui.button("Stop"):
                self.stop_render()
            if gui.button("Export PNG"):
                self._export_png()

            done, total = self._progress
            gui.text(f"Rows: {done}/{total}")
            gui.text(self._status)

        if self.scene_paths:
            with self.window.GUI.sub_window("Scenes", 0.65, 0.01, 0.34, 0.30) as gui:
                for path in self.scene_paths:
                    if gui.button(f"Load {path.name}"):
                        self.load_scene(path)

    def _export_png(self) -> None:
        """Export the frame buffer to a timestamped PNG file."""
        from src.whitted.preview.export import save_png

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"whitted_{timestamp}.png"
        save_png(self.tracer.framebuffer, filename)
        self._status = f"Exported {filename}"
        logger.info("Exported %s", filename)
