"""Tests for the parallel band scheduler.

Tests cover:
- Row partitioning into contiguous bands
- Full renders filling the frame buffer
- Progress reporting
- Cooperative cancellation
- Worker error propagation
- Reproducible sampling with a seed
"""

import threading

import numpy as np
import pytest

from src.whitted.core.tracer import RayTracer


class TestPartitionRows:
    """Tests for splitting rows into bands."""

    def test_last_band_absorbs_remainder(self):
        """Test that 10 rows over 3 workers leave the extra row to the last band."""
        from src.whitted.core.scheduler import partition_rows

        assert partition_rows(10, 3) == [(0, 3), (3, 6), (6, 10)]

    def test_even_split(self):
        """Test an exact division of rows."""
        from src.whitted.core.scheduler import partition_rows

        assert partition_rows(8, 4) == [(0, 2), (2, 4), (4, 6), (6, 8)]

    def test_more_workers_than_rows(self):
        """Test that workers are clamped to the number of rows."""
        from src.whitted.core.scheduler import partition_rows

        assert partition_rows(2, 5) == [(0, 1), (1, 2)]

    def test_zero_workers_uses_one_band(self):
        """Test that a non-positive worker count falls back to one band."""
        from src.whitted.core.scheduler import partition_rows

        assert partition_rows(5, 0) == [(0, 5)]

    def test_empty_image(self):
        """Test that an empty image has no bands."""
        from src.whitted.core.scheduler import partition_rows

        assert partition_rows(0, 4) == []

    @pytest.mark.parametrize("height", [1, 7, 64, 101])
    @pytest.mark.parametrize("workers", [1, 2, 3, 8])
    def test_bands_cover_every_row_once(self, height, workers):
        """Test that bands are contiguous and cover [0, height)."""
        from src.whitted.core.scheduler import partition_rows

        bands = partition_rows(height, workers)
        rows = [row for start, stop in bands for row in range(start, stop)]

        assert rows == list(range(height))
        assert all(start < stop for start, stop in bands)


class TestCancellationToken:
    """Tests for the shared stop flag."""

    def test_token_starts_clear(self):
        """Test that a new token is not cancelled."""
        from src.whitted.core.scheduler import CancellationToken

        assert not CancellationToken().cancelled

    def test_cancel_sets_flag(self):
        """Test that cancel() is visible from another thread."""
        from src.whitted.core.scheduler import CancellationToken

        token = CancellationToken()
        worker = threading.Thread(target=token.cancel)
        worker.start()
        worker.join()

        assert token.cancelled


class TestRenderScheduler:
    """Tests for full render passes."""

    def test_invalid_refresh_interval(self):
        """Test that the refresh interval must be positive."""
        from src.whitted.core.scheduler import RenderScheduler

        with pytest.raises(ValueError):
            RenderScheduler(RayTracer(), refresh_interval=0.0)

    def test_render_without_scene_raises(self):
        """Test that rendering without a scene raises SceneNotReadyError."""
        from src.whitted.core.scheduler import RenderScheduler
        from src.whitted.errors import SceneNotReadyError

        with pytest.raises(SceneNotReadyError):
            RenderScheduler(RayTracer()).render()

    def test_image_size_follows_aspect(self):
        """Test that the height is the configured width over the camera aspect."""
        from src.whitted.camera.pinhole import PinholeCamera
        from src.whitted.core.config import TraceConfig
        from src.whitted.core.scheduler import RenderScheduler
        from src.whitted.scene.scene import Scene

        scene = Scene(camera=PinholeCamera(aspect_ratio=2.0))
        tracer = RayTracer(TraceConfig(size=16), scene=scene)

        assert RenderScheduler(tracer).image_size() == (16, 8)

    def test_full_render(self, diffuse_sphere_scene):
        """Test that a render traces every row into the buffer."""
        from src.whitted.core.config import TraceConfig
        from src.whitted.core.scheduler import RenderScheduler

        tracer = RayTracer(TraceConfig(size=12, threads=3), scene=diffuse_sphere_scene)
        result = RenderScheduler(tracer, refresh_interval=0.01).render()

        assert (result.width, result.height) == (12, 12)
        assert result.rows_completed == 12
        assert not result.cancelled
        assert result.elapsed >= 0.0

        buffer = tracer.get_buffer()
        assert (buffer.width, buffer.height) == (12, 12)
        # The sphere covers the image center
        assert buffer.get_pixel(6, 6) != (0, 0, 0)
        # Pixels match single-threaded tracing
        expected = tracer.sample_pixel(6, 6)
        assert buffer.get_pixel(6, 6) == tuple(int(255.0 * c) for c in expected)

    def test_progress_reports_completion(self, diffuse_sphere_scene):
        """Test that the last progress report covers every row."""
        from src.whitted.core.config import TraceConfig
        from src.whitted.core.scheduler import RenderScheduler

        reports = []

        def on_progress(done, total):
            reports.append((done, total))

        tracer = RayTracer(TraceConfig(size=8, threads=2), scene=diffuse_sphere_scene)
        scheduler = RenderScheduler(tracer, refresh_interval=0.01, on_progress=on_progress)

        scheduler.render()

        assert reports
        assert reports[-1] == (8, 8)
        done = [d for d, _ in reports]
        assert done == sorted(done)

    def test_precancelled_token(self, diffuse_sphere_scene):
        """Test that a token cancelled before the pass leaves the buffer clear."""
        from src.whitted.core.config import TraceConfig
        from src.whitted.core.scheduler import CancellationToken, RenderScheduler

        tracer = RayTracer(TraceConfig(size=8), scene=diffuse_sphere_scene)
        token = CancellationToken()
        token.cancel()

        result = RenderScheduler(tracer, refresh_interval=0.01).render(token)

        assert result.cancelled
        assert result.rows_completed == 0
        assert not tracer.get_buffer().data.any()

    def test_cancel_during_render(self, diffuse_sphere_scene):
        """Test that workers stop within one pixel per band after cancellation."""
        from src.whitted.core.config import TraceConfig
        from src.whitted.core.scheduler import CancellationToken, RenderScheduler

        token = CancellationToken()

        class CancellingTracer(RayTracer):
            def __init__(self, *args, **kwargs):
                super().__init__(*args, **kwargs)
                self.lock = threading.Lock()
                self.pixels = 0

            def trace_pixel(self, i, j, rng=None):
                with self.lock:
                    self.pixels += 1
                    if self.pixels >= 10:
                        token.cancel()
                return super().trace_pixel(i, j, rng)

        tracer = CancellingTracer(TraceConfig(size=16, threads=2), scene=diffuse_sphere_scene)
        result = RenderScheduler(tracer, refresh_interval=0.01).render(token)

        assert result.cancelled
        assert result.rows_completed < result.height
        # The cancelling pixel plus at most one in-flight pixel in the other band
        assert tracer.pixels <= 11

    def test_worker_error_propagates(self, diffuse_sphere_scene):
        """Test that an exception in a worker is raised by render()."""
        from src.whitted.core.config import TraceConfig
        from src.whitted.core.scheduler import RenderScheduler

        class FailingTracer(RayTracer):
            def trace_pixel(self, i, j, rng=None):
                raise RuntimeError("pixel failed")

        tracer = FailingTracer(TraceConfig(size=8, threads=2), scene=diffuse_sphere_scene)

        with pytest.raises(RuntimeError, match="pixel failed"):
            RenderScheduler(tracer, refresh_interval=0.01).render()

    def test_worker_error_stops_other_bands(self, diffuse_sphere_scene):
        """Test that a failing band cancels the pass instead of waiting for the rest."""
        import time

        from src.whitted.core.config import TraceConfig
        from src.whitted.core.scheduler import CancellationToken, RenderScheduler

        class OneBadBandTracer(RayTracer):
            def __init__(self, *args, **kwargs):
                super().__init__(*args, **kwargs)
                self.lock = threading.Lock()
                self.good_pixels = 0

            def trace_pixel(self, i, j, rng=None):
                if j < 16:
                    raise RuntimeError("band failed")
                time.sleep(0.002)
                with self.lock:
                    self.good_pixels += 1
                return super().trace_pixel(i, j, rng)

        tracer = OneBadBandTracer(TraceConfig(size=32, threads=2), scene=diffuse_sphere_scene)
        token = CancellationToken()

        with pytest.raises(RuntimeError, match="band failed"):
            RenderScheduler(tracer, refresh_interval=0.01).render(token)

        assert token.cancelled
        # The healthy band holds 16 rows of 32 pixels
        assert tracer.good_pixels < 16 * 32 // 2

    def test_seeded_render_is_reproducible(self, mirror_scene):
        """Test that the same seed renders identical glossy images."""
        from src.whitted.core.config import TraceConfig
        from src.whitted.core.scheduler import RenderScheduler

        config = TraceConfig(size=10, threads=3, glossy_samples=4, seed=7)
        images = []
        for _ in range(2):
            tracer = RayTracer(config, scene=mirror_scene)
            RenderScheduler(tracer, refresh_interval=0.01).render()
            images.append(tracer.get_buffer().data.copy())

        assert np.array_equal(images[0], images[1])
