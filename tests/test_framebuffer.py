"""Tests for the byte RGB frame buffer."""

import numpy as np
import pytest


class TestFrameBuffer:
    """Tests for pixel storage and layout."""

    def test_initial_buffer_is_black(self):
        """Test that a new buffer is zero-filled with 3 bytes per pixel."""
        from src.whitted.core.framebuffer import FrameBuffer

        fb = FrameBuffer(4, 3)

        assert fb.data.shape == (36,)
        assert fb.data.dtype == np.uint8
        assert not fb.data.any()

    def test_set_pixel_truncates(self):
        """Test that colors are stored as int(255 * c)."""
        from src.whitted.core.framebuffer import FrameBuffer

        fb = FrameBuffer(2, 2)
        fb.set_pixel(1, 0, (1.0, 0.5, 0.999))

        assert fb.get_pixel(1, 0) == (255, 127, 254)

    def test_set_pixel_clamps_out_of_range(self):
        """Test that out-of-range channels are clamped to a byte."""
        from src.whitted.core.framebuffer import FrameBuffer

        fb = FrameBuffer(1, 1)
        fb.set_pixel(0, 0, (2.0, -1.0, 0.0))

        assert fb.get_pixel(0, 0) == (255, 0, 0)

    def test_pixel_offset(self):
        """Test that pixel (x, y) starts at byte (x + y * width) * 3."""
        from src.whitted.core.framebuffer import FrameBuffer

        fb = FrameBuffer(3, 2)
        fb.set_pixel(2, 1, (1.0, 1.0, 1.0))

        offset = (2 + 1 * 3) * 3
        assert list(fb.data[offset : offset + 3]) == [255, 255, 255]
        assert fb.data[:offset].sum() == 0

    def test_out_of_bounds(self):
        """Test that writes outside the buffer raise IndexError."""
        from src.whitted.core.framebuffer import FrameBuffer

        fb = FrameBuffer(2, 2)
        with pytest.raises(IndexError):
            fb.set_pixel(2, 0, (0.0, 0.0, 0.0))
        with pytest.raises(IndexError):
            fb.get_pixel(0, -1)

    def test_to_array_puts_top_row_first(self):
        """Test that row y = 0 (image bottom) becomes the last array row."""
        from src.whitted.core.framebuffer import FrameBuffer

        fb = FrameBuffer(2, 3)
        fb.set_pixel(0, 0, (1.0, 0.0, 0.0))
        fb.set_pixel(1, 2, (0.0, 0.0, 1.0))

        image = fb.to_array()

        assert image.shape == (3, 2, 3)
        assert tuple(image[2, 0]) == (255, 0, 0)
        assert tuple(image[0, 1]) == (0, 0, 255)

    def test_to_image_scales_to_unit_range(self):
        """Test the float32 view used by display and export."""
        from src.whitted.core.framebuffer import FrameBuffer

        fb = FrameBuffer(1, 1)
        fb.set_pixel(0, 0, (1.0, 0.0, 0.0))

        image = fb.to_image()

        assert image.dtype == np.float32
        assert np.allclose(image[0, 0], [1.0, 0.0, 0.0])

    def test_resize_reallocates(self):
        """Test that a new size reallocates a black buffer."""
        from src.whitted.core.framebuffer import FrameBuffer

        fb = FrameBuffer(2, 2)
        fb.set_pixel(0, 0, (1.0, 1.0, 1.0))
        fb.resize(5, 4)

        assert (fb.width, fb.height) == (5, 4)
        assert fb.data.shape == (60,)
        assert not fb.data.any()

    def test_resize_same_size_clears(self):
        """Test that resizing to the current size still clears the pixels."""
        from src.whitted.core.framebuffer import FrameBuffer

        fb = FrameBuffer(2, 2)
        data = fb.data
        fb.set_pixel(1, 1, (1.0, 1.0, 1.0))
        fb.resize(2, 2)

        assert fb.data is data
        assert not fb.data.any()

    def test_negative_size(self):
        """Test that negative dimensions are rejected."""
        from src.whitted.core.framebuffer import FrameBuffer

        with pytest.raises(ValueError):
            FrameBuffer(-1, 4)
