"""Byte RGB frame buffer written by the render workers.

The buffer is a flat uint8 array of width * height * 3 bytes. Pixel (x, y)
occupies bytes (x + y * width) * 3 .. +2, with row y = 0 at the bottom of the
image (image coordinate y grows upward, like the camera's). Workers write
disjoint rows, so no locking is needed while a pass is running.

Example:
    >>> from src.whitted.core.framebuffer import FrameBuffer
    >>> fb = FrameBuffer(4, 2)
    >>> fb.set_pixel(1, 0, (1.0, 0.5, 0.0))
    >>> fb.get_pixel(1, 0)
    (255, 127, 0)
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt

from src.whitted.core.ray import Vec3


class FrameBuffer:
    """Fixed-size array of byte triples, reallocated on resize."""

    def __init__(self, width: int = 0, height: int = 0) -> None:
        self._width = 0
        self._height = 0
        self._data: npt.NDArray[np.uint8] = np.zeros(0, dtype=np.uint8)
        self.resize(width, height)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def data(self) -> npt.NDArray[np.uint8]:
        """The flat, row-major byte array (bottom row first)."""
        return self._data

    def resize(self, width: int, height: int) -> None:
        """Reallocate the buffer if the dimensions changed, then clear it.

        Raises:
            ValueError: If either dimension is negative.
        """
        if width < 0 or height < 0:
            raise ValueError(f"Frame buffer size {width}x{height} must be non-negative.")
        if width != self._width or height != self._height:
            self._width = width
            self._height = height
            self._data = np.zeros(width * height * 3, dtype=np.uint8)
        else:
            self.clear()

    def clear(self) -> None:
        self._data.fill(0)

    def _offset(self, x: int, y: int) -> int:
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise IndexError(f"Pixel ({x}, {y}) is outside {self._width}x{self._height}.")
        return (x + y * self._width) * 3

    def set_pixel(self, x: int, y: int, color: Sequence[float] | Vec3) -> None:
        """Store a color with channels in [0, 1] as bytes (truncating 255 * c)."""
        offset = self._offset(x, y)
        for k in range(3):
            value = int(255.0 * float(color[k]))
            self._data[offset + k] = min(max(value, 0), 255)

    def get_pixel(self, x: int, y: int) -> tuple[int, int, int]:
        offset = self._offset(x, y)
        r, g, b = self._data[offset : offset + 3]
        return (int(r), int(g), int(b))

    def to_array(self) -> npt.NDArray[np.uint8]:
        """Copy of the pixels as a (height, width, 3) uint8 array, top row first."""
        image = self._data.reshape(self._height, self._width, 3)
        return np.flipud(image).copy()

    def to_image(self) -> npt.NDArray[np.float32]:
        """Pixels as a (height, width, 3) float32 array in [0, 1], top row first.

        This is the layout expected by the display and export helpers.
        """
        return self.to_array().astype(np.float32) / 255.0

    def __repr__(self) -> str:
        return f"FrameBuffer({self._width}x{self._height})"
