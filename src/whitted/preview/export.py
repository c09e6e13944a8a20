"""Image export utilities for traced images.

Frame buffers are saved byte-for-byte as 8-bit RGB PNGs via Pillow (top row
first). Float images can be exported with an optional gamma correction.

Example:
    >>> from src.whitted.preview.export import save_png
    >>> save_png(tracer.framebuffer, "output.png")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from src.whitted.preview.display import process_image_for_display

if TYPE_CHECKING:
    from src.whitted.core.framebuffer import FrameBuffer

logger = logging.getLogger(__name__)


def save_png(
    framebuffer: FrameBuffer,
    filepath: str | Path,
    *,
    gamma: float = 1.0,
) -> None:
    """Save a frame buffer as a PNG file.

    Args:
        framebuffer: The frame buffer to save.
        filepath: Output file path (should end in .png).
        gamma: Gamma correction value. The default 1.0 writes the buffer
            bytes unchanged.
    """
    if gamma == 1.0:
        image_uint8 = framebuffer.to_array()
    else:
        image_uint8 = image_to_uint8(framebuffer.to_image(), gamma=gamma)

    PILImage.fromarray(image_uint8, mode="RGB").save(filepath)
    logger.info("Saved %dx%d image to %s", framebuffer.width, framebuffer.height, filepath)


def save_png_from_array(
    image: npt.NDArray[np.float32],
    filepath: str | Path,
    *,
    gamma: float = 1.0,
) -> None:
    """Save a (H, W, 3) float image in [0, 1] as a PNG file."""
    PILImage.fromarray(image_to_uint8(image, gamma=gamma), mode="RGB").save(filepath)


def load_png(filepath: str | Path) -> npt.NDArray[np.uint8]:
    """Read a PNG file back as a (H, W, 3) uint8 array."""
    with PILImage.open(filepath) as img:
        return np.asarray(img.convert("RGB"), dtype=np.uint8)


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    gamma: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert a float image to uint8, truncating 255 * value like the tracer.

    Args:
        image: Image array of shape (H, W, 3).
        gamma: Gamma correction value.

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.
    """
    processed = process_image_for_display(image, gamma=gamma)
    return (processed * 255).astype(np.uint8)


def compute_rmse(
    image_a: npt.NDArray[np.floating[npt.NBitBase]] | npt.NDArray[np.uint8],
    image_b: npt.NDArray[np.floating[npt.NBitBase]] | npt.NDArray[np.uint8],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
