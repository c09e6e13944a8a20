"""Matplotlib-based preview display for traced images.

The frame buffer already holds clamped display values, so the preview shows
it as-is by default. An optional gamma can brighten renders of scenes tuned
for a linear display.

Example:
    >>> from src.whitted.preview.display import show_preview
    >>> from src.whitted.core.scheduler import RenderScheduler
    >>>
    >>> result = RenderScheduler(tracer).render()
    >>> show_preview(tracer.framebuffer, result=result)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from src.whitted.core.framebuffer import FrameBuffer
    from src.whitted.core.scheduler import RenderResult


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = 2.2,
) -> npt.NDArray[np.float32]:
    """Apply gamma correction for display.

    Args:
        image: Image array of shape (H, W, 3) in [0, 1] range.
        gamma: Gamma value (1.0 leaves the image unchanged).

    Returns:
        Gamma corrected image.

    Raises:
        ValueError: If gamma is not positive.
    """
    if gamma <= 0.0:
        raise ValueError(f"Gamma must be positive, got {gamma}")
    if gamma == 1.0:
        return image

    # Clamp to [0, 1] before gamma to avoid NaN from negative values
    image = np.clip(image, 0.0, 1.0)
    return np.power(image, 1.0 / gamma).astype(np.float32)


def process_image_for_display(
    image: npt.NDArray[np.float32],
    gamma: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Gamma-correct and clamp an image to [0, 1] for display."""
    result = apply_gamma(image.astype(np.float32), gamma)
    return np.clip(result, 0.0, 1.0).astype(np.float32)


def show_preview(
    framebuffer: FrameBuffer,
    *,
    gamma: float = 1.0,
    title: str | None = None,
    result: RenderResult | None = None,
    figsize: tuple[float, float] = (8, 8),
    block: bool = True,
) -> None:
    """Display the frame buffer as a Matplotlib figure.

    Args:
        framebuffer: The frame buffer to display.
        gamma: Gamma correction value (default 1.0, no correction).
        title: Custom title (default shows the size and render time).
        result: Optional render result used for the default title.
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    display_image = process_image_for_display(framebuffer.to_image(), gamma=gamma)

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(display_image, interpolation="nearest")
    ax.axis("off")

    if title is None:
        title = f"Rendered Image - {framebuffer.width}x{framebuffer.height}"
        if result is not None:
            title += f" ({result.elapsed:.2f}s"
            title += ", cancelled)" if result.cancelled else ")"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)


def show_comparison(
    image_a: npt.NDArray[np.float32],
    image_b: npt.NDArray[np.float32],
    *,
    labels: tuple[str, str] = ("A", "B"),
    diff_scale: float = 10.0,
    figsize: tuple[float, float] = (16, 6),
    block: bool = True,
) -> float:
    """Display two images side by side with their amplified difference.

    Useful for comparing renders with different trace settings (for example
    Fresnel on and off).

    Args:
        image_a: First image array (H, W, 3) in [0, 1].
        image_b: Second image array (H, W, 3) in [0, 1].
        labels: Labels for the two images.
        diff_scale: Scale factor for difference amplification.
        figsize: Figure size in inches.
        block: Whether to block execution until figure is closed.

    Returns:
        RMSE between the two images.
    """
    import matplotlib.pyplot as plt

    display_a = process_image_for_display(image_a)
    display_b = process_image_for_display(image_b)
    diff = np.abs(display_a.astype(np.float64) - display_b.astype(np.float64))
    rmse = float(np.sqrt(np.mean(diff**2)))

    diff_amplified = np.clip(diff * diff_scale, 0.0, 1.0)

    fig, axes = plt.subplots(1, 3, figsize=figsize)

    axes[0].imshow(display_a)
    axes[0].set_title(labels[0])
    axes[0].axis("off")

    axes[1].imshow(display_b)
    axes[1].set_title(labels[1])
    axes[1].axis("off")

    axes[2].imshow(diff_amplified)
    axes[2].set_title(f"Difference ({diff_scale}x) - RMSE: {rmse:.6f}")
    axes[2].axis("off")

    plt.tight_layout()
    plt.show(block=block)

    return rmse
