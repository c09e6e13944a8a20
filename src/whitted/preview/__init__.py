"""Preview module for output and visualization.

Components:
    display: Matplotlib-based static preview
    export: PNG export utilities (Pillow)
    interactive: Taichi GGUI window with trace controls

Example:
    >>> from src.whitted.preview import save_png, show_preview
    >>> show_preview(tracer.framebuffer)
    >>> save_png(tracer.framebuffer, "output.png")
"""

from src.whitted.preview.display import (
    apply_gamma,
    process_image_for_display,
    show_comparison,
    show_preview,
)
from src.whitted.preview.export import (
    compute_rmse,
    image_to_uint8,
    load_png,
    save_png,
    save_png_from_array,
)
from src.whitted.preview.interactive import InteractivePreview

__all__ = [
    "InteractivePreview",
    "show_preview",
    "show_comparison",
    "apply_gamma",
    "process_image_for_display",
    "save_png",
    "save_png_from_array",
    "load_png",
    "image_to_uint8",
    "compute_rmse",
]
