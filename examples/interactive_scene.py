#!/usr/bin/env python3
"""Interactive Whitted tracer with a Taichi GGUI control panel.

Usage:
    python -m examples.interactive_scene [--scene PATH] [--scene-dir DIR]

Controls:
    - Depth, Size, Threads, Threshold, Glossy samples, Supersampling sliders
    - Shadows, Soft shadows, Reflection, Refraction, Fresnel toggles
    - Fresnel ratio and distance attenuation override sliders
    - Render: start a pass in the background (the image fills in live)
    - Stop: cancel the running pass
    - Export PNG: save the current frame buffer with a timestamp
    - Scenes: load any JSON scene from --scene-dir (default: examples/scenes)
"""

from __future__ import annotations

import argparse
import platform
import sys
from pathlib import Path

# Ensure the project root is in the Python path for direct execution
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import taichi as ti  # noqa: E402


def initialize_taichi() -> str:
    """Initialize Taichi with the best available backend for the window.

    On macOS, prefers Metal. Falls back to CPU if GPU is unavailable.

    Returns:
        Name of the backend being used.
    """
    if platform.system() == "Darwin":
        try:
            ti.init(arch=ti.metal)
            return "Metal (GPU)"
        except RuntimeError:
            pass

    try:
        ti.init(arch=ti.gpu)
        return "GPU"
    except RuntimeError:
        pass

    ti.init(arch=ti.cpu)
    return "CPU"


def main() -> int:
    """Main entry point for the interactive tracer.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    parser = argparse.ArgumentParser(description="Interactive Whitted ray tracer.")
    parser.add_argument("--scene", type=str, default=None, help="JSON scene file")
    parser.add_argument(
        "--scene-dir",
        type=str,
        default=str(Path(__file__).parent / "scenes"),
        help="Directory of JSON scenes offered in the Scenes panel",
    )
    parser.add_argument("--window-size", type=int, default=768, help="Window size in pixels")
    args = parser.parse_args()

    backend = initialize_taichi()
    print(f"Taichi backend: {backend}")

    from src.whitted.core.tracer import RayTracer
    from src.whitted.errors import SceneLoadError
    from src.whitted.logging_config import setup_logging
    from src.whitted.preview.interactive import InteractivePreview
    from src.whitted.scene.cornell_box import create_whitted_scene

    setup_logging("INFO")

    if not InteractivePreview.is_display_available():
        print("Error: No display available. Cannot run interactive preview.")
        print("This script requires a graphical display environment.")
        return 1

    tracer = RayTracer()
    if args.scene is None:
        tracer.set_scene(create_whitted_scene())
    else:
        try:
            tracer.load_scene(args.scene)
        except SceneLoadError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    scene_paths = sorted(Path(args.scene_dir).glob("*.json"))
    preview = InteractivePreview(
        tracer, window_size=args.window_size, scene_paths=scene_paths
    )

    print("Starting interactive tracer...")
    print("  - Adjust the trace controls, then click 'Render'")
    print("  - Click 'Stop' to cancel a running pass")
    print("  - Use the Scenes panel to load another scene")
    print("  - Close window to exit")
    print()

    try:
        preview.run()
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
    finally:
        preview.stop_render(wait=True)
        preview.close()
        print("Preview window closed.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
