#!/usr/bin/env python3
"""Render a scene offline with the Whitted tracer and save it as a PNG.

Without --scene the built-in Cornell box demo is rendered; otherwise the
given JSON scene file is loaded.

Usage:
    python -m examples.render_scene [options]

Options:
    --scene PATH            JSON scene file (default: built-in demo)
    --size SIZE             Image width in pixels (default: 150)
    --depth DEPTH           Maximum recursion depth (default: 3)
    --threads N             Render worker count (default: 2)
    --threshold T           Intensity threshold (default: 0.01)
    --glossy N              Glossy reflection samples (default: 0)
    --supersampling N       N x N jittered samples per pixel (default: 0)
    --fresnel               Enable Fresnel blending
    --fresnel-ratio R       Fresnel blend strength (default: 1.0)
    --no-shadows            Disable shadow rays
    --soft-shadows          Enable soft shadows
    --no-reflection         Disable reflection rays
    --no-refraction         Disable refraction rays
    --seed SEED             Seed for reproducible sampling
    --output OUTPUT         Output file path (default: whitted.png)
    --preview               Show the result in a Matplotlib window
    --quiet                 Suppress progress output

Example:
    python -m examples.render_scene --size 256 --depth 5 --fresnel --supersampling 2
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

# Ensure the project root is in the Python path for direct execution
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from src.whitted.core.config import TraceConfig  # noqa: E402
from src.whitted.core.scheduler import CancellationToken, RenderScheduler  # noqa: E402
from src.whitted.core.tracer import RayTracer  # noqa: E402
from src.whitted.errors import TracerError  # noqa: E402
from src.whitted.logging_config import setup_logging  # noqa: E402
from src.whitted.preview.export import save_png  # noqa: E402
from src.whitted.scene.cornell_box import create_whitted_scene  # noqa: E402


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a scene with the recursive ray tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--scene", type=str, default=None, help="JSON scene file")
    parser.add_argument("--size", type=int, default=150, help="Image width (default: 150)")
    parser.add_argument("--depth", type=int, default=3, help="Recursion depth (default: 3)")
    parser.add_argument("--threads", type=int, default=2, help="Worker count (default: 2)")
    parser.add_argument(
        "--threshold", type=float, default=0.01, help="Intensity threshold (default: 0.01)"
    )
    parser.add_argument("--glossy", type=int, default=0, help="Glossy samples (default: 0)")
    parser.add_argument(
        "--supersampling", type=int, default=0, help="N x N samples per pixel (default: 0)"
    )
    parser.add_argument("--fresnel", action="store_true", help="Enable Fresnel blending")
    parser.add_argument(
        "--fresnel-ratio", type=float, default=1.0, help="Fresnel blend strength (default: 1.0)"
    )
    parser.add_argument("--no-shadows", action="store_true", help="Disable shadow rays")
    parser.add_argument("--soft-shadows", action="store_true", help="Enable soft shadows")
    parser.add_argument("--no-reflection", action="store_true", help="Disable reflection")
    parser.add_argument("--no-refraction", action="store_true", help="Disable refraction")
    parser.add_argument("--seed", type=int, default=None, help="Sampling seed")
    parser.add_argument(
        "--output", type=str, default="whitted.png", help="Output file (default: whitted.png)"
    )
    parser.add_argument("--preview", action="store_true", help="Show a Matplotlib preview")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def build_config(args: argparse.Namespace) -> TraceConfig:
    """Translate command-line options into a trace configuration."""
    return TraceConfig(
        max_depth=args.depth,
        size=args.size,
        shadows=not args.no_shadows,
        soft_shadows=args.soft_shadows,
        reflection=not args.no_reflection,
        glossy_samples=args.glossy,
        fresnel=args.fresnel,
        fresnel_ratio=args.fresnel_ratio,
        refraction=not args.no_refraction,
        threads=args.threads,
        intensity_threshold=args.threshold,
        supersampling=args.supersampling,
        seed=args.seed,
    )


def render_scene(
    config: TraceConfig,
    scene_path: str | None = None,
    output_path: str = "whitted.png",
    preview: bool = False,
    quiet: bool = False,
) -> Path:
    """Render a scene and save it to a PNG file.

    Args:
        config: Trace configuration for the pass.
        scene_path: Optional JSON scene file; the demo scene is used if None.
        output_path: Output file path (PNG).
        preview: Show the result in a Matplotlib window.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    tracer = RayTracer(config)
    if scene_path is None:
        if not quiet:
            print("Creating Cornell box demo scene...")
        tracer.set_scene(create_whitted_scene())
    else:
        if not quiet:
            print(f"Loading scene {scene_path}...")
        tracer.load_scene(scene_path)

    start_time = time.time()

    def progress_callback(done: int, total: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (done / total) * 100 if total > 0 else 0
            print(
                f"\r  Progress: {done}/{total} rows ({progress_pct:.1f}%) - {elapsed:.1f}s",
                end="",
                flush=True,
            )

    scheduler = RenderScheduler(tracer, on_progress=progress_callback)
    width, height = scheduler.image_size()
    if not quiet:
        print(f"Rendering {width}x{height} with {config.threads} thread(s)...")

    result = scheduler.render(CancellationToken())

    if not quiet:
        print()  # Newline after progress

    output_file = Path(output_path)
    save_png(tracer.framebuffer, output_file)

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {result.elapsed:.2f}s")

    if preview:
        from src.whitted.preview.display import show_preview

        show_preview(tracer.framebuffer, result=result)

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()
    setup_logging("WARNING" if args.quiet else "INFO")

    try:
        config = build_config(args)
        render_scene(
            config,
            scene_path=args.scene,
            output_path=args.output,
            preview=args.preview,
            quiet=args.quiet,
        )
        return 0
    except (TracerError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
