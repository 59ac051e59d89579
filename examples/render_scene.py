#!/usr/bin/env python3
"""Render a scene against a skybox and save it as an image.

The built-in scene (a ground plane and four spheres) is rendered unless a
JSON scene file is given. The frame is written as a 24-bit BMP, or as a PNG
when the output path ends in .png.

Usage:
    python -m examples.render_scene [options]

Options:
    --width WIDTH           Image width in pixels (default: 1920)
    --height HEIGHT         Image height in pixels (default: 1080)
    --skybox PATH           Raw 3000x3000 skybox texel file (default: skybox.raw)
    --skybox-layout LAYOUT  Texel channel layout, rgbx or bgrx (default: rgbx)
    --scene PATH            JSON scene file (default: built-in scene)
    --config PATH           JSON render config; other options override it
    --output OUTPUT         Output file path (default: out.bmp)
    --arch ARCH             Taichi backend (default: cpu)
    --quiet                 Suppress progress output

Example:
    python -m examples.render_scene --skybox sky.raw --output frame.bmp
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti

from skytrace.config import ARCHES, SKYBOX_LAYOUTS, RenderConfig, load_render_config
from skytrace.errors import SkytraceError


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a scene against a skybox.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=None,
        help="Image width in pixels (default: 1920)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=None,
        help="Image height in pixels (default: 1080)",
    )
    parser.add_argument(
        "--skybox",
        dest="skybox_path",
        type=str,
        default=None,
        help="Raw skybox texel file (default: skybox.raw)",
    )
    parser.add_argument(
        "--skybox-layout",
        dest="skybox_layout",
        choices=SKYBOX_LAYOUTS,
        default=None,
        help="Skybox texel channel layout (default: rgbx)",
    )
    parser.add_argument(
        "--scene",
        dest="scene_path",
        type=str,
        default=None,
        help="JSON scene file (default: built-in scene)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="JSON render config file",
    )
    parser.add_argument(
        "--output",
        dest="output_path",
        type=str,
        default=None,
        help="Output file path (default: out.bmp)",
    )
    parser.add_argument(
        "--arch",
        choices=ARCHES,
        default=None,
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> RenderConfig:
    """Combine the optional config file with command-line overrides.

    Raises:
        ConfigurationError: If the config file or an override is invalid.
    """
    base = load_render_config(args.config) if args.config else RenderConfig()
    return base.with_overrides(
        width=args.width,
        height=args.height,
        skybox_path=args.skybox_path,
        skybox_layout=args.skybox_layout,
        scene_path=args.scene_path,
        output_path=args.output_path,
        arch=args.arch,
    )


def render_scene(config: RenderConfig, quiet: bool = False) -> Path:
    """Render the configured scene and save it to file.

    The output file is checked and the skybox loaded before any tracing, so
    a bad path aborts without rendering.

    Args:
        config: Render settings.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.

    Raises:
        SkytraceError: If the output, skybox or scene cannot be used.
    """
    # Lazy imports to allow Taichi initialization first
    from skytrace.camera.pinhole import PinholeCamera, setup_camera
    from skytrace.core.renderer import get_image_numpy, render_image, setup_render_target
    from skytrace.environment.skybox import load_skybox
    from skytrace.preview.export import check_output_writable, save_image
    from skytrace.scene.default_scene import create_default_scene
    from skytrace.scene.manager import load_scene_file

    output_file = Path(config.output_path)
    check_output_writable(output_file)

    if not quiet:
        print(f"Loading skybox {config.skybox_path} ({config.skybox_layout})...")
    load_skybox(config.skybox_path, config.skybox_layout)

    if config.scene_path is not None:
        scene = load_scene_file(config.scene_path)
        camera = PinholeCamera(width=config.width, height=config.height)
    else:
        scene, camera = create_default_scene(config.width, config.height)

    setup_camera(camera)
    setup_render_target(camera.width, camera.height)

    if not quiet:
        print(
            f"Rendering {scene.get_object_count()} objects "
            f"at {config.width}x{config.height}..."
        )

    start_time = time.time()
    render_image()
    save_image(get_image_numpy(), output_file)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = build_config(args)
    except SkytraceError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    ti.init(arch=getattr(ti, config.arch))
    if not args.quiet:
        print(f"Using {config.arch} backend")

    try:
        render_scene(config, quiet=args.quiet)
        return 0
    except SkytraceError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
