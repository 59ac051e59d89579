"""Image export utilities for rendered frames.

Supported formats:
    - BMP (24-bit, rows stored in render order via Pillow)
    - PNG (8-bit, conventional orientation via Pillow)

BMP readers expect the bottom row first. The renderer's rows are written in
the order they were produced (top row first), so the stored BMP displays
upside down in a conventional viewer. PNG export is oriented normally.

Example:
    >>> from skytrace.core.renderer import get_image_numpy
    >>> from skytrace.preview.export import save_image
    >>>
    >>> save_image(get_image_numpy(), "out.bmp")
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from skytrace.core.renderer import image_to_pixels
from skytrace.errors import OutputError

logger = logging.getLogger(__name__)


def check_output_writable(filepath: str | Path) -> None:
    """Make sure the output file could be written, without creating it.

    Called before rendering so an unwritable target aborts early. An
    existing file must be writable; otherwise its directory must exist and
    allow new files.

    Args:
        filepath: Output file path.

    Raises:
        OutputError: If the file cannot be opened for writing.
    """
    path = Path(filepath)
    if path.exists():
        if path.is_dir():
            raise OutputError(f"file '{filepath}' is a directory")
        writable = os.access(path, os.W_OK)
    else:
        parent = path.parent
        writable = parent.is_dir() and os.access(parent, os.W_OK | os.X_OK)
    if not writable:
        raise OutputError(f"file '{filepath}' cannot be opened for writing")


def _pixels_to_rgb(image: npt.NDArray[np.float32]) -> npt.NDArray[np.uint8]:
    """Quantize a float RGB image to 8-bit RGB using the pixel packing rule."""
    return np.ascontiguousarray(image_to_pixels(image)[..., ::-1])


def _save(pil_image: PILImage.Image, filepath: str | Path, fmt: str) -> None:
    try:
        pil_image.save(filepath, format=fmt)
    except OSError as e:
        raise OutputError(f"file '{filepath}' cannot be written ({e})") from e
    logger.info("Saved %s", filepath)


def save_bmp(image: npt.NDArray[np.float32], filepath: str | Path) -> None:
    """Save a rendered image as a 24-bit BMP.

    The stored rows appear in the same top-to-bottom order as the image
    array (no vertical flip), and each pixel is stored as B, G, R bytes.

    Args:
        image: RGB image array of shape (H, W, 3) with channels in [0, 1].
        filepath: Output file path.

    Raises:
        OutputError: If the file cannot be written.
    """
    rgb = _pixels_to_rgb(image)
    # Pillow writes BMP rows bottom-up; pre-flip so storage order is ours
    pil_image = PILImage.fromarray(np.ascontiguousarray(np.flipud(rgb)))
    _save(pil_image, filepath, "BMP")


def save_png(image: npt.NDArray[np.float32], filepath: str | Path) -> None:
    """Save a rendered image as an 8-bit PNG.

    Args:
        image: RGB image array of shape (H, W, 3) with channels in [0, 1].
        filepath: Output file path.

    Raises:
        OutputError: If the file cannot be written.
    """
    pil_image = PILImage.fromarray(_pixels_to_rgb(image))
    _save(pil_image, filepath, "PNG")


def save_image(image: npt.NDArray[np.float32], filepath: str | Path) -> None:
    """Save a rendered image, choosing the format from the file suffix.

    ``.png`` writes a PNG; anything else writes a BMP.

    Args:
        image: RGB image array of shape (H, W, 3) with channels in [0, 1].
        filepath: Output file path.

    Raises:
        OutputError: If the file cannot be written.
    """
    if Path(filepath).suffix.lower() == ".png":
        save_png(image, filepath)
    else:
        save_bmp(image, filepath)
