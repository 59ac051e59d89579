"""Preview module for image output.

Components:
    export: BMP/PNG export of the rendered frame

Example:
    >>> from skytrace.core.renderer import get_image_numpy
    >>> from skytrace.preview import save_image
    >>>
    >>> save_image(get_image_numpy(), "out.bmp")
"""

from skytrace.preview.export import (
    check_output_writable,
    save_bmp,
    save_image,
    save_png,
)

__all__ = [
    "check_output_writable",
    "save_bmp",
    "save_png",
    "save_image",
]
