"""Camera module for primary ray generation.

Components:
    pinhole: Fixed pinhole camera behind a z = 0 image plane

Pixel coordinates are integer (column, row) pairs with row 0 at the top of
the image. Each pixel gets exactly one ray through its corner; there is no
sub-pixel jitter.
"""

from .pinhole import (
    PinholeCamera,
    get_ray,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "setup_camera",
    "get_ray",
]
