"""Render target and frame rendering kernel.

This module owns the color buffer, runs the tracer once per pixel and turns
the result into packed 24-bit pixels.

Every pixel is traced independently from the same read-only scene, camera
and skybox fields, so the render kernel is a single parallel loop over
(row, column) with no synchronization.

The color buffer is indexed [row, column] with row 0 at the top, the same
order the image encoder writes rows in.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from skytrace.camera.pinhole import setup_camera
    >>> from skytrace.core.renderer import render_image, setup_render_target
    >>> from skytrace.scene.default_scene import create_default_scene
    >>>
    >>> scene, camera = create_default_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(camera.width, camera.height)
    >>> render_image()
"""

import logging
import time

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from skytrace.camera.pinhole import get_ray
from skytrace.core.tracer import trace
from skytrace.scene.intersection import NO_OBJECT

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Color buffer (preallocated to max size), indexed [row, column]
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffer.

    Sets the active image dimensions and clears the buffer.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the color buffer to black."""
    _color_buffer.fill(0.0)


def reset_render_target() -> None:
    """Forget the render target so it must be set up again."""
    _render_target_initialized[None] = 0
    clear_render_target()


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_frame(width: ti.i32, height: ti.i32):
    """Trace one ray per pixel into the color buffer."""
    for y, x in ti.ndrange(height, width):
        ray = get_ray(x, y)
        _color_buffer[y, x] = trace(0, NO_OBJECT, ray.origin, ray.direction)


@ti.kernel
def _render_single_pixel(x: ti.i32, y: ti.i32):
    """Trace the primary ray of one pixel into the color buffer."""
    for _ in range(1):
        ray = get_ray(x, y)
        _color_buffer[y, x] = trace(0, NO_OBJECT, ray.origin, ray.direction)


def render_image() -> None:
    """Render every pixel of the active render target.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    start = time.perf_counter()
    _render_frame(width, height)
    ti.sync()
    logger.info("Rendered %dx%d frame in %.2fs", width, height, time.perf_counter() - start)


def render_pixel(x: int, y: int) -> tuple[float, float, float]:
    """Render a single pixel and return its color.

    This is a Python-callable function for testing. For full frames use
    render_image(), which processes all pixels in parallel.

    Args:
        x: Pixel column (0 = left).
        y: Pixel row (0 = top).

    Returns:
        Tuple of (R, G, B) color values.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If the pixel lies outside the render target.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    if not (0 <= x < width and 0 <= y < height):
        raise ValueError(f"Pixel ({x}, {y}) outside {width}x{height} render target")

    _render_single_pixel(x, y)
    color = _color_buffer[y, x]
    return (float(color[0]), float(color[1]), float(color[2]))


# =============================================================================
# Readback and Pixel Packing
# =============================================================================


def get_image_numpy() -> npt.NDArray[np.float32]:
    """Get the rendered image as a NumPy array.

    The array shape is (height, width, 3), rows top to bottom, values
    clamped to [0, 1].

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    image = _color_buffer.to_numpy()[:height, :width, :]
    return np.clip(image, 0.0, 1.0).astype(np.float32)


def color_to_pixel(color: tuple[float, float, float]) -> tuple[int, int, int]:
    """Pack a clamped color into a (B, G, R) byte triple.

    Each channel becomes ``round(c * 255)``, rounding halves up.

    Args:
        color: RGB color with channels in [0, 1].

    Returns:
        Tuple of (blue, green, red) byte values.
    """
    r, g, b = (int(c * 255.0 + 0.5) for c in color)
    return (b, g, r)


def image_to_pixels(image: npt.NDArray[np.float32]) -> npt.NDArray[np.uint8]:
    """Pack a float RGB image into B, G, R bytes.

    Args:
        image: Array of shape (H, W, 3) with RGB channels in [0, 1].

    Returns:
        Array of shape (H, W, 3) with dtype uint8 in B, G, R order.
    """
    clamped = np.clip(image.astype(np.float32), 0.0, 1.0)
    rgb = (clamped * np.float32(255.0) + np.float32(0.5)).astype(np.uint8)
    return np.ascontiguousarray(rgb[..., ::-1])
