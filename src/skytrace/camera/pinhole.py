"""Pinhole camera model for primary ray generation.

The camera is a fixed pinhole: the eye sits at (0, 0, -focal_length) behind
an image plane at z = 0. Pixel (x, y), with y counted downward from the top
row, maps to the image-plane point

    p = (scale * x - half_width, -scale * y + half_height, 0)

where scale = 2 * half_height / height. The primary ray starts on the image
plane at p (not at the eye) and points along normalize(p - eye).

With the defaults (half_width = 1.7778, half_height = 1) the image plane
spans a 16:9 window.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from skytrace.camera.pinhole import PinholeCamera, setup_camera, get_ray
    >>>
    >>> camera = PinholeCamera(width=1920, height=1080)
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(960, 540)  # Ray through image center
"""

from dataclasses import dataclass

import taichi as ti

from skytrace.core.ray import Ray, make_ray, normalize, vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for the pinhole camera.

    Attributes:
        width: Output image width in pixels.
        height: Output image height in pixels.
        focal_length: Distance from the eye to the image plane.
        half_width: Horizontal offset of the image plane's left edge.
        half_height: Vertical offset of the image plane's top edge.
    """

    width: int = 1920
    height: int = 1080
    focal_length: float = 2.0
    half_width: float = 1.7778
    half_height: float = 1.0

    @property
    def scale(self) -> float:
        """World units per pixel on the image plane."""
        return 2.0 * self.half_height / float(self.height)

    @property
    def eye(self) -> tuple[float, float, float]:
        """Position of the pinhole."""
        return (0.0, 0.0, -self.focal_length)


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_eye = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_scale = ti.field(dtype=ti.f32, shape=())
_camera_half_width = ti.field(dtype=ti.f32, shape=())
_camera_half_height = ti.field(dtype=ti.f32, shape=())


def setup_camera(camera: PinholeCamera) -> None:
    """Initialize camera state from configuration.

    Must be called before rendering.

    Args:
        camera: Camera configuration.

    Raises:
        ValueError: If the image dimensions or focal length are not positive.
    """
    if camera.width <= 0 or camera.height <= 0:
        raise ValueError(f"Camera dimensions must be positive, got {camera.width}x{camera.height}")
    if camera.focal_length <= 0.0:
        raise ValueError(f"Focal length must be positive, got {camera.focal_length}")

    _camera_eye[None] = list(camera.eye)
    _camera_scale[None] = camera.scale
    _camera_half_width[None] = camera.half_width
    _camera_half_height[None] = camera.half_height


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(pixel_x: ti.i32, pixel_y: ti.i32) -> Ray:
    """Generate the primary ray for a pixel.

    Args:
        pixel_x: Pixel column (0 = left).
        pixel_y: Pixel row (0 = top).

    Returns:
        A Ray starting on the image plane and pointing away from the eye.
    """
    scale = _camera_scale[None]
    p = vec3(
        scale * ti.cast(pixel_x, ti.f32) - _camera_half_width[None],
        -scale * ti.cast(pixel_y, ti.f32) + _camera_half_height[None],
        0.0,
    )
    direction = normalize(p - _camera_eye[None])
    return make_ray(p, direction)
