"""Unit tests for the pinhole camera module.

Tests cover:
- Camera configuration properties
- Camera setup and validation
- Ray generation for corner and center pixels
- Ray origins on the image plane
"""

import math

import pytest
import taichi as ti


def _ray_for_pixel(x, y):
    """Run get_ray in a kernel and return (origin, direction)."""
    from skytrace.camera.pinhole import get_ray

    origin = ti.field(dtype=ti.math.vec3, shape=())
    direction = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def test_kernel(px: ti.i32, py: ti.i32):
        ray = get_ray(px, py)
        origin[None] = ray.origin
        direction[None] = ray.direction

    test_kernel(x, y)
    return tuple(origin[None].to_numpy()), tuple(direction[None].to_numpy())


class TestCameraConfig:
    """Tests for the PinholeCamera dataclass."""

    def test_defaults(self):
        """Test the default camera renders 1920x1080 from z = -2."""
        from skytrace.camera.pinhole import PinholeCamera

        camera = PinholeCamera()
        assert (camera.width, camera.height) == (1920, 1080)
        assert camera.eye == (0.0, 0.0, -2.0)

    def test_scale(self):
        """Test scale spans the image plane height over the pixel rows."""
        from skytrace.camera.pinhole import PinholeCamera

        assert PinholeCamera(height=1080).scale == pytest.approx(2.0 / 1080)
        assert PinholeCamera(height=100).scale == pytest.approx(0.02)


class TestCameraSetup:
    """Tests for camera setup."""

    def test_setup_uses_scale(self):
        """Test a smaller image spreads the same window over fewer pixels."""
        from skytrace.camera.pinhole import PinholeCamera, setup_camera

        setup_camera(PinholeCamera(width=200, height=100))
        origin, _ = _ray_for_pixel(100, 50)

        # scale = 0.02, so x = 0.02 * 100 - 1.7778 and y = 1 - 0.02 * 50
        assert origin == pytest.approx((0.2222, 0.0, 0.0), abs=1e-5)

    def test_invalid_dimensions(self):
        """Test non-positive image dimensions raise ValueError."""
        from skytrace.camera.pinhole import PinholeCamera, setup_camera

        with pytest.raises(ValueError):
            setup_camera(PinholeCamera(width=0, height=1080))
        with pytest.raises(ValueError):
            setup_camera(PinholeCamera(width=1920, height=-1))

    def test_invalid_focal_length(self):
        """Test a non-positive focal length raises ValueError."""
        from skytrace.camera.pinhole import PinholeCamera, setup_camera

        with pytest.raises(ValueError):
            setup_camera(PinholeCamera(focal_length=0.0))


class TestRayGeneration:
    """Tests for primary ray generation."""

    def test_top_left_pixel(self):
        """Test pixel (0, 0) starts at the top-left of the image plane."""
        from skytrace.camera.pinhole import PinholeCamera, setup_camera

        setup_camera(PinholeCamera())
        origin, direction = _ray_for_pixel(0, 0)

        assert origin == pytest.approx((-1.7778, 1.0, 0.0), abs=1e-5)

        offset = (-1.7778, 1.0, 2.0)
        norm = math.sqrt(sum(c * c for c in offset))
        assert direction == pytest.approx(tuple(c / norm for c in offset), abs=1e-5)

    def test_center_pixel_looks_forward(self):
        """Test the center pixel looks almost straight down +z."""
        from skytrace.camera.pinhole import PinholeCamera, setup_camera

        setup_camera(PinholeCamera())
        origin, direction = _ray_for_pixel(960, 540)

        assert origin[2] == pytest.approx(0.0)
        assert abs(origin[0]) < 1e-3
        assert abs(origin[1]) < 1e-5
        assert direction[2] == pytest.approx(1.0, abs=1e-5)

    def test_rows_go_downward(self):
        """Test increasing the row moves the ray origin down."""
        from skytrace.camera.pinhole import PinholeCamera, setup_camera

        setup_camera(PinholeCamera())
        top, _ = _ray_for_pixel(100, 10)
        bottom, _ = _ray_for_pixel(100, 1000)

        assert top[1] > bottom[1]
        assert top[0] == pytest.approx(bottom[0])

    def test_directions_are_unit_length(self):
        """Test ray directions are normalized."""
        from skytrace.camera.pinhole import PinholeCamera, setup_camera

        setup_camera(PinholeCamera())
        for x, y in [(0, 0), (1919, 0), (0, 1079), (1919, 1079), (500, 300)]:
            _, direction = _ray_for_pixel(x, y)
            length = math.sqrt(sum(c * c for c in direction))
            assert abs(length - 1.0) < 1e-5
