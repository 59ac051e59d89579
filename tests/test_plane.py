"""Unit tests for plane intersection.

Tests cover:
- Ray hitting the plane from either side
- Parallel and near-parallel rays
- Plane behind the ray
- Stored normal returned regardless of approach side
- Distance measured along the ray direction
"""

import taichi as ti


def _hit(origin, direction, point=(0.0, 5.0, 0.0), normal=(0.0, 1.0, 0.0)):
    """Run hit_plane in a kernel and return (hit, t, point, normal)."""
    from skytrace.geometry.plane import Plane, hit_plane, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    hit_point = ti.field(dtype=ti.math.vec3, shape=())
    hit_normal = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def test_kernel(o: vec3, d: vec3, p: vec3, n: vec3):
        record = hit_plane(o, d, Plane(point=p, normal=n))
        hit[None] = record.hit
        t_val[None] = record.t
        hit_point[None] = record.point
        hit_normal[None] = record.normal

    test_kernel(vec3(*origin), vec3(*direction), vec3(*point), vec3(*normal))
    return (
        hit[None],
        t_val[None],
        tuple(hit_point[None].to_numpy()),
        tuple(hit_normal[None].to_numpy()),
    )


class TestPlaneBasics:
    """Tests for Plane dataclass and basic operations."""

    def test_make_plane(self):
        """Test make_plane convenience function."""
        from skytrace.geometry.plane import make_plane, vec3

        point_result = ti.field(dtype=ti.math.vec3, shape=())
        normal_result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            plane = make_plane(vec3(0.0, 5.0, 0.0), vec3(0.0, 1.0, 0.0))
            point_result[None] = plane.point
            normal_result[None] = plane.normal

        test_kernel()
        assert abs(point_result[None][1] - 5.0) < 1e-6
        assert abs(normal_result[None][1] - 1.0) < 1e-6


class TestPlaneIntersection:
    """Tests for ray-plane intersection."""

    def test_hit_plane_perpendicular(self):
        """Test a ray hitting the plane straight on."""
        hit, t, point, normal = _hit((0.0, 0.0, 0.0), (0.0, 1.0, 0.0))

        assert hit == 1
        assert abs(t - 5.0) < 1e-5
        assert abs(point[1] - 5.0) < 1e-5

    def test_hit_plane_returns_stored_normal(self):
        """Test the normal is the stored one, even when hit from its front side."""
        hit, _, _, normal = _hit((0.0, 10.0, 0.0), (0.0, -1.0, 0.0))

        assert hit == 1
        assert abs(normal[0]) < 1e-6
        assert abs(normal[1] - 1.0) < 1e-6
        assert abs(normal[2]) < 1e-6

    def test_hit_plane_behind_ray(self):
        """Test a plane behind the ray origin is a miss."""
        hit, _, _, _ = _hit((0.0, 0.0, 0.0), (0.0, -1.0, 0.0))
        assert hit == 0

    def test_hit_plane_parallel(self):
        """Test a ray parallel to the plane is a miss."""
        hit, _, _, _ = _hit((0.0, 0.0, 0.0), (1.0, 0.0, 0.0))
        assert hit == 0

    def test_hit_plane_near_parallel_within_epsilon(self):
        """Test that a direction within the parallel epsilon is a miss."""
        hit, _, _, _ = _hit((0.0, 0.0, 0.0), (1.0, 1e-6, 0.0))
        assert hit == 0

    def test_hit_plane_oblique(self):
        """Test an oblique hit lands on the plane at the right distance."""
        s = 0.70710678
        hit, t, point, _ = _hit((0.0, 0.0, 0.0), (0.0, s, s))

        assert hit == 1
        assert abs(point[1] - 5.0) < 1e-4
        assert abs(point[2] - 5.0) < 1e-4
        assert abs(t - 5.0 * 1.41421356) < 1e-4

    def test_hit_plane_t_is_length_along_direction(self):
        """Test t is the travelled length even for a non-unit direction."""
        hit, t, point, _ = _hit((0.0, 0.0, 0.0), (0.0, 2.0, 0.0))

        assert hit == 1
        assert abs(t - 5.0) < 1e-5
        assert abs(point[1] - 5.0) < 1e-5
