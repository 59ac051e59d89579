"""Unit tests for scene-level intersection.

Tests cover:
- SceneHitRecord with object_id
- Object storage, ids and clearing
- Nearest hit selection across spheres and planes
- Tie breaking by object id
- Excluding the object a ray is leaving
- Shadow ray queries (any hit)
"""

import pytest
import taichi as ti


def _nearest(origin, direction, exclude_id=-1):
    """Run intersect_scene in a kernel and return (hit, t, object_id)."""
    from skytrace.scene.intersection import intersect_scene, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    object_id = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(o: vec3, d: vec3, exclude: ti.i32):
        # Keep the object scan serial
        for _ in range(1):
            rec = intersect_scene(o, d, exclude)
            hit[None] = rec.hit
            t_val[None] = rec.t
            object_id[None] = rec.object_id

    test_kernel(vec3(*origin), vec3(*direction), exclude_id)
    return hit[None], t_val[None], object_id[None]


def _any(origin, direction, exclude_id=-1):
    """Run intersect_scene_any in a kernel and return its result."""
    from skytrace.scene.intersection import intersect_scene_any, vec3

    result = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(o: vec3, d: vec3, exclude: ti.i32):
        for _ in range(1):
            result[None] = intersect_scene_any(o, d, exclude)

    test_kernel(vec3(*origin), vec3(*direction), exclude_id)
    return result[None]


class TestSceneHitRecordBasics:
    """Tests for SceneHitRecord dataclass."""

    def test_scene_hit_record_has_object_id(self):
        """Test that SceneHitRecord includes object_id field."""
        from skytrace.scene.intersection import SceneHitRecord, vec3

        result_object_id = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            rec = SceneHitRecord(
                hit=1,
                t=5.0,
                point=vec3(0.0, 0.0, 0.0),
                normal=vec3(0.0, 0.0, 1.0),
                object_id=42,
            )
            result_object_id[None] = rec.object_id

        test_kernel()
        assert result_object_id[None] == 42

    def test_scene_hit_record_miss_has_no_object(self):
        """Test that miss records carry NO_OBJECT."""
        from skytrace.scene.intersection import NO_OBJECT, _make_miss_record

        result_hit = ti.field(dtype=ti.i32, shape=())
        result_object_id = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            rec = _make_miss_record()
            result_hit[None] = rec.hit
            result_object_id[None] = rec.object_id

        test_kernel()
        assert result_hit[None] == 0
        assert result_object_id[None] == NO_OBJECT


class TestSceneObjectStorage:
    """Tests for scene object storage and management."""

    def test_add_sphere(self):
        """Test adding a sphere to the scene."""
        from skytrace.scene.intersection import add_sphere, get_object_count, vec3

        assert get_object_count() == 0
        idx = add_sphere(vec3(1.0, 2.0, 3.0), 0.5, vec3(1.0, 0.0, 0.0), 0.5)
        assert idx == 0
        assert get_object_count() == 1

    def test_add_plane(self):
        """Test adding a plane to the scene."""
        from skytrace.scene.intersection import add_plane, get_object_count, vec3

        idx = add_plane(vec3(0.0, 5.0, 0.0), vec3(0.0, 1.0, 0.0), vec3(0.0, 0.78, 0.3), 0.2)
        assert idx == 0
        assert get_object_count() == 1

    def test_ids_follow_insertion_order(self):
        """Test that spheres and planes share one id sequence."""
        from skytrace.scene.intersection import add_plane, add_sphere, vec3

        white = vec3(1.0, 1.0, 1.0)
        assert add_plane(vec3(0.0, 5.0, 0.0), vec3(0.0, 1.0, 0.0), white, 0.0) == 0
        assert add_sphere(vec3(0.0, 0.0, 5.0), 1.0, white, 0.0) == 1
        assert add_sphere(vec3(0.0, 0.0, 9.0), 1.0, white, 0.0) == 2
        assert add_plane(vec3(0.0, -5.0, 0.0), vec3(0.0, 1.0, 0.0), white, 0.0) == 3

    def test_clear_scene(self):
        """Test clearing all objects from the scene."""
        from skytrace.scene.intersection import (
            add_plane,
            add_sphere,
            clear_scene,
            get_object_count,
            vec3,
        )

        white = vec3(1.0, 1.0, 1.0)
        add_sphere(vec3(0.0, 0.0, 0.0), 1.0, white, 0.0)
        add_plane(vec3(0.0, 5.0, 0.0), vec3(0.0, 1.0, 0.0), white, 0.0)
        assert get_object_count() == 2

        clear_scene()

        assert get_object_count() == 0

    def test_capacity_exceeded(self, monkeypatch):
        """Test that adding past the capacity raises RuntimeError."""
        from skytrace.scene import intersection

        monkeypatch.setattr(intersection, "MAX_OBJECTS", 2)
        white = intersection.vec3(1.0, 1.0, 1.0)
        intersection.add_sphere(intersection.vec3(0.0, 0.0, 0.0), 1.0, white, 0.0)
        intersection.add_sphere(intersection.vec3(3.0, 0.0, 0.0), 1.0, white, 0.0)

        with pytest.raises(RuntimeError):
            intersection.add_sphere(intersection.vec3(6.0, 0.0, 0.0), 1.0, white, 0.0)


class TestNearestHit:
    """Tests for nearest-hit selection."""

    def test_empty_scene_misses(self):
        """Test that an empty scene reports a miss."""
        hit, _, object_id = _nearest((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert hit == 0
        assert object_id == -1

    def test_closest_of_two_spheres(self):
        """Test that the nearer sphere wins regardless of insertion order."""
        from skytrace.scene.intersection import add_sphere, vec3

        white = vec3(1.0, 1.0, 1.0)
        add_sphere(vec3(0.0, 0.0, 10.0), 1.0, white, 0.0)  # far, id 0
        add_sphere(vec3(0.0, 0.0, 5.0), 1.0, white, 0.0)  # near, id 1

        hit, t, object_id = _nearest((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert hit == 1
        assert object_id == 1
        assert abs(t - 4.0) < 1e-5

    def test_sphere_closer_than_plane(self):
        """Test a sphere in front of a plane is reported."""
        from skytrace.scene.intersection import add_plane, add_sphere, vec3

        white = vec3(1.0, 1.0, 1.0)
        add_plane(vec3(0.0, 0.0, 20.0), vec3(0.0, 0.0, 1.0), white, 0.0)
        add_sphere(vec3(0.0, 0.0, 5.0), 1.0, white, 0.0)

        hit, t, object_id = _nearest((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert hit == 1
        assert object_id == 1
        assert abs(t - 4.0) < 1e-5

    def test_plane_closer_than_sphere(self):
        """Test a plane in front of a sphere is reported."""
        from skytrace.scene.intersection import add_plane, add_sphere, vec3

        white = vec3(1.0, 1.0, 1.0)
        add_sphere(vec3(0.0, 0.0, 20.0), 1.0, white, 0.0)
        add_plane(vec3(0.0, 0.0, 3.0), vec3(0.0, 0.0, 1.0), white, 0.0)

        hit, t, object_id = _nearest((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert hit == 1
        assert object_id == 1
        assert abs(t - 3.0) < 1e-5

    def test_exact_tie_goes_to_lower_id(self):
        """Test that coincident objects resolve to the earlier one."""
        from skytrace.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0.0, 0.0, 5.0), 1.0, vec3(1.0, 0.0, 0.0), 0.0)
        add_sphere(vec3(0.0, 0.0, 5.0), 1.0, vec3(0.0, 1.0, 0.0), 0.0)

        hit, _, object_id = _nearest((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert hit == 1
        assert object_id == 0

    def test_excluded_object_is_skipped(self):
        """Test that the excluded object is ignored and the next one reported."""
        from skytrace.scene.intersection import add_sphere, vec3

        white = vec3(1.0, 1.0, 1.0)
        add_sphere(vec3(0.0, 0.0, 5.0), 1.0, white, 0.0)
        add_sphere(vec3(0.0, 0.0, 10.0), 1.0, white, 0.0)

        hit, t, object_id = _nearest((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), exclude_id=0)
        assert hit == 1
        assert object_id == 1
        assert abs(t - 9.0) < 1e-5

    def test_excluding_only_object_misses(self):
        """Test that excluding the only object produces a miss."""
        from skytrace.scene.intersection import add_plane, vec3

        add_plane(vec3(0.0, 5.0, 0.0), vec3(0.0, 1.0, 0.0), vec3(1.0, 1.0, 1.0), 0.0)

        hit, _, _ = _nearest((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), exclude_id=0)
        assert hit == 0


class TestShadowRayQuery:
    """Tests for any-hit shadow queries."""

    def test_any_hit_with_occlusion(self):
        """Test that an object in the way is detected."""
        from skytrace.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0.0, 0.0, 5.0), 1.0, vec3(1.0, 1.0, 1.0), 0.0)
        assert _any((0.0, 0.0, 0.0), (0.0, 0.0, 1.0)) == 1

    def test_any_hit_without_occlusion(self):
        """Test that a clear path is reported as unoccluded."""
        from skytrace.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0.0, 0.0, 5.0), 1.0, vec3(1.0, 1.0, 1.0), 0.0)
        assert _any((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)) == 0

    def test_any_hit_respects_exclusion(self):
        """Test that the surface the ray leaves does not shadow itself."""
        from skytrace.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0.0, 0.0, 5.0), 1.0, vec3(1.0, 1.0, 1.0), 0.0)
        assert _any((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), exclude_id=0) == 0

    def test_any_hit_empty_scene(self):
        """Test that nothing occludes in an empty scene."""
        assert _any((0.0, 0.0, 0.0), (0.0, 0.0, 1.0)) == 0
