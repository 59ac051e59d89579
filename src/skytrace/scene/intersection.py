"""Scene-level primitive storage and intersection testing.

This module stores the scene's objects and answers ray-scene queries:
nearest hit for primary and reflected rays, any hit for shadow rays.

Objects form one ordered sequence. Each object is a tagged variant (sphere
or plane) sharing a surface color and a reflectance. Storage is a
Structure-of-Arrays layout of Taichi fields indexed by object id, where the
id is the insertion index. The id doubles as the object's identity: the
tracer passes the id of the surface a ray just left so the query can skip
it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from skytrace.scene.intersection import (
    ...     add_plane, add_sphere, clear_scene, intersect_scene, NO_OBJECT
    ... )
    >>> clear_scene()
    >>> add_plane(vec3(0, 5, 0), vec3(0, 1, 0), vec3(0.0, 0.78, 0.3), 0.2)
    >>> add_sphere(vec3(0, 1, 5), 1.5, vec3(0.39, 0.58, 0.93), 0.5)
    >>> # Use intersect_scene(origin, direction, NO_OBJECT) within a Taichi kernel
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

from skytrace.geometry.plane import hit_plane, make_plane
from skytrace.geometry.sphere import HitRecord, hit_sphere, make_miss, make_sphere

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


class ObjectKind(IntEnum):
    """Enumeration of supported primitive kinds.

    Used as the variant tag when dispatching intersection tests.
    """

    SPHERE = 0
    PLANE = 1


# Object id meaning "no object"; excluding it excludes nothing
NO_OBJECT = -1


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection.

    Attributes:
        hit: Whether the ray intersected any object (1 if hit, 0 if miss).
        t: Distance from the ray origin to the hit point.
            Only valid if hit == 1.
        point: The 3D point where the ray intersected the surface.
            Only valid if hit == 1.
        normal: The surface normal at the intersection point (unit length).
            Only valid if hit == 1.
        object_id: The id of the object that was hit.
            NO_OBJECT (-1) on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    object_id: ti.i32


# Maximum number of objects supported in the scene
MAX_OBJECTS = 1024

# Shared per-object data
object_kinds = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
object_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
object_reflectances = ti.field(dtype=ti.f32, shape=MAX_OBJECTS)

# Variant data: object_positions holds the sphere center or a point on the
# plane; object_radii is only meaningful for spheres and object_normals only
# for planes
object_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
object_radii = ti.field(dtype=ti.f32, shape=MAX_OBJECTS)
object_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)

num_objects = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all objects from the scene.

    Resets the object count to zero. The actual field data is not cleared
    but will be overwritten when new objects are added.
    """
    num_objects[None] = 0


def _next_object_index() -> int:
    """Reserve the next object slot.

    Raises:
        RuntimeError: If the maximum number of objects is exceeded.
    """
    idx = num_objects[None]
    if idx >= MAX_OBJECTS:
        raise RuntimeError(f"Maximum number of objects ({MAX_OBJECTS}) exceeded")
    return idx


def add_sphere(center: vec3, radius: float, color: vec3, reflectance: float) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere (should be positive).
        color: The surface color (RGB in [0, 1]).
        reflectance: Weight of the mirror bounce versus local shading.

    Returns:
        The object id of the added sphere.

    Raises:
        RuntimeError: If the maximum number of objects is exceeded.
    """
    idx = _next_object_index()
    object_kinds[idx] = int(ObjectKind.SPHERE)
    object_positions[idx] = center
    object_radii[idx] = radius
    object_normals[idx] = [0.0, 0.0, 0.0]
    object_colors[idx] = color
    object_reflectances[idx] = reflectance
    num_objects[None] = idx + 1
    return idx


def add_plane(point: vec3, normal: vec3, color: vec3, reflectance: float) -> int:
    """Add an infinite plane to the scene.

    Args:
        point: A point on the plane.
        normal: The unit normal of the plane.
        color: The surface color (RGB in [0, 1]).
        reflectance: Weight of the mirror bounce versus local shading.

    Returns:
        The object id of the added plane.

    Raises:
        RuntimeError: If the maximum number of objects is exceeded.
    """
    idx = _next_object_index()
    object_kinds[idx] = int(ObjectKind.PLANE)
    object_positions[idx] = point
    object_radii[idx] = 0.0
    object_normals[idx] = normal
    object_colors[idx] = color
    object_reflectances[idx] = reflectance
    num_objects[None] = idx + 1
    return idx


def get_object_count() -> int:
    """Get the number of objects in the scene."""
    return int(num_objects[None])


@ti.func
def get_object_color(object_id: ti.i32) -> vec3:
    """Get the surface color of an object."""
    return object_colors[object_id]


@ti.func
def get_object_reflectance(object_id: ti.i32) -> ti.f32:
    """Get the reflectance of an object."""
    return object_reflectances[object_id]


@ti.func
def hit_object(object_id: ti.i32, ray_origin: vec3, ray_direction: vec3) -> HitRecord:
    """Test a ray against a single object, dispatching on its kind.

    Args:
        object_id: The id of the object to test.
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (unit length).

    Returns:
        The HitRecord produced by the object's intersection routine.
    """
    result = make_miss()
    if object_kinds[object_id] == int(ObjectKind.SPHERE):
        sphere = make_sphere(object_positions[object_id], object_radii[object_id])
        result = hit_sphere(ray_origin, ray_direction, sphere)
    else:
        plane = make_plane(object_positions[object_id], object_normals[object_id])
        result = hit_plane(ray_origin, ray_direction, plane)
    return result


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        object_id=NO_OBJECT,
    )


@ti.func
def intersect_scene(ray_origin: vec3, ray_direction: vec3, exclude_id: ti.i32) -> SceneHitRecord:
    """Find the nearest object hit by a ray.

    Scans every object in id order, skipping ``exclude_id``, and keeps the
    hit with the smallest distance. A later object only replaces the current
    best when it is strictly closer, so exact ties go to the lower id.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (unit length).
        exclude_id: Id of an object to ignore, usually the surface the ray
            is leaving. NO_OBJECT ignores nothing.

    Returns:
        A SceneHitRecord for the nearest hit, or a miss record.
    """
    result = _make_miss_record()

    for i in range(num_objects[None]):
        if i != exclude_id:
            rec = hit_object(i, ray_origin, ray_direction)
            if rec.hit == 1 and (result.hit == 0 or rec.t < result.t):
                result = SceneHitRecord(
                    hit=1,
                    t=rec.t,
                    point=rec.point,
                    normal=rec.normal,
                    object_id=i,
                )

    return result


@ti.func
def intersect_scene_any(ray_origin: vec3, ray_direction: vec3, exclude_id: ti.i32) -> ti.i32:
    """Test if a ray hits any object in the scene (shadow ray query).

    Same exclusion rule as intersect_scene, but stops testing once
    something has been hit since only occlusion matters.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (unit length).
        exclude_id: Id of an object to ignore. NO_OBJECT ignores nothing.

    Returns:
        1 if any object was hit, 0 otherwise.
    """
    hit_any = 0

    for i in range(num_objects[None]):
        if hit_any == 0 and i != exclude_id:
            rec = hit_object(i, ray_origin, ray_direction)
            if rec.hit == 1:
                hit_any = 1

    return hit_any
