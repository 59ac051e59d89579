"""Infinite plane primitive with ray-plane intersection.

A plane is defined by:
- point: Any point lying on the plane
- normal: The unit normal of the plane

Unlike a bounded quad, the plane extends forever, so the intersection test
is just the parametric plane test with no bounds check afterwards. The
normal is returned exactly as stored, regardless of which side the ray
arrives from.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from skytrace.geometry.plane import Plane, hit_plane
    >>> # Ground plane at y=5
    >>> plane = Plane(
    ...     point=ti.math.vec3(0, 5, 0),
    ...     normal=ti.math.vec3(0, 1, 0),
    ... )
    >>> # Use hit_plane within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from skytrace.core.ray import dot, length

from .sphere import HitRecord, make_miss

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Rays whose direction is this close to parallel with the plane are treated
# as misses
PARALLEL_EPSILON = 1e-5


@ti.dataclass
class Plane:
    """An infinite plane through a point with a unit normal.

    Attributes:
        point: A point on the plane (vec3).
        normal: The unit normal of the plane (vec3).
    """

    point: vec3
    normal: vec3


@ti.func
def hit_plane(ray_origin: vec3, ray_direction: vec3, plane: Plane) -> HitRecord:
    """Test for ray-plane intersection.

    The ray meets the plane at
        t = dot(point - ray_origin, normal) / dot(ray_direction, normal)

    Near-parallel rays (``|denom| <= 1e-5``) and intersections behind the
    origin (``t < 0``) are misses.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray.
        plane: The plane to test intersection against.

    Returns:
        A HitRecord with ``t = length(ray_direction * t)`` and the plane's
        stored normal.
    """
    result = make_miss()

    denom = dot(ray_direction, plane.normal)

    if ti.abs(denom) > PARALLEL_EPSILON:
        t = dot(plane.point - ray_origin, plane.normal) / denom
        if t >= 0.0:
            m = ray_direction * t
            result = HitRecord(
                hit=1,
                t=length(m),
                point=ray_origin + m,
                normal=plane.normal,
            )

    return result


@ti.func
def make_plane(point: vec3, normal: vec3) -> Plane:
    """Create a plane from a point and unit normal inside a kernel."""
    return Plane(point=point, normal=normal)
