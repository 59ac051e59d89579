"""Sphere primitive with near-root ray-sphere intersection.

The intersection uses the geometric form of the quadratic: project the
center onto the ray, then step back by the half-chord length. Only the near
root is considered. A ray starting inside the sphere therefore reports no
hit (the near root lies behind it), which is what keeps reflected rays from
re-entering the sphere they just left.

The normal returned here points from the hit point toward the sphere
center. Lighting and reflection downstream are tuned to this convention.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from skytrace.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 1, 5), radius=1.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from skytrace.core.ray import dot, normalize

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: Whether the ray intersected the primitive (1 if hit, 0 if miss).
        t: Distance from the ray origin to the hit point.
            Only valid if hit == 1.
        point: The 3D point where the ray intersected the surface.
            Only valid if hit == 1.
        normal: The surface normal at the intersection point (unit length).
            For spheres it points toward the center; for planes it is the
            stored plane normal. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3


@ti.func
def make_miss() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
    )


@ti.func
def hit_sphere(ray_origin: vec3, ray_direction: vec3, sphere: Sphere) -> HitRecord:
    """Test for ray-sphere intersection.

    With ``T = center - origin`` and ``d = dot(direction, T)``, the ray meets
    the sphere where ``t = d -/+ sqrt(d^2 - dot(T, T) + radius^2)``. A
    negative discriminant is a miss. Otherwise only the near root is used,
    and a negative near root is a miss as well.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (unit length).
        sphere: The sphere to test intersection against.

    Returns:
        A HitRecord. On a hit, ``t`` is the distance to the near
        intersection and ``normal`` is ``normalize(center - point)``.
    """
    result = make_miss()

    T = sphere.center - ray_origin
    d = dot(ray_direction, T)
    disc = d * d - dot(T, T) + sphere.radius * sphere.radius

    if disc >= 0.0:
        t = d - ti.sqrt(disc)
        if t >= 0.0:
            point = ray_origin + t * ray_direction
            result = HitRecord(
                hit=1,
                t=t,
                point=point,
                normal=normalize(sphere.center - point),
            )

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius inside a kernel."""
    return Sphere(center=center, radius=radius)
