"""Geometry module for shape primitives.

This module provides the two primitives the scene is built from:

Components:
    sphere: Sphere primitive with near-root ray-sphere intersection
    plane: Infinite plane primitive with ray-plane intersection

All intersection routines are Taichi functions (@ti.func) that are inlined
into the render kernel. There is no acceleration structure; the scene is
intersected by linear scan.

Ray-object intersection follows the pattern:
    record = hit_shape(ray_origin, ray_direction, shape)
"""

from .plane import PARALLEL_EPSILON, Plane, hit_plane, make_plane
from .sphere import HitRecord, Sphere, hit_sphere, make_miss, make_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "make_miss",
    "Plane",
    "hit_plane",
    "make_plane",
    "PARALLEL_EPSILON",
]
