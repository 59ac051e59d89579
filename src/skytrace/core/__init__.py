"""Core rendering module.

Components:
    ray: Ray data structure and vector utilities
    lighting: Directional light with diffuse and specular terms
    tracer: Recursive-style ray evaluation with shadows and reflections
    renderer: Render target, frame kernel and pixel packing

All compute-intensive operations use Taichi kernels.
"""

from .ray import (
    Ray,
    dot,
    length,
    make_ray,
    normalize,
    reflect,
    vec3,
)

# Note: tracer and renderer are NOT imported here to avoid circular imports.
# Import directly from skytrace.core.tracer or skytrace.core.renderer when needed.

__all__ = [
    "Ray",
    "make_ray",
    "vec3",
    "length",
    "normalize",
    "dot",
    "reflect",
]
