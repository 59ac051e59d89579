"""Whitted-style light transport with hard shadows and mirror bounces.

This module evaluates the color seen along one ray:

    trace(depth, exclude, origin, direction):
        depth >= MAX_DEPTH            -> white (1, 1, 1)
        nearest hit, skipping exclude -> on a miss, the skybox color
        shadow ray toward the light   -> if blocked, color * SHADOW_DARKNESS
        bounce = trace(depth + 1, hit object, hit point, reflect(direction, normal))
        clamp(shade(...) * (1 - r) + bounce * r, 0, 1)

The white fallback at the depth limit stands in for the energy of the
unresolved remainder of the path. Shadowed surfaces are flat: no shading and
no reflection.

Taichi functions cannot call themselves, so the recursion runs in two
passes. The descent follows the chain of mirror bounces (unrolled, at most
MAX_DEPTH levels), recording each level's local color and reflectance until
a level terminates with white, the skybox or a shadow. The ascent then folds
the blend-and-clamp step from the deepest level back to the first, which
gives exactly the value the recursive definition would.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from skytrace.core.tracer import trace_ray
    >>> from skytrace.scene.default_scene import create_default_scene
    >>> scene, camera = create_default_scene()
    >>> trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
"""

import taichi as ti
import taichi.math as tm

from skytrace.core.lighting import LIGHT_DIR, shade
from skytrace.core.ray import reflect
from skytrace.environment.skybox import sample_skybox
from skytrace.scene.intersection import (
    NO_OBJECT,
    get_object_color,
    get_object_reflectance,
    intersect_scene,
    intersect_scene_any,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Tracing Constants
# =============================================================================

# Maximum number of bounces for one camera ray
MAX_DEPTH = 5

# Fraction of the surface color kept when the light is blocked
SHADOW_DARKNESS = 0.2

# Returned once the depth limit is reached
DEPTH_LIMIT_COLOR = vec3(1.0, 1.0, 1.0)


@ti.func
def trace(depth: ti.i32, exclude_id: ti.i32, origin: vec3, direction: vec3) -> vec3:
    """Trace a ray and return the color it sees.

    Args:
        depth: Number of bounces already taken (0 for a camera ray).
        exclude_id: Object the ray is leaving, skipped by the hit query.
            NO_OBJECT for camera rays.
        origin: The starting point of the ray.
        direction: The direction of the ray (unit length).

    Returns:
        The color in [0, 1] for shaded hits, or the unclamped skybox,
        shadow or depth-limit color when the first level terminates.
    """
    # Per-level record of the bounce chain
    local_colors = ti.Matrix.zero(ti.f32, MAX_DEPTH, 3)
    reflectances = ti.Vector.zero(ti.f32, MAX_DEPTH)
    levels = 0

    terminal = DEPTH_LIMIT_COLOR
    active = 1

    ray_origin = origin
    ray_direction = direction
    skip_id = exclude_id

    # Descent: follow mirror bounces until a level terminates
    for k in ti.static(range(MAX_DEPTH)):
        if active == 1:
            if depth + k >= MAX_DEPTH:
                active = 0
            else:
                rec = intersect_scene(ray_origin, ray_direction, skip_id)

                if rec.hit == 0:
                    terminal = sample_skybox(ray_direction)
                    active = 0
                else:
                    color = get_object_color(rec.object_id)

                    if intersect_scene_any(rec.point, -LIGHT_DIR, rec.object_id) == 1:
                        terminal = color * SHADOW_DARKNESS
                        active = 0
                    else:
                        local = shade(color, ray_direction, rec.normal)
                        for c in ti.static(range(3)):
                            local_colors[k, c] = local[c]
                        reflectances[k] = get_object_reflectance(rec.object_id)
                        levels += 1

                        skip_id = rec.object_id
                        ray_origin = rec.point
                        ray_direction = reflect(ray_direction, rec.normal)

    # Ascent: blend each level with the color returned from below it
    result = terminal
    for k in ti.static(range(MAX_DEPTH - 1, -1, -1)):
        if k < levels:
            local = vec3(local_colors[k, 0], local_colors[k, 1], local_colors[k, 2])
            b = reflectances[k]
            a = 1.0 - b
            result = tm.clamp(local * a + result * b, 0.0, 1.0)

    return result


# =============================================================================
# Single Ray Evaluation
# =============================================================================

_trace_result = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _trace_single(depth: ti.i32, exclude_id: ti.i32, origin: vec3, direction: vec3):
    """Trace one ray and store the color in _trace_result."""
    # Keeps the scene scans inside trace() serial
    for _ in range(1):
        _trace_result[None] = trace(depth, exclude_id, origin, direction)


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int = 0,
    exclude_id: int = NO_OBJECT,
) -> tuple[float, float, float]:
    """Trace a single ray from Python.

    This is a Python-callable wrapper for testing and debugging. For full
    frames use skytrace.core.renderer.render_image(), which traces every
    pixel in parallel.

    Args:
        origin: The starting point of the ray.
        direction: The direction of the ray (unit length).
        depth: Bounce depth to start from.
        exclude_id: Object id to skip, or NO_OBJECT.

    Returns:
        Tuple of (R, G, B) color values.
    """
    _trace_single(
        depth,
        exclude_id,
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
    )
    color = _trace_result[None]
    return (float(color[0]), float(color[1]), float(color[2]))
