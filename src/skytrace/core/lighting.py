"""Local shading for a single directional light.

The light is fixed: a unit vector with all three components equal to
1/sqrt(3). It is used as-is for the diffuse term and negated for shadow
rays.

The shading model is:
    color * max(dot(LIGHT_DIR, n), 0) + max(dot(normalize(v + LIGHT_DIR), n), 0) ** 15

The specular highlight is a colorless scalar added to every channel. It is
not tinted by the surface color or scaled by the diffuse term. The result is
left unclamped; the tracer clamps after blending with the reflection.
"""

import taichi as ti
import taichi.math as tm

from skytrace.core.ray import dot, normalize

vec3 = tm.vec3

# Component of the light direction (1/sqrt(3) truncated to f32 precision)
SQRT3_INV = 0.57735

# Direction the light travels; shadow rays are cast along its negation
LIGHT_DIR = vec3(SQRT3_INV, SQRT3_INV, SQRT3_INV)

# Phong-style specular exponent
SHININESS = 15.0


@ti.func
def shade(color: vec3, view_direction: vec3, normal: vec3) -> vec3:
    """Evaluate diffuse plus specular lighting at a surface point.

    Args:
        color: The surface color (RGB).
        view_direction: Direction of the incoming ray.
        normal: Surface normal at the hit point.

    Returns:
        The unclamped local color.
    """
    diffuse = tm.max(dot(LIGHT_DIR, normal), 0.0)
    specular = tm.max(dot(normalize(view_direction + LIGHT_DIR), normal), 0.0)
    return color * diffuse + ti.pow(specular, SHININESS)
