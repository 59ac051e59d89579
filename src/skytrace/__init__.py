"""Taichi-based Whitted ray tracer with an equirectangular skybox.

This package renders spheres and planes lit by a single directional light,
with hard shadows, mirror reflections up to a fixed depth and a skybox
background, and writes the frame as a 24-bit image.

Subpackages:
    core: Ray utilities, lighting, the tracer and the frame renderer
    geometry: Sphere and plane primitives with intersection routines
    scene: Object storage, scene management and the built-in scene
    camera: Fixed pinhole camera for primary rays
    environment: Skybox loading and sampling
    preview: Image export

Modules:
    config: Render configuration
    errors: Exception hierarchy
"""

__version__ = "0.1.0"
