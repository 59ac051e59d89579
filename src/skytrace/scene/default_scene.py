"""Built-in demo scene.

This module provides a factory for the scene rendered when no scene file is
given: a green ground plane below four spheres of varying size and distance,
seen by the fixed pinhole camera at 1920x1080.

World y grows toward row 0 of the render, so the plane at y = 5 lies above
the spheres in render order. BMP viewers show the stored rows bottom-up,
which puts the plane at the bottom of the displayed picture.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from skytrace.camera.pinhole import setup_camera
    >>> from skytrace.scene.default_scene import create_default_scene
    >>>
    >>> scene, camera = create_default_scene()
    >>> setup_camera(camera)
"""

from skytrace.camera.pinhole import PinholeCamera
from skytrace.scene.manager import SceneManager

# =============================================================================
# Scene Constants
# =============================================================================

GROUND_POINT = (0.0, 5.0, 0.0)
GROUND_NORMAL = (0.0, 1.0, 0.0)
GROUND_COLOR = (0.0, 0.78, 0.3)
GROUND_REFLECTANCE = 0.2

SPHERE_REFLECTANCE = 0.5

# (center, radius, color) for each sphere, in object id order after the plane
DEFAULT_SPHERES = (
    ((3.0, -1.0, 6.0), 1.5, (0.9, 0.9, 0.3)),  # yellow
    ((0.0, 1.0, 5.0), 1.5, (0.39215, 0.58431, 0.92941)),  # cornflower blue
    ((-10.0, 3.5, 20.0), 1.5, (0.9, 0.3, 0.9)),  # magenta
    ((-10.0, 8.0, 40.0), 10.0, (0.5, 0.5, 0.5)),  # large grey
)


# =============================================================================
# Scene Factory
# =============================================================================


def create_default_scene(
    width: int = 1920,
    height: int = 1080,
) -> tuple[SceneManager, PinholeCamera]:
    """Create the built-in scene.

    Replaces whatever is currently in the object storage with one plane
    (object 0) and four spheres (objects 1-4).

    Args:
        width: Output image width in pixels.
        height: Output image height in pixels.

    Returns:
        A tuple of (SceneManager, PinholeCamera).

    Example:
        >>> scene, camera = create_default_scene()
        >>> scene.get_plane_count(), scene.get_sphere_count()
        (1, 4)
    """
    scene = SceneManager()

    scene.add_plane(
        point=GROUND_POINT,
        normal=GROUND_NORMAL,
        color=GROUND_COLOR,
        reflectance=GROUND_REFLECTANCE,
    )

    for center, radius, color in DEFAULT_SPHERES:
        scene.add_sphere(
            center=center,
            radius=radius,
            color=color,
            reflectance=SPHERE_REFLECTANCE,
        )

    camera = PinholeCamera(width=width, height=height)

    return scene, camera
