"""Scene module for object storage and ray-scene queries.

Components:
    intersection: Taichi field storage and nearest/any hit queries
    manager: Validating scene builder with dict/JSON serialization
    default_scene: The built-in plane-and-spheres scene

Scene data is organized for the render kernel:
    - Structure-of-Arrays layout indexed by object id
    - Object kind tag selecting the sphere or plane intersection routine
"""

from .default_scene import create_default_scene
from .intersection import (
    MAX_OBJECTS,
    NO_OBJECT,
    ObjectKind,
    SceneHitRecord,
    add_plane,
    add_sphere,
    clear_scene,
    get_object_count,
    intersect_scene,
    intersect_scene_any,
)
from .manager import (
    PlaneInfo,
    SceneManager,
    SphereInfo,
    load_scene_file,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "ObjectKind",
    "NO_OBJECT",
    "MAX_OBJECTS",
    "add_sphere",
    "add_plane",
    "clear_scene",
    "get_object_count",
    "intersect_scene",
    "intersect_scene_any",
    # Manager module
    "SceneManager",
    "SphereInfo",
    "PlaneInfo",
    "load_scene_file",
    # Default scene
    "create_default_scene",
]
