"""Scene manager for building and validating the object list.

This module provides a high-level API over the raw object storage in
skytrace.scene.intersection. It validates every object before it reaches the
Taichi fields, keeps a Python-side record of the scene in insertion order,
and converts scenes to and from plain dictionaries / JSON files.

Object order is significant only for exact distance ties, where the earlier
object wins, but it is preserved through serialization all the same.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from skytrace.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> floor = scene.add_plane((0, 5, 0), (0, 1, 0), color=(0.0, 0.78, 0.3), reflectance=0.2)
    >>> ball = scene.add_sphere((0, 1, 5), 1.5, color=(0.39, 0.58, 0.93), reflectance=0.5)
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union

import taichi.math as tm

from skytrace.errors import ConfigurationError
from skytrace.scene.intersection import (
    ObjectKind,
    add_plane,
    add_sphere,
    clear_scene,
    get_object_count,
)

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# Allowed deviation of a plane normal's length from 1
NORMAL_TOLERANCE = 1e-4


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        object_id: The id of the sphere in the object storage.
        center: The center of the sphere.
        radius: The radius of the sphere.
        color: The surface color.
        reflectance: The mirror blend weight.
    """

    object_id: int
    center: tuple[float, float, float]
    radius: float
    color: tuple[float, float, float]
    reflectance: float

    kind = ObjectKind.SPHERE

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "sphere",
            "center": list(self.center),
            "radius": self.radius,
            "color": list(self.color),
            "reflectance": self.reflectance,
        }


@dataclass
class PlaneInfo:
    """Information about a plane in the scene.

    Attributes:
        object_id: The id of the plane in the object storage.
        point: A point on the plane.
        normal: The unit normal of the plane.
        color: The surface color.
        reflectance: The mirror blend weight.
    """

    object_id: int
    point: tuple[float, float, float]
    normal: tuple[float, float, float]
    color: tuple[float, float, float]
    reflectance: float

    kind = ObjectKind.PLANE

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "plane",
            "point": list(self.point),
            "normal": list(self.normal),
            "color": list(self.color),
            "reflectance": self.reflectance,
        }


ObjectInfo = Union[SphereInfo, PlaneInfo]


def _as_triple(value: Any, name: str) -> tuple[float, float, float]:
    """Convert a 3-element sequence to a float triple.

    Raises:
        ValueError: If the value does not have exactly three components.
    """
    try:
        x, y, z = value
    except (TypeError, ValueError) as e:
        raise ValueError(f"{name} must have 3 components, got {value!r}") from e
    return (float(x), float(y), float(z))


def _validate_surface(color: tuple[float, float, float], reflectance: float) -> None:
    """Validate the attributes every object carries.

    Raises:
        ValueError: If a color channel or the reflectance is outside [0, 1].
    """
    if any(c < 0.0 or c > 1.0 for c in color):
        raise ValueError(f"Color components must be in [0, 1], got {color}")
    if not 0.0 <= reflectance <= 1.0:
        raise ValueError(f"Reflectance must be in [0, 1], got {reflectance}")


class SceneManager:
    """Scene builder with validation and serialization.

    The manager writes through to the shared object storage, so the scene it
    builds is the one the render kernel sees. Build the scene completely
    before rendering; it is treated as read-only while a frame is traced.

    Attributes:
        objects: Object records in id order.

    Example:
        >>> scene = SceneManager()
        >>> scene.add_plane((0, 5, 0), (0, 1, 0), (0.0, 0.78, 0.3), 0.2)
        0
        >>> scene.add_sphere((3, -1, 6), 1.5, (0.9, 0.9, 0.3), 0.5)
        1
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.objects: list[ObjectInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear the object storage and local tracking."""
        clear_scene()
        self.objects.clear()

    def clear(self) -> None:
        """Remove every object from the scene."""
        self._clear_all()

    # =========================================================================
    # Object Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        color: tuple[float, float, float],
        reflectance: float,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere (must be positive).
            color: The surface color as (R, G, B), each in [0, 1].
            reflectance: Mirror blend weight in [0, 1].

        Returns:
            The object id of the added sphere.

        Raises:
            RuntimeError: If the maximum number of objects is exceeded.
            ValueError: If any attribute is out of range.
        """
        center = _as_triple(center, "center")
        color = _as_triple(color, "color")
        reflectance = float(reflectance)
        radius = float(radius)

        if not radius > 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")
        _validate_surface(color, reflectance)

        object_id = add_sphere(vec3(*center), radius, vec3(*color), reflectance)
        self.objects.append(
            SphereInfo(
                object_id=object_id,
                center=center,
                radius=radius,
                color=color,
                reflectance=reflectance,
            )
        )
        return object_id

    def add_plane(
        self,
        point: tuple[float, float, float],
        normal: tuple[float, float, float],
        color: tuple[float, float, float],
        reflectance: float,
    ) -> int:
        """Add an infinite plane to the scene.

        Args:
            point: A point on the plane as (x, y, z).
            normal: The plane normal; must already be unit length.
            color: The surface color as (R, G, B), each in [0, 1].
            reflectance: Mirror blend weight in [0, 1].

        Returns:
            The object id of the added plane.

        Raises:
            RuntimeError: If the maximum number of objects is exceeded.
            ValueError: If any attribute is out of range.
        """
        point = _as_triple(point, "point")
        normal = _as_triple(normal, "normal")
        color = _as_triple(color, "color")
        reflectance = float(reflectance)

        norm = math.sqrt(sum(c * c for c in normal))
        if abs(norm - 1.0) > NORMAL_TOLERANCE:
            raise ValueError(f"Plane normal must be unit length, got length {norm}")
        _validate_surface(color, reflectance)

        object_id = add_plane(vec3(*point), vec3(*normal), vec3(*color), reflectance)
        self.objects.append(
            PlaneInfo(
                object_id=object_id,
                point=point,
                normal=normal,
                color=color,
                reflectance=reflectance,
            )
        )
        return object_id

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_object_count(self) -> int:
        """Get the number of objects in the scene."""
        return get_object_count()

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return sum(1 for obj in self.objects if obj.kind == ObjectKind.SPHERE)

    def get_plane_count(self) -> int:
        """Get the number of planes in the scene."""
        return sum(1 for obj in self.objects if obj.kind == ObjectKind.PLANE)

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization).

        Returns:
            ``{"objects": [...]}`` with one entry per object in id order.
        """
        return {"objects": [obj.to_dict() for obj in self.objects]}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary, replacing the current one.

        Args:
            data: Dictionary with an 'objects' list as produced by to_dict().

        Raises:
            ValueError: If an object has an unknown type, a missing key or
                an invalid attribute.
        """
        self.clear()

        for index, obj in enumerate(data.get("objects", [])):
            obj_type = str(obj.get("type", "")).lower()
            try:
                if obj_type == "sphere":
                    self.add_sphere(
                        obj["center"],
                        obj["radius"],
                        obj["color"],
                        obj.get("reflectance", 0.0),
                    )
                elif obj_type == "plane":
                    self.add_plane(
                        obj["point"],
                        obj["normal"],
                        obj["color"],
                        obj.get("reflectance", 0.0),
                    )
                else:
                    raise ValueError(f"Unknown object type: {obj_type!r}")
            except KeyError as e:
                raise ValueError(f"Object {index} ({obj_type}) is missing key {e}") from e

        logger.debug("Loaded scene with %d objects", len(self.objects))

    def save(self, path: str | Path) -> None:
        """Write the scene to a JSON file."""
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)


def load_scene_file(path: str | Path) -> SceneManager:
    """Build a scene from a JSON file.

    Args:
        path: Path to a JSON file in the SceneManager.to_dict() format.

    Returns:
        A SceneManager holding the loaded scene.

    Raises:
        ConfigurationError: If the file cannot be read or describes an
            invalid scene.
    """
    try:
        with open(path) as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read scene file {path}: {e}") from e

    scene = SceneManager()
    try:
        scene.from_dict(data)
    except (ValueError, RuntimeError) as e:
        raise ConfigurationError(f"Invalid scene file {path}: {e}") from e

    logger.info(
        "Loaded %d spheres and %d planes from %s",
        scene.get_sphere_count(),
        scene.get_plane_count(),
        path,
    )
    return scene
