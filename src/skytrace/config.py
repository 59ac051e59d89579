"""Render configuration.

RenderConfig gathers everything the driver needs before the kernel runs:
output size and path, where the skybox lives and how its texels are packed,
an optional scene file, and the Taichi backend.

Example:
    >>> from skytrace.config import RenderConfig, load_render_config
    >>> config = RenderConfig(output_path="frame.png")
    >>> config = load_render_config("render.json")  # same keys as the dataclass
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

from skytrace.errors import ConfigurationError

SKYBOX_LAYOUTS = ("rgbx", "bgrx")
ARCHES = ("cpu", "gpu", "cuda", "vulkan", "metal")


@dataclass
class RenderConfig:
    """Settings for one render.

    Attributes:
        width: Output image width in pixels.
        height: Output image height in pixels.
        skybox_path: Path to the raw skybox texel file.
        skybox_layout: Channel layout of the skybox texels ("rgbx" or "bgrx").
        output_path: Output image path (.bmp or .png).
        scene_path: Optional JSON scene file; the default scene is used when None.
        arch: Taichi backend name.
    """

    width: int = 1920
    height: int = 1080
    skybox_path: str = "skybox.raw"
    skybox_layout: str = "rgbx"
    output_path: str = "out.bmp"
    scene_path: str | None = None
    arch: str = "cpu"

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Check the settings.

        Raises:
            ConfigurationError: If any setting is out of range.
        """
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.skybox_layout not in SKYBOX_LAYOUTS:
            raise ConfigurationError(
                f"Unknown skybox layout {self.skybox_layout!r}, expected one of {SKYBOX_LAYOUTS}"
            )
        if self.arch not in ARCHES:
            raise ConfigurationError(f"Unknown arch {self.arch!r}, expected one of {ARCHES}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RenderConfig:
        """Build a config from a dictionary.

        Raises:
            ConfigurationError: If the dictionary has unknown keys or bad values.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown config keys: {', '.join(unknown)}")
        try:
            return cls(**data)
        except TypeError as e:
            raise ConfigurationError(str(e)) from e

    def to_dict(self) -> dict[str, Any]:
        """Export the config as a dictionary."""
        return asdict(self)

    def with_overrides(self, **overrides: Any) -> RenderConfig:
        """Return a copy with the non-None overrides applied."""
        data = self.to_dict()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return RenderConfig.from_dict(data)


def load_render_config(path: str | Path) -> RenderConfig:
    """Load a RenderConfig from a JSON file.

    Raises:
        ConfigurationError: If the file cannot be read or parsed.
    """
    try:
        with open(path) as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a JSON object")
    return RenderConfig.from_dict(data)
