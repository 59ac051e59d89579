"""Environment module for the background seen by escaping rays.

Components:
    skybox: Raw texel loading and equirectangular direction sampling

Rays that miss every object take their color from the skybox; they never
bounce further.
"""

from .skybox import (
    SKYBOX_HEIGHT,
    SKYBOX_WIDTH,
    SkyboxLayout,
    clear_skybox,
    decode_texels,
    load_skybox,
    read_skybox_file,
    sample_skybox,
    set_skybox,
    skybox_texel_index,
)

__all__ = [
    "SKYBOX_WIDTH",
    "SKYBOX_HEIGHT",
    "SkyboxLayout",
    "decode_texels",
    "read_skybox_file",
    "set_skybox",
    "load_skybox",
    "clear_skybox",
    "sample_skybox",
    "skybox_texel_index",
]
