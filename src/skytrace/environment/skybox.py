"""Equirectangular skybox: raw texel loading and direction sampling.

The skybox is a fixed 3000x3000 grid of RGB texels held in a Taichi field.
It is written once by the loader before rendering and only read afterwards,
so every pixel of the render kernel can sample it without synchronization.

The raw resource is a row-major array of little-endian 32-bit values, one per
texel. Two channel layouts are understood:

    rgbx: value = (unused << 24) | (blue << 16) | (green << 8) | red
    bgrx: value = (blue << 24) | (green << 16) | (red << 8) | unused

Channels are divided by 255 so texels are in [0, 1].

Sampling maps a unit direction to texture coordinates:
    u = 0.5 + atan2(x, z) / (2 * pi)
    v = 0.5 - asin(y) / pi
and picks texel [round(v * (H - 2)), round(u * (W - 2))]. There is no
wraparound or clamping; unit directions always land inside the grid.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from skytrace.environment.skybox import load_skybox, sample_skybox
    >>> load_skybox("skybox.raw")
    >>> # Use sample_skybox(direction) within a Taichi kernel
"""

import logging
from pathlib import Path
from typing import Literal

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from skytrace.errors import SkyboxLoadError

logger = logging.getLogger(__name__)

vec3 = tm.vec3

SkyboxLayout = Literal["rgbx", "bgrx"]

SKYBOX_WIDTH = 3000
SKYBOX_HEIGHT = 3000

# Texel grid indexed [y, x], y growing downward from the zenith
skybox_texels = ti.Vector.field(3, dtype=ti.f32, shape=(SKYBOX_HEIGHT, SKYBOX_WIDTH))


def decode_texels(
    packed: npt.NDArray[np.uint32],
    layout: SkyboxLayout = "rgbx",
) -> npt.NDArray[np.float32]:
    """Unpack 32-bit texel values into normalized RGB floats.

    Args:
        packed: Packed texel values of any shape.
        layout: Channel layout of the packed values ("rgbx" or "bgrx").

    Returns:
        Array of shape ``packed.shape + (3,)`` with channels in [0, 1].

    Raises:
        ValueError: If the layout is unknown.
    """
    packed = packed.astype(np.uint32, copy=False)

    if layout == "rgbx":
        shifts = (0, 8, 16)
    elif layout == "bgrx":
        shifts = (8, 16, 24)
    else:
        raise ValueError(f"Unknown skybox layout: {layout!r}")

    channels = [((packed >> np.uint32(s)) & np.uint32(0xFF)) for s in shifts]
    rgb = np.stack(channels, axis=-1).astype(np.float32)
    return rgb / np.float32(255.0)


def read_skybox_file(
    path: str | Path,
    layout: SkyboxLayout = "rgbx",
) -> npt.NDArray[np.float32]:
    """Read and decode a raw skybox file.

    Args:
        path: Path to the raw texel file.
        layout: Channel layout of the packed values.

    Returns:
        Texel array of shape (SKYBOX_HEIGHT, SKYBOX_WIDTH, 3).

    Raises:
        SkyboxLoadError: If the file cannot be read or holds fewer than
            SKYBOX_WIDTH * SKYBOX_HEIGHT texels.
    """
    count = SKYBOX_WIDTH * SKYBOX_HEIGHT
    try:
        packed = np.fromfile(str(path), dtype="<u4", count=count)
    except OSError as e:
        raise SkyboxLoadError(f"skybox texture cannot be loaded: {path} ({e})") from e

    if packed.size < count:
        raise SkyboxLoadError(
            f"skybox texture {path} is too short: {packed.size} of {count} texels"
        )

    return decode_texels(packed.reshape(SKYBOX_HEIGHT, SKYBOX_WIDTH), layout)


def set_skybox(texels: npt.NDArray[np.float32]) -> None:
    """Upload a decoded texel array into the skybox field.

    Args:
        texels: Array of shape (SKYBOX_HEIGHT, SKYBOX_WIDTH, 3).

    Raises:
        ValueError: If the array has the wrong shape.
    """
    expected = (SKYBOX_HEIGHT, SKYBOX_WIDTH, 3)
    if texels.shape != expected:
        raise ValueError(f"Skybox texels must have shape {expected}, got {texels.shape}")
    skybox_texels.from_numpy(texels.astype(np.float32, copy=False))


def load_skybox(path: str | Path, layout: SkyboxLayout = "rgbx") -> None:
    """Load a raw skybox file into the skybox field.

    Args:
        path: Path to the raw texel file.
        layout: Channel layout of the packed values.

    Raises:
        SkyboxLoadError: If the file is missing or too short.
    """
    texels = read_skybox_file(path, layout)
    set_skybox(texels)
    logger.info("Loaded %dx%d skybox from %s", SKYBOX_WIDTH, SKYBOX_HEIGHT, path)


def clear_skybox() -> None:
    """Reset every texel to black."""
    skybox_texels.fill(0.0)


@ti.func
def skybox_texel_index(direction: vec3):
    """Map a unit direction to the (x, y) texel it samples.

    Args:
        direction: A unit-length direction.

    Returns:
        Tuple of (x, y) integer texel coordinates.
    """
    u = 0.5 + ti.atan2(direction.x, direction.z) / (2.0 * tm.pi)
    v = 0.5 - ti.asin(direction.y) / tm.pi
    x = ti.cast(u * (SKYBOX_WIDTH - 2.0) + 0.5, ti.i32)
    y = ti.cast(v * (SKYBOX_HEIGHT - 2.0) + 0.5, ti.i32)
    return x, y


@ti.func
def sample_skybox(direction: vec3) -> vec3:
    """Look up the background color seen along a direction.

    Args:
        direction: A unit-length direction.

    Returns:
        The texel color (RGB in [0, 1]).
    """
    x, y = skybox_texel_index(direction)
    return skybox_texels[y, x]
