"""Pytest configuration for skytrace tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield
    # Note: We don't call ti.reset() here as it can cause issues
    # with subsequent tests if any cleanup happens after


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene, skybox and render target around each test.

    This ensures tests are isolated from each other.
    """
    # Import here to avoid circular imports and ensure Taichi is initialized
    from skytrace.core.renderer import reset_render_target
    from skytrace.environment.skybox import clear_skybox
    from skytrace.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        clear_skybox()
        reset_render_target()

    # Clear everything before test
    _clear_all()

    yield

    # Clear everything after test
    _clear_all()


@pytest.fixture
def uniform_skybox():
    """Fill the skybox with a single color and return that color."""
    import numpy as np

    from skytrace.environment.skybox import SKYBOX_HEIGHT, SKYBOX_WIDTH, set_skybox

    color = (0.25, 0.5, 0.75)
    texels = np.empty((SKYBOX_HEIGHT, SKYBOX_WIDTH, 3), dtype=np.float32)
    texels[...] = color
    set_skybox(texels)
    return color
