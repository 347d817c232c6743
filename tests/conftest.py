"""
Shared fixtures for Lumigrade tests.
"""

import numpy as np
import pytest


def solid_image(value, height=4, width=4, alpha=255):
    """RGBA8 image filled with one color."""
    if np.isscalar(value):
        value = (value, value, value)
    image = np.empty((height, width, 4), dtype=np.uint8)
    image[..., :3] = value
    image[..., 3] = alpha
    return image


@pytest.fixture
def make_solid():
    """Factory for single-color RGBA images."""
    return solid_image


@pytest.fixture
def random_image():
    """Reproducible noisy RGBA image."""
    rng = np.random.default_rng(1234)
    image = rng.integers(0, 256, size=(24, 32, 4), dtype=np.uint8)
    image[..., 3] = 255
    return image


@pytest.fixture
def gradient_image():
    """Smooth color ramps with some detail, 48x64."""
    height, width = 48, 64
    y, x = np.mgrid[:height, :width]
    image = np.zeros((height, width, 4), dtype=np.uint8)
    image[..., 0] = (x * 255 / (width - 1)).astype(np.uint8)
    image[..., 1] = (y * 255 / (height - 1)).astype(np.uint8)
    image[..., 2] = ((x + y) % 16 * 16).astype(np.uint8)
    image[..., 3] = 255
    return image


@pytest.fixture
def checkerboard():
    """Hard-edged black and white checkerboard, 32x32."""
    y, x = np.mgrid[:32, :32]
    board = ((x // 4 + y // 4) % 2 * 255).astype(np.uint8)
    image = np.empty((32, 32, 4), dtype=np.uint8)
    image[..., :3] = board[..., np.newaxis]
    image[..., 3] = 255
    return image
