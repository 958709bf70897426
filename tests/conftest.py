"""Shared test fixtures for claim similarity tests."""

import numpy as np
import cv2
import pytest


@pytest.fixture
def black_image():
    """Generate a solid black 64x64 RGB image."""
    return np.zeros((64, 64, 3), dtype=np.uint8)


@pytest.fixture
def white_image():
    """Generate a solid white 64x64 RGB image."""
    return np.ones((64, 64, 3), dtype=np.uint8) * 255


@pytest.fixture
def split_image():
    """Generate a 64x64 image, left half black and right half white."""
    img = np.zeros((64, 64, 3), dtype=np.uint8)
    img[:, 32:] = 255
    return img


@pytest.fixture
def noise_image():
    """Generate a 200x150 random noise image."""
    rng = np.random.RandomState(42)
    return rng.randint(0, 256, (150, 200, 3), dtype=np.uint8)


@pytest.fixture
def write_png(tmp_path):
    """Write an RGB array to a PNG file under tmp_path and return its path."""
    def _write(name, image_rgb):
        path = tmp_path / name
        ok = cv2.imwrite(str(path), cv2.cvtColor(image_rgb, cv2.COLOR_RGB2BGR))
        assert ok
        return str(path)
    return _write


@pytest.fixture
def png_bytes():
    """Encode an RGB array as PNG bytes."""
    def _encode(image_rgb):
        ok, buf = cv2.imencode(".png", cv2.cvtColor(image_rgb, cv2.COLOR_RGB2BGR))
        assert ok
        return buf.tobytes()
    return _encode
