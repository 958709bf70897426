"""
Image loading and normalization for feature extraction.

Accepts the image handles the upload flow hands over (a file path, an
encoded byte buffer, or an already decoded pixel grid) and turns them
into a fixed-size RGB uint8 array. Alpha channels are discarded.

Resizing always uses OpenCV area interpolation (cv2.INTER_AREA). The
filter affects exact pixel values, so changing it changes every stored
feature vector.
"""

import os
import logging
from typing import Optional, Union

import cv2
import numpy as np

from .errors import ImageUnreadable

logger = logging.getLogger(__name__)

# Edge length of the square image histograms are computed on.
FEATURE_SIZE = int(os.environ.get("FEATURE_SIZE", "64"))

ImageHandle = Union[str, os.PathLike, bytes, bytearray, memoryview, np.ndarray]


def describe_handle(handle: ImageHandle) -> Optional[str]:
    """
    Return a path string for path handles, None for buffers and arrays.

    The result is what placeholder scoring matches keywords against.
    """
    if isinstance(handle, (str, os.PathLike)):
        return os.fspath(handle)
    return None


def _label(handle) -> str:
    source = describe_handle(handle)
    if source is not None:
        return source
    if isinstance(handle, np.ndarray):
        return f"<array {handle.shape}>"
    return f"<{type(handle).__name__}>"


def normalize_image(image_np: np.ndarray) -> np.ndarray:
    """Ensure a decoded pixel grid is 3-channel uint8 RGB."""
    if image_np.dtype != np.uint8:
        if image_np.size and image_np.max() <= 1.0:
            image_np = np.clip(image_np * 255, 0, 255).round().astype(np.uint8)
        else:
            image_np = np.clip(image_np, 0, 255).astype(np.uint8)

    if image_np.ndim == 2:
        image_np = np.stack([image_np] * 3, axis=-1)
    elif image_np.ndim == 3 and image_np.shape[2] == 4:
        image_np = image_np[:, :, :3]
    elif image_np.ndim == 3 and image_np.shape[2] == 1:
        image_np = np.repeat(image_np, 3, axis=2)

    if image_np.ndim != 3 or image_np.shape[2] != 3:
        raise ImageUnreadable(
            f"<array {image_np.shape}>", "unsupported pixel layout"
        )
    if image_np.shape[0] == 0 or image_np.shape[1] == 0:
        raise ImageUnreadable(f"<array {image_np.shape}>", "empty image")

    return np.ascontiguousarray(image_np)


def decode_image(data) -> np.ndarray:
    """
    Decode an encoded image buffer (JPEG, PNG, ...) into RGB uint8.

    Raises:
        ImageUnreadable: If the buffer is empty or not a decodable image.
    """
    buffer = np.frombuffer(bytes(data), dtype=np.uint8)
    if buffer.size == 0:
        raise ImageUnreadable("<buffer>", "empty buffer")

    try:
        image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    except cv2.error as e:
        raise ImageUnreadable("<buffer>", str(e)) from e

    if image is None:
        raise ImageUnreadable("<buffer>", "not a decodable image")

    return cv2.cvtColor(image, cv2.COLOR_BGR2RGB)


def load_image(handle: ImageHandle) -> np.ndarray:
    """
    Load any supported image handle as an RGB uint8 array.

    Args:
        handle: File path, encoded byte buffer, or decoded pixel grid.

    Returns:
        RGB uint8 array of shape (H, W, 3).

    Raises:
        ImageUnreadable: Missing file, read error, or decode failure.
    """
    if isinstance(handle, np.ndarray):
        return normalize_image(handle)

    if isinstance(handle, (bytes, bytearray, memoryview)):
        return decode_image(handle)

    if isinstance(handle, (str, os.PathLike)):
        path = os.fspath(handle)
        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise ImageUnreadable(path, e.strerror or str(e)) from e

        try:
            return decode_image(data)
        except ImageUnreadable as e:
            raise ImageUnreadable(path, e.reason) from e

    raise ImageUnreadable(_label(handle), "unsupported image handle")


def resize_for_features(image_np: np.ndarray,
                        size: int = None) -> np.ndarray:
    """
    Resize an RGB image to size x size with area interpolation.

    Non-square images are stretched, not cropped, so every pixel of the
    photo contributes. Images already at the target size are returned
    unchanged.
    """
    size = size or FEATURE_SIZE
    h, w = image_np.shape[:2]
    if (h, w) == (size, size):
        return image_np

    try:
        return cv2.resize(image_np, (size, size),
                          interpolation=cv2.INTER_AREA)
    except cv2.error as e:
        raise ImageUnreadable(f"<array {image_np.shape}>", str(e)) from e


def prepare_image(handle: ImageHandle, size: int = None) -> np.ndarray:
    """Load a handle and resize it for histogram extraction."""
    try:
        image = load_image(handle)
        return resize_for_features(image, size)
    except ImageUnreadable as e:
        logger.warning(f"Could not prepare image {_label(handle)}: {e.reason}")
        raise
