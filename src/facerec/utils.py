"""Image processing utilities shared by detection and recognition."""

import logging
import math
from typing import Optional, Tuple

import cv2
import numpy as np

logger = logging.getLogger(__name__)

_DEPTH_DTYPES = {
    8: np.uint8,
    16: np.uint16,
    32: np.float32,
    64: np.float64,
}


def to_8bit(image: np.ndarray) -> np.ndarray:
    """Stretch a 16-bit or floating point image to the 0-255 uint8 range."""
    if image.dtype == np.uint8:
        return image
    return cv2.normalize(image, None, 0, 255, cv2.NORM_MINMAX, dtype=cv2.CV_8U)


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """Return a single-channel view of a BGR, BGRA or grey image."""
    if image.ndim == 2:
        return image
    if image.shape[2] == 1:
        return image[:, :, 0]
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)


def resize_to_area(image: np.ndarray, area: int) -> Tuple[np.ndarray, float]:
    """Resize an image so it covers roughly ``area`` pixels.

    Args:
        image: Input image
        area: Target pixel count

    Returns:
        Tuple of (resized image, scale) where original = resized * scale
    """
    height, width = image.shape[:2]
    scale = math.sqrt((width * height) / float(area))
    new_size = (max(1, int(width / scale)), max(1, int(height / scale)))
    resized = cv2.resize(image, new_size, interpolation=cv2.INTER_AREA)
    return resized, scale


def copy_rect(
    image: np.ndarray,
    x: int,
    y: int,
    width: int,
    height: int,
) -> np.ndarray:
    """Copy a rectangle out of an image, clipped to the image bounds."""
    x1 = max(0, x)
    y1 = max(0, y)
    x2 = min(image.shape[1], x + width)
    y2 = min(image.shape[0], y + height)
    return image[y1:y2, x1:x2].copy()


def normalize_face(
    face_image: np.ndarray,
    size: Tuple[int, int],
) -> np.ndarray:
    """Convert a face crop to the canonical grey image used for recognition.

    Args:
        face_image: Face crop, grey or colour
        size: Canonical (width, height)

    Returns:
        Single-channel image of the canonical size
    """
    gray = to_grayscale(face_image)
    if (gray.shape[1], gray.shape[0]) != tuple(size):
        gray = cv2.resize(gray, tuple(size), interpolation=cv2.INTER_LINEAR)
    return np.ascontiguousarray(gray)


def image_from_buffer(
    data: bytes,
    width: int,
    height: int,
    step: int,
    depth: int = 8,
    channels: int = 1,
) -> np.ndarray:
    """Wrap a raw pixel buffer as an image array.

    Args:
        data: Raw pixel bytes, ``height`` rows of ``step`` bytes
        width: Image width in pixels
        height: Image height in pixels
        step: Row stride in bytes
        depth: Bits per channel (8, 16, 32 or 64)
        channels: Interleaved channels per pixel

    Returns:
        A (height, width) or (height, width, channels) copy of the pixels
    """
    if depth not in _DEPTH_DTYPES:
        raise ValueError(f"Unsupported image depth: {depth}")
    if width <= 0 or height <= 0 or channels <= 0:
        raise ValueError(f"Invalid image geometry {width}x{height}x{channels}")

    dtype = np.dtype(_DEPTH_DTYPES[depth])
    row_bytes = width * channels * dtype.itemsize
    if step < row_bytes:
        raise ValueError(f"Row step {step} is smaller than a row ({row_bytes} bytes)")
    if len(data) < step * (height - 1) + row_bytes:
        raise ValueError("Buffer is too small for the given dimensions")

    rows = np.frombuffer(data, dtype=np.uint8, count=step * (height - 1) + row_bytes)
    rows = np.lib.stride_tricks.as_strided(
        rows, shape=(height, row_bytes), strides=(step, 1)
    )
    pixels = np.ascontiguousarray(rows).view(dtype)
    if channels == 1:
        return pixels.reshape(height, width)
    return pixels.reshape(height, width, channels)


def load_image(path: str, grayscale: bool = True) -> Optional[np.ndarray]:
    """Load an image from disk, returning None when it cannot be read."""
    flag = cv2.IMREAD_GRAYSCALE if grayscale else cv2.IMREAD_COLOR
    image = cv2.imread(str(path), flag)
    if image is None:
        logger.error(f"Could not load image: {path}")
    return image
