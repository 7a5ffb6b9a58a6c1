"""
Image normalization functions for preprocessing.

All functions are pure: they take an input and return a new output without
mutating the original array. Rotation angles follow the image convention used
throughout the project: positive radians turn the picture clockwise.
"""

from __future__ import annotations

import math

import cv2
import numpy as np

# Rotation codes for clockwise quarter turns 1..3
_QUARTER_TURN_CODES = {
    1: cv2.ROTATE_90_CLOCKWISE,
    2: cv2.ROTATE_180,
    3: cv2.ROTATE_90_COUNTERCLOCKWISE,
}


def validate_image(img: np.ndarray) -> None:
    """Validate input image array.

    Raises:
        TypeError: If img is not a numpy array.
        ValueError: If img has invalid dimensions or is empty.
    """
    if not isinstance(img, np.ndarray):
        raise TypeError(f"Expected numpy.ndarray, got {type(img).__name__}")

    if img.ndim < 2 or img.ndim > 3:
        raise ValueError(
            f"Image must be 2D or 3D array, got {img.ndim}D array with shape {img.shape}"
        )

    if img.size == 0:
        raise ValueError("Image array is empty")


def to_grayscale(img: np.ndarray, dtype: np.dtype = np.uint8) -> np.ndarray:
    """Convert an image to grayscale.

    Args:
        img: Input image. Can be:
             - RGB (3 channels): Converted with the ITU-R BT.601 weights
             - RGBA (4 channels): Alpha channel is dropped, then converted
             - Grayscale (1 channel or 2D): Returns a copy with normalized dtype
        dtype: Output dtype. Default is uint8 for CV2 compatibility.

    Returns:
        Grayscale image as 2D numpy array with the specified dtype.

    Raises:
        ValueError: If input is not a valid image array.
        TypeError: If img is not a numpy array.
    """
    validate_image(img)

    if img.ndim == 2:
        result = img.copy()
    else:
        channels = img.shape[2]
        if channels == 1:
            result = img[:, :, 0].copy()
        elif channels == 3:
            result = cv2.cvtColor(img, cv2.COLOR_RGB2GRAY)
        elif channels == 4:
            result = cv2.cvtColor(img[:, :, :3], cv2.COLOR_RGB2GRAY)
        else:
            raise ValueError(
                f"Unsupported number of channels: {channels}. "
                "Expected 1, 3 (RGB), or 4 (RGBA)."
            )

    if result.dtype != dtype:
        if np.issubdtype(dtype, np.integer):
            info = np.iinfo(dtype)
            result = np.clip(result, info.min, info.max).astype(dtype)
        else:
            result = result.astype(dtype)

    return result


def to_rgb(img: np.ndarray) -> np.ndarray:
    """Return a 3-channel RGB copy of a grayscale, RGB or RGBA image."""
    validate_image(img)
    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2RGB)
    if img.shape[2] == 1:
        return cv2.cvtColor(img[:, :, 0], cv2.COLOR_GRAY2RGB)
    if img.shape[2] == 4:
        return img[:, :, :3].copy()
    return img.copy()


def rotate_quarter_turns(img: np.ndarray, turns_clockwise: int) -> np.ndarray:
    """Rotate an image clockwise by a whole number of quarter turns."""
    validate_image(img)
    code = _QUARTER_TURN_CODES.get(turns_clockwise % 4)
    if code is None:
        return img.copy()
    return cv2.rotate(img, code)


def rotate_image(img: np.ndarray, radians: float) -> np.ndarray:
    """Rotate an image clockwise by an angle in radians.

    Multiples of pi/2 are rotated losslessly and change the output shape
    accordingly. Other angles rotate about the centre into a canvas large
    enough to hold the whole rotated image.
    """
    validate_image(img)
    quarter = radians / (math.pi / 2)
    if math.isclose(quarter, round(quarter), abs_tol=1e-6):
        return rotate_quarter_turns(img, int(round(quarter)))

    height, width = img.shape[:2]
    center = (width / 2, height / 2)
    # OpenCV treats positive angles as counter-clockwise
    matrix = cv2.getRotationMatrix2D(center, -math.degrees(radians), 1.0)
    cos, sin = abs(matrix[0, 0]), abs(matrix[0, 1])
    new_width = int(round(height * sin + width * cos))
    new_height = int(round(height * cos + width * sin))
    matrix[0, 2] += new_width / 2 - center[0]
    matrix[1, 2] += new_height / 2 - center[1]
    return cv2.warpAffine(img, matrix, (new_width, new_height))


def crop_rect(img: np.ndarray, rect: tuple[int, int, int, int]) -> np.ndarray:
    """Crop a pixel rectangle (x, y, w, h) out of an image.

    Raises:
        ValueError: If the rectangle is empty.
    """
    validate_image(img)
    x, y, w, h = rect
    if w <= 0 or h <= 0:
        raise ValueError(f"Crop rectangle must have a positive size, got {rect}")
    return img[y:y + h, x:x + w].copy()
