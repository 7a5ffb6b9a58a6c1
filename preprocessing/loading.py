"""
Image loading.

Images are decoded with Pillow into RGB numpy arrays. The EXIF orientation is
reported separately and is not applied to the pixels: detections are made on
the stored pixels and re-oriented afterwards.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from detection.orientation import ImageOrientation

# EXIF tag holding the orientation value
EXIF_ORIENTATION_TAG = 274


@dataclass(frozen=True)
class LoadedImage:
    """Decoded image pixels plus their EXIF orientation."""

    pixels: np.ndarray
    orientation: ImageOrientation = ImageOrientation.UP

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]


def _decode(image: Image.Image) -> LoadedImage:
    orientation = ImageOrientation.from_exif(image.getexif().get(EXIF_ORIENTATION_TAG))
    if image.mode != "RGB":
        image = image.convert("RGB")
    return LoadedImage(pixels=np.array(image), orientation=orientation)


def load_image_bytes(data: bytes) -> LoadedImage:
    """Decode encoded image bytes.

    Raises:
        ValueError: If the bytes are not a readable image.
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            return _decode(image)
    except UnidentifiedImageError as e:
        raise ValueError(f"Unreadable image data: {e}") from e


def load_image(path: str | Path) -> LoadedImage:
    """Load an image file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not a readable image.
    """
    return load_image_bytes(Path(path).read_bytes())
