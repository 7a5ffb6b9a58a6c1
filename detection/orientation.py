"""
Image orientation handling.

Photos are stored in sensor orientation together with an EXIF orientation tag.
Detections made on the stored pixels are re-expressed in the upright frame the
user sees. Mirrored orientations are treated like their unmirrored counterparts.
"""

from __future__ import annotations

import math
from enum import Enum

from .bbox import Box


class ImageOrientation(Enum):
    """EXIF orientation values (tag 274)."""

    UP = 1
    UP_MIRRORED = 2
    DOWN = 3
    DOWN_MIRRORED = 4
    LEFT_MIRRORED = 5
    RIGHT = 6
    RIGHT_MIRRORED = 7
    LEFT = 8

    @classmethod
    def from_exif(cls, value: int | None) -> ImageOrientation:
        """Map an EXIF orientation value, defaulting to UP for missing or unknown values."""
        try:
            return cls(value)
        except ValueError:
            return cls.UP

    @property
    def unmirrored(self) -> ImageOrientation:
        return _UNMIRRORED.get(self, self)

    @property
    def rotation_radians(self) -> float:
        """Rotation applied to a crop of the stored pixels to make it upright."""
        return _ROTATION_RADIANS[self.unmirrored]

    @property
    def quarter_turns_clockwise(self) -> int:
        """Clockwise quarter turns that bring the stored pixels upright."""
        return _QUARTER_TURNS[self.unmirrored]


_UNMIRRORED = {
    ImageOrientation.UP_MIRRORED: ImageOrientation.UP,
    ImageOrientation.DOWN_MIRRORED: ImageOrientation.DOWN,
    ImageOrientation.LEFT_MIRRORED: ImageOrientation.LEFT,
    ImageOrientation.RIGHT_MIRRORED: ImageOrientation.RIGHT,
}

_ROTATION_RADIANS = {
    ImageOrientation.UP: 0.0,
    ImageOrientation.LEFT: -math.pi / 2,
    ImageOrientation.RIGHT: math.pi / 2,
    ImageOrientation.DOWN: math.pi,
}

_QUARTER_TURNS = {
    ImageOrientation.UP: 0,
    ImageOrientation.RIGHT: 1,
    ImageOrientation.DOWN: 2,
    ImageOrientation.LEFT: 3,
}


def orient_box(box: Box, orientation: ImageOrientation) -> Box:
    """Re-express a normalized top-left box from stored pixels in the upright frame.

    Args:
        box: (x, y, w, h) relative to the stored image
        orientation: EXIF orientation of the stored image

    Returns:
        (x, y, w, h) relative to the upright image; width and height are
        swapped for quarter-turn orientations.
    """
    x, y, w, h = box
    cx, cy = x + w / 2, y + h / 2
    base = orientation.unmirrored

    if base is ImageOrientation.LEFT:
        return (cy - h / 2, 1 - cx - w / 2, h, w)
    if base is ImageOrientation.RIGHT:
        return (1 - cy - h / 2, cx - w / 2, h, w)
    if base is ImageOrientation.DOWN:
        return (1 - cx - w / 2, 1 - cy - h / 2, w, h)
    return box
