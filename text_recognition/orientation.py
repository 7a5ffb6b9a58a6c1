"""
Estimating how an image must be turned so that its text reads upright.
"""

from __future__ import annotations

import math
from typing import Iterable

from .types import Quad


def determine_text_rotation(quads: Iterable[Quad]) -> float:
    """Vote on the text direction of a set of recognised text boxes.

    Each box votes horizontal when it is wider than tall along its reading
    direction, vertical otherwise, and also votes on the sign of that
    direction. With fewer than two boxes no estimate is made.

    Args:
        quads: Text boxes as (top-left, top-right, bottom-right, bottom-left)
            of the text as read, in pixel coordinates with y growing downwards.

    Returns:
        Clockwise rotation in radians: 0, pi, pi/2 or -pi/2.
    """
    quads = list(quads)
    if len(quads) < 2:
        return 0.0

    horizontal = vertical = 0
    x_total = y_total = 0
    for quad in quads:
        _, top_right, bottom_right, bottom_left = quad
        # Upward extent from the bottom-left to the top-right corner
        y_dist = bottom_left[1] - top_right[1]
        x_dist = bottom_left[0] - bottom_right[0]
        if abs(y_dist) > abs(x_dist):
            vertical += 1
            y_total += -1 if y_dist < 0 else 1
        else:
            horizontal += 1
            x_total += -1 if x_dist < 0 else 1

    if horizontal > vertical:
        return 0.0 if x_total < 0 else math.pi
    return math.pi / 2 if y_total > 0 else -math.pi / 2
