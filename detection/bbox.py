"""
Bounding box geometry utilities.

All functions are pure and operate on axis-aligned boxes in top-left form:
(x, y, width, height), normalized to [0, 1] unless stated otherwise.
"""

from __future__ import annotations

Box = tuple[float, float, float, float]


def box_to_rect(box: Box) -> tuple:
    """Convert an (x, y, w, h) box to (x_min, y_min, x_max, y_max)."""
    x, y, w, h = box
    return (x, y, x + w, y + h)


def rect_intersection_area(rect1: tuple, rect2: tuple) -> float:
    """Calculate intersection area of two rectangles.

    Args:
        rect1: Tuple of (x_min, y_min, x_max, y_max).
        rect2: Tuple of (x_min, y_min, x_max, y_max).

    Returns:
        Area of intersection, or 0 if no intersection.
    """
    x1 = max(rect1[0], rect2[0])
    y1 = max(rect1[1], rect2[1])
    x2 = min(rect1[2], rect2[2])
    y2 = min(rect1[3], rect2[3])

    if x2 <= x1 or y2 <= y1:
        return 0.0
    return (x2 - x1) * (y2 - y1)


def box_area(box: Box) -> float:
    return box[2] * box[3]


def box_iou(box1: Box, box2: Box) -> float:
    """Calculate Intersection over Union (IoU) for two boxes.

    Boxes with a non-positive area never overlap anything.

    Returns:
        IoU value between 0 and 1.
    """
    area1 = box_area(box1)
    area2 = box_area(box2)
    if area1 <= 0 or area2 <= 0:
        return 0.0

    intersection = rect_intersection_area(box_to_rect(box1), box_to_rect(box2))
    if intersection == 0:
        return 0.0

    union = area1 + area2 - intersection
    return intersection / union if union > 0 else 0.0


def center_to_top_left(cx: float, cy: float, w: float, h: float) -> Box:
    """Convert a centre-form box to top-left form."""
    return (cx - w / 2, cy - h / 2, w, h)


def to_pixel_rect(box: Box, image_width: int, image_height: int) -> tuple[int, int, int, int]:
    """Scale a normalized box to an integer pixel rectangle clipped to the image.

    Returns:
        (x, y, w, h) in pixels; w or h is 0 when the box lies outside the image.
    """
    x, y, w, h = box
    x_min = min(max(int(round(x * image_width)), 0), image_width)
    y_min = min(max(int(round(y * image_height)), 0), image_height)
    x_max = min(max(int(round((x + w) * image_width)), 0), image_width)
    y_max = min(max(int(round((y + h) * image_height)), 0), image_height)
    return (x_min, y_min, max(x_max - x_min, 0), max(y_max - y_min, 0))


def clip_box(box: Box) -> Box:
    """Clip a normalized box to the unit square."""
    x, y, w, h = box
    x_min = min(max(x, 0.0), 1.0)
    y_min = min(max(y, 0.0), 1.0)
    x_max = min(max(x + w, 0.0), 1.0)
    y_max = min(max(y + h, 0.0), 1.0)
    return (x_min, y_min, x_max - x_min, y_max - y_min)
