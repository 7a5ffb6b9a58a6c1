"""
Decoding of oriented-bounding-box (OBB) detector output.

The detector emits one tensor laid out as ``[channels][predictions]`` where the
channels are ``[x, y, w, h, class scores..., theta]`` in model input pixels.
A leading batch dimension of size 1 is accepted and dropped.
"""

from __future__ import annotations

import logging

import numpy as np

from config import (
    DETECTION_CONFIDENCE_THRESHOLD,
    NMS_IOU_THRESHOLD,
    OBB_CLASS_COUNT,
    OBB_ROTATION_TOLERANCE,
)

from .bbox import center_to_top_left
from .filtering import non_max_suppression
from .types import RawDetection

logger = logging.getLogger(__name__)

# x, y, w, h and theta, on top of the class score channels
_GEOMETRY_CHANNELS = 5


class MalformedOutputError(ValueError):
    """Raised when a detector output tensor does not have the expected layout."""


def _as_channel_matrix(output, class_count: int) -> np.ndarray:
    tensor = np.asarray(output, dtype=np.float32)
    if tensor.ndim == 3:
        if tensor.shape[0] != 1:
            raise MalformedOutputError(
                f"Expected a batch of one prediction set, got shape {tensor.shape}"
            )
        tensor = tensor[0]
    if tensor.ndim != 2:
        raise MalformedOutputError(
            f"Expected a 2-D [channels][predictions] tensor, got shape {tensor.shape}"
        )

    expected = class_count + _GEOMETRY_CHANNELS
    if tensor.shape[0] != expected:
        raise MalformedOutputError(
            f"Expected {expected} channels for {class_count} classes, got {tensor.shape[0]}"
        )
    return tensor


def parse_obb_output(
    output,
    target_dimensions: tuple[int, int],
    confidence_threshold: float | None = None,
    iou_threshold: float | None = None,
    class_count: int | None = None,
) -> list[RawDetection]:
    """Decode a raw OBB tensor into deduplicated, normalized detections.

    For every prediction the best class channel gives class index and
    confidence; predictions at or below the confidence threshold are dropped.
    Boxes whose angle is within config.OBB_ROTATION_TOLERANCE of pi/2 have
    their width and height swapped. Coordinates are normalized by the model
    input size and converted to top-left form, then same-class duplicates are
    removed with non-maximum suppression.

    Args:
        output: Array-like shaped (C+5, N) or (1, C+5, N)
        target_dimensions: Model input (width, height) in pixels
        confidence_threshold: Minimum exclusive confidence (default from config)
        iou_threshold: NMS duplicate threshold (default from config)
        class_count: Number of class score channels (default from config)

    Returns:
        Accepted detections in prediction order; empty if none pass.

    Raises:
        MalformedOutputError: If the tensor layout does not match class_count.
        ValueError: If target dimensions are not positive.
    """
    if confidence_threshold is None:
        confidence_threshold = DETECTION_CONFIDENCE_THRESHOLD
    if class_count is None:
        class_count = OBB_CLASS_COUNT
    if class_count < 1:
        raise ValueError(f"class_count must be at least 1, got {class_count}")

    target_width, target_height = target_dimensions
    if target_width <= 0 or target_height <= 0:
        raise ValueError(f"Target dimensions must be positive, got {target_dimensions}")

    tensor = _as_channel_matrix(output, class_count)
    if tensor.shape[1] == 0:
        return []

    scores = tensor[4:4 + class_count]
    class_ids = scores.argmax(axis=0)
    confidences = scores[class_ids, np.arange(tensor.shape[1])]
    keep = confidences > confidence_threshold

    cx, cy, w, h = tensor[0], tensor[1], tensor[2], tensor[3]
    theta = tensor[4 + class_count]
    swap = np.abs(theta - np.pi / 2) < OBB_ROTATION_TOLERANCE
    w, h = np.where(swap, h, w), np.where(swap, w, h)

    detections = []
    for i in np.flatnonzero(keep):
        x, y, width, height = center_to_top_left(
            float(cx[i]) / target_width,
            float(cy[i]) / target_height,
            float(w[i]) / target_width,
            float(h[i]) / target_height,
        )
        detections.append(RawDetection(
            x=x,
            y=y,
            width=width,
            height=height,
            class_index=int(class_ids[i]),
            confidence=float(confidences[i]),
        ))

    kept = non_max_suppression(
        detections,
        iou_threshold=NMS_IOU_THRESHOLD if iou_threshold is None else iou_threshold,
    )
    logger.debug(
        "Parsed %d predictions: %d above threshold, %d after NMS",
        tensor.shape[1], len(detections), len(kept),
    )
    return kept
