"""
Detection filtering functions.

Filters for removing duplicate detections and unwanted component types.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from config import NMS_IOU_THRESHOLD

from .bbox import box_iou
from .types import ComponentInfo, ComponentType, RawDetection


def non_max_suppression(
    detections: Sequence[RawDetection],
    iou_threshold: float | None = None,
) -> list[RawDetection]:
    """Greedy, class-aware non-maximum suppression.

    Repeatedly keeps the first remaining detection and drops every remaining
    detection of the same class whose IoU with it is at least the threshold.
    Detections of different classes never suppress each other. Callers that
    care about which duplicate survives should sort beforehand.

    Args:
        detections: Detections in priority order
        iou_threshold: Duplicate threshold (default: config.NMS_IOU_THRESHOLD)

    Returns:
        Surviving detections, in their original relative order
    """
    if iou_threshold is None:
        iou_threshold = NMS_IOU_THRESHOLD

    remaining = list(detections)
    kept: list[RawDetection] = []
    while remaining:
        best = remaining.pop(0)
        kept.append(best)
        best_box = best.to_xywh()
        remaining = [
            det for det in remaining
            if det.class_index != best.class_index
            or box_iou(best_box, det.to_xywh()) < iou_threshold
        ]
    return kept


def sort_largest_first(detections: Iterable[RawDetection]) -> list[RawDetection]:
    """Order detections by box area, largest first (stable for equal areas)."""
    return sorted(detections, key=lambda det: det.area, reverse=True)


def filter_component_types(
    components: Iterable[ComponentInfo],
    excluded: Iterable[ComponentType],
) -> list[ComponentInfo]:
    """Drop every component whose type is in ``excluded``."""
    excluded = frozenset(excluded)
    return [c for c in components if c.component_type not in excluded]
