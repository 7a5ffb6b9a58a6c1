"""
Classification of raw detections into named components.

Each detector model has its own class index semantics, so the index mapping is
passed in rather than fixed. ICs additionally get a cropped, upright sub-image
for later text recognition.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import replace
from types import MappingProxyType
from typing import Iterable, Mapping

import numpy as np

from preprocessing.normalization import crop_rect, rotate_image

from .bbox import Box, clip_box, to_pixel_rect
from .orientation import ImageOrientation, orient_box
from .types import (
    ComponentImageInfo,
    ComponentInfo,
    ComponentType,
    DetectionSet,
    ICInfo,
    RawDetection,
)

logger = logging.getLogger(__name__)

ClassMap = Mapping[int, ComponentType]

# Whole-board model: large parts
LARGE_ITEMS_CLASSES: ClassMap = MappingProxyType({
    0: ComponentType.CAPACITOR,
    1: ComponentType.IC,
})

# Windowed model: small passives
SMALL_ITEMS_CLASSES: ClassMap = MappingProxyType({
    0: ComponentType.CAPACITOR,
    1: ComponentType.RESISTOR,
})

# Single model trained on all four labels
COMBINED_CLASSES: ClassMap = MappingProxyType({
    0: ComponentType.CAPACITOR,
    1: ComponentType.CAPACITOR,
    2: ComponentType.IC,
    3: ComponentType.RESISTOR,
})


def component_type_for(class_index: int, class_map: ClassMap) -> ComponentType:
    """Look up a class index, treating unknown indices as OTHER."""
    return class_map.get(class_index, ComponentType.OTHER)


def extract_ic_image(
    image: np.ndarray,
    box: Box,
    orientation: ImageOrientation = ImageOrientation.UP,
) -> np.ndarray | None:
    """Crop a detection out of the stored image and turn it upright.

    Args:
        image: Stored (un-rotated) image pixels
        box: Normalized (x, y, w, h) relative to the stored image
        orientation: EXIF orientation of the stored image

    Returns:
        Upright crop, or None when the box covers no pixels.
    """
    height, width = image.shape[:2]
    rect = to_pixel_rect(box, width, height)
    if rect[2] == 0 or rect[3] == 0:
        logger.debug("Skipping IC crop for empty pixel rect %s", rect)
        return None
    return rotate_image(crop_rect(image, rect), orientation.rotation_radians)


def classify_detections(
    detections: Iterable[RawDetection],
    class_map: ClassMap,
    image: np.ndarray | None = None,
    orientation: ImageOrientation = ImageOrientation.UP,
) -> DetectionSet:
    """Turn raw detections into named components.

    Names are "<short code> <n>" with a running count per type, in detection
    order. Locations are re-expressed in the upright frame given by
    ``orientation``. When ``image`` is given, every IC gets a cropped sub-image
    and an unloaded ICInfo record.

    Args:
        detections: Parsed detections relative to the stored image
        class_map: Class index to component type mapping of the model
        image: Stored image pixels used for IC crops
        orientation: EXIF orientation of the stored image

    Returns:
        DetectionSet with all components and the ICs among them.
    """
    counts: Counter[ComponentType] = Counter()
    result = DetectionSet()

    for det in detections:
        component_type = component_type_for(det.class_index, class_map)
        counts[component_type] += 1

        box = clip_box(det.to_xywh())
        x, y, w, h = orient_box(box, orientation)
        image_info = ComponentImageInfo(location=(x, y), size=(w, h))
        if component_type is ComponentType.IC and image is not None:
            image_info = image_info.with_sub_image(extract_ic_image(image, box, orientation))

        component = ComponentInfo(
            component_type=component_type,
            image_info=image_info,
            internal_name=f"{component_type.short_code} {counts[component_type]}",
        )
        result.components.append(component)
        if component_type is ComponentType.IC:
            result.ics.append(ICInfo(base_info=component))

    logger.debug(
        "Classified %d detections: %s",
        len(result.components),
        ", ".join(f"{t.short_code}={n}" for t, n in counts.items()) or "none",
    )
    return result


def assign_internal_names(detection_set: DetectionSet) -> DetectionSet:
    """Renumber every component per type in list order.

    IC records are updated to point at the renamed components (matched by id).

    Returns:
        A new DetectionSet; the input is left untouched.
    """
    counts: Counter[ComponentType] = Counter()
    renamed: list[ComponentInfo] = []
    for component in detection_set.components:
        counts[component.component_type] += 1
        renamed.append(component.renamed(
            f"{component.component_type.short_code} {counts[component.component_type]}"
        ))

    names = {component.id: component.internal_name for component in renamed}
    ics = [
        replace(ic, base_info=ic.base_info.renamed(names.get(ic.id, ic.base_info.internal_name)))
        for ic in detection_set.ics
    ]
    return DetectionSet(components=renamed, ics=ics)
