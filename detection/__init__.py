"""
Component detection module.

This module turns raw oriented-bounding-box detector output into named
components on a circuit board image. Like the preprocessing module it is built
from pure functions with early validation; only the inference backend touches
a model.

Key components:
- types: Core data structures (RawDetection, ComponentInfo, ICInfo, DetectionSet)
- bbox: Box geometry utilities (IoU, pixel rects)
- parser: Decoding of the raw detector tensor
- filtering: Non-maximum suppression and type filtering
- orientation: EXIF orientation handling
- classifier: Class index mapping, naming and IC crops
- tiling: Windowed detection and coordinate stitching
- detector: Inference backends and detection orchestration

The main entry point is `ComponentDetector`, whose `identify_components()` and
`identify_components_windowing()` return a `DetectionSet`.
"""

from .types import (
    ComponentImageInfo,
    ComponentInfo,
    ComponentType,
    DetectionSet,
    ICInfo,
    ICInfoState,
    InvalidStateTransition,
    RawDetection,
)
from .bbox import box_area, box_iou, clip_box, to_pixel_rect
from .parser import MalformedOutputError, parse_obb_output
from .filtering import filter_component_types, non_max_suppression, sort_largest_first
from .orientation import ImageOrientation, orient_box
from .classifier import (
    COMBINED_CLASSES,
    LARGE_ITEMS_CLASSES,
    SMALL_ITEMS_CLASSES,
    assign_internal_names,
    classify_detections,
    extract_ic_image,
)
from .tiling import detect_windowed, remap_to_global, section_image
from .detector import ComponentDetector, InferenceBackend, InferenceError, OpenCVObbBackend

__all__ = [
    "ComponentImageInfo",
    "ComponentInfo",
    "ComponentType",
    "DetectionSet",
    "ICInfo",
    "ICInfoState",
    "InvalidStateTransition",
    "RawDetection",
    "box_area",
    "box_iou",
    "clip_box",
    "to_pixel_rect",
    "MalformedOutputError",
    "parse_obb_output",
    "filter_component_types",
    "non_max_suppression",
    "sort_largest_first",
    "ImageOrientation",
    "orient_box",
    "COMBINED_CLASSES",
    "LARGE_ITEMS_CLASSES",
    "SMALL_ITEMS_CLASSES",
    "assign_internal_names",
    "classify_detections",
    "extract_ic_image",
    "detect_windowed",
    "remap_to_global",
    "section_image",
    "ComponentDetector",
    "InferenceBackend",
    "InferenceError",
    "OpenCVObbBackend",
]
