"""
Component detection orchestration.

Runs an oriented-bounding-box detector over a board image and turns its output
into named components, either in one whole-image pass or tile by tile.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Protocol

import cv2
import numpy as np

import config
from preprocessing.normalization import rotate_quarter_turns, to_rgb

from .classifier import (
    LARGE_ITEMS_CLASSES,
    SMALL_ITEMS_CLASSES,
    ClassMap,
    classify_detections,
    component_type_for,
)
from .filtering import sort_largest_first
from .orientation import ImageOrientation
from .parser import parse_obb_output
from .tiling import detect_windowed
from .types import ComponentImageInfo, ComponentInfo, ComponentType, DetectionSet, RawDetection

logger = logging.getLogger(__name__)


class InferenceError(RuntimeError):
    """Raised when a detector model cannot be loaded or run."""


class InferenceBackend(Protocol):
    """Interface for detector inference engines."""

    def predict(self, image: np.ndarray, target_width: int, target_height: int) -> np.ndarray:
        """Run the model on an RGB image resized to the target size.

        Returns the raw [channels][predictions] output tensor.
        """


@dataclass
class OpenCVObbBackend:
    """Inference backend running an ONNX OBB model through OpenCV DNN."""

    model_path: str
    input_scale: float | None = None
    _net: Any = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.input_scale is None:
            self.input_scale = config.DETECTOR_INPUT_SCALE

    def _load_net(self):
        if self._net is None:
            model_path = Path(self.model_path)
            if not model_path.exists():
                raise InferenceError(f"Missing detector model file: {model_path}")
            try:
                self._net = cv2.dnn.readNetFromONNX(str(model_path))
            except cv2.error as e:
                raise InferenceError(f"Failed to load detector model {model_path}: {e}") from e
            logger.debug("Loaded detector model %s", model_path)
        return self._net

    def predict(self, image: np.ndarray, target_width: int, target_height: int) -> np.ndarray:
        net = self._load_net()
        try:
            blob = cv2.dnn.blobFromImage(
                to_rgb(image),
                scalefactor=self.input_scale,
                size=(target_width, target_height),
                swapRB=False,
                crop=False,
            )
            net.setInput(blob)
            return net.forward()
        except cv2.error as e:
            raise InferenceError(f"Detector inference failed: {e}") from e


class ComponentDetector:
    """Detect components with a whole-board model and a windowed small-parts model.

    Args:
        large_items_backend: Backend for the whole-image pass
        small_items_backend: Backend for the windowed pass (defaults to the large one)
        large_items_classes: Class map of the whole-image model
        small_items_classes: Class map of the windowed model
        confidence_threshold: Parser confidence threshold override
        iou_threshold: Parser NMS threshold override
        class_count: Number of class score channels of both models
    """

    def __init__(
        self,
        large_items_backend: InferenceBackend,
        small_items_backend: InferenceBackend | None = None,
        large_items_classes: ClassMap = LARGE_ITEMS_CLASSES,
        small_items_classes: ClassMap = SMALL_ITEMS_CLASSES,
        confidence_threshold: float | None = None,
        iou_threshold: float | None = None,
        class_count: int | None = None,
    ) -> None:
        self.large_items_backend = large_items_backend
        self.small_items_backend = small_items_backend or large_items_backend
        self.large_items_classes = large_items_classes
        self.small_items_classes = small_items_classes
        self.confidence_threshold = confidence_threshold
        self.iou_threshold = iou_threshold
        self.class_count = class_count

    @classmethod
    def from_config(cls) -> ComponentDetector:
        """Build a detector from the ONNX model paths in config."""
        return cls(
            large_items_backend=OpenCVObbBackend(config.LARGE_ITEMS_MODEL_PATH),
            small_items_backend=OpenCVObbBackend(config.SMALL_ITEMS_MODEL_PATH),
        )

    def _detect(
        self,
        backend: InferenceBackend,
        image: np.ndarray,
        target_dimensions: tuple[int, int],
    ) -> list[RawDetection]:
        output = backend.predict(image, *target_dimensions)
        return parse_obb_output(
            output,
            target_dimensions,
            confidence_threshold=self.confidence_threshold,
            iou_threshold=self.iou_threshold,
            class_count=self.class_count,
        )

    def identify_components(
        self,
        image: np.ndarray,
        orientation: ImageOrientation = ImageOrientation.UP,
    ) -> DetectionSet:
        """Whole-image detection with IC crops.

        Detections are ordered largest first, located in the upright frame and
        every IC gets an upright sub-image.

        Raises:
            InferenceError: If the backend fails.
            MalformedOutputError: If the backend output cannot be decoded.
        """
        detections = sort_largest_first(
            self._detect(self.large_items_backend, image, config.FULL_IMAGE_TARGET_DIMENSIONS)
        )
        result = classify_detections(
            detections,
            self.large_items_classes,
            image=image,
            orientation=orientation,
        )
        logger.info("Whole-image pass found %d components (%d ICs)", len(result), len(result.ics))
        return result

    def identify_components_simple(self, image: np.ndarray) -> list[ComponentInfo]:
        """Detection only: types and locations in model order, no crops, names or re-orientation."""
        detections = self._detect(
            self.large_items_backend, image, config.FULL_IMAGE_TARGET_DIMENSIONS
        )
        return [
            ComponentInfo(
                component_type=component_type_for(det.class_index, self.large_items_classes),
                image_info=ComponentImageInfo(location=(det.x, det.y), size=(det.width, det.height)),
            )
            for det in detections
        ]

    def _detect_tile(self, tile: np.ndarray) -> DetectionSet:
        detections = sort_largest_first(
            self._detect(self.small_items_backend, tile, config.WINDOW_TARGET_DIMENSIONS)
        )
        return classify_detections(detections, self.small_items_classes, image=tile)

    def identify_components_windowing(
        self,
        image: np.ndarray,
        window_number: int,
        orientation: ImageOrientation = ImageOrientation.UP,
        excluded_types: Iterable[ComponentType] = (),
    ) -> DetectionSet:
        """Tiled detection over a ``window_number`` x ``window_number`` grid.

        The image is turned upright before tiling, so tile detections need no
        further re-orientation. Failing tiles are skipped.
        """
        upright = rotate_quarter_turns(image, orientation.quarter_turns_clockwise)
        return detect_windowed(
            upright,
            self._detect_tile,
            window_number,
            excluded_types=excluded_types,
        )
