"""Board inspection: component detection followed by IC identification."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np
from tqdm import tqdm

import config
from detection import (
    ComponentDetector,
    ComponentType,
    DetectionSet,
    ICInfo,
    ICInfoState,
    ImageOrientation,
    InvalidStateTransition,
    assign_internal_names,
)
from identification import (
    FirstReading,
    IdentificationService,
    InfoExtractionReturn,
)
from preprocessing import LoadedImage, TextPreprocessConfig, prepare_text_image, rotate_image
from text_recognition import OcrError, OcrResult, TextRecognizer

logger = logging.getLogger(__name__)


@dataclass
class InspectionReport:
    """Everything found on one board image."""

    detections: DetectionSet
    results: dict[str, InfoExtractionReturn] = field(default_factory=dict)

    @property
    def failed_ids(self) -> list[str]:
        """IDs of ICs whose identification ended in an error (retry candidates)."""
        return [ic_id for ic_id, result in self.results.items() if result.is_error]

    def to_dict(self) -> dict:
        counts = {
            component_type.value: len(self.detections.of_type(component_type))
            for component_type in ComponentType
        }
        return {
            "counts": counts,
            **self.detections.to_dict(),
            "failed": self.failed_ids,
        }


def window_count(width: int, height: int, window_size: int | None = None) -> int:
    """Windows per side for the tiled pass: one per window_size pixels of the longer side."""
    if window_size is None:
        window_size = config.WINDOW_PIXEL_SIZE
    return max(width, height) // window_size


class BoardInspector:
    """Run detection and identification over a board image.

    Args:
        detector: Component detector
        recognizer: OCR engine used for the IC readings
        identification: Text resolution and lookup service
        text_config: Binarisation settings for the second IC reading
    """

    def __init__(
        self,
        detector: ComponentDetector,
        recognizer: TextRecognizer,
        identification: IdentificationService | None = None,
        text_config: TextPreprocessConfig | None = None,
    ) -> None:
        self.detector = detector
        self.recognizer = recognizer
        self.identification = identification or IdentificationService()
        self.text_config = text_config

    def detect(
        self,
        image: np.ndarray,
        orientation: ImageOrientation = ImageOrientation.UP,
    ) -> DetectionSet:
        """Whole-image pass plus a windowed pass for small parts.

        The windowed pass skips ICs (the whole-image pass handles them) and is
        left out for images smaller than one window. Names are assigned once
        more over the merged result so they are unique across both passes.
        """
        detections = self.detector.identify_components(image, orientation)

        height, width = image.shape[:2]
        windows = min(window_count(width, height), width, height)
        if windows >= 1:
            windowed = self.detector.identify_components_windowing(
                image,
                windows,
                orientation,
                excluded_types=(ComponentType.IC,),
            )
            detections = detections.merged(windowed)
        else:
            logger.debug("Image %dx%d is smaller than one window; skipping windowed pass", width, height)

        return assign_internal_names(detections)

    def _read(self, image: np.ndarray, label: str) -> OcrResult | None:
        try:
            return self.recognizer.recognize(image)
        except OcrError as e:
            logger.warning("OCR of %s image failed: %s", label, e)
            return None

    def retrieve_ic_information(self, ic: ICInfo) -> InfoExtractionReturn:
        """Read and identify one IC, updating its record in place.

        The IC image is read twice: binarised and as cropped. The more
        trustworthy reading is looked up and its image, turned so the text
        reads upright, replaces the IC's sub-image. If one reading fails the
        other is used alone; if both fail the result is error-flagged and the
        IC stays unloaded so it can be retried.

        Raises:
            InvalidStateTransition: If the IC is not unloaded.
            ValueError: If the IC has no sub-image.
        """
        if ic.info_state != ICInfoState.UNLOADED:
            raise InvalidStateTransition(
                f"{ic.base_info.internal_name or ic.id} is already {ic.info_state.value}"
            )
        raw_image = ic.sub_image
        if raw_image is None:
            raise ValueError(f"{ic.base_info.internal_name or ic.id} has no image")

        binarised = prepare_text_image(raw_image, self.text_config)
        binarised_reading = self._read(binarised, "binarised")
        raw_reading = self._read(raw_image, "raw")

        if binarised_reading is None and raw_reading is None:
            return InfoExtractionReturn(ic_state=ICInfoState.UNLOADED, is_error=True)

        if raw_reading is None:
            outcome = self.identification.find_component_details_single(binarised_reading.lines)
            chosen_image, reading = binarised, binarised_reading
        elif binarised_reading is None:
            outcome = self.identification.find_component_details_single(raw_reading.lines)
            chosen_image, reading = raw_image, raw_reading
        else:
            outcome, choice = self.identification.find_component_details_compare(
                binarised_reading.lines, raw_reading.lines
            )
            if isinstance(choice, FirstReading):
                chosen_image, reading = binarised, binarised_reading
            else:
                chosen_image, reading = raw_image, raw_reading

        if reading.rotation:
            chosen_image = rotate_image(chosen_image, reading.rotation)
        ic.set_sub_image(chosen_image)

        if outcome.ic_state != ICInfoState.UNLOADED:
            ic.record_result(outcome.ic_state, outcome.dictionary, reading.lines)
        logger.info("%s: %s", ic.base_info.internal_name or ic.id, outcome.ic_state.value)
        return outcome

    def identify_ics(
        self,
        detections: DetectionSet,
        show_progress: bool = True,
    ) -> dict[str, InfoExtractionReturn]:
        """Identify every unloaded IC of a detection set.

        Returns:
            IC id -> lookup outcome, for the ICs that were attempted.
        """
        results: dict[str, InfoExtractionReturn] = {}
        pending = [
            ic for ic in detections.ics
            if ic.info_state == ICInfoState.UNLOADED and ic.sub_image is not None
        ]
        for ic in tqdm(pending, desc="Identifying", disable=not show_progress):
            try:
                results[ic.id] = self.retrieve_ic_information(ic)
            except Exception as e:
                logger.exception("Error identifying %s: %s", ic.base_info.internal_name or ic.id, e)
                results[ic.id] = InfoExtractionReturn(ic_state=ICInfoState.UNLOADED, is_error=True)
        return results

    def inspect(
        self,
        image: np.ndarray,
        orientation: ImageOrientation = ImageOrientation.UP,
        identify: bool = True,
        show_progress: bool = True,
    ) -> InspectionReport:
        """Detect all components and, unless told otherwise, identify the ICs."""
        detections = self.detect(image, orientation)
        report = InspectionReport(detections=detections)
        if identify:
            report.results = self.identify_ics(detections, show_progress=show_progress)
        return report

    def inspect_loaded(self, loaded: LoadedImage, **kwargs) -> InspectionReport:
        return self.inspect(loaded.pixels, loaded.orientation, **kwargs)
