"""
EasyOCR-backed text recognition.
"""

from __future__ import annotations

import logging
import warnings
from typing import TYPE_CHECKING, Sequence

import numpy as np

import config

from .orientation import determine_text_rotation
from .types import OcrError, OcrResult, TextBox

if TYPE_CHECKING:
    import easyocr

logger = logging.getLogger(__name__)


def suppress_torch_mps_pin_memory_warning() -> None:
    """Suppress noisy pin_memory warnings on MPS-backed systems."""
    warnings.filterwarnings(
        "ignore",
        message=r".*pin_memory.*MPS.*",
        category=UserWarning,
        module=r"torch\.utils\.data\.dataloader",
    )


class EasyOcrRecognizer:
    """Text recognizer using an EasyOCR reader.

    The reader (and its models) is only created on first use unless one is
    passed in.
    """

    def __init__(
        self,
        languages: Sequence[str] | None = None,
        gpu: bool | None = None,
        reader: easyocr.Reader | None = None,
    ) -> None:
        self.languages = list(languages or config.OCR_LANGUAGES)
        self.gpu = config.OCR_USE_GPU if gpu is None else gpu
        self._reader = reader

    @property
    def reader(self) -> easyocr.Reader:
        if self._reader is None:
            import easyocr

            suppress_torch_mps_pin_memory_warning()
            logger.info("Loading EasyOCR reader (languages=%s, gpu=%s)", self.languages, self.gpu)
            self._reader = easyocr.Reader(self.languages, gpu=self.gpu)
        return self._reader

    def recognize(self, image: np.ndarray) -> OcrResult:
        try:
            results = self.reader.readtext(image)
        except Exception as e:
            raise OcrError(f"EasyOCR failed: {e}") from e

        boxes = []
        for bbox, text, confidence in results:
            text = text.strip()
            if not text:
                continue
            quad = [(float(p[0]), float(p[1])) for p in bbox]
            boxes.append(TextBox(quad=quad, text=text, confidence=float(confidence)))

        logger.debug("EasyOCR read %d lines: %s", len(boxes), [b.text for b in boxes])
        return OcrResult(
            lines=[b.text for b in boxes],
            rotation=determine_text_rotation(b.quad for b in boxes),
            boxes=boxes,
        )
