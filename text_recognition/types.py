"""
Data structures and interfaces for text recognition.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

import numpy as np

# Quadrilateral in pixel coordinates: top-left, top-right, bottom-right, bottom-left
# of the text as read (y grows downwards)
Quad = list[tuple[float, float]]


class OcrError(RuntimeError):
    """Raised when text recognition fails for an image."""


@dataclass(frozen=True)
class TextBox:
    """One recognised piece of text."""

    quad: Quad
    text: str
    confidence: float


@dataclass(frozen=True)
class OcrResult:
    """Text read from one image.

    Attributes:
        lines: Recognised text in reading order
        rotation: Clockwise radians that turn the image so the text reads upright
        boxes: The individual recognitions the lines came from
    """

    lines: list[str]
    rotation: float | None = None
    boxes: list[TextBox] = field(default_factory=list, repr=False)

    @property
    def is_empty(self) -> bool:
        return not self.lines


class TextRecognizer(Protocol):
    """Interface for OCR engines."""

    def recognize(self, image: np.ndarray) -> OcrResult:
        """Read the text in an image.

        Raises:
            OcrError: If the engine fails.
        """
