"""
Text recognition module.

Reads the markings on IC images. The OCR engine sits behind the
`TextRecognizer` interface; `EasyOcrRecognizer` is the bundled implementation.
"""

from .types import OcrError, OcrResult, TextBox, TextRecognizer
from .orientation import determine_text_rotation
from .easyocr_backend import EasyOcrRecognizer

__all__ = [
    "OcrError",
    "OcrResult",
    "TextBox",
    "TextRecognizer",
    "determine_text_rotation",
    "EasyOcrRecognizer",
]
