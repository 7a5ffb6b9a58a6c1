"""
Image preprocessing module.

This module provides pure, deterministic functions for preparing board and IC
images. All functions follow the pattern: input -> output with no mutation of
the original arrays.

Key components:
- config: TextPreprocessConfig dataclass for parameterizing text extraction
- pipeline: prepare_text_image() builds the binarised image used for OCR
- steps: Class-based preprocessing steps with common PreprocessStep interface
- normalization: Grayscale conversion, rotation and cropping
- loading: Decoding images and their EXIF orientation
"""

from .config import TextPreprocessConfig
from .pipeline import build_pipeline, prepare_text_image
from .normalization import crop_rect, rotate_image, rotate_quarter_turns, to_grayscale, to_rgb
from .loading import LoadedImage, load_image, load_image_bytes
from .steps import (
    PreprocessStep,
    GrayscaleStep,
    GaussianBlurStep,
    InvertDarkBackgroundStep,
    MeanAdaptiveThresholdStep,
    Pipeline,
    PipelineStepResults,
    StepResult,
)

__all__ = [
    "TextPreprocessConfig",
    "build_pipeline",
    "prepare_text_image",
    "crop_rect",
    "rotate_image",
    "rotate_quarter_turns",
    "to_grayscale",
    "to_rgb",
    "LoadedImage",
    "load_image",
    "load_image_bytes",
    "PreprocessStep",
    "GrayscaleStep",
    "GaussianBlurStep",
    "InvertDarkBackgroundStep",
    "MeanAdaptiveThresholdStep",
    "Pipeline",
    "PipelineStepResults",
    "StepResult",
]
