"""
Text extraction preprocessing pipeline.

Builds the binarised image used for the second OCR reading of an IC:
Grayscale -> Gaussian blur -> (invert if dark) -> mean adaptive threshold.
"""

from __future__ import annotations

import numpy as np

from .config import TextPreprocessConfig
from .normalization import validate_image
from .steps import (
    GaussianBlurStep,
    GrayscaleStep,
    InvertDarkBackgroundStep,
    MeanAdaptiveThresholdStep,
    Pipeline,
    PreprocessStep,
)


def build_pipeline(config: TextPreprocessConfig) -> Pipeline:
    """Build a Pipeline from a TextPreprocessConfig."""
    steps: list[PreprocessStep] = [GrayscaleStep()]

    if config.blur_kernel_size is not None:
        steps.append(GaussianBlurStep(kernel_size=config.blur_kernel_size))

    if config.invert_dark_background:
        steps.append(InvertDarkBackgroundStep(mean_threshold=config.dark_background_mean))

    steps.append(
        MeanAdaptiveThresholdStep(
            window_divisor=config.window_divisor,
            constant=config.threshold_constant,
        )
    )
    return Pipeline(steps=steps)


def prepare_text_image(
    img: np.ndarray,
    config: TextPreprocessConfig | None = None,
    artifact_dir: str | None = None,
) -> np.ndarray:
    """Binarise an IC image for text recognition.

    Args:
        img: RGB, RGBA or grayscale image.
        config: Preprocessing configuration. If None, uses default settings.
        artifact_dir: Optional directory to save intermediate images.

    Returns:
        Binary uint8 image (0 or 255) with the same height and width as img.

    Raises:
        ValueError: If configuration is invalid or image cannot be processed.
        TypeError: If img is not a numpy array.
    """
    if config is None:
        config = TextPreprocessConfig()
    config.validate()
    validate_image(img)

    return build_pipeline(config).run(img, artifact_dir=artifact_dir).final
