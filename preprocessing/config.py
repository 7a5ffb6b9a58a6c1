"""
Configuration for the text extraction preprocessing pipeline.

All steps are parameterized through TextPreprocessConfig so the binarised
image used for the second OCR reading is reproducible.
"""

from __future__ import annotations

from dataclasses import dataclass

from config import (
    TEXT_BLUR_KERNEL_SIZE,
    TEXT_DARK_BACKGROUND_MEAN,
    TEXT_THRESHOLD_CONSTANT,
    TEXT_THRESHOLD_WINDOW_DIVISOR,
)


@dataclass(frozen=True)
class TextPreprocessConfig:
    """Configuration for text extraction preprocessing.

    Attributes:
        blur_kernel_size: Gaussian blur kernel size (odd). None skips blurring.
        invert_dark_background: Invert images darker than dark_background_mean.
        dark_background_mean: Mean brightness below which an image counts as dark.
        window_divisor: Adaptive threshold window is max(w, h) // window_divisor.
        threshold_constant: Constant subtracted from the local mean.
    """

    blur_kernel_size: int | None = TEXT_BLUR_KERNEL_SIZE
    invert_dark_background: bool = True
    dark_background_mean: float = TEXT_DARK_BACKGROUND_MEAN
    window_divisor: int = TEXT_THRESHOLD_WINDOW_DIVISOR
    threshold_constant: int = TEXT_THRESHOLD_CONSTANT

    def validate(self) -> None:
        """Validate configuration parameters.

        Raises:
            ValueError: If any parameter is invalid.
        """
        if self.blur_kernel_size is not None:
            if self.blur_kernel_size <= 0 or self.blur_kernel_size % 2 == 0:
                raise ValueError(
                    f"blur_kernel_size must be a positive odd number, got {self.blur_kernel_size}"
                )

        if not 0 <= self.dark_background_mean <= 255:
            raise ValueError(
                f"dark_background_mean must be within [0, 255], got {self.dark_background_mean}"
            )

        if self.window_divisor <= 0:
            raise ValueError(f"window_divisor must be positive, got {self.window_divisor}")

        if self.threshold_constant < 0:
            raise ValueError(
                f"threshold_constant must be non-negative, got {self.threshold_constant}"
            )
