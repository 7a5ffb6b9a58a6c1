"""
Preprocessing step classes with a common interface.

Each step is a frozen dataclass that implements the PreprocessStep interface.
Steps are pure: they take an input and return a new output without mutating
the original array.

Usage:
    from preprocessing.steps import GrayscaleStep, GaussianBlurStep, Pipeline

    pipeline = Pipeline(steps=[
        GrayscaleStep(),
        GaussianBlurStep(kernel_size=3),
    ])
    result = pipeline.run(image)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import cv2
import numpy as np

from .normalization import to_grayscale


class PreprocessStep(ABC):
    """Base class for preprocessing steps.

    Steps should be pure functions: they take an input image and return a new
    output without mutating the original. Steps can report metadata about what
    they did for debugging.
    """

    @abstractmethod
    def apply(self, img: np.ndarray) -> np.ndarray:
        """Apply this preprocessing step to an image.

        Must be pure: never mutates the input image.
        """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for logging and debugging."""

    def get_metadata(self) -> dict[str, Any]:
        """Return any metadata produced by the last call to apply()."""
        return {}


def _require_grayscale(step: str, img: np.ndarray) -> None:
    if img.ndim != 2:
        raise ValueError(
            f"{step} requires grayscale input (2D array), "
            f"got {img.ndim}D array with shape {img.shape}"
        )


@dataclass(frozen=True)
class GrayscaleStep(PreprocessStep):
    """Convert image to grayscale.

    Attributes:
        dtype: Output numpy dtype. Default is uint8 for CV2 compatibility.
    """

    dtype: np.dtype = field(default_factory=lambda: np.dtype(np.uint8))

    def apply(self, img: np.ndarray) -> np.ndarray:
        return to_grayscale(img, self.dtype)

    @property
    def name(self) -> str:
        return "grayscale"


@dataclass(frozen=True)
class GaussianBlurStep(PreprocessStep):
    """Smooth sensor noise before thresholding.

    Attributes:
        kernel_size: Odd, square kernel size.
    """

    kernel_size: int = 3

    def apply(self, img: np.ndarray) -> np.ndarray:
        size = self.kernel_size
        return cv2.GaussianBlur(img, (size, size), 0)

    @property
    def name(self) -> str:
        return f"blur({self.kernel_size})"


@dataclass(frozen=True)
class InvertDarkBackgroundStep(PreprocessStep):
    """Invert images whose mean brightness is below a threshold.

    IC packages are usually dark with light markings; inverting them gives
    dark text on a light background for the thresholding step.
    """

    mean_threshold: float = 127.0
    _inverted: bool = field(default=False, init=False, repr=False)

    def apply(self, img: np.ndarray) -> np.ndarray:
        _require_grayscale("InvertDarkBackgroundStep", img)
        invert = float(img.mean()) < self.mean_threshold
        object.__setattr__(self, "_inverted", invert)
        if invert:
            return cv2.bitwise_not(img)
        return img.copy()

    @property
    def name(self) -> str:
        return "invert_dark"

    def get_metadata(self) -> dict[str, Any]:
        return {
            "step_status": "applied" if self._inverted else "declined",
            "skip_artifact": not self._inverted,
        }


@dataclass(frozen=True)
class MeanAdaptiveThresholdStep(PreprocessStep):
    """Binarise against the local mean with a window relative to the image size.

    The window is max(width, height) // window_divisor, bumped to the next odd
    number and to at least 3. A pixel becomes white when it is brighter than
    the local mean minus ``constant``.
    """

    window_divisor: int = 7
    constant: int = 5
    _window_size: int = field(default=0, init=False, repr=False)

    def window_size_for(self, img: np.ndarray) -> int:
        size = max(img.shape[:2]) // self.window_divisor
        if size % 2 == 0:
            size += 1
        return max(size, 3)

    def apply(self, img: np.ndarray) -> np.ndarray:
        _require_grayscale("MeanAdaptiveThresholdStep", img)
        window_size = self.window_size_for(img)
        object.__setattr__(self, "_window_size", window_size)
        return cv2.adaptiveThreshold(
            img,
            255,
            cv2.ADAPTIVE_THRESH_MEAN_C,
            cv2.THRESH_BINARY,
            window_size,
            self.constant,
        )

    @property
    def name(self) -> str:
        return f"adaptive_threshold({self.window_divisor},{self.constant})"

    def get_metadata(self) -> dict[str, Any]:
        return {"step_metrics": {"window_size": self._window_size}}


@dataclass
class StepResult:
    """Result of applying a single preprocessing step."""

    name: str
    image: np.ndarray
    metadata: dict[str, Any] = field(default_factory=dict)
    artifact_path: str | None = None


@dataclass
class PipelineStepResults:
    """Results from running a preprocessing pipeline.

    Attributes:
        original: The original input image.
        steps: List of StepResult for each step in order.
    """

    original: np.ndarray
    steps: list[StepResult] = field(default_factory=list)

    @property
    def final(self) -> np.ndarray:
        """Get the final processed image."""
        if not self.steps:
            return self.original
        return self.steps[-1].image

    def get_intermediate(self, step_name: str) -> np.ndarray | None:
        """Get intermediate image by step name (e.g. "grayscale")."""
        for step in self.steps:
            if step.name == step_name:
                return step.image
        return None

    @property
    def artifact_paths(self) -> dict[str, str]:
        """Map of normalized step name to saved artifact path."""
        return {
            step.name.split("(")[0]: step.artifact_path
            for step in self.steps
            if step.artifact_path
        }


def _save_image(img: np.ndarray, path: str) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    cv2.imwrite(path, img)


@dataclass
class Pipeline:
    """A sequence of preprocessing steps applied in order.

    All intermediate results are preserved.
    """

    steps: list[PreprocessStep]

    def run(
        self,
        img: np.ndarray,
        artifact_dir: str | None = None,
    ) -> PipelineStepResults:
        """Run the pipeline on an image.

        Args:
            img: Input image as numpy array.
            artifact_dir: Optional directory to save each step's output into.

        Returns:
            PipelineStepResults containing all intermediate images.
        """
        result = PipelineStepResults(original=img.copy())
        current = result.original

        for step in self.steps:
            output = step.apply(current)
            metadata = step.get_metadata()

            artifact_path = None
            if artifact_dir and not metadata.get("skip_artifact", False):
                artifact_path = f"{artifact_dir}/{step.name.split('(')[0]}.png"
                _save_image(output, artifact_path)

            result.steps.append(
                StepResult(
                    name=step.name,
                    image=output,
                    metadata=metadata,
                    artifact_path=artifact_path,
                )
            )
            current = output

        return result

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self):
        return iter(self.steps)
