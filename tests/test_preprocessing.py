"""
Unit tests for the preprocessing module: behavioral tests only.

Covers: error handling, rotation conventions, the text binarisation pipeline
and image loading.
"""

import io
import math

import numpy as np
import pytest
from PIL import Image

from detection.orientation import ImageOrientation
from preprocessing import (
    GaussianBlurStep,
    GrayscaleStep,
    InvertDarkBackgroundStep,
    MeanAdaptiveThresholdStep,
    Pipeline,
    TextPreprocessConfig,
    build_pipeline,
    crop_rect,
    load_image,
    load_image_bytes,
    prepare_text_image,
    rotate_image,
    rotate_quarter_turns,
    to_grayscale,
    to_rgb,
)


def dark_chip_with_marking():
    """A dark 40x80 package with one bright marking in the middle."""
    img = np.zeros((40, 80, 3), dtype=np.uint8)
    img[15:25, 25:55] = 255
    return img


class TestToGrayscale:
    """Tests for the to_grayscale function."""

    def test_pure_function_no_mutation(self):
        """Input should not be modified."""
        rgb = np.full((10, 10, 3), 128, dtype=np.uint8)
        original_data = rgb.copy()
        _ = to_grayscale(rgb)
        assert np.array_equal(rgb, original_data)

    def test_white_image_produces_white_gray(self):
        white = np.full((10, 10, 3), 255, dtype=np.uint8)
        assert np.all(to_grayscale(white) == 255)

    def test_rgba_alpha_ignored(self):
        rgba = np.zeros((4, 4, 4), dtype=np.uint8)
        rgba[..., 3] = 255
        assert np.all(to_grayscale(rgba) == 0)

    def test_invalid_type_raises(self):
        with pytest.raises(TypeError, match="Expected numpy.ndarray"):
            to_grayscale([[1, 2], [3, 4]])

    def test_empty_array_raises(self):
        with pytest.raises(ValueError):
            to_grayscale(np.array([]))

    def test_1d_array_raises(self):
        with pytest.raises(ValueError, match="2D or 3D"):
            to_grayscale(np.array([1, 2, 3]))

    def test_unsupported_channels_raises(self):
        with pytest.raises(ValueError, match="Unsupported number of channels"):
            to_grayscale(np.zeros((4, 4, 2), dtype=np.uint8))


class TestToRgb:
    """Tests for to_rgb."""

    def test_grayscale_expanded(self):
        rgb = to_rgb(np.full((3, 5), 7, dtype=np.uint8))
        assert rgb.shape == (3, 5, 3)
        assert np.all(rgb == 7)

    def test_alpha_dropped(self):
        assert to_rgb(np.zeros((3, 5, 4), dtype=np.uint8)).shape == (3, 5, 3)


class TestRotation:
    """Tests for clockwise rotation."""

    @pytest.fixture
    def img(self):
        return np.arange(6, dtype=np.uint8).reshape(2, 3)

    def test_quarter_turn_clockwise(self, img):
        rotated = rotate_image(img, math.pi / 2)
        assert rotated.shape == (3, 2)
        assert np.array_equal(rotated, np.rot90(img, -1))

    def test_quarter_turn_counter_clockwise(self, img):
        assert np.array_equal(rotate_image(img, -math.pi / 2), np.rot90(img, 1))

    def test_half_turn(self, img):
        assert np.array_equal(rotate_image(img, math.pi), np.rot90(img, 2))

    def test_zero_is_a_copy(self, img):
        rotated = rotate_image(img, 0.0)
        assert np.array_equal(rotated, img)
        assert rotated is not img

    def test_quarter_turns_wrap(self, img):
        assert np.array_equal(rotate_quarter_turns(img, 5), np.rot90(img, -1))

    def test_arbitrary_angle_grows_canvas(self):
        rotated = rotate_image(np.full((10, 10), 255, dtype=np.uint8), math.pi / 4)
        assert rotated.shape == (14, 14)


class TestCropRect:
    """Tests for crop_rect."""

    def test_crop(self):
        img = np.arange(100, dtype=np.uint8).reshape(10, 10)
        crop = crop_rect(img, (2, 3, 4, 5))
        assert crop.shape == (5, 4)
        assert crop[0, 0] == 32

    def test_crop_is_a_copy(self):
        img = np.zeros((10, 10), dtype=np.uint8)
        crop = crop_rect(img, (0, 0, 2, 2))
        crop[:] = 9
        assert np.all(img == 0)

    def test_empty_rect_raises(self):
        with pytest.raises(ValueError, match="positive size"):
            crop_rect(np.zeros((10, 10), dtype=np.uint8), (0, 0, 0, 5))


class TestSteps:
    """Tests for the individual preprocessing steps."""

    def test_invert_applied_to_dark_image(self):
        step = InvertDarkBackgroundStep(mean_threshold=127)
        out = step.apply(np.full((4, 4), 10, dtype=np.uint8))
        assert np.all(out == 245)
        assert step.get_metadata()["step_status"] == "applied"

    def test_invert_declined_for_bright_image(self):
        step = InvertDarkBackgroundStep(mean_threshold=127)
        out = step.apply(np.full((4, 4), 200, dtype=np.uint8))
        assert np.all(out == 200)
        assert step.get_metadata() == {"step_status": "declined", "skip_artifact": True}

    def test_invert_requires_grayscale(self):
        with pytest.raises(ValueError, match="grayscale"):
            InvertDarkBackgroundStep().apply(np.zeros((4, 4, 3), dtype=np.uint8))

    @pytest.mark.parametrize("shape,expected", [
        ((70, 70), 11),
        ((21, 14), 3),
        ((10, 10), 3),
        ((40, 80), 11),
    ])
    def test_threshold_window_size(self, shape, expected):
        step = MeanAdaptiveThresholdStep(window_divisor=7)
        assert step.window_size_for(np.zeros(shape, dtype=np.uint8)) == expected

    def test_threshold_reports_window(self):
        step = MeanAdaptiveThresholdStep(window_divisor=7)
        step.apply(np.zeros((70, 70), dtype=np.uint8))
        assert step.get_metadata() == {"step_metrics": {"window_size": 11}}

    def test_build_pipeline_step_order(self):
        pipeline = build_pipeline(TextPreprocessConfig())
        assert [type(step) for step in pipeline] == [
            GrayscaleStep,
            GaussianBlurStep,
            InvertDarkBackgroundStep,
            MeanAdaptiveThresholdStep,
        ]

    def test_optional_steps_omitted(self):
        config = TextPreprocessConfig(blur_kernel_size=None, invert_dark_background=False)
        assert len(build_pipeline(config)) == 2

    def test_pipeline_saves_artifacts(self, tmp_path):
        pipeline = Pipeline(steps=[GrayscaleStep(), InvertDarkBackgroundStep()])
        result = pipeline.run(np.full((8, 8, 3), 200, dtype=np.uint8), artifact_dir=str(tmp_path))
        assert set(result.artifact_paths) == {"grayscale"}
        assert (tmp_path / "grayscale.png").exists()
        assert result.get_intermediate("invert_dark") is not None


class TestTextPreprocessConfig:
    """Tests for configuration validation."""

    def test_defaults_valid(self):
        TextPreprocessConfig().validate()

    @pytest.mark.parametrize("kwargs,match", [
        ({"blur_kernel_size": 4}, "blur_kernel_size"),
        ({"blur_kernel_size": -1}, "blur_kernel_size"),
        ({"dark_background_mean": 300}, "dark_background_mean"),
        ({"window_divisor": 0}, "window_divisor"),
        ({"threshold_constant": -1}, "threshold_constant"),
    ])
    def test_invalid_values(self, kwargs, match):
        with pytest.raises(ValueError, match=match):
            TextPreprocessConfig(**kwargs).validate()


class TestPrepareTextImage:
    """End-to-end tests for prepare_text_image."""

    def test_output_is_binary_with_same_size(self):
        out = prepare_text_image(dark_chip_with_marking())
        assert out.shape == (40, 80)
        assert out.dtype == np.uint8
        assert set(np.unique(out)) <= {0, 255}

    def test_dark_package_gives_dark_text_on_white(self):
        out = prepare_text_image(dark_chip_with_marking())
        assert out[0, 0] == 255
        assert out[20, 40] == 0

    def test_input_not_mutated(self):
        img = dark_chip_with_marking()
        original = img.copy()
        prepare_text_image(img)
        assert np.array_equal(img, original)

    def test_invalid_config_rejected(self):
        with pytest.raises(ValueError):
            prepare_text_image(dark_chip_with_marking(), TextPreprocessConfig(window_divisor=0))


class TestLoading:
    """Tests for image decoding."""

    def encode(self, mode="RGB", orientation=None, fmt="JPEG"):
        image = Image.new(mode, (30, 20), color=(200, 10, 10) if mode == "RGB" else 128)
        buffer = io.BytesIO()
        if orientation is None:
            image.save(buffer, format=fmt)
        else:
            exif = Image.Exif()
            exif[274] = orientation
            image.save(buffer, format=fmt, exif=exif)
        return buffer.getvalue()

    def test_rgb_pixels_in_stored_orientation(self):
        loaded = load_image_bytes(self.encode(orientation=6))
        assert loaded.pixels.shape == (20, 30, 3)
        assert (loaded.width, loaded.height) == (30, 20)
        assert loaded.orientation is ImageOrientation.RIGHT

    def test_missing_orientation_is_up(self):
        assert load_image_bytes(self.encode()).orientation is ImageOrientation.UP

    def test_grayscale_converted_to_rgb(self):
        loaded = load_image_bytes(self.encode(mode="L", fmt="PNG"))
        assert loaded.pixels.shape == (20, 30, 3)

    def test_unreadable_bytes(self):
        with pytest.raises(ValueError, match="Unreadable"):
            load_image_bytes(b"not an image")

    def test_load_from_path(self, tmp_path):
        path = tmp_path / "board.jpg"
        path.write_bytes(self.encode())
        assert load_image(path).pixels.shape == (20, 30, 3)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_image(tmp_path / "missing.jpg")
