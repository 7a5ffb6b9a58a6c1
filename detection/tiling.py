"""
Windowed detection: split an image into an N x N grid, detect per tile and
stitch the results back into whole-image coordinates.

Tile sizes use integer division, so remainder pixels at the right and bottom
edges are not covered by any tile.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Iterable

import numpy as np

from .classifier import assign_internal_names
from .filtering import filter_component_types
from .parser import MalformedOutputError
from .types import ComponentImageInfo, ComponentType, DetectionSet

logger = logging.getLogger(__name__)

TileDetector = Callable[[np.ndarray], DetectionSet]


def section_image(image: np.ndarray, window_number: int) -> list[list[np.ndarray]]:
    """Split an image into ``window_number`` rows of ``window_number`` tiles.

    Returns:
        Tiles indexed as [row][column].

    Raises:
        ValueError: If window_number is not positive or exceeds the image size.
    """
    if window_number < 1:
        raise ValueError(f"window_number must be at least 1, got {window_number}")

    height, width = image.shape[:2]
    tile_width = width // window_number
    tile_height = height // window_number
    if tile_width == 0 or tile_height == 0:
        raise ValueError(
            f"Image of {width}x{height} is too small for a {window_number}x{window_number} grid"
        )

    return [
        [
            image[row * tile_height:(row + 1) * tile_height,
                  col * tile_width:(col + 1) * tile_width]
            for col in range(window_number)
        ]
        for row in range(window_number)
    ]


def remap_to_global(
    image_info: ComponentImageInfo,
    row: int,
    column: int,
    window_number: int,
) -> ComponentImageInfo:
    """Convert tile-local normalized coordinates into whole-image coordinates."""
    scale = 1.0 / window_number
    x, y = image_info.location
    w, h = image_info.size
    return replace(
        image_info,
        location=(column * scale + x * scale, row * scale + y * scale),
        size=(w * scale, h * scale),
    )


def remap_detection_set(
    detection_set: DetectionSet,
    row: int,
    column: int,
    window_number: int,
) -> DetectionSet:
    """Return a copy of a tile's detections expressed in whole-image coordinates."""
    components = [
        c.with_image_info(remap_to_global(c.image_info, row, column, window_number))
        for c in detection_set.components
    ]
    by_id = {c.id: c for c in components}
    ics = [replace(ic, base_info=by_id[ic.id]) for ic in detection_set.ics if ic.id in by_id]
    return DetectionSet(components=components, ics=ics)


def detect_windowed(
    image: np.ndarray,
    detect_tile: TileDetector,
    window_number: int,
    excluded_types: Iterable[ComponentType] = (),
) -> DetectionSet:
    """Run a detector over every tile and merge the results.

    A tile whose detector raises is logged and contributes nothing. Results are
    concatenated in row-major tile order, the excluded component types are
    dropped and the survivors are renamed so names are unique across tiles.

    Args:
        image: Upright image to split
        detect_tile: Callable returning the classified detections of one tile
        window_number: Tiles per side
        excluded_types: Component types to drop from the merged result

    Returns:
        Merged DetectionSet in whole-image coordinates.
    """
    merged = DetectionSet()
    tiles = section_image(image, window_number)
    failed = 0

    for row, tile_row in enumerate(tiles):
        for column, tile in enumerate(tile_row):
            try:
                tile_set = detect_tile(tile)
            except (MalformedOutputError, RuntimeError) as e:
                failed += 1
                logger.warning("Detection failed for tile (%d, %d): %s", row, column, e)
                continue
            merged = merged.merged(remap_detection_set(tile_set, row, column, window_number))

    excluded = frozenset(excluded_types)
    if excluded:
        kept = filter_component_types(merged.components, excluded)
        kept_ids = {c.id for c in kept}
        merged = DetectionSet(
            components=kept,
            ics=[ic for ic in merged.ics if ic.id in kept_ids],
        )

    logger.info(
        "Windowed detection over %dx%d tiles: %d components (%d tiles failed)",
        window_number, window_number, len(merged), failed,
    )
    return assign_internal_names(merged)
