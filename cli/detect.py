"""Detect command CLI parsing and control flow."""

from __future__ import annotations

import argparse
import logging

from detection import ComponentDetector, InferenceError, MalformedOutputError
from preprocessing import load_image

from .common import print_json

logger = logging.getLogger(__name__)


def add_detect_subparser(subparsers: argparse._SubParsersAction) -> None:
    detect_parser = subparsers.add_parser(
        "detect",
        help="Detect components on a board image and print them as JSON",
    )
    detect_parser.add_argument("image", help="Board image file")
    detect_parser.add_argument(
        "--simple",
        action="store_true",
        help="Whole-image model only: no IC crops, names or orientation handling",
    )
    detect_parser.set_defaults(_cmd=cmd_detect)


def cmd_detect(args: argparse.Namespace) -> int:
    try:
        loaded = load_image(args.image)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("%s", exc)
        return 1

    detector = ComponentDetector.from_config()
    try:
        if args.simple:
            components = detector.identify_components_simple(loaded.pixels)
            print_json({"components": [c.to_dict() for c in components]})
        else:
            detections = detector.identify_components(loaded.pixels, loaded.orientation)
            print_json(detections.to_dict())
    except (InferenceError, MalformedOutputError) as exc:
        logger.error("Detection failed: %s", exc)
        return 1
    return 0
