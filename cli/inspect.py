"""Inspect command CLI parsing and control flow."""

from __future__ import annotations

import argparse
import logging

from detection import ComponentDetector, InferenceError, MalformedOutputError
from inspection import BoardInspector
from preprocessing import load_image
from text_recognition import EasyOcrRecognizer

from .common import build_identification_service, print_json

logger = logging.getLogger(__name__)


def add_inspect_subparser(subparsers: argparse._SubParsersAction) -> None:
    inspect_parser = subparsers.add_parser(
        "inspect",
        help="Detect components on a board image and identify its ICs",
    )
    inspect_parser.add_argument("image", help="Board image file")
    inspect_parser.add_argument(
        "--no-identify",
        action="store_true",
        help="Detection only (whole-image and windowed passes)",
    )
    inspect_parser.add_argument(
        "--offline",
        action="store_true",
        help="Skip the online part lookup",
    )
    inspect_parser.add_argument(
        "--gpu",
        action="store_true",
        help="Run OCR on the GPU",
    )
    inspect_parser.set_defaults(_cmd=cmd_inspect)


def cmd_inspect(args: argparse.Namespace) -> int:
    try:
        loaded = load_image(args.image)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("%s", exc)
        return 1

    inspector = BoardInspector(
        detector=ComponentDetector.from_config(),
        recognizer=EasyOcrRecognizer(gpu=args.gpu),
        identification=build_identification_service(offline=args.offline),
    )
    try:
        report = inspector.inspect_loaded(loaded, identify=not args.no_identify)
    except (InferenceError, MalformedOutputError) as exc:
        logger.error("Detection failed: %s", exc)
        return 1

    print_json(report.to_dict())
    if report.failed_ids:
        logger.warning("%d IC(s) could not be identified; run again to retry", len(report.failed_ids))
    return 0
