#!/usr/bin/env python3
"""
Unified CLI for the PCB Inspector.

Usage:
    pcbi detect <image>                  # Detect components, print JSON
    pcbi detect <image> --simple         # Whole-image model only (preview mode)
    pcbi identify-text LINE [LINE ...]   # Identify an IC from its text
    pcbi identify-text L1 --compare L2   # Pick the better of two readings
    pcbi inspect <image>                 # Detect components and identify ICs
    pcbi inspect <image> --no-identify   # Both detection passes, no OCR

Online part lookup needs NEXAR_ACCESS_TOKEN in the environment.
"""

import argparse
import logging
import sys

from logging_utils import configure_logging, add_logging_args
from cli.detect import add_detect_subparser
from cli.identify import add_identify_subparser
from cli.inspect import add_inspect_subparser

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pcbi",
        description="PCB Inspector - detect board components and identify ICs",
    )
    add_logging_args(parser)
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    add_detect_subparser(subparsers)
    add_identify_subparser(subparsers)
    add_inspect_subparser(subparsers)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level, args.verbose, args.quiet)

    cmd = getattr(args, "_cmd", None)
    if args.command is None or cmd is None:
        parser.print_help()
        return 1
    return cmd(args)


if __name__ == "__main__":
    sys.exit(main())
