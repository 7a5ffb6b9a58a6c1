"""Identify-text command CLI parsing and control flow."""

from __future__ import annotations

import argparse
import logging

from .common import build_identification_service, print_json

logger = logging.getLogger(__name__)


def add_identify_subparser(subparsers: argparse._SubParsersAction) -> None:
    identify_parser = subparsers.add_parser(
        "identify-text",
        help="Identify an IC from the lines of text printed on it",
    )
    identify_parser.add_argument(
        "lines",
        nargs="+",
        metavar="LINE",
        help="Text lines as read from the IC",
    )
    identify_parser.add_argument(
        "--compare",
        nargs="+",
        metavar="LINE",
        help="Lines of a second reading; the more trustworthy reading is used",
    )
    identify_parser.add_argument(
        "--offline",
        action="store_true",
        help="Skip the online part lookup",
    )
    identify_parser.set_defaults(_cmd=cmd_identify)


def cmd_identify(args: argparse.Namespace) -> int:
    service = build_identification_service(offline=args.offline)

    if args.compare:
        result, choice = service.find_component_details_compare(args.lines, args.compare)
        details = choice.value
        chosen = type(choice).__name__
    else:
        details = service.determine_component_details(args.lines)
        result = service.orchestrator.lookup(details)
        chosen = None

    payload = {"details": details.to_dict(), "result": result.to_dict()}
    if chosen is not None:
        payload["chosen_reading"] = chosen
    print_json(payload)
    return 1 if result.is_error else 0
