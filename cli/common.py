"""Helpers shared by the subcommands."""

from __future__ import annotations

import json
import logging
import os

import config
from identification import IdentificationService, NullPartsLookup, PartsLookup
from identification.nexar import NexarPartsLookup

logger = logging.getLogger(__name__)


def build_parts_lookup(offline: bool = False) -> PartsLookup:
    """Nexar lookup when a token is configured, otherwise the offline lookup."""
    token = os.environ.get(config.NEXAR_TOKEN_ENV, "").strip()
    if offline or not token:
        if not offline:
            logger.info("%s is not set; online part lookup disabled", config.NEXAR_TOKEN_ENV)
        return NullPartsLookup()
    return NexarPartsLookup(token)


def build_identification_service(offline: bool = False) -> IdentificationService:
    return IdentificationService(parts_lookup=build_parts_lookup(offline))


def print_json(payload) -> None:
    print(json.dumps(payload, indent=2))
