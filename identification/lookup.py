"""
Online part lookup driven by ranked text details.

The lookup service itself sits behind the PartsLookup interface. The
orchestrator tries candidate lines in priority order, validates every returned
record against the text it searched for, retries once with wildcards, and
falls back to a local summary when nothing matches.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import BaseModel, ConfigDict

from config import (
    RESULT_MATCH_MAX_DISTANCE,
    WILDCARD_CHARACTERS,
    WILDCARD_MANUFACTURER_MAX_DISTANCE,
    WILDCARD_MAX_REPLACEMENT_RATIO,
    WILDCARD_MIN_LENGTH,
)
from detection.types import ICInfoState

from .dates import format_manufacture_dates
from .details import TextDetails, details_to_dictionary
from .manufacturers import first_word
from .similarity import WILDCARD, contained_distance, string_distance

logger = logging.getLogger(__name__)


class PartsLookupError(RuntimeError):
    """Raised when the parts lookup service cannot answer a query."""


class PartRecord(BaseModel):
    """A part returned by the lookup service. Any field may be missing."""

    manufacturer: str | None = None
    component_name: str | None = None
    part_number: str | None = None
    category: str | None = None
    description: str | None = None
    datasheet_url: str | None = None
    page_url: str | None = None

    model_config = ConfigDict(extra="ignore", frozen=True)

    def to_display_dict(self) -> dict[str, str]:
        """Non-empty fields under their display keys, in display order."""
        fields = (
            ("Manufacturer", self.manufacturer),
            ("Component Name", self.component_name),
            ("Part Number", self.part_number),
            ("Category", self.category),
            ("Description", self.description),
            ("Datasheet URL", self.datasheet_url),
            ("Octopart Page", self.page_url),
        )
        return {key: value for key, value in fields if value}


class PartsLookup(Protocol):
    """Interface for part search services."""

    def search(self, query: str) -> PartRecord | None:
        """Return the best matching part, or None when nothing matches.

        Raises:
            PartsLookupError: If the service fails.
        """


class NullPartsLookup:
    """Lookup used when online search is disabled: never finds anything."""

    def search(self, query: str) -> PartRecord | None:
        return None


@dataclass(frozen=True)
class InfoExtractionReturn:
    """Outcome of looking up one IC.

    Attributes:
        ic_state: State the IC should move to (unloaded when an error occurred)
        dictionary: Display key/value pairs, if any
        is_error: True when the lookup service failed along the way
    """

    ic_state: ICInfoState
    dictionary: dict[str, str] | None = None
    is_error: bool = False

    def to_dict(self) -> dict:
        return {
            "state": self.ic_state.value,
            "information": self.dictionary,
            "is_error": self.is_error,
        }


def is_result_correct(record: PartRecord, lookup_string: str) -> bool:
    """Check that a returned part number resembles the text that was searched for.

    Spaces are ignored; the shorter string is located inside the longer one and
    must differ in fewer than config.RESULT_MATCH_MAX_DISTANCE characters.
    """
    if not record.part_number:
        return False
    result_code = record.part_number.replace(" ", "")
    lookup_string = lookup_string.replace(" ", "")
    if len(result_code) > len(lookup_string):
        score = contained_distance(result_code, lookup_string)
    else:
        score = contained_distance(lookup_string, result_code)
    logger.debug("Result %r for %r scores %s", result_code, lookup_string, score)
    return score < RESULT_MATCH_MAX_DISTANCE


def insert_wildcards(text: str) -> tuple[str, int]:
    """Replace OCR-confusable characters with '?' and wrap the result in '*'.

    Returns:
        (wildcard search string, number of replaced characters)
    """
    replaced = 0
    characters = []
    for char in text:
        if char.upper() in WILDCARD_CHARACTERS:
            characters.append(WILDCARD)
            replaced += 1
        else:
            characters.append(char)
    return f"*{''.join(characters)}*", replaced


def _with_dates(dictionary: dict[str, str], details: TextDetails) -> dict[str, str]:
    if details.date_information:
        formatted = format_manufacture_dates(details.date_information)
        if formatted is not None:
            key, value = formatted
            dictionary = {**dictionary, key: value}
    return dictionary


class LookupOrchestrator:
    """Drive a PartsLookup over the candidate lines of one IC."""

    def __init__(self, parts_lookup: PartsLookup) -> None:
        self.parts_lookup = parts_lookup

    def lookup(self, details: TextDetails) -> InfoExtractionReturn:
        """Find online information for a set of text details.

        Candidates (most likely code, then other lines) are searched in order.
        A record is accepted only if it passes is_result_correct(); the first
        accepted record wins. A service error stops the candidate loop. If no
        candidate matched, one wildcard search of the first candidate is tried.
        Otherwise the local summary is returned, flagged unloaded if an error
        occurred and notAvailable if not.
        """
        if details.is_empty():
            return InfoExtractionReturn(ic_state=ICInfoState.NO_TEXT)

        candidates = details.lookup_lines()
        had_error = False
        for candidate in candidates:
            try:
                record = self.parts_lookup.search(candidate)
            except PartsLookupError as e:
                logger.warning("Part lookup failed for %r: %s", candidate, e)
                had_error = True
                break
            if record is None:
                logger.debug("No part found for %r", candidate)
                continue
            if not is_result_correct(record, candidate):
                logger.debug("Rejected %r for %r", record.part_number, candidate)
                continue
            logger.info("Identified %r as %s", candidate, record.part_number)
            return InfoExtractionReturn(
                ic_state=ICInfoState.LOADED,
                dictionary=_with_dates(record.to_display_dict(), details),
            )

        if candidates:
            try:
                wildcard_result = self._wildcard_lookup(candidates[0], details)
            except PartsLookupError as e:
                logger.warning("Wildcard lookup failed for %r: %s", candidates[0], e)
                had_error = True
                wildcard_result = None
            if wildcard_result is not None:
                return wildcard_result

        return InfoExtractionReturn(
            ic_state=ICInfoState.UNLOADED if had_error else ICInfoState.NOT_AVAILABLE,
            dictionary=details_to_dictionary(details),
            is_error=had_error,
        )

    def _wildcard_lookup(self, candidate: str, details: TextDetails) -> InfoExtractionReturn | None:
        if len(candidate) <= WILDCARD_MIN_LENGTH or not candidate[:1].isalpha():
            return None

        query, replaced = insert_wildcards(candidate)
        if replaced > len(candidate) * WILDCARD_MAX_REPLACEMENT_RATIO:
            logger.debug("Skipping wildcard search %r: %d of %d replaced", query, replaced, len(candidate))
            return None

        record = self.parts_lookup.search(query)
        if record is None or not is_result_correct(record, query.replace("*", "")):
            return None

        manufacturer = details.single_manufacturer
        if manufacturer and record.manufacturer:
            distance = string_distance(first_word(manufacturer), first_word(record.manufacturer))
            if distance >= WILDCARD_MANUFACTURER_MAX_DISTANCE:
                logger.debug(
                    "Wildcard result by %r does not match %r", record.manufacturer, manufacturer
                )
                return None

        logger.info("Identified %r as %s via wildcard search", candidate, record.part_number)
        return InfoExtractionReturn(
            ic_state=ICInfoState.LOADED,
            dictionary=_with_dates(record.to_display_dict(), details),
        )
