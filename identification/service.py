"""
Identification entry points: text lines in, lookup outcome out.
"""

from __future__ import annotations

import logging
from typing import Sequence

from .arbiter import FirstReading, Reading, compare_text_details
from .details import TextDetails, determine_component_details
from .lookup import InfoExtractionReturn, LookupOrchestrator, NullPartsLookup, PartsLookup
from .manufacturers import ManufacturerDatabase, default_database

logger = logging.getLogger(__name__)


class IdentificationService:
    """Resolve OCR readings of an IC and look the result up.

    Args:
        parts_lookup: Lookup service (default: NullPartsLookup, i.e. offline)
        database: Manufacturer reference data (default: bundled data)
        current_year: Reference year for date codes (default: today's year)
    """

    def __init__(
        self,
        parts_lookup: PartsLookup | None = None,
        database: ManufacturerDatabase | None = None,
        current_year: int | None = None,
    ) -> None:
        self.parts_lookup = parts_lookup or NullPartsLookup()
        self.database = database or default_database()
        self.current_year = current_year
        self.orchestrator = LookupOrchestrator(self.parts_lookup)

    def determine_component_details(self, lines: Sequence[str]) -> TextDetails:
        return determine_component_details(lines, self.database, self.current_year)

    def find_component_details_single(self, lines: Sequence[str]) -> InfoExtractionReturn:
        """Identify an IC from one OCR reading."""
        return self.orchestrator.lookup(self.determine_component_details(lines))

    def choose_reading(
        self,
        first_lines: Sequence[str],
        second_lines: Sequence[str],
    ) -> Reading[TextDetails]:
        """Resolve both readings and pick the more trustworthy one."""
        return compare_text_details(
            self.determine_component_details(first_lines),
            self.determine_component_details(second_lines),
            self.database,
        )

    def find_component_details_compare(
        self,
        first_lines: Sequence[str],
        second_lines: Sequence[str],
    ) -> tuple[InfoExtractionReturn, Reading[TextDetails]]:
        """Identify an IC from two readings of it.

        Returns:
            (lookup outcome of the chosen reading, the tagged choice)
        """
        choice = self.choose_reading(first_lines, second_lines)
        logger.debug(
            "Using %s reading", "first" if isinstance(choice, FirstReading) else "second"
        )
        return self.orchestrator.lookup(choice.value), choice
