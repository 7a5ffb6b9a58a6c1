"""
Turning the OCR lines of one IC into ranked identification details.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Union

from config import MIN_TEXT_LINE_LENGTH

from .dates import YearWeek, derive_manufacture_dates, format_manufacture_dates
from .manufacturers import ManufacturerDatabase, default_database

logger = logging.getLogger(__name__)

_DISALLOWED_CHARACTERS = re.compile(r"[^A-Za-z0-9 ]")


@dataclass(frozen=True)
class SingleManufacturer:
    """An unambiguous manufacturer match."""

    name: str


@dataclass(frozen=True)
class AmbiguousManufacturers:
    """Several equally likely manufacturers."""

    names: tuple[str, ...]


ManufacturerGuess = Union[SingleManufacturer, AmbiguousManufacturers]


@dataclass
class TextDetails:
    """Identification details derived from one OCR reading.

    Attributes:
        manufacturer: Manufacturer guess, if any
        most_likely_code: Line most likely to be the part number
        other_lines: Remaining candidate lines, most promising first
        date_information: Possible (year, week) manufacture dates
    """

    manufacturer: ManufacturerGuess | None = None
    most_likely_code: str | None = None
    other_lines: list[str] | None = None
    date_information: list[YearWeek] | None = None

    def is_empty(self) -> bool:
        return (
            self.manufacturer is None
            and self.most_likely_code is None
            and self.other_lines is None
            and self.date_information is None
        )

    @property
    def single_manufacturer(self) -> str | None:
        if isinstance(self.manufacturer, SingleManufacturer):
            return self.manufacturer.name
        return None

    @property
    def other_line_count(self) -> int:
        return len(self.other_lines or [])

    def lookup_lines(self) -> list[str]:
        """Candidate search strings in priority order."""
        lines = [self.most_likely_code] if self.most_likely_code is not None else []
        return lines + list(self.other_lines or [])

    def to_dict(self) -> dict:
        manufacturer = None
        if isinstance(self.manufacturer, SingleManufacturer):
            manufacturer = self.manufacturer.name
        elif isinstance(self.manufacturer, AmbiguousManufacturers):
            manufacturer = list(self.manufacturer.names)
        return {
            "manufacturer": manufacturer,
            "most_likely_code": self.most_likely_code,
            "other_lines": self.other_lines,
            "date_information": (
                [list(date) for date in self.date_information]
                if self.date_information is not None else None
            ),
        }


def clean_lines(raw_lines: Iterable[str]) -> list[str]:
    """Drop short lines, strip everything but ASCII letters, digits and spaces, drop blanks."""
    cleaned = (
        _DISALLOWED_CHARACTERS.sub("", line).strip()
        for line in raw_lines
        if len(line) >= MIN_TEXT_LINE_LENGTH
    )
    return [line for line in cleaned if line]


def _starts_with_letter(line: str) -> bool:
    return line[:1].isalpha()


def rank_lines(lines: Iterable[str]) -> list[str]:
    """Order lines: letter-first with digits, letter-first without, then the rest longest first.

    This is an empirically tuned priority, not a correctness property.
    """
    lines = list(lines)
    letter_lines = [line for line in lines if _starts_with_letter(line)]
    with_digits = [line for line in letter_lines if any(c.isdigit() for c in line)]
    without_digits = [line for line in letter_lines if not any(c.isdigit() for c in line)]
    remaining = sorted(
        (line for line in lines if not _starts_with_letter(line)),
        key=len,
        reverse=True,
    )
    return with_digits + without_digits + remaining


def determine_component_details(
    raw_lines: Iterable[str],
    database: ManufacturerDatabase | None = None,
    current_year: int | None = None,
) -> TextDetails:
    """Derive ranked identification details from the OCR lines of one IC.

    1. The first line recognised as a manufacturer name is taken out of the pool.
    2. With a manufacturer, lines starting with one of its code prefixes (or its
       initial when it has none) are ranked first.
    3. Without one, the code prefix table is consulted; any hit becomes an
       ambiguous manufacturer guess and the hit lines move to the front.
    4. The remaining lines are ranked by rank_lines().
    5. The first ranked line is the most likely code, the rest are other lines,
       and dates are derived from the other lines.

    Args:
        raw_lines: OCR lines in reading order
        database: Manufacturer reference data (default: bundled data)
        current_year: Reference year for date codes (default: today's year)

    Returns:
        TextDetails; empty when no usable line is left after cleaning.
    """
    if database is None:
        database = default_database()

    lines = clean_lines(raw_lines)
    details = TextDetails()
    if not lines:
        return details

    manufacturers = None
    for index, line in enumerate(lines):
        manufacturers = database.is_manufacturer(line)
        if manufacturers:
            del lines[index]
            break

    ordered: list[str] = []
    if manufacturers:
        if len(manufacturers) == 1:
            details.manufacturer = SingleManufacturer(manufacturers[0])
        else:
            details.manufacturer = AmbiguousManufacturers(tuple(manufacturers))

        codes = [code for name in manufacturers for code in database.codes_for(name) or []]
        if not codes:
            codes = [name[0] for name in manufacturers if name]
        ordered = [line for line in lines if line.startswith(tuple(codes))]
        lines = [line for line in lines if not line.startswith(tuple(codes))]
    else:
        code_match = database.lookup_by_code(lines)
        if code_match is not None:
            names, lines = code_match
            proper_names = []
            for name in names:
                listed = database.is_manufacturer(name)
                proper_names.append(listed[0] if listed and len(listed) == 1 else name)
            details.manufacturer = AmbiguousManufacturers(tuple(proper_names))

    ordered.extend(rank_lines(lines))

    details.most_likely_code = ordered[0] if ordered else None
    details.other_lines = ordered[1:]
    details.date_information = derive_manufacture_dates(details.other_lines, current_year)
    logger.debug("Resolved text details: %s", details.to_dict())
    return details


def details_to_dictionary(details: TextDetails) -> dict[str, str]:
    """Human-readable summary of the details, used when no online result exists."""
    output: dict[str, str] = {}
    if isinstance(details.manufacturer, SingleManufacturer):
        output["Manufacturer"] = details.manufacturer.name
    elif isinstance(details.manufacturer, AmbiguousManufacturers):
        output["Potential Manufacturers"] = ", ".join(details.manufacturer.names)

    if details.most_likely_code is not None:
        output["Most Likely Code"] = details.most_likely_code

    for i, line in enumerate(details.other_lines or [], start=1):
        output[f"Line {i}"] = line

    if details.date_information:
        formatted = format_manufacture_dates(details.date_information)
        if formatted is not None:
            key, value = formatted
            output[key] = value
    return output
