"""
Choosing between two OCR readings of the same IC.

Each IC is read twice (binarised image and raw image). The reading that looks
more trustworthy is passed on to the lookup; the caller also needs to know
which one won, so the result is tagged as the first or the second reading.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from .details import TextDetails
from .manufacturers import ManufacturerDatabase, default_database

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class FirstReading(Generic[T]):
    """The first of the two readings was chosen."""

    value: T


@dataclass(frozen=True)
class SecondReading(Generic[T]):
    """The second of the two readings was chosen."""

    value: T


Reading = Union[FirstReading[T], SecondReading[T]]


def _by_line_count(first: TextDetails, second: TextDetails) -> Reading[TextDetails]:
    if second.other_line_count > first.other_line_count:
        return SecondReading(second)
    return FirstReading(first)


def _code_matches_manufacturer(details: TextDetails, database: ManufacturerDatabase) -> bool:
    codes = database.codes_for(details.single_manufacturer or "")
    if not codes or details.most_likely_code is None:
        return False
    return details.most_likely_code.startswith(tuple(codes))


def compare_text_details(
    first: TextDetails,
    second: TextDetails,
    database: ManufacturerDatabase | None = None,
) -> Reading[TextDetails]:
    """Pick the more trustworthy of two readings.

    - Neither has a single manufacturer: more other lines wins.
    - Exactly one has a single manufacturer: that one wins.
    - Both do: the one whose most likely code starts with one of its own
      manufacturer's code prefixes wins, provided the other's does not.
      Otherwise more other lines wins.

    Ties go to the first reading.
    """
    first_single = first.single_manufacturer is not None
    second_single = second.single_manufacturer is not None

    if not first_single and not second_single:
        choice = _by_line_count(first, second)
    elif first_single != second_single:
        choice = FirstReading(first) if first_single else SecondReading(second)
    else:
        if database is None:
            database = default_database()
        first_match = _code_matches_manufacturer(first, database)
        second_match = _code_matches_manufacturer(second, database)
        if first_match and not second_match:
            choice = FirstReading(first)
        elif second_match and not first_match:
            choice = SecondReading(second)
        else:
            choice = _by_line_count(first, second)

    logger.debug("Chose %s", type(choice).__name__)
    return choice
