"""
Manufacture date codes.

IC markings often carry a YYWW date code: two digits of year followed by two
digits of week.
"""

from __future__ import annotations

import datetime
import re
from typing import Iterable

from config import CENTURY_19_MIN_YEAR, MAX_WEEK_NUMBER

# Exactly four digits, not part of a longer digit run
DATE_CODE_PATTERN = re.compile(r"(?<!\d)\d{4}(?!\d)")

YearWeek = tuple[int, int]


def find_date_codes(lines: Iterable[str]) -> list[str]:
    """All standalone four-digit runs, in line order."""
    return [match.group(0) for line in lines for match in DATE_CODE_PATTERN.finditer(line)]


def derive_manufacture_dates(
    lines: Iterable[str],
    current_year: int | None = None,
) -> list[YearWeek] | None:
    """Interpret four-digit runs as (year, week) manufacture dates.

    Weeks outside 1..config.MAX_WEEK_NUMBER are rejected. A two-digit year up to
    the current year's suffix belongs to the current century; one between
    max(suffix, config.CENTURY_19_MIN_YEAR) and 99 to the 1900s; anything else
    is implausible and dropped.

    Args:
        lines: OCR lines to scan
        current_year: Reference year (default: today's year)

    Returns:
        Every plausible (year, week) in order of appearance, or None if there are none.
    """
    if current_year is None:
        current_year = datetime.date.today().year
    century, suffix = divmod(current_year, 100)

    dates = []
    for code in find_date_codes(lines):
        year, week = int(code[:2]), int(code[2:])
        if not 1 <= week <= MAX_WEEK_NUMBER:
            continue
        if year <= suffix:
            dates.append((century * 100 + year, week))
        elif max(suffix, CENTURY_19_MIN_YEAR) <= year <= 99:
            dates.append((1900 + year, week))
    return dates or None


def ordinal(n: int) -> str:
    """English ordinal for a positive number: 1st, 2nd, 3rd, 4th, 11th, 22nd."""
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def format_manufacture_dates(dates: Iterable[YearWeek]) -> tuple[str, str] | None:
    """Display key and value for a list of (year, week) dates.

    Returns:
        ("Potential Manufacture Date", "51st week of 2024") for a single date,
        the plural key with comma-joined values for several, None for none.
    """
    formatted = [f"{ordinal(week)} week of {year}" for year, week in dates]
    if not formatted:
        return None
    key = "Potential Manufacture Date" if len(formatted) == 1 else "Potential Manufacture Dates"
    return key, ", ".join(formatted)
