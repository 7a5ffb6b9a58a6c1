"""
OCR-aware string comparison.

Strings are aligned with a longest-common-subsequence diff. The unmatched
("changed") runs between matched characters are what gets scored: either by
their length, or, when checking for similar characters, by requiring every
changed character to be a plausible OCR confusion of its counterpart.
"""

from __future__ import annotations

import math
from typing import Iterable

from config import SIMILAR_CHARACTER_GROUPS

# Returned when two strings cannot be OCR variants of each other
INFINITE_DISTANCE = math.inf

# Wildcard that matches any character in contained_distance()
WILDCARD = "?"

# Marks a character of the longer run that has already been paired
_USED = "\0"


def characters_similar(a: str, b: str, groups: Iterable[frozenset] = SIMILAR_CHARACTER_GROUPS) -> bool:
    """True when both characters belong to one confusable group."""
    return any(a in group and b in group for group in groups)


def _lcs_pairs(a: str, b: str) -> list[tuple[int, int]]:
    """Index pairs of one longest common subsequence of a and b."""
    n, m = len(a), len(b)
    table = [[0] * (m + 1) for _ in range(n + 1)]
    for i in range(n - 1, -1, -1):
        for j in range(m - 1, -1, -1):
            if a[i] == b[j]:
                table[i][j] = table[i + 1][j + 1] + 1
            else:
                table[i][j] = max(table[i + 1][j], table[i][j + 1])

    pairs = []
    i = j = 0
    while i < n and j < m:
        if a[i] == b[j]:
            pairs.append((i, j))
            i += 1
            j += 1
        elif table[i + 1][j] >= table[i][j + 1]:
            i += 1
        else:
            j += 1
    return pairs


def changed_runs(a: str, b: str) -> list[tuple[str, str]]:
    """Pairs of unmatched runs (from a, from b) between the matched characters."""
    runs = []
    prev_i = prev_j = 0
    for i, j in [*_lcs_pairs(a, b), (len(a), len(b))]:
        if i > prev_i or j > prev_j:
            runs.append((a[prev_i:i], b[prev_j:j]))
        prev_i, prev_j = i + 1, j + 1
    return runs


def difference_map(a: str, b: str) -> tuple[list[bool], list[bool]]:
    """Per-character flags telling whether each character of a and b is unmatched."""
    a_changed = [True] * len(a)
    b_changed = [True] * len(b)
    for i, j in _lcs_pairs(a, b):
        a_changed[i] = False
        b_changed[j] = False
    return a_changed, b_changed


def _similar_run_distance(left: str, right: str) -> float:
    if len(left) == len(right):
        for c1, c2 in zip(left, right):
            if not characters_similar(c1, c2):
                return INFINITE_DISTANCE
        return len(left)

    longer, shorter = (left, right) if len(left) > len(right) else (right, left)
    slots = list(longer)
    slack = len(longer) - len(shorter)
    for i, char in enumerate(shorter):
        for offset in range(slack + 1):
            if characters_similar(slots[i + offset], char):
                slots[i + offset] = _USED
                break
        else:
            return INFINITE_DISTANCE
    return len(longer)


def string_distance(a: str, b: str, check_similar: bool = False) -> float:
    """Diff-based distance between two strings, compared case-insensitively.

    Without ``check_similar`` every changed run costs the length of its longer
    side. With ``check_similar`` each changed character must be a confusable
    variant of its counterpart, otherwise the strings are rejected outright.

    Returns:
        The distance, or INFINITE_DISTANCE when check_similar rejects the pair.
    """
    left, right = a.upper(), b.upper()
    if right < left:
        left, right = right, left

    distance = 0
    for left_run, right_run in changed_runs(left, right):
        if not check_similar:
            distance += max(len(left_run), len(right_run))
            continue
        run_distance = _similar_run_distance(left_run, right_run)
        if run_distance == INFINITE_DISTANCE:
            return INFINITE_DISTANCE
        distance += run_distance
    return distance


def _find_sublist(haystack: list[bool], needle: list[bool]) -> int | None:
    if not needle:
        return 0
    for start in range(len(haystack) - len(needle) + 1):
        if haystack[start:start + len(needle)] == needle:
            return start
    return None


def contained_distance(larger: str, smaller: str) -> float:
    """Mismatches of ``smaller`` against its aligned position inside ``larger``.

    The diff flags of ``smaller`` are located in the diff flags of ``larger``;
    the characters at that position are then compared one by one, with '?' in
    ``smaller`` matching anything. Comparison is case-insensitive.

    Returns:
        Mismatch count, or INFINITE_DISTANCE when no aligned position exists.
    """
    larger, smaller = larger.upper(), smaller.upper()
    larger_map, smaller_map = difference_map(larger, smaller)
    start = _find_sublist(larger_map, smaller_map)
    if start is None:
        return INFINITE_DISTANCE

    window = larger[start:start + len(smaller)]
    return sum(
        1 for c1, c2 in zip(window, smaller)
        if c1 != c2 and c2 != WILDCARD
    )
