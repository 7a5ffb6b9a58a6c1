"""
Manufacturer reference data and matching.

Two static resources back the matching:
- a manufacturer name list, one name per line
- a code prefix table, one ``name,code1,code2,...`` entry per line

Both are loaded once into an immutable ManufacturerDatabase that is shared by
reference.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Sequence

from config import MANUFACTURER_MATCH_MAX_DISTANCE

from .similarity import INFINITE_DISTANCE, string_distance

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"
MANUFACTURER_LIST_PATH = DATA_DIR / "manufacturer_list.txt"
MANUFACTURER_CODES_PATH = DATA_DIR / "manufacturer_codes.txt"


def first_word(text: str) -> str:
    """First space-separated word of a string, stripped."""
    return text.strip().split(" ", 1)[0].strip()


def code_prefix(line: str) -> str:
    """The part of a line before its first digit, ignoring whitespace."""
    compact = "".join(line.split())
    for i, char in enumerate(compact):
        if char.isdigit():
            return compact[:i]
    return compact


@dataclass(frozen=True)
class ManufacturerDatabase:
    """Immutable manufacturer names and code prefix tables.

    Attributes:
        names: Known manufacturer names, in file order
        codes: Manufacturer name -> code prefixes, in file order
        code_manufacturers: Code prefix -> manufacturers using it (derived)
    """

    names: tuple[str, ...]
    codes: Mapping[str, tuple[str, ...]]
    code_manufacturers: Mapping[str, tuple[str, ...]] = field(init=False, repr=False)
    _first_words: tuple[str, ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "names", tuple(self.names))
        object.__setattr__(
            self, "codes", MappingProxyType({k: tuple(v) for k, v in self.codes.items()})
        )
        inverse: dict[str, list[str]] = {}
        for manufacturer, codes in self.codes.items():
            for code in codes:
                inverse.setdefault(code, []).append(manufacturer)
        object.__setattr__(
            self, "code_manufacturers", MappingProxyType({k: tuple(v) for k, v in inverse.items()})
        )
        object.__setattr__(
            self, "_first_words", tuple(first_word(name).upper() for name in self.names)
        )

    @classmethod
    def from_lines(
        cls,
        name_lines: Iterable[str],
        code_lines: Iterable[str],
    ) -> ManufacturerDatabase:
        """Parse the two reference formats, skipping blank lines."""
        names = [line.strip() for line in name_lines if line.strip()]
        codes: dict[str, tuple[str, ...]] = {}
        for line in code_lines:
            parts = [part.strip() for part in line.strip().split(",")]
            if not parts[0]:
                continue
            codes[parts[0]] = tuple(part for part in parts[1:] if part)
        return cls(names=tuple(names), codes=codes)

    @classmethod
    def from_files(
        cls,
        names_path: str | Path = MANUFACTURER_LIST_PATH,
        codes_path: str | Path = MANUFACTURER_CODES_PATH,
    ) -> ManufacturerDatabase:
        """Load the reference data from text files.

        Raises:
            FileNotFoundError: If either file is missing.
        """
        names_text = Path(names_path).read_text(encoding="utf-8")
        codes_text = Path(codes_path).read_text(encoding="utf-8")
        database = cls.from_lines(names_text.splitlines(), codes_text.splitlines())
        logger.debug(
            "Loaded %d manufacturer names and %d code entries",
            len(database.names), len(database.codes),
        )
        return database

    def is_manufacturer(self, line: str) -> list[str] | None:
        """Match the first word of a line against the first words of known names.

        Uses the confusable-aware distance. All names tied at the minimum
        distance are returned, provided that minimum is within
        config.MANUFACTURER_MATCH_MAX_DISTANCE.

        Returns:
            Matching manufacturer names, or None.
        """
        word = first_word(line.upper())
        distances = [string_distance(name, word, check_similar=True) for name in self._first_words]
        best = min(distances, default=INFINITE_DISTANCE)
        if best > MANUFACTURER_MATCH_MAX_DISTANCE:
            return None
        return [name for name, distance in zip(self.names, distances) if distance == best]

    def codes_for(self, manufacturer: str) -> list[str] | None:
        """Code prefixes of the first table entry whose name occurs in ``manufacturer``."""
        lowered = manufacturer.lower()
        for name, codes in self.codes.items():
            if name.lower() in lowered:
                return list(codes)
        return None

    def lookup_by_code(self, lines: Sequence[str]) -> tuple[list[str], list[str]] | None:
        """Guess manufacturers from the code prefixes of candidate lines.

        The text before the first digit of each line is a trial code. Codes of
        the current maximum length are checked against the code table; if none
        is known, those codes lose their last character (codes of one character
        or less are dropped) and the next round starts. The first round with a
        hit ends the search.

        Returns:
            (manufacturers, lines reordered so the lines carrying a hit code come
            first), or None if no code matched.
        """
        prefixes = [code_prefix(line) for line in lines]
        manufacturers: list[str] = []
        likely_lines: list[str] = []

        while prefixes:
            longest = max(len(prefix) for prefix in prefixes)
            for code in dict.fromkeys(p for p in prefixes if len(p) == longest):
                found = self.code_manufacturers.get(code)
                if found:
                    logger.debug("Code %r matches %s", code, ", ".join(found))
                    manufacturers.extend(found)
                    likely_lines.extend(line for line in lines if line.startswith(code))
            if manufacturers:
                break
            prefixes = [p[:-1] if len(p) == longest else p for p in prefixes]
            prefixes = [p for p in prefixes if len(p) > 1]

        if not manufacturers:
            return None

        ordered = list(dict.fromkeys(likely_lines))
        ordered.extend(line for line in dict.fromkeys(lines) if line not in ordered)
        return list(dict.fromkeys(manufacturers)), ordered


@lru_cache(maxsize=1)
def default_database() -> ManufacturerDatabase:
    """The bundled reference data, loaded once per process."""
    return ManufacturerDatabase.from_files()
