"""
Identification of ICs from the text printed on them.

Turns the OCR lines of one IC into ranked identification details and looks
them up online:

1. Clean lines, recognise a manufacturer name or code prefix, rank the
   remaining lines and derive YYWW manufacture dates (details.py)
2. When an IC was read twice, choose the more trustworthy reading (arbiter.py)
3. Search candidate lines with a PartsLookup, validate each result against
   its query, retry once with wildcards, and fall back to a local summary
   (lookup.py)

Comparison of OCR text is confusable-aware (B/8, S/5, O/0, ...) and lives in
similarity.py. Manufacturer reference data ships in data/ and is loaded once
into an immutable ManufacturerDatabase.

Usage:
    from identification import IdentificationService
    from identification.nexar import NexarPartsLookup

    service = IdentificationService(NexarPartsLookup(token))
    result = service.find_component_details_single(["BROADCOM", "BCM2837", "2451"])
    print(result.ic_state, result.dictionary)
"""

from .arbiter import FirstReading, Reading, SecondReading, compare_text_details
from .dates import (
    YearWeek,
    derive_manufacture_dates,
    find_date_codes,
    format_manufacture_dates,
    ordinal,
)
from .details import (
    AmbiguousManufacturers,
    ManufacturerGuess,
    SingleManufacturer,
    TextDetails,
    clean_lines,
    details_to_dictionary,
    determine_component_details,
    rank_lines,
)
from .lookup import (
    InfoExtractionReturn,
    LookupOrchestrator,
    NullPartsLookup,
    PartRecord,
    PartsLookup,
    PartsLookupError,
    insert_wildcards,
    is_result_correct,
)
from .manufacturers import ManufacturerDatabase, code_prefix, default_database, first_word
from .service import IdentificationService
from .similarity import (
    INFINITE_DISTANCE,
    characters_similar,
    contained_distance,
    string_distance,
)

__all__ = [
    # Similarity
    "INFINITE_DISTANCE",
    "characters_similar",
    "string_distance",
    "contained_distance",
    # Manufacturers
    "ManufacturerDatabase",
    "default_database",
    "first_word",
    "code_prefix",
    # Dates
    "YearWeek",
    "find_date_codes",
    "derive_manufacture_dates",
    "format_manufacture_dates",
    "ordinal",
    # Details
    "SingleManufacturer",
    "AmbiguousManufacturers",
    "ManufacturerGuess",
    "TextDetails",
    "clean_lines",
    "rank_lines",
    "determine_component_details",
    "details_to_dictionary",
    # Lookup
    "PartRecord",
    "PartsLookup",
    "PartsLookupError",
    "NullPartsLookup",
    "InfoExtractionReturn",
    "LookupOrchestrator",
    "is_result_correct",
    "insert_wildcards",
    # Arbiter
    "FirstReading",
    "SecondReading",
    "Reading",
    "compare_text_details",
    # Service
    "IdentificationService",
]
