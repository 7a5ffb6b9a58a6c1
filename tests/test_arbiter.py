"""Tests for choosing between two readings of one IC."""

import pytest

from identification import (
    AmbiguousManufacturers,
    FirstReading,
    ManufacturerDatabase,
    SecondReading,
    SingleManufacturer,
    TextDetails,
    compare_text_details,
)


@pytest.fixture
def database():
    return ManufacturerDatabase.from_lines(
        ["Broadcom", "Texas Instruments"],
        ["Broadcom,BCM", "Texas Instruments,SN,TL"],
    )


def details(manufacturer=None, code="X1", lines=0):
    return TextDetails(
        manufacturer=SingleManufacturer(manufacturer) if manufacturer else None,
        most_likely_code=code,
        other_lines=[f"LINE{i}" for i in range(lines)],
    )


class TestCompareTextDetails:
    """Tests for compare_text_details."""

    def test_no_manufacturers_more_lines_wins(self, database):
        choice = compare_text_details(details(lines=1), details(lines=3), database)
        assert isinstance(choice, SecondReading)
        assert choice.value.other_line_count == 3

    def test_no_manufacturers_tie_goes_to_first(self, database):
        first = details(code="A1", lines=2)
        choice = compare_text_details(first, details(code="B1", lines=2), database)
        assert choice == FirstReading(first)

    def test_ambiguous_manufacturers_do_not_count(self, database):
        first = TextDetails(
            manufacturer=AmbiguousManufacturers(("Atmel", "Microchip Technology")),
            most_likely_code="AT1234",
            other_lines=[],
        )
        choice = compare_text_details(first, details(lines=1), database)
        assert isinstance(choice, SecondReading)

    def test_only_second_has_manufacturer(self, database):
        choice = compare_text_details(details(lines=5), details("Broadcom"), database)
        assert isinstance(choice, SecondReading)

    def test_only_first_has_manufacturer(self, database):
        choice = compare_text_details(details("Broadcom"), details(lines=5), database)
        assert isinstance(choice, FirstReading)

    def test_both_manufacturers_matching_code_wins(self, database):
        first = details("Texas Instruments", code="8CM2837", lines=4)
        second = details("Broadcom", code="BCM2837", lines=0)
        choice = compare_text_details(first, second, database)
        assert choice == SecondReading(second)

    def test_both_manufacturers_both_match_uses_line_count(self, database):
        first = details("Broadcom", code="BCM2837", lines=1)
        second = details("Texas Instruments", code="SN74HC00", lines=2)
        assert isinstance(compare_text_details(first, second, database), SecondReading)

    def test_both_manufacturers_neither_matches_uses_line_count(self, database):
        first = details("Broadcom", code="QQ1", lines=2)
        second = details("Texas Instruments", code="QQ2", lines=2)
        assert isinstance(compare_text_details(first, second, database), FirstReading)

    def test_manufacturer_without_codes_never_matches(self):
        db = ManufacturerDatabase.from_lines(["Acme Corp", "Broadcom"], ["Broadcom,BCM"])
        first = details("Acme Corp", code="AC100", lines=3)
        second = details("Broadcom", code="BCM2837", lines=0)
        assert isinstance(compare_text_details(first, second, db), SecondReading)
