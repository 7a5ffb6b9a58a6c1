"""Tests for manufacturer reference data and matching."""

import pytest

from identification.manufacturers import (
    ManufacturerDatabase,
    code_prefix,
    default_database,
    first_word,
)


@pytest.fixture
def database():
    return ManufacturerDatabase.from_lines(
        ["Broadcom", "Atmel", "Microchip Technology", "Texas Instruments"],
        [
            "Broadcom,BCM,AFBR",
            "Atmel,AT,ATMEGA",
            "Microchip Technology,PIC,AT",
            "Texas Instruments,SN,TL",
        ],
    )


class TestHelpers:
    """Tests for the string helpers."""

    def test_first_word(self):
        assert first_word("  Texas Instruments ") == "Texas"
        assert first_word("Broadcom") == "Broadcom"

    def test_code_prefix_stops_at_first_digit(self):
        assert code_prefix("BCM2837") == "BCM"
        assert code_prefix("BCM 2837") == "BCM"

    def test_code_prefix_without_digits(self):
        assert code_prefix("LOGO") == "LOGO"

    def test_code_prefix_leading_digit(self):
        assert code_prefix("2451") == ""


class TestLoading:
    """Tests for parsing the reference formats."""

    def test_blank_lines_are_skipped(self):
        db = ManufacturerDatabase.from_lines(
            ["Acme Corp", "", "   "],
            ["Acme Corp,AC,ACM", "", ","],
        )
        assert db.names == ("Acme Corp",)
        assert dict(db.codes) == {"Acme Corp": ("AC", "ACM")}

    def test_shared_codes_map_to_all_manufacturers(self, database):
        assert database.code_manufacturers["AT"] == ("Atmel", "Microchip Technology")

    def test_reference_data_is_read_only(self, database):
        with pytest.raises(TypeError):
            database.codes["New"] = ("NW",)

    def test_bundled_data_loads(self):
        db = default_database()
        assert "Broadcom" in db.names
        assert db.codes["Broadcom"][0] == "BCM"
        assert default_database() is db


class TestIsManufacturer:
    """Tests for is_manufacturer."""

    def test_exact_first_word(self, database):
        assert database.is_manufacturer("BROADCOM") == ["Broadcom"]

    def test_confusable_characters_accepted(self, database):
        assert database.is_manufacturer("8ROADCOM") == ["Broadcom"]

    def test_first_word_only(self, database):
        assert database.is_manufacturer("TEXAS INSTRUMENTS 2451") == ["Texas Instruments"]

    def test_no_match(self, database):
        assert database.is_manufacturer("12345") is None

    def test_ties_are_all_returned(self):
        db = ManufacturerDatabase.from_lines(["Acme Corp", "Acme Industries"], [])
        assert db.is_manufacturer("ACME") == ["Acme Corp", "Acme Industries"]

    def test_bundled_data(self):
        assert default_database().is_manufacturer("BROADCOM") == ["Broadcom"]


class TestCodesFor:
    """Tests for codes_for."""

    def test_name_contained_case_insensitively(self, database):
        assert database.codes_for("TEXAS INSTRUMENTS INC") == ["SN", "TL"]

    def test_unknown(self, database):
        assert database.codes_for("Unknown") is None


class TestLookupByCode:
    """Tests for lookup_by_code."""

    def test_longest_prefix_first(self, database):
        assert database.lookup_by_code(["ATMEGA328P", "2451"]) == (["Atmel"], ["ATMEGA328P", "2451"])

    def test_prefix_shortened_until_known(self, database):
        manufacturers, lines = database.lookup_by_code(["LOGO", "ATX1234"])
        assert manufacturers == ["Atmel", "Microchip Technology"]
        assert lines == ["ATX1234", "LOGO"]

    def test_single_character_codes_are_not_tried(self):
        db = ManufacturerDatabase.from_lines(["Zilog"], ["Zilog,Z"])
        assert db.lookup_by_code(["ZQ80"]) is None

    def test_no_match(self, database):
        assert database.lookup_by_code(["QQQ1", "2451"]) is None
