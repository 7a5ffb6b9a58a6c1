"""Tests for the lookup orchestrator and result validation."""

from unittest.mock import MagicMock, call

import pytest

from detection import ICInfoState
from identification import (
    IdentificationService,
    LookupOrchestrator,
    ManufacturerDatabase,
    NullPartsLookup,
    PartRecord,
    PartsLookupError,
    SecondReading,
    SingleManufacturer,
    TextDetails,
    insert_wildcards,
    is_result_correct,
)


def make_lookup(results):
    """PartsLookup mock answering from a query -> record mapping."""
    lookup = MagicMock()
    lookup.search.side_effect = lambda query: results.get(query)
    return lookup


class TestPartRecord:
    """Tests for PartRecord."""

    def test_display_dict_order_and_empty_fields(self):
        record = PartRecord(
            page_url="https://octopart.com/bcm2837",
            part_number="BCM2837",
            manufacturer="Broadcom",
            description="",
        )
        assert list(record.to_display_dict().items()) == [
            ("Manufacturer", "Broadcom"),
            ("Part Number", "BCM2837"),
            ("Octopart Page", "https://octopart.com/bcm2837"),
        ]

    def test_unknown_fields_ignored(self):
        record = PartRecord.model_validate({"part_number": "LM358N", "hits": 3})
        assert record.part_number == "LM358N"


class TestIsResultCorrect:
    """Tests for is_result_correct."""

    def test_longer_result_containing_query(self):
        assert is_result_correct(PartRecord(part_number="BCM2837B0"), "BCM2837")

    def test_spaces_ignored(self):
        assert is_result_correct(PartRecord(part_number="BCM 2837"), "BCM2837")

    def test_unrelated_result_rejected(self):
        assert not is_result_correct(PartRecord(part_number="XYZ999"), "NE555P")

    def test_missing_part_number_rejected(self):
        assert not is_result_correct(PartRecord(manufacturer="Broadcom"), "BCM2837")


class TestInsertWildcards:
    """Tests for insert_wildcards."""

    def test_confusable_characters_replaced(self):
        assert insert_wildcards("BCM2837") == ("*?C?2?37*", 3)

    def test_lowercase_matched_by_uppercase(self):
        assert insert_wildcards("bcd") == ("*?cd*", 1)

    def test_nothing_to_replace(self):
        assert insert_wildcards("ACDE") == ("*ACDE*", 0)


class TestLookupOrchestrator:
    """Tests for LookupOrchestrator.lookup."""

    def test_empty_details_is_no_text(self):
        lookup = make_lookup({})
        result = LookupOrchestrator(lookup).lookup(TextDetails())
        assert result.ic_state == ICInfoState.NO_TEXT
        assert result.dictionary is None
        lookup.search.assert_not_called()

    def test_short_circuits_on_first_valid_record(self):
        lookup = make_lookup({
            "NE555P": PartRecord(part_number="XYZ999"),
            "LM358N": PartRecord(part_number="LM358N", manufacturer="Texas Instruments"),
            "TL072CP": PartRecord(part_number="TL072CP"),
        })
        details = TextDetails(most_likely_code="NE555P", other_lines=["LM358N", "TL072CP"])

        result = LookupOrchestrator(lookup).lookup(details)

        assert result.ic_state == ICInfoState.LOADED
        assert result.dictionary["Part Number"] == "LM358N"
        assert not result.is_error
        assert lookup.search.call_args_list == [call("NE555P"), call("LM358N")]

    def test_date_merged_into_result(self):
        lookup = make_lookup({"BCM2837": PartRecord(part_number="BCM2837B0", manufacturer="Broadcom")})
        details = TextDetails(
            manufacturer=SingleManufacturer("Broadcom"),
            most_likely_code="BCM2837",
            other_lines=["2451"],
            date_information=[(2024, 51)],
        )
        result = LookupOrchestrator(lookup).lookup(details)
        assert result.dictionary == {
            "Manufacturer": "Broadcom",
            "Part Number": "BCM2837B0",
            "Potential Manufacture Date": "51st week of 2024",
        }

    def test_nothing_found_falls_back_to_summary(self):
        lookup = make_lookup({})
        details = TextDetails(most_likely_code="AB12", other_lines=["2451"])
        result = LookupOrchestrator(lookup).lookup(details)
        assert result.ic_state == ICInfoState.NOT_AVAILABLE
        assert not result.is_error
        assert result.dictionary == {"Most Likely Code": "AB12", "Line 1": "2451"}

    def test_error_stops_candidates_and_flags_result(self):
        lookup = MagicMock()
        lookup.search.side_effect = PartsLookupError("service unavailable")
        details = TextDetails(most_likely_code="NE555P", other_lines=["LM358N"])

        result = LookupOrchestrator(lookup).lookup(details)

        assert result.ic_state == ICInfoState.UNLOADED
        assert result.is_error
        assert result.dictionary["Most Likely Code"] == "NE555P"
        queried = [c.args[0] for c in lookup.search.call_args_list]
        assert "LM358N" not in queried

    def test_short_candidate_never_retried_with_wildcards(self):
        lookup = make_lookup({})
        LookupOrchestrator(lookup).lookup(TextDetails(most_likely_code="AB12", other_lines=[]))
        assert lookup.search.call_args_list == [call("AB12")]

    def test_five_character_candidate_never_retried(self):
        lookup = make_lookup({})
        LookupOrchestrator(lookup).lookup(TextDetails(most_likely_code="A8B5C", other_lines=[]))
        assert lookup.search.call_args_list == [call("A8B5C")]

    def test_heavily_replaced_candidate_never_retried(self):
        lookup = make_lookup({})
        # B, S, M and X are replaced: 4 of 7
        LookupOrchestrator(lookup).lookup(TextDetails(most_likely_code="ABSMXCD", other_lines=[]))
        assert lookup.search.call_args_list == [call("ABSMXCD")]

    def test_candidate_starting_with_digit_never_retried(self):
        lookup = make_lookup({})
        LookupOrchestrator(lookup).lookup(TextDetails(most_likely_code="74HC595", other_lines=[]))
        assert lookup.search.call_args_list == [call("74HC595")]

    def test_wildcard_retry_finds_part(self):
        lookup = make_lookup({
            "*L?3??N*": PartRecord(part_number="LM358NG", manufacturer="Texas Instruments"),
        })
        details = TextDetails(
            manufacturer=SingleManufacturer("Texas Instruments"),
            most_likely_code="LM358N",
            other_lines=[],
        )
        result = LookupOrchestrator(lookup).lookup(details)
        assert result.ic_state == ICInfoState.LOADED
        assert result.dictionary["Part Number"] == "LM358NG"
        assert lookup.search.call_args_list == [call("LM358N"), call("*L?3??N*")]

    def test_wildcard_result_from_other_manufacturer_rejected(self):
        lookup = make_lookup({
            "*L?3??N*": PartRecord(part_number="LM358NG", manufacturer="Microchip Technology"),
        })
        details = TextDetails(
            manufacturer=SingleManufacturer("Texas Instruments"),
            most_likely_code="LM358N",
            other_lines=[],
        )
        result = LookupOrchestrator(lookup).lookup(details)
        assert result.ic_state == ICInfoState.NOT_AVAILABLE

    def test_wildcard_without_known_manufacturer_accepted(self):
        lookup = make_lookup({"*L?3??N*": PartRecord(part_number="LM358NG", manufacturer="onsemi")})
        result = LookupOrchestrator(lookup).lookup(TextDetails(most_likely_code="LM358N", other_lines=[]))
        assert result.ic_state == ICInfoState.LOADED

    def test_extraction_return_serialises(self):
        result = LookupOrchestrator(make_lookup({})).lookup(TextDetails())
        assert result.to_dict() == {"state": "noText", "information": None, "is_error": False}


class TestIdentificationService:
    """Tests for IdentificationService."""

    def test_offline_by_default(self):
        service = IdentificationService(current_year=2024)
        assert isinstance(service.parts_lookup, NullPartsLookup)
        result = service.find_component_details_single(["BROADCOM", "BCM2837", "2451"])
        assert result.ic_state == ICInfoState.NOT_AVAILABLE
        assert result.dictionary == {
            "Manufacturer": "Broadcom",
            "Most Likely Code": "BCM2837",
            "Line 1": "2451",
            "Potential Manufacture Date": "51st week of 2024",
        }

    def test_broadcom_end_to_end(self):
        lookup = make_lookup({
            "BCM2837": PartRecord(
                manufacturer="Broadcom",
                part_number="BCM2837B0",
                category="Microprocessors",
                page_url="https://octopart.com/bcm2837b0",
            ),
        })
        service = IdentificationService(parts_lookup=lookup, current_year=2024)

        result = service.find_component_details_single(["BROADCOM", "BCM2837", "2451"])

        assert result.ic_state == ICInfoState.LOADED
        assert result.dictionary["Part Number"] == "BCM2837B0"
        assert result.dictionary["Category"] == "Microprocessors"
        assert result.dictionary["Potential Manufacture Date"] == "51st week of 2024"
        lookup.search.assert_called_once_with("BCM2837")

    def test_compare_uses_chosen_reading(self):
        lookup = make_lookup({"BCM2837": PartRecord(part_number="BCM2837")})
        database = ManufacturerDatabase.from_lines(["Broadcom"], ["Broadcom,BCM"])
        service = IdentificationService(parts_lookup=lookup, database=database, current_year=2024)

        result, choice = service.find_component_details_compare(
            ["QQ2837"],
            ["BROADCOM", "BCM2837"],
        )

        assert choice.value.single_manufacturer == "Broadcom"
        assert isinstance(choice, SecondReading)
        assert result.ic_state == ICInfoState.LOADED

    @pytest.mark.parametrize("lines", [[], ["ab"], ["!!!!"]])
    def test_unreadable_text_is_no_text(self, lines):
        result = IdentificationService().find_component_details_single(lines)
        assert result.ic_state == ICInfoState.NO_TEXT
