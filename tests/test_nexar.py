"""Tests for the Nexar parts lookup client."""

from unittest.mock import MagicMock

import pytest
import requests

from identification import PartRecord, PartsLookupError
from identification.nexar import PART_SEARCH_QUERY, NexarPartsLookup


def make_session(payload=None, status_error=None, post_error=None):
    session = MagicMock(spec=requests.Session)
    response = MagicMock()
    response.json.return_value = payload
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    if post_error is not None:
        session.post.side_effect = post_error
    else:
        session.post.return_value = response
    return session


def search_payload(*parts):
    return {
        "data": {
            "supSearch": {
                "hits": len(parts),
                "results": [{"part": part} for part in parts],
            }
        }
    }


BCM2837 = {
    "name": "Broadcom BCM2837B0",
    "mpn": "BCM2837B0",
    "category": {"name": "Microprocessors"},
    "manufacturer": {"name": "Broadcom"},
    "shortDescription": "Quad-core ARM SoC",
    "bestDatasheet": {"url": "https://example.com/bcm2837.pdf"},
    "octopartUrl": "https://octopart.com/bcm2837b0",
    "medianPrice1000": None,
}


class TestNexarPartsLookup:
    """Tests for NexarPartsLookup.search."""

    def test_empty_token_rejected(self):
        with pytest.raises(ValueError):
            NexarPartsLookup("")

    def test_top_result_mapped_to_record(self):
        session = make_session(search_payload(BCM2837))
        lookup = NexarPartsLookup("secret", session=session)

        record = lookup.search("BCM2837")

        assert record == PartRecord(
            manufacturer="Broadcom",
            component_name="Broadcom BCM2837B0",
            part_number="BCM2837B0",
            category="Microprocessors",
            description="Quad-core ARM SoC",
            datasheet_url="https://example.com/bcm2837.pdf",
            page_url="https://octopart.com/bcm2837b0",
        )

    def test_request_shape(self):
        session = make_session(search_payload(BCM2837))
        lookup = NexarPartsLookup("secret", session=session, url="https://nexar.test/graphql", timeout=5)

        lookup.search("*?C?2?37*")

        session.post.assert_called_once_with(
            "https://nexar.test/graphql",
            json={"query": PART_SEARCH_QUERY, "variables": {"q": "*?C?2?37*", "limit": 1}},
            headers={"token": "secret"},
            timeout=5,
        )

    def test_missing_nested_fields_are_none(self):
        session = make_session(search_payload({"mpn": "LM358N"}))
        record = NexarPartsLookup("secret", session=session).search("LM358N")
        assert record.part_number == "LM358N"
        assert record.manufacturer is None
        assert record.to_display_dict() == {"Part Number": "LM358N"}

    def test_no_results_is_none(self):
        session = make_session(search_payload())
        assert NexarPartsLookup("secret", session=session).search("QQQQ") is None

    def test_null_results_is_none(self):
        session = make_session({"data": {"supSearch": {"hits": 0, "results": None}}})
        assert NexarPartsLookup("secret", session=session).search("QQQQ") is None

    def test_connection_error(self):
        session = make_session(post_error=requests.ConnectionError("offline"))
        with pytest.raises(PartsLookupError, match="request failed"):
            NexarPartsLookup("secret", session=session).search("BCM2837")

    def test_http_error(self):
        session = make_session(status_error=requests.HTTPError("401 Unauthorized"))
        with pytest.raises(PartsLookupError):
            NexarPartsLookup("secret", session=session).search("BCM2837")

    def test_invalid_json(self):
        session = make_session()
        session.post.return_value.json.side_effect = ValueError("not json")
        with pytest.raises(PartsLookupError, match="Unexpected"):
            NexarPartsLookup("secret", session=session).search("BCM2837")

    def test_invalid_schema(self):
        session = make_session({"data": {"supSearch": {"results": "nope"}}})
        with pytest.raises(PartsLookupError, match="Unexpected"):
            NexarPartsLookup("secret", session=session).search("BCM2837")

    def test_graphql_errors(self):
        session = make_session({"data": None, "errors": [{"message": "Not authorized"}]})
        with pytest.raises(PartsLookupError, match="Not authorized"):
            NexarPartsLookup("secret", session=session).search("BCM2837")

    def test_missing_data(self):
        session = make_session({"data": None})
        with pytest.raises(PartsLookupError, match="no search data"):
            NexarPartsLookup("secret", session=session).search("BCM2837")
