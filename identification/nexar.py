"""
Part lookup against the Nexar (Octopart) GraphQL API.

One ``supSearch`` query per lookup, top result only. The access token is
opaque to this module; obtaining and refreshing it is the caller's business.
"""

from __future__ import annotations

import logging

import requests
from pydantic import BaseModel, ConfigDict, Field, ValidationError

import config

from .lookup import PartRecord, PartsLookupError

logger = logging.getLogger(__name__)

PART_SEARCH_QUERY = """
query partSearch($q: String!, $limit: Int!) {
  supSearch(q: $q, limit: $limit) {
    hits
    results {
      part {
        name
        mpn
        category { name }
        manufacturer { name }
        shortDescription
        bestDatasheet { url }
        octopartUrl
      }
    }
  }
}
"""


# ---------------------------------------------------------------------------
# Response schema
# ---------------------------------------------------------------------------

class _Named(BaseModel):
    name: str | None = None
    model_config = ConfigDict(extra="ignore")


class _Datasheet(BaseModel):
    url: str | None = None
    model_config = ConfigDict(extra="ignore")


class NexarPart(BaseModel):
    """The part fields requested by PART_SEARCH_QUERY."""
    name: str | None = None
    mpn: str | None = None
    category: _Named | None = None
    manufacturer: _Named | None = None
    shortDescription: str | None = None
    bestDatasheet: _Datasheet | None = None
    octopartUrl: str | None = None

    model_config = ConfigDict(extra="ignore")

    def to_record(self) -> PartRecord:
        return PartRecord(
            manufacturer=self.manufacturer.name if self.manufacturer else None,
            component_name=self.name,
            part_number=self.mpn,
            category=self.category.name if self.category else None,
            description=self.shortDescription,
            datasheet_url=self.bestDatasheet.url if self.bestDatasheet else None,
            page_url=self.octopartUrl,
        )


class _SearchResult(BaseModel):
    part: NexarPart | None = None
    model_config = ConfigDict(extra="ignore")


class _SupSearch(BaseModel):
    hits: int | None = None
    results: list[_SearchResult] | None = None
    model_config = ConfigDict(extra="ignore")


class _SearchData(BaseModel):
    supSearch: _SupSearch | None = None
    model_config = ConfigDict(extra="ignore")


class _GraphQLError(BaseModel):
    message: str = ""
    model_config = ConfigDict(extra="ignore")


class SearchResponse(BaseModel):
    """Top-level GraphQL response envelope."""
    data: _SearchData | None = None
    errors: list[_GraphQLError] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")


class NexarPartsLookup:
    """PartsLookup backed by the Nexar supply search.

    Args:
        access_token: Token sent in the ``token`` header
        session: requests session to use (a new one by default)
        url: GraphQL endpoint (default: config.NEXAR_SEARCH_URL)
        timeout: Request timeout in seconds (default: config.NEXAR_REQUEST_TIMEOUT)
    """

    def __init__(
        self,
        access_token: str,
        session: requests.Session | None = None,
        url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        if not access_token:
            raise ValueError("access_token must not be empty")
        self.access_token = access_token
        self.session = session or requests.Session()
        self.url = url or config.NEXAR_SEARCH_URL
        self.timeout = timeout if timeout is not None else config.NEXAR_REQUEST_TIMEOUT

    def search(self, query: str) -> PartRecord | None:
        """Return the top search result for ``query``, or None if there is none.

        Raises:
            PartsLookupError: On transport, HTTP, JSON or schema errors, and
                when the API reports GraphQL errors.
        """
        try:
            response = self.session.post(
                self.url,
                json={"query": PART_SEARCH_QUERY, "variables": {"q": query, "limit": 1}},
                headers={"token": self.access_token},
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = SearchResponse.model_validate(response.json())
        except requests.RequestException as e:
            raise PartsLookupError(f"Nexar request failed for {query!r}: {e}") from e
        except (ValueError, ValidationError) as e:
            raise PartsLookupError(f"Unexpected Nexar response for {query!r}: {e}") from e

        if payload.errors:
            messages = "; ".join(error.message for error in payload.errors)
            raise PartsLookupError(f"Nexar reported errors for {query!r}: {messages}")
        if payload.data is None or payload.data.supSearch is None:
            raise PartsLookupError(f"Nexar response for {query!r} has no search data")

        results = payload.data.supSearch.results or []
        if not results or results[0].part is None:
            logger.debug("Nexar has no result for %r", query)
            return None
        return results[0].part.to_record()
