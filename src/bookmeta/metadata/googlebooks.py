# ABOUTME: Google Books metadata provider implementation.
# ABOUTME: Queries the volumes API by ISBN, by title/author, or by volume id.

import logging
from typing import Any
from urllib.parse import quote

from bookmeta.metadata.googlebooks_parser import parse_search_response, parse_volume_record
from bookmeta.metadata.http import HttpClient
from bookmeta.metadata.types import BookRecord, Candidate, ProviderIdKey

logger = logging.getLogger(__name__)

_GB_BASE = "https://www.googleapis.com/books/v1/volumes"
_MAX_RESULTS = 10


class GoogleBooksClient:
    """ProviderClient backed by the Google Books volumes API.

    Uses dependency-injected HttpClient for testability. An API key is
    optional; Google allows low-volume anonymous access.
    """

    def __init__(self, http_client: HttpClient, *, api_key: str | None = None) -> None:
        self._http = http_client
        self._api_key = api_key

    @property
    def name(self) -> str:
        return "google_books"

    @property
    def id_key(self) -> str:
        return ProviderIdKey.GOOGLE_BOOKS

    async def search_by_isbn(self, isbn: str) -> Any:
        return await self._search(f"isbn:{isbn}")

    async def search_by_title_author(self, title: str, author: str | None = None) -> Any:
        terms = [f"intitle:{title}"]
        if author:
            terms.append(f"inauthor:{author}")
        return await self._search(" ".join(terms))

    async def fetch_by_id(self, native_id: str) -> Any:
        logger.debug("Fetching Google Books volume %s", native_id)
        url = f"{_GB_BASE}/{quote(native_id, safe='')}"
        return await self._http.get(url, params=self._params())

    def parse_candidates(self, raw: Any) -> list[Candidate]:
        return parse_search_response(raw)

    def parse_record(self, raw: Any) -> BookRecord | None:
        return parse_volume_record(raw)

    async def _search(self, query: str) -> Any:
        params = self._params()
        params["q"] = query
        params["maxResults"] = str(_MAX_RESULTS)
        logger.debug("Google Books query: %s", query)
        return await self._http.get(_GB_BASE, params=params)

    def _params(self) -> dict[str, str]:
        return {"key": self._api_key} if self._api_key else {}
