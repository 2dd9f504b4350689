# ABOUTME: Open Library metadata provider implementation.
# ABOUTME: Looks up openlibrary.org by ISBN, title/author, or edition/work key.

import logging
import re
from typing import Any

from bookmeta.metadata.http import HttpClient
from bookmeta.metadata.isbn import is_valid_isbn, normalize_isbn
from bookmeta.metadata.openlibrary_parser import (
    parse_books_response,
    parse_record_response,
    parse_search_results,
)
from bookmeta.metadata.types import BookRecord, Candidate, ProviderIdKey

logger = logging.getLogger(__name__)

_OL_BASE = "https://openlibrary.org"
_SEARCH_LIMIT = 10

_WORK_ID_RE = re.compile(r"^(?:/works/)?(OL\d+W)$")
_EDITION_ID_RE = re.compile(r"^(?:/books/)?(OL\d+M)$")


class OpenLibraryClient:
    """ProviderClient backed by the Open Library APIs.

    ISBN lookups go through the Books API (edition data with excerpts and
    subjects); text lookups go through the Search API. Direct fetches accept
    either an edition key (/books/OL...M) or a work key (/works/OL...W).
    """

    def __init__(self, http_client: HttpClient) -> None:
        self._http = http_client

    @property
    def name(self) -> str:
        return "open_library"

    @property
    def id_key(self) -> str:
        return ProviderIdKey.OPEN_LIBRARY

    async def search_by_isbn(self, isbn: str) -> Any:
        return await self._books_api(f"ISBN:{isbn}")

    async def search_by_title_author(self, title: str, author: str | None = None) -> Any:
        params: dict[str, str] = {"title": title, "limit": str(_SEARCH_LIMIT)}
        if author:
            params["author"] = author
        logger.debug("Open Library search: title=%s author=%s", title, author)
        return await self._http.get(f"{_OL_BASE}/search.json", params=params)

    async def fetch_by_id(self, native_id: str) -> Any:
        """Fetch a full record for an edition key, work key, or bare ISBN.

        Returns None for ids in none of those shapes.
        """
        native_id = native_id.strip()
        if match := _WORK_ID_RE.match(native_id):
            return await self._http.get(f"{_OL_BASE}/works/{match.group(1)}.json")
        if match := _EDITION_ID_RE.match(native_id):
            return await self._books_api(f"OLID:{match.group(1)}")
        if is_valid_isbn(normalize_isbn(native_id)):
            return await self._books_api(f"ISBN:{normalize_isbn(native_id)}")

        logger.warning("Unrecognized Open Library id: %s", native_id)
        return None

    def parse_candidates(self, raw: Any) -> list[Candidate]:
        if isinstance(raw, dict) and "docs" in raw:
            return parse_search_results(raw)
        return parse_books_response(raw)

    def parse_record(self, raw: Any) -> BookRecord | None:
        return parse_record_response(raw)

    async def _books_api(self, bibkey: str) -> Any:
        logger.debug("Open Library Books API lookup: %s", bibkey)
        params = {"bibkeys": bibkey, "format": "json", "jscmd": "data"}
        return await self._http.get(f"{_OL_BASE}/api/books", params=params)
