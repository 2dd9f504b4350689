# ABOUTME: Unit tests for the Google Books client and its response parsing.
# ABOUTME: Uses a FakeHttpClient to check request shapes and canned volume payloads.

from datetime import date

import pytest

from bookmeta.metadata.googlebooks import GoogleBooksClient
from bookmeta.metadata.googlebooks_parser import (
    parse_search_response,
    parse_volume_candidate,
    parse_volume_record,
)
from bookmeta.metadata.http import MalformedResponseError
from bookmeta.metadata.types import ProviderIdKey
from tests.fixtures.fakes import FakeHttpClient
from tests.fixtures.googlebooks_responses import (
    DUNE_VOLUME,
    SEARCH_RESPONSE,
    SEARCH_RESPONSE_EMPTY,
    SUBTITLED_VOLUME,
)

_VOLUMES_URL = "https://www.googleapis.com/books/v1/volumes"


class TestGoogleBooksRequests:
    """Tests for the requests GoogleBooksClient sends."""

    def test_identity(self) -> None:
        client = GoogleBooksClient(FakeHttpClient())
        assert client.name == "google_books"
        assert client.id_key == ProviderIdKey.GOOGLE_BOOKS

    @pytest.mark.asyncio
    async def test_isbn_search_query(self) -> None:
        http = FakeHttpClient({"q=isbn:": SEARCH_RESPONSE})
        client = GoogleBooksClient(http)

        raw = await client.search_by_isbn("9780441013593")

        assert raw is SEARCH_RESPONSE
        url, params = http.request_log[0]
        assert url == _VOLUMES_URL
        assert params == {"q": "isbn:9780441013593", "maxResults": "10"}

    @pytest.mark.asyncio
    async def test_title_author_query(self) -> None:
        http = FakeHttpClient()
        await GoogleBooksClient(http).search_by_title_author("Dune", "Frank Herbert")
        _, params = http.request_log[0]
        assert params["q"] == "intitle:Dune inauthor:Frank Herbert"

    @pytest.mark.asyncio
    async def test_title_only_query(self) -> None:
        http = FakeHttpClient()
        await GoogleBooksClient(http).search_by_title_author("Dune")
        _, params = http.request_log[0]
        assert params["q"] == "intitle:Dune"

    @pytest.mark.asyncio
    async def test_fetch_by_id_url(self) -> None:
        http = FakeHttpClient({"/volumes/B1hSG45JCX4C": DUNE_VOLUME})
        raw = await GoogleBooksClient(http).fetch_by_id("B1hSG45JCX4C")
        assert raw is DUNE_VOLUME
        assert http.request_log[0] == (f"{_VOLUMES_URL}/B1hSG45JCX4C", {})

    @pytest.mark.asyncio
    async def test_api_key_sent_when_configured(self) -> None:
        http = FakeHttpClient()
        client = GoogleBooksClient(http, api_key="secret")
        await client.search_by_isbn("9780441013593")
        await client.fetch_by_id("abc")
        assert all(params["key"] == "secret" for _, params in http.request_log)


class TestGoogleBooksParsing:
    """Tests for Google Books response parsing."""

    def test_search_preserves_order_and_skips_unusable_items(self) -> None:
        candidates = parse_search_response(SEARCH_RESPONSE)
        assert [c.name for c in candidates] == ["Dune", "Dune Messiah", "Dune"]

    def test_candidate_fields(self) -> None:
        candidate = parse_volume_candidate(DUNE_VOLUME)
        assert candidate is not None
        assert candidate.authors == ("Frank Herbert",)
        assert candidate.year == 2005
        assert candidate.premiere_date == date(2005, 8, 2)
        assert candidate.image_url is not None
        assert "zoom=1" in candidate.image_url
        assert candidate.provider_ids == {
            ProviderIdKey.GOOGLE_BOOKS: "B1hSG45JCX4C",
            ProviderIdKey.ISBN: "9780441013593",
        }

    def test_subtitle_and_largest_image(self) -> None:
        candidate = parse_volume_candidate(SUBTITLED_VOLUME)
        assert candidate is not None
        assert candidate.name == "The Hobbit: Or There and Back Again"
        assert candidate.image_url == "https://example.com/large.jpg"
        assert candidate.year == 1937
        assert ProviderIdKey.ISBN not in candidate.provider_ids

    def test_empty_search_response(self) -> None:
        assert parse_search_response(SEARCH_RESPONSE_EMPTY) == []

    def test_non_object_payload_is_malformed(self) -> None:
        with pytest.raises(MalformedResponseError):
            parse_search_response(["not", "an", "object"])

    def test_items_must_be_a_list(self) -> None:
        with pytest.raises(MalformedResponseError, match="items"):
            parse_search_response({"items": "oops"})

    def test_volume_record(self) -> None:
        record = parse_volume_record(DUNE_VOLUME)
        assert record is not None
        assert record.name == "Dune"
        assert record.authors == ["Frank Herbert"]
        assert record.publishers == ["Penguin"]
        assert record.genres == ["Fiction"]
        assert record.community_rating == 9.0
        assert record.language == "EN"
        assert record.page_count == 896
        assert record.isbn == "9780441013593"

    def test_volume_record_without_info(self) -> None:
        assert parse_volume_record({"id": "x"}) is None

    def test_volume_record_without_rating(self) -> None:
        record = parse_volume_record(SUBTITLED_VOLUME)
        assert record is not None
        assert record.community_rating is None
        assert record.language is None
        assert record.publishers == []
