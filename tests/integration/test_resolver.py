# ABOUTME: Integration tests for BookResolver across both shipped sources.
# ABOUTME: Runs real clients, parsers, rate gate, and cache over a FakeHttpClient with canned payloads.

import pytest

from bookmeta.config import ResolverSettings
from bookmeta.core.resolver import build_resolver
from bookmeta.metadata.http import SourceUnavailableError
from bookmeta.metadata.types import BookQuery, ProviderIdKey
from tests.fixtures import googlebooks_responses as gb
from tests.fixtures import openlibrary_responses as ol
from tests.fixtures.fakes import FakeHttpClient

DUNE = BookQuery(title="Dune", isbn="9780441013593")


def _http() -> FakeHttpClient:
    return FakeHttpClient(
        {
            "volumes/B1hSG45JCX4C": gb.DUNE_VOLUME,
            "q=isbn:9780441013593": gb.SEARCH_RESPONSE,
            "bibkeys=ISBN:9780441013593": ol.BOOKS_API_RESPONSE,
            "bibkeys=OLID:OL24194286M": ol.BOOKS_API_RESPONSE,
        }
    )


class TestBuildResolver:
    """Tests for resolver construction from settings."""

    def test_sources_in_priority_order(self) -> None:
        resolver = build_resolver(ResolverSettings(), http_client=FakeHttpClient())
        assert resolver.sources == ["google_books", "open_library"]

    def test_priority_can_be_swapped(self) -> None:
        settings = ResolverSettings.model_validate(
            {"google_books": {"priority": 2}, "open_library": {"priority": 1}}
        )
        resolver = build_resolver(settings, http_client=FakeHttpClient())
        assert resolver.sources == ["open_library", "google_books"]

    def test_disabled_sources_are_skipped(self) -> None:
        settings = ResolverSettings.model_validate({"google_books": {"enabled": False}})
        resolver = build_resolver(settings, http_client=FakeHttpClient())
        assert resolver.sources == ["open_library"]

    @pytest.mark.asyncio
    async def test_context_manager_closes_http_client(self) -> None:
        http = FakeHttpClient()
        async with build_resolver(http_client=http):
            pass
        assert http.closed


class TestSearchAll:
    """Tests for searching every source at once."""

    @pytest.mark.asyncio
    async def test_results_per_source(self) -> None:
        resolver = build_resolver(http_client=_http())

        results = await resolver.search_all(DUNE)

        assert list(results) == ["google_books", "open_library"]
        google = results["google_books"]
        assert google[0].provider_ids[ProviderIdKey.GOOGLE_BOOKS] == "B1hSG45JCX4C"
        # The duplicate volume in the search response is dropped.
        assert len({c.provider_ids[ProviderIdKey.GOOGLE_BOOKS] for c in google}) == len(google)
        assert [c.name for c in results["open_library"]] == ["Dune"]

    @pytest.mark.asyncio
    async def test_one_source_failing_does_not_affect_the_other(self) -> None:
        http = FakeHttpClient(
            {
                "googleapis.com": SourceUnavailableError("HTTP 503"),
                "bibkeys=ISBN:9780441013593": ol.BOOKS_API_RESPONSE,
            }
        )
        resolver = build_resolver(http_client=http)

        results = await resolver.search_all(DUNE)

        assert results["google_books"] == []
        assert len(results["open_library"]) == 1

    @pytest.mark.asyncio
    async def test_repeat_search_is_served_from_cache(self) -> None:
        http = _http()
        resolver = build_resolver(http_client=http)

        await resolver.search_all(DUNE)
        requests = len(http.request_log)
        await resolver.search_all(BookQuery(title="Dune", isbn="978-0-441-01359-3"))

        assert len(http.request_log) == requests


class TestResolve:
    """Tests for resolving one full record."""

    @pytest.mark.asyncio
    async def test_highest_priority_source_wins(self) -> None:
        resolver = build_resolver(http_client=_http())

        record = await resolver.resolve(DUNE)

        assert record is not None
        assert record.provider_ids[ProviderIdKey.GOOGLE_BOOKS] == "B1hSG45JCX4C"
        assert record.community_rating == 9.0

    @pytest.mark.asyncio
    async def test_falls_through_to_next_source(self) -> None:
        http = FakeHttpClient(
            {
                "googleapis.com": SourceUnavailableError("HTTP 503"),
                "bibkeys=ISBN:9780441013593": ol.BOOKS_API_RESPONSE,
                "bibkeys=OLID:OL24194286M": ol.BOOKS_API_RESPONSE,
            }
        )
        resolver = build_resolver(http_client=http)

        record = await resolver.resolve(DUNE)

        assert record is not None
        assert record.publishers == ["Ace Books"]
        assert record.provider_ids[ProviderIdKey.OPEN_LIBRARY] == "/books/OL24194286M"

    @pytest.mark.asyncio
    async def test_title_only_open_library_resolve_fetches_edition(self) -> None:
        http = FakeHttpClient(
            {
                "search.json": ol.SEARCH_RESPONSE,
                "bibkeys=OLID:OL24194286M": ol.BOOKS_API_RESPONSE,
            }
        )
        settings = ResolverSettings.model_validate({"google_books": {"enabled": False}})
        resolver = build_resolver(settings, http_client=http)

        record = await resolver.resolve(BookQuery(title="Dune"))

        assert record is not None
        assert record.publishers == ["Ace Books"]
        assert record.isbn == "9780441013593"
        assert record.provider_ids[ProviderIdKey.OPEN_LIBRARY] == "/books/OL24194286M"

    @pytest.mark.asyncio
    async def test_known_id_skips_search(self) -> None:
        http = _http()
        resolver = build_resolver(http_client=http)

        query = BookQuery(provider_ids={ProviderIdKey.GOOGLE_BOOKS: "B1hSG45JCX4C"})
        record = await resolver.resolve(query)

        assert record is not None
        assert record.name == "Dune"
        assert [url for url, _ in http.request_log] == [
            "https://www.googleapis.com/books/v1/volumes/B1hSG45JCX4C"
        ]

    @pytest.mark.asyncio
    async def test_nothing_found_anywhere(self) -> None:
        resolver = build_resolver(http_client=FakeHttpClient())
        assert await resolver.resolve(BookQuery(title="Nonexistent Book")) is None
