# ABOUTME: Unit tests for the core query, candidate, and record types.
# ABOUTME: Validates defaults, immutability, and derived properties.

import dataclasses

import pytest

from bookmeta.metadata.types import (
    BookQuery,
    BookRecord,
    Candidate,
    ProviderIdKey,
    ScoredCandidate,
)


class TestBookQuery:
    """Tests for BookQuery."""

    def test_all_fields_optional(self) -> None:
        query = BookQuery()
        assert query.title is None
        assert query.provider_ids == {}

    def test_is_immutable(self) -> None:
        query = BookQuery(title="Dune")
        with pytest.raises(dataclasses.FrozenInstanceError):
            query.title = "Emma"  # type: ignore[misc]


class TestCandidate:
    """Tests for Candidate."""

    def test_author_joins_names(self) -> None:
        candidate = Candidate(name="Dune", authors=("Brian Herbert", "Kevin J. Anderson"))
        assert candidate.author == "Brian Herbert, Kevin J. Anderson"

    def test_author_empty_without_authors(self) -> None:
        assert Candidate(name="Dune").author == ""


class TestScoredCandidate:
    """Tests for ScoredCandidate range checking."""

    def test_accepts_bounds(self) -> None:
        candidate = Candidate(name="Dune")
        assert ScoredCandidate(candidate, 0).score == 0
        assert ScoredCandidate(candidate, 100).score == 100

    @pytest.mark.parametrize("score", [-1, 101])
    def test_rejects_out_of_range(self, score: int) -> None:
        with pytest.raises(ValueError, match="between 0 and 100"):
            ScoredCandidate(Candidate(name="Dune"), score)


class TestBookRecord:
    """Tests for BookRecord."""

    def test_isbn_property(self) -> None:
        record = BookRecord(name="Dune", provider_ids={ProviderIdKey.ISBN: "9780441013593"})
        assert record.isbn == "9780441013593"
        assert BookRecord(name="Dune").isbn is None

    def test_provider_id_keys_are_plain_strings(self) -> None:
        assert ProviderIdKey.GOOGLE_BOOKS == "google_books"
        assert {ProviderIdKey.OPEN_LIBRARY: "x"}["openlibrary"] == "x"
