# ABOUTME: Core data structures for bibliographic queries, candidates, and resolved records.
# ABOUTME: BookQuery flows into the resolver; Candidate and BookRecord flow back out.

from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum


class ProviderIdKey(StrEnum):
    """Keys used in every ``provider_ids`` mapping.

    Values are plain strings so the mappings stay ``dict[str, str]``:
    - ``isbn``: normalized ISBN, ISBN-13 preferred over ISBN-10
    - ``google_books``: Google Books volume id (e.g. ``zyTCAlFPjgYC``)
    - ``openlibrary``: Open Library key (e.g. ``/works/OL45883W``)
    """

    ISBN = "isbn"
    GOOGLE_BOOKS = "google_books"
    OPEN_LIBRARY = "openlibrary"


@dataclass(frozen=True)
class BookQuery:
    """An immutable lookup request against one or more metadata sources.

    Every field is optional; a query without a title or ISBN cannot be
    searched. ``provider_ids`` carries native ids already known for this
    book, which lets resolution skip the search stage.
    """

    title: str | None = None
    author: str | None = None
    isbn: str | None = None
    year: int | None = None
    provider_ids: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Candidate:
    """One search hit converted from a raw provider record."""

    name: str
    overview: str | None = None
    year: int | None = None
    premiere_date: date | None = None
    image_url: str | None = None
    authors: tuple[str, ...] = ()
    provider_ids: dict[str, str] = field(default_factory=dict)

    @property
    def author(self) -> str:
        """Convenience property: joined author string for display and scoring."""
        return ", ".join(self.authors)


@dataclass(frozen=True)
class ScoredCandidate:
    """A candidate paired with its match score against a specific query."""

    candidate: Candidate
    score: int

    def __post_init__(self) -> None:
        if not 0 <= self.score <= 100:
            msg = f"score must be between 0 and 100, got {self.score}"
            raise ValueError(msg)


@dataclass
class BookRecord:
    """Full metadata for a single book, fetched by native id.

    This is what resolution hands back to the host that owns the media item.
    ``community_rating`` is always on a 10-point scale and ``language`` is an
    uppercase code.
    """

    name: str
    overview: str | None = None
    authors: list[str] = field(default_factory=list)
    publishers: list[str] = field(default_factory=list)
    premiere_date: date | None = None
    year: int | None = None
    genres: list[str] = field(default_factory=list)
    community_rating: float | None = None
    language: str | None = None
    page_count: int | None = None
    image_url: str | None = None
    provider_ids: dict[str, str] = field(default_factory=dict)

    @property
    def isbn(self) -> str | None:
        return self.provider_ids.get(ProviderIdKey.ISBN)
