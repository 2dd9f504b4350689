# ABOUTME: Parsing functions for Google Books API JSON responses.
# ABOUTME: Converts volume payloads into Candidate and BookRecord instances.

from typing import Any

from bookmeta.metadata.dates import parse_publish_date
from bookmeta.metadata.http import MalformedResponseError
from bookmeta.metadata.isbn import preferred_isbn
from bookmeta.metadata.types import BookRecord, Candidate, ProviderIdKey

# Largest first.
_IMAGE_SIZES = ("extraLarge", "large", "medium", "small", "thumbnail")


def _full_title(info: dict[str, Any]) -> str | None:
    """Title with ": subtitle" appended when present; None if there is no title."""
    title = (info.get("title") or "").strip()
    if not title:
        return None
    subtitle = (info.get("subtitle") or "").strip()
    return f"{title}: {subtitle}" if subtitle else title


def _image_url(info: dict[str, Any]) -> str | None:
    links = info.get("imageLinks") or {}
    for size in _IMAGE_SIZES:
        if links.get(size):
            return links[size]
    return None


def _isbn(info: dict[str, Any]) -> str | None:
    """Pick the volume's ISBN, ISBN-13 first."""
    entries = [e for e in info.get("industryIdentifiers") or [] if isinstance(e, dict)]
    isbn_13 = [e.get("identifier", "") for e in entries if e.get("type") == "ISBN_13"]
    isbn_10 = [e.get("identifier", "") for e in entries if e.get("type") == "ISBN_10"]
    return preferred_isbn(isbn_13 + isbn_10)


def _provider_ids(volume: dict[str, Any], info: dict[str, Any]) -> dict[str, str]:
    ids: dict[str, str] = {}
    if volume.get("id"):
        ids[ProviderIdKey.GOOGLE_BOOKS] = volume["id"]
    isbn = _isbn(info)
    if isbn:
        ids[ProviderIdKey.ISBN] = isbn
    return ids


def parse_volume_candidate(volume: dict[str, Any]) -> Candidate | None:
    """Convert one search-result volume into a Candidate.

    Returns None for volumes without volumeInfo or without a title.
    """
    info = volume.get("volumeInfo")
    if not isinstance(info, dict):
        return None
    name = _full_title(info)
    if name is None:
        return None

    published = parse_publish_date(info.get("publishedDate"))
    return Candidate(
        name=name,
        overview=info.get("description"),
        year=published.year if published else None,
        premiere_date=published,
        image_url=_image_url(info),
        authors=tuple(info.get("authors") or ()),
        provider_ids=_provider_ids(volume, info),
    )


def parse_search_response(data: Any) -> list[Candidate]:
    """Parse a volumes search response, preserving the API's result order."""
    if not isinstance(data, dict):
        raise MalformedResponseError(f"expected a JSON object, got {type(data).__name__}")

    items = data.get("items") or []
    if not isinstance(items, list):
        raise MalformedResponseError("'items' is not a list")

    candidates = []
    for item in items:
        if not isinstance(item, dict):
            continue
        candidate = parse_volume_candidate(item)
        if candidate is not None:
            candidates.append(candidate)
    return candidates


def parse_volume_record(data: Any) -> BookRecord | None:
    """Parse a single-volume response into a full BookRecord.

    Google reports averageRating on a 5-point scale; it is doubled here.
    """
    if not isinstance(data, dict):
        raise MalformedResponseError(f"expected a JSON object, got {type(data).__name__}")

    info = data.get("volumeInfo")
    if not isinstance(info, dict):
        return None
    name = _full_title(info)
    if name is None:
        return None

    published = parse_publish_date(info.get("publishedDate"))
    rating = info.get("averageRating")
    language = info.get("language")
    publisher = info.get("publisher")

    return BookRecord(
        name=name,
        overview=info.get("description"),
        authors=list(info.get("authors") or []),
        publishers=[publisher] if publisher else [],
        premiere_date=published,
        year=published.year if published else None,
        genres=list(info.get("categories") or []),
        community_rating=float(rating) * 2 if rating is not None else None,
        language=language.upper() if language else None,
        page_count=info.get("pageCount"),
        image_url=_image_url(info),
        provider_ids=_provider_ids(data, info),
    )
