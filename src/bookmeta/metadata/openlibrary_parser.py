# ABOUTME: Parsing functions for Open Library API JSON responses.
# ABOUTME: Converts Books API, Search API, and Works payloads into Candidate and BookRecord.

import re
from typing import Any

from bookmeta.metadata.dates import parse_publish_date
from bookmeta.metadata.http import MalformedResponseError
from bookmeta.metadata.isbn import preferred_isbn
from bookmeta.metadata.types import BookRecord, Candidate, ProviderIdKey

_COVERS_BASE_URL = "https://covers.openlibrary.org/b/id"
_EDITION_URL_RE = re.compile(r"/books/(OL\d+M)")


def _expect_object(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise MalformedResponseError(f"expected a JSON object, got {type(data).__name__}")
    return data


def _full_title(data: dict[str, Any]) -> str | None:
    title = (data.get("title") or "").strip()
    if not title:
        return None
    subtitle = (data.get("subtitle") or "").strip()
    return f"{title}: {subtitle}" if subtitle else title


def _names(entries: list[Any] | None) -> list[str]:
    """Pull the "name" out of a list of {name, url} objects, skipping blanks."""
    names = []
    for entry in entries or []:
        if isinstance(entry, dict) and entry.get("name"):
            names.append(entry["name"])
    return names


def _edition_key(book: dict[str, Any]) -> str | None:
    """Find the /books/OL...M key of a Books API entry."""
    key = book.get("key")
    if isinstance(key, str) and key.startswith("/books/"):
        return key
    olids = (book.get("identifiers") or {}).get("openlibrary") or []
    if olids:
        return f"/books/{olids[0]}"
    match = _EDITION_URL_RE.search(book.get("url") or "")
    return f"/books/{match.group(1)}" if match else None


def _book_isbn(book: dict[str, Any]) -> str | None:
    identifiers = book.get("identifiers") or {}
    return preferred_isbn((identifiers.get("isbn_13") or []) + (identifiers.get("isbn_10") or []))


def _book_ids(book: dict[str, Any]) -> dict[str, str]:
    ids: dict[str, str] = {}
    edition_key = _edition_key(book)
    if edition_key:
        ids[ProviderIdKey.OPEN_LIBRARY] = edition_key
    isbn = _book_isbn(book)
    if isbn:
        ids[ProviderIdKey.ISBN] = isbn
    return ids


def _cover(book: dict[str, Any]) -> str | None:
    cover = book.get("cover") or {}
    return cover.get("large") or cover.get("medium") or cover.get("small")


def build_cover_url(cover_id: int, size: str = "L") -> str:
    """Build an Open Library cover image URL for a cover id.

    Args:
        cover_id: The numeric cover id (``cover_i`` in search results).
        size: Image size: "S" (small), "M" (medium), or "L" (large).
    """
    return f"{_COVERS_BASE_URL}/{cover_id}-{size}.jpg"


def parse_books_response(data: Any) -> list[Candidate]:
    """Parse a Books API (jscmd=data) response keyed by bibkey.

    The response is an object like {"ISBN:9780441013593": {...}}; an unknown
    ISBN yields an empty object.
    """
    candidates = []
    for book in _expect_object(data).values():
        if not isinstance(book, dict):
            continue
        name = _full_title(book)
        if name is None:
            continue
        excerpts = book.get("excerpts") or []
        published = parse_publish_date(book.get("publish_date"))
        candidates.append(
            Candidate(
                name=name,
                overview=excerpts[0].get("text") if excerpts else None,
                year=published.year if published else None,
                premiere_date=published,
                image_url=_cover(book),
                authors=tuple(_names(book.get("authors"))),
                provider_ids=_book_ids(book),
            )
        )
    return candidates


def _search_doc_id(doc: dict[str, Any]) -> str | None:
    """Prefer an edition key so the fetch returns publishers and ISBN; else the work key."""
    edition = doc.get("cover_edition_key")
    if not edition:
        edition_keys = doc.get("edition_key") or []
        edition = edition_keys[0] if edition_keys else None
    if edition:
        return f"/books/{edition}"
    return doc.get("key") or None


def parse_search_results(data: Any) -> list[Candidate]:
    """Parse an Open Library Search API response into Candidates.

    Each doc carries title, author_name, isbn, first_publish_year, cover_i, etc.
    """
    docs = _expect_object(data).get("docs") or []
    if not isinstance(docs, list):
        raise MalformedResponseError("'docs' is not a list")

    candidates = []
    for doc in docs:
        if not isinstance(doc, dict):
            continue
        name = _full_title(doc)
        if name is None:
            continue

        ids: dict[str, str] = {}
        native_id = _search_doc_id(doc)
        if native_id:
            ids[ProviderIdKey.OPEN_LIBRARY] = native_id
        isbn = preferred_isbn(doc.get("isbn") or [])
        if isbn:
            ids[ProviderIdKey.ISBN] = isbn

        cover_id = doc.get("cover_i")
        candidates.append(
            Candidate(
                name=name,
                year=doc.get("first_publish_year"),
                image_url=build_cover_url(cover_id) if cover_id else None,
                authors=tuple(doc.get("author_name") or ()),
                provider_ids=ids,
            )
        )
    return candidates


def parse_works_description(data: dict[str, Any]) -> str | None:
    """Extract the description from an Open Library Works response.

    Handles the OL quirk where description can be either a plain string
    or a dict with {"type": ..., "value": "actual text"}.
    """
    desc = data.get("description")
    if isinstance(desc, str):
        return desc
    if isinstance(desc, dict):
        return desc.get("value")
    return None


def parse_book_record(book: dict[str, Any]) -> BookRecord | None:
    """Map one Books API entry into a full BookRecord."""
    name = _full_title(book)
    if name is None:
        return None

    excerpts = [e["text"] for e in book.get("excerpts") or [] if e.get("text")]
    published = parse_publish_date(book.get("publish_date"))
    return BookRecord(
        name=name,
        overview="\n\n".join(excerpts) if excerpts else None,
        authors=_names(book.get("authors")),
        publishers=_names(book.get("publishers")),
        premiere_date=published,
        year=published.year if published else None,
        genres=_names(book.get("subjects")),
        page_count=book.get("number_of_pages"),
        image_url=_cover(book),
        provider_ids=_book_ids(book),
    )


def parse_works_record(data: dict[str, Any]) -> BookRecord | None:
    """Map a Works endpoint response into a BookRecord.

    Works carry no edition data, so publishers and ISBN stay empty, and
    authors are only available as keys, which are not resolved here.
    """
    name = _full_title(data)
    if name is None:
        return None

    published = parse_publish_date(data.get("first_publish_date"))
    covers = [c for c in data.get("covers") or [] if isinstance(c, int) and c > 0]
    subjects = [s for s in data.get("subjects") or [] if isinstance(s, str) and s]
    return BookRecord(
        name=name,
        overview=parse_works_description(data),
        premiere_date=published,
        year=published.year if published else None,
        genres=subjects,
        image_url=build_cover_url(covers[0]) if covers else None,
        provider_ids={ProviderIdKey.OPEN_LIBRARY: data["key"]} if data.get("key") else {},
    )


def parse_record_response(data: Any) -> BookRecord | None:
    """Parse whichever payload a direct fetch returned: a Works object or a Books API map."""
    data = _expect_object(data)
    key = data.get("key")
    if isinstance(key, str) and key.startswith("/works/"):
        return parse_works_record(data)

    for book in data.values():
        if isinstance(book, dict):
            return parse_book_record(book)
    return None
