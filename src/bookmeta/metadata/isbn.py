# ABOUTME: ISBN-10/13 normalization, checksum validation, conversion, and extraction.
# ABOUTME: Decides whether a query's identifier is good enough for an exact-id lookup.

import re

# 978/979 prefix followed by ten more digits, each optionally preceded by a hyphen or space.
_ISBN13_RE = re.compile(r"(?<!\d)(97[89](?:[-\s]?\d){10})(?!\d)")
# Nine digits plus a final digit or X, with the same optional separators.
_ISBN10_RE = re.compile(r"(?<![\dX])(\d(?:[-\s]?\d){8}[-\s]?[\dX])(?![\dX])", re.IGNORECASE)
_SEPARATOR_RE = re.compile(r"[-\s]")


class InvalidIsbnError(ValueError):
    """Raised when a string is not a checksum-valid ISBN-10 or ISBN-13."""


def normalize_isbn(raw: str) -> str:
    """Strip hyphens and whitespace and uppercase (for a trailing ``x``)."""
    return _SEPARATOR_RE.sub("", raw).upper()


def _isbn13_check_digit(first_twelve: str) -> int:
    total = sum(int(d) * (1 if i % 2 == 0 else 3) for i, d in enumerate(first_twelve))
    return (10 - total % 10) % 10


def is_valid_isbn13(isbn: str) -> bool:
    """Validate an already-normalized ISBN-13 against its check digit."""
    if len(isbn) != 13 or not isbn[:12].isdigit() or not isbn[12].isdigit():
        return False
    return int(isbn[12]) == _isbn13_check_digit(isbn[:12])


def is_valid_isbn10(isbn: str) -> bool:
    """Validate an already-normalized ISBN-10 using the modulo-11 rule.

    The final character may be ``X``, which stands for 10.
    """
    if len(isbn) != 10 or not isbn[:9].isdigit():
        return False
    last = isbn[9]
    if last == "X":
        check = 10
    elif last.isdigit():
        check = int(last)
    else:
        return False
    total = sum(int(d) * (10 - i) for i, d in enumerate(isbn[:9]))
    return (total + check) % 11 == 0


def is_valid_isbn(isbn: str) -> bool:
    return is_valid_isbn13(isbn) or is_valid_isbn10(isbn)


def isbn10_to_isbn13(isbn10: str) -> str | None:
    """Convert a valid ISBN-10 to its 978-prefixed ISBN-13 form.

    Returns None if the input is not a valid ISBN-10.
    """
    if not is_valid_isbn10(isbn10):
        return None
    stem = "978" + isbn10[:9]
    return f"{stem}{_isbn13_check_digit(stem)}"


def to_isbn13(isbn: str) -> str | None:
    """Return the ISBN-13 form of any valid ISBN, or None."""
    normalized = normalize_isbn(isbn)
    if is_valid_isbn13(normalized):
        return normalized
    return isbn10_to_isbn13(normalized)


def parse_isbn(raw: str) -> str:
    """Normalize and validate an ISBN, raising InvalidIsbnError on failure."""
    normalized = normalize_isbn(raw)
    if not is_valid_isbn(normalized):
        raise InvalidIsbnError(f"not a valid ISBN: {raw!r}")
    return normalized


def extract_isbn(text: str) -> str | None:
    """Find the first checksum-valid ISBN in free text (e.g. a filename).

    ISBN-13 tokens strictly take priority: every ISBN-13-shaped token is tried
    before any ISBN-10-shaped one. Returns the normalized ISBN, or None.
    """
    if not text:
        return None

    for match in _ISBN13_RE.finditer(text):
        isbn = normalize_isbn(match.group(1))
        if is_valid_isbn13(isbn):
            return isbn

    for match in _ISBN10_RE.finditer(text):
        isbn = normalize_isbn(match.group(1))
        if is_valid_isbn10(isbn):
            return isbn

    return None


def preferred_isbn(candidates: list[str]) -> str | None:
    """Pick the best ISBN from a provider's list: first valid ISBN-13, else first valid ISBN-10.

    Falls back to the first non-empty normalized value when nothing validates,
    since some sources report identifiers with bad check digits.
    """
    normalized = [normalize_isbn(c) for c in candidates if c]
    for isbn in normalized:
        if is_valid_isbn13(isbn):
            return isbn
    for isbn in normalized:
        if is_valid_isbn10(isbn):
            return isbn
    return normalized[0] if normalized else None
