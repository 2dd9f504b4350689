# ABOUTME: Free-text publication date parsing for provider payloads.
# ABOUTME: Handles ISO dates, partial dates, and the prose formats Open Library uses.

import re
from datetime import date, datetime

_FORMATS = (
    "%Y-%m-%d",
    "%Y-%m",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%B %Y",
    "%b %Y",
    "%m/%d/%Y",
)

_YEAR_ONLY_RE = re.compile(r"^(1[0-9]{3}|20[0-9]{2})$")
_EMBEDDED_YEAR_RE = re.compile(r"(?<!\d)(1[0-9]{3}|20[0-9]{2})(?!\d)")


def parse_publish_date(text: str | None) -> date | None:
    """Parse a publication date string into a date.

    Year-only and month-only values resolve to the first day of the period.
    As a last resort, a four-digit year anywhere in the text (e.g. "c1965",
    "[1965?]") is used. Returns None when nothing date-like is found.
    """
    if not text:
        return None
    text = text.strip()

    if _YEAR_ONLY_RE.match(text):
        return date(int(text), 1, 1)

    for fmt in _FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    match = _EMBEDDED_YEAR_RE.search(text)
    if match:
        return date(int(match.group(1)), 1, 1)
    return None
