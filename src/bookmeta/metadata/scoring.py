# ABOUTME: Fuzzy match scoring of provider candidates against a bibliographic query.
# ABOUTME: Token-set text similarity plus a weighted title/author/year composite, both 0-100.

import re

from rapidfuzz import fuzz

from bookmeta.metadata.types import BookQuery, Candidate

# Composite weights (title, author, year) in percent, keyed by which optional
# components could be computed. Each row sums to 100.
_WEIGHTS: dict[tuple[bool, bool], tuple[int, int, int]] = {
    (False, False): (100, 0, 0),
    (False, True): (70, 0, 30),
    (True, False): (60, 40, 0),
    (True, True): (50, 30, 20),
}

# Each year of difference costs this many points of the year score.
_YEAR_PENALTY = 10

_NON_WORD_RE = re.compile(r"[^\w\s]")


def normalize_for_matching(text: str) -> str:
    """Lowercase and drop everything that is not a word character or whitespace."""
    return _NON_WORD_RE.sub("", text.lower())


def text_similarity(a: str | None, b: str | None) -> int:
    """Token-set similarity of two strings, 0-100.

    Insensitive to word order and to one side carrying extra words (a
    subtitle, a leading article), so "The Hobbit" and "Hobbit, The" score 100.
    Returns 0 when either side is empty.
    """
    if not a or not b:
        return 0
    return round(fuzz.token_set_ratio(normalize_for_matching(a), normalize_for_matching(b)))


def year_similarity(a: int, b: int) -> int:
    """100 for the same year, minus 10 per year apart, floored at 0."""
    return max(0, 100 - min(100, abs(a - b) * _YEAR_PENALTY))


def composite_score(query: BookQuery, candidate: Candidate) -> int:
    """Score how well a candidate matches a query, 0-100.

    Title always counts. Author and year only count when both the query and
    the candidate carry them; the weighting shifts accordingly.
    """
    if not query.title or not candidate.name:
        return 0

    title_score = text_similarity(query.title, candidate.name)

    has_author = bool(query.author and candidate.author)
    author_score = text_similarity(query.author, candidate.author) if has_author else 0

    has_year = False
    year_score = 0
    if query.year is not None and candidate.year is not None:
        has_year = True
        year_score = year_similarity(query.year, candidate.year)

    title_w, author_w, year_w = _WEIGHTS[(has_author, has_year)]
    return (title_score * title_w + author_score * author_w + year_score * year_w) // 100
