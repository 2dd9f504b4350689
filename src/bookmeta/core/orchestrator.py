# ABOUTME: Per-source resolution pipeline: cache, rate gate, ISBN search, text fallback, scoring.
# ABOUTME: Absorbs provider failures into empty results; only cancellation reaches the caller.

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from bookmeta.config import ResolverSettings
from bookmeta.core.cache import ResultCache
from bookmeta.core.cancellation import run_cancellable
from bookmeta.core.rate_gate import RateGate
from bookmeta.metadata.http import MalformedResponseError, MetadataFetchError
from bookmeta.metadata.isbn import InvalidIsbnError, normalize_isbn, parse_isbn
from bookmeta.metadata.provider import ProviderClient
from bookmeta.metadata.scoring import composite_score, normalize_for_matching
from bookmeta.metadata.types import BookQuery, BookRecord, Candidate, ScoredCandidate

logger = logging.getLogger(__name__)

MAX_RESULTS = 10

_AUTHOR_SEPARATOR = " by "


def derive_author(title: str) -> str | None:
    """Guess an author from a "<title> by <author>" string.

    Splits on the literal, case-sensitive " by " and takes the trailing
    segment. A title that naturally contains " by " will mis-split; this is
    accepted behaviour, used only when no author was supplied.
    """
    index = title.rfind(_AUTHOR_SEPARATOR)
    if index < 0:
        return None
    author = title[index + len(_AUTHOR_SEPARATOR) :].strip()
    return author or None


def cache_identifier(query: BookQuery) -> str | None:
    """The identifier half of a search cache key: normalized ISBN, else normalized title."""
    if query.isbn and query.isbn.strip():
        return normalize_isbn(query.isbn)
    if query.title:
        normalized = " ".join(normalize_for_matching(query.title).split())
        return normalized or None
    return None


class ResolutionOrchestrator:
    """Search and resolve pipeline for a single metadata source.

    Settings, rate gate, and cache are injected; several orchestrators may
    share one RateGate and one ResultCache, since both are keyed by source.
    """

    def __init__(
        self,
        client: ProviderClient,
        settings: ResolverSettings | None = None,
        *,
        rate_gate: RateGate | None = None,
        cache: ResultCache | None = None,
    ) -> None:
        self._client = client
        self._settings = settings or ResolverSettings()
        self._cache = cache or ResultCache(default_ttl=self._settings.cache_ttl_seconds)
        if rate_gate is None:
            rate_gate = RateGate()
            rate_gate.configure(client.name, self._rate_limit())
        self._gate = rate_gate

    @property
    def name(self) -> str:
        return self._client.name

    def _rate_limit(self) -> int:
        try:
            return self._settings.source(self._client.name).rate_limit_per_minute
        except KeyError:
            return 10

    async def search(
        self, query: BookQuery, cancel: asyncio.Event | None = None
    ) -> list[Candidate]:
        """Return up to ten candidates for ``query``, best match first.

        Raises:
            RequestCancelledError: ``cancel`` fired while waiting for the rate
                gate or the provider. Nothing is cached in that case.
        """
        identifier = cache_identifier(query)
        if identifier is None:
            logger.debug("Query for %s has neither ISBN nor title, skipping", self.name)
            return []

        cache_key = ResultCache.generate_key(self.name, identifier)
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug("Returning cached results for %s", cache_key)
            return list(cached)

        isbn = self._searchable_isbn(query)
        if isbn is None and not query.title:
            logger.debug("Nothing searchable in %s for ISBN %s, skipping", self.name, query.isbn)
            return []

        await self._gate.acquire(self.name, cancel)

        raw_candidates = await self._identifier_search(isbn, cancel) if isbn else []
        if not raw_candidates and query.title:
            raw_candidates = await self._text_search(query, cancel)

        if not raw_candidates:
            logger.info("No results found in %s for: %s", self.name, query.title or query.isbn)
            return []

        ranked = [scored.candidate for scored in self.rank(query, raw_candidates)]
        self._cache.set(cache_key, ranked, ttl=self._settings.cache_ttl_seconds)
        logger.debug("Found %d results in %s for %s", len(ranked), self.name, identifier)
        return ranked

    async def resolve(
        self, query: BookQuery, cancel: asyncio.Event | None = None
    ) -> BookRecord | None:
        """Fetch the full record for the best match of ``query``.

        A native id already on the query is fetched directly (rate-gated, not
        cached). Otherwise, or if that fetch finds nothing, the search pipeline
        picks the top candidate and its native id is fetched.
        """
        id_key = self._client.id_key
        native_id = query.provider_ids.get(id_key)
        if native_id:
            record = await self._fetch_record(native_id, cancel)
            if record is not None:
                return record
            logger.debug("Direct fetch of %s from %s found nothing", native_id, self.name)

        candidates = await self.search(query, cancel)
        if not candidates:
            return None

        top_id = candidates[0].provider_ids.get(id_key)
        if not top_id or top_id == native_id:
            return None
        return await self._fetch_record(top_id, cancel)

    def rank(self, query: BookQuery, candidates: list[Candidate]) -> list[ScoredCandidate]:
        """Deduplicate, score, filter by threshold, and order candidates.

        Ties keep the provider's original order. With fuzzy matching disabled
        every candidate scores 100.
        """
        threshold = self._settings.fuzzy_match_threshold
        fuzzy = self._settings.enable_fuzzy_matching

        scored = []
        for candidate in self._dedupe(candidates):
            score = composite_score(query, candidate) if fuzzy else 100
            logger.debug("Scored %r at %d against %r", candidate.name, score, query.title)
            if score >= threshold:
                scored.append(ScoredCandidate(candidate=candidate, score=score))

        scored.sort(key=lambda s: s.score, reverse=True)
        return scored[:MAX_RESULTS]

    def _dedupe(self, candidates: list[Candidate]) -> list[Candidate]:
        seen: set[str] = set()
        unique = []
        for candidate in candidates:
            native_id = candidate.provider_ids.get(self._client.id_key)
            if native_id is not None:
                if native_id in seen:
                    continue
                seen.add(native_id)
            unique.append(candidate)
        return unique

    def _searchable_isbn(self, query: BookQuery) -> str | None:
        if not query.isbn or not self._settings.enable_identifier_search:
            return None
        try:
            return parse_isbn(query.isbn)
        except InvalidIsbnError as exc:
            logger.debug("Skipping identifier search in %s: %s", self.name, exc)
            return None

    async def _identifier_search(self, isbn: str, cancel: asyncio.Event | None) -> list[Candidate]:
        logger.debug("Searching %s by ISBN: %s", self.name, isbn)
        raw = await self._call("ISBN search", self._client.search_by_isbn, isbn, cancel=cancel)
        return self._parse_candidates(raw)

    async def _text_search(self, query: BookQuery, cancel: asyncio.Event | None) -> list[Candidate]:
        title = query.title or ""
        author = query.author or derive_author(title)
        logger.debug("Searching %s by title/author: %s / %s", self.name, title, author)
        raw = await self._call(
            "title search", self._client.search_by_title_author, title, author, cancel=cancel
        )
        return self._parse_candidates(raw)

    async def _fetch_record(
        self, native_id: str, cancel: asyncio.Event | None
    ) -> BookRecord | None:
        await self._gate.acquire(self.name, cancel)
        raw = await self._call("fetch", self._client.fetch_by_id, native_id, cancel=cancel)
        if raw is None:
            return None
        try:
            return self._client.parse_record(raw)
        except MetadataFetchError as exc:
            logger.warning("Could not parse %s record %s: %s", self.name, native_id, exc)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Malformed %s record %s: %s", self.name, native_id, exc)
        return None

    async def _call(
        self,
        stage: str,
        func: Callable[..., Awaitable[Any]],
        *args: Any,
        cancel: asyncio.Event | None,
    ) -> Any:
        """Run one provider call, turning provider failures into None."""
        try:
            return await run_cancellable(func(*args), cancel)
        except MetadataFetchError as exc:
            logger.warning("%s %s failed: %s", self.name, stage, exc)
            return None

    def _parse_candidates(self, raw: Any) -> list[Candidate]:
        if raw is None:
            return []
        try:
            return self._client.parse_candidates(raw)
        except MalformedResponseError as exc:
            logger.warning("Could not parse %s response: %s", self.name, exc)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Malformed %s response: %s", self.name, exc)
        return []
