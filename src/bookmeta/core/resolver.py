# ABOUTME: Multi-source resolver that runs one orchestrator per enabled source.
# ABOUTME: build_resolver() wires settings, the shared HTTP client, rate gate, and cache together.

import asyncio
import logging
from collections.abc import Callable
from types import TracebackType

from bookmeta.config import ResolverSettings
from bookmeta.core.cache import ResultCache
from bookmeta.core.orchestrator import ResolutionOrchestrator
from bookmeta.core.rate_gate import RateGate
from bookmeta.metadata.googlebooks import GoogleBooksClient
from bookmeta.metadata.http import BookmetaHttpClient, HttpClient
from bookmeta.metadata.openlibrary import OpenLibraryClient
from bookmeta.metadata.provider import ProviderClient
from bookmeta.metadata.types import BookQuery, BookRecord, Candidate

logger = logging.getLogger(__name__)

# The closed set of supported sources, by provider name.
SOURCES: dict[str, Callable[[HttpClient, ResolverSettings], ProviderClient]] = {
    "google_books": lambda http, settings: GoogleBooksClient(
        http, api_key=settings.google_books.api_key
    ),
    "open_library": lambda http, settings: OpenLibraryClient(http),
}


class BookResolver:
    """Resolves queries against several sources, highest priority first.

    Orchestrators are expected to share one RateGate and one ResultCache.
    """

    def __init__(
        self,
        orchestrators: list[ResolutionOrchestrator],
        http_client: HttpClient | None = None,
    ) -> None:
        self._orchestrators = orchestrators
        self._http = http_client

    @property
    def sources(self) -> list[str]:
        return [o.name for o in self._orchestrators]

    async def search_all(
        self, query: BookQuery, cancel: asyncio.Event | None = None
    ) -> dict[str, list[Candidate]]:
        """Search every source concurrently.

        Returns candidates per source, keyed in priority order. Scores are not
        comparable across sources, so results are not merged.
        """
        results = await asyncio.gather(*(o.search(query, cancel) for o in self._orchestrators))
        return {o.name: found for o, found in zip(self._orchestrators, results, strict=True)}

    async def resolve(
        self, query: BookQuery, cancel: asyncio.Event | None = None
    ) -> BookRecord | None:
        """Return the first record any source resolves, trying sources in priority order."""
        for orchestrator in self._orchestrators:
            record = await orchestrator.resolve(query, cancel)
            if record is not None:
                logger.debug("Resolved %r via %s", record.name, orchestrator.name)
                return record
        return None

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()

    async def __aenter__(self) -> "BookResolver":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


def build_resolver(
    settings: ResolverSettings | None = None,
    http_client: HttpClient | None = None,
) -> BookResolver:
    """Create a BookResolver for every enabled source in ``settings``.

    A BookmetaHttpClient is created from the HTTP settings when none is given.
    """
    settings = settings or ResolverSettings()
    if http_client is None:
        http_client = BookmetaHttpClient(
            timeout=settings.http.timeout,
            max_retries=settings.http.max_retries,
            retry_delay=settings.http.retry_delay,
        )

    enabled = [name for name in SOURCES if settings.source(name).enabled]
    enabled.sort(key=lambda name: settings.source(name).priority)

    gate = RateGate({name: settings.source(name).rate_limit_per_minute for name in enabled})
    cache = ResultCache(default_ttl=settings.cache_ttl_seconds)

    orchestrators = [
        ResolutionOrchestrator(
            SOURCES[name](http_client, settings), settings, rate_gate=gate, cache=cache
        )
        for name in enabled
    ]
    logger.debug("Resolver sources: %s", ", ".join(enabled) or "none")
    return BookResolver(orchestrators, http_client=http_client)
