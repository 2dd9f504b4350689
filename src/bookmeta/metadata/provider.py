# ABOUTME: ProviderClient protocol defining the contract for external metadata sources.
# ABOUTME: Google Books and Open Library implement it; the resolver drives any implementation.

from typing import Any, Protocol, runtime_checkable

from bookmeta.metadata.types import BookRecord, Candidate


@runtime_checkable
class ProviderClient(Protocol):
    """Protocol for one external metadata source.

    The three lookup coroutines return the decoded payload, or None when the
    source has nothing for the request. They may raise SourceUnavailableError
    or MalformedResponseError; the resolver absorbs both.

    The two parse methods convert payloads into Candidate / BookRecord values
    and raise MalformedResponseError if the payload has the wrong shape.
    """

    @property
    def name(self) -> str: ...

    @property
    def id_key(self) -> str:
        """The ProviderIdKey under which this source's native ids are stored."""
        ...

    async def search_by_isbn(self, isbn: str) -> Any: ...

    async def search_by_title_author(self, title: str, author: str | None = None) -> Any: ...

    async def fetch_by_id(self, native_id: str) -> Any: ...

    def parse_candidates(self, raw: Any) -> list[Candidate]: ...

    def parse_record(self, raw: Any) -> BookRecord | None: ...
