# ABOUTME: Async HTTP client abstraction for metadata provider API calls.
# ABOUTME: Provides retry with backoff, error classification, and injectable transport for testing.

import asyncio
import logging
from typing import Any, Protocol, runtime_checkable

import httpx

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
_USER_AGENT = "bookmeta/0.1.0"


class MetadataFetchError(Exception):
    """Raised when a metadata provider cannot produce a usable payload."""


class SourceUnavailableError(MetadataFetchError):
    """The source could not be reached or answered with a non-success status."""


class MalformedResponseError(MetadataFetchError):
    """The source answered, but the payload could not be parsed."""


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for async HTTP GET operations against metadata APIs."""

    async def get(self, url: str, params: dict[str, str] | None = None) -> Any: ...

    async def aclose(self) -> None: ...


class BookmetaHttpClient:
    """Async HTTP client with retry for metadata API calls.

    Wraps httpx.AsyncClient with retry logic for transient failures (429, 5xx).
    Admission control lives in the resolver's RateGate, not here.
    """

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        client_kwargs: dict[str, Any] = {
            "headers": {"User-Agent": _USER_AGENT},
            "timeout": timeout,
            "follow_redirects": True,
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.AsyncClient(**client_kwargs)
        self._max_retries = max_retries
        self._retry_delay = retry_delay

    async def get(self, url: str, params: dict[str, str] | None = None) -> Any:
        """Send a GET request with retry and return the decoded JSON body.

        Raises:
            SourceUnavailableError: On transport errors, non-retryable HTTP
                errors, or exhausted retries.
            MalformedResponseError: When the body is not valid JSON.
        """
        attempts = 1 + self._max_retries
        last_status = 0
        for attempt in range(attempts):
            try:
                response = await self._client.get(url, params=params)
                last_status = response.status_code
            except httpx.HTTPError as exc:
                raise SourceUnavailableError(f"Request failed: {url}: {exc}") from exc

            if response.status_code == 200:
                try:
                    return response.json()
                except ValueError as exc:
                    raise MalformedResponseError(f"Invalid JSON from {url}: {exc}") from exc

            if response.status_code not in _RETRYABLE_STATUS_CODES:
                raise SourceUnavailableError(f"HTTP {response.status_code} from {url}")

            if attempt < attempts - 1:
                delay = self._retry_delay * (2**attempt)
                logger.warning(
                    "HTTP %d from %s, retrying in %.1fs (attempt %d/%d)",
                    response.status_code,
                    url,
                    delay,
                    attempt + 1,
                    self._max_retries,
                )
                await asyncio.sleep(delay)

        raise SourceUnavailableError(f"HTTP {last_status} from {url} after {attempts} attempts")

    async def aclose(self) -> None:
        await self._client.aclose()
