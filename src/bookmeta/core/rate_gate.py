# ABOUTME: Per-source sliding-window admission control for outbound lookups.
# ABOUTME: At most N admissions per source in any trailing 60-second window.

import asyncio
import logging
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field

from bookmeta.core.cancellation import raise_if_cancelled, run_cancellable

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SECONDS = 60.0


@dataclass
class RateWindow:
    """Admission state for one source.

    ``timestamps`` holds admission times (oldest first); entries older than the
    window are pruned lazily on each admission attempt.
    """

    capacity: int
    timestamps: deque[float] = field(default_factory=deque)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    def prune(self, cutoff: float) -> None:
        while self.timestamps and self.timestamps[0] <= cutoff:
            self.timestamps.popleft()


class RateGate:
    """Sliding-window rate limiter with one window per source.

    Only one caller at a time evaluates or waits on a given source's window
    (a single-slot asyncio.Lock). Callers queue on that lock, so there are no
    thundering-herd re-checks, but there is no fairness guarantee beyond the
    lock's own wake-up order.
    """

    def __init__(
        self,
        limits: dict[str, int] | None = None,
        *,
        default_capacity: int = 10,
        window: float = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if default_capacity <= 0:
            raise ValueError("default_capacity must be a positive integer")
        if window <= 0:
            raise ValueError("window must be a positive number")
        self._default_capacity = default_capacity
        self._window = window
        self._clock = clock
        self._windows: dict[str, RateWindow] = {}
        for source, capacity in (limits or {}).items():
            self.configure(source, capacity)

    def configure(self, source: str, capacity: int) -> None:
        """Set the per-window capacity for a source, keeping its admission history."""
        if capacity <= 0:
            raise ValueError(f"capacity for {source!r} must be a positive integer")
        existing = self._windows.get(source)
        if existing is None:
            self._windows[source] = RateWindow(capacity=capacity)
        else:
            existing.capacity = capacity

    def _get_window(self, source: str) -> RateWindow:
        if source not in self._windows:
            self._windows[source] = RateWindow(capacity=self._default_capacity)
        return self._windows[source]

    async def acquire(self, source: str, cancel: asyncio.Event | None = None) -> float:
        """Wait until ``source`` has room in its window, then record an admission.

        Returns the number of seconds spent waiting for the window (time spent
        queued on the admission lock is not included).

        Raises:
            RequestCancelledError: ``cancel`` was set before admission. Nothing
                is recorded in that case.
        """
        window = self._get_window(source)
        raise_if_cancelled(cancel)

        # Queued callers observe cancellation too, not only the one sleeping.
        await run_cancellable(window.lock.acquire(), cancel)
        try:
            return await self._admit(source, window, cancel)
        finally:
            window.lock.release()

    async def _admit(
        self, source: str, window: RateWindow, cancel: asyncio.Event | None
    ) -> float:
        waited = 0.0
        while True:
            raise_if_cancelled(cancel)
            now = self._clock()
            window.prune(now - self._window)

            if len(window.timestamps) < window.capacity:
                window.timestamps.append(now)
                return waited

            wait = window.timestamps[0] + self._window - now
            logger.debug(
                "Rate limit reached for %s (%d/%d in %.0fs), waiting %.2fs",
                source,
                len(window.timestamps),
                window.capacity,
                self._window,
                wait,
            )
            if wait > 0:
                await run_cancellable(asyncio.sleep(wait), cancel)
                waited += wait

    def in_window(self, source: str) -> int:
        """Number of admissions for ``source`` inside the current window."""
        window = self._windows.get(source)
        if window is None:
            return 0
        cutoff = self._clock() - self._window
        return sum(1 for ts in window.timestamps if ts > cutoff)

    def status(self) -> dict[str, dict[str, int]]:
        return {
            source: {"capacity": window.capacity, "in_window": self.in_window(source)}
            for source, window in self._windows.items()
        }
