"""In-memory sliding-window rate limiting."""

import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)


class RateLimiter:
    """Per-identity sliding window counter.

    State lives only in this instance and is lost on restart. The bot is
    single-threaded (asyncio), so no locking is needed.
    """

    def __init__(
        self,
        window_seconds: float,
        max_requests: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self._clock = clock
        self._history: dict[str, list[float]] = {}

    def _valid_entries(self, identity: str, now: float) -> list[float]:
        return [t for t in self._history.get(identity, []) if now - t < self.window_seconds]

    def check_and_record(self, identity: str) -> bool:
        """Return True and record the call if ``identity`` is under the limit."""
        now = self._clock()
        entries = self._valid_entries(identity, now)

        if len(entries) >= self.max_requests:
            return False

        entries.append(now)
        self._history[identity] = entries
        return True

    def sweep(self) -> int:
        """Drop expired timestamps; return how many identities were removed."""
        now = self._clock()
        removed = 0
        for identity in list(self._history):
            entries = self._valid_entries(identity, now)
            if entries:
                self._history[identity] = entries
            else:
                del self._history[identity]
                removed += 1

        if removed:
            logger.debug("Rate limit sweep removed %d identities", removed)
        return removed

    def __len__(self) -> int:
        return len(self._history)
