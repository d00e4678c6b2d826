"""PacingTicker - Fleet-wide minimum spacing between pull request attempts."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

DEFAULT_INTERVAL_SECONDS = 1.0


class PacingTicker:
    """A shared fixed-interval signal.

    Each call to :meth:`wait` claims the next free slot and sleeps until it
    arrives, so no two callers are released less than ``interval`` seconds
    apart no matter how many threads are waiting. Slots that nobody claimed
    are not saved up: after an idle period only one caller passes at once.
    """

    def __init__(
        self,
        interval: float = DEFAULT_INTERVAL_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the ticker.

        Args:
            interval: Seconds between slots. Non-positive values fall back to one second.
            sleep: Sleep function (injectable for tests).
            clock: Monotonic clock (injectable for tests).
        """
        self.interval = interval if interval > 0 else DEFAULT_INTERVAL_SECONDS
        self._sleep = sleep
        self._clock = clock
        self._lock = threading.Lock()
        self._next_slot = clock() + self.interval

    def wait(self) -> float:
        """Block until this caller's slot. Returns the seconds slept."""
        with self._lock:
            now = self._clock()
            slot = max(now, self._next_slot)
            self._next_slot = slot + self.interval
        wait = slot - now
        if wait > 0:
            self._sleep(wait)
        return wait
