import logging
import threading
import time
from typing import Callable, Optional, Union

from exceptions import ConfigurationError, InterruptedWait
from time_unit import TimeUnit

logger = logging.getLogger(__name__)


class RateLimiter:
    """Fixed-window limiter: at most `request_limit` grants per one `time_unit`.

    Args:
        time_unit: Length of the window, one unit of it (TimeUnit or its name).
        request_limit: Grants allowed per window, must be a positive int.
        clock: Monotonic clock in seconds.
        sleep: Blocking sleep used when no cancel event is passed to acquire().
    """

    def __init__(
            self,
            time_unit: Union[TimeUnit, str],
            request_limit: int,
            clock: Callable[[], float] = time.monotonic,
            sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if isinstance(request_limit, bool) or not isinstance(request_limit, int):
            raise ConfigurationError(f"request_limit must be an int, got {request_limit!r}")
        if request_limit <= 0:
            raise ConfigurationError("request_limit must be positive")
        try:
            self.time_unit = TimeUnit.parse(time_unit)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        self._request_limit = request_limit
        self._window: float = self.time_unit.seconds
        self._clock = clock
        self._sleep = sleep
        self._window_start: float = clock()
        self._count = 0
        self._lock = threading.Lock()

    @property
    def request_limit(self) -> int:
        return self._request_limit

    @property
    def window_seconds(self) -> float:
        return self._window

    def available(self) -> int:
        """Slots left in the current window."""
        with self._lock:
            self._roll_window(self._clock())
            return self._request_limit - self._count

    def _roll_window(self, now: float) -> None:
        # Caller holds the lock.
        if now - self._window_start >= self._window:
            self._window_start = now
            self._count = 0

    def acquire(self, cancel: Optional[threading.Event] = None) -> None:
        """Blocks until a slot is free in the current window, then takes it.

        Args:
            cancel: Optional event; setting it aborts the wait.

        Raises:
            InterruptedWait: If `cancel` is set while waiting.
        """
        while True:
            with self._lock:
                now = self._clock()
                self._roll_window(now)
                if self._count < self._request_limit:
                    self._count += 1
                    return
                remaining = self._window - (now - self._window_start)

            logger.debug("Rate limit of %d per %s reached, waiting %.3fs",
                         self._request_limit, self.time_unit.name.lower(), remaining)
            if cancel is not None:
                if cancel.wait(remaining):
                    raise InterruptedWait("Rate limit wait was cancelled")
            else:
                self._sleep(remaining)
