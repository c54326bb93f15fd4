"""
contactsync.throttle
~~~~~~~~~~~~~~~~~~~~

This module implements the `RateLimiter` used to pace contact creation.

The API allows 50 requests per second and 2500 requests per minute. The
limiter keeps the instants of the requests it let through during the last
minute and, before each new request, sleeps for as long as either window is
full. It never rejects a request.
"""

import time
from collections import deque
from dataclasses import dataclass
from logging import info
from typing import Callable

SECOND_WINDOW = 1.0
MINUTE_WINDOW = 60.0

# Added to every computed wait to absorb clock and scheduler jitter.
SECOND_MARGIN = 0.010
MINUTE_MARGIN = 0.100


@dataclass
class RateStats:
    """ Model a snapshot of the limiter's windows. """

    requests_last_second: int
    requests_last_minute: int
    max_per_second: int
    max_per_minute: int


class RateLimiter:
    """ Implement a dual sliding-window request limiter.

    :param max_per_second: Requests allowed in any trailing second.
    :param max_per_minute: Requests allowed in any trailing minute.
    :param clock: A monotonic clock returning seconds.
    :param sleep: A function sleeping for a number of seconds.
    """

    def __init__(
        self,
        max_per_second: int = 50,
        max_per_minute: int = 2500,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.max_per_second: int = max_per_second
        self.max_per_minute: int = max_per_minute

        self._clock = clock
        self._sleep = sleep
        self._requests: deque = deque()

    def _prune(self, now: float) -> None:
        while self._requests and now - self._requests[0] >= MINUTE_WINDOW:
            self._requests.popleft()

    def _last_second(self, now: float) -> list:
        """ Return the retained instants younger than one second, oldest first. """
        recent = []
        for instant in reversed(self._requests):
            if now - instant >= SECOND_WINDOW:
                break
            recent.append(instant)
        recent.reverse()
        return recent

    def wait(self) -> None:
        """ Block until one more request fits both windows, then record it. """
        while True:
            now: float = self._clock()
            self._prune(now)

            recent: list = self._last_second(now)
            if len(recent) >= self.max_per_second:
                delay = recent[0] + SECOND_WINDOW + SECOND_MARGIN - now
                if delay > 0:
                    self._sleep(delay)
                    continue

            if len(self._requests) >= self.max_per_minute:
                delay = self._requests[0] + MINUTE_WINDOW + MINUTE_MARGIN - now
                if delay > 0:
                    info(f"Rate limit reached. Waiting {round(delay)}s.")
                    self._sleep(delay)
                    continue

            break

        self._requests.append(self._clock())

    def get_stats(self) -> RateStats:
        """ Count the requests in both windows without touching the window. """
        now: float = self._clock()

        return RateStats(
            requests_last_second=len(self._last_second(now)),
            requests_last_minute=sum(
                1 for instant in self._requests if now - instant < MINUTE_WINDOW
            ),
            max_per_second=self.max_per_second,
            max_per_minute=self.max_per_minute,
        )
