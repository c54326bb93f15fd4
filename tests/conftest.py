"""
Shared fixtures for contactsync tests.
"""

import json

import pytest
import requests as rq

from contactsync.throttle import RateLimiter


class FakeClock:
    """A clock that only moves when told to, or when something sleeps."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def _make_response(status_code: int, body=None, reason: str = "") -> rq.Response:
    """Build a real `requests.Response` with a JSON or raw body."""
    response = rq.Response()
    response.status_code = status_code
    response.reason = reason
    if body is None:
        response._content = b""
    elif isinstance(body, (bytes, str)):
        response._content = body.encode() if isinstance(body, str) else body
    else:
        response._content = json.dumps(body).encode()
    return response


@pytest.fixture
def make_response():
    return _make_response


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def limiter(clock) -> RateLimiter:
    return RateLimiter(clock=clock, sleep=clock.sleep)
