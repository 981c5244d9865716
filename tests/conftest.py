"""
Shared fixtures: a fake clock and a call-counting stub for the HTTP session.
"""
import json
import threading
from unittest.mock import Mock

import pytest

from models import Document, Item
from time_unit import TimeUnit


class FakeClock:
    """Monotonic clock that only moves when sleep() is called."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def make_response(status_code, body=None):
    """Build a requests.Response look-alike."""
    if body is None:
        text = ""
    elif isinstance(body, str):
        text = body
    else:
        text = json.dumps(body)
    response = Mock()
    response.status_code = status_code
    response.text = text
    response.content = text.encode("utf-8")
    response.json = Mock(side_effect=lambda: json.loads(text))
    return response


class StubSession:
    """Stands in for requests.Session.request, routing by (method, path suffix).

    routes maps (method, suffix) to a list of responses served in order; the
    last one repeats. Every call is recorded.
    """

    def __init__(self, routes, delay=0.0):
        self.routes = {key: list(value) for key, value in routes.items()}
        self.calls = []
        self.delay = delay
        self._lock = threading.Lock()

    def count(self, method, suffix):
        return sum(1 for c in self.calls if c["method"] == method and c["url"].endswith(suffix))

    def __call__(self, method, url, **kwargs):
        if self.delay:
            threading.Event().wait(self.delay)
        with self._lock:
            self.calls.append({"method": method, "url": url, **kwargs})
            for (route_method, suffix), responses in self.routes.items():
                if route_method == method and url.endswith(suffix):
                    return responses.pop(0) if len(responses) > 1 else responses[0]
        raise AssertionError(f"Unexpected request {method} {url}")


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def sample_document():
    return Document(
        participant_inn="7700000001",
        producer_inn="7700000002",
        owner_inn="7700000003",
        production_date="2024-01-15",
        production_type="OWN_PRODUCTION",
        products=[
            Item(
                certificate_document="CONFORMITY_CERTIFICATE",
                certificate_document_date="2023-12-01",
                certificate_document_number="RU-123",
                owner_inn="7700000003",
                producer_inn="7700000002",
                production_date="2024-01-15",
                tnved_code="6403990000",
                uit_code="010460043993125621JgXJ5.T",
                uitu_code=None,
            ),
            Item(tnved_code="6402190000", uit_code="0104600439931256210000002"),
        ],
    )


@pytest.fixture
def seconds():
    return TimeUnit.SECONDS
