"""Pytest configuration and fixtures."""

import json
from datetime import date

import pytest
import requests

from icore.search.models import SearchResponse
from icore.utils.time import FixedClock


class FakeResponse:
    """Just enough of requests.Response for the service clients."""

    def __init__(self, status_code=200, body=None, text=None, content=None, headers=None):
        self.status_code = status_code
        if text is None:
            text = json.dumps(body) if body is not None else ""
        self.text = text
        self.content = content if content is not None else text.encode("utf-8")
        self.headers = headers or {}

    def json(self):
        return json.loads(self.text)

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """Records every call and replays queued responses (or raises queued errors)."""

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls = []

    def _next(self):
        outcome = self.responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        return self._next()

    def get(self, url, **kwargs):
        self.calls.append({"method": "GET", "url": url, **kwargs})
        return self._next()


class FakeGateway:
    """Stands in for SearchGateway; records requests and replays responses."""

    service_name = "fake-search"

    def __init__(self):
        self.searches = []
        self.responses = []
        self.counts = {"biographies": 0, "stories": 0}
        self.suggestions = []
        self.suggest_calls = []
        self.error = None

    def search(self, index, request, timeout=None):
        self.searches.append((index, request))
        if self.error is not None:
            raise self.error
        if self.responses:
            return self.responses.pop(0)
        return SearchResponse(total_count=0)

    def count(self, index, timeout=None):
        if self.error is not None:
            raise self.error
        return self.counts[index]

    def suggest(self, index, request, timeout=None):
        self.suggest_calls.append((index, request))
        return list(self.suggestions)


@pytest.fixture
def fake_session_factory():
    return FakeSession


@pytest.fixture
def fake_response_factory():
    return FakeResponse


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def fixed_clock():
    # A Sunday
    return FixedClock(date(2024, 5, 12))
