"""Shared fixtures: a mocked geocoder transport and a temp cache file."""

from datetime import datetime

import httpx
import pytest
from pytz import utc

TOKYO_RESULT = {
    "place_id": 241348419,
    "licence": "Data © OpenStreetMap contributors, ODbL 1.0. http://osm.org/copyright",
    "osm_type": "relation",
    "lat": "35.6762",
    "lon": "139.6503",
    "category": "boundary",
    "type": "administrative",
    "name": "Tokyo",
    "display_name": "Tokyo, Japan",
    "boundingbox": ["20.2145811", "35.8984245", "135.8536855", "154.2055410"],
}


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it served."""

    def __init__(self, status_code: int = 200, body=None):
        self.requests: list[httpx.Request] = []
        self.status_code = status_code
        self.body = [TOKYO_RESULT] if body is None else body
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)


class TickingClock:
    """Returns a new UTC instant, one minute later, on every call."""

    def __init__(self, start: datetime = datetime(2026, 10, 19, 3, 0)):
        self.current = utc.localize(start)
        self.calls = 0

    def __call__(self) -> datetime:
        value = self.current.replace(minute=self.calls % 60)
        self.calls += 1
        return value


@pytest.fixture
def cache_path(tmp_path):
    return tmp_path / "cache" / "responses.json.gz"


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def client(transport):
    with httpx.Client(transport=transport) as c:
        yield c
