"""Tests for the persistent response cache."""

import gzip
import json

import httpx
import pytest

from solarnoon.cache import FetchFailure, ResponseCache

from conftest import TOKYO_RESULT, RecordingTransport, TickingClock

URL = "https://nominatim.openstreetmap.org/search?q=Tokyo&format=jsonv2&accept-language=en"


def make_cache(path, client, clock=None):
    return ResponseCache(path, client, "solar-noon-checker", clock or TickingClock())


def test_load_creates_missing_file(cache_path, client):
    cache = make_cache(cache_path, client)
    assert not cache_path.exists()
    assert cache.load() == {}
    assert cache_path.exists()
    assert cache.load() == {}


def test_save_then_load_round_trip(cache_path, client):
    cache = make_cache(cache_path, client)
    data = {
        URL: {
            "data": [TOKYO_RESULT],
            "last_cached_at": "2026-10-19T03:00:00+00:00",
            "last_retrieved_at": "2026-10-19T03:05:00+00:00",
        }
    }
    cache.save(data)
    first = cache_path.read_bytes()
    assert cache.load() == data

    cache.save(cache.load())
    assert cache_path.read_bytes() == first


def test_saved_file_is_readable_gzip_json(cache_path, client):
    cache = make_cache(cache_path, client)
    cache.save({"b": {"data": []}, "a": {"data": ["é"]}})
    text = gzip.decompress(cache_path.read_bytes()).decode("utf-8")
    assert text.index('"a"') < text.index('"b"')
    assert "é" in text
    assert json.loads(text)["a"]["data"] == ["é"]


def test_fetch_requests_once(cache_path, client, transport):
    cache = make_cache(cache_path, client)
    first = cache.fetch(URL)
    entry_after_miss = cache.load()[URL]
    second = cache.fetch(URL)
    entry_after_hit = cache.load()[URL]

    assert len(transport.requests) == 1
    assert first == second == [TOKYO_RESULT]
    assert entry_after_hit["last_cached_at"] == entry_after_miss["last_cached_at"]
    assert entry_after_hit["last_retrieved_at"] != entry_after_miss["last_retrieved_at"]


def test_fetch_sends_user_agent(cache_path, client, transport):
    make_cache(cache_path, client).fetch(URL)
    assert transport.requests[0].headers["User-Agent"] == "solar-noon-checker"
    assert str(transport.requests[0].url) == URL


def test_fetch_keeps_extra_provider_fields(cache_path, client):
    cache = make_cache(cache_path, client)
    cache.fetch(URL)
    stored = cache.load()[URL]["data"][0]
    assert stored["boundingbox"] == TOKYO_RESULT["boundingbox"]
    assert stored["osm_type"] == "relation"


SEEDED = {
    "https://example.org/search?q=Berlin": {
        "data": [{"lat": "52.52", "lon": "13.405", "display_name": "Berlin, Germany"}],
        "last_cached_at": "2026-10-01T00:00:00+00:00",
        "last_retrieved_at": "2026-10-01T00:00:00+00:00",
    }
}


def seed(cache_path, client):
    cache = make_cache(cache_path, client)
    cache.save(SEEDED)
    return cache_path.read_bytes()


def test_fetch_failure_leaves_existing_file_unchanged(cache_path):
    transport = RecordingTransport(status_code=503)
    with httpx.Client(transport=transport) as client:
        before = seed(cache_path, client)
        with pytest.raises(FetchFailure) as excinfo:
            make_cache(cache_path, client).fetch(URL)

    assert excinfo.value.url == URL
    assert excinfo.value.reason == "Service Unavailable"
    assert cache_path.read_bytes() == before


def test_error_object_body_is_not_cached(cache_path):
    transport = RecordingTransport(body={"error": "Unable to geocode"})
    with httpx.Client(transport=transport) as client:
        before = seed(cache_path, client)
        cache = make_cache(cache_path, client)
        for _ in range(2):
            with pytest.raises(FetchFailure, match="expected a JSON array"):
                cache.fetch(URL)

    assert len(transport.requests) == 2
    assert cache_path.read_bytes() == before


def test_non_json_body_is_fetch_failure(cache_path):
    def handler(request):
        return httpx.Response(200, text="<html>rate limited</html>")

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        cache = make_cache(cache_path, client)
        with pytest.raises(FetchFailure, match="not JSON"):
            cache.fetch(URL)
    assert cache.load() == {}


def test_fetch_transport_error(cache_path):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        cache = make_cache(cache_path, client)
        with pytest.raises(FetchFailure, match="connection refused"):
            cache.fetch(URL)
    assert cache.load() == {}


def test_corrupt_file_propagates(cache_path, client):
    cache_path.parent.mkdir(parents=True)
    cache_path.write_bytes(b"definitely not gzip")
    with pytest.raises(gzip.BadGzipFile):
        make_cache(cache_path, client).load()
    assert cache_path.read_bytes() == b"definitely not gzip"


def test_corrupt_json_propagates(cache_path, client):
    cache_path.parent.mkdir(parents=True)
    cache_path.write_bytes(gzip.compress(b"{not json"))
    with pytest.raises(json.JSONDecodeError):
        make_cache(cache_path, client).fetch(URL)
