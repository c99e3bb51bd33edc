"""Persistent response cache: one gzip-compressed JSON document keyed by request URL."""

import gzip
import json
import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

import httpx
from pytz import utc

logger = logging.getLogger(__name__)

Cache = dict[str, dict[str, Any]]


class FetchFailure(Exception):
    """Geocoder request did not succeed."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


def _utc_now() -> datetime:
    return datetime.now(utc)


class ResponseCache:
    """URL-keyed cache of provider responses, rewritten in full on every access.

    Entries are never evicted or expired: a response seen once for a URL is
    returned for that URL forever. There is no locking, so only one process
    should use a cache file at a time.
    """

    def __init__(
        self,
        path: Path,
        client: httpx.Client,
        user_agent: str,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.path = path
        self.client = client
        self.user_agent = user_agent
        self.clock = clock

    def load(self) -> Cache:
        """Read the cache document, creating an empty one if the file is absent.

        Raises:
            OSError, gzip.BadGzipFile, json.JSONDecodeError: On anything other
                than a missing file. A damaged cache aborts the run.
        """
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            logger.info("Creating empty response cache at %s", self.path)
            empty: Cache = {}
            self.save(empty)
            return empty
        return json.loads(gzip.decompress(raw).decode("utf-8"))

    def save(self, cache: Cache) -> None:
        """Serialize with sorted keys, compress, and overwrite the cache file."""
        text = json.dumps(cache, sort_keys=True, indent=2, ensure_ascii=False)
        # mtime=0 keeps the gzip header stable so equal mappings give equal bytes
        payload = gzip.compress(text.encode("utf-8"), mtime=0)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_bytes(payload)

    def fetch(self, url: str) -> Any:
        """Return the JSON body for url, from the cache when possible.

        Args:
            url: Full request URL, used verbatim as the cache key.

        Returns:
            The decoded JSON response body.

        Raises:
            FetchFailure: On a non-2xx response, a transport error, or a body
                that is not a JSON array. Nothing is written to the cache in
                that case.
        """
        cache = self.load()
        entry = cache.get(url)
        if entry is not None:
            logger.debug("Cache hit: %s", url)
            entry["last_retrieved_at"] = self.clock().isoformat()
            self.save(cache)
            return entry["data"]

        logger.debug("Cache miss, requesting %s", url)
        try:
            resp = self.client.get(url, headers={"User-Agent": self.user_agent})
        except httpx.TransportError as exc:
            raise FetchFailure(url, str(exc)) from exc
        if not resp.is_success:
            raise FetchFailure(url, resp.reason_phrase or str(resp.status_code))
        try:
            data = resp.json()
        except ValueError as exc:
            raise FetchFailure(url, f"response is not JSON: {exc}") from exc
        # Search responses are always a JSON array; anything else is an error body
        if not isinstance(data, list):
            raise FetchFailure(url, f"expected a JSON array, got {type(data).__name__}")

        now = self.clock().isoformat()
        cache[url] = {"data": data, "last_cached_at": now, "last_retrieved_at": now}
        self.save(cache)
        return data
