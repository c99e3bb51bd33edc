"""Free-text place name to coordinates, via Nominatim behind the response cache."""

import logging
import math
from typing import Any, Protocol

import httpx

from solarnoon.cache import ResponseCache
from solarnoon.models import Location

logger = logging.getLogger(__name__)


class Geocoder(Protocol):
    """Anything that turns a place name into zero or more locations."""

    def geocode(self, query: str) -> list[Location]: ...


def _parse_coordinate(value: Any, limit: float) -> float | None:
    """Parse a provider coordinate string. Returns None for NaN, inf, or out of range."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or abs(number) > limit:
        return None
    return number


def parse_locations(results: list[dict[str, Any]]) -> list[Location]:
    """Convert raw Nominatim search results to Location objects.

    Entries whose lat/lon do not parse to valid coordinates are skipped.
    """
    locations: list[Location] = []
    for item in results:
        lat = _parse_coordinate(item.get("lat"), 90.0)
        lon = _parse_coordinate(item.get("lon"), 180.0)
        if lat is None or lon is None:
            logger.warning(
                "Skipping result with invalid coordinates: lat=%r lon=%r",
                item.get("lat"),
                item.get("lon"),
            )
            continue
        locations.append(
            Location(
                latitude=lat,
                longitude=lon,
                display_name=str(item.get("display_name", "")),
            )
        )
    return locations


class NominatimGeocoder:
    """Nominatim (OpenStreetMap) search client.

    Every distinct query URL is requested at most once; later lookups come
    from the response cache.
    """

    def __init__(self, cache: ResponseCache, endpoint: str, locale: str = "en") -> None:
        self.cache = cache
        self.endpoint = endpoint
        self.locale = locale

    def search_url(self, query: str) -> str:
        params = {"q": query, "format": "jsonv2", "accept-language": self.locale}
        return str(httpx.URL(self.endpoint, params=params))

    def geocode(self, query: str) -> list[Location]:
        """Return every match for query, in provider order.

        Raises:
            FetchFailure: If the provider request fails.
        """
        results = self.cache.fetch(self.search_url(query))
        return parse_locations(results)
