"""Coordinates to IANA time zone identifiers."""

import logging
from collections.abc import Callable, Iterable

import pytz
from timezonefinder import TimezoneFinder

from solarnoon.models import Location, ResolvedTimezone

logger = logging.getLogger(__name__)

TimezoneLookup = Callable[[float, float], Iterable[str]]


class TimezoneResolver:
    """Finds the time zones covering a coordinate.

    The default lookup asks ``timezonefinder`` for the zone at the point. A
    custom ``lookup(latitude, longitude)`` returning any number of
    identifiers can be supplied instead.
    """

    def __init__(self, lookup: TimezoneLookup | None = None) -> None:
        self._lookup = lookup
        self._finder: TimezoneFinder | None = None

    def _get_finder(self) -> TimezoneFinder:
        if self._finder is None:
            self._finder = TimezoneFinder(in_memory=True)
        return self._finder

    def _finder_lookup(self, latitude: float, longitude: float) -> list[str]:
        finder = self._get_finder()
        name = finder.timezone_at(lng=longitude, lat=latitude)
        if not name:
            name = finder.certain_timezone_at(lng=longitude, lat=latitude)
        return [name] if name else []

    def resolve(self, latitude: float, longitude: float) -> list[str]:
        """Return the sorted time zone identifiers at the coordinate.

        An empty list is a normal result (open ocean, unmapped areas). More
        than one result logs an ambiguity warning; all of them are returned.
        """
        lookup = self._lookup or self._finder_lookup
        names: set[str] = set()
        for name in lookup(latitude, longitude):
            if name in pytz.all_timezones_set:
                names.add(name)
            else:
                logger.warning("Ignoring unknown time zone %r", name)

        zones = sorted(names)
        if len(zones) > 1:
            logger.warning(
                "Ambiguous time zones for coordinates %s,%s: %s",
                latitude,
                longitude,
                ", ".join(zones),
            )
        return zones

    def resolve_locations(self, locations: Iterable[Location]) -> list[ResolvedTimezone]:
        """Expand each location into one entry per covering time zone."""
        return [
            ResolvedTimezone(location=location, timezone_id=zone)
            for location in locations
            for zone in self.resolve(location.latitude, location.longitude)
        ]
