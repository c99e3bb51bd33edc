"""Data model definitions shared by the lookup, compute, and report layers."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Location:
    """A single geocoder match."""

    latitude: float  # Decimal degrees, [-90, 90]
    longitude: float  # Decimal degrees, [-180, 180], east positive
    display_name: str  # Human-readable name returned by the geocoder


@dataclass(frozen=True)
class ResolvedTimezone:
    """A location paired with one IANA time zone that covers it."""

    location: Location
    timezone_id: str  # "Asia/Tokyo", "Europe/Berlin", etc.


@dataclass(frozen=True)
class SolarNoonResult:
    """Display rendering of a solar noon instant in a specific time zone."""

    calendar_date: str  # "Monday, October 19, 2026"
    local_time: str  # "11:41:24 AM"
    utc_offset_label: str  # "UTC+09:00"


@dataclass(frozen=True)
class SolarNoonReport:
    """Everything printed for one (location, time zone) pair."""

    resolved: ResolvedTimezone
    current: SolarNoonResult
    transitions: tuple[SolarNoonResult, ...]  # Solar noon after each upcoming offset change
    ideal_offset_label: str  # Whole-hour offset closest to local solar noon
