"""Report assembly: geocoding, time zone lookup and solar noon computation for a query."""

import logging
from collections.abc import Callable
from datetime import datetime

from pytz import utc

from solarnoon.compute import (
    format_utc_offset,
    ideal_utc_offset,
    now_in,
    solar_noon,
    solar_noon_after,
    upcoming_transitions,
)
from solarnoon.geocode import Geocoder
from solarnoon.models import ResolvedTimezone, SolarNoonReport
from solarnoon.timezones import TimezoneResolver

logger = logging.getLogger(__name__)

NO_CHANGES_LINE = "No daylight saving or other time zone changes are scheduled."


def _utc_now() -> datetime:
    return datetime.now(utc)


class ReportBuilder:
    """Builds one SolarNoonReport per (location, time zone) match of a query."""

    def __init__(
        self,
        geocoder: Geocoder,
        resolver: TimezoneResolver,
        max_transitions: int = 2,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.geocoder = geocoder
        self.resolver = resolver
        self.max_transitions = max_transitions
        self.clock = clock

    def report_for(self, resolved: ResolvedTimezone) -> SolarNoonReport:
        longitude = resolved.location.longitude
        now = now_in(resolved.timezone_id, self.clock)
        transitions = upcoming_transitions(now, self.max_transitions)
        logger.debug(
            "%s: %d upcoming transition(s)", resolved.timezone_id, len(transitions)
        )
        return SolarNoonReport(
            resolved=resolved,
            current=solar_noon(now, longitude),
            transitions=tuple(solar_noon_after(t, longitude) for t in transitions),
            ideal_offset_label=format_utc_offset(ideal_utc_offset(longitude)),
        )

    def build(self, query: str) -> list[SolarNoonReport]:
        """Geocode query and compute a report for every time zone it falls in.

        Raises:
            FetchFailure: If geocoding fails. No reports are produced.
        """
        locations = self.geocoder.geocode(query)
        logger.info("%d location(s) found for %r", len(locations), query)
        return [self.report_for(r) for r in self.resolver.resolve_locations(locations)]


def format_report(report: SolarNoonReport) -> str:
    """Render a report as the multi-line block printed by the CLI."""
    location = report.resolved.location
    current = report.current
    lines = [
        f"Location: {location.display_name}",
        f"Coordinates: {location.latitude}, {location.longitude}",
        f"Time zone: {report.resolved.timezone_id}",
        f"Solar noon is currently at {current.local_time} ({current.utc_offset_label})",
    ]
    if not report.transitions:
        lines.append(NO_CHANGES_LINE)
    for noon in report.transitions:
        lines.append(
            f"From {noon.calendar_date}, solar noon will shift to "
            f"{noon.local_time} ({noon.utc_offset_label})"
        )
    lines.append(f"Ideal UTC offset for this longitude: {report.ideal_offset_label}")
    return "\n".join(lines)


def format_reports(reports: list[SolarNoonReport]) -> str:
    """Join report blocks with a blank line between them."""
    return "\n\n".join(format_report(r) for r in reports)
