"""Solar noon and time zone transition computation.

Solar noon here is mean solar noon: the instant the mean sun crosses the
meridian of a longitude, i.e. 12:00 UTC shifted by 4 minutes per degree.
The equation of time is ignored.
"""

import bisect
import math
from collections.abc import Callable
from datetime import datetime, timedelta, tzinfo

import pytz
from pytz import utc

from solarnoon.models import SolarNoonResult

DAY = timedelta(days=1)
NOON = timedelta(hours=12)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards +inf."""
    return math.floor(value + 0.5)


def solar_noon_utc_offset(longitude: float) -> timedelta:
    """How much earlier than 12:00 UTC solar noon happens at longitude.

    +180° is 12 hours ahead of UTC, -180° is 12 hours behind. Rounded to
    the nearest millisecond.
    """
    return timedelta(milliseconds=round_half_up(longitude / 180 * 12 * 3600 * 1000))


def ideal_utc_offset(longitude: float) -> timedelta:
    """Whole-hour UTC offset that puts solar noon closest to 12:00 on the clock."""
    return timedelta(hours=round_half_up(longitude / 180 * 12))


def format_utc_offset(offset: timedelta) -> str:
    """Render an offset as ``UTC±HH:MM``, truncated to whole minutes.

    A zero offset (including anything under a minute) is ``UTC+00:00``.
    """
    millis = offset // timedelta(milliseconds=1)
    minutes = abs(millis) // 60_000
    sign = "-" if millis < 0 and minutes > 0 else "+"
    return f"UTC{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def _zone_of(moment: datetime) -> tzinfo:
    """Return the pytz zone object a zoned datetime belongs to."""
    name = getattr(moment.tzinfo, "zone", None)
    if name is None:
        raise ValueError(f"Expected a pytz-aware datetime, got tzinfo={moment.tzinfo!r}")
    return pytz.timezone(name)


def now_in(timezone_id: str, clock: Callable[[], datetime] | None = None) -> datetime:
    """Current instant in the given zone. ``clock`` must return an aware datetime."""
    instant = clock() if clock is not None else datetime.now(utc)
    return instant.astimezone(pytz.timezone(timezone_id))


def _format_date(moment: datetime) -> str:
    return f"{moment:%A, %B} {moment.day}, {moment.year}"


def _format_time(moment: datetime) -> str:
    text = moment.strftime("%I:%M:%S %p")
    return text[1:] if text.startswith("0") else text


def render_solar_noon(instant: datetime, zone: tzinfo) -> SolarNoonResult:
    """Project a solar noon instant onto the local clock of zone."""
    local = instant.astimezone(zone)
    offset = local.utcoffset()
    assert offset is not None
    return SolarNoonResult(
        calendar_date=_format_date(local),
        local_time=_format_time(local),
        utc_offset_label=format_utc_offset(offset),
    )


def solar_noon_instant(reference: datetime, longitude: float) -> datetime:
    """Solar noon (UTC) on the reference's local calendar date."""
    day = reference.date()
    midnight = utc.localize(datetime(day.year, day.month, day.day))
    return midnight + NOON - solar_noon_utc_offset(longitude)


def solar_noon(reference: datetime, longitude: float) -> SolarNoonResult:
    """Solar noon on the reference's calendar date, shown in the reference's zone.

    Args:
        reference: pytz-aware datetime. Its local date picks the day and its
            zone is used for display.
        longitude: Decimal degrees, east positive.

    Returns:
        SolarNoonResult for that date.
    """
    return render_solar_noon(solar_noon_instant(reference, longitude), _zone_of(reference))


def next_solar_noon(instant: datetime, longitude: float) -> datetime:
    """First solar noon at or after instant, in the instant's zone.

    The result is always in ``[instant, instant + 24h)``.
    """
    target = (NOON - solar_noon_utc_offset(longitude)) % DAY
    as_utc = instant.astimezone(utc)
    elapsed = as_utc - as_utc.replace(hour=0, minute=0, second=0, microsecond=0)
    delta = target - elapsed
    if delta < timedelta(0):
        delta += DAY
    return (as_utc + delta).astimezone(_zone_of(instant))


def solar_noon_after(instant: datetime, longitude: float) -> SolarNoonResult:
    """Render the first solar noon at or after instant."""
    return render_solar_noon(next_solar_noon(instant, longitude), _zone_of(instant))


def next_transition(moment: datetime) -> datetime | None:
    """Next UTC offset change of moment's zone, strictly after moment.

    This is the only place that reads pytz's transition table. Entries that
    change only the abbreviation or DST flag are skipped.

    Args:
        moment: pytz-aware datetime.

    Returns:
        The transition instant in the same zone, or None when the zone has no
        later offset changes (fixed-offset zones, zones that dropped DST).
    """
    zone = _zone_of(moment)
    times: list[datetime] = getattr(zone, "_utc_transition_times", None) or []
    info: list[tuple[timedelta, timedelta, str]] = getattr(zone, "_transition_info", None) or []
    if len(times) < 2:
        return None

    naive_utc = moment.astimezone(utc).replace(tzinfo=None)
    start = max(bisect.bisect_right(times, naive_utc), 1)
    for index in range(start, len(times)):
        if info[index][0] != info[index - 1][0]:
            return utc.localize(times[index]).astimezone(zone)
    return None


def upcoming_transitions(start: datetime, limit: int = 2) -> list[datetime]:
    """Collect up to limit offset changes after start, in order."""
    transitions: list[datetime] = []
    current = start
    while len(transitions) < limit:
        following = next_transition(current)
        if following is None:
            break
        transitions.append(following)
        current = following
    return transitions
