"""CLI entry point for solar noon reports.

Usage:
    uv run solarnoon Tokyo
    uv run python -m solarnoon "Buenos Aires"
"""

import logging
import sys

import httpx
from dotenv import load_dotenv
from pydantic import ValidationError

from solarnoon.cache import FetchFailure, ResponseCache
from solarnoon.config import Settings
from solarnoon.geocode import NominatimGeocoder
from solarnoon.report import ReportBuilder, format_reports
from solarnoon.timezones import TimezoneResolver

USAGE = "Please specify a location as a command-line argument"


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if not args:
        print(USAGE, file=sys.stderr)
        return 1

    load_dotenv()
    try:
        settings = Settings()
    except ValidationError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 1
    logging.basicConfig(
        level=settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    with httpx.Client() as client:
        cache = ResponseCache(settings.cache_path, client, settings.user_agent)
        builder = ReportBuilder(
            geocoder=NominatimGeocoder(cache, settings.geocode_url, settings.locale),
            resolver=TimezoneResolver(),
            max_transitions=settings.max_transitions,
        )
        try:
            reports = builder.build(" ".join(args))
        except FetchFailure as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1

    if reports:
        print(format_reports(reports))
    return 0
