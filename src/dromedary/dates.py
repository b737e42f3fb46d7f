"""Post timestamp parsing and the date formats used by templates and listings."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import structlog
from dateutil import parser as date_parser

log = structlog.get_logger()


def parse_timestamp(value: str | date | None) -> datetime | None:
    """Parse a ``Date`` metadata value. Returns ``None`` when absent or unparseable."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    try:
        return date_parser.parse(value)
    except (ValueError, OverflowError):
        log.debug("timestamp_unparseable", value=value)
        return None


def localize(moment: datetime, utc_offset_hours: int) -> datetime:
    """Attach the site's UTC offset to a naive timestamp; aware ones pass through."""
    if moment.tzinfo is not None:
        return moment
    return moment.replace(tzinfo=timezone(timedelta(hours=utc_offset_hours)))


def _hour12(moment: datetime) -> int:
    return moment.hour % 12 or 12


def format_post_date(value: str | date | None) -> str:
    """``Monday 17 March 2014, 10:30 PM``"""
    moment = parse_timestamp(value)
    if moment is None:
        return "" if value is None else str(value)
    return (
        f"{moment:%A} {moment.day} {moment:%B} {moment:%Y}, "
        f"{_hour12(moment)}:{moment:%M} {moment:%p}"
    )


def format_short_date(value: str | date | None) -> str:
    """``2014-03-17, 10:30 PM``"""
    moment = parse_timestamp(value)
    if moment is None:
        return "" if value is None else str(value)
    return f"{moment:%Y-%m-%d}, {_hour12(moment)}:{moment:%M} {moment:%p}"


def format_iso_date(value: str | date | None) -> str:
    moment = parse_timestamp(value)
    return moment.isoformat() if moment is not None else ""


def format_day_heading(value: str | date | None) -> str:
    """Stacked date badge for index day groups: weekday, day, month, year."""
    moment = parse_timestamp(value)
    if moment is None:
        return ""
    return f"{moment:%A}<br />{moment.day}<br />{moment:%B}<br />{moment:%Y}"


def format_listing_day(value: str | date | None) -> str:
    """``Monday, March 17``"""
    moment = parse_timestamp(value)
    if moment is None:
        return ""
    return f"{moment:%A}, {moment:%B} {moment.day}"


def date_link(value: str | date | None) -> str:
    """Day listing URL: ``/2014/3/17/``."""
    moment = parse_timestamp(value)
    if moment is None:
        return "/"
    return f"/{moment.year}/{moment.month}/{moment.day}/"
