"""Unit tests for dromedary.dates."""

from __future__ import annotations

from datetime import date, datetime

from dromedary.dates import (
    date_link,
    format_day_heading,
    format_iso_date,
    format_listing_day,
    format_post_date,
    format_short_date,
    parse_timestamp,
)


class TestParseTimestamp:
    def test_parses_written_dates(self) -> None:
        assert parse_timestamp("2014-03-17 10:30 PM") == datetime(2014, 3, 17, 22, 30)

    def test_missing_and_unparseable(self) -> None:
        assert parse_timestamp(None) is None
        assert parse_timestamp("") is None
        assert parse_timestamp("not a date at all") is None

    def test_date_becomes_midnight(self) -> None:
        assert parse_timestamp(date(2014, 3, 17)) == datetime(2014, 3, 17)


class TestFormats:
    def test_post_date(self) -> None:
        assert format_post_date("2014-03-17 10:30 PM") == "Monday 17 March 2014, 10:30 PM"

    def test_post_date_passes_unparseable_through(self) -> None:
        assert format_post_date("someday") == "someday"

    def test_short_date(self) -> None:
        assert format_short_date("2014-03-17 8:05 AM") == "2014-03-17, 8:05 AM"

    def test_iso_date(self) -> None:
        assert format_iso_date("2014-03-17 10:30 PM") == "2014-03-17T22:30:00"

    def test_day_heading(self) -> None:
        assert format_day_heading(date(2014, 3, 17)) == "Monday<br />17<br />March<br />2014"

    def test_listing_day(self) -> None:
        assert format_listing_day(date(2014, 3, 7)) == "Friday, March 7"

    def test_date_link(self) -> None:
        assert date_link(date(2014, 3, 7)) == "/2014/3/7/"
