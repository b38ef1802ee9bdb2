"""Tests for access-date stamping and publish-date normalization."""

from datetime import date, datetime, timezone

import pytest

from placecheck.utils.dates import parse_publish_date, resolve_access_date, resolve_now


class TestAccessDate:
    def test_string_in_local_zone(self):
        # 23:30 UTC is already the next day in Vienna
        assert resolve_access_date("2024-02-29T23:30:00Z", tz="Europe/Vienna") == "2024-03-01"

    def test_naive_datetime_is_utc(self):
        assert resolve_access_date(datetime(2024, 3, 1, 12, 0), tz="UTC") == "2024-03-01"

    def test_plain_date(self):
        assert resolve_access_date(date(2024, 3, 1), tz="UTC") == "2024-03-01"

    def test_unknown_zone_falls_back_to_utc(self):
        now = resolve_now("2024-03-01T09:00:00+01:00", tz="Mars/Olympus")
        assert now.utcoffset().total_seconds() == 0
        assert now.hour == 8

    def test_wall_clock_when_unset(self):
        today = datetime.now(timezone.utc).date()
        stamped = date.fromisoformat(resolve_access_date(None, tz="UTC"))
        assert abs((stamped - today).days) <= 1


class TestPublishDate:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("2024-03-01", "2024-03-01"),
            ("2024-02-20T10:00:00Z", "2024-02-20T10:00:00+00:00"),
            ("2024-02-20T10:00:00", "2024-02-20T10:00:00+00:00"),
            ("", None),
            ("   ", None),
            (None, None),
            ("not a date", None),
        ],
    )
    def test_values(self, raw, expected):
        assert parse_publish_date(raw) == expected
