# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Tests for cloudsign/dates.py."""

from datetime import UTC, datetime, timedelta, timezone

from cloudsign.dates import (
    date_short,
    iso8601_extended,
    rfc1123,
    sigv4_timestamp,
    utcnow,
)
from tests.vectors import NOW, NOW_BASIC, NOW_EXTENDED, NOW_RFC1123


class TestRfc1123:
    """Tests for rfc1123."""

    def test_known_instant(self) -> None:
        """Formats the fixed instant."""
        assert rfc1123(NOW) == NOW_RFC1123

    def test_zero_padded_day(self) -> None:
        """Single-digit days are zero padded."""
        t = datetime(2023, 7, 4, 9, 5, 3, tzinfo=UTC)
        assert rfc1123(t) == "Tue, 04 Jul 2023 09:05:03 GMT"

    def test_converts_to_utc(self) -> None:
        """Aware non-UTC datetimes are converted before formatting."""
        jst = timezone(timedelta(hours=9))
        t = datetime(2024, 1, 1, 9, 0, 0, tzinfo=jst)
        assert rfc1123(t) == NOW_RFC1123

    def test_naive_is_utc(self) -> None:
        """Naive datetimes are interpreted as UTC."""
        assert rfc1123(datetime(2024, 1, 1)) == NOW_RFC1123


class TestIso8601Extended:
    """Tests for iso8601_extended."""

    def test_known_instant(self) -> None:
        """UTC offset is rendered as +0000."""
        assert iso8601_extended(NOW) == NOW_EXTENDED

    def test_converts_to_utc(self) -> None:
        """Offsets other than UTC are normalized."""
        pst = timezone(timedelta(hours=-8))
        t = datetime(2023, 12, 31, 16, 0, 0, tzinfo=pst)
        assert iso8601_extended(t) == NOW_EXTENDED


class TestSigv4Timestamp:
    """Tests for sigv4_timestamp and date_short."""

    def test_known_instant(self) -> None:
        """Basic form ends in a literal Z."""
        assert sigv4_timestamp(NOW) == NOW_BASIC

    def test_date_short(self) -> None:
        """Date part is the first eight characters."""
        assert date_short(NOW_BASIC) == "20240101"

    def test_utcnow_is_aware(self) -> None:
        """utcnow returns a UTC-aware datetime."""
        assert utcnow().utcoffset() == timedelta(0)
