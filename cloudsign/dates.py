# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Date formats used in signed headers and strings-to-sign.

All formatters take an explicit instant.  Naive datetimes are treated as
UTC; aware datetimes are converted to UTC first, so output never depends
on the host timezone.
"""

from __future__ import annotations

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def as_utc(now: datetime) -> datetime:
    """Convert to UTC; naive datetimes are taken to already be UTC."""
    if now.tzinfo is None:
        return now.replace(tzinfo=UTC)
    return now.astimezone(UTC)


def rfc1123(now: datetime) -> str:
    """HTTP ``Date`` header value, e.g. ``Mon, 01 Jan 2024 00:00:00 GMT``.

    Day and month names are always English regardless of locale.
    """
    t = as_utc(now)
    day = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")[t.weekday()]
    month = (
        "Jan",
        "Feb",
        "Mar",
        "Apr",
        "May",
        "Jun",
        "Jul",
        "Aug",
        "Sep",
        "Oct",
        "Nov",
        "Dec",
    )[t.month - 1]
    return (
        f"{day}, {t.day:02d} {month} {t.year:04d} "
        f"{t.hour:02d}:{t.minute:02d}:{t.second:02d} GMT"
    )


def iso8601_extended(now: datetime) -> str:
    """ISO-8601 extended form, e.g. ``2024-01-01T00:00:00+0000``."""
    return as_utc(now).strftime("%Y-%m-%dT%H:%M:%S%z")


def sigv4_timestamp(now: datetime) -> str:
    """SigV4 timestamp in basic form, e.g. ``20240101T000000Z``."""
    return as_utc(now).strftime("%Y%m%dT%H%M%SZ")


def date_short(timestamp: str) -> str:
    """Date part (``YYYYMMDD``) of a SigV4 timestamp."""
    return timestamp[:8]
