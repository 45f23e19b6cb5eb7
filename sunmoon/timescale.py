"""Conversions between absolute instants and Julian-day based time scales."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

__all__ = [
    "J1970",
    "J2000",
    "to_julian_date",
    "from_julian_date",
    "days_since_j2000",
    "hours_later",
]

DAY_MS = 1000 * 60 * 60 * 24
J1970 = 2440588  # Julian day number of 1970-01-01.
J2000 = 2451545  # Julian date of the J2000.0 epoch.

_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_ONE_MS = timedelta(milliseconds=1)


def _milliseconds(instant: datetime) -> float:
    """Return milliseconds elapsed since the Unix epoch for an aware datetime."""

    if instant.tzinfo is None or instant.utcoffset() is None:
        raise ValueError("datetime must be timezone-aware")
    return (instant - _UNIX_EPOCH) / _ONE_MS


def to_julian_date(instant: datetime) -> float:
    """Return the Julian date of *instant*.

    Only the absolute instant matters; the zone of *instant* is ignored.

    Raises
    ------
    ValueError
        If *instant* is naive.
    """

    return _milliseconds(instant) / DAY_MS - 0.5 + J1970


def from_julian_date(julian_date: float) -> datetime:
    """Return the UTC datetime corresponding to *julian_date*.

    Raises
    ------
    ValueError
        If *julian_date* is NaN or falls outside the years 1..9999 that
        :class:`datetime.datetime` can represent.
    """

    try:
        return _UNIX_EPOCH + timedelta(milliseconds=(julian_date + 0.5 - J1970) * DAY_MS)
    except OverflowError as exc:
        raise ValueError(f"Julian date {julian_date!r} is outside the datetime range") from exc


def days_since_j2000(instant: datetime) -> float:
    """Return the (fractional) number of days elapsed since J2000.0."""

    return to_julian_date(instant) - J2000


def hours_later(instant: datetime, hours: float) -> datetime:
    """Return the UTC instant *hours* after *instant* (absolute, not wall-clock)."""

    return _UNIX_EPOCH + timedelta(milliseconds=_milliseconds(instant) + hours * DAY_MS / 24)
