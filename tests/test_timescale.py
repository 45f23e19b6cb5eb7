from __future__ import annotations

import math
from datetime import UTC, datetime, timedelta, timezone

import erfa
import pytest

from sunmoon import days_since_j2000, from_julian_date, hours_later, to_julian_date
from sunmoon.astro import RAD, sidereal_time


def _erfa_julian_date(dt: datetime) -> float:
    dt = dt.astimezone(UTC)
    utc1, utc2 = erfa.dtf2d(
        "UTC",
        dt.year,
        dt.month,
        dt.day,
        dt.hour,
        dt.minute,
        dt.second + dt.microsecond / 1_000_000,
    )
    return float(utc1) + float(utc2)


def test_julian_date_of_reference_instant(reference_instant: datetime) -> None:
    assert to_julian_date(reference_instant) == 2456356.5
    assert days_since_j2000(reference_instant) == 4811.5


def test_j2000_epoch_is_day_zero() -> None:
    assert days_since_j2000(datetime(2000, 1, 1, 12, tzinfo=UTC)) == 0.0


@pytest.mark.parametrize(
    "dt",
    [
        datetime(1970, 1, 1, tzinfo=UTC),
        datetime(1999, 12, 31, 23, 59, 30, tzinfo=UTC),
        datetime(2013, 3, 5, 10, 10, 57, 250000, tzinfo=UTC),
        datetime(2024, 2, 29, 6, 30, tzinfo=timezone(timedelta(hours=-7))),
    ],
)
def test_julian_date_matches_erfa(dt: datetime) -> None:
    assert to_julian_date(dt) == pytest.approx(_erfa_julian_date(dt), abs=1e-9)


def test_zone_of_instant_is_ignored() -> None:
    utc = datetime(2013, 3, 5, tzinfo=UTC)
    pacific = utc.astimezone(timezone(timedelta(hours=-8)))
    assert to_julian_date(pacific) == to_julian_date(utc)


def test_round_trip_through_julian_date() -> None:
    dt = datetime(2013, 3, 5, 10, 10, 57, 123000, tzinfo=UTC)
    assert abs(from_julian_date(to_julian_date(dt)) - dt) < timedelta(microseconds=100)

    jd = 2456356.923456
    assert to_julian_date(from_julian_date(jd)) == pytest.approx(jd, abs=1e-9)


def test_from_julian_date_returns_utc() -> None:
    dt = from_julian_date(2451545.0)
    assert dt == datetime(2000, 1, 1, 12, tzinfo=UTC)
    assert dt.utcoffset() == timedelta(0)


@pytest.mark.parametrize("jd", [1e9, -1e9, math.inf, math.nan])
def test_julian_date_outside_datetime_range(jd: float) -> None:
    with pytest.raises(ValueError):
        from_julian_date(jd)


def test_naive_datetime_is_rejected() -> None:
    with pytest.raises(ValueError):
        to_julian_date(datetime(2013, 3, 5))


def test_hours_later_is_absolute() -> None:
    start = datetime(2013, 3, 5, tzinfo=UTC)
    assert hours_later(start, 1.5) == datetime(2013, 3, 5, 1, 30, tzinfo=UTC)
    assert hours_later(start, -24) == datetime(2013, 3, 4, tzinfo=UTC)


def test_sidereal_time_tracks_erfa_gmst(reference_instant: datetime) -> None:
    days = days_since_j2000(reference_instant)
    jd = to_julian_date(reference_instant)
    gmst = float(erfa.gmst82(jd, 0.0))
    ours = math.fmod(sidereal_time(days, 0.0), 2 * math.pi)
    diff = math.remainder(ours - gmst, 2 * math.pi)
    # low-precision series: within a degree of GMST
    assert abs(diff) < RAD
    # east longitude advances local sidereal time
    assert sidereal_time(days, RAD * -30.5) > sidereal_time(days, 0.0)
