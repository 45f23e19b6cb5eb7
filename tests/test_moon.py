from __future__ import annotations

import math
from datetime import UTC, datetime, timedelta, timezone

import erfa
import pytest

from sunmoon import Coordinate, days_since_j2000, moon_illumination, moon_position, moon_schedule
from sunmoon.astro import RAD, sidereal_time
from sunmoon.moon import _parabola_crossings, moon_coords

CENTRAL_EUROPE = timezone(timedelta(hours=1))


def test_moon_position_reference(reference_instant, reference_coordinate) -> None:
    position = moon_position(reference_instant, reference_coordinate)
    assert position.azimuth == pytest.approx(-0.9783999522438226, rel=1e-12)
    assert position.altitude == pytest.approx(0.014551482243892251, rel=1e-12)
    assert position.distance == pytest.approx(364121.37256256194, rel=1e-12)
    assert position.parallactic_angle == pytest.approx(-0.5983211760423401, rel=1e-12)


def test_parallactic_angle_matches_erfa(reference_instant, reference_coordinate) -> None:
    days = days_since_j2000(reference_instant)
    coords = moon_coords(days)
    hour_angle = sidereal_time(days, RAD * -reference_coordinate.longitude) - coords.right_ascension
    expected = float(erfa.hd2pa(hour_angle, coords.declination, RAD * reference_coordinate.latitude))
    position = moon_position(reference_instant, reference_coordinate)
    assert position.parallactic_angle == pytest.approx(expected, rel=1e-12)


def test_moon_illumination_reference(reference_instant) -> None:
    illumination = moon_illumination(reference_instant)
    assert illumination.fraction == pytest.approx(0.4848068202456373, rel=1e-12)
    assert illumination.phase == pytest.approx(0.7548368838538762, rel=1e-12)
    assert illumination.angle == pytest.approx(1.6732942678578346, rel=1e-12)


def test_moon_illumination_ignores_zone(reference_instant) -> None:
    shifted = reference_instant.astimezone(timezone(timedelta(hours=-8)))
    assert moon_illumination(shifted) == moon_illumination(reference_instant)


def test_full_and_new_moon_fractions() -> None:
    # 2013-03-27 09:27Z full moon, 2013-03-11 19:51Z new moon
    full = moon_illumination(datetime(2013, 3, 27, 9, 27, tzinfo=UTC))
    new = moon_illumination(datetime(2013, 3, 11, 19, 51, tzinfo=UTC))
    assert full.fraction > 0.98
    assert full.phase == pytest.approx(0.5, abs=0.03)
    assert new.fraction < 0.03
    assert min(new.phase, 1 - new.phase) < 0.03


def test_moon_schedule_reference(reference_instant, reference_coordinate) -> None:
    # Reference data was produced with the day boundary at UTC+1 midnight.
    schedule = moon_schedule(reference_instant.astimezone(CENTRAL_EUROPE), reference_coordinate)
    assert schedule.rise is not None and schedule.set is not None
    tolerance = timedelta(seconds=1)
    assert abs(schedule.rise - datetime(2013, 3, 4, 23, 54, 18, tzinfo=UTC)) < tolerance
    assert abs(schedule.set - datetime(2013, 3, 5, 8, 44, 29, tzinfo=UTC)) < tolerance
    assert not schedule.always_up
    assert not schedule.always_down


def test_moon_schedule_window_follows_instant_zone(reference_coordinate) -> None:
    utc_day = moon_schedule(datetime(2013, 3, 5, 12, tzinfo=UTC), reference_coordinate)
    window_start = datetime(2013, 3, 5, tzinfo=UTC)
    for event in (utc_day.rise, utc_day.set):
        if event is not None:
            assert window_start <= event <= window_start + timedelta(hours=24)
    # the 23:54 rise of the previous UTC day is outside this window
    assert utc_day.rise is None or utc_day.rise > window_start

    local_day = moon_schedule(
        datetime(2013, 3, 5, 12, tzinfo=CENTRAL_EUROPE), reference_coordinate
    )
    assert local_day.rise is not None
    assert local_day.rise < window_start


def test_moon_schedule_in_utc_flag(reference_coordinate) -> None:
    local = datetime(2013, 3, 5, 0, 30, tzinfo=CENTRAL_EUROPE)
    assert moon_schedule(local, reference_coordinate, in_utc=True) == moon_schedule(
        local.astimezone(UTC), reference_coordinate
    )


def test_moon_schedule_polar(reference_instant) -> None:
    # declination is about -20 degrees: never rises far north, never sets far south
    north = moon_schedule(reference_instant, Coordinate(latitude=85.0, longitude=30.5))
    assert north.rise is None and north.set is None
    assert north.always_down and not north.always_up

    south = moon_schedule(reference_instant, Coordinate(latitude=-85.0, longitude=30.5))
    assert south.rise is None and south.set is None
    assert south.always_up and not south.always_down


def test_moon_schedule_is_deterministic(reference_instant, reference_coordinate) -> None:
    first = moon_schedule(reference_instant, reference_coordinate)
    assert first == moon_schedule(reference_instant, reference_coordinate)


def test_parabola_crossings() -> None:
    # collinear samples rising through zero at x = 0
    roots, _ = _parabola_crossings(-1.0, 0.0, 1.0)
    assert roots == [0.0]

    roots, _ = _parabola_crossings(0.5, 0.25, 0.0)
    assert roots == [1.0]

    roots, _ = _parabola_crossings(1.0, 2.0, 3.0)
    assert roots == []

    roots, _ = _parabola_crossings(0.0, 0.0, 0.0)
    assert roots == []

    roots, ye = _parabola_crossings(-0.5, 0.25, 0.5)
    assert len(roots) == 1
    assert -1 <= roots[0] <= 0
    assert ye > 0

    roots, ye = _parabola_crossings(-1.0, 1.0, -1.0)
    assert roots == pytest.approx([-math.sqrt(0.5), math.sqrt(0.5)])
    assert ye == pytest.approx(1.0)

    roots, ye = _parabola_crossings(1.0, 2.0, 1.5)
    assert roots == []
    assert ye > 0


def test_degenerate_coordinates_do_not_raise(reference_instant) -> None:
    for odd in (Coordinate(latitude=math.inf, longitude=0.0), Coordinate(latitude=50.5, longitude=math.nan)):
        assert math.isnan(moon_position(reference_instant, odd).altitude)
        schedule = moon_schedule(reference_instant, odd)
        assert schedule.rise is None and schedule.set is None
