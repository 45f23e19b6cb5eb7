"""Lunar position, illumination and rise/set times."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import List, Optional, Tuple

from .astro import (
    RAD,
    Coordinate,
    EquatorialCoordinates,
    altitude,
    astro_refraction,
    azimuth,
    declination,
    observer_radians,
    right_ascension,
    safe_acos,
    sidereal_time,
)
from .sun import sun_coords
from .timescale import days_since_j2000, hours_later

__all__ = [
    "MoonPosition",
    "MoonIllumination",
    "MoonSchedule",
    "moon_coords",
    "moon_position",
    "moon_illumination",
    "moon_schedule",
]

LOGGER = logging.getLogger(__name__)

SUN_DISTANCE_KM = 149598000
# Altitude of the moon's centre at rise/set: apparent radius net of parallax.
MOON_HORIZON = 0.133 * RAD


@dataclass(frozen=True)
class MoonPosition:
    """Horizontal position of the Moon.

    ``azimuth`` is measured from south, positive westward; ``altitude``
    includes a low-precision refraction term. ``distance`` is geocentric, in
    kilometres.
    """

    azimuth: float
    altitude: float
    distance: float
    parallactic_angle: float


@dataclass(frozen=True)
class MoonIllumination:
    """Illuminated fraction, phase (0 new, 0.5 full) and bright-limb angle."""

    fraction: float
    phase: float
    angle: float


@dataclass(frozen=True)
class MoonSchedule:
    """First moonrise and moonset inside a 24 hour window.

    When neither happens, ``always_up`` or ``always_down`` tells which way.
    """

    rise: Optional[datetime] = None
    set: Optional[datetime] = None
    always_up: bool = False
    always_down: bool = False


def moon_coords(days: float) -> EquatorialCoordinates:
    """Geocentric equatorial coordinates of the Moon *days* after J2000."""

    mean_longitude = RAD * (218.316 + 13.176396 * days)
    mean_anomaly = RAD * (134.963 + 13.064993 * days)
    mean_distance = RAD * (93.272 + 13.229350 * days)

    longitude = mean_longitude + RAD * 6.289 * math.sin(mean_anomaly)
    latitude = RAD * 5.128 * math.sin(mean_distance)
    distance = 385001 - 20905 * math.cos(mean_anomaly)

    return EquatorialCoordinates(
        declination=declination(longitude, latitude),
        right_ascension=right_ascension(longitude, latitude),
        distance=distance,
    )


def _position(days: float, coordinate: Coordinate) -> MoonPosition:
    lw, phi = observer_radians(coordinate)
    coords = moon_coords(days)
    hour_angle = sidereal_time(days, lw) - coords.right_ascension
    h = altitude(hour_angle, phi, coords.declination)
    # formula 14.1 of "Astronomical Algorithms" 2nd edition by Jean Meeus
    parallactic_angle = math.atan2(
        math.sin(hour_angle),
        math.tan(phi) * math.cos(coords.declination)
        - math.sin(coords.declination) * math.cos(hour_angle),
    )
    return MoonPosition(
        azimuth=azimuth(hour_angle, phi, coords.declination),
        altitude=h + astro_refraction(h),
        distance=coords.distance,
        parallactic_angle=parallactic_angle,
    )


def moon_position(instant: datetime, coordinate: Coordinate) -> MoonPosition:
    """Return the Moon's horizontal position seen from *coordinate* at *instant*."""

    return _position(days_since_j2000(instant), coordinate)


def moon_illumination(instant: datetime) -> MoonIllumination:
    """Return the illuminated fraction and phase of the Moon at *instant*.

    ``angle`` is the midpoint angle of the illuminated limb, measured eastward
    from the north point of the disk; a negative angle means the Moon is
    waxing.
    """

    days = days_since_j2000(instant)
    sun = sun_coords(days)
    moon = moon_coords(days)

    # geocentric elongation of the Moon from the Sun
    phi = safe_acos(
        math.sin(sun.declination) * math.sin(moon.declination)
        + math.cos(sun.declination)
        * math.cos(moon.declination)
        * math.cos(sun.right_ascension - moon.right_ascension)
    )
    # selenocentric elongation of the Earth from the Sun
    inc = math.atan2(SUN_DISTANCE_KM * math.sin(phi), moon.distance - SUN_DISTANCE_KM * math.cos(phi))
    angle = math.atan2(
        math.cos(sun.declination) * math.sin(sun.right_ascension - moon.right_ascension),
        math.sin(sun.declination) * math.cos(moon.declination)
        - math.cos(sun.declination)
        * math.sin(moon.declination)
        * math.cos(sun.right_ascension - moon.right_ascension),
    )

    return MoonIllumination(
        fraction=(1 + math.cos(inc)) / 2,
        phase=0.5 + 0.5 * inc * (-1 if angle < 0 else 1) / math.pi,
        angle=angle,
    )


def _parabola_crossings(h0: float, h1: float, h2: float) -> Tuple[List[float], float]:
    """Zero crossings of the parabola through (-1, h0), (0, h1), (1, h2).

    Returns the roots within ``[-1, 1]`` (ordered for the rise/set logic) and
    the value at the extremum. Collinear samples give the single root of the
    line and report ``h1`` in place of the extremum.
    """

    a = (h0 + h2) / 2 - h1
    b = (h2 - h0) / 2
    if a == 0:
        # collinear samples: the line crosses zero at most once
        if b == 0:
            return [], h1
        x = -h1 / b
        return ([x] if abs(x) <= 1 else []), h1

    xe = -b / (2 * a)
    ye = (a * xe + b) * xe + h1
    d = b * b - 4 * a * h1
    if d < 0:
        return [], ye

    dx = math.sqrt(d) / (abs(a) * 2)
    x1 = xe - dx
    x2 = xe + dx
    roots = [x for x in (x1, x2) if abs(x) <= 1]
    return roots, ye


def _window_start(instant: datetime, in_utc: bool) -> datetime:
    if in_utc:
        instant = instant.astimezone(UTC)
    return instant.replace(hour=0, minute=0, second=0, microsecond=0)


def moon_schedule(instant: datetime, coordinate: Coordinate, in_utc: bool = False) -> MoonSchedule:
    """Find the first moonrise and moonset in the day containing *instant*.

    The search window covers 24 hours from midnight of the calendar day of
    *instant* in its own time zone, or in UTC when *in_utc* is set. The moon's
    altitude is sampled hourly and a parabola is fitted through each run of
    three samples.

    Parameters
    ----------
    instant:
        Timezone-aware datetime inside the day of interest.
    coordinate:
        Observer location in degrees.
    in_utc:
        Use the UTC calendar day rather than the local one.
    """

    start = _window_start(instant, in_utc)
    start_days = days_since_j2000(start)

    def moon_altitude(hours: float) -> float:
        return _position(start_days + hours / 24, coordinate).altitude - MOON_HORIZON

    rise: Optional[float] = None
    set_: Optional[float] = None

    h0 = moon_altitude(0)
    for hour in range(1, 25, 2):
        h1 = moon_altitude(hour)
        h2 = moon_altitude(hour + 1)
        roots, ye = _parabola_crossings(h0, h1, h2)

        if len(roots) == 1:
            if h0 < 0:
                rise = hour + roots[0] if rise is None else rise
            else:
                set_ = hour + roots[0] if set_ is None else set_
        elif len(roots) == 2:
            first, second = roots
            if rise is None:
                rise = hour + (second if ye < 0 else first)
            if set_ is None:
                set_ = hour + (first if ye < 0 else second)

        if rise is not None and set_ is not None:
            break
        h0 = h2

    if rise is None and set_ is None:
        LOGGER.debug(
            json.dumps(
                {
                    "event": "moon_no_crossing",
                    "start": start.isoformat(),
                    "always_up": h0 > 0,
                }
            )
        )
        # every sample lies on the same side of the horizon
        return MoonSchedule(always_up=h0 > 0, always_down=h0 <= 0)

    return MoonSchedule(
        rise=hours_later(start, rise) if rise is not None else None,
        set=hours_later(start, set_) if set_ is not None else None,
    )
