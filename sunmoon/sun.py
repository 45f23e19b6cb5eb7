"""Solar position and the altitude-threshold schedule for a calendar day."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional, Sequence, Tuple

from .astro import (
    RAD,
    Coordinate,
    EquatorialCoordinates,
    altitude,
    azimuth,
    declination,
    finite_or_nan,
    observer_angle,
    observer_radians,
    right_ascension,
    safe_acos,
    sidereal_time,
)
from .timescale import J2000, days_since_j2000, from_julian_date

__all__ = [
    "SUN_TIME_ANGLES",
    "SunPosition",
    "SunSchedule",
    "SunAngleTimes",
    "sun_coords",
    "sun_position",
    "sun_times",
    "sun_schedule",
    "sun_angle_times",
]

LOGGER = logging.getLogger(__name__)

# (altitude in degrees, rising event, setting event)
SUN_TIME_ANGLES: Tuple[Tuple[float, str, str], ...] = (
    (-0.833, "sunrise", "sunset"),
    (-0.3, "sunrise_end", "sunset_start"),
    (-6.0, "dawn", "dusk"),
    (-12.0, "nautical_dawn", "nautical_dusk"),
    (-18.0, "night_end", "night"),
    (6.0, "golden_hour_end", "golden_hour"),
)

PERIHELION = RAD * 102.9372  # Ecliptic longitude of the Earth's perihelion.
J0 = 0.0009


@dataclass(frozen=True)
class SunPosition:
    """Horizontal position of the Sun, radians (azimuth from south, westward)."""

    azimuth: float
    altitude: float


@dataclass(frozen=True)
class SunAngleTimes:
    """Instants the Sun passes a given altitude; ``None`` if it never does that day."""

    rising: Optional[datetime]
    setting: Optional[datetime]


@dataclass(frozen=True)
class SunSchedule:
    """Sun events for one day at one location."""

    solar_noon: Optional[datetime]
    nadir: Optional[datetime]
    sunrise: Optional[datetime]
    sunset: Optional[datetime]
    sunrise_end: Optional[datetime]
    sunset_start: Optional[datetime]
    dawn: Optional[datetime]
    dusk: Optional[datetime]
    nautical_dawn: Optional[datetime]
    nautical_dusk: Optional[datetime]
    night_end: Optional[datetime]
    night: Optional[datetime]
    golden_hour_end: Optional[datetime]
    golden_hour: Optional[datetime]


def solar_mean_anomaly(days: float) -> float:
    return RAD * (357.5291 + 0.98560028 * days)


def ecliptic_longitude(mean_anomaly: float) -> float:
    """Solar ecliptic longitude from the mean anomaly (radians)."""

    m = mean_anomaly
    # equation of center
    center = RAD * (1.9148 * math.sin(m) + 0.02 * math.sin(2 * m) + 0.0003 * math.sin(3 * m))
    return m + center + PERIHELION + math.pi


def sun_coords(days: float) -> EquatorialCoordinates:
    """Geocentric equatorial coordinates of the Sun *days* after J2000."""

    longitude = ecliptic_longitude(solar_mean_anomaly(days))
    return EquatorialCoordinates(
        declination=declination(longitude, 0),
        right_ascension=right_ascension(longitude, 0),
    )


def sun_position(instant: datetime, coordinate: Coordinate) -> SunPosition:
    """Return the Sun's azimuth and altitude seen from *coordinate* at *instant*."""

    lw, phi = observer_radians(coordinate)
    days = days_since_j2000(instant)
    coords = sun_coords(days)
    hour_angle = sidereal_time(days, lw) - coords.right_ascension
    return SunPosition(
        azimuth=azimuth(hour_angle, phi, coords.declination),
        altitude=altitude(hour_angle, phi, coords.declination),
    )


def _julian_cycle(days: float, lw: float) -> float:
    cycle = days - J0 - lw / (2 * math.pi)
    if not math.isfinite(cycle):
        return math.nan
    # Half-up rounding; round() would round half to even.
    return math.floor(cycle + 0.5)


def _approx_transit(hour_angle: float, lw: float, cycle: float) -> float:
    return J0 + (hour_angle + lw) / (2 * math.pi) + cycle


def _solar_transit_j(ds: float, mean_anomaly: float, longitude: float) -> float:
    return J2000 + ds + 0.0053 * math.sin(mean_anomaly) - 0.0069 * math.sin(2 * longitude)


def _hour_angle(h: float, phi: float, dec: float) -> float:
    return safe_acos((math.sin(h) - math.sin(phi) * math.sin(dec)) / (math.cos(phi) * math.cos(dec)))


@dataclass(frozen=True)
class _Transit:
    """Solar transit of the day nearest to an instant."""

    lw: float
    phi: float
    cycle: float
    mean_anomaly: float
    longitude: float
    dec: float
    noon: float


def _transit(instant: datetime, coordinate: Coordinate) -> _Transit:
    lw, phi = observer_radians(coordinate)
    days = days_since_j2000(instant)
    cycle = _julian_cycle(days, lw)
    ds = _approx_transit(0, lw, cycle)
    mean_anomaly = solar_mean_anomaly(ds)
    longitude = ecliptic_longitude(mean_anomaly)
    return _Transit(
        lw=lw,
        phi=phi,
        cycle=cycle,
        mean_anomaly=mean_anomaly,
        longitude=longitude,
        dec=declination(longitude, 0),
        noon=_solar_transit_j(ds, mean_anomaly, longitude),
    )


def _instant(julian_date: float) -> Optional[datetime]:
    return None if math.isnan(julian_date) else from_julian_date(julian_date)


def _crossing(transit: _Transit, angle: float, height: float) -> Tuple[Optional[datetime], Optional[datetime]]:
    """Rising and setting instants for *angle* degrees of altitude."""

    h0 = finite_or_nan((angle + observer_angle(height)) * RAD)
    w = _hour_angle(h0, transit.phi, transit.dec)
    if math.isnan(w):
        LOGGER.debug(json.dumps({"event": "sun_angle_unreached", "angle": angle}))
        return None, None
    j_set = _solar_transit_j(
        _approx_transit(w, transit.lw, transit.cycle), transit.mean_anomaly, transit.longitude
    )
    j_rise = transit.noon - (j_set - transit.noon)
    return _instant(j_rise), _instant(j_set)


def sun_times(
    instant: datetime,
    coordinate: Coordinate,
    angles: Sequence[Tuple[float, str, str]] = SUN_TIME_ANGLES,
    height: float = 0.0,
) -> Dict[str, Optional[datetime]]:
    """Compute solar noon, nadir and the crossings listed in *angles*.

    Parameters
    ----------
    instant:
        Any instant of the day of interest; the transit nearest to it is used.
    coordinate:
        Observer location in degrees.
    angles:
        ``(altitude_degrees, rising_name, setting_name)`` triples.
    height:
        Observer height above the horizon plane in metres.

    Returns
    -------
    dict
        ``solar_noon`` and ``nadir`` plus one entry per event name. Events the
        Sun does not reach that day map to ``None``.
    """

    transit = _transit(instant, coordinate)
    result: Dict[str, Optional[datetime]] = {
        "solar_noon": _instant(transit.noon),
        "nadir": _instant(transit.noon - 0.5),
    }
    for angle, rising_name, setting_name in angles:
        result[rising_name], result[setting_name] = _crossing(transit, angle, height)
    return result


def sun_schedule(instant: datetime, coordinate: Coordinate, height: float = 0.0) -> SunSchedule:
    """Return the full :class:`SunSchedule` for the day of *instant*."""

    return SunSchedule(**sun_times(instant, coordinate, SUN_TIME_ANGLES, height))


def sun_angle_times(
    angle: float, instant: datetime, coordinate: Coordinate, height: float = 0.0
) -> SunAngleTimes:
    """Return when the Sun rises above and sinks below *angle* degrees of altitude."""

    rising, setting = _crossing(_transit(instant, coordinate), angle, height)
    return SunAngleTimes(rising=rising, setting=setting)
