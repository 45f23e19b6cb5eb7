"""Shared spherical astronomy: ecliptic/equatorial/horizontal transforms."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

__all__ = [
    "RAD",
    "OBLIQUITY",
    "safe_asin",
    "safe_acos",
    "finite_or_nan",
    "observer_radians",
    "Coordinate",
    "EquatorialCoordinates",
    "right_ascension",
    "declination",
    "azimuth",
    "altitude",
    "sidereal_time",
    "astro_refraction",
    "observer_angle",
]

RAD = math.pi / 180
OBLIQUITY = RAD * 23.4397  # Obliquity of the Earth's axis.


@dataclass(frozen=True)
class Coordinate:
    """Observer location in decimal degrees (east-positive longitude)."""

    latitude: float
    longitude: float


@dataclass(frozen=True)
class EquatorialCoordinates:
    """Geocentric equatorial position in radians, plus distance in km when known."""

    declination: float
    right_ascension: float
    distance: float = math.nan


def observer_radians(coordinate: Coordinate) -> Tuple[float, float]:
    """Return (west longitude, latitude) in radians; infinities become NaN."""

    lw = RAD * -finite_or_nan(coordinate.longitude)
    phi = RAD * finite_or_nan(coordinate.latitude)
    return lw, phi


def safe_asin(value: float) -> float:
    # NaN outside [-1, 1] instead of raising, as IEEE trig would.
    return math.asin(value) if -1.0 <= value <= 1.0 else math.nan


def safe_acos(value: float) -> float:
    return math.acos(value) if -1.0 <= value <= 1.0 else math.nan


def finite_or_nan(value: float) -> float:
    # math.sin and friends raise on infinities but pass NaN through.
    return value if math.isfinite(value) else math.nan


def right_ascension(longitude: float, latitude: float) -> float:
    """Right ascension of an ecliptic position (radians in, radians out)."""

    return math.atan2(
        math.sin(longitude) * math.cos(OBLIQUITY) - math.tan(latitude) * math.sin(OBLIQUITY),
        math.cos(longitude),
    )


def declination(longitude: float, latitude: float) -> float:
    """Declination of an ecliptic position (radians in, radians out)."""

    return safe_asin(
        math.sin(latitude) * math.cos(OBLIQUITY)
        + math.cos(latitude) * math.sin(OBLIQUITY) * math.sin(longitude)
    )


def azimuth(hour_angle: float, phi: float, dec: float) -> float:
    """Azimuth measured from south, positive towards west."""

    return math.atan2(
        math.sin(hour_angle),
        math.cos(hour_angle) * math.sin(phi) - math.tan(dec) * math.cos(phi),
    )


def altitude(hour_angle: float, phi: float, dec: float) -> float:
    """Geometric altitude above the horizon."""

    return safe_asin(
        math.sin(phi) * math.sin(dec) + math.cos(phi) * math.cos(dec) * math.cos(hour_angle)
    )


def sidereal_time(days: float, lw: float) -> float:
    """Local sidereal time for *days* since J2000 and west longitude *lw* (radians)."""

    return RAD * (280.16 + 360.9856235 * days) - lw


def astro_refraction(h: float) -> float:
    """Low-precision refraction correction (radians) for apparent altitude *h*.

    Formula 16.4 of "Astronomical Algorithms" (Meeus, 1998), with 1.02 / tan(...)
    expressed in radians. The formula diverges for negative altitudes so they
    are clamped to the horizon.
    """

    if h < 0:
        h = 0
    return 0.0002967 / math.tan(h + 0.00312536 / (h + 0.08901179))


def observer_angle(height: float) -> float:
    """Horizon dip in degrees for an observer *height* metres above the surface."""

    if height <= 0:
        return 0.0
    return -2.076 * math.sqrt(height) / 60
