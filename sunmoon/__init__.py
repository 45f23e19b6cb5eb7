"""Sun and moon positions, phases and rise/set times."""

from .astro import Coordinate, EquatorialCoordinates
from .moon import (
    MoonIllumination,
    MoonPosition,
    MoonSchedule,
    moon_illumination,
    moon_position,
    moon_schedule,
)
from .sun import (
    SUN_TIME_ANGLES,
    SunAngleTimes,
    SunPosition,
    SunSchedule,
    sun_angle_times,
    sun_position,
    sun_schedule,
    sun_times,
)
from .timescale import days_since_j2000, from_julian_date, hours_later, to_julian_date

__all__ = [
    "Coordinate",
    "EquatorialCoordinates",
    "MoonIllumination",
    "MoonPosition",
    "MoonSchedule",
    "SUN_TIME_ANGLES",
    "SunAngleTimes",
    "SunPosition",
    "SunSchedule",
    "days_since_j2000",
    "from_julian_date",
    "hours_later",
    "moon_illumination",
    "moon_position",
    "moon_schedule",
    "sun_angle_times",
    "sun_position",
    "sun_schedule",
    "sun_times",
    "to_julian_date",
]
