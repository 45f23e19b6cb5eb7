"""Pydantic models for API requests and responses."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DaylightStatus(str, Enum):
    """Outcome of a sunrise/sunset computation."""

    ok = "ok"
    polar_day = "polar_day"
    polar_night = "polar_night"


class _InstantQuery(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    when: datetime = Field(..., alias="time", description="Instant (ISO-8601, naive means UTC)")

    @field_validator("when")
    def assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class IlluminationQueryParams(_InstantQuery):
    """Validated query parameters for the ``/moon/illumination`` endpoint."""


class PositionQueryParams(_InstantQuery):
    """Validated query parameters for the ``/sun`` and ``/moon`` endpoints."""

    lat: float = Field(..., ge=-90.0, le=90.0, description="Latitude in degrees")
    lon: float = Field(..., ge=-180.0, le=180.0, description="Longitude in degrees")


class _LocalTimesQuery(PositionQueryParams):
    offset_hours: Optional[float] = Field(
        None,
        description="Optional fixed offset in hours applied to derive local times",
    )

    @field_validator("offset_hours")
    def validate_offset_hours(cls, value: Optional[float]) -> Optional[float]:
        if value is None:
            return value
        if not -24.0 <= value <= 24.0:
            raise ValueError("offset_hours must be within ±24 hours")
        return value


class SunTimesQueryParams(_LocalTimesQuery):
    """Validated query parameters for the ``/sun/times`` endpoint."""

    height_m: float = Field(0.0, ge=0.0, description="Observer height in meters")


class SunAngleQueryParams(PositionQueryParams):
    """Validated query parameters for the ``/sun/angle`` endpoint."""

    angle: float = Field(..., ge=-90.0, le=90.0, description="Solar altitude in degrees")
    height_m: float = Field(0.0, ge=0.0, description="Observer height in meters")


class MoonTimesQueryParams(_LocalTimesQuery):
    """Validated query parameters for the ``/moon/times`` endpoint."""

    in_utc: bool = Field(False, description="Search the UTC day instead of the local one")


class SunPositionResponse(BaseModel):
    """Sun azimuth and altitude in radians."""

    ok: bool = True
    time_utc: str = Field(..., description="Requested instant in UTC (ISO-8601)")
    latitude: float
    longitude: float
    azimuth: float = Field(..., description="Radians from south, positive westward")
    altitude: float = Field(..., description="Radians above the horizon")


class SunTimesResponse(BaseModel):
    """Sun event times for one day."""

    ok: bool = True
    status: DaylightStatus = Field(..., description="Computation status")
    latitude: float
    longitude: float
    height_m: float
    times_utc: Dict[str, Optional[str]] = Field(
        ..., description="Event name to UTC time (ISO-8601); null when not reached"
    )
    offset_hours: Optional[float] = None
    times_local: Optional[Dict[str, Optional[str]]] = Field(
        None, description="Event times expressed in local time when offset provided"
    )


class SunAngleResponse(BaseModel):
    """Times the sun crosses a custom altitude."""

    ok: bool = True
    angle: float
    latitude: float
    longitude: float
    rising_utc: Optional[str] = None
    setting_utc: Optional[str] = None


class MoonPositionResponse(BaseModel):
    """Moon horizontal position."""

    ok: bool = True
    time_utc: str
    latitude: float
    longitude: float
    azimuth: float
    altitude: float
    distance_km: float
    parallactic_angle: float


class MoonIlluminationResponse(BaseModel):
    """Moon illuminated fraction and phase."""

    ok: bool = True
    time_utc: str
    fraction: float
    phase: float
    angle: float


class MoonTimesResponse(BaseModel):
    """Moonrise and moonset within a day."""

    ok: bool = True
    latitude: float
    longitude: float
    rise_utc: Optional[str] = None
    set_utc: Optional[str] = None
    always_up: bool = False
    always_down: bool = False
    offset_hours: Optional[float] = None
    rise_local: Optional[str] = None
    set_local: Optional[str] = None


class HealthResponse(BaseModel):
    """Health-check response."""

    ok: bool = True
    sun_events: List[str]


class ErrorResponse(BaseModel):
    """Error payload."""

    ok: bool = False
    code: str
    error: str
