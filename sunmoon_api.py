"""FastAPI application exposing sun and moon computations."""

from __future__ import annotations

import json
import logging
import os
import time
from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta, timezone
from typing import Annotated, Dict, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from models import (
    DaylightStatus,
    ErrorResponse,
    HealthResponse,
    IlluminationQueryParams,
    MoonIlluminationResponse,
    MoonPositionResponse,
    MoonTimesQueryParams,
    MoonTimesResponse,
    PositionQueryParams,
    SunAngleQueryParams,
    SunAngleResponse,
    SunPositionResponse,
    SunTimesQueryParams,
    SunTimesResponse,
)
from sunmoon import (
    SUN_TIME_ANGLES,
    Coordinate,
    moon_illumination,
    moon_position,
    moon_schedule,
    sun_angle_times,
    sun_position,
    sun_times,
)
from sunmoon.astro import RAD

LOG_LEVEL = os.environ.get("SUNMOON_LOG_LEVEL", "INFO").upper()
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("SUNMOON_ALLOWED_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

logging.basicConfig(level=LOG_LEVEL, format="%(message)s")
LOGGER = logging.getLogger("sunmoon-api")

APP_DESCRIPTION = "Sun and moon positions, phases and rise/set times from low-precision formulas"

SUN_EVENTS = ["solar_noon", "nadir"] + [
    name for _, rising, setting in SUN_TIME_ANGLES for name in (rising, setting)
]


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - exercised in integration tests
    LOGGER.info(
        json.dumps(
            {"event": "startup", "allowed_origins": ALLOWED_ORIGINS, "sun_events": SUN_EVENTS}
        )
    )
    yield


app = FastAPI(
    title="Sunmoon API",
    description=APP_DESCRIPTION,
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _format_utc(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    return dt.astimezone(UTC).isoformat().replace("+00:00", "Z")


def _format_local(dt: Optional[datetime], offset_hours: Optional[float]) -> Optional[str]:
    if dt is None or offset_hours is None:
        return None
    offset = timezone(timedelta(hours=offset_hours))
    return dt.astimezone(offset).isoformat()


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    payload = ErrorResponse(code=code, error=message)
    LOGGER.error(json.dumps({"event": "error", "code": code, "message": message}))
    return JSONResponse(status_code=status_code, content=payload.model_dump())


def _log_request(event: str, start_time: float, **fields: object) -> None:
    duration_ms = (time.perf_counter() - start_time) * 1000.0
    LOGGER.info(json.dumps({"event": event, **fields, "duration_ms": round(duration_ms, 3)}))


def _daylight_status(times: Dict[str, Optional[datetime]], coordinate: Coordinate) -> DaylightStatus:
    if times["sunrise"] is not None or times["sunset"] is not None:
        return DaylightStatus.ok
    noon = sun_position(times["solar_noon"], coordinate)
    if noon.altitude > SUN_TIME_ANGLES[0][0] * RAD:
        return DaylightStatus.polar_day
    return DaylightStatus.polar_night


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = ", ".join(error["msg"] for error in exc.errors())
    return _error_response(422, "validation_error", messages)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict):
        message = detail.get("error") or detail.get("message") or str(detail)
    elif isinstance(detail, list):
        message = ", ".join(str(item) for item in detail)
    else:
        message = str(detail)
    return _error_response(exc.status_code, f"http_{exc.status_code}", message)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("Unhandled exception", exc_info=exc)
    return _error_response(500, "internal_error", "Unhandled server error")


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(ok=True, sun_events=SUN_EVENTS)


@app.get("/sun", response_model=SunPositionResponse, responses=ERROR_RESPONSES)
def sun_position_endpoint(params: Annotated[PositionQueryParams, Query()]) -> SunPositionResponse:
    start_time = time.perf_counter()
    position = sun_position(params.when, Coordinate(params.lat, params.lon))
    _log_request("sun_position", start_time, lat=params.lat, lon=params.lon)
    return SunPositionResponse(
        time_utc=_format_utc(params.when),
        latitude=params.lat,
        longitude=params.lon,
        azimuth=position.azimuth,
        altitude=position.altitude,
    )


@app.get("/sun/times", response_model=SunTimesResponse, responses=ERROR_RESPONSES)
def sun_times_endpoint(params: Annotated[SunTimesQueryParams, Query()]) -> SunTimesResponse:
    start_time = time.perf_counter()
    coordinate = Coordinate(params.lat, params.lon)
    times = sun_times(params.when, coordinate, height=params.height_m)
    status = _daylight_status(times, coordinate)

    times_local = None
    if params.offset_hours is not None:
        times_local = {name: _format_local(dt, params.offset_hours) for name, dt in times.items()}

    _log_request(
        "sun_times",
        start_time,
        lat=params.lat,
        lon=params.lon,
        time=_format_utc(params.when),
        status=status.value,
    )
    return SunTimesResponse(
        status=status,
        latitude=params.lat,
        longitude=params.lon,
        height_m=params.height_m,
        times_utc={name: _format_utc(dt) for name, dt in times.items()},
        offset_hours=params.offset_hours,
        times_local=times_local,
    )


@app.get("/sun/angle", response_model=SunAngleResponse, responses=ERROR_RESPONSES)
def sun_angle_endpoint(params: Annotated[SunAngleQueryParams, Query()]) -> SunAngleResponse:
    start_time = time.perf_counter()
    crossing = sun_angle_times(
        params.angle, params.when, Coordinate(params.lat, params.lon), params.height_m
    )
    _log_request(
        "sun_angle",
        start_time,
        lat=params.lat,
        lon=params.lon,
        angle=params.angle,
        reached=crossing.rising is not None,
    )
    return SunAngleResponse(
        angle=params.angle,
        latitude=params.lat,
        longitude=params.lon,
        rising_utc=_format_utc(crossing.rising),
        setting_utc=_format_utc(crossing.setting),
    )


@app.get("/moon", response_model=MoonPositionResponse, responses=ERROR_RESPONSES)
def moon_position_endpoint(params: Annotated[PositionQueryParams, Query()]) -> MoonPositionResponse:
    start_time = time.perf_counter()
    position = moon_position(params.when, Coordinate(params.lat, params.lon))
    _log_request("moon_position", start_time, lat=params.lat, lon=params.lon)
    return MoonPositionResponse(
        time_utc=_format_utc(params.when),
        latitude=params.lat,
        longitude=params.lon,
        azimuth=position.azimuth,
        altitude=position.altitude,
        distance_km=position.distance,
        parallactic_angle=position.parallactic_angle,
    )


@app.get(
    "/moon/illumination", response_model=MoonIlluminationResponse, responses=ERROR_RESPONSES
)
def moon_illumination_endpoint(
    params: Annotated[IlluminationQueryParams, Query()],
) -> MoonIlluminationResponse:
    start_time = time.perf_counter()
    illumination = moon_illumination(params.when)
    _log_request("moon_illumination", start_time, time=_format_utc(params.when))
    return MoonIlluminationResponse(
        time_utc=_format_utc(params.when),
        fraction=illumination.fraction,
        phase=illumination.phase,
        angle=illumination.angle,
    )


@app.get("/moon/times", response_model=MoonTimesResponse, responses=ERROR_RESPONSES)
def moon_times_endpoint(params: Annotated[MoonTimesQueryParams, Query()]) -> MoonTimesResponse:
    start_time = time.perf_counter()
    schedule = moon_schedule(params.when, Coordinate(params.lat, params.lon), params.in_utc)
    _log_request(
        "moon_times",
        start_time,
        lat=params.lat,
        lon=params.lon,
        time=params.when.isoformat(),
        always_up=schedule.always_up,
        always_down=schedule.always_down,
    )
    return MoonTimesResponse(
        latitude=params.lat,
        longitude=params.lon,
        rise_utc=_format_utc(schedule.rise),
        set_utc=_format_utc(schedule.set),
        always_up=schedule.always_up,
        always_down=schedule.always_down,
        offset_hours=params.offset_hours,
        rise_local=_format_local(schedule.rise, params.offset_hours),
        set_local=_format_local(schedule.set, params.offset_hours),
    )
