"""Pydantic models for weather observations.

An ``Observation`` mirrors the JSON payload accepted by the transmit
service.  Values are in SI/metric units (degrees Celsius, metres per
second, millimetres, hectopascals); conversion to the imperial and mixed
units of the APRS WX format happens in :mod:`aprstx.encoding.fields`, so
callers never pre-convert.  Every measurement is optional: a missing value
is encoded as the format's "unavailable" filler or left out entirely.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator


class Extension(BaseModel):
    """Instantaneous wind vector carried alongside the position."""

    courseDeg: Optional[float] = Field(
        None, validation_alias=AliasChoices("courseDeg", "course")
    )  # degrees clockwise from true north
    speedMPerS: Optional[float] = Field(
        None, validation_alias=AliasChoices("speedMPerS", "speed")
    )


class Weather(BaseModel):
    """Weather block of an observation."""

    windGust: Optional[float] = None  # m/s
    temperature: Optional[float] = None  # degrees Celsius
    rain1h: Optional[float] = None  # mm
    rain24h: Optional[float] = None  # mm
    rainSinceMidnight: Optional[float] = None  # mm
    pressure: Optional[float] = None  # hPa
    humidity: Optional[float] = None  # percent
    luminosity: Optional[float] = None  # W/m^2


class Observation(BaseModel):
    """A single weather station observation.

    ``longitude`` and ``latitude`` are required for a WX report but are
    optional here so that the report composer can reject their absence
    with an aprstx validation error of its own.
    """

    timestamp: Optional[datetime] = None
    longitude: Optional[float] = None
    latitude: Optional[float] = None
    course: Optional[float] = None
    speed: Optional[float] = None
    extension: Optional[Extension] = None
    weather: Optional[Weather] = None
    comment: Optional[str] = None

    @field_validator("timestamp")
    @classmethod
    def _to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
