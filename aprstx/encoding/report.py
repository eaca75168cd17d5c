"""Compose the body of an APRS WX report from an observation."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from aprstx.encoding.fields import (
    format_datetime,
    format_humidity,
    format_luminosity,
    format_mph_speed,
    format_pressure,
    format_rain,
    format_temperature,
    format_wind_direction,
)
from aprstx.encoding.position import format_position
from aprstx.errors import APRSValidationError
from aprstx.models.wx import Extension, Observation, Weather

# Optional weather fields appended after the temperature, in wire order.
_RAIN_FIELDS = (("rain1h", "r"), ("rain24h", "p"), ("rainSinceMidnight", "P"))


def to_observation(value: Union[Observation, Mapping[str, Any]]) -> Observation:
    """Return ``value`` as an :class:`Observation`, validating mappings."""
    if isinstance(value, Observation):
        return value
    if not isinstance(value, Mapping):
        raise APRSValidationError(
            f"Observation must be a mapping, got {type(value).__name__}"
        )
    try:
        return Observation.model_validate(value)
    except ValidationError as e:
        raise APRSValidationError(f"Invalid observation: {e}") from e


def format_wx_report(
    observation: Union[Observation, Mapping[str, Any]],
    now: Optional[datetime] = None,
) -> str:
    """Return the WX report body for ``observation``.

    The timestamp falls back to ``now`` (or the current UTC time).  Wind
    direction and speed come from the ``extension`` block, then from the
    top-level ``course`` and ``speed`` fields.  Rain, pressure, humidity
    and luminosity are only emitted when present.
    """
    obs = to_observation(observation)
    if obs.longitude is None:
        raise APRSValidationError("Missing longitude value")
    if obs.latitude is None:
        raise APRSValidationError("Missing latitude value")

    e = obs.extension or Extension()
    w = obs.weather or Weather()
    course = e.courseDeg if e.courseDeg is not None else obs.course
    speed = e.speedMPerS if e.speedMPerS is not None else obs.speed
    timestamp = obs.timestamp or now or datetime.now(timezone.utc)

    msg = format_datetime(timestamp)
    msg += format_position(obs.longitude, obs.latitude)
    msg += format_wind_direction(course)
    msg += f"/{format_mph_speed(speed)}"
    msg += f"g{format_mph_speed(w.windGust)}"
    msg += format_temperature(w.temperature)
    for name, prefix in _RAIN_FIELDS:
        value = getattr(w, name)
        if value is not None:
            msg += f"{prefix}{format_rain(value)}"
    if w.pressure is not None:
        msg += format_pressure(w.pressure)
    if w.humidity is not None:
        msg += format_humidity(w.humidity)
    if w.luminosity is not None:
        msg += format_luminosity(w.luminosity)

    if obs.comment is not None:
        msg += obs.comment
    return msg
