"""Field encoders for the APRS WX report.

Each encoder turns one optional measurement into the fixed-width token the
WX format expects.  ``None`` always yields the format's "unavailable"
filler.  A value that converts to something outside the representable
range raises :class:`~aprstx.errors.OutOfRangeError`.

Conversions use Python's ``round()`` (round half to even), so for example
1013.25 hPa becomes ``b10132``.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Optional

from aprstx.errors import APRSValidationError, OutOfRangeError

MPS_TO_MPH = 2.23693629
MM_TO_INCH = 0.0393700787402

# "000" means no data, so due north is sent as 360.
WIND_DIRECTION_REMAP = {0: 360}
# Two digits only: 100% is sent as "00".
HUMIDITY_REMAP = {100: 0}
# Irradiance above 999 W/m^2 switches to lower case "l" with 1000 removed.
LUMINOSITY_HIGH = 1000


def _round(field: str, value: float) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise APRSValidationError(f"{field} value {value!r} is not a number")
    if not math.isfinite(value):
        raise APRSValidationError(f"{field} value {value} is not a finite number")
    return round(value)


def _check_range(field: str, value: int, low: int, high: int) -> int:
    if value < low or value > high:
        raise OutOfRangeError(field, value, low, high)
    return value


def format_datetime(value: datetime) -> str:
    """Return the ``@DDHHMMz`` timestamp token for a UTC instant.

    Naive datetimes are taken to be UTC already.
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return f"@{value.day:02d}{value.hour:02d}{value.minute:02d}z"


def format_temperature(value: Optional[float]) -> str:
    """Degrees Celsius to the ``tNNN`` Fahrenheit token."""
    if value is None:
        return "t..."
    f = _check_range("Temperature", _round("Temperature", value * 9 / 5) + 32, -99, 999)
    if f < 0:
        return f"t-{abs(f):02d}"
    return f"t{f:03d}"


def format_wind_direction(value: Optional[float]) -> str:
    """Degrees clockwise from true north to the ``_DDD`` token."""
    if value is None:
        return "_..."
    deg = _check_range("Wind direction", _round("Wind direction", value), 0, 360)
    deg = WIND_DIRECTION_REMAP.get(deg, deg)
    return f"_{deg:03d}"


def format_mph_speed(value: Optional[float]) -> str:
    """Metres per second to a bare three digit miles per hour value."""
    if value is None:
        return "..."
    mph = _round("Wind speed", value * MPS_TO_MPH)
    return f"{_check_range('Wind speed', mph, 0, 999):03d}"


def format_rain(value: Optional[float]) -> str:
    """Millimetres to hundredths of an inch, without the prefix letter."""
    if value is None:
        return "..."
    hundredths = _round("Rain", value * MM_TO_INCH * 100)
    return f"{_check_range('Rain', hundredths, 0, 999):03d}"


def format_pressure(value: Optional[float]) -> str:
    """Hectopascals to the ``bNNNNN`` tenths of a millibar token."""
    if value is None:
        return "b....."
    tenths = _round("Pressure", value * 10)
    return f"b{_check_range('Pressure', tenths, 0, 99999):05d}"


def format_humidity(value: Optional[float]) -> str:
    """Relative humidity in percent to the ``hNN`` token."""
    if value is None:
        return "h.."
    rh = _check_range("Relative humidity", _round("Relative humidity", value), 0, 100)
    rh = HUMIDITY_REMAP.get(rh, rh)
    return f"h{rh:02d}"


def format_luminosity(value: Optional[float]) -> str:
    """Irradiance in W/m^2 to the ``LNNN`` or ``lNNN`` token."""
    if value is None:
        return "L..."
    wm2 = _check_range("Irradiance", _round("Irradiance", value), 0, 1999)
    if wm2 >= LUMINOSITY_HIGH:
        return f"l{wm2 - LUMINOSITY_HIGH:03d}"
    return f"L{wm2:03d}"
