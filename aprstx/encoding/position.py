"""Latitude/longitude to the APRS ``DDMM.mmN/DDDMM.mmW`` position token."""

from __future__ import annotations

import math
from typing import Sequence, Tuple

from aprstx.errors import APRSValidationError, OutOfRangeError


def _degrees_minutes(value: float, width: int) -> str:
    degrees = math.floor(value)
    minutes = f"{(value - degrees) * 60:05.2f}"
    if minutes == "60.00":
        # Never emit an invalid 60 minute field.
        minutes = "59.99"
    return f"{degrees:0{width}d}{minutes}"


def split_position(coordinates: Sequence[float]) -> Tuple[float, float]:
    """Validate a ``(longitude, latitude)`` pair and return it as floats."""
    if isinstance(coordinates, (str, bytes)) or not isinstance(coordinates, Sequence):
        raise APRSValidationError("Coordinates must be a (longitude, latitude) pair")
    if len(coordinates) < 2:
        raise APRSValidationError("Coordinates must contain longitude and latitude")
    lon, lat = coordinates[0], coordinates[1]
    for name, value in (("Longitude", lon), ("Latitude", lat)):
        if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
            raise APRSValidationError(f"{name} value {value!r} is not a number")
    if lon < -180 or lon > 180:
        raise OutOfRangeError("Longitude", lon, -180, 180)
    if lat < -90 or lat > 90:
        raise OutOfRangeError("Latitude", lat, -90, 90)
    return float(lon), float(lat)


def format_position(longitude: float, latitude: float) -> str:
    """Encode signed decimal degrees as an APRS uncompressed position.

    >>> format_position(-72.0292, 49.0583)
    '4903.50N/07201.75W'
    """
    lon, lat = split_position((longitude, latitude))
    lat_h = "S" if lat < 0 else "N"
    lon_h = "W" if lon < 0 else "E"
    return (
        f"{_degrees_minutes(abs(lat), 2)}{lat_h}"
        f"/{_degrees_minutes(abs(lon), 3)}{lon_h}"
    )
