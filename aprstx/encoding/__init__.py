"""WX report encoders and packet framing."""

from .fields import (
    format_datetime,
    format_humidity,
    format_luminosity,
    format_mph_speed,
    format_pressure,
    format_rain,
    format_temperature,
    format_wind_direction,
)
from .framing import format_callsign, format_login, format_packet, format_via, render_packet
from .position import format_position
from .report import format_wx_report

__all__ = [
    "format_datetime",
    "format_temperature",
    "format_wind_direction",
    "format_mph_speed",
    "format_rain",
    "format_pressure",
    "format_humidity",
    "format_luminosity",
    "format_position",
    "format_wx_report",
    "format_callsign",
    "format_via",
    "format_packet",
    "format_login",
    "render_packet",
]
