"""Callsign formatting, packet framing and the APRS-IS login line."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import ValidationError

from aprstx import __version__
from aprstx.errors import APRSValidationError, InvalidCallsignError
from aprstx.models.packet import UNVERIFIED_PASSCODE, Callsign, Packet

DEFAULT_DESTINATION = "APRS"
# Path marker for packets injected into APRS-IS over TCP.
DEFAULT_VIA = "TCPIP*"
CLIENT_VERSION = f"aprstx {__version__}"


def format_callsign(value: Any) -> str:
    """Render a callsign as ``CALL`` or ``CALL-SSID``.

    Strings are returned unchanged.  Anything else must be a
    :class:`Callsign` or a mapping with a non-empty ``call``.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        try:
            value = Callsign.model_validate(value)
        except ValidationError as e:
            raise InvalidCallsignError(f"Invalid callsign {value!r}: {e}") from e
    if not isinstance(value, Callsign):
        raise InvalidCallsignError(
            f"Callsign must be a string or object, got {type(value).__name__}"
        )
    if value.ssid is None:
        return value.call
    return f"{value.call}-{value.ssid}"


def format_via(value: Any) -> str:
    """Build the digipeater path that follows the destination."""
    if value is None:
        return DEFAULT_VIA
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return ",".join(format_callsign(v) for v in value)
    raise APRSValidationError(f"Unsupported via type {type(value).__name__}")


def format_packet(from_: Any, to: Any = None, via: Any = None, data: str = "") -> str:
    """Return the packet text ``FROM>TO,VIA:DATA``."""
    f = format_callsign(from_)
    if not f:
        raise InvalidCallsignError("Missing From callsign")
    t = format_callsign(to or DEFAULT_DESTINATION)
    return f"{f}>{t},{format_via(via)}:{data}"


def render_packet(packet: Packet) -> str:
    """Frame a :class:`Packet` model."""
    return packet.format()


def format_login(
    username: str,
    passcode: Optional[str] = None,
    version: str = CLIENT_VERSION,
) -> str:
    """Return the APRS-IS login command (without line terminator)."""
    if passcode is None:
        passcode = UNVERIFIED_PASSCODE
    return f"user {username} pass {passcode} vers {version}"
