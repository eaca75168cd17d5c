"""Turn an incoming payload into an APRS packet and transmit it.

A payload is either a string, sent verbatim as the packet data, or an
observation (a mapping or :class:`~aprstx.models.wx.Observation`) that is
encoded as a WX report.  A mapping may nest the observation under
``data`` and may carry ``from``/``to``/``via`` overrides.  Overrides in the
payload win over the call arguments, which win over the configured
defaults.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from aprstx.adapters import aprsis
from aprstx.config import Settings, get_settings
from aprstx.encoding.framing import format_callsign, render_packet
from aprstx.encoding.report import format_wx_report
from aprstx.errors import APRSValidationError, InvalidCallsignError
from aprstx.middleware.logging import log_info
from aprstx.models.packet import Credentials, Packet
from aprstx.models.wx import Observation


def _payload_data(payload: Any, now: Optional[datetime]) -> str:
    if isinstance(payload, str):
        return payload
    if isinstance(payload, Observation):
        return format_wx_report(payload, now=now)
    if isinstance(payload, Mapping):
        data = payload.get("data") or payload
        if isinstance(data, str):
            return data
        return format_wx_report(data, now=now)
    raise APRSValidationError(f"Invalid payload type {type(payload).__name__}")


def resolve_packet(
    payload: Any,
    from_: Any = None,
    to: Any = None,
    via: Any = None,
    settings: Optional[Settings] = None,
    now: Optional[datetime] = None,
) -> Packet:
    """Apply overrides and defaults and encode the payload data."""
    settings = settings or get_settings()
    overrides = payload if isinstance(payload, Mapping) else {}
    from_ = overrides.get("from") or from_ or settings.from_call
    to = overrides.get("to") or to or settings.to_call
    via = overrides.get("via") or via or settings.via
    if not from_:
        raise InvalidCallsignError("Missing From callsign")

    data = _payload_data(payload, now)
    try:
        return Packet.model_validate({"from": from_, "to": to, "via": via, "data": data})
    except ValidationError as e:
        raise APRSValidationError(f"Invalid packet addressing: {e}") from e


def build_packet(
    payload: Any,
    from_: Any = None,
    to: Any = None,
    via: Any = None,
    settings: Optional[Settings] = None,
    now: Optional[datetime] = None,
) -> str:
    """Return the framed packet text for ``payload`` without sending it."""
    return render_packet(resolve_packet(payload, from_, to, via, settings, now))


async def transmit(
    payload: Any,
    from_: Any = None,
    to: Any = None,
    via: Any = None,
    credentials: Optional[Credentials] = None,
    settings: Optional[Settings] = None,
    connect: aprsis.Connector = aprsis.open_stream_transport,
) -> str:
    """Encode ``payload``, send it to APRS-IS and return the packet text.

    Validation errors are raised before any connection is attempted.  The
    login username defaults to the configured user, then to the source
    callsign.
    """
    settings = settings or get_settings()
    packet = resolve_packet(payload, from_, to, via, settings)
    text = render_packet(packet)
    if credentials is None:
        credentials = Credentials(
            username=settings.username or format_callsign(packet.from_),
            passcode=settings.passcode,
        )
    log_info("aprs_tx_packet", packet=text, host=settings.host, port=settings.port)
    await aprsis.send(
        credentials.username,
        credentials.passcode,
        text,
        host=settings.host,
        port=settings.port,
        timeout=settings.timeout,
        connect=connect,
    )
    return text
