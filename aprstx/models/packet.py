"""Pydantic models for packet framing and APRS-IS login."""

from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# Passcode sent by stations without a verified APRS-IS passcode.
UNVERIFIED_PASSCODE = "-1"


class Callsign(BaseModel):
    """Structured station identifier, rendered as ``CALL`` or ``CALL-SSID``."""

    call: str = Field(min_length=1)
    ssid: Optional[int] = Field(None, ge=0, le=15)


CallsignLike = Union[str, Callsign]


class Packet(BaseModel):
    """Envelope fields of one APRS packet.

    ``to`` defaults to ``APRS`` and ``via`` to ``TCPIP*`` when rendered by
    :func:`aprstx.encoding.framing.format_packet`.
    """

    model_config = ConfigDict(populate_by_name=True)

    from_: CallsignLike = Field(alias="from")
    to: Optional[CallsignLike] = None
    via: Optional[Union[str, List[CallsignLike]]] = None
    data: str = ""

    def format(self) -> str:
        """Return the packet text ``FROM>TO,VIA:DATA``."""
        from aprstx.encoding.framing import format_packet

        return format_packet(self.from_, self.to, self.via, self.data)


class Credentials(BaseModel):
    """APRS-IS login credentials."""

    username: str
    passcode: str = Field(UNVERIFIED_PASSCODE, repr=False)
