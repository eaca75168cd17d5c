"""Request and response bodies of the HTTP API."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .packet import Callsign


class TxRequest(BaseModel):
    """A payload to send, with optional addressing overrides.

    ``payload`` is either packet data sent verbatim or an observation
    object encoded as a WX report.
    """

    model_config = ConfigDict(populate_by_name=True)

    payload: Union[str, Dict[str, Any]]
    from_: Optional[Union[str, Callsign]] = Field(None, alias="from")
    to: Optional[Union[str, Callsign]] = None
    via: Optional[Union[str, List[Union[str, Callsign]]]] = None


class TxResult(BaseModel):
    ok: bool = True
    packet: str
    sent: bool = False
