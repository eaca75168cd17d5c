"""Model exports."""

from .api import TxRequest, TxResult
from .packet import UNVERIFIED_PASSCODE, Callsign, Credentials, Packet
from .wx import Extension, Observation, Weather

__all__ = [
    "Callsign",
    "Credentials",
    "Packet",
    "UNVERIFIED_PASSCODE",
    "Extension",
    "Observation",
    "Weather",
    "TxRequest",
    "TxResult",
]
