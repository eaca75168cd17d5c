"""Adapter exports."""

from .aprsis import APRSISClient, LoginStateMachine, SessionState, send
from .tx import build_packet, resolve_packet, transmit

__all__ = [
    "APRSISClient",
    "LoginStateMachine",
    "SessionState",
    "send",
    "build_packet",
    "resolve_packet",
    "transmit",
]
