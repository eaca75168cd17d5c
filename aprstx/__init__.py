"""Encode weather observations as APRS WX reports and send them to CWOP."""

__version__ = "0.1.0"
