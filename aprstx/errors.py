"""Exception hierarchy shared by the encoders and the APRS-IS client.

Every error carries a ``category`` so that callers (the HTTP layer, for
example) can report a structured failure without inspecting the type.
Validation errors are raised from input alone, before any network I/O.
"""

from __future__ import annotations

from typing import Any, Dict


class APRSError(Exception):
    """Base class for all aprstx failures."""

    category = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, str]:
        """Return the failure as a ``{"message", "category"}`` mapping."""
        return {"message": self.message, "category": self.category}


class APRSValidationError(APRSError, ValueError):
    """Malformed input: bad measurement, callsign or payload."""

    category = "validation"


class OutOfRangeError(APRSValidationError):
    """A measurement converts to a value the WX format cannot represent."""

    def __init__(self, field: str, value: Any, low: Any, high: Any) -> None:
        super().__init__(f"{field} value {value} is out of range <{low}, {high}>")
        self.field = field
        self.value = value


class InvalidCallsignError(APRSValidationError):
    pass


class APRSProtocolError(APRSError):
    """The APRS-IS server answered with something other than expected."""

    category = "protocol"


class APRSTransportError(APRSError):
    """Connection, read or write failure on the APRS-IS socket."""

    category = "transport"


class APRSTimeoutError(APRSTransportError):
    category = "timeout"


class APRSConfigError(APRSError, ValueError):
    """An environment setting could not be parsed."""

    category = "config"
