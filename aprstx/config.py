"""Runtime configuration read from environment variables."""

from __future__ import annotations

import os
from typing import List, Optional, Union

from pydantic import BaseModel, ValidationError

from aprstx.errors import APRSConfigError
from aprstx.models.packet import UNVERIFIED_PASSCODE

DEFAULT_HOST = "cwop.aprs.net"
DEFAULT_PORT = 14580
DEFAULT_TIMEOUT = 20.0


class Settings(BaseModel):
    """APRS-IS server, login and packet defaults."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    timeout: float = DEFAULT_TIMEOUT
    username: Optional[str] = None
    passcode: str = UNVERIFIED_PASSCODE
    from_call: Optional[str] = None
    to_call: Optional[str] = None
    via: Optional[Union[str, List[str]]] = None
    api_key: Optional[str] = None


def _parse_via(value: Optional[str]) -> Optional[Union[str, List[str]]]:
    """``APRS_VIA`` holds a comma separated list, or one verbatim path token."""
    if value is None:
        return None
    if "," in value:
        return [v.strip() for v in value.split(",") if v.strip()]
    return value


# Settings field -> environment variable
ENVIRONMENT = {
    "host": "APRS_IS_HOST",
    "port": "APRS_IS_PORT",
    "timeout": "APRS_IS_TIMEOUT",
    "username": "APRS_USER",
    "passcode": "APRS_PASSCODE",
    "from_call": "APRS_FROM",
    "to_call": "APRS_TO",
    "via": "APRS_VIA",
    "api_key": "API_KEY",
}


def get_settings() -> Settings:
    """Build :class:`Settings` from the current environment.

    Unset or empty variables keep their defaults.  A value pydantic cannot
    coerce (``APRS_IS_PORT=abc``) raises :class:`APRSConfigError` naming
    the variable.
    """
    values = {}
    for field, name in ENVIRONMENT.items():
        value = os.getenv(name)
        if value:
            values[field] = _parse_via(value) if field == "via" else value
    try:
        return Settings.model_validate(values)
    except ValidationError as e:
        problems = "; ".join(
            f"{ENVIRONMENT.get(str(err['loc'][0]), err['loc'][0])}: {err['msg']}"
            for err in e.errors()
        )
        raise APRSConfigError(f"Invalid configuration: {problems}") from e
