"""JSON event logging for the transmitter and its HTTP surface.

Every event is one JSON object on the ``aprstx`` logger.  Login secrets
never reach the log: fields named like a passcode are masked, as are the
authentication headers of HTTP requests.
"""

import json
import logging
import time
import uuid
from typing import Callable, Dict, Mapping

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


LOG = logging.getLogger("aprstx")

REDACTED = "<redacted>"
_SECRET_FIELDS = {"passcode", "password", "pass"}
_SECRET_HEADERS = {"authorization", "x-api-key"}


def configure_logging(level: int = logging.INFO) -> logging.Logger:
    """Attach a stream handler to the ``aprstx`` logger once and set its level."""
    if not LOG.hasHandlers():
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
        LOG.addHandler(handler)
    LOG.setLevel(level)
    return LOG


configure_logging()


def _event(level: str, event: str, fields: Mapping[str, object]) -> str:
    log = {"level": level, "event": event}
    for k, v in fields.items():
        log[k] = REDACTED if k.lower() in _SECRET_FIELDS else v
    return json.dumps(log, default=str)


def log_debug(event: str, **kwargs: object) -> None:
    if LOG.isEnabledFor(logging.DEBUG):
        LOG.debug(_event("debug", event, kwargs))


def log_info(event: str, **kwargs: object) -> None:
    """Log an informational event as structured JSON."""
    LOG.info(_event("info", event, kwargs))


def log_warning(event: str, **kwargs: object) -> None:
    LOG.warning(_event("warning", event, kwargs))


def log_error(event: str, **kwargs: object) -> None:
    LOG.error(_event("error", event, kwargs))


def _redact_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    """Mask the API key and authorization headers."""
    return {
        k: REDACTED if k.lower() in _SECRET_HEADERS else v
        for k, v in headers.items()
    }


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Log each HTTP request as an ``http_request`` event.

    Server errors are logged at error level and client errors at warning
    level.  The request id is taken from ``x-request-id`` (or generated) and
    echoed on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        rid = request.headers.get("x-request-id") or str(uuid.uuid4())
        start = time.monotonic()

        response = await call_next(request)

        if response.status_code >= 500:
            emit = log_error
        elif response.status_code >= 400:
            emit = log_warning
        else:
            emit = log_info
        emit(
            "http_request",
            request_id=rid,
            method=request.method,
            path=request.url.path,
            query=dict(request.query_params),
            headers=_redact_headers(request.headers),
            status=response.status_code,
            duration_ms=int((time.monotonic() - start) * 1000),
        )
        response.headers["x-request-id"] = rid
        return response
