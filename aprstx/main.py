"""Main application module for aprstx.

This module defines the FastAPI application that exposes the WX report
encoder and the APRS-IS transmitter over HTTP, and mounts an MCP server
so that the same operations are available as tools.  ``create_app``
builds the application; a module-level ``app`` is provided for ASGI
servers like Uvicorn.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader
from fastapi_mcp import FastApiMCP

from . import __version__
from .adapters.aprsis import Connector, open_stream_transport
from .adapters.tx import build_packet, transmit
from .config import Settings, get_settings
from .errors import APRSError
from .middleware import RequestLogMiddleware
from .middleware.logging import log_warning
from .models import TxRequest, TxResult

# HTTP status for each error category.
ERROR_STATUS = {
    "validation": 400,
    "protocol": 502,
    "transport": 502,
    "timeout": 504,
}


def create_app(
    settings: Optional[Settings] = None,
    connect: Connector = open_stream_transport,
) -> FastAPI:
    """Factory function for constructing the FastAPI application.

    ``settings`` defaults to the environment configuration and ``connect``
    to a real TCP connection; both are parameters so that tests can run
    the application against a fake APRS-IS server.
    """
    settings = settings or get_settings()
    app = FastAPI(title="aprstx", version=__version__)

    # -----------------------------------------------------------------------
    # Middleware
    # -----------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLogMiddleware)

    @app.exception_handler(APRSError)
    async def aprs_error_handler(request: Request, exc: APRSError) -> JSONResponse:
        """Report aprstx failures as ``{"error": {"message", "category"}}``."""
        log_warning("aprs_request_failed", path=request.url.path, **exc.to_dict())
        return JSONResponse(
            {"error": exc.to_dict()},
            status_code=ERROR_STATUS.get(exc.category, 500),
        )

    # -----------------------------------------------------------------------
    # API key dependency
    # -----------------------------------------------------------------------
    api_key_header = APIKeyHeader(name="x-api-key", auto_error=False)

    def require_api_key(x_api_key: str = Depends(api_key_header)) -> None:
        """Validate the ``x-api-key`` header against ``API_KEY``."""
        if settings.api_key and x_api_key != settings.api_key:
            raise HTTPException(status_code=401, detail="Missing or invalid API key")

    # -----------------------------------------------------------------------
    # Routes
    # -----------------------------------------------------------------------
    @app.get("/api")
    def api_root():
        """Return a simple service descriptor for programmatic clients."""
        return {
            "ok": True,
            "service": "aprstx",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
            "mcp": "/mcp",
        }

    @app.get("/health")
    def health():
        """Health check endpoint."""
        return {"ok": True}

    @app.post(
        "/api/aprs/packet",
        operation_id="aprs_format_packet",
        tags=["APRS"],
        response_model=TxResult,
    )
    async def rest_aprs_packet(body: TxRequest) -> TxResult:
        """Encode a payload as an APRS packet without sending it.

        A string payload is used as the packet data; an object payload is
        encoded as a WX report (timestamp, position, wind, temperature,
        rain, pressure, humidity, luminosity and comment).
        """
        text = build_packet(body.payload, body.from_, body.to, body.via, settings)
        return TxResult(packet=text)

    @app.post(
        "/api/aprs/tx",
        operation_id="aprs_transmit",
        tags=["APRS"],
        response_model=TxResult,
        dependencies=[Depends(require_api_key)],
    )
    async def rest_aprs_tx(body: TxRequest) -> TxResult:
        """Encode a payload and transmit it to APRS-IS (CWOP).

        Logs in with the configured credentials, waits for the login
        acknowledgement, sends the packet and disconnects.  Validation
        errors are reported as 400, server or connection errors as 502 and
        timeouts as 504.
        """
        text = await transmit(
            body.payload,
            body.from_,
            body.to,
            body.via,
            settings=settings,
            connect=connect,
        )
        return TxResult(packet=text, sent=True)

    # -----------------------------------------------------------------------
    # MCP server mount
    # -----------------------------------------------------------------------
    mcp = FastApiMCP(
        app,
        include_operations=[
            "aprs_format_packet",
            "aprs_transmit",
        ],
    )
    mcp.mount()

    return app


# ---------------------------------------------------------------------------
# FastAPI application instance
# ---------------------------------------------------------------------------
app = create_app()
