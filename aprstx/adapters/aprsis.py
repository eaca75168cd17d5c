"""APRS-IS transmit client.

Sending one packet to an APRS-IS server (CWOP's ``cwop.aprs.net`` by
default) is a short exchange of CRLF terminated text lines::

    client: user N0CALL pass -1 vers aprstx 0.1.0
    server: # logresp N0CALL unverified, server CWOP-4
    client: N0CALL>APRS,TCPIP*:@021530z4903.50N/07201.75W_...

The exchange is modelled by :class:`LoginStateMachine`, a pure state
machine that knows nothing about sockets.  :class:`APRSISClient` drives it
over a :class:`LineTransport` (asyncio streams in production, a fake in
tests) and runs the whole attempt under a single timeout.  Every call
opens its own connection and closes it exactly once, whatever the outcome.
"""

from __future__ import annotations

import abc
import asyncio
import enum
from typing import Awaitable, Callable, Optional

from aprstx.config import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_TIMEOUT
from aprstx.encoding.framing import CLIENT_VERSION, format_login
from aprstx.errors import (
    APRSError,
    APRSProtocolError,
    APRSTimeoutError,
    APRSTransportError,
)
from aprstx.middleware.logging import log_debug, log_error, log_info, log_warning

LOGRESP_PREFIX = "# logresp "
LINE_END = "\r\n"


class SessionState(enum.Enum):
    START = "start"
    LOGIN_SENT = "login_sent"
    PACKET_SENT = "packet_sent"
    DONE = "done"
    ERROR = "error"


class Event(enum.Enum):
    CONNECTED = "connected"
    LINE = "line"
    EOF = "eof"
    PACKET_WRITTEN = "packet_written"
    CLOSED = "closed"


class LoginStateMachine:
    """Login, send one packet, close.

    :meth:`handle` feeds one event to the handler of the current state and
    returns the line to write next, if any.  Protocol violations move the
    machine to ``ERROR`` and raise :class:`APRSProtocolError`.
    """

    def __init__(self, login_line: str, packet_line: str) -> None:
        self.login_line = login_line
        self.packet_line = packet_line
        self.state = SessionState.START
        self._packet_written = False
        self._handlers = {
            SessionState.START: self._on_start,
            SessionState.LOGIN_SENT: self._on_login_sent,
            SessionState.PACKET_SENT: self._on_packet_sent,
        }

    @property
    def finished(self) -> bool:
        return self.state in (SessionState.DONE, SessionState.ERROR)

    def handle(self, event: Event, line: Optional[str] = None) -> Optional[str]:
        handler = self._handlers.get(self.state)
        if handler is None:
            raise APRSProtocolError(
                f"Event {event.value} received in final state {self.state.value}"
            )
        return handler(event, line)

    def fail(self) -> None:
        """Move to ``ERROR``; used for transport failures and timeouts."""
        if self.state is not SessionState.DONE:
            self.state = SessionState.ERROR

    def _protocol_error(self, message: str) -> APRSProtocolError:
        self.state = SessionState.ERROR
        return APRSProtocolError(message)

    def _on_start(self, event: Event, line: Optional[str]) -> Optional[str]:
        if event is not Event.CONNECTED:
            raise self._protocol_error(f"Unexpected {event.value} before login")
        self.state = SessionState.LOGIN_SENT
        return self.login_line

    def _on_login_sent(self, event: Event, line: Optional[str]) -> Optional[str]:
        if event is Event.EOF:
            raise self._protocol_error("Connection closed before login response")
        if event is not Event.LINE or line is None:
            raise self._protocol_error(f"Unexpected {event.value} while logging in")
        if line.startswith(LOGRESP_PREFIX):
            self.state = SessionState.PACKET_SENT
            return self.packet_line
        raise self._protocol_error(
            f"Received invalid login response from APRS-IS: {line!r}"
        )

    def _on_packet_sent(self, event: Event, line: Optional[str]) -> Optional[str]:
        if event is Event.PACKET_WRITTEN:
            self._packet_written = True
        elif event is Event.CLOSED:
            if not self._packet_written:
                raise self._protocol_error("Connection closed before packet was written")
            self.state = SessionState.DONE
        # anything the server echoes once the packet is out is ignored
        return None


class LineTransport(abc.ABC):
    """Line oriented connection used by :class:`APRSISClient`."""

    @abc.abstractmethod
    async def send_line(self, line: str) -> None:
        """Write ``line`` followed by CRLF and wait until it is flushed."""

    @abc.abstractmethod
    async def receive_line(self) -> Optional[str]:
        """Return the next line without its terminator, ``None`` at EOF."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Close the connection gracefully."""


class StreamLineTransport(LineTransport):
    """:class:`LineTransport` over an asyncio stream pair."""

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self.reader = reader
        self.writer = writer

    async def send_line(self, line: str) -> None:
        self.writer.write(f"{line}{LINE_END}".encode("utf-8"))
        await self.writer.drain()

    async def receive_line(self) -> Optional[str]:
        try:
            data = await self.reader.readline()
        except (asyncio.LimitOverrunError, ValueError) as e:
            raise APRSProtocolError(f"Malformed line from APRS-IS: {e}") from e
        if not data:
            return None
        return data.decode("utf-8", errors="replace").rstrip("\r\n")

    async def close(self) -> None:
        if self.writer.can_write_eof():
            try:
                self.writer.write_eof()
            except OSError as e:
                log_debug("aprsis_write_eof_failed", error=str(e))
        self.writer.close()
        try:
            await self.writer.wait_closed()
        except OSError as e:
            log_debug("aprsis_close_failed", error=str(e))


Connector = Callable[[str, int], Awaitable[LineTransport]]


async def open_stream_transport(host: str, port: int) -> LineTransport:
    """Open a TCP connection to ``host:port``."""
    reader, writer = await asyncio.open_connection(host, port)
    return StreamLineTransport(reader, writer)


class APRSISClient:
    """Send single packets to an APRS-IS server.

    Each :meth:`send` is one independent attempt: connect, log in, wait
    for ``# logresp``, write the packet, close.  There is no retry.
    """

    def __init__(
        self,
        username: str,
        passcode: Optional[str] = None,
        *,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        timeout: float = DEFAULT_TIMEOUT,
        version: str = CLIENT_VERSION,
        connect: Connector = open_stream_transport,
    ) -> None:
        self.username = username
        self.passcode = passcode
        self.host = host
        self.port = port
        self.timeout = timeout
        self.version = version
        self._connect = connect

    async def send(self, packet: str) -> None:
        """Transmit ``packet``; returns once it is written and the socket closed.

        Raises :class:`APRSProtocolError`, :class:`APRSTransportError` or
        :class:`APRSTimeoutError` on failure.
        """
        session = _Session(self, packet)
        try:
            await asyncio.wait_for(session.run(), self.timeout)
        except asyncio.TimeoutError as e:
            session.machine.fail()
            log_warning(
                "aprsis_timeout",
                host=self.host,
                port=self.port,
                timeout=self.timeout,
                state=session.machine.state.value,
            )
            raise APRSTimeoutError("Timed out while sending APRS packet") from e
        except APRSError as e:
            session.machine.fail()
            log_error("aprsis_error", host=self.host, **e.to_dict())
            raise
        except OSError as e:
            session.machine.fail()
            log_error("aprsis_error", host=self.host, category="transport", message=str(e))
            raise APRSTransportError(f"APRS-IS connection failed: {e}") from e
        finally:
            await session.teardown()


class _Session:
    """State of one :meth:`APRSISClient.send` call."""

    def __init__(self, client: APRSISClient, packet: str) -> None:
        self.client = client
        self.machine = LoginStateMachine(
            format_login(client.username, client.passcode, client.version), packet
        )
        self.transport: Optional[LineTransport] = None
        self.closed = False

    async def run(self) -> None:
        client = self.client
        log_info("aprsis_connect", host=client.host, port=client.port)
        self.transport = await client._connect(client.host, client.port)

        await self.transport.send_line(self.machine.handle(Event.CONNECTED))
        log_info("aprsis_login_sent", username=client.username, version=client.version)

        line = await self.transport.receive_line()
        if line is None:
            self.machine.handle(Event.EOF)
        packet_line = self.machine.handle(Event.LINE, line)
        log_info("aprsis_login_ack", response=line)
        await self.transport.send_line(packet_line)

        self.machine.handle(Event.PACKET_WRITTEN)
        log_info("aprsis_packet_sent", packet=self.machine.packet_line)
        await self.close()
        self.machine.handle(Event.CLOSED)

    async def close(self) -> None:
        if self.closed or self.transport is None:
            return
        self.closed = True
        await self.transport.close()

    async def teardown(self) -> None:
        """Close the connection if the run did not get that far."""
        try:
            await self.close()
        except OSError as e:
            log_debug("aprsis_teardown_failed", error=str(e))


async def send(
    username: str,
    passcode: Optional[str],
    packet: str,
    *,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    timeout: float = DEFAULT_TIMEOUT,
    version: str = CLIENT_VERSION,
    connect: Connector = open_stream_transport,
) -> None:
    """Log in to APRS-IS as ``username`` and send one packet."""
    client = APRSISClient(
        username,
        passcode,
        host=host,
        port=port,
        timeout=timeout,
        version=version,
        connect=connect,
    )
    await client.send(packet)
