import asyncio
from datetime import datetime, timezone

import pytest

from aprstx.adapters.aprsis import LineTransport

LOGRESP = "# logresp N0CALL unverified, server CWOP-4"
BODY = "@021530z4903.50N/07201.75W_200/005g010t077b10132h65L123Test comment"


class FakeTransport(LineTransport):
    """Scripted APRS-IS server connection."""

    def __init__(self, lines=(), hang=False, fail_send_at=None):
        self.incoming = list(lines)
        self.hang = hang
        self.fail_send_at = fail_send_at
        self.sent = []
        self.close_calls = 0

    async def send_line(self, line):
        if self.fail_send_at is not None and len(self.sent) == self.fail_send_at:
            raise ConnectionResetError("connection reset by peer")
        self.sent.append(line)

    async def receive_line(self):
        if self.incoming:
            return self.incoming.pop(0)
        if self.hang:
            await asyncio.Event().wait()
        return None

    async def close(self):
        self.close_calls += 1


class FakeConnector:
    def __init__(self, transport=None, error=None):
        self.transport = transport
        self.error = error
        self.calls = []

    async def __call__(self, host, port):
        self.calls.append((host, port))
        if self.error is not None:
            raise self.error
        return self.transport


@pytest.fixture
def observation():
    return {
        "timestamp": "2024-03-02T15:30:00Z",
        "longitude": -72.0292,
        "latitude": 49.0583,
        "extension": {"courseDeg": 200, "speedMPerS": 2.2352},
        "weather": {
            "windGust": 4.4704,
            "temperature": 25,
            "pressure": 1013.25,
            "humidity": 65,
            "luminosity": 123,
        },
        "comment": "Test comment",
    }


@pytest.fixture
def now():
    return datetime(2024, 3, 2, 15, 30, tzinfo=timezone.utc)
