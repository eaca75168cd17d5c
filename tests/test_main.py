import pytest
from fastapi.testclient import TestClient

from aprstx.config import Settings
from aprstx.main import create_app

from .conftest import BODY, LOGRESP, FakeConnector, FakeTransport


class TransportFactory:
    """Connector handing out a fresh scripted transport per request."""

    def __init__(self, lines):
        self.lines = lines
        self.transports = []

    async def __call__(self, host, port):
        transport = FakeTransport(self.lines)
        self.transports.append(transport)
        return transport


@pytest.fixture
def factory():
    return TransportFactory([LOGRESP])


@pytest.fixture
def client(factory):
    app = create_app(Settings(from_call="N0CALL"), connect=factory)
    return TestClient(app)


def test_health(client):
    assert client.get("/health").json() == {"ok": True}
    assert client.get("/api").json()["service"] == "aprstx"


def test_format_packet(client, observation):
    resp = client.post("/api/aprs/packet", json={"payload": observation})
    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "packet": f"N0CALL>APRS,TCPIP*:{BODY}", "sent": False}


def test_format_packet_with_overrides(client):
    resp = client.post(
        "/api/aprs/packet",
        json={"payload": "hello", "from": {"call": "K1ABC", "ssid": 7}, "via": ["WIDE1-1"]},
    )
    assert resp.json()["packet"] == "K1ABC-7>APRS,WIDE1-1:hello"


def test_validation_error(client, observation):
    observation["weather"]["humidity"] = 150
    resp = client.post("/api/aprs/packet", json={"payload": observation})
    assert resp.status_code == 400
    assert resp.json()["error"]["category"] == "validation"
    assert "humidity" in resp.json()["error"]["message"]


def test_transmit(client, factory, observation):
    resp = client.post("/api/aprs/tx", json={"payload": observation})
    assert resp.status_code == 200
    assert resp.json()["sent"] is True
    transport = factory.transports[0]
    assert transport.sent[1] == f"N0CALL>APRS,TCPIP*:{BODY}"
    assert transport.close_calls == 1


def test_transmit_protocol_error(observation):
    app = create_app(Settings(from_call="N0CALL"), connect=TransportFactory(["nope"]))
    resp = TestClient(app).post("/api/aprs/tx", json={"payload": observation})
    assert resp.status_code == 502
    assert resp.json()["error"]["category"] == "protocol"


def test_transmit_connection_refused(observation):
    connect = FakeConnector(error=ConnectionRefusedError("refused"))
    app = create_app(Settings(from_call="N0CALL"), connect=connect)
    resp = TestClient(app).post("/api/aprs/tx", json={"payload": observation})
    assert resp.status_code == 502
    assert resp.json()["error"]["category"] == "transport"


def test_transmit_requires_api_key(factory, observation):
    app = create_app(Settings(from_call="N0CALL", api_key="secret"), connect=factory)
    client = TestClient(app)
    assert client.post("/api/aprs/tx", json={"payload": observation}).status_code == 401
    resp = client.post(
        "/api/aprs/tx", json={"payload": observation}, headers={"x-api-key": "secret"}
    )
    assert resp.status_code == 200
