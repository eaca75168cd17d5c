import json
import logging

from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from aprstx.middleware import RequestLogMiddleware
from aprstx.middleware.logging import _redact_headers, log_info


def _events(caplog):
    return [json.loads(r.getMessage()) for r in caplog.records if r.name == "aprstx"]


def test_secret_fields_are_masked(caplog):
    caplog.set_level(logging.INFO, logger="aprstx")
    log_info("aprs_login", username="N0CALL", passcode="12345", Pass="x")
    (event,) = _events(caplog)
    assert event == {
        "level": "info",
        "event": "aprs_login",
        "username": "N0CALL",
        "passcode": "<redacted>",
        "Pass": "<redacted>",
    }


def test_redact_headers():
    headers = {"X-API-Key": "secret", "Authorization": "Bearer t", "accept": "*/*"}
    assert _redact_headers(headers) == {
        "X-API-Key": "<redacted>",
        "Authorization": "<redacted>",
        "accept": "*/*",
    }


def _app():
    app = FastAPI()
    app.add_middleware(RequestLogMiddleware)

    @app.get("/ok")
    def ok():
        return {"ok": True}

    @app.get("/missing")
    def missing():
        raise HTTPException(status_code=404)

    return TestClient(app)


def test_request_is_logged(caplog):
    caplog.set_level(logging.INFO, logger="aprstx")
    resp = _app().get("/ok?x=1", headers={"x-request-id": "abc", "x-api-key": "secret"})
    assert resp.headers["x-request-id"] == "abc"
    (event,) = [e for e in _events(caplog) if e["event"] == "http_request"]
    assert event["level"] == "info"
    assert event["request_id"] == "abc"
    assert event["path"] == "/ok"
    assert event["query"] == {"x": "1"}
    assert event["status"] == 200
    assert event["headers"]["x-api-key"] == "<redacted>"


def test_client_error_logged_as_warning(caplog):
    caplog.set_level(logging.INFO, logger="aprstx")
    resp = _app().get("/missing")
    assert resp.status_code == 404
    assert resp.headers["x-request-id"]
    (record,) = [r for r in caplog.records if r.name == "aprstx"]
    assert record.levelno == logging.WARNING
    assert json.loads(record.getMessage())["status"] == 404
