from __future__ import annotations

import json

import pytest
import requests

from dgb_uri.config import RPCConfig
from dgb_uri.rpc_client import DigiByteRPCClient, RPCError, RPCTransportError


class StubResponse:
    def __init__(self, status_code: int = 200, body=None, text: str | None = None) -> None:
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else json.dumps(body)
        self.url = "http://127.0.0.1:14022"

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if self._body is None:
            raise ValueError("no JSON")
        return self._body


class StubSession:
    def __init__(self, response=None, exc: Exception | None = None) -> None:
        self.response = response
        self.exc = exc
        self.requests: list[dict] = []

    def post(self, url, data=None, headers=None, auth=None, timeout=None):
        self.requests.append({"url": url, "payload": json.loads(data), "auth": auth})
        if self.exc is not None:
            raise self.exc
        return self.response


def _client(session: StubSession) -> DigiByteRPCClient:
    client = DigiByteRPCClient(RPCConfig(user="u", password="p"))
    client._session = session
    return client


def test_validateaddress_posts_json_rpc() -> None:
    session = StubSession(StubResponse(body={"result": {"isvalid": True}, "error": None}))
    result = _client(session).validateaddress("DAddr")

    assert result == {"isvalid": True}
    sent = session.requests[0]
    assert sent["url"] == "http://127.0.0.1:14022"
    assert sent["payload"]["method"] == "validateaddress"
    assert sent["payload"]["params"] == ["DAddr"]
    assert sent["auth"] == ("u", "p")


def test_rpc_error_in_body_raises() -> None:
    body = {"result": None, "error": {"code": -5, "message": "Invalid address"}}
    session = StubSession(StubResponse(status_code=500, body=body))
    with pytest.raises(RPCError) as excinfo:
        _client(session).validateaddress("nope")
    assert excinfo.value.code == -5


def test_unauthorized_is_a_transport_error() -> None:
    session = StubSession(StubResponse(status_code=401, body=None, text=""))
    with pytest.raises(RPCTransportError, match="Unauthorized") as excinfo:
        _client(session).getblockchaininfo()
    assert excinfo.value.status_code == 401


def test_connection_failure_is_wrapped() -> None:
    session = StubSession(exc=requests.ConnectionError("refused"))
    with pytest.raises(RPCTransportError, match="connection failed"):
        _client(session).getblockchaininfo()


def test_malformed_json_is_reported() -> None:
    session = StubSession(StubResponse(status_code=200, body=None, text="<html>"))
    with pytest.raises(RPCTransportError, match="malformed JSON"):
        _client(session).getblockchaininfo()
