"""Tests for client.py against a mock transport."""

import sys, os
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import httpx
import pytest
from client import PactClient, PactError, Transport, HTTPTransport


class MockTransport(Transport):
    def __init__(self):
        self.calls = []

    async def post(self, path, data):
        self.calls.append(("POST", path, data))
        if path == "/contracts":
            return {"contract_id": "test123", "status": "pending"}
        if path.endswith("/sign"):
            return {"completed": False, "status": "pending", "signature": {}}
        return {}

    async def get(self, path, params=None):
        self.calls.append(("GET", path, params))
        if path == "/defaults":
            return {"title": "Our Relationship Contract", "terms": []}
        if path.endswith("/celebration"):
            return {"id": "test123", "completed": True}
        return {"id": "test123", "status": "pending", "terms": []}


@pytest.fixture
def mock_transport():
    return MockTransport()


@pytest.fixture
def pact_client(mock_transport):
    return PactClient(transport=mock_transport)


# --- Transport ABC ---

def test_transport_is_abstract():
    """Transport ABC cannot be instantiated directly."""
    with pytest.raises(TypeError):
        Transport()


def test_default_transport_is_http():
    c = PactClient(base_url="http://example.test:9000/")
    assert isinstance(c.transport, HTTPTransport)
    assert c.transport.base_url == "http://example.test:9000"


# --- PactClient ---

@pytest.mark.asyncio
async def test_defaults(pact_client, mock_transport):
    result = await pact_client.defaults()
    assert result["title"] == "Our Relationship Contract"
    assert mock_transport.calls[-1] == ("GET", "/defaults", None)


@pytest.mark.asyncio
async def test_create(pact_client, mock_transport):
    cid = await pact_client.create("Our Deal", ["Be kind"])
    assert cid == "test123"
    assert mock_transport.calls[-1] == (
        "POST", "/contracts", {"title": "Our Deal", "terms": ["Be kind"]},
    )


@pytest.mark.asyncio
async def test_get(pact_client, mock_transport):
    result = await pact_client.get("test123")
    assert result["status"] == "pending"
    assert mock_transport.calls[-1] == ("GET", "/contracts/test123", None)


@pytest.mark.asyncio
async def test_sign(pact_client, mock_transport):
    result = await pact_client.sign("c1", "girlfriend", "Lee", message="forever")
    assert result["completed"] is False
    assert mock_transport.calls[-1] == (
        "POST", "/contracts/c1/sign",
        {"role": "girlfriend", "name": "Lee", "message": "forever"},
    )


@pytest.mark.asyncio
async def test_celebration(pact_client, mock_transport):
    result = await pact_client.celebration("c1")
    assert result["completed"] is True
    assert mock_transport.calls[-1] == ("GET", "/contracts/c1/celebration", None)


# --- HTTPTransport error mapping ---

def test_check_raises_with_detail():
    t = HTTPTransport()
    resp = httpx.Response(404, json={"detail": "Contract not found"})
    with pytest.raises(PactError) as exc:
        t._check(resp)
    assert exc.value.status_code == 404
    assert exc.value.detail == "Contract not found"


def test_check_non_json_error():
    t = HTTPTransport()
    resp = httpx.Response(502, text="Bad Gateway")
    with pytest.raises(PactError) as exc:
        t._check(resp)
    assert exc.value.status_code == 502
    assert exc.value.detail == "Bad Gateway"


def test_check_ok():
    t = HTTPTransport()
    resp = httpx.Response(200, json={"ok": True})
    assert t._check(resp) == {"ok": True}
