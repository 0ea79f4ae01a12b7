"""Tests for the Atlassian HTTP collaborator."""

import pytest
import requests

from conftest import StubSession, make_config, requests_response
from mcp_atlassian.core.http import AtlassianHttp, Endpoint
from mcp_atlassian.errors import RemoteError, TransportError


def _http(mapping, **config_overrides):
    cfg = make_config(**config_overrides)
    stub = StubSession(mapping)
    return AtlassianHttp(cfg.endpoint(), session=stub), stub


def test_invoke_sends_auth_and_timeout():
    http, stub = _http(
        {("GET", "/rest/api/3/issue/A-1"): requests_response(200, {"key": "A-1"})},
        request_timeout_ms=2500,
    )

    status, body = http.invoke("get", "/rest/api/3/issue/A-1", params={"fields": "key"})

    assert status == 200
    assert body == {"key": "A-1"}
    call = stub.calls[0]
    assert call["url"] == "https://acme.atlassian.net/rest/api/3/issue/A-1"
    assert call["params"] == {"fields": "key"}
    assert call["timeout"] == 2.5
    assert stub.headers["Authorization"].startswith("Basic ")
    assert stub.headers["Accept"] == "application/json"


def test_invoke_returns_non_json_body_as_text():
    http, _ = _http({("GET", "/x"): requests_response(502, "<html>Bad gateway</html>")})
    status, body = http.invoke("GET", "/x")
    assert status == 502
    assert body == "<html>Bad gateway</html>"


def test_empty_body_is_none():
    http, _ = _http({("PUT", "/x"): requests_response(204, None)})
    assert http.invoke("PUT", "/x", body={"a": 1}) == (204, None)


def test_timeout_becomes_transport_error():
    http, _ = _http({("GET", "/slow"): requests.Timeout("read timed out")})
    with pytest.raises(TransportError) as excinfo:
        http.invoke("GET", "/slow")
    assert "timed out" in str(excinfo.value)


def test_connection_error_becomes_transport_error():
    http, _ = _http({("GET", "/down"): requests.ConnectionError("refused")})
    with pytest.raises(TransportError):
        http.invoke("GET", "/down")


def test_request_json_status_failure():
    http, _ = _http({("GET", "/thing"): requests_response(403, {"errorMessages": ["nope"]})})
    with pytest.raises(RemoteError) as excinfo:
        http.request_json("GET", "/thing", failure="Failed to get thing")
    assert str(excinfo.value) == "Failed to get thing: 403"
    assert excinfo.value.status_code == 403
    assert excinfo.value.path == "/thing"


def test_request_json_detail_failure():
    http, _ = _http({("GET", "/thing"): requests_response(400, {"errorMessages": ["Bad JQL", "Really"]})})
    with pytest.raises(RemoteError) as excinfo:
        http.request_json("GET", "/thing", failure="Search failed", include_detail=True)
    assert str(excinfo.value) == "Search failed: Bad JQL; Really"


def test_endpoint_repr_hides_credentials():
    endpoint = Endpoint(base_url="https://a.atlassian.net", auth_header="Basic c2VjcmV0", timeout_seconds=1.0)
    assert "c2VjcmV0" not in repr(endpoint)


def test_close_only_closes_owned_sessions():
    http, stub = _http({})
    http.close()
    assert stub.closed is False
