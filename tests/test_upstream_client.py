from __future__ import annotations

import json

import httpx
import pytest

from fusion_proxy.upstream import CandidateRequest, UpstreamClient, UpstreamUnavailable


def _client(handler, *, api_key: str | None = "test-key") -> UpstreamClient:
    return UpstreamClient(
        base_url="https://upstream.test",
        api_key=api_key,
        transport=httpx.MockTransport(handler),
    )


def test_request_sends_bearer_auth_and_decodes_json() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"tokens": {}})

    up = _client(handler)
    res = up.get("/swap/v6.0/1/tokens", params={"a": "1", "b": None})

    assert res.ok
    assert res.status_code == 200
    assert res.data == {"tokens": {}}
    assert res.endpoint == "/swap/v6.0/1/tokens"
    req = seen[0]
    assert req.headers["authorization"] == "Bearer test-key"
    assert req.headers["content-type"] == "application/json"
    assert dict(req.url.params) == {"a": "1"}


def test_no_authorization_header_without_key() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    _client(handler, api_key=None).get("/x")
    assert "authorization" not in seen[0].headers


def test_error_status_returned_not_raised_and_text_body_kept() -> None:
    up = _client(lambda r: httpx.Response(502, text="<html>bad gateway</html>"))
    res = up.post("/fusion/orders", json={"a": 1})
    assert not res.ok
    assert res.status_code == 502
    assert res.data == "<html>bad gateway</html>"


def test_transport_failure_raises_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamUnavailable) as ei:
        _client(handler).get("/fusion/quoter/v1.0/supported-chains")
    assert ei.value.endpoint == "/fusion/quoter/v1.0/supported-chains"
    assert "connection refused" in ei.value.reason


def test_first_available_skips_404s_in_order() -> None:
    calls: list[tuple[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append((request.method, request.url.path))
        if request.url.path == "/c":
            return httpx.Response(200, json={"from": "c"})
        return httpx.Response(404, json={"error": "not found"})

    up = _client(handler)
    res = up.first_available(
        [
            CandidateRequest("POST", "/a", json={"x": 1}),
            CandidateRequest("POST", "/b", json={"x": 1}),
            CandidateRequest("GET", "/c", params={"q": "1"}, label="/c (fallback)"),
            CandidateRequest("GET", "/d"),
        ]
    )

    assert calls == [("POST", "/a"), ("POST", "/b"), ("GET", "/c")]
    assert res.data == {"from": "c"}
    assert res.endpoint == "/c (fallback)"


def test_first_available_stops_on_non_404_error() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return httpx.Response(401, json={"description": "Unauthorized"})

    res = _client(handler).first_available([CandidateRequest("POST", "/a"), CandidateRequest("POST", "/b")])
    assert calls == ["/a"]
    assert res.status_code == 401


def test_first_available_returns_last_404_when_all_missing() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"path": request.url.path})

    res = _client(handler).first_available([CandidateRequest("GET", "/a"), CandidateRequest("GET", "/b")])
    assert res.status_code == 404
    assert res.data == {"path": "/b"}
    assert res.endpoint == "/b"


def test_first_available_posts_json_body() -> None:
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={})

    _client(handler).first_available([CandidateRequest("POST", "/a", json={"secret": "0xab"})])
    assert bodies == [{"secret": "0xab"}]


def test_first_available_rejects_empty_candidates() -> None:
    with pytest.raises(ValueError):
        _client(lambda r: httpx.Response(200)).first_available([])
