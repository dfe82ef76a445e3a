from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, List

import pytest

from offchain.accessors.transport import HttpResponse, UrllibTransport
from offchain.accessors.web import HttpAccessor, HttpConfig
from offchain.errors import DownloadError, UpdateError, UploadError


class _FakeTransport:
    def __init__(self, responses: List[HttpResponse]) -> None:
        self.responses = list(responses)
        self.requests: List[Dict[str, Any]] = []

    def request(self, method, url, *, body=None, headers=None, timeout_s=10.0) -> HttpResponse:
        self.requests.append({"method": method, "url": url, "body": body, "headers": dict(headers or {})})
        return self.responses.pop(0)


def _accessor(responses: List[HttpResponse], **cfg: Any) -> tuple[HttpAccessor, _FakeTransport]:
    t = _FakeTransport(responses)
    return HttpAccessor(HttpConfig(**cfg), transport=t), t


def test_download_gets_url() -> None:
    acc, t = _accessor([HttpResponse(200, b'{"name":"Hotel"}')], headers={"Authorization": "Bearer t"})
    doc = asyncio.run(acc.download("https://docs.example.com/v1/documents/0xabc"))
    assert doc == {"name": "Hotel"}
    assert t.requests[0]["method"] == "GET"
    assert t.requests[0]["url"] == "https://docs.example.com/v1/documents/0xabc"
    assert t.requests[0]["headers"] == {"Authorization": "Bearer t"}
    assert t.requests[0]["body"] is None


@pytest.mark.parametrize(
    "resp,code",
    [
        (HttpResponse(404, b""), "not_found"),
        (HttpResponse(503, b"maintenance"), "backend_error"),
        (HttpResponse(0, b"timed out"), "backend_error"),
        (HttpResponse(200, b"<html>"), "malformed_document"),
    ],
)
def test_download_failures(resp, code) -> None:
    acc, _ = _accessor([resp])
    with pytest.raises(DownloadError) as e:
        asyncio.run(acc.download("https://docs.example.com/x"))
    assert e.value.code == code


def test_upload_uses_uri_from_body() -> None:
    body = json.dumps({"ok": True, "key": "0x1", "uri": "https://docs.example.com/v1/documents/0x1"}).encode()
    acc, t = _accessor([HttpResponse(201, body)], upload_url="https://docs.example.com/v1/documents")
    loc = asyncio.run(acc.upload({"a": 1}))
    assert loc == "https://docs.example.com/v1/documents/0x1"
    req = t.requests[0]
    assert req["method"] == "POST"
    assert req["url"] == "https://docs.example.com/v1/documents"
    assert json.loads(req["body"]) == {"a": 1}
    assert req["headers"]["Content-Type"] == "application/json"


def test_upload_falls_back_to_location_header() -> None:
    resp = HttpResponse(201, b"", {"location": "https://docs.example.com/d/7"})
    acc, _ = _accessor([resp], upload_url="https://docs.example.com/d")
    assert asyncio.run(acc.upload({"a": 1})) == "https://docs.example.com/d/7"


def test_upload_without_url_in_response() -> None:
    acc, _ = _accessor([HttpResponse(201, b'{"ok": true}')], upload_url="https://docs.example.com/d")
    with pytest.raises(UploadError) as e:
        asyncio.run(acc.upload({"a": 1}))
    assert e.value.code == "bad_response"


def test_upload_disabled_without_upload_url() -> None:
    acc, t = _accessor([])
    with pytest.raises(UploadError) as e:
        asyncio.run(acc.upload({"a": 1}))
    assert e.value.code == "upload_disabled"
    assert t.requests == []


def test_update_puts_full_document() -> None:
    acc, t = _accessor([HttpResponse(200, b'{"ok": true}')])
    asyncio.run(acc.update("https://docs.example.com/d/7", {"b": 2}))
    req = t.requests[0]
    assert req["method"] == "PUT"
    assert json.loads(req["body"]) == {"b": 2}


@pytest.mark.parametrize("status,code", [(404, "not_found"), (500, "backend_error")])
def test_update_failures(status, code) -> None:
    acc, _ = _accessor([HttpResponse(status, b"")])
    with pytest.raises(UpdateError) as e:
        asyncio.run(acc.update("https://docs.example.com/d/7", {"b": 2}))
    assert e.value.code == code


def test_urllib_transport_reports_network_failure_as_status_zero() -> None:
    # Port 9 on localhost is the discard port; nothing listens there in CI.
    resp = UrllibTransport().request("GET", "http://127.0.0.1:9/nothing", timeout_s=0.5)
    assert resp.status == 0
    assert resp.ok is False
