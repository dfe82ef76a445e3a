from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from offchain.accessors.base import Document, canon_json, decode_document
from offchain.accessors.transport import HttpResponse, HttpTransport, UrllibTransport
from offchain.errors import DownloadError, UpdateError, UploadError
from offchain.locator import detect_scheme
from offchain.structured_logging import log_event

_log = logging.getLogger("offchain.accessors")


@dataclass(frozen=True)
class HttpConfig:
    # Endpoint that accepts POSTed documents and answers with their new URL.
    upload_url: str = ""
    timeout_s: float = 10.0
    headers: Dict[str, str] = field(default_factory=dict)


class HttpAccessor:
    """Accessor for documents addressed by plain http(s) URLs.

    - download: GET <url>, expects a JSON object
    - upload:   POST <upload_url>, new URL from the JSON "uri" field or the
                Location header
    - update:   PUT <url> with the full document
    """

    def __init__(
        self,
        cfg: Optional[HttpConfig] = None,
        *,
        transport: Optional[HttpTransport] = None,
        scheme: str = "https",
    ) -> None:
        self.cfg = cfg or HttpConfig()
        self.transport = transport or UrllibTransport()
        self._scheme = scheme.strip().lower()

    @property
    def scheme(self) -> str:
        return self._scheme

    def _headers(self, *, json_body: bool) -> Dict[str, str]:
        out = dict(self.cfg.headers)
        if json_body:
            out["Content-Type"] = "application/json"
        return out

    async def _call(self, method: str, url: str, body: Optional[bytes] = None) -> HttpResponse:
        return await asyncio.to_thread(
            self.transport.request,
            method,
            url,
            body=body,
            headers=self._headers(json_body=body is not None),
            timeout_s=float(self.cfg.timeout_s),
        )

    @staticmethod
    def _encode(document: Mapping[str, Any], err_cls: type) -> bytes:
        try:
            return canon_json(dict(document)).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise err_cls("bad_document", "document is not JSON serializable", str(e)) from e

    async def download(self, locator: str) -> Document:
        resp = await self._call("GET", locator)
        if resp.status == 404:
            raise DownloadError("not_found", f"no document at {locator}")
        if not resp.ok:
            log_event(_log, "http_download_failed", level=logging.WARNING, url=locator, status=resp.status)
            raise DownloadError("backend_error", f"GET {locator} failed", {"status": resp.status, "body": resp.text()})
        return decode_document(resp.body, locator)

    def _uri_from_upload(self, resp: HttpResponse) -> str:
        uri = ""
        try:
            obj = json.loads(resp.body.decode("utf-8")) if resp.body else None
        except (UnicodeDecodeError, json.JSONDecodeError):
            obj = None
        if isinstance(obj, dict):
            uri = str(obj.get("uri") or "").strip()
        if not uri:
            uri = str(resp.headers.get("location") or "").strip()
        if not uri or detect_scheme(uri) is None:
            raise UploadError("bad_response", "upload response carries no document URL", {"body": resp.text()})
        return uri

    async def upload(self, document: Mapping[str, Any]) -> str:
        if not self.cfg.upload_url:
            raise UploadError("upload_disabled", "no upload_url configured for http accessor")
        body = self._encode(document, UploadError)
        resp = await self._call("POST", self.cfg.upload_url, body)
        if not resp.ok:
            raise UploadError(
                "backend_error",
                f"POST {self.cfg.upload_url} failed",
                {"status": resp.status, "body": resp.text()},
            )
        return self._uri_from_upload(resp)

    async def update(self, locator: str, document: Mapping[str, Any]) -> None:
        body = self._encode(document, UpdateError)
        resp = await self._call("PUT", locator, body)
        if resp.status == 404:
            raise UpdateError("not_found", f"no document at {locator}")
        if not resp.ok:
            raise UpdateError("backend_error", f"PUT {locator} failed", {"status": resp.status, "body": resp.text()})
