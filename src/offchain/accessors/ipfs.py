from __future__ import annotations

"""Content-addressed accessor backed by an IPFS (Kubo) node.

Locators look like ``ipfs://<cid>``. Documents are added through the Kubo
HTTP API and read back with ``cat``. Because a CID is derived from the
content, an existing locator can never point at new content: update() is
rejected with UpdateError("immutable"). Publish a new document and move
the ledger reference instead.

CID validation is lightweight and dependency-free:
  - CIDv0 (base58btc) starts with "Qm" and is 46 characters long.
  - CIDv1 (base32 lowercase) starts with "b" and uses a-z2-7.
It rejects obviously bad input; it is not a multiformats parser.
"""

import asyncio
import json
import logging
import re
import urllib.parse
import uuid
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

from offchain.accessors.base import Document, canon_json, decode_document
from offchain.accessors.transport import HttpResponse, HttpTransport, UrllibTransport
from offchain.errors import DownloadError, UpdateError, UploadError
from offchain.locator import locator_body, make_locator
from offchain.structured_logging import log_event

_log = logging.getLogger("offchain.accessors")

_CIDV0_RE = re.compile(r"^Qm[1-9A-HJ-NP-Za-km-z]{44}$")  # base58btc (no 0,O,I,l)
_CIDV1_BASE32_RE = re.compile(r"^b[a-z2-7]{10,}$")


@dataclass(frozen=True)
class CidValidation:
    ok: bool
    reason: str
    cid: str


def validate_ipfs_cid(cid: str, *, max_len: int = 128) -> CidValidation:
    c = (cid or "").strip().strip("/")
    if not c:
        return CidValidation(False, "missing_cid", "")
    if len(c) > int(max_len):
        return CidValidation(False, "cid_too_long", c)
    if _CIDV0_RE.match(c) or _CIDV1_BASE32_RE.match(c):
        return CidValidation(True, "ok", c)
    return CidValidation(False, "invalid_cid_format", c)


@dataclass(frozen=True)
class IpfsConfig:
    api_base: str = "http://127.0.0.1:5001"
    timeout_s: float = 10.0
    pin: bool = True


def parse_add_response(raw: bytes) -> Tuple[str, int]:
    """
    /api/v0/add returns NDJSON (one JSON per line).
    We take the last valid JSON object and extract Hash + Size.
    """
    txt = raw.decode("utf-8", errors="replace").strip()
    if not txt:
        raise UploadError("bad_response", "ipfs add returned an empty response")

    last_obj: Optional[dict] = None
    for line in txt.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            obj = json.loads(line)
        except json.JSONDecodeError:
            continue
        if isinstance(obj, dict):
            last_obj = obj

    if last_obj is None:
        raise UploadError("bad_response", "ipfs add response has no JSON object", {"body": txt[:200]})

    cid = str(last_obj.get("Hash") or "").strip()
    if not cid:
        raise UploadError("bad_response", "ipfs add response is missing Hash", {"body": txt[:200]})
    try:
        size = int(str(last_obj.get("Size") or "0").strip())
    except ValueError:
        size = 0
    return cid, size


class IpfsAccessor:
    def __init__(
        self,
        cfg: Optional[IpfsConfig] = None,
        *,
        transport: Optional[HttpTransport] = None,
        scheme: str = "ipfs",
    ) -> None:
        self.cfg = cfg or IpfsConfig()
        self.transport = transport or UrllibTransport()
        self._scheme = scheme.strip().lower()

    @property
    def scheme(self) -> str:
        return self._scheme

    def _api_url(self, path: str, query: Mapping[str, str]) -> str:
        base = (self.cfg.api_base or "http://127.0.0.1:5001").strip().rstrip("/")
        qs = urllib.parse.urlencode(dict(query))
        return f"{base}{path}?{qs}" if qs else f"{base}{path}"

    async def _post(self, url: str, body: bytes, headers: Mapping[str, str]) -> HttpResponse:
        # Kubo only accepts POST on its RPC API.
        return await asyncio.to_thread(
            self.transport.request,
            "POST",
            url,
            body=body,
            headers=dict(headers),
            timeout_s=float(self.cfg.timeout_s),
        )

    async def download(self, locator: str) -> Document:
        v = validate_ipfs_cid(locator_body(locator))
        if not v.ok:
            raise DownloadError(v.reason, f"{locator} does not carry a valid CID")

        resp = await self._post(self._api_url("/api/v0/cat", {"arg": v.cid}), b"", {})
        if not resp.ok:
            log_event(_log, "ipfs_cat_failed", level=logging.WARNING, cid=v.cid, status=resp.status)
            raise DownloadError("backend_error", f"ipfs cat {v.cid} failed", {"status": resp.status, "body": resp.text()})
        return decode_document(resp.body, locator)

    async def upload(self, document: Mapping[str, Any]) -> str:
        try:
            payload = canon_json(dict(document)).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise UploadError("bad_document", "document is not JSON serializable", str(e)) from e

        boundary = f"----offchain-ipfs-{uuid.uuid4().hex}"
        body = (
            f"--{boundary}\r\n"
            'Content-Disposition: form-data; name="file"; filename="document.json"\r\n'
            "Content-Type: application/json\r\n"
            "\r\n"
        ).encode("utf-8") + payload + f"\r\n--{boundary}--\r\n".encode("utf-8")

        url = self._api_url(
            "/api/v0/add",
            {
                "pin": "true" if self.cfg.pin else "false",
                "wrap-with-directory": "false",
                "progress": "false",
            },
        )
        resp = await self._post(url, body, {"Content-Type": f"multipart/form-data; boundary={boundary}"})
        if not resp.ok:
            raise UploadError("backend_error", "ipfs add failed", {"status": resp.status, "body": resp.text()})

        cid, size = parse_add_response(resp.body)
        log_event(_log, "ipfs_added", cid=cid, size=size, pinned=bool(self.cfg.pin))
        return make_locator(self._scheme, cid)

    async def update(self, locator: str, document: Mapping[str, Any]) -> None:
        raise UpdateError("immutable", f"{locator} is content-addressed and cannot be updated in place")
