"""
Storage accessor contract.

An accessor serves one locator scheme and exposes exactly three async
operations. The resolution layer only ever depends on this surface:

  - download(locator) -> Document      (raises DownloadError)
  - upload(document)  -> locator       (raises UploadError)
  - update(locator, document) -> None  (raises UpdateError)

update() replaces the whole document at the locator. Fields that existed
before and are absent from the new document must not be retrievable
afterwards.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Protocol, runtime_checkable

from offchain.errors import DownloadError

Document = Dict[str, Any]


@runtime_checkable
class StorageAccessor(Protocol):
    @property
    def scheme(self) -> str: ...

    async def download(self, locator: str) -> Document: ...
    async def upload(self, document: Mapping[str, Any]) -> str: ...
    async def update(self, locator: str, document: Mapping[str, Any]) -> None: ...


def canon_json(obj: Any) -> str:
    # Never coerce unknown types; non-JSON values must fail loudly.
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def ensure_document(value: Any, locator: str) -> Document:
    if not isinstance(value, Mapping):
        raise DownloadError(
            "malformed_document",
            f"document at {locator} is not a JSON object",
            {"type": type(value).__name__},
        )
    return dict(value)


def decode_document(raw: bytes, locator: str) -> Document:
    try:
        obj = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DownloadError("malformed_document", f"document at {locator} is not valid JSON", str(e)) from e
    return ensure_document(obj, locator)
