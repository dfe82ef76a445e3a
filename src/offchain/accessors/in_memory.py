from __future__ import annotations

import copy
import hashlib
import itertools
import threading
import time
from typing import Any, Dict, List, Mapping, Optional

from offchain.accessors.base import Document, canon_json
from offchain.errors import DownloadError, UpdateError, UploadError
from offchain.locator import locator_body, make_locator


def _now_ms() -> int:
    return int(time.time() * 1000)


class InMemoryStorage:
    """Simple in-process key-value store for JSON documents.

    Keys are ``0x`` + sha3-256 of ``<ts_ms>:<seq>:<canonical json>``; the
    per-store sequence keeps identical documents created in the same
    millisecond apart.

    Values are deep-copied on the way in and out so callers can never
    mutate stored documents behind the store's back.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._data: Dict[str, Document] = {}
        self._seq = itertools.count(1)

    def _compute_key(self, data: Mapping[str, Any]) -> str:
        material = f"{_now_ms()}:{next(self._seq)}:{canon_json(data)}"
        return "0x" + hashlib.sha3_256(material.encode("utf-8")).hexdigest()

    def create(self, data: Mapping[str, Any]) -> str:
        doc = copy.deepcopy(dict(data))
        with self._lock:
            key = self._compute_key(doc)
            self._data[key] = doc
        return key

    def update(self, key: str, data: Mapping[str, Any]) -> None:
        doc = copy.deepcopy(dict(data))
        with self._lock:
            self._data[key] = doc

    def get(self, key: str) -> Optional[Document]:
        with self._lock:
            doc = self._data.get(key)
        return copy.deepcopy(doc) if doc is not None else None

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._data.keys())

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


class InMemoryAccessor:
    """Accessor over an injected InMemoryStorage.

    The locator body is the storage key: ``json://0xabc...`` reads key
    ``0xabc...``. Several accessors may share one storage instance.
    """

    def __init__(self, storage: Optional[InMemoryStorage] = None, *, scheme: str = "json") -> None:
        self.storage = storage if storage is not None else InMemoryStorage()
        self._scheme = scheme.strip().lower()
        self.calls: Dict[str, int] = {"download": 0, "upload": 0, "update": 0}

    @property
    def scheme(self) -> str:
        return self._scheme

    async def download(self, locator: str) -> Document:
        self.calls["download"] += 1
        key = locator_body(locator)
        doc = self.storage.get(key)
        if doc is None:
            raise DownloadError("not_found", f"no document stored under {locator}")
        return doc

    async def upload(self, document: Mapping[str, Any]) -> str:
        self.calls["upload"] += 1
        try:
            key = self.storage.create(document)
        except (TypeError, ValueError) as e:
            raise UploadError("bad_document", "document is not JSON serializable", str(e)) from e
        return make_locator(self._scheme, key)

    async def update(self, locator: str, document: Mapping[str, Any]) -> None:
        self.calls["update"] += 1
        key = locator_body(locator)
        if key not in self.storage:
            raise UpdateError("not_found", f"no document stored under {locator}")
        self.storage.update(key, document)
