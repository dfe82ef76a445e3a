from __future__ import annotations

import threading
from typing import Any, Dict, Mapping, Optional, Tuple

from offchain.accessors.base import StorageAccessor
from offchain.accessors.in_memory import InMemoryAccessor, InMemoryStorage
from offchain.accessors.ipfs import IpfsAccessor, IpfsConfig
from offchain.accessors.web import HttpAccessor, HttpConfig
from offchain.config import AccessorSpec, OffChainConfig
from offchain.errors import ConfigError, UnsupportedSchemeError
from offchain.locator import detect_scheme


class AccessorRegistry:
    """Maps locator schemes to accessor instances.

    Scheme matching is case-insensitive: schemes are stored lowercased and
    detect_scheme() lowercases what it parses. resolve_accessor() is a pure
    lookup and never performs I/O.
    """

    def __init__(self, accessors: Optional[Mapping[str, StorageAccessor]] = None, *, max_depth: int = 16) -> None:
        self._lock = threading.Lock()
        self._accessors: Dict[str, StorageAccessor] = {}
        self.max_depth = int(max_depth)
        for scheme, accessor in (accessors or {}).items():
            self.register(scheme, accessor)

    @staticmethod
    def _norm(scheme: str) -> str:
        s = str(scheme or "").strip().lower()
        if not s:
            raise ValueError("scheme must be a non-empty string")
        return s

    def register(self, scheme: str, accessor: StorageAccessor) -> None:
        if not isinstance(accessor, StorageAccessor):
            raise TypeError(f"{type(accessor).__name__} does not implement download/upload/update")
        with self._lock:
            self._accessors[self._norm(scheme)] = accessor

    def unregister(self, scheme: str) -> bool:
        with self._lock:
            return self._accessors.pop(self._norm(scheme), None) is not None

    def reset(self) -> None:
        with self._lock:
            self._accessors.clear()

    def schemes(self) -> Tuple[str, ...]:
        with self._lock:
            return tuple(sorted(self._accessors.keys()))

    def get(self, scheme: Optional[str]) -> Optional[StorageAccessor]:
        if not scheme:
            return None
        with self._lock:
            return self._accessors.get(scheme.strip().lower())

    def resolve_accessor(self, locator: str) -> StorageAccessor:
        scheme = detect_scheme(locator)
        accessor = self.get(scheme)
        if accessor is None:
            raise UnsupportedSchemeError(scheme, locator)
        return accessor


def _build_accessor(spec: AccessorSpec, storage: InMemoryStorage) -> StorageAccessor:
    opts: Dict[str, Any] = dict(spec.options)
    try:
        if spec.type == "in_memory":
            return InMemoryAccessor(storage, scheme=spec.scheme)
        if spec.type == "ipfs":
            return IpfsAccessor(IpfsConfig(**opts), scheme=spec.scheme)
        if spec.type == "http":
            return HttpAccessor(HttpConfig(**opts), scheme=spec.scheme)
    except TypeError as e:
        raise ConfigError("bad_config", f"invalid options for scheme {spec.scheme!r}", str(e)) from e
    raise ConfigError("bad_config", f"unknown accessor type {spec.type!r} for scheme {spec.scheme!r}")


def build_registry(cfg: OffChainConfig, *, storage: Optional[InMemoryStorage] = None) -> AccessorRegistry:
    """Instantiate every configured accessor.

    All in-memory schemes share one InMemoryStorage, either the one passed
    in or a fresh instance owned by the returned registry.
    """
    shared = storage if storage is not None else InMemoryStorage()
    registry = AccessorRegistry(max_depth=cfg.max_depth)
    for spec in cfg.accessors:
        registry.register(spec.scheme, _build_accessor(spec, shared))
    return registry
