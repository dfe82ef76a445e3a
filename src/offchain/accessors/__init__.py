"""Storage accessors, one per locator scheme."""
from __future__ import annotations

from offchain.accessors.base import Document, StorageAccessor
from offchain.accessors.in_memory import InMemoryAccessor, InMemoryStorage
from offchain.accessors.ipfs import IpfsAccessor, IpfsConfig
from offchain.accessors.web import HttpAccessor, HttpConfig

__all__ = [
    "Document",
    "HttpAccessor",
    "HttpConfig",
    "InMemoryAccessor",
    "InMemoryStorage",
    "IpfsAccessor",
    "IpfsConfig",
    "StorageAccessor",
]
