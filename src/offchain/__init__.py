"""Off-chain data resolution.

A ledger stores a single locator (``scheme://body``); the descriptive
documents behind it live in pluggable storage backends. This package turns
such a locator into a lazily resolved, schema-driven StoragePointer.
"""
from __future__ import annotations

from offchain.errors import (
    ConfigError,
    DownloadError,
    InvalidReferenceError,
    OffChainError,
    SchemaError,
    UnsupportedSchemeError,
    UpdateError,
    UploadError,
)
from offchain.pointer import StoragePointer
from offchain.registry import AccessorRegistry, build_registry
from offchain.schema import FieldDef, FieldSchema, normalize_fields

__all__ = [
    "AccessorRegistry",
    "ConfigError",
    "DownloadError",
    "FieldDef",
    "FieldSchema",
    "InvalidReferenceError",
    "OffChainError",
    "SchemaError",
    "StoragePointer",
    "UnsupportedSchemeError",
    "UpdateError",
    "UploadError",
    "build_registry",
    "normalize_fields",
]
