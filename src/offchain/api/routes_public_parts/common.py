from __future__ import annotations

import os
from typing import Any, Dict

from fastapi import Request

from offchain.accessors.in_memory import InMemoryStorage
from offchain.api.errors import ApiError
from offchain.pointer import StoragePointer
from offchain.registry import AccessorRegistry

Json = Dict[str, Any]


def _registry(request: Request) -> AccessorRegistry:
    reg = getattr(request.app.state, "registry", None)
    if reg is None:
        raise ApiError.internal("not_ready", "accessor registry not attached to app.state", {})
    return reg


def _storage(request: Request) -> InMemoryStorage:
    st = getattr(request.app.state, "storage", None)
    if st is None:
        raise ApiError.internal("not_ready", "document storage not attached to app.state", {})
    return st


def _public_base_url(request: Request) -> str:
    """Base URL minted into document URIs.

    OFFCHAIN_PUBLIC_BASE_URL wins (deployments behind a proxy); otherwise
    the URL the request arrived on.
    """
    env = (os.environ.get("OFFCHAIN_PUBLIC_BASE_URL") or "").strip()
    if env:
        return env.rstrip("/")
    return str(request.base_url).rstrip("/")


def _render(value: Any) -> Any:
    # Nested pointers are rendered by reference only; they are not followed.
    if isinstance(value, StoragePointer):
        return {"ref": value.ref}
    return value
