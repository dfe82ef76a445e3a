from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Request

from offchain.api.routes_public_parts.common import _registry, _render
from offchain.api.schemas import ResolveRequest
from offchain.pointer import StoragePointer

router = APIRouter()


@router.post("/resolve")
async def resolve(req: ResolveRequest, request: Request) -> Dict[str, Any]:
    """Resolve a locator against a field schema.

    Off-chain errors propagate to the app-level handler, which maps them to
    400/404/502 responses.
    """
    pointer = StoragePointer.create(req.uri, req.fields, _registry(request))
    contents = await pointer.contents()
    return {
        "ok": True,
        "ref": pointer.ref,
        "contents": {name: _render(value) for name, value in contents.items()},
    }
