from __future__ import annotations

import time

from fastapi import APIRouter, Request

from offchain.catalog import describe_catalog

router = APIRouter()


def _now_ms() -> int:
    return int(time.time() * 1000)


@router.get("/health")
def health(request: Request) -> dict[str, object]:
    # health must never crash
    reg = getattr(request.app.state, "registry", None)
    storage = getattr(request.app.state, "storage", None)
    return {
        "ok": True,
        "service": "offchain-gateway",
        "version": "v1",
        "ts_ms": _now_ms(),
        "schemes": list(reg.schemes()) if reg is not None else [],
        "documents": len(storage) if storage is not None else 0,
    }


@router.get("/catalog")
def catalog() -> dict[str, object]:
    return {"ok": True, "shapes": describe_catalog()}
