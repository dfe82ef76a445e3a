from __future__ import annotations

from fastapi import APIRouter

from offchain.api.routes_public_parts.documents import router as documents_router
from offchain.api.routes_public_parts.health import router as health_router
from offchain.api.routes_public_parts.resolve import router as resolve_router

public_router = APIRouter()

public_router.include_router(health_router, prefix="/v1", tags=["health"])
public_router.include_router(documents_router, prefix="/v1", tags=["documents"])
public_router.include_router(resolve_router, prefix="/v1", tags=["resolve"])
