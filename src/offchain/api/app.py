from __future__ import annotations

import os
from typing import Optional

from fastapi import FastAPI

from offchain.accessors.in_memory import InMemoryStorage
from offchain.api.errors import ApiError, api_error_handler, offchain_error_handler
from offchain.api.request_log import RequestLogMiddleware
from offchain.api.routes_public import public_router
from offchain.config import load_offchain_config
from offchain.errors import OffChainError
from offchain.registry import AccessorRegistry, build_registry


def create_app(
    *,
    registry: Optional[AccessorRegistry] = None,
    storage: Optional[InMemoryStorage] = None,
) -> FastAPI:
    """Create the gateway application.

    The gateway stores documents in an InMemoryStorage and serves them over
    /v1/documents, which makes it a backend for the http(s) accessor. When
    no registry is given one is built from OFFCHAIN_* config; its in-memory
    schemes share the gateway's storage, so a document created here as key
    K is also resolvable as json://K.
    """
    mode = os.environ.get("OFFCHAIN_MODE", "prod").strip().lower()

    if mode == "prod":
        app = FastAPI(title="Off-chain Document Gateway", docs_url=None, redoc_url=None, openapi_url=None)
    else:
        app = FastAPI(title="Off-chain Document Gateway")

    store = storage if storage is not None else InMemoryStorage()
    app.state.storage = store
    app.state.registry = registry if registry is not None else build_registry(load_offchain_config(), storage=store)

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(OffChainError, offchain_error_handler)

    app.add_middleware(RequestLogMiddleware)

    app.include_router(public_router)
    return app
