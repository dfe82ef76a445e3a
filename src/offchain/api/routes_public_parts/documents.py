from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Request

from offchain.api.errors import ApiError
from offchain.api.routes_public_parts.common import _public_base_url, _storage
from offchain.api.schemas import StoredDocument
from offchain.structured_logging import log_event

router = APIRouter()

_log = logging.getLogger("offchain.http")


@router.post("/documents", status_code=201, response_model=StoredDocument)
def create_document(request: Request, document: Dict[str, Any] = Body(...)) -> StoredDocument:
    storage = _storage(request)
    try:
        key = storage.create(document)
    except (TypeError, ValueError) as e:
        raise ApiError.bad_request("bad_document", "document is not JSON serializable", {"error": str(e)})
    uri = f"{_public_base_url(request)}/v1/documents/{key}"
    log_event(_log, "document_created", key=key)
    return StoredDocument(key=key, uri=uri)


@router.get("/documents/{key}")
def get_document(key: str, request: Request) -> Dict[str, Any]:
    doc = _storage(request).get(key)
    if doc is None:
        raise ApiError.not_found("not_found", f"no document stored under {key}")
    return doc


@router.put("/documents/{key}")
def replace_document(key: str, request: Request, document: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    storage = _storage(request)
    if key not in storage:
        raise ApiError.not_found("not_found", f"no document stored under {key}")
    # Full replacement: fields missing from the new body are gone.
    storage.update(key, document)
    log_event(_log, "document_replaced", key=key)
    return {"ok": True, "key": key}
