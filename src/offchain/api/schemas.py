from __future__ import annotations

"""Pydantic request/response schemas for the gateway API.

These exist only for HTTP input validation; field schemas themselves are
normalized by offchain.schema.
"""

from typing import Any, Dict, List, Union

from pydantic import BaseModel, Field


class ResolveRequest(BaseModel):
    uri: str = Field(..., description="Locator, e.g. json://0xabc or https://docs.example.com/v1/documents/0xabc")
    fields: List[Union[str, Dict[str, Any]]] = Field(
        default_factory=list,
        description="Field schema: names or {name, isStoragePointer, fields} descriptors",
    )


class StoredDocument(BaseModel):
    ok: bool = True
    key: str
    uri: str
