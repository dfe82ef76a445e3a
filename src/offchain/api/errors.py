from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from offchain.errors import (
    DownloadError,
    InvalidReferenceError,
    OffChainError,
    SchemaError,
    UnsupportedSchemeError,
    UpdateError,
    UploadError,
)


@dataclass(frozen=True, slots=True)
class ApiError(Exception):
    status_code: int
    code: str
    message: str
    details: Dict[str, Any]

    @staticmethod
    def bad_request(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(400, code, message, details or {})

    @staticmethod
    def not_found(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(404, code, message, details or {})

    @staticmethod
    def bad_gateway(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(502, code, message, details or {})

    @staticmethod
    def internal(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(500, code, message, details or {})

    @staticmethod
    def from_offchain(err: OffChainError) -> "ApiError":
        details = err.details if isinstance(err.details, dict) else ({} if err.details is None else {"info": err.details})
        if isinstance(err, (UnsupportedSchemeError, SchemaError, InvalidReferenceError)):
            return ApiError(400, err.code, err.reason, details)
        if err.code == "not_found":
            return ApiError(404, err.code, err.reason, details)
        if isinstance(err, (DownloadError, UploadError, UpdateError)):
            return ApiError(502, err.code, err.reason, details)
        return ApiError(500, err.code, err.reason, details)


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"ok": False, "error": {"code": exc.code, "message": exc.message, "details": exc.details}},
    )


async def offchain_error_handler(request: Request, exc: OffChainError) -> JSONResponse:
    return await api_error_handler(request, ApiError.from_offchain(exc))
