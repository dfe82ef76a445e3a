from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(eq=False)
class OffChainError(Exception):
    """Canonical error type for off-chain resolution and storage failures."""

    code: str
    reason: str
    details: Any | None = None

    def __str__(self) -> str:
        if self.details is None:
            return f"{self.code}:{self.reason}"
        return f"{self.code}:{self.reason}:{self.details}"


class UnsupportedSchemeError(OffChainError):
    """Locator has no scheme, or no accessor is registered for it."""

    def __init__(self, scheme: Optional[str], locator: str = "") -> None:
        if scheme:
            reason = f"unsupported data storage type: {scheme}"
        else:
            reason = f"no scheme detected in {locator!r}"
        super().__init__("unsupported_scheme", reason, None)
        self.scheme = scheme
        self.locator = locator


class DownloadError(OffChainError):
    pass


class UploadError(OffChainError):
    pass


class UpdateError(OffChainError):
    pass


class InvalidReferenceError(OffChainError):
    pass


class SchemaError(OffChainError):
    pass


class ConfigError(OffChainError):
    pass
