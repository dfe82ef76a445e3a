from __future__ import annotations

import re
from typing import Optional

from offchain.errors import UnsupportedSchemeError

_SCHEME_RE = re.compile(r"^(\w+)://", re.IGNORECASE)


def detect_scheme(locator: str) -> Optional[str]:
    """Return the lowercased scheme of ``locator``, e.g. ``json`` for ``json://abc``."""
    m = _SCHEME_RE.match(locator or "")
    if not m:
        return None
    return m.group(1).lower()


def locator_body(locator: str) -> str:
    m = _SCHEME_RE.match(locator or "")
    if not m:
        raise UnsupportedSchemeError(None, locator or "")
    return locator[m.end():]


def make_locator(scheme: str, body: str) -> str:
    s = (scheme or "").strip().lower()
    if not s or not re.fullmatch(r"\w+", s):
        raise UnsupportedSchemeError(None, f"{scheme}://{body}")
    return f"{s}://{body}"
