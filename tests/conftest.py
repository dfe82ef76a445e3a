from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure local "src/" takes precedence over any globally-installed "offchain" package.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

src_str = str(SRC)
if src_str not in sys.path:
    sys.path.insert(0, src_str)


@pytest.fixture(autouse=True)
def _clean_offchain_env(monkeypatch):
    for name in [
        "OFFCHAIN_ACCESSORS_PATH",
        "OFFCHAIN_IN_MEMORY_SCHEMES",
        "OFFCHAIN_IPFS_ENABLED",
        "OFFCHAIN_HTTP_ENABLED",
        "OFFCHAIN_HTTP_ALLOW_PLAINTEXT",
        "OFFCHAIN_MAX_DEPTH",
        "OFFCHAIN_PUBLIC_BASE_URL",
        "OFFCHAIN_MODE",
    ]:
        monkeypatch.delenv(name, raising=False)
